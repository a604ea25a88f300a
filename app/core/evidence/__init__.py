from .token_cache import AccessToken, TokenCache
from .strategies import (
    AttemptErr,
    AttemptOk,
    AuthStrategy,
    EvidenceCredentials,
    auth_strategies,
    base_urls,
    token_endpoints,
)
from .decoder import (
    DecodedCollection,
    EvidenceItem,
    EvidenceVideo,
    decode_collection,
    normalize_evidence,
    normalize_video,
)
from .errors import (
    EvidenceConfigError,
    EvidenceError,
    EvidenceFetchError,
    UnrecognizedShapeError,
)
from .client import EvidenceClient, EvidenceLookup, AuthCheck, VideoListing


__all__ = [
    "AccessToken",
    "TokenCache",
    "AttemptErr",
    "AttemptOk",
    "AuthStrategy",
    "EvidenceCredentials",
    "auth_strategies",
    "base_urls",
    "token_endpoints",
    "DecodedCollection",
    "EvidenceItem",
    "EvidenceVideo",
    "decode_collection",
    "normalize_evidence",
    "normalize_video",
    "EvidenceConfigError",
    "EvidenceError",
    "EvidenceFetchError",
    "UnrecognizedShapeError",
    "EvidenceClient",
    "EvidenceLookup",
    "AuthCheck",
    "VideoListing",
]
