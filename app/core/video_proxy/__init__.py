from .types import (
    BytesBody,
    CallerHeaders,
    JsonBody,
    ProxyResponse,
    ResourceKind,
    StreamBody,
    TextBody,
)
from .urls import (
    build_proxy_url,
    classify_resource,
    is_allowed_url,
    normalize_stream_url,
)
from .hls import build_error_manifest, rewrite_manifest
from .service import cors_headers, get_media


__all__ = [
    "BytesBody",
    "CallerHeaders",
    "JsonBody",
    "ProxyResponse",
    "ResourceKind",
    "StreamBody",
    "TextBody",
    "build_proxy_url",
    "classify_resource",
    "is_allowed_url",
    "normalize_stream_url",
    "build_error_manifest",
    "rewrite_manifest",
    "cors_headers",
    "get_media",
]
