from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from loguru import logger

from .client import TwelveLabsClient
from .errors import InvalidAnalysisTypeError


@dataclass(frozen=True)
class AnalysisKind:
    """How one dashboard analysis type maps onto the generation endpoints."""

    endpoint: str
    value: str


ANALYSIS_TYPES: dict[str, AnalysisKind] = {
    "summary": AnalysisKind("summarize", "summary"),
    "chapters": AnalysisKind("summarize", "chapter"),
    "highlights": AnalysisKind("summarize", "highlight"),
    "topics": AnalysisKind("gist", "topic"),
    "hashtags": AnalysisKind("gist", "hashtag"),
    "title": AnalysisKind("gist", "title"),
}


def run_analysis(
    client: TwelveLabsClient, video_id: str, analysis_type: str
) -> dict[str, Any]:
    """
    Generate one analysis for a video.

    Raises:
        InvalidAnalysisTypeError: If `analysis_type` is not a key of ANALYSIS_TYPES.
        TwelveLabsError: If the generation call fails.
    """
    kind = ANALYSIS_TYPES.get(analysis_type)
    if kind is None:
        raise InvalidAnalysisTypeError(analysis_type)
    logger.info("Generating {} for video {}", analysis_type, video_id)
    if kind.endpoint == "summarize":
        return client.summarize(video_id, kind.value)
    return client.gist(video_id, [kind.value])
