from __future__ import annotations

from typing import Any, Optional

from loguru import logger

from .client import TwelveLabsClient

_CATEGORY_BY_TYPE = {
    "bwc": "bwc",
    "body-worn-camera": "bwc",
    "cctv": "cctv",
    "surveillance": "cctv",
    "iphone": "high-quality",
    "dji": "high-quality",
    "consumer": "high-quality",
    "youtube": "youtube",
    "social-media": "youtube",
}


def categorize_video(metadata: Optional[dict[str, Any]]) -> str:
    """Map the free-form `type` metadata field onto a dashboard category."""
    if not metadata:
        return "unknown"
    raw = metadata.get("type")
    if not isinstance(raw, str):
        return "unknown"
    return _CATEGORY_BY_TYPE.get(raw.lower(), "unknown")


def _duration(video: dict[str, Any]) -> float:
    metadata = video.get("metadata") or {}
    value = metadata.get("duration") if isinstance(metadata, dict) else None
    return float(value) if isinstance(value, (int, float)) else 0.0


def describe_video(video: dict[str, Any]) -> dict[str, Any]:
    """Add `category` and the first HLS thumbnail as `thumbnailUrl`."""
    hls = video.get("hls") if isinstance(video.get("hls"), dict) else {}
    thumbnails = hls.get("thumbnail_urls")
    if not isinstance(thumbnails, list):
        thumbnails = []
    metadata = video.get("metadata")
    return {
        **video,
        "category": categorize_video(metadata if isinstance(metadata, dict) else None),
        "thumbnailUrl": thumbnails[0] if thumbnails else None,
    }


def describe_index(index: dict[str, Any], videos: list[dict[str, Any]]) -> dict[str, Any]:
    return {
        "id": index.get("_id"),
        "name": index.get("index_name"),
        "models": index.get("models") or [],
        "videoCount": len(videos),
        "totalDuration": sum(_duration(v) for v in videos),
        "createdAt": index.get("created_at"),
    }


def list_index_summaries(client: TwelveLabsClient) -> list[dict[str, Any]]:
    """
    List every index with its video count and total duration.
    """
    summaries = []
    for index in client.list_indexes():
        index_id = index.get("_id")
        videos = client.list_videos(index_id) if index_id else []
        summaries.append(describe_index(index, videos))
    logger.info("Listed {} indexes", len(summaries))
    return summaries


def list_catalog_videos(
    client: TwelveLabsClient, index_id: Optional[str] = None
) -> list[dict[str, Any]]:
    """
    List videos of one index, or of every index when `index_id` is empty.
    """
    if index_id:
        index_ids = [index_id]
    else:
        index_ids = [i["_id"] for i in client.list_indexes() if i.get("_id")]
    videos = [
        describe_video(video)
        for current in index_ids
        for video in client.list_videos(current)
    ]
    logger.info("Listed {} videos across {} indexes", len(videos), len(index_ids))
    return videos
