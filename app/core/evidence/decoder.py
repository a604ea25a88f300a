from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Any, Iterable, Optional

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from .errors import UnrecognizedShapeError

# Known collection envelopes, in priority order.
_COLLECTION_KEYS = ("items", "media", "files", "data", "results")
_NANOSECONDS_PER_SECOND = 1_000_000_000


@dataclass(frozen=True)
class DecodedCollection:
    """A payload matched against one known schema."""

    schema: str
    records: list[dict[str, Any]]


class EvidenceVideo(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    title: str = "Untitled Video"
    url: Optional[str] = None
    thumbnail_url: Optional[str] = Field(default=None, alias="thumbnailUrl")
    duration: Optional[float] = None
    size: Optional[int] = None
    upload_date: Optional[str] = Field(default=None, alias="uploadDate")
    category: str = "bwc"
    metadata: dict[str, Any] = Field(default_factory=dict)


class EvidenceItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    file_id: Optional[str] = Field(default=None, alias="fileId")
    title: str = "Untitled Evidence"
    file_name: Optional[str] = Field(default=None, alias="fileName")
    file_type: Optional[str] = Field(default=None, alias="fileType")
    content_type: Optional[str] = Field(default=None, alias="contentType")
    url: Optional[str] = None
    thumbnail_url: Optional[str] = Field(default=None, alias="thumbnailUrl")
    duration: Optional[float] = None
    size: Optional[int] = None
    recorded_on: Optional[str] = Field(default=None, alias="recordedOn")
    upload_date: Optional[str] = Field(default=None, alias="uploadDate")
    status: Optional[str] = None
    category: str = "bwc"
    metadata: dict[str, Any] = Field(default_factory=dict)
    all_files: list[dict[str, Any]] = Field(default_factory=list, alias="allFiles")


def decode_collection(payload: Any, keys: Iterable[str] = _COLLECTION_KEYS) -> DecodedCollection:
    """
    Match a JSON payload against the known collection schemas.

    A bare list, or an object whose first known envelope key holds a list,
    decodes; an empty list is a valid "no data" answer.

    Raises:
        UnrecognizedShapeError: If no schema matches.
    """
    if isinstance(payload, list):
        return DecodedCollection(schema="list", records=_records(payload))
    if isinstance(payload, dict):
        for key in keys:
            value = payload.get(key)
            if isinstance(value, list):
                logger.debug("Decoded evidence payload as '{}' ({} records)", key, len(value))
                return DecodedCollection(schema=key, records=_records(value))
        raise UnrecognizedShapeError(sorted(str(k) for k in payload.keys()))
    raise UnrecognizedShapeError([])


def _records(values: list[Any]) -> list[dict[str, Any]]:
    return [v for v in values if isinstance(v, dict)]


def _first(record: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = record.get(key)
        if value not in (None, ""):
            return value
    return None


def _as_str(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def _as_number(value: Any) -> Optional[float]:
    try:
        number = float(value) if value is not None else None
    except (TypeError, ValueError):
        return None
    # JSON responses cannot carry inf or nan.
    return number if number is not None and math.isfinite(number) else None


def _as_int(value: Any) -> Optional[int]:
    number = _as_number(value)
    return int(number) if number is not None else None


def normalize_video(record: dict[str, Any]) -> EvidenceVideo:
    return EvidenceVideo(
        id=_as_str(_first(record, "id", "file_id", "media_id", "evidence_id")),
        title=_as_str(_first(record, "title", "filename", "name", "description"))
        or "Untitled Video",
        url=_as_str(_first(record, "url", "download_url", "media_url", "file_url")),
        thumbnail_url=_as_str(_first(record, "thumbnail_url", "thumbnail", "preview_url")),
        duration=_as_number(_first(record, "duration", "length", "duration_seconds")),
        size=_as_int(_first(record, "size", "file_size", "size_bytes")),
        upload_date=_as_str(
            _first(record, "created_at", "upload_date", "date_created", "created")
        ),
        metadata=record,
    )


def normalize_evidence(evidence_id: str, files: list[dict[str, Any]]) -> EvidenceItem:
    """
    Build an evidence item from its file list, preferring the master copy.

    Durations arrive in nanoseconds and are converted to seconds.
    """
    if not files:
        raise ValueError("evidence has no files")
    master = next((f for f in files if f.get("fileType") == "master_copy"), files[0])
    raw_duration = _as_number(master.get("duration"))
    return EvidenceItem(
        id=evidence_id,
        file_id=_as_str(master.get("fileId")),
        title=_as_str(_first(master, "displayName", "fileName")) or "Untitled Evidence",
        file_name=_as_str(master.get("fileName")),
        file_type=_as_str(master.get("fileType")),
        content_type=_as_str(master.get("contentType")),
        url=_as_str(_first(master, "downloadUrl", "url")),
        duration=raw_duration / _NANOSECONDS_PER_SECOND if raw_duration else None,
        size=_as_int(master.get("size")),
        recorded_on=_as_str(master.get("recordedOn")),
        upload_date=_as_str(_first(master, "recordedOn", "originalRecordedOn")),
        status=_as_str(master.get("status")),
        metadata=master,
        all_files=files,
    )
