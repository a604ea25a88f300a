from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, AsyncIterator, Union


class ResourceKind(str, Enum):
    """
    What a proxied URL points at, derived from its path alone.
    """

    MANIFEST = "manifest"
    SEGMENT = "segment"
    OTHER = "other"


@dataclass(frozen=True)
class CallerHeaders:
    """
    Browser request headers forwarded to the upstream host (best effort).
    """

    referer: str | None = None
    user_agent: str | None = None
    range: str | None = None


@dataclass(frozen=True)
class TextBody:
    text: str


@dataclass(frozen=True)
class BytesBody:
    content: bytes


@dataclass(frozen=True)
class JsonBody:
    payload: dict[str, Any]


@dataclass(frozen=True)
class StreamBody:
    chunks: AsyncIterator[bytes]


Body = Union[TextBody, BytesBody, JsonBody, StreamBody]


@dataclass
class ProxyResponse:
    """
    Shaped result of a proxy call, converted to an HTTP response by the router.
    """

    status_code: int
    content_type: str
    body: Body
    headers: dict[str, str] = field(default_factory=dict)
