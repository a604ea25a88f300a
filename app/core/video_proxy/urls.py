from __future__ import annotations

import re
from typing import Iterable
from urllib.parse import quote, urljoin, urlsplit

from loguru import logger

from app.config import VIDEO_PROXY_PATH
from .types import ResourceKind

_STREAM_DIR_RE = re.compile(r"/stream/?$")
_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.\-]*://")
_MANIFEST_SUFFIXES = (".m3u8",)
_SEGMENT_SUFFIXES = (".ts", ".m4s")
# Characters encodeURIComponent leaves alone besides letters, digits and "-_.".
_URI_COMPONENT_SAFE = "!~*'()"


def is_allowed_url(url: str, allowed_domains: Iterable[str]) -> bool:
    """
    Check a decoded target URL against the upstream domain allowlist.

    This is a substring match, not URL parsing; path and query shape are not inspected.
    """
    allowed = any(domain and domain in url for domain in allowed_domains)
    logger.trace("Allowlist check -> {}", allowed)
    return allowed


def normalize_stream_url(url: str) -> str:
    """
    Append `index.m3u8` to bare stream directory URLs.

    `https://host/x/stream` and `https://host/x/stream/` both become
    `https://host/x/stream/index.m3u8`. Any query string is kept.
    """
    parsed = urlsplit(url)
    if not _STREAM_DIR_RE.search(parsed.path):
        return url
    path = _STREAM_DIR_RE.sub("/stream/index.m3u8", parsed.path)
    normalized = parsed._replace(path=path).geturl()
    logger.debug("Appended index.m3u8 to stream URL: {}", normalized[:150])
    return normalized


def classify_resource(url: str) -> ResourceKind:
    """
    Classify a target URL as manifest, segment or other by its path suffix.
    """
    path = urlsplit(url).path.lower()
    # Segments inside a stream directory are still segments.
    if path.endswith(_SEGMENT_SUFFIXES):
        return ResourceKind.SEGMENT
    if (
        path.endswith(_MANIFEST_SUFFIXES)
        or "/stream/" in path
        or path.endswith("/stream")
    ):
        return ResourceKind.MANIFEST
    return ResourceKind.OTHER


def is_segment_reference(line: str) -> bool:
    """Suffix match without regard to case, like `classify_resource`."""
    return line.lower().endswith(_SEGMENT_SUFFIXES)


def is_absolute_url(reference: str) -> bool:
    return bool(_SCHEME_RE.match(reference))


def build_proxy_url(segment_url: str) -> str:
    """
    Build the proxy-relative URL a player uses to fetch `segment_url`.

    The target is percent-encoded the way browsers' `encodeURIComponent` does,
    so encoding the same URL always yields the same query string.
    """
    return f"{VIDEO_PROXY_PATH}?url={quote(segment_url, safe=_URI_COMPONENT_SAFE)}"


def manifest_base(manifest_url: str) -> str:
    """
    Return `scheme://host` plus the manifest path without its final segment.

    Raises:
        ValueError: If the manifest URL has no scheme or host, or an invalid port.
    """
    parsed = urlsplit(manifest_url)
    if not parsed.scheme or not parsed.netloc:
        raise ValueError(f"manifest URL is not absolute: {manifest_url[:150]}")
    # Accessing .port raises ValueError for a malformed port.
    _ = parsed.port
    directory = parsed.path[: parsed.path.rfind("/")] if "/" in parsed.path else ""
    return f"{parsed.scheme}://{parsed.netloc}{directory}"


def resolve_segment_url(reference: str, base: str) -> str:
    """
    Turn a manifest segment reference into an absolute URL.

    Absolute references are returned unchanged; relative ones are resolved
    against the manifest base directory.
    """
    if is_absolute_url(reference):
        return reference
    return urljoin(base + "/", reference)
