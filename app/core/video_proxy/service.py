from __future__ import annotations

from typing import Any

import httpx
from loguru import logger

from app.config import (
    VIDEO_PROXY_ALLOWED_DOMAINS,
    VIDEO_PROXY_CACHE_MAX_AGE,
    get_video_api_key,
)
from app.utils.logger import truncate
from . import upstream
from .errors import ApiKeyMissingError, InvalidUrlError, MissingUrlError, VideoProxyError
from .hls import build_error_manifest, rewrite_manifest
from .types import (
    BytesBody,
    CallerHeaders,
    JsonBody,
    ProxyResponse,
    ResourceKind,
    StreamBody,
    TextBody,
)
from .urls import classify_resource, is_allowed_url, normalize_stream_url

HLS_CONTENT_TYPE = "application/vnd.apple.mpegurl"
SEGMENT_CONTENT_TYPE = "video/mp2t"
_FALLBACK_CONTENT_TYPE = "application/octet-stream"
_LOG_BODY_LIMIT = 500
_CLIENT_DETAIL_LIMIT = 200
_SEGMENT_PASSTHROUGH_HEADERS = ("content-range", "accept-ranges")


def cors_headers() -> dict[str, str]:
    return {
        "Access-Control-Allow-Origin": "*",
        "Access-Control-Allow-Methods": "GET, OPTIONS",
        "Access-Control-Allow-Headers": "Range, Content-Type",
    }


def media_headers() -> dict[str, str]:
    """
    Headers for every media response (success or error playlist).

    Published manifests and segments never change, so browsers may cache them.
    """
    headers = cors_headers()
    headers["Cache-Control"] = f"public, max-age={VIDEO_PROXY_CACHE_MAX_AGE}"
    return headers


def _json_response(status_code: int, payload: dict[str, Any]) -> ProxyResponse:
    return ProxyResponse(
        status_code=status_code,
        content_type="application/json",
        body=JsonBody(payload),
        headers=cors_headers(),
    )


def _manifest_response(status_code: int, text: str) -> ProxyResponse:
    return ProxyResponse(
        status_code=status_code,
        content_type=HLS_CONTENT_TYPE,
        body=TextBody(text),
        headers=media_headers(),
    )


def resolve_target(raw_url: str | None) -> tuple[str, ResourceKind]:
    """
    Validate a caller-supplied (already percent-decoded) target URL.

    Returns:
        tuple[str, ResourceKind]: The normalized fetch URL and its resource kind.

    Raises:
        MissingUrlError: If `raw_url` is absent or blank.
        InvalidUrlError: If the URL does not contain an allowlisted domain.
    """
    url = (raw_url or "").strip()
    if not url:
        raise MissingUrlError()
    if not is_allowed_url(url, VIDEO_PROXY_ALLOWED_DOMAINS):
        logger.warning("Rejected video proxy target outside allowlist: {}", truncate(url))
        raise InvalidUrlError()
    normalized = normalize_stream_url(url)
    return normalized, classify_resource(normalized)


def _require_api_key() -> str:
    api_key = get_video_api_key()
    if not api_key:
        logger.error("TWELVELABS_API_KEY is not set; refusing to proxy.")
        raise ApiKeyMissingError()
    return api_key


def _transport_error(kind: ResourceKind, url: str, exc: Exception) -> ProxyResponse:
    message = str(exc) or exc.__class__.__name__
    logger.error(
        "Video proxy transport failure kind={} url={}: {}",
        kind.value,
        truncate(url),
        message,
    )
    if kind is ResourceKind.MANIFEST:
        logger.debug("Branch: error manifest (transport)")
        return _manifest_response(500, build_error_manifest("Network Error", message))
    logger.debug("Branch: JSON error (transport)")
    return _json_response(500, {"error": f"Failed to fetch video: {message}"})


def _upstream_error(
    kind: ResourceKind, url: str, response: httpx.Response, error_text: str
) -> ProxyResponse:
    status = response.status_code
    reason = response.reason_phrase or ""
    logger.warning(
        "Video proxy upstream error status={} reason={} kind={} url={} body={}",
        status,
        reason,
        kind.value,
        truncate(url),
        error_text[:_LOG_BODY_LIMIT],
    )
    if kind is ResourceKind.MANIFEST:
        logger.debug("Branch: error manifest (status {})", status)
        return _manifest_response(
            status,
            build_error_manifest(f"{status} {reason}", error_text[:_CLIENT_DETAIL_LIMIT]),
        )
    logger.debug("Branch: JSON error (status {})", status)
    return _json_response(
        status,
        {
            "error": f"Failed to fetch video: {reason}",
            "details": error_text[:_CLIENT_DETAIL_LIMIT],
        },
    )


def effective_content_type(kind: ResourceKind, upstream_type: str | None) -> str:
    if kind is ResourceKind.MANIFEST:
        return HLS_CONTENT_TYPE
    if kind is ResourceKind.SEGMENT:
        return SEGMENT_CONTENT_TYPE
    return upstream_type or _FALLBACK_CONTENT_TYPE


def _segment_headers(response: httpx.Response) -> dict[str, str]:
    headers = media_headers()
    for name in _SEGMENT_PASSTHROUGH_HEADERS:
        value = response.headers.get(name)
        if value:
            headers[name.title()] = value
    # aiter_bytes decodes Content-Encoding, so the upstream length only holds for identity bodies.
    length = response.headers.get("content-length")
    if length and not response.headers.get("content-encoding"):
        headers["Content-Length"] = length
    return headers


async def get_media(raw_url: str | None, caller: CallerHeaders) -> ProxyResponse:
    """
    Fetch a media URL from the upstream host on behalf of a browser player.

    Runs validate, classify, fetch, then either the error branch or the
    success branch (manifest rewrite, segment streaming, other passthrough).
    Every path returns a shaped `ProxyResponse`.

    Parameters:
        raw_url (str | None): Value of the `url` query parameter, already percent-decoded.
        caller (CallerHeaders): Browser headers to forward upstream.

    Returns:
        ProxyResponse: Status, content type, body and headers for the caller.
    """
    try:
        target_url, kind = resolve_target(raw_url)
        api_key = _require_api_key()
    except VideoProxyError as exc:
        return _json_response(exc.status_code, {"error": exc.message})

    logger.info("Video proxy request kind={} url={}", kind.value, truncate(target_url))
    headers = upstream.build_upstream_headers(api_key, caller)

    try:
        response, client = await upstream.open_upstream(
            target_url, kind=kind, headers=headers
        )
    except httpx.RequestError as exc:
        return _transport_error(kind, target_url, exc)

    if not response.is_success:
        try:
            raw_error = await upstream.read_and_close(response, client)
            error_text = raw_error.decode(response.encoding or "utf-8", errors="replace")
        except httpx.HTTPError as exc:
            logger.debug("Could not read upstream error body: {}", exc)
            error_text = ""
        return _upstream_error(kind, target_url, response, error_text)

    content_type = effective_content_type(kind, response.headers.get("content-type"))

    if kind is ResourceKind.SEGMENT:
        logger.debug(
            "Branch: segment passthrough (status={}) {}",
            response.status_code,
            truncate(target_url),
        )
        return ProxyResponse(
            status_code=response.status_code,
            content_type=content_type,
            body=StreamBody(upstream.streaming_body(response, client)),
            headers=_segment_headers(response),
        )

    try:
        body = await upstream.read_and_close(response, client)
    except httpx.HTTPError as exc:
        return _transport_error(kind, target_url, exc)

    if kind is ResourceKind.MANIFEST:
        playlist_text = body.decode(response.encoding or "utf-8", errors="replace")
        rewritten = rewrite_manifest(playlist_text, manifest_url=target_url)
        logger.success("Rewrote HLS manifest ({} bytes)", len(rewritten))
        return _manifest_response(200, rewritten)

    logger.debug("Branch: buffered passthrough ({} bytes)", len(body))
    return ProxyResponse(
        status_code=200,
        content_type=content_type,
        body=BytesBody(body),
        headers=media_headers(),
    )
