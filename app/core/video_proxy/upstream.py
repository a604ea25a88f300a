from __future__ import annotations

from typing import AsyncIterator, Mapping

import httpx
from loguru import logger

from app.config import (
    VIDEO_PROXY_CHUNK_SIZE,
    VIDEO_PROXY_CONNECT_TIMEOUT_SECONDS,
    VIDEO_PROXY_MANIFEST_TIMEOUT_SECONDS,
    VIDEO_PROXY_SEGMENT_TIMEOUT_SECONDS,
)
from .types import CallerHeaders, ResourceKind

_DEFAULT_USER_AGENT = "Mozilla/5.0"
_API_KEY_HEADER = "x-api-key"


def timeout_for(kind: ResourceKind) -> httpx.Timeout:
    """
    Pick the upstream timeout for a resource kind.

    Segment bodies get the longer read budget; manifests and other small
    documents use the manifest budget.
    """
    total = (
        VIDEO_PROXY_SEGMENT_TIMEOUT_SECONDS
        if kind is ResourceKind.SEGMENT
        else VIDEO_PROXY_MANIFEST_TIMEOUT_SECONDS
    )
    return httpx.Timeout(total, connect=min(VIDEO_PROXY_CONNECT_TIMEOUT_SECONDS, total))


def _build_async_client(timeout: httpx.Timeout) -> httpx.AsyncClient:
    """
    Build an AsyncClient for upstream fetches without env proxies.
    """
    logger.trace("Building upstream AsyncClient")
    return httpx.AsyncClient(
        timeout=timeout,
        follow_redirects=True,
        trust_env=False,
    )


def build_upstream_headers(api_key: str, caller: CallerHeaders) -> dict[str, str]:
    """
    Build upstream request headers: the API key plus forwarded browser headers.
    """
    headers: dict[str, str] = {
        _API_KEY_HEADER: api_key,
        "User-Agent": caller.user_agent or _DEFAULT_USER_AGENT,
    }
    if caller.referer:
        headers["Referer"] = caller.referer
    if caller.range:
        headers["Range"] = caller.range
    return headers


async def open_upstream(
    url: str, *, kind: ResourceKind, headers: Mapping[str, str]
) -> tuple[httpx.Response, httpx.AsyncClient]:
    """
    Open an upstream GET in streaming mode and return the response + client.

    Raises:
        httpx.RequestError: On DNS, connection or timeout failures; the client is closed first.
    """
    logger.trace("Opening upstream GET {}", url[:150])
    client = _build_async_client(timeout_for(kind))
    request = client.build_request("GET", url, headers=headers)
    try:
        response = await client.send(request, stream=True)
    except httpx.RequestError:
        await client.aclose()
        raise
    return response, client


async def read_and_close(response: httpx.Response, client: httpx.AsyncClient) -> bytes:
    """
    Buffer the full upstream body, then release the response and client.
    """
    try:
        return await response.aread()
    finally:
        await response.aclose()
        await client.aclose()


def streaming_body(
    response: httpx.Response,
    client: httpx.AsyncClient,
    *,
    chunk_size: int = VIDEO_PROXY_CHUNK_SIZE,
) -> AsyncIterator[bytes]:
    """
    Create an async generator that streams upstream bytes and closes resources.

    Each chunk is read only after the previous one was handed to the server,
    so memory stays bounded by `chunk_size`. When the client disconnects the
    server cancels the generator and the `finally` block closes the upstream
    connection instead of draining it.
    """
    logger.trace("Streaming body start (status={})", response.status_code)

    async def _gen():
        sent = 0
        try:
            async for chunk in response.aiter_bytes(chunk_size=chunk_size):
                sent += len(chunk)
                yield chunk
        finally:
            await response.aclose()
            await client.aclose()
            logger.trace("Streaming body closed after {} bytes", sent)

    return _gen()
