import anyio
import httpx

from app.core.video_proxy.types import CallerHeaders, ResourceKind
from app.core.video_proxy.upstream import (
    build_upstream_headers,
    streaming_body,
    timeout_for,
)

PAYLOAD = b"0123456789" * 10


async def _open(payload: bytes):
    transport = httpx.MockTransport(lambda request: httpx.Response(200, content=payload))
    client = httpx.AsyncClient(transport=transport)
    response = await client.send(client.build_request("GET", "https://cdn/seg.ts"), stream=True)
    return response, client


def test_streaming_body_yields_bounded_chunks_and_closes():
    async def _run():
        response, client = await _open(PAYLOAD)
        chunks = [c async for c in streaming_body(response, client, chunk_size=16)]
        return chunks, response, client

    chunks, response, client = anyio.run(_run)

    assert b"".join(chunks) == PAYLOAD
    assert max(len(c) for c in chunks) <= 16
    assert len(chunks) > 1
    assert response.is_closed
    assert client.is_closed


def test_aborted_stream_releases_upstream():
    async def _run():
        response, client = await _open(PAYLOAD)
        gen = streaming_body(response, client, chunk_size=8)
        first = await gen.__anext__()
        # Simulates the server cancelling the body after the player went away.
        await gen.aclose()
        return first, response, client

    first, response, client = anyio.run(_run)

    assert first == PAYLOAD[:8]
    assert response.is_closed
    assert client.is_closed


def test_upstream_headers_apply_defaults():
    headers = build_upstream_headers("k", CallerHeaders())

    assert headers == {"x-api-key": "k", "User-Agent": "Mozilla/5.0"}


def test_upstream_headers_forward_caller_values():
    headers = build_upstream_headers(
        "k", CallerHeaders(referer="http://app/", user_agent="UA", range="bytes=0-1")
    )

    assert headers["Referer"] == "http://app/"
    assert headers["User-Agent"] == "UA"
    assert headers["Range"] == "bytes=0-1"


def test_segment_timeout_is_longer_than_manifest_timeout():
    segment = timeout_for(ResourceKind.SEGMENT)
    manifest = timeout_for(ResourceKind.MANIFEST)

    assert segment.read > manifest.read
    assert manifest.connect <= manifest.read
