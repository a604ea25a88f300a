from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, Response, StreamingResponse

from app.config import VIDEO_PROXY_PATH
from app.core.video_proxy import (
    BytesBody,
    CallerHeaders,
    JsonBody,
    ProxyResponse,
    StreamBody,
    TextBody,
    cors_headers,
    get_media,
)


router = APIRouter()


def _to_response(result: ProxyResponse) -> Response:
    """
    Render a ProxyResponse as a Starlette response.
    """
    body = result.body
    if isinstance(body, StreamBody):
        return StreamingResponse(
            body.chunks,
            status_code=result.status_code,
            media_type=result.content_type,
            headers=result.headers,
        )
    if isinstance(body, JsonBody):
        return JSONResponse(
            content=body.payload,
            status_code=result.status_code,
            headers=result.headers,
        )
    if isinstance(body, TextBody):
        content = body.text.encode("utf-8")
    elif isinstance(body, BytesBody):
        content = body.content
    else:
        raise TypeError(f"Unsupported proxy body: {type(body).__name__}")
    return Response(
        content=content,
        status_code=result.status_code,
        media_type=result.content_type,
        headers=result.headers,
    )


@router.get(VIDEO_PROXY_PATH)
async def video_proxy(request: Request):
    """
    Proxy HLS manifests and segments from the authenticated upstream host.
    """
    caller = CallerHeaders(
        referer=request.headers.get("referer"),
        user_agent=request.headers.get("user-agent"),
        range=request.headers.get("range"),
    )
    result = await get_media(request.query_params.get("url"), caller)
    return _to_response(result)


@router.options(VIDEO_PROXY_PATH)
async def video_proxy_preflight():
    return Response(status_code=204, headers=cors_headers())
