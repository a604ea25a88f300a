from __future__ import annotations

import time
from typing import Optional

import anyio
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from app.config import get_video_api_key
from app.core.twelvelabs import (
    ANALYSIS_TYPES,
    InvalidAnalysisTypeError,
    TwelveLabsClient,
    TwelveLabsError,
    extract_keywords,
    list_catalog_videos,
    list_index_summaries,
    run_analysis,
)


router = APIRouter(prefix="/api")


class AnalyzeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    video_id: Optional[str] = Field(default=None, alias="videoId")
    analysis_type: Optional[str] = Field(default=None, alias="analysisType")


class SearchOptions(BaseModel):
    search_options: Optional[list[str]] = None
    page_limit: Optional[int] = None
    sort_option: Optional[str] = None


class SearchRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    index_id: Optional[str] = Field(default=None, alias="indexId")
    query: Optional[str] = None
    options: Optional[SearchOptions] = None


def get_twelvelabs_client() -> TwelveLabsClient:
    """
    Build a client with the API key as currently set in the environment.
    """
    return TwelveLabsClient(get_video_api_key())


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


@router.post("/analyze")
async def analyze_video(
    req: AnalyzeRequest, client: TwelveLabsClient = Depends(get_twelvelabs_client)
):
    """
    Generate a summary, chapters, highlights, topics, hashtags or a title for a video.
    """
    if not req.video_id:
        return _error("Video ID is required", 400)
    if req.analysis_type not in ANALYSIS_TYPES:
        return _error(str(InvalidAnalysisTypeError(req.analysis_type)), 400)
    start = time.perf_counter()
    try:
        result = await anyio.to_thread.run_sync(
            run_analysis, client, req.video_id, req.analysis_type
        )
    except TwelveLabsError as exc:
        logger.error("Analysis {} failed for {}: {}", req.analysis_type, req.video_id, exc)
        return _error(str(exc), 500)
    return {
        "result": result,
        "processingTime": _elapsed_ms(start),
        "analysisType": req.analysis_type,
    }


@router.post("/search")
async def search_videos(
    req: SearchRequest, client: TwelveLabsClient = Depends(get_twelvelabs_client)
):
    if not req.index_id or not req.query:
        return _error("Index ID and search query are required", 400)
    options = req.options or SearchOptions()
    start = time.perf_counter()
    try:
        results = await anyio.to_thread.run_sync(
            lambda: client.search(
                req.index_id,
                req.query,
                search_options=options.search_options,
                page_limit=options.page_limit,
                sort_option=options.sort_option,
            )
        )
    except TwelveLabsError as exc:
        logger.error("Search failed for {!r}: {}", req.query, exc)
        return _error(str(exc), 500)
    return {
        "results": results.get("data") or [],
        "pageInfo": results.get("page_info"),
        "processingTime": _elapsed_ms(start),
        "query": req.query,
    }


@router.get("/indexes")
async def list_indexes(client: TwelveLabsClient = Depends(get_twelvelabs_client)):
    try:
        indexes = await anyio.to_thread.run_sync(list_index_summaries, client)
    except TwelveLabsError as exc:
        logger.error("Error fetching indexes: {}", exc)
        return _error(str(exc), 500)
    return {"indexes": indexes}


@router.get("/videos")
async def list_videos(
    indexId: Optional[str] = None,
    client: TwelveLabsClient = Depends(get_twelvelabs_client),
):
    """
    List videos of one index (`?indexId=`) or of every index.
    """
    try:
        videos = await anyio.to_thread.run_sync(list_catalog_videos, client, indexId)
    except TwelveLabsError as exc:
        logger.error("Error fetching videos: {}", exc)
        return _error(str(exc), 500)
    return {"videos": videos}


@router.get("/keywords")
async def list_keywords(
    indexId: Optional[str] = None,
    client: TwelveLabsClient = Depends(get_twelvelabs_client),
):
    """
    Most common topics and hashtags across the first videos of an index.
    """
    if not indexId:
        return _error("Index ID is required", 400)
    try:
        report = await anyio.to_thread.run_sync(extract_keywords, client, indexId)
    except TwelveLabsError as exc:
        logger.error("Error extracting keywords for {}: {}", indexId, exc)
        return _error(str(exc), 500)
    return report.to_payload()
