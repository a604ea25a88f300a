from contextlib import asynccontextmanager

from fastapi import FastAPI
from loguru import logger

from app._version import __version__
from app.api.evidence import router as evidence_router
from app.api.twelvelabs import router as twelvelabs_router
from app.api.video_proxy import router as video_proxy_router
from app.config import (
    CORS_ALLOW_CREDENTIALS,
    CORS_ORIGINS,
    EVIDENCE_TOKEN_REFRESH_MARGIN_SECONDS,
)
from app.core.evidence import TokenCache
from app.cors import apply_cors_middleware


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Application startup (version {__version__}).")
    app.state.token_cache = TokenCache(EVIDENCE_TOKEN_REFRESH_MARGIN_SECONDS)
    yield
    app.state.token_cache.clear()
    logger.info("Application shutdown.")


app = FastAPI(title="Video Insights Gateway", version=__version__, lifespan=lifespan)
apply_cors_middleware(app, origins=CORS_ORIGINS, allow_credentials=CORS_ALLOW_CREDENTIALS)
app.include_router(video_proxy_router)  # HLS proxy
app.include_router(evidence_router)  # Evidence API
app.include_router(twelvelabs_router)  # Video AI API


# Healthcheck endpoint for CI/CD and monitoring
@app.get("/health")
async def healthcheck():
    return {"status": "ok"}


if __name__ == "__main__":
    from app.cli import run_server

    logger.info("Starting Video Insights Gateway server...")
    run_server(app)
