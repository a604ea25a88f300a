from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import anyio
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from loguru import logger

from app.core.evidence import (
    EvidenceClient,
    EvidenceCredentials,
    EvidenceError,
    EvidenceFetchError,
    TokenCache,
    UnrecognizedShapeError,
)


router = APIRouter(prefix="/api/evidence")

_SOURCE = "evidence.com"
_HINT = (
    "Verify your Evidence.com API credentials and endpoints. "
    "Check server logs for detailed error messages."
)


def get_evidence_client(request: Request) -> EvidenceClient:
    """
    Build a client bound to the process-wide token cache created at startup.
    """
    cache: TokenCache = request.app.state.token_cache
    return EvidenceClient(EvidenceCredentials.from_config(), cache)


def _demo_videos() -> list[dict[str, Any]]:
    now = datetime.now(timezone.utc)
    samples = [
        ("demo-001", "Officer Patrol - Downtown District", 1847, 524288000, "J. Smith", "Routine Patrol"),
        ("demo-002", "Traffic Stop - Highway 101", 623, 178257920, "M. Johnson", "Traffic Stop"),
        ("demo-003", "Incident Response - Main St", 2156, 617086976, "R. Davis", "Incident Response"),
    ]
    return [
        {
            "id": vid,
            "title": title,
            "url": f"https://example.com/video{idx + 1}.mp4",
            "thumbnailUrl": None,
            "duration": duration,
            "size": size,
            "uploadDate": (now - timedelta(days=idx)).isoformat(),
            "category": "bwc",
            "metadata": {"type": "body-worn-camera", "officer": officer, "incident": incident},
        }
        for idx, (vid, title, duration, size, officer, incident) in enumerate(samples)
    ]


def _error_response(client: EvidenceClient, exc: EvidenceError) -> JSONResponse:
    status = 502 if isinstance(exc, UnrecognizedShapeError) else 500
    payload: dict[str, Any] = {
        "success": False,
        "error": str(exc),
        "hint": _HINT,
        "config": client.credentials.config_summary(),
    }
    if isinstance(exc, EvidenceFetchError):
        payload["attempts"] = len(exc.attempts)
    return JSONResponse(payload, status_code=status)


@router.get("/videos")
async def list_evidence_videos(
    demo: bool = False, client: EvidenceClient = Depends(get_evidence_client)
):
    """
    List body-worn-camera videos from the evidence API (or sample data in demo mode).
    """
    if demo:
        videos = _demo_videos()
        return {
            "success": True,
            "demo": True,
            "videos": videos,
            "source": f"{_SOURCE} (demo)",
            "count": len(videos),
        }
    try:
        listing = await anyio.to_thread.run_sync(client.list_videos)
    except EvidenceError as exc:
        logger.error("Error fetching evidence videos: {}", exc)
        return _error_response(client, exc)
    return {
        "success": True,
        "videos": [v.model_dump(by_alias=True) for v in listing.videos],
        "source": _SOURCE,
        "count": len(listing.videos),
        "endpoint": listing.endpoint,
        "authMethod": listing.auth_method,
    }


@router.get("/test-auth")
async def test_evidence_auth(client: EvidenceClient = Depends(get_evidence_client)):
    """
    Check OAuth2 credentials against the evidence API without returning the token.
    """
    missing = client.credentials.missing()
    if missing:
        summary = client.credentials.config_summary()
        return JSONResponse(
            {
                "error": "Missing credentials",
                "hasClientId": summary["hasClientId"],
                "hasSecret": summary["hasSecret"],
                "hasPartnerId": summary["hasPartnerId"],
            },
            status_code=400,
        )
    outcome = await anyio.to_thread.run_sync(client.test_auth)
    if outcome.success:
        return {
            "success": True,
            "message": "Authentication successful",
            "hasToken": outcome.has_token,
            "tokenType": outcome.token_type,
            "expiresIn": outcome.expires_in,
            "scope": outcome.scope,
        }
    return JSONResponse(
        {
            "success": False,
            "error": outcome.error,
            "status": outcome.status,
            "responseText": outcome.response_text,
            "endpoint": outcome.endpoint,
        },
        status_code=outcome.status if outcome.status and outcome.status >= 400 else 500,
    )


@router.get("/{evidence_id}")
async def get_evidence_item(
    evidence_id: str, client: EvidenceClient = Depends(get_evidence_client)
):
    """
    Fetch one evidence item and its files.
    """
    evidence_id = evidence_id.strip()
    if not evidence_id:
        return JSONResponse({"error": "Evidence ID is required"}, status_code=400)
    logger.info("Fetching evidence {}", evidence_id)
    try:
        lookup = await anyio.to_thread.run_sync(client.get_evidence, evidence_id)
    except EvidenceError as exc:
        logger.error("Error fetching evidence {}: {}", evidence_id, exc)
        return _error_response(client, exc)
    if lookup.evidence is None:
        return {
            "success": True,
            "evidence": None,
            "message": "Evidence found but no files available",
            "files": [],
            "source": _SOURCE,
            "endpoint": lookup.endpoint,
        }
    return {
        "success": True,
        "evidence": lookup.evidence.model_dump(by_alias=True),
        "files": lookup.files,
        "source": _SOURCE,
        "endpoint": lookup.endpoint,
        "authMethod": lookup.auth_method,
    }
