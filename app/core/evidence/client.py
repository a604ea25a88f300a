from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional
from urllib.parse import urlencode

import requests
from loguru import logger

from app.config import EVIDENCE_DEFAULT_TOKEN_TTL_SECONDS
from app.utils import http_client
from .decoder import (
    EvidenceItem,
    EvidenceVideo,
    decode_collection,
    normalize_evidence,
    normalize_video,
)
from .errors import EvidenceConfigError, EvidenceFetchError
from .strategies import (
    AttemptErr,
    AttemptOk,
    AttemptResult,
    AuthStrategy,
    EvidenceCredentials,
    TokenEndpoint,
    auth_strategies,
    base_urls,
    token_endpoints,
)
from .token_cache import TokenCache

_ERROR_TEXT_LIMIT = 500
_TOKEN_REJECTED_STATUSES = (401, 403)

# Listing endpoints, in the order they are tried on every base URL.
VIDEO_LIST_ENDPOINTS = (
    "/api/v2/media",
    "/api/v2/files",
    "/api/v2/evidence",
    "/api/v1/media",
    "/api/v1/files",
    "/api/v2/videos",
)


@dataclass
class VideoListing:
    videos: list[EvidenceVideo]
    endpoint: str
    auth_method: str
    schema: str


@dataclass
class EvidenceLookup:
    evidence: Optional[EvidenceItem]
    files: list[dict[str, Any]]
    endpoint: str
    auth_method: str


@dataclass
class AuthCheck:
    success: bool
    endpoint: str
    status: Optional[int] = None
    has_token: bool = False
    token_type: Optional[str] = None
    expires_in: Optional[int] = None
    scope: Optional[str] = None
    response_text: str = ""
    error: Optional[str] = None


def _is_json(response: requests.Response) -> bool:
    return "application/json" in (response.headers.get("content-type") or "").lower()


class EvidenceClient:
    """Client for the evidence-management API.

    Tries a fixed, ordered set of base URL and auth-header combinations and
    stops at the first one that answers with JSON.
    """

    def __init__(
        self,
        credentials: EvidenceCredentials,
        token_cache: TokenCache,
        *,
        http_get: Callable[..., requests.Response] = http_client.get,
        http_post: Callable[..., requests.Response] = http_client.post,
    ) -> None:
        self._creds = credentials
        self._cache = token_cache
        self._get = http_get
        self._post = http_post

    @property
    def credentials(self) -> EvidenceCredentials:
        return self._creds

    def _require_credentials(self) -> None:
        missing = self._creds.missing()
        if missing:
            logger.error("Evidence credentials missing: {}", ", ".join(missing))
            raise EvidenceConfigError(missing)

    # --- OAuth ---

    def _request_token(self, endpoint: TokenEndpoint) -> AttemptResult:
        label = f"oauth2 scope={endpoint.scope or '<none>'}"
        logger.debug("Trying evidence token endpoint {} ({})", endpoint.url, label)
        try:
            response = self._post(
                endpoint.url,
                data=endpoint.form(self._creds),
                headers={"Content-Type": "application/x-www-form-urlencoded"},
            )
        except requests.RequestException as exc:
            return AttemptErr(endpoint.url, label, str(exc))
        if not response.ok:
            return AttemptErr(
                endpoint.url, label, response.text[:_ERROR_TEXT_LIMIT], response.status_code
            )
        try:
            payload = response.json()
        except ValueError:
            return AttemptErr(endpoint.url, label, "token response is not JSON", response.status_code)
        if not isinstance(payload, dict) or not payload.get("access_token"):
            return AttemptErr(endpoint.url, label, "token response missing access_token")
        return AttemptOk(endpoint.url, label, payload)

    def acquire_token(self) -> Optional[str]:
        """
        Return a valid OAuth access token, or None when every token endpoint fails.

        A cached token is reused until it nears expiry. None tells callers to
        fall back to direct-credential auth headers.
        """
        cached = self._cache.get_valid()
        if cached:
            logger.trace("Using cached evidence token")
            return cached.token
        self._require_credentials()
        for endpoint in token_endpoints(self._creds):
            result = self._request_token(endpoint)
            if isinstance(result, AttemptErr):
                logger.debug("Evidence auth failed: {}", result)
                continue
            payload = result.payload
            ttl = payload.get("expires_in") or EVIDENCE_DEFAULT_TOKEN_TTL_SECONDS
            try:
                ttl = int(ttl)
            except (TypeError, ValueError):
                ttl = EVIDENCE_DEFAULT_TOKEN_TTL_SECONDS
            self._cache.store(payload["access_token"], ttl)
            logger.success("Evidence authentication succeeded at {}", endpoint.url)
            return payload["access_token"]
        logger.warning("Evidence OAuth2 failed; falling back to direct credentials")
        return None

    def test_auth(self) -> AuthCheck:
        """
        Request a token from the primary endpoint and report the outcome without the token.
        """
        self._require_credentials()
        endpoint = token_endpoints(self._creds)[0]
        logger.info("Testing evidence auth at {}", endpoint.url)
        try:
            response = self._post(
                endpoint.url,
                data=endpoint.form(self._creds),
                headers={"Content-Type": "application/x-www-form-urlencoded"},
            )
        except requests.RequestException as exc:
            return AuthCheck(success=False, endpoint=endpoint.url, error=str(exc))
        text = response.text[:_ERROR_TEXT_LIMIT]
        if not response.ok:
            return AuthCheck(
                success=False,
                endpoint=endpoint.url,
                status=response.status_code,
                response_text=text,
                error="Authentication failed",
            )
        try:
            payload = response.json()
        except ValueError:
            payload = None
        if not isinstance(payload, dict):
            return AuthCheck(
                success=False,
                endpoint=endpoint.url,
                status=response.status_code,
                response_text=text,
                error="Failed to parse token response",
            )
        return AuthCheck(
            success=True,
            endpoint=endpoint.url,
            status=response.status_code,
            has_token=bool(payload.get("access_token")),
            token_type=payload.get("token_type"),
            expires_in=payload.get("expires_in"),
            scope=payload.get("scope"),
        )

    # --- Resource fetches ---

    def _get_json(self, url: str, strategy: AuthStrategy) -> AttemptResult:
        logger.debug("Trying evidence endpoint {} ({})", url, strategy.name)
        try:
            response = self._get(url, headers=strategy.build_headers())
        except requests.RequestException as exc:
            return AttemptErr(url, strategy.name, str(exc))
        if not response.ok:
            return AttemptErr(
                url, strategy.name, response.text[:_ERROR_TEXT_LIMIT], response.status_code
            )
        if not _is_json(response):
            content_type = response.headers.get("content-type") or "<none>"
            return AttemptErr(
                url, strategy.name, f"Expected JSON but got {content_type}", response.status_code
            )
        try:
            return AttemptOk(url, strategy.name, response.json())
        except ValueError as exc:
            return AttemptErr(url, strategy.name, f"invalid JSON: {exc}", response.status_code)

    def _first_success(
        self, what: str, candidates: Iterable[tuple[str, AuthStrategy]]
    ) -> AttemptOk:
        errors: list[AttemptErr] = []
        token_rejected = False
        for url, strategy in candidates:
            if strategy.uses_token and token_rejected:
                continue
            result = self._get_json(url, strategy)
            if isinstance(result, AttemptOk):
                logger.success("Fetched {} from {} ({})", what, url, strategy.name)
                return result
            logger.debug("Evidence attempt failed: {}", result)
            errors.append(result)
            if strategy.uses_token and result.status in _TOKEN_REJECTED_STATUSES:
                logger.warning(
                    "Evidence API rejected the cached token ({}); dropping it", result.status
                )
                self._cache.clear()
                token_rejected = True
        logger.error("All {} evidence attempts failed for {}", len(errors), what)
        raise EvidenceFetchError(what, errors)

    def list_videos(self) -> VideoListing:
        """
        List videos from the first endpoint/auth combination that answers.

        Raises:
            EvidenceConfigError: Credentials are missing.
            EvidenceFetchError: Every combination failed.
            UnrecognizedShapeError: An endpoint answered with an unknown payload shape.
        """
        self._require_credentials()
        token = self.acquire_token()
        strategies = auth_strategies(self._creds, token)
        candidates = (
            (f"{base}{path}", strategy)
            for base in base_urls(self._creds)
            for path in VIDEO_LIST_ENDPOINTS
            for strategy in strategies
        )
        result = self._first_success("videos", candidates)
        decoded = decode_collection(result.payload)
        videos = [normalize_video(record) for record in decoded.records]
        logger.info("Transformed {} evidence videos", len(videos))
        return VideoListing(
            videos=videos,
            endpoint=result.url,
            auth_method=result.strategy,
            schema=decoded.schema,
        )

    def get_evidence(self, evidence_id: str) -> EvidenceLookup:
        """
        Fetch the files of one evidence item and pick its master copy.

        Raises:
            EvidenceConfigError: Credentials are missing.
            EvidenceFetchError: Every combination failed.
            UnrecognizedShapeError: The answer had no `files` list.
        """
        self._require_credentials()
        query = urlencode(
            {"partner_id": self._creds.partner_id, "evidence_id": evidence_id}
        )
        token = self.acquire_token()
        strategies = auth_strategies(self._creds, token)
        candidates = (
            (f"{base}/api/v1/media/files?{query}", strategy)
            for base in base_urls(self._creds)
            for strategy in strategies
        )
        result = self._first_success(f"evidence {evidence_id}", candidates)
        files = decode_collection(result.payload, keys=("files",)).records
        evidence = normalize_evidence(evidence_id, files) if files else None
        return EvidenceLookup(
            evidence=evidence,
            files=files,
            endpoint=result.url,
            auth_method=result.strategy,
        )
