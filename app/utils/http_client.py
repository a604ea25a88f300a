from __future__ import annotations

from typing import Any, Optional
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry
from loguru import logger

from app.config import EVIDENCE_HTTP_TIMEOUT_SECONDS

_SESSION: Optional[requests.Session] = None


def _build_session() -> requests.Session:
    s = requests.Session()
    # Conservative retry policy for transient network hiccups. Callers iterate
    # over several endpoints themselves, so keep the per-call budget small.
    retry = Retry(
        total=2,
        connect=2,
        read=1,
        backoff_factor=0.5,
        status_forcelist=(429, 502, 503, 504),
        allowed_methods=("GET", "POST"),
        respect_retry_after_header=True,
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry, pool_connections=10, pool_maxsize=20)
    s.mount("http://", adapter)
    s.mount("https://", adapter)
    s.headers.update({"Accept": "application/json"})
    logger.debug("HTTP client session built")
    return s


def get_session() -> requests.Session:
    global _SESSION
    if _SESSION is None:
        _SESSION = _build_session()
    return _SESSION


def get(
    url: str, *, timeout: float | int = EVIDENCE_HTTP_TIMEOUT_SECONDS, **kwargs: Any
) -> requests.Response:
    return get_session().get(url, timeout=timeout, **kwargs)


def post(
    url: str, *, timeout: float | int = EVIDENCE_HTTP_TIMEOUT_SECONDS, **kwargs: Any
) -> requests.Response:
    return get_session().post(url, timeout=timeout, **kwargs)
