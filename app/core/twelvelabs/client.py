from __future__ import annotations

from typing import Any, Callable, Iterable, Optional
from urllib.parse import quote

import requests
from loguru import logger

from app.config import TWELVELABS_API_BASE, TWELVELABS_HTTP_TIMEOUT_SECONDS
from app.utils import http_client
from app.utils.logger import truncate
from .errors import TwelveLabsApiError, TwelveLabsConfigError

_ERROR_TEXT_LIMIT = 500
DEFAULT_SEARCH_OPTIONS = ("visual", "audio")


def _path_id(value: str) -> str:
    return quote(value, safe="")


class TwelveLabsClient:
    """Thin client for the video AI REST API (indexes, videos, search, generation).

    Every call sends the `x-api-key` header. Non-2xx answers, transport
    failures and non-object JSON bodies raise `TwelveLabsApiError`.
    """

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = TWELVELABS_API_BASE,
        timeout: float = TWELVELABS_HTTP_TIMEOUT_SECONDS,
        http_get: Callable[..., requests.Response] = http_client.get,
        http_post: Callable[..., requests.Response] = http_client.post,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._get = http_get
        self._post = http_post

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    def _request(self, action: str, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        if not self._api_key:
            logger.error("TWELVELABS_API_KEY is not set; cannot call the video AI API.")
            raise TwelveLabsConfigError()
        url = f"{self._base_url}{path}"
        headers = {"x-api-key": self._api_key}
        send = self._get if method == "GET" else self._post
        logger.debug("{} {} ({})", method, url, action)
        try:
            response = send(url, headers=headers, timeout=self._timeout, **kwargs)
        except requests.RequestException as exc:
            logger.error("{} failed: {}", action, exc)
            raise TwelveLabsApiError(action, str(exc) or exc.__class__.__name__) from exc
        if not response.ok:
            text = response.text[:_ERROR_TEXT_LIMIT]
            logger.warning(
                "{} failed: status={} body={}", action, response.status_code, truncate(text)
            )
            raise TwelveLabsApiError(
                action, response.reason or str(response.status_code), response.status_code, text
            )
        try:
            payload = response.json()
        except ValueError as exc:
            raise TwelveLabsApiError(action, "response is not JSON", response.status_code) from exc
        if not isinstance(payload, dict):
            raise TwelveLabsApiError(
                action, "unexpected response shape", response.status_code
            )
        return payload

    def list_indexes(self) -> list[dict[str, Any]]:
        payload = self._request("List indexes", "GET", "/indexes")
        return [i for i in payload.get("data") or [] if isinstance(i, dict)]

    def list_videos(
        self, index_id: str, *, page_limit: Optional[int] = None
    ) -> list[dict[str, Any]]:
        """
        List the videos of one index.

        `system_metadata` is exposed as `metadata` when the API sends it.
        """
        params = {"page_limit": page_limit} if page_limit else None
        payload = self._request(
            "List videos", "GET", f"/indexes/{_path_id(index_id)}/videos", params=params
        )
        videos = []
        for video in payload.get("data") or []:
            if not isinstance(video, dict):
                continue
            videos.append(
                {**video, "metadata": video.get("system_metadata") or video.get("metadata")}
            )
        return videos

    def search(
        self,
        index_id: str,
        query: str,
        *,
        search_options: Optional[Iterable[str]] = None,
        page_limit: Optional[int] = None,
        sort_option: Optional[str] = None,
    ) -> dict[str, Any]:
        """
        Run a text search over one index.

        The search endpoint only accepts multipart form data, with one
        `search_options` field per option.
        """
        fields: list[tuple[str, tuple[None, str]]] = [
            ("index_id", (None, index_id)),
            ("query_text", (None, query)),
            ("page_limit", (None, str(page_limit or 10))),
            ("sort_option", (None, sort_option or "score")),
        ]
        for option in search_options or DEFAULT_SEARCH_OPTIONS:
            fields.append(("search_options", (None, option)))
        return self._request("Search", "POST", "/search", files=fields)

    def summarize(self, video_id: str, kind: str) -> dict[str, Any]:
        """Generate a `summary`, `chapter` or `highlight` result for a video."""
        return self._request(
            f"Generate {kind}",
            "POST",
            "/summarize",
            json={"video_id": video_id, "type": kind},
        )

    def gist(self, video_id: str, types: Iterable[str]) -> dict[str, Any]:
        """Generate gist fields (`topic`, `hashtag`, `title`) for a video."""
        return self._request(
            "Generate gist",
            "POST",
            "/gist",
            json={"video_id": video_id, "types": list(types)},
        )
