from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
import threading
from typing import Optional

from loguru import logger


@dataclass(frozen=True)
class AccessToken:
    token: str
    expires_at: datetime


def _utcnow() -> datetime:
    """
    Get the current UTC time as a timezone-aware datetime.
    """
    return datetime.now(timezone.utc)


class TokenCache:
    """
    Holds a single OAuth access token with its expiry.

    One instance is created at application startup and handed to request
    handlers through `app.state`.
    """

    def __init__(self, refresh_margin_seconds: int = 300):
        """
        Parameters:
            refresh_margin_seconds (int): Tokens are considered expired this many seconds before the expiry reported by the issuer.
        """
        self._refresh_margin_seconds = max(0, refresh_margin_seconds)
        self._entry: Optional[AccessToken] = None
        self._lock = threading.Lock()

    def get_valid(self) -> Optional[AccessToken]:
        """
        Return the cached token if it has not expired, otherwise None.
        """
        with self._lock:
            entry = self._entry
            if entry is None:
                logger.trace("Token cache empty")
                return None
            if _utcnow() >= entry.expires_at:
                logger.debug("Cached evidence token expired at {}", entry.expires_at)
                self._entry = None
                return None
            return entry

    def store(self, token: str, ttl_seconds: int) -> AccessToken:
        """
        Cache `token` for `ttl_seconds` minus the refresh margin.

        A TTL shorter than the margin yields an already-expired entry, so the
        next lookup fetches a new token.
        """
        lifetime = max(0, ttl_seconds - self._refresh_margin_seconds)
        entry = AccessToken(token=token, expires_at=_utcnow() + timedelta(seconds=lifetime))
        with self._lock:
            self._entry = entry
        logger.debug("Evidence token cached for {}s", lifetime)
        return entry

    def clear(self) -> None:
        with self._lock:
            self._entry = None
