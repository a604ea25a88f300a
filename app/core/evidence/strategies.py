from __future__ import annotations

import base64
from dataclasses import dataclass
from typing import Any, Callable, Optional

from app.config import (
    EVIDENCE_API_SECRET,
    EVIDENCE_CLIENT_ID,
    EVIDENCE_PARTNER_ID,
)

_GLOBAL_API_BASE = "https://api.evidence.com"


@dataclass(frozen=True)
class EvidenceCredentials:
    client_id: str
    client_secret: str
    partner_id: str

    @classmethod
    def from_config(cls) -> "EvidenceCredentials":
        return cls(
            client_id=EVIDENCE_CLIENT_ID,
            client_secret=EVIDENCE_API_SECRET,
            partner_id=EVIDENCE_PARTNER_ID,
        )

    def missing(self) -> list[str]:
        missing: list[str] = []
        if not self.client_id:
            missing.append("EVIDENCE_CLIENT_ID")
        if not self.client_secret:
            missing.append("EVIDENCE_API_SECRET")
        if not self.partner_id:
            missing.append("EVIDENCE_PARTNER_ID")
        return missing

    def config_summary(self) -> dict[str, Any]:
        """Presence flags safe to return to clients."""
        return {
            "hasClientId": bool(self.client_id),
            "hasSecret": bool(self.client_secret),
            "hasPartnerId": bool(self.partner_id),
            "partnerId": self.partner_id or "not set",
        }


@dataclass(frozen=True)
class TokenEndpoint:
    url: str
    scope: str

    def form(self, creds: EvidenceCredentials) -> dict[str, str]:
        data = {
            "grant_type": "client_credentials",
            "client_id": creds.client_id,
            "client_secret": creds.client_secret,
        }
        if self.scope:
            data["scope"] = self.scope
        return data


@dataclass(frozen=True)
class AuthStrategy:
    """An auth header shape to try against the evidence API."""

    name: str
    build_headers: Callable[[], dict[str, str]]
    uses_token: bool = False


@dataclass(frozen=True)
class AttemptOk:
    url: str
    strategy: str
    payload: Any


@dataclass(frozen=True)
class AttemptErr:
    url: str
    strategy: str
    reason: str
    status: Optional[int] = None

    def __str__(self) -> str:
        status = f"{self.status} " if self.status is not None else ""
        return f"{self.url} ({self.strategy}): {status}{self.reason}"


AttemptResult = AttemptOk | AttemptErr


def partner_host(creds: EvidenceCredentials) -> str:
    return f"https://{creds.partner_id}.evidence.com"


def token_endpoints(creds: EvidenceCredentials) -> list[TokenEndpoint]:
    """
    OAuth client-credentials configurations, in the order they are tried.
    """
    partner_url = f"{partner_host(creds)}/api/oauth2/token"
    global_url = f"{_GLOBAL_API_BASE}/oauth2/token"
    return [
        TokenEndpoint(partner_url, "any.read"),
        TokenEndpoint(partner_url, "read"),
        TokenEndpoint(partner_url, ""),
        TokenEndpoint(partner_url, "evidence.read"),
        TokenEndpoint(partner_url, "media.read"),
        TokenEndpoint(global_url, "any.read"),
        TokenEndpoint(global_url, "read"),
    ]


def base_urls(creds: EvidenceCredentials) -> list[str]:
    return [_GLOBAL_API_BASE, partner_host(creds)]


def _basic_auth(creds: EvidenceCredentials) -> str:
    raw = f"{creds.client_id}:{creds.client_secret}".encode("utf-8")
    return base64.b64encode(raw).decode("ascii")


def auth_strategies(
    creds: EvidenceCredentials, token: Optional[str]
) -> list[AuthStrategy]:
    """
    Auth header shapes in priority order.

    Bearer is only offered when an OAuth token was obtained; Basic and the
    API-key headers are direct-credential fallbacks.
    """
    strategies: list[AuthStrategy] = []
    if token:
        strategies.append(
            AuthStrategy(
                "Bearer Token (OAuth2)",
                lambda: {"Authorization": f"Bearer {token}"},
                uses_token=True,
            )
        )
    strategies.append(
        AuthStrategy(
            "Basic Auth",
            lambda: {"Authorization": f"Basic {_basic_auth(creds)}"},
        )
    )
    strategies.append(
        AuthStrategy(
            "API Key Headers",
            lambda: {
                "X-API-Key": creds.client_secret,
                "X-Client-ID": creds.client_id,
                "X-Partner-ID": creds.partner_id,
            },
        )
    )
    return strategies
