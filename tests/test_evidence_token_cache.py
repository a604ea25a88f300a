from datetime import datetime, timedelta, timezone

from app.core.evidence import token_cache as token_cache_module
from app.core.evidence.token_cache import TokenCache


def _freeze(monkeypatch, moment: datetime) -> None:
    monkeypatch.setattr(token_cache_module, "_utcnow", lambda: moment)


def test_empty_cache_returns_none():
    assert TokenCache().get_valid() is None


def test_stored_token_is_reused_until_margin(monkeypatch):
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)
    _freeze(monkeypatch, start)
    cache = TokenCache(refresh_margin_seconds=300)

    entry = cache.store("tok", 3600)

    assert entry.expires_at == start + timedelta(seconds=3300)
    _freeze(monkeypatch, start + timedelta(seconds=3299))
    assert cache.get_valid().token == "tok"
    _freeze(monkeypatch, start + timedelta(seconds=3300))
    assert cache.get_valid() is None


def test_ttl_shorter_than_margin_is_already_expired(monkeypatch):
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)
    _freeze(monkeypatch, start)
    cache = TokenCache(refresh_margin_seconds=300)

    cache.store("short", 120)

    assert cache.get_valid() is None


def test_clear_drops_token():
    cache = TokenCache(refresh_margin_seconds=0)
    cache.store("tok", 60)

    cache.clear()

    assert cache.get_valid() is None
