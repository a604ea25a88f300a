import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient


TEST_API_KEY = "test-upstream-key"


def _purge_app_modules() -> None:
    for name in list(sys.modules):
        if name == "app" or name.startswith("app."):
            del sys.modules[name]


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setenv("TWELVELABS_API_KEY", TEST_API_KEY)
    monkeypatch.setenv("VIDEO_PROXY_ALLOWED_DOMAINS", "cdn.example.com")
    monkeypatch.setenv("EVIDENCE_CLIENT_ID", '"client-123"')
    monkeypatch.setenv("EVIDENCE_API_SECRET", "secret-456")
    monkeypatch.setenv("EVIDENCE_PARTNER_ID", "acme")
    monkeypatch.delenv("CORS_ORIGINS", raising=False)

    repo_root = Path(__file__).resolve().parents[1]
    if str(repo_root) not in sys.path:
        sys.path.insert(0, str(repo_root))

    # Module-level config constants are read at import time.
    _purge_app_modules()

    from app.main import app

    with TestClient(app) as c:
        yield c
