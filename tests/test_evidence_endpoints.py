import json
from types import SimpleNamespace

import requests


def _response(status: int, payload=None, text=None) -> requests.Response:
    resp = requests.Response()
    resp.status_code = status
    resp._content = (text if text is not None else json.dumps(payload)).encode("utf-8")
    resp.encoding = "utf-8"
    resp.headers["Content-Type"] = "application/json"
    return resp


def _override(client, on_get, on_post=None, **cred_overrides):
    """
    Swap the evidence client dependency for one backed by fake HTTP callables.

    Imports happen here because the `client` fixture reloads the app package.
    """
    from app.api.evidence import get_evidence_client
    from app.core.evidence import EvidenceClient, EvidenceCredentials, TokenCache

    creds = {"client_id": "cid", "client_secret": "secret", "partner_id": "acme"}
    creds.update(cred_overrides)
    fake = EvidenceClient(
        EvidenceCredentials(**creds),
        TokenCache(),
        http_get=lambda url, headers=None, **_: on_get(url, headers or {}),
        http_post=on_post or (lambda url, data=None, headers=None, **_: _response(401, text="denied")),
    )
    client.app.dependency_overrides[get_evidence_client] = lambda: fake
    return fake


def test_default_dependency_uses_configured_credentials(client):
    from app.api.evidence import get_evidence_client

    evidence_client = get_evidence_client(SimpleNamespace(app=client.app))

    assert evidence_client.credentials.client_id == "client-123"
    assert evidence_client.credentials.partner_id == "acme"


def test_demo_mode_returns_samples(client):
    resp = client.get("/api/evidence/videos", params={"demo": "true"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["demo"] is True
    assert body["count"] == 3
    assert body["source"] == "evidence.com (demo)"
    assert {v["id"] for v in body["videos"]} == {"demo-001", "demo-002", "demo-003"}


def test_list_videos_success(client):
    _override(
        client,
        lambda url, headers: _response(200, {"items": [{"id": 7, "title": "Stop", "thumbnail": "t.jpg"}]}),
    )

    resp = client.get("/api/evidence/videos")

    assert resp.status_code == 200
    body = resp.json()
    assert body["count"] == 1
    assert body["videos"][0]["id"] == "7"
    assert body["videos"][0]["thumbnailUrl"] == "t.jpg"
    assert body["authMethod"] == "Basic Auth"
    assert body["endpoint"] == "https://api.evidence.com/api/v2/media"


def test_list_videos_all_failures_returns_500(client):
    _override(client, lambda url, headers: _response(404, text="missing"))

    resp = client.get("/api/evidence/videos")

    assert resp.status_code == 500
    body = resp.json()
    assert body["success"] is False
    assert body["error"].startswith("Failed to fetch videos from any endpoint.")
    assert body["attempts"] == 24
    assert body["config"]["partnerId"] == "acme"
    assert "hint" in body


def test_list_videos_unknown_shape_returns_502(client):
    _override(client, lambda url, headers: _response(200, {"unexpected": True}))

    resp = client.get("/api/evidence/videos")

    assert resp.status_code == 502
    assert "Unrecognized" in resp.json()["error"]


def test_list_videos_missing_credentials(client):
    _override(client, lambda url, headers: _response(200, []), partner_id="")

    resp = client.get("/api/evidence/videos")

    assert resp.status_code == 500
    body = resp.json()
    assert "EVIDENCE_PARTNER_ID" in body["error"]
    assert body["config"]["partnerId"] == "not set"


def test_test_auth_missing_credentials(client):
    _override(client, lambda url, headers: _response(200, []), client_secret="")

    resp = client.get("/api/evidence/test-auth")

    assert resp.status_code == 400
    assert resp.json() == {
        "error": "Missing credentials",
        "hasClientId": True,
        "hasSecret": False,
        "hasPartnerId": True,
    }


def test_test_auth_success_hides_token(client):
    _override(
        client,
        lambda url, headers: _response(404),
        lambda url, data=None, headers=None, **_: _response(
            200, {"access_token": "secret-token", "token_type": "bearer", "expires_in": 3600}
        ),
    )

    resp = client.get("/api/evidence/test-auth")

    assert resp.status_code == 200
    body = resp.json()
    assert body["hasToken"] is True
    assert body["expiresIn"] == 3600
    assert "secret-token" not in resp.text


def test_test_auth_failure_uses_upstream_status(client):
    _override(client, lambda url, headers: _response(404))

    resp = client.get("/api/evidence/test-auth")

    assert resp.status_code == 401
    assert resp.json()["responseText"] == "denied"


def test_get_evidence_item(client):
    files = [{"fileId": "m", "fileType": "master_copy", "fileName": "a.mp4"}]
    _override(client, lambda url, headers: _response(200, {"files": files}))

    resp = client.get("/api/evidence/ev-1")

    assert resp.status_code == 200
    body = resp.json()
    assert body["evidence"]["id"] == "ev-1"
    assert body["evidence"]["fileId"] == "m"
    assert body["evidence"]["allFiles"] == files
    assert body["files"] == files


def test_get_evidence_without_files(client):
    _override(client, lambda url, headers: _response(200, {"files": []}))

    resp = client.get("/api/evidence/ev-2")

    assert resp.status_code == 200
    body = resp.json()
    assert body["evidence"] is None
    assert body["message"] == "Evidence found but no files available"


def test_list_videos_with_numeric_titles(client):
    _override(client, lambda url, headers: _response(200, [{"id": 1, "name": 12345}]))

    resp = client.get("/api/evidence/videos")

    assert resp.status_code == 200
    assert resp.json()["videos"][0]["title"] == "12345"
