import importlib
import sys


def _reload_config():
    if "app.config" in sys.modules:
        del sys.modules["app.config"]
    return importlib.import_module("app.config")


def test_allowed_domains_parsing(monkeypatch):
    monkeypatch.setenv("VIDEO_PROXY_ALLOWED_DOMAINS", " cloudfront.net , , twelvelabs ,")
    cfg = _reload_config()

    assert cfg.VIDEO_PROXY_ALLOWED_DOMAINS == ["cloudfront.net", "twelvelabs"]


def test_invalid_timeout_falls_back_to_default(monkeypatch):
    monkeypatch.setenv("VIDEO_PROXY_MANIFEST_TIMEOUT_SECONDS", "soon")
    cfg = _reload_config()

    assert cfg.VIDEO_PROXY_MANIFEST_TIMEOUT_SECONDS == 15.0


def test_chunk_size_floor(monkeypatch):
    monkeypatch.setenv("VIDEO_PROXY_CHUNK_SIZE", "10")
    cfg = _reload_config()

    assert cfg.VIDEO_PROXY_CHUNK_SIZE == 1024


def test_api_key_read_at_call_time_and_unquoted(monkeypatch):
    cfg = _reload_config()
    monkeypatch.setenv("TWELVELABS_API_KEY", '  "abc123"  ')
    assert cfg.get_video_api_key() == "abc123"
    monkeypatch.delenv("TWELVELABS_API_KEY")
    assert cfg.get_video_api_key() == ""


def test_strip_env_quotes_keeps_inner_quotes():
    cfg = _reload_config()

    assert cfg.strip_env_quotes('"a"b"') == 'a"b'
    assert cfg.strip_env_quotes('"') == '"'
    assert cfg.strip_env_quotes(None) == ""
