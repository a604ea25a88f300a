import os
from dotenv import load_dotenv
from loguru import logger
from app.utils.logger import config as configure_logger

# Load .env as early as possible so all downstream imports see the intended env
load_dotenv()

# Configure logger after env is loaded (LOG_LEVEL honored)
configure_logger()


def _as_bool(val: str | None, default: bool) -> bool:
    if val is None:
        return default
    v = val.strip().lower()
    return v in ("1", "true", "yes", "on")


def _as_int(val: str | None, default: int) -> int:
    if val is None or not val.strip():
        return default
    try:
        return int(val.strip())
    except ValueError:
        logger.warning(f"Invalid integer value {val!r}; using default {default}.")
        return default


def _as_float(val: str | None, default: float) -> float:
    if val is None or not val.strip():
        return default
    try:
        return float(val.strip())
    except ValueError:
        logger.warning(f"Invalid float value {val!r}; using default {default}.")
        return default


def _as_list(val: str | None) -> list[str]:
    if not val:
        return []
    return [part.strip() for part in val.split(",") if part.strip()]


def strip_env_quotes(val: str | None) -> str:
    """Trim whitespace and one pair of surrounding double quotes.

    Some deployment tools keep the quotes from ``KEY="value"`` lines in the
    injected environment.
    """
    if not val:
        return ""
    v = val.strip()
    if len(v) >= 2 and v.startswith('"') and v.endswith('"'):
        v = v[1:-1]
    return v


# --- Video proxy ---

# Read on every request so key rotation does not need a restart.
def get_video_api_key() -> str:
    return strip_env_quotes(os.getenv("TWELVELABS_API_KEY"))


# Substrings a target URL must contain before the proxy fetches it.
VIDEO_PROXY_ALLOWED_DOMAINS = _as_list(
    os.getenv("VIDEO_PROXY_ALLOWED_DOMAINS", "cloudfront.net,twelvelabs")
)
VIDEO_PROXY_PATH = os.getenv("VIDEO_PROXY_PATH", "/api/video-proxy").strip() or (
    "/api/video-proxy"
)
VIDEO_PROXY_MANIFEST_TIMEOUT_SECONDS = _as_float(
    os.getenv("VIDEO_PROXY_MANIFEST_TIMEOUT_SECONDS"), 15.0
)
VIDEO_PROXY_SEGMENT_TIMEOUT_SECONDS = _as_float(
    os.getenv("VIDEO_PROXY_SEGMENT_TIMEOUT_SECONDS"), 60.0
)
VIDEO_PROXY_CONNECT_TIMEOUT_SECONDS = _as_float(
    os.getenv("VIDEO_PROXY_CONNECT_TIMEOUT_SECONDS"), 10.0
)
VIDEO_PROXY_CACHE_MAX_AGE = max(0, _as_int(os.getenv("VIDEO_PROXY_CACHE_MAX_AGE"), 3600))
VIDEO_PROXY_CHUNK_SIZE = max(
    1024, _as_int(os.getenv("VIDEO_PROXY_CHUNK_SIZE"), 64 * 1024)
)
logger.debug(
    f"VIDEO_PROXY_ALLOWED_DOMAINS={VIDEO_PROXY_ALLOWED_DOMAINS}, "
    f"VIDEO_PROXY_PATH={VIDEO_PROXY_PATH}, "
    f"timeouts manifest={VIDEO_PROXY_MANIFEST_TIMEOUT_SECONDS}s "
    f"segment={VIDEO_PROXY_SEGMENT_TIMEOUT_SECONDS}s "
    f"connect={VIDEO_PROXY_CONNECT_TIMEOUT_SECONDS}s"
)

# --- Video AI API ---

# Shares TWELVELABS_API_KEY with the video proxy (see get_video_api_key).
TWELVELABS_API_BASE = (
    os.getenv("TWELVELABS_API_BASE", "https://api.twelvelabs.io/v1.3").strip().rstrip("/")
    or "https://api.twelvelabs.io/v1.3"
)
# Summaries and gists are generated on demand and can take a while.
TWELVELABS_HTTP_TIMEOUT_SECONDS = _as_float(
    os.getenv("TWELVELABS_HTTP_TIMEOUT_SECONDS"), 60.0
)
logger.debug(
    f"TWELVELABS_API_BASE={TWELVELABS_API_BASE}, "
    f"timeout={TWELVELABS_HTTP_TIMEOUT_SECONDS}s"
)

# --- Evidence API ---

EVIDENCE_CLIENT_ID = strip_env_quotes(os.getenv("EVIDENCE_CLIENT_ID"))
EVIDENCE_API_SECRET = strip_env_quotes(os.getenv("EVIDENCE_API_SECRET"))
EVIDENCE_PARTNER_ID = strip_env_quotes(os.getenv("EVIDENCE_PARTNER_ID"))
# Cached tokens are treated as expired this many seconds before the real expiry.
EVIDENCE_TOKEN_REFRESH_MARGIN_SECONDS = max(
    0, _as_int(os.getenv("EVIDENCE_TOKEN_REFRESH_MARGIN_SECONDS"), 300)
)
EVIDENCE_DEFAULT_TOKEN_TTL_SECONDS = 3600
EVIDENCE_HTTP_TIMEOUT_SECONDS = _as_float(
    os.getenv("EVIDENCE_HTTP_TIMEOUT_SECONDS"), 20.0
)
logger.debug(
    f"Evidence credentials present: client_id={bool(EVIDENCE_CLIENT_ID)}, "
    f"secret={bool(EVIDENCE_API_SECRET)}, partner_id={bool(EVIDENCE_PARTNER_ID)}"
)

# --- CORS (non-proxy API) ---
CORS_ORIGINS = _as_list(os.getenv("CORS_ORIGINS", ""))
CORS_ALLOW_CREDENTIALS = _as_bool(os.getenv("CORS_ALLOW_CREDENTIALS", None), False)

# --- Server ---
APP_RELOAD = _as_bool(os.getenv("APP_RELOAD", None), False)
APP_HOST = os.getenv("APP_HOST", "0.0.0.0").strip() or "0.0.0.0"
APP_PORT = _as_int(os.getenv("APP_PORT"), 8000)
