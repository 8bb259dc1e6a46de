"""Connection settings and display constants."""

import logging
import os
from pathlib import Path

# Base directories
PROJECT_ROOT = Path(__file__).parent.parent.parent


def _load_env() -> None:
    """Load .env file from project root if present. Existing env vars take priority."""
    env_file = PROJECT_ROOT / ".env"
    if not env_file.exists():
        return
    with open(env_file) as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, _, value = line.partition("=")
            key = key.strip()
            value = value.strip()
            if not os.environ.get(key):
                os.environ[key] = value


_env_initialized = False


def init() -> None:
    """Load .env and set env-dependent constants. Safe to call multiple times."""
    global _env_initialized
    if _env_initialized:
        return
    _load_env()
    _init_env_vars()
    _env_initialized = True


def _init_env_vars() -> None:
    """Read environment variables into module-level constants."""
    global LOGSEQ_TOKEN, LOGSEQ_HOST, LOGSEQ_PORT, LOGSEQ_API_URL, LOGSEQ_TIMEOUT

    LOGSEQ_TOKEN = os.environ.get("LOGSEQ_TOKEN", "")
    LOGSEQ_HOST = os.environ.get("LOGSEQ_HOST") or "127.0.0.1"
    LOGSEQ_PORT = os.environ.get("LOGSEQ_PORT") or "12315"
    LOGSEQ_API_URL = (
        os.environ.get("LOGSEQ_API_URL")
        or f"http://{LOGSEQ_HOST}:{LOGSEQ_PORT}/api"
    )

    raw_timeout = os.environ.get("LOGSEQ_TIMEOUT", "")
    try:
        LOGSEQ_TIMEOUT = float(raw_timeout) if raw_timeout else None
    except (ValueError, TypeError):
        LOGSEQ_TIMEOUT = None
        logging.getLogger(__name__).warning(
            "Invalid LOGSEQ_TIMEOUT env var %r, using transport default", raw_timeout
        )


# --- Logseq HTTP API ---
LOGSEQ_TOKEN = ""  # nosec B105 -- empty default, real value set by init()
LOGSEQ_HOST = "127.0.0.1"
LOGSEQ_PORT = "12315"
LOGSEQ_API_URL = f"http://{LOGSEQ_HOST}:{LOGSEQ_PORT}/api"
LOGSEQ_TIMEOUT: float | None = None  # None = wait as long as the transport does

DATASCRIPT_QUERY = "logseq.DB.datascriptQuery"

# --- Result formatting ---
SUMMARY_MAX_RESULTS = 20
SUMMARY_CONTENT_CHARS = 100
NAME_CONTENT_CHARS = 50
BACKLINKS_MAX = 20
TOP_REFERENCED_PAGES = 10
BLOCK_INDENT = "  "

# Task markers counted as open work
TASK_MARKERS = ["TODO", "DOING", "NOW", "LATER", "WAITING"]

# --- Analysis ---
ANALYSIS_DEFAULT_LIMIT = 20
ANALYSIS_DEFAULT_RANGE = "last 7 days"
OVERVIEW_TOP_TAGS = 10
OVERVIEW_RECENT_PAGES = 5
KNOWLEDGE_GAP_SCAN_PAGES = 100
TODO_GROUP_MAX = 10
TODO_CONTENT_CHARS = 80
TAG_BAR_UNIT = 5       # references per bar segment
TAG_BAR_MAX = 20       # bar segments cap
RECENT_QUERY_DAYS = 7
