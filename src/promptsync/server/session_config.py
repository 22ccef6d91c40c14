"""
Session configuration for promptsync.

Environment Variables:
    PROMPTSYNC_EMIT_NEUTRAL_ON_RESET: "1" to send a neutral control message
        after an explicit reset (default: disabled)
    PROMPTSYNC_API_HOST: Host for the local control API (default: 127.0.0.1)
    PROMPTSYNC_API_PORT: Port for the local control API (default: 8000)
    PROMPTSYNC_STORIES_FILE: JSON file of prompt stories (default: built-in)
    PROMPTSYNC_AUTO_START_PROMPT: Prompt sent with ``start`` as soon as the
        session becomes ready (default: disabled)
"""

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_API_HOST = "127.0.0.1"
DEFAULT_API_PORT = 8000

EMIT_NEUTRAL_ON_RESET_ENV_VAR = "PROMPTSYNC_EMIT_NEUTRAL_ON_RESET"
API_HOST_ENV_VAR = "PROMPTSYNC_API_HOST"
API_PORT_ENV_VAR = "PROMPTSYNC_API_PORT"
STORIES_FILE_ENV_VAR = "PROMPTSYNC_STORIES_FILE"
AUTO_START_PROMPT_ENV_VAR = "PROMPTSYNC_AUTO_START_PROMPT"


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in ("1", "true", "yes")


def emit_neutral_on_reset() -> bool:
    return _env_flag(EMIT_NEUTRAL_ON_RESET_ENV_VAR)


def get_api_host() -> str:
    return os.getenv(API_HOST_ENV_VAR, DEFAULT_API_HOST).strip() or DEFAULT_API_HOST


def get_api_port() -> int:
    """Configured API port, falling back to the default on bad values."""
    raw = os.getenv(API_PORT_ENV_VAR, str(DEFAULT_API_PORT))
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Invalid {API_PORT_ENV_VAR}={raw!r}, using {DEFAULT_API_PORT}")
        return DEFAULT_API_PORT


def get_stories_file() -> Path | None:
    env_file = os.environ.get(STORIES_FILE_ENV_VAR)
    if env_file:
        return Path(env_file).expanduser().resolve()
    return None


def get_auto_start_prompt() -> str | None:
    return os.getenv(AUTO_START_PROMPT_ENV_VAR, "").strip() or None


def is_verbose_logging() -> bool:
    return bool(os.getenv("VERBOSE_LOGGING"))
