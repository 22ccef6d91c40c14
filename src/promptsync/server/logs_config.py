"""
Logs configuration for promptsync.

Log files live in:
- Default location: ~/.promptsync/logs
- Environment variable override: PROMPTSYNC_LOGS_DIR

Each process writes to its own timestamped file
(promptsync-logs-YYYY-MM-DD-HH-MM-SS.log).
"""

import logging
import os
import time
from datetime import datetime
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_LOGS_DIR = "~/.promptsync/logs"

LOGS_DIR_ENV_VAR = "PROMPTSYNC_LOGS_DIR"

LOG_FILE_PREFIX = "promptsync-logs-"
LOG_FILE_TIMESTAMP_FORMAT = "%Y-%m-%d-%H-%M-%S"


def get_logs_dir() -> Path:
    """
    Get the logs directory path.

    Priority order:
    1. PROMPTSYNC_LOGS_DIR environment variable
    2. Default: ~/.promptsync/logs
    """
    env_dir = os.environ.get(LOGS_DIR_ENV_VAR)
    if env_dir:
        return Path(env_dir).expanduser().resolve()
    return Path(DEFAULT_LOGS_DIR).expanduser().resolve()


def ensure_logs_dir() -> Path:
    logs_dir = get_logs_dir()
    logs_dir.mkdir(parents=True, exist_ok=True)
    return logs_dir


def get_current_log_file() -> Path:
    """Path of the log file for a process started now."""
    timestamp = datetime.now().strftime(LOG_FILE_TIMESTAMP_FORMAT)
    return get_logs_dir() / f"{LOG_FILE_PREFIX}{timestamp}.log"


def get_most_recent_log_file() -> Path | None:
    """
    Most recent log file, judged by the timestamp in its name.

    Returns None when the directory is missing or holds no log files.
    """
    logs_dir = get_logs_dir()
    if not logs_dir.exists():
        return None

    log_files = sorted(logs_dir.glob(f"{LOG_FILE_PREFIX}*.log"))
    if not log_files:
        return None
    return log_files[-1]


def cleanup_old_logs(max_age_days: int = 1) -> int:
    """
    Delete log files last modified more than ``max_age_days`` ago.

    Returns:
        Number of files deleted
    """
    logs_dir = get_logs_dir()
    if not logs_dir.exists():
        return 0

    cutoff = time.time() - max_age_days * 24 * 60 * 60
    deleted = 0
    for log_file in logs_dir.glob(f"{LOG_FILE_PREFIX}*.log*"):
        try:
            if log_file.stat().st_mtime < cutoff:
                log_file.unlink()
                deleted += 1
        except OSError as e:
            logger.warning(f"Could not delete old log file {log_file}: {e}")

    if deleted:
        logger.info(f"Deleted {deleted} old log files from {logs_dir}")
    return deleted
