"""Unit tests for promptsync.server.logs_config."""

import os
import time

import pytest
from freezegun import freeze_time

from promptsync.server.logs_config import (
    LOGS_DIR_ENV_VAR,
    cleanup_old_logs,
    ensure_logs_dir,
    get_current_log_file,
    get_logs_dir,
    get_most_recent_log_file,
)


@pytest.fixture
def temp_logs_dir(tmp_path, monkeypatch):
    """Create a temporary logs directory and configure it via environment variable."""
    logs_dir = tmp_path / "logs"
    logs_dir.mkdir()
    monkeypatch.setenv(LOGS_DIR_ENV_VAR, str(logs_dir))
    yield logs_dir


class TestGetLogsDir:
    def test_env_override(self, temp_logs_dir):
        assert get_logs_dir() == temp_logs_dir.resolve()

    def test_default_under_home(self, monkeypatch):
        monkeypatch.delenv(LOGS_DIR_ENV_VAR, raising=False)
        assert get_logs_dir().parts[-2:] == (".promptsync", "logs")

    def test_ensure_creates_directory(self, tmp_path, monkeypatch):
        target = tmp_path / "nested" / "logs"
        monkeypatch.setenv(LOGS_DIR_ENV_VAR, str(target))

        assert ensure_logs_dir() == target.resolve()
        assert target.is_dir()


class TestGetCurrentLogFile:
    @freeze_time("2025-11-04 10:30:15")
    def test_name_contains_timestamp(self, temp_logs_dir):
        log_file = get_current_log_file()

        assert log_file.name == "promptsync-logs-2025-11-04-10-30-15.log"
        assert log_file.parent == temp_logs_dir.resolve()


class TestGetMostRecentLogFile:
    """Tests for get_most_recent_log_file function."""

    def test_returns_none_when_directory_does_not_exist(self, tmp_path, monkeypatch):
        monkeypatch.setenv(LOGS_DIR_ENV_VAR, str(tmp_path / "nonexistent"))

        assert get_most_recent_log_file() is None

    def test_returns_none_when_only_non_log_files_exist(self, temp_logs_dir):
        (temp_logs_dir / "readme.txt").write_text("Not a log")

        assert get_most_recent_log_file() is None

    def test_returns_most_recent_by_filename(self, temp_logs_dir):
        old_log = temp_logs_dir / "promptsync-logs-2025-11-04-10-00-00.log"
        new_log = temp_logs_dir / "promptsync-logs-2025-11-04-16-45-30.log"
        new_log.write_text("New log")
        old_log.write_text("Old log")

        assert get_most_recent_log_file() == new_log.resolve()


class TestCleanupOldLogs:
    def test_deletes_only_old_files(self, temp_logs_dir):
        old_log = temp_logs_dir / "promptsync-logs-2025-01-01-00-00-00.log"
        rotated = temp_logs_dir / "promptsync-logs-2025-01-01-00-00-00.log.1"
        fresh_log = temp_logs_dir / "promptsync-logs-2025-01-03-00-00-00.log"
        other = temp_logs_dir / "notes.txt"
        for path in (old_log, rotated, fresh_log, other):
            path.write_text("x")

        two_days_ago = time.time() - 2 * 24 * 60 * 60
        for path in (old_log, rotated, other):
            os.utime(path, (two_days_ago, two_days_ago))

        deleted = cleanup_old_logs(max_age_days=1)

        assert deleted == 2
        assert not old_log.exists()
        assert not rotated.exists()
        assert fresh_log.exists()
        assert other.exists()

    def test_missing_directory(self, tmp_path, monkeypatch):
        monkeypatch.setenv(LOGS_DIR_ENV_VAR, str(tmp_path / "missing"))

        assert cleanup_old_logs() == 0
