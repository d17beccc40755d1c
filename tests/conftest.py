"""Pytest configuration and shared fixtures."""

import logging
import shutil
import tempfile
import zipfile
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from arrbackup.client.models import Backup, BackupType
from arrbackup.config.manager import Settings
from arrbackup.config.schemas import SETTING_ENV_VARS
from arrbackup.utils.logging import SecretRedactingFilter

NOW = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Clock whose sleep advances time instead of blocking."""

    def __init__(self, start: datetime = NOW):
        self.now = start
        self.sleeps = []

    def __call__(self) -> datetime:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += timedelta(seconds=seconds)


def make_backup(backup_id=1, age=timedelta(minutes=30), backup_type=BackupType.MANUAL, now=NOW, name=None):
    """Build a backup record created ``age`` before ``now``."""
    return Backup(
        id=backup_id,
        name=name or f"sonarr_backup_v4_{backup_id}.zip",
        created_at=now - age,
        type=backup_type,
    )


def write_zip(path, entries):
    """Write a zip archive; a value of None marks a directory entry."""
    with zipfile.ZipFile(path, "w", zipfile.ZIP_DEFLATED) as archive:
        for name, content in entries:
            if content is None:
                archive.writestr(zipfile.ZipInfo(name), "")
            else:
                archive.writestr(zipfile.ZipInfo(name), content)
    return path


@pytest.fixture
def temp_directory():
    """Create a temporary directory for testing."""
    temp_dir = tempfile.mkdtemp()
    yield temp_dir
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def fake_clock():
    """Deterministic clock starting at NOW."""
    return FakeClock()


@pytest.fixture
def mock_client():
    """Mock API client with no backups on the server."""
    client = MagicMock()
    client.list_backups.return_value = []
    return client


@pytest.fixture
def dest_dir(temp_directory):
    """Empty extraction directory."""
    path = Path(temp_directory) / "dest"
    path.mkdir()
    return path


@pytest.fixture
def config_dir(temp_directory):
    """Server config directory with an empty manual backup folder."""
    path = Path(temp_directory) / "config"
    (path / "Backups" / "manual").mkdir(parents=True)
    return path


@pytest.fixture
def settings(config_dir, dest_dir):
    """Settings pointing at the temporary directories."""
    return Settings(
        base_url="http://sonarr:8989",
        api_key="secret-api-key",
        config_dir=config_dir,
        dest_dir=dest_dir,
        delete_backup=True,
        max_age=3600,
    )


@pytest.fixture
def arr_environment(monkeypatch, config_dir, dest_dir):
    """Set the required ARR_* environment variables."""
    test_env = {
        "ARR_URL": "http://sonarr:8989",
        "ARR_API_KEY": "secret-api-key",
        "ARR_CONFIG_DIR": str(config_dir),
        "ARR_DEST_DIR": str(dest_dir),
    }

    for key, value in test_env.items():
        monkeypatch.setenv(key, value)

    return test_env


@pytest.fixture(autouse=True)
def isolate_environment(temp_directory, monkeypatch):
    """Keep host ARR_* settings out of tests and isolate the working directory."""
    for env_var in list(SETTING_ENV_VARS.values()) + ["ARR_BACKUP_CONFIG"]:
        monkeypatch.delenv(env_var, raising=False)
    monkeypatch.chdir(temp_directory)
    return temp_directory


@pytest.fixture(autouse=True)
def reset_logging():
    """Remove handlers installed by setup_logging during a test."""
    yield
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        if any(isinstance(f, SecretRedactingFilter) for f in handler.filters):
            root_logger.removeHandler(handler)
            handler.close()
