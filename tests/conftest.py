"""Shared fixtures: every test gets its own database and log directory."""

import pytest

from aitracker.config import TrackerConfig
from aitracker.logging import LogConfig, reset_loggers, set_config
from aitracker.persistence.repository import TrackerRepository
from aitracker.tracker import ProjectTracker


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Keep logs, config and env overrides inside tmp_path."""
    for var in ("AITRACKER_DB_PATH", "AITRACKER_AI_MODEL", "AITRACKER_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("AITRACKER_CONFIG", str(tmp_path / "missing-config.json"))

    set_config(LogConfig(log_dir=tmp_path / "logs"))
    reset_loggers()
    yield
    reset_loggers()


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "tracker.db"


@pytest.fixture
def repo(db_path):
    repository = TrackerRepository(db_path)
    repository.initialize()
    yield repository
    repository.close()


@pytest.fixture
def tracker(repo, db_path):
    t = ProjectTracker(repository=repo, config=TrackerConfig(db_path=db_path))
    yield t
    t.close()


@pytest.fixture
def log_dir(tmp_path):
    return tmp_path / "logs"
