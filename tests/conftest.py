"""Pytest configuration and shared fixtures."""

import logging
from datetime import date

import pytest

from watch_log_agent.config import Settings
from watch_log_agent.watch_log import ensure_log_file


@pytest.fixture
def today():
    return date(2026, 3, 1)


@pytest.fixture
def log_path(tmp_path):
    """Watch log with only its header row."""
    path = tmp_path / "watching_data.csv"
    ensure_log_file(path)
    return path


@pytest.fixture
def settings(log_path):
    return Settings(openai_api_key="sk-test", tvdb_token="tvdb-test", log_path=log_path)


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo handlers that client._setup_logging attaches to the package logger."""
    yield
    pkg_logger = logging.getLogger("watch_log_agent")
    for handler in list(pkg_logger.handlers):
        pkg_logger.removeHandler(handler)
        handler.close()
    pkg_logger.propagate = True
    pkg_logger.setLevel(logging.NOTSET)
