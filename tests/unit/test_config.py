"""Unit tests for watch_log_agent.config."""

import os
from pathlib import Path

import pytest

from watch_log_agent.config import ConfigError, _load_env_file, load_settings

ENV_KEYS = (
    "OPENAI_API_KEY",
    "TVDB_TOKEN",
    "TVDB_BASE_URL",
    "OPENAI_MODEL",
    "OPENAI_FOLLOWUP_MODEL",
    "WATCH_LOG_PATH",
    "LOG_LEVEL",
    "LOG_FILE",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    yield
    # _load_env_file writes os.environ directly; monkeypatch only restores keys it touched.
    for key in ENV_KEYS:
        os.environ.pop(key, None)


class TestLoadEnvFile:
    def test_missing_file(self, tmp_path):
        assert _load_env_file(tmp_path / ".env") is False

    def test_loads_values(self, tmp_path):
        env = tmp_path / ".env"
        env.write_text("# creds\nOPENAI_API_KEY=sk-abc\n\nTVDB_TOKEN = \"tvdb-xyz\"\nnot a pair\n")
        assert _load_env_file(env) is True
        assert os.environ["OPENAI_API_KEY"] == "sk-abc"
        assert os.environ["TVDB_TOKEN"] == "tvdb-xyz"

    def test_existing_env_wins(self, tmp_path, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-from-env")
        env = tmp_path / ".env"
        env.write_text("OPENAI_API_KEY=sk-from-file\n")
        _load_env_file(env)
        assert os.environ["OPENAI_API_KEY"] == "sk-from-env"


class TestLoadSettings:
    def test_defaults(self, tmp_path):
        env = tmp_path / ".env"
        env.write_text("OPENAI_API_KEY=sk-abc\nTVDB_TOKEN=tvdb-xyz\n")
        s = load_settings(env)
        assert s.openai_api_key == "sk-abc"
        assert s.tvdb_token == "tvdb-xyz"
        assert s.tvdb_base_url == "https://api4.thetvdb.com/v4"
        assert s.model == "gpt-4"
        assert s.followup_model == "gpt-4-turbo-preview"
        assert s.log_path == Path("watching_data.csv")
        assert s.log_level == "WARNING"
        assert s.log_file is None

    def test_overrides(self, tmp_path):
        env = tmp_path / ".env"
        env.write_text(
            "OPENAI_API_KEY=sk-abc\nTVDB_TOKEN=t\nOPENAI_MODEL=gpt-4o\n"
            "WATCH_LOG_PATH=/data/log.csv\nLOG_FILE=debug.log\n"
        )
        s = load_settings(env)
        assert s.model == "gpt-4o"
        assert s.log_path == Path("/data/log.csv")
        assert s.log_file == Path("debug.log")

    def test_missing_env_file_is_error(self, tmp_path):
        with pytest.raises(ConfigError) as exc_info:
            load_settings(tmp_path / ".env")
        assert "Error loading .env file" in str(exc_info.value)

    def test_missing_env_file_ok_when_exported(self, tmp_path, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-abc")
        monkeypatch.setenv("TVDB_TOKEN", "tvdb-xyz")
        s = load_settings(tmp_path / ".env")
        assert s.openai_api_key == "sk-abc"

    def test_missing_api_key_is_error(self, tmp_path):
        env = tmp_path / ".env"
        env.write_text("TVDB_TOKEN=tvdb-xyz\n")
        with pytest.raises(ConfigError):
            load_settings(env)
