"""Settings loaded from the environment and an optional .env file."""

import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError

from watch_log_agent.show_info import DEFAULT_TVDB_BASE_URL

CREDENTIAL_KEYS = ("OPENAI_API_KEY", "TVDB_TOKEN")


class ConfigError(Exception):
    """Raised when credentials or settings cannot be loaded."""

    pass


class Settings(BaseModel):
    openai_api_key: str = Field(..., min_length=1)
    tvdb_token: str = ""
    tvdb_base_url: str = DEFAULT_TVDB_BASE_URL
    model: str = "gpt-4"
    followup_model: str = "gpt-4-turbo-preview"
    log_path: Path = Path("watching_data.csv")
    log_level: str = "WARNING"
    log_file: Optional[Path] = None


def _load_env_file(path: Path) -> bool:
    """Load KEY=VALUE lines from path into os.environ if not already set. Returns False if path is missing."""
    if not path.exists():
        return False
    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" in line:
            key, _, value = line.partition("=")
            key = key.strip()
            if key and key not in os.environ:
                os.environ[key] = value.strip().strip("\"'")
    return True


def load_settings(env_path: Optional[Path] = None) -> Settings:
    """Read .env (if present) then build Settings from os.environ.

    A missing .env is only an error when the credentials are not already exported.
    """
    env_path = env_path or Path.cwd() / ".env"
    if not _load_env_file(env_path) and not all(os.environ.get(k) for k in CREDENTIAL_KEYS):
        raise ConfigError(f"Error loading .env file: {env_path} not found")

    values = {
        "openai_api_key": os.environ.get("OPENAI_API_KEY", "").strip(),
        "tvdb_token": os.environ.get("TVDB_TOKEN", "").strip(),
        "tvdb_base_url": os.environ.get("TVDB_BASE_URL", "").strip() or DEFAULT_TVDB_BASE_URL,
        "model": os.environ.get("OPENAI_MODEL", "").strip() or "gpt-4",
        "followup_model": os.environ.get("OPENAI_FOLLOWUP_MODEL", "").strip() or "gpt-4-turbo-preview",
        "log_path": os.environ.get("WATCH_LOG_PATH", "").strip() or "watching_data.csv",
        "log_level": os.environ.get("LOG_LEVEL", "").strip() or "WARNING",
        "log_file": os.environ.get("LOG_FILE", "").strip() or None,
    }
    try:
        return Settings.model_validate(values)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings: {e}") from e
