"""Environment-driven settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

DEFAULT_API_BASE_URL = "http://localhost:3000"
DEFAULT_STORE_FILE = "chat.v1.json"
DEFAULT_HTTP_TIMEOUT = 30.0
DEFAULT_LOG_LEVEL = "WARNING"


@dataclass
class Settings:
    data_dir: str
    store_file: str = DEFAULT_STORE_FILE
    api_base_url: str = DEFAULT_API_BASE_URL
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    log_level: str = DEFAULT_LOG_LEVEL

    @property
    def store_path(self) -> str:
        return str(Path(self.data_dir) / "local" / self.store_file)


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc


def load_settings(env_file: Optional[str] = None) -> Settings:
    """Build settings from the environment, reading ``.env`` without overriding it."""
    load_dotenv(dotenv_path=env_file, override=False)
    return Settings(
        data_dir=os.getenv("FORKCHAT_DATA_DIR") or str(Path.cwd() / ".chats"),
        store_file=os.getenv("FORKCHAT_STORE_FILE") or DEFAULT_STORE_FILE,
        api_base_url=(os.getenv("FORKCHAT_API_BASE_URL") or DEFAULT_API_BASE_URL).rstrip("/"),
        http_timeout=_float_env("FORKCHAT_HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT),
        log_level=(os.getenv("FORKCHAT_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper(),
    )
