from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from loguru import logger


DEFAULT_API_BASE = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_MODEL = "gemini-1.5-flash"
DEFAULT_TIMEOUT = 30.0
DEFAULT_STORE_PATH = Path.home() / ".celebchat" / "store.json"


def load_env() -> Optional[Path]:
    """Load the first .env found (project root, then cwd) without overriding the environment."""
    here = Path(__file__).resolve().parents[1]
    for env_path in (here / ".env", Path.cwd() / ".env"):
        if env_path.is_file():
            load_dotenv(dotenv_path=str(env_path), override=False)
            return env_path
    return None


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning(f"config | {name}={raw!r} is not a number; using {default}")
        return default
    if value <= 0:
        logger.warning(f"config | {name} must be positive; using {default}")
        return default
    return value


@dataclass(frozen=True)
class Settings:
    """Runtime configuration.

    Env vars:
      - GEMINI_API_KEY (optional; seeds the credential when the store is empty)
      - GEMINI_MODEL (default: gemini-1.5-flash)
      - GEMINI_API_BASE (default: the public v1beta endpoint)
      - CELEBCHAT_REQUEST_TIMEOUT (seconds; default: 30)
      - CELEBCHAT_STORE_PATH (default: ~/.celebchat/store.json)
      - CELEBCHAT_LOG_LEVEL (default: INFO)
    """

    api_base: str = DEFAULT_API_BASE
    model: str = DEFAULT_MODEL
    request_timeout: float = DEFAULT_TIMEOUT
    store_path: Path = DEFAULT_STORE_PATH
    env_api_key: Optional[str] = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        store = os.getenv("CELEBCHAT_STORE_PATH")
        return cls(
            api_base=(os.getenv("GEMINI_API_BASE") or DEFAULT_API_BASE).rstrip("/"),
            model=os.getenv("GEMINI_MODEL") or DEFAULT_MODEL,
            request_timeout=_float_env("CELEBCHAT_REQUEST_TIMEOUT", DEFAULT_TIMEOUT),
            store_path=Path(store).expanduser() if store else DEFAULT_STORE_PATH,
            env_api_key=(os.getenv("GEMINI_API_KEY") or "").strip() or None,
            log_level=(os.getenv("CELEBCHAT_LOG_LEVEL") or "INFO").upper(),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    env_path = load_env()
    settings = Settings.from_env()
    logger.debug(
        f"settings_loaded | env={env_path} model={settings.model} "
        f"timeout={settings.request_timeout} store={settings.store_path}"
    )
    return settings


def configure_logging(level: Optional[str] = None) -> int:
    """Replace loguru's sinks with one stderr sink at `level` (default: CELEBCHAT_LOG_LEVEL)."""
    logger.remove()
    return logger.add(
        sys.stderr,
        level=(level or get_settings().log_level).upper(),
        format="{time:HH:mm:ss} | {level} | {message}",
    )
