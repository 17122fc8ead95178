"""
Local key/value store for the API credential.

The store is a small JSON object on disk. Only one key is used by the app,
`gemini_api_key`; other keys are preserved on write.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

from loguru import logger


CREDENTIAL_KEY = "gemini_api_key"


class KeyValueStore:
    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _read_all(self) -> Dict[str, Any]:
        if not self.path.is_file():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"store_unreadable | path={self.path} | {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"store_unreadable | path={self.path} | top-level value is not an object")
            return {}
        return data

    def get(self, key: str) -> Optional[str]:
        value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")


class CredentialStore:
    """Reads the credential at startup and writes it on explicit save.

    `fallback` (usually GEMINI_API_KEY from the environment) is used only
    when nothing has been saved yet; it is never written to disk.
    """

    def __init__(self, store: KeyValueStore, fallback: Optional[str] = None) -> None:
        self._store = store
        saved = store.get(CREDENTIAL_KEY)
        self._value = saved or fallback or None
        source = "store" if saved else ("env" if fallback else "none")
        logger.info(f"credential_loaded | source={source}")

    @property
    def value(self) -> Optional[str]:
        return self._value

    def has_credential(self) -> bool:
        return bool(self._value)

    def save(self, key: str) -> None:
        self._store.set(CREDENTIAL_KEY, key)
        self._value = key
        logger.info(f"credential_saved | path={self._store.path}")
