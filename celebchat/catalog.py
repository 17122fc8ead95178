from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Optional, Tuple

from loguru import logger

from .states import PersonaDescriptor


CATALOG_PATH = Path(__file__).resolve().parent / "data" / "catalog.json"


def make_persona(name: str, role: str) -> Optional[PersonaDescriptor]:
    """Build a persona from free-form input; None unless both fields are non-blank."""
    name = (name or "").strip()
    role = (role or "").strip()
    if not name or not role:
        return None
    return PersonaDescriptor(name=name, role=role)


@lru_cache(maxsize=4)
def load_catalog(path: Path = CATALOG_PATH) -> Tuple[PersonaDescriptor, ...]:
    entries = json.loads(Path(path).read_text(encoding="utf-8"))
    personas = []
    for entry in entries:
        persona = make_persona(entry.get("name", ""), entry.get("role", ""))
        if persona is None:
            logger.warning(f"catalog_skip | entry={entry!r}")
            continue
        personas.append(persona)
    logger.debug(f"catalog_loaded | path={path} count={len(personas)}")
    return tuple(personas)
