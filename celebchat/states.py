from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Speaker(Enum):
    USER = "user"
    PERSONA = "persona"


class MessageKind(Enum):
    USER = "user"
    PERSONA = "persona"
    SYSTEM = "system"


class ExchangeState(Enum):
    IDLE = "idle"
    SENDING = "sending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class SendOutcome(Enum):
    SENT = "sent"
    EMPTY = "empty"
    MISSING_CREDENTIAL = "missing_credential"
    BUSY = "busy"
    FAILED = "failed"


class Screen(Enum):
    SELECTION = "selection"
    CHAT = "chat"


@dataclass(frozen=True)
class PersonaDescriptor:
    name: str
    role: str


@dataclass(frozen=True)
class Turn:
    speaker: Speaker
    text: str


@dataclass(frozen=True)
class InteractionResult:
    correction_needed: bool
    celeb_reply: str
    tutor_feedback: Optional[str] = None
