from __future__ import annotations

from typing import Optional, Tuple

from loguru import logger

from .errors import ConcurrentExchangeRejected
from .states import PersonaDescriptor, Speaker, Turn


class Session:
    """Conversation state for one persona: the transcript plus a busy flag.

    A Session is owned by a single ChatManager. The busy flag is the only
    coordination point between exchanges; all mutation happens on one
    event loop so no lock is taken.
    """

    def __init__(self, persona: Optional[PersonaDescriptor] = None) -> None:
        self._persona = persona
        self._turns: list[Turn] = []
        self._busy = False

    @property
    def persona(self) -> Optional[PersonaDescriptor]:
        return self._persona

    @property
    def turns(self) -> Tuple[Turn, ...]:
        return tuple(self._turns)

    @property
    def busy(self) -> bool:
        return self._busy

    def start_session(self, persona: PersonaDescriptor) -> None:
        dropped = len(self._turns)
        self._persona = persona
        self._turns = []
        self._busy = False
        logger.info(f"session_start | persona={persona.name} role={persona.role} dropped_turns={dropped}")

    def record_user_turn(self, text: str) -> bool:
        """Append a user turn. Returns False (nothing to send) for blank text."""
        if not (text or "").strip():
            return False
        self._turns.append(Turn(Speaker.USER, text))
        return True

    def record_persona_turn(self, text: str) -> None:
        self._turns.append(Turn(Speaker.PERSONA, text))

    def commit_exchange(self, user_text: str, persona_text: str) -> None:
        # Both sides land together, only after a successful round trip.
        if self.record_user_turn(user_text):
            self.record_persona_turn(persona_text)
        logger.debug(f"session_commit | turns={len(self._turns)}")

    def try_begin_exchange(self) -> bool:
        if self._busy:
            return False
        self._busy = True
        return True

    def begin_exchange(self) -> None:
        """Raising variant of try_begin_exchange."""
        if not self.try_begin_exchange():
            raise ConcurrentExchangeRejected()

    def end_exchange(self) -> None:
        self._busy = False
