from __future__ import annotations

import asyncio
from typing import Optional

from loguru import logger

from .catalog import make_persona
from .credentials import CredentialStore
from .errors import CelebChatError, ExchangeCancelled, MissingCredential
from .interpreter import interpret_response
from .llm import GeminiClient
from .prompts import compose_prompt
from .session import Session
from .states import ExchangeState, InteractionResult, MessageKind, PersonaDescriptor, Screen, SendOutcome
from .view import ChatView


GENERIC_TUTOR_HINT = "Take another look at your last message. Something could be said more naturally."


class ChatManager:
    """Runs chat exchanges for one Session and drives a ChatView.

    View handlers call into this class; they never touch the Session
    directly. At most one exchange runs at a time, and the user's message
    is only committed to history once the persona has replied.
    """

    def __init__(
        self,
        view: ChatView,
        credentials: CredentialStore,
        client: Optional[GeminiClient] = None,
        session: Optional[Session] = None,
    ) -> None:
        self.view = view
        self.credentials = credentials
        self.client = client or GeminiClient()
        self.session = session or Session()
        self.state = ExchangeState.IDLE
        self.last_state: Optional[ExchangeState] = None
        self._inflight: Optional[asyncio.Future] = None
        self._cancel_requested = False

    # ------------------------------------------------------------------
    # Navigation / settings
    # ------------------------------------------------------------------

    @property
    def has_credential(self) -> bool:
        return self.credentials.has_credential()

    def save_credential(self, key: str) -> bool:
        key = (key or "").strip()
        if not key:
            self.view.notify("Please enter a valid API Key.")
            return False
        self.credentials.save(key)
        self.view.notify("API Key saved!", level="success")
        return True

    def start_chat(self, persona: PersonaDescriptor) -> None:
        self.session.start_session(persona)
        self.state = ExchangeState.IDLE
        self.view.reset_chat(persona)
        self.view.show_screen(Screen.CHAT, persona)

    def start_custom_chat(self, name: str, role: str) -> Optional[PersonaDescriptor]:
        persona = make_persona(name, role)
        if persona is None:
            return None
        self.start_chat(persona)
        return persona

    def return_to_selection(self) -> None:
        self.view.show_screen(Screen.SELECTION)

    def dismiss_tutor_hint(self) -> None:
        self.view.hide_tutor_hint()

    # ------------------------------------------------------------------
    # Exchange
    # ------------------------------------------------------------------

    def _transition(self, state: ExchangeState) -> None:
        self.state = state
        logger.debug(f"chat_state_transition | state={state.value}")

    async def send(self, text: str) -> SendOutcome:
        """Run one exchange: display, request, interpret, commit or roll back."""
        text = (text or "").strip()
        if not text:
            return SendOutcome.EMPTY
        if not self.credentials.has_credential():
            notice = str(MissingCredential())
            logger.warning("chat_send_blocked | reason=missing_credential")
            self.view.notify(notice)
            return SendOutcome.MISSING_CREDENTIAL
        persona = self.session.persona
        if persona is None:
            raise RuntimeError("No persona selected; call start_chat() before send()")
        if not self.session.try_begin_exchange():
            logger.debug("chat_send_dropped | reason=exchange_in_progress")
            return SendOutcome.BUSY

        try:
            self._transition(ExchangeState.SENDING)
            # Display only; history is committed after a successful reply.
            self.view.show_message(MessageKind.USER, text)
            self.view.hide_tutor_hint()
            self.view.show_pending()
            prompt = compose_prompt(persona, self.session.turns, text)
            logger.info(f"chat_exchange_start | persona={persona.name} history={len(self.session.turns)}")

            try:
                raw = await self._request(prompt)
                result = interpret_response(raw)
            except CelebChatError as e:
                self.view.clear_pending()
                self.view.show_message(MessageKind.SYSTEM, f"Error: {e}")
                logger.error(f"chat_exchange_failed | persona={persona.name} | {type(e).__name__}: {e}")
                self._transition(ExchangeState.FAILED)
                return SendOutcome.FAILED

            self.view.clear_pending()
            self._apply(text, result)
            self._transition(ExchangeState.SUCCEEDED)
            return SendOutcome.SENT
        finally:
            self.session.end_exchange()
            self.last_state = self.state
            self._transition(ExchangeState.IDLE)

    def _apply(self, user_text: str, result: InteractionResult) -> None:
        if result.correction_needed:
            self.view.show_tutor_hint(result.tutor_feedback or GENERIC_TUTOR_HINT)
        if result.celeb_reply.strip():
            self.view.show_message(MessageKind.PERSONA, result.celeb_reply)
            self.session.commit_exchange(user_text, result.celeb_reply)
        self._log_turn(result)

    async def _request(self, prompt: str) -> str:
        self._cancel_requested = False
        self._inflight = asyncio.ensure_future(self.client.generate(prompt, self.credentials.value or ""))
        try:
            return await self._inflight
        except asyncio.CancelledError:
            if self._cancel_requested:
                raise ExchangeCancelled()
            raise
        finally:
            self._inflight = None

    def cancel_exchange(self) -> bool:
        """Cancel the in-flight request, if any. The exchange then fails normally."""
        if self._inflight is None or self._inflight.done():
            return False
        self._cancel_requested = True
        self._inflight.cancel()
        logger.info("chat_exchange_cancel_requested")
        return True

    def _log_turn(self, result: InteractionResult) -> None:
        raw = result.celeb_reply or ""
        snippet = raw if len(raw) <= 400 else raw[:400] + "..."
        one_line = " ".join(snippet.split())
        logger.info(
            f"chat_turn | correction={result.correction_needed} "
            f"feedback={'yes' if result.tutor_feedback else 'no'} "
            f"turns={len(self.session.turns)} | reply='{one_line}'"
        )
