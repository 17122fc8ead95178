from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Optional, Protocol

from .states import MessageKind, PersonaDescriptor, Screen


START_PROMPT = "Start the conversation!"


class ChatView(Protocol):
    """Everything the ChatManager needs from a user interface."""

    def show_screen(self, screen: Screen, persona: Optional[PersonaDescriptor] = None) -> None: ...

    def reset_chat(self, persona: PersonaDescriptor) -> None: ...

    def show_message(self, kind: MessageKind, text: str) -> None: ...

    def show_pending(self) -> None: ...

    def clear_pending(self) -> None: ...

    def show_tutor_hint(self, text: str) -> None: ...

    def hide_tutor_hint(self) -> None: ...

    def notify(self, text: str, level: str = "warning") -> None: ...


@dataclass
class DisplayedMessage:
    kind: MessageKind
    text: str


@dataclass
class Notice:
    text: str
    level: str = "warning"  # "success" | "warning"


@dataclass
class TranscriptView:
    """In-memory view state.

    Holds what is currently on screen. The Streamlit page renders from it
    on every rerun; tests inspect it directly. While an exchange runs, the
    page sets `on_message` so new messages are drawn as they are shown.
    """

    screen: Screen = Screen.SELECTION
    persona: Optional[PersonaDescriptor] = None
    messages: List[DisplayedMessage] = field(default_factory=list)
    pending: bool = False
    tutor_hint: Optional[str] = None
    notices: List[Notice] = field(default_factory=list)
    on_message: Optional[Callable[[DisplayedMessage], None]] = field(default=None, repr=False, compare=False)

    def show_screen(self, screen: Screen, persona: Optional[PersonaDescriptor] = None) -> None:
        self.screen = screen
        if persona is not None:
            self.persona = persona

    def reset_chat(self, persona: PersonaDescriptor) -> None:
        self.persona = persona
        self.messages = [DisplayedMessage(MessageKind.SYSTEM, START_PROMPT)]
        self.pending = False
        self.tutor_hint = None

    def show_message(self, kind: MessageKind, text: str) -> None:
        message = DisplayedMessage(kind, text)
        self.messages.append(message)
        if self.on_message is not None:
            self.on_message(message)

    def show_pending(self) -> None:
        self.pending = True

    def clear_pending(self) -> None:
        self.pending = False

    def show_tutor_hint(self, text: str) -> None:
        self.tutor_hint = text

    def hide_tutor_hint(self) -> None:
        self.tutor_hint = None

    def notify(self, text: str, level: str = "warning") -> None:
        self.notices.append(Notice(text, level))

    def pop_notices(self) -> List[Notice]:
        out, self.notices = self.notices, []
        return out

    def texts(self, kind: Optional[MessageKind] = None) -> List[str]:
        return [m.text for m in self.messages if kind is None or m.kind is kind]
