from __future__ import annotations

import argparse
import asyncio
import signal
import sys
from contextlib import contextmanager
from typing import Iterator, List, Optional

from loguru import logger

from celebchat.catalog import load_catalog, make_persona
from celebchat.config import configure_logging, get_settings
from celebchat.credentials import CredentialStore, KeyValueStore
from celebchat.manager import ChatManager
from celebchat.states import MessageKind, PersonaDescriptor, Screen


class ConsoleView:
    """Prints chat effects to the terminal."""

    def __init__(self) -> None:
        self.persona_name = "Persona"

    def show_screen(self, screen: Screen, persona: Optional[PersonaDescriptor] = None) -> None:
        if screen is Screen.CHAT and persona is not None:
            self.persona_name = persona.name

    def reset_chat(self, persona: PersonaDescriptor) -> None:
        print(f"--- Chatting with {persona.name} ({persona.role}). Type /quit to leave, Ctrl-C cancels a pending reply. ---")
        print("Start the conversation!")

    def show_message(self, kind: MessageKind, text: str) -> None:
        # The user's own line is already on screen from input().
        if kind is MessageKind.PERSONA:
            print(f"\n{self.persona_name}: {text}\n")
        elif kind is MessageKind.SYSTEM:
            print(f"[system] {text}")

    def show_pending(self) -> None:
        print("...", end="", flush=True)

    def clear_pending(self) -> None:
        print("\r   \r", end="", flush=True)

    def show_tutor_hint(self, text: str) -> None:
        print(f"[tutor] {text}")

    def hide_tutor_hint(self) -> None:
        pass

    def notify(self, text: str, level: str = "warning") -> None:
        print(f"[{level}] {text}")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Chat with a celebrity persona from the terminal")
    p.add_argument("--persona", type=str, help="Persona name (catalog entry or custom, with --role)")
    p.add_argument("--role", type=str, help="Persona role for a custom persona")
    p.add_argument("--list", action="store_true", help="List the built-in personas and exit")
    p.add_argument("--save-key", type=str, help="Save a Gemini API key to the local store and exit")
    p.add_argument("--log-level", type=str, default=None, help="Log level (default: CELEBCHAT_LOG_LEVEL or INFO)")
    args = p.parse_args(argv)
    if args.role and not args.persona:
        p.error("--role needs --persona")
    return args


@contextmanager
def interrupt_cancels(manager: ChatManager) -> Iterator[None]:
    """Route Ctrl-C to manager.cancel_exchange() while a message is in flight."""
    if sys.platform == "win32":
        # No add_signal_handler on Windows event loops.
        yield
        return
    loop = asyncio.get_running_loop()
    loop.add_signal_handler(signal.SIGINT, manager.cancel_exchange)
    try:
        yield
    finally:
        loop.remove_signal_handler(signal.SIGINT)


def resolve_persona(name: Optional[str], role: Optional[str]) -> Optional[PersonaDescriptor]:
    catalog = load_catalog()
    if not name:
        return catalog[0] if catalog else None
    if role:
        return make_persona(name, role)
    for persona in catalog:
        if persona.name.lower() == name.strip().lower():
            return persona
    return None


async def main() -> int:
    args = parse_args()
    settings = get_settings()

    configure_logging(args.log_level)

    if args.list:
        for persona in load_catalog():
            print(f"{persona.name} - {persona.role}")
        return 0

    view = ConsoleView()
    credentials = CredentialStore(KeyValueStore(settings.store_path), fallback=settings.env_api_key)
    manager = ChatManager(view=view, credentials=credentials)

    if args.save_key is not None:
        return 0 if manager.save_credential(args.save_key) else 1

    persona = resolve_persona(args.persona, args.role)
    if persona is None:
        logger.error(f"Unknown persona {args.persona!r}; pass --role for a custom one or --list to see the catalog")
        return 2

    manager.start_chat(persona)
    loop = asyncio.get_running_loop()
    while True:
        try:
            text = await loop.run_in_executor(None, input, "You: ")
        except EOFError:
            break
        if text.strip() == "/quit":
            break
        with interrupt_cancels(manager):
            await manager.send(text)
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
