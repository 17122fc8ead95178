"""
Prompt composition for the persona + tutor exchange.

Everything here is pure: the same persona, history and user text always
produce the same prompt string and request payload.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable

from .states import PersonaDescriptor, Speaker, Turn


OUTPUT_CONTRACT = """{
    "correctionNeeded": boolean,
    "tutorFeedback": "string or null",
    "celebReply": "string"
}"""


_PREAMBLE = """You are acting as two entities:
1. A Celebrity Persona: {name} ({role}).
2. An English Tutor for high school students.

Your task:
1. Analyze the user's input: "{user_text}".
2. If the user's English has grammatical errors or is unnatural for a high school level:
   - Create a helpful "tutorFeedback" (hint or correction question).
3. Generate a response as the Celebrity Persona ("celebReply").
   - Keep the persona authentic.
   - Use simple but natural English suitable for a high school learner.

Output strictly valid JSON:
{contract}"""


def build_preamble(persona: PersonaDescriptor, user_text: str) -> str:
    return _PREAMBLE.format(
        name=persona.name,
        role=persona.role,
        user_text=user_text,
        contract=OUTPUT_CONTRACT,
    )


def speaker_label(turn: Turn, persona: PersonaDescriptor) -> str:
    return "User" if turn.speaker is Speaker.USER else persona.name


def format_history(persona: PersonaDescriptor, turns: Iterable[Turn]) -> str:
    """Render turns as `User: ...` / `<PersonaName>: ...` lines, oldest first."""
    return "\n".join(f"{speaker_label(t, persona)}: {t.text}" for t in turns)


def compose_prompt(persona: PersonaDescriptor, turns: Iterable[Turn], user_text: str) -> str:
    # Full history is resent on every turn.
    blocks = [
        build_preamble(persona, user_text),
        f"Conversation History:\n{format_history(persona, turns)}",
        f"User: {user_text}",
    ]
    return "\n\n".join(blocks)


def build_request_payload(prompt: str) -> Dict[str, Any]:
    return {"contents": [{"parts": [{"text": prompt}]}]}


def compose_request(persona: PersonaDescriptor, turns: Iterable[Turn], user_text: str) -> Dict[str, Any]:
    return build_request_payload(compose_prompt(persona, turns, user_text))
