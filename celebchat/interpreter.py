from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Dict, Union

from loguru import logger

from .errors import MalformedResponse
from .states import InteractionResult


_LEADING_FENCE = re.compile(r"^```(?:json)?[ \t]*\r?\n?", re.IGNORECASE)
_TRAILING_FENCE = re.compile(r"\r?\n?```$")


@dataclass(frozen=True)
class ParsedReply:
    result: InteractionResult


@dataclass(frozen=True)
class MalformedReply:
    reason: str
    raw: str


ParseOutcome = Union[ParsedReply, MalformedReply]


def strip_fences(text: str) -> str:
    """Remove a leading ```json / ``` marker, a trailing ``` and outer whitespace."""
    s = (text or "").strip()
    s = _LEADING_FENCE.sub("", s, count=1)
    s = _TRAILING_FENCE.sub("", s, count=1)
    return s.strip()


def _validate(obj: Any) -> InteractionResult:
    if not isinstance(obj, dict):
        raise ValueError(f"expected a JSON object, got {type(obj).__name__}")
    data: Dict[str, Any] = obj

    reply = data.get("celebReply")
    if reply is None:
        raise ValueError("celebReply is missing")
    if not isinstance(reply, str):
        raise ValueError("celebReply is not a string")

    correction = bool(data.get("correctionNeeded"))

    # Only celebReply is strict; the tutor fields are coerced.
    feedback = data.get("tutorFeedback")
    if not isinstance(feedback, str):
        feedback = None

    return InteractionResult(correction_needed=correction, celeb_reply=reply, tutor_feedback=feedback)


def parse_response(raw: str) -> ParseOutcome:
    """Parse raw model output into a tagged result. Never raises."""
    cleaned = strip_fences(raw)
    try:
        obj = json.loads(cleaned)
    except ValueError as e:
        logger.warning(f"interpret_failed | reason=invalid_json | {e}")
        return MalformedReply(reason=f"invalid JSON ({e})", raw=raw or "")
    try:
        result = _validate(obj)
    except ValueError as e:
        logger.warning(f"interpret_failed | reason=shape | {e}")
        return MalformedReply(reason=str(e), raw=raw or "")
    return ParsedReply(result=result)


def interpret_response(raw: str) -> InteractionResult:
    """Like parse_response, but raises MalformedResponse instead of returning a tag."""
    outcome = parse_response(raw)
    if isinstance(outcome, MalformedReply):
        raise MalformedResponse(outcome.reason, raw=outcome.raw)
    return outcome.result
