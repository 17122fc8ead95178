# tests/conftest.py
# Shared fixtures: a temp-dir credential store, an in-memory view, and a
# Gemini client wired to httpx.MockTransport so no test touches the network.

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest


ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from celebchat.credentials import CredentialStore, KeyValueStore  # noqa: E402
from celebchat.llm import GeminiClient  # noqa: E402
from celebchat.manager import ChatManager  # noqa: E402
from celebchat.states import PersonaDescriptor  # noqa: E402
from celebchat.view import TranscriptView  # noqa: E402


TEST_KEY = "test-key-123"


def gemini_body(text: str) -> Dict[str, Any]:
    return {"candidates": [{"content": {"parts": [{"text": text}], "role": "model"}}]}


def reply_json(celeb_reply: str, correction: bool = False, feedback: Optional[str] = None) -> str:
    return json.dumps({"correctionNeeded": correction, "tutorFeedback": feedback, "celebReply": celeb_reply})


class RecordingHandler:
    """MockTransport handler that replays queued responses and records requests."""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.responses: List[Callable[[httpx.Request], httpx.Response]] = []

    def reply(self, model_text: str) -> "RecordingHandler":
        self.responses.append(lambda req: httpx.Response(200, json=gemini_body(model_text)))
        return self

    def status(self, code: int) -> "RecordingHandler":
        self.responses.append(lambda req: httpx.Response(code, json={"error": {"code": code}}))
        return self

    def fail(self, exc: Exception) -> "RecordingHandler":
        def _raise(req: httpx.Request) -> httpx.Response:
            raise exc
        self.responses.append(_raise)
        return self

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.responses:
            raise AssertionError("No queued response for request")
        return self.responses.pop(0)(request)

    def prompt_of(self, index: int) -> str:
        body = json.loads(self.requests[index].content)
        return body["contents"][0]["parts"][0]["text"]


@pytest.fixture
def einstein() -> PersonaDescriptor:
    return PersonaDescriptor(name="Einstein", role="Physicist")


@pytest.fixture
def kv_store(tmp_path: Path) -> KeyValueStore:
    return KeyValueStore(tmp_path / "store.json")


@pytest.fixture
def credentials(kv_store: KeyValueStore) -> CredentialStore:
    store = CredentialStore(kv_store)
    store.save(TEST_KEY)
    return store


@pytest.fixture
def handler() -> RecordingHandler:
    return RecordingHandler()


def make_client(handler: Callable, timeout: float = 5.0) -> GeminiClient:
    return GeminiClient(
        model="gemini-test",
        api_base="https://example.test/v1beta",
        timeout=timeout,
        transport=httpx.MockTransport(handler),
    )


@pytest.fixture
def client(handler: RecordingHandler) -> GeminiClient:
    return make_client(handler)


@pytest.fixture
def view() -> TranscriptView:
    return TranscriptView()


@pytest.fixture
def manager(view: TranscriptView, credentials: CredentialStore, client: GeminiClient, einstein) -> ChatManager:
    m = ChatManager(view=view, credentials=credentials, client=client)
    m.start_chat(einstein)
    return m
