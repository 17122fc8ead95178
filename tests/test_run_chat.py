from __future__ import annotations

import asyncio
import os
import signal
import sys

import httpx
import pytest

from celebchat.manager import ChatManager
from celebchat.states import MessageKind, SendOutcome
from run_chat import interrupt_cancels, parse_args, resolve_persona

from conftest import make_client


def test_role_without_persona_is_rejected(capsys):
    with pytest.raises(SystemExit) as exc_info:
        parse_args(["--role", "Astronaut"])
    assert exc_info.value.code == 2
    assert "--role needs --persona" in capsys.readouterr().err


def test_persona_with_role_builds_custom_persona():
    args = parse_args(["--persona", " Sally Ride ", "--role", "Astronaut"])
    persona = resolve_persona(args.persona, args.role)
    assert (persona.name, persona.role) == ("Sally Ride", "Astronaut")


def test_catalog_persona_is_matched_case_insensitively():
    assert resolve_persona("taylor swift", None).name == "Taylor Swift"
    assert resolve_persona("Nobody Known", None) is None


@pytest.mark.skipif(sys.platform == "win32", reason="needs loop signal handlers")
@pytest.mark.asyncio
async def test_interrupt_cancels_pending_reply(view, credentials, einstein):
    started = asyncio.Event()

    async def hang(request: httpx.Request) -> httpx.Response:
        started.set()
        await asyncio.sleep(60)
        return httpx.Response(200, json={})

    m = ChatManager(view=view, credentials=credentials, client=make_client(hang, timeout=120))
    m.start_chat(einstein)

    with interrupt_cancels(m):
        task = asyncio.create_task(m.send("hello"))
        await started.wait()
        os.kill(os.getpid(), signal.SIGINT)
        outcome = await asyncio.wait_for(task, timeout=5)

    assert outcome is SendOutcome.FAILED
    assert view.texts(MessageKind.SYSTEM)[-1] == "Error: Request cancelled"
    assert m.session.busy is False
