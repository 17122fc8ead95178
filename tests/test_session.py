from __future__ import annotations

import pytest

from celebchat.errors import ConcurrentExchangeRejected
from celebchat.session import Session
from celebchat.states import PersonaDescriptor, Speaker, Turn


def test_user_then_persona_turn_appends_two_in_order(einstein):
    s = Session()
    s.start_session(einstein)
    s.record_persona_turn("Earlier reply")
    before = len(s.turns)

    assert s.record_user_turn("How are you?") is True
    s.record_persona_turn("Relatively well!")

    assert len(s.turns) == before + 2
    assert s.turns[-2:] == (
        Turn(Speaker.USER, "How are you?"),
        Turn(Speaker.PERSONA, "Relatively well!"),
    )


@pytest.mark.parametrize("blank", ["", "   ", "\n\t"])
def test_blank_user_turn_is_a_noop(einstein, blank):
    s = Session(einstein)
    assert s.record_user_turn(blank) is False
    assert s.turns == ()


def test_second_begin_without_end_is_denied():
    s = Session()
    assert s.try_begin_exchange() is True
    assert s.busy is True
    assert s.try_begin_exchange() is False
    s.end_exchange()
    assert s.busy is False
    assert s.try_begin_exchange() is True


def test_end_exchange_is_unconditional():
    s = Session()
    s.end_exchange()
    assert s.busy is False


def test_start_session_twice_discards_previous_turns(einstein):
    curie = PersonaDescriptor(name="Marie Curie", role="Chemist")
    s = Session()
    s.start_session(einstein)
    s.commit_exchange("Hi", "Hello there")
    s.try_begin_exchange()

    s.start_session(curie)

    assert s.turns == ()
    assert s.persona == curie
    assert s.busy is False


def test_commit_exchange_skips_blank_user_text(einstein):
    s = Session(einstein)
    s.commit_exchange("  ", "reply")
    assert s.turns == ()


def test_turns_snapshot_is_immutable(einstein):
    s = Session(einstein)
    s.commit_exchange("Hi", "Hello")
    snapshot = s.turns
    s.commit_exchange("Again", "Sure")
    assert len(snapshot) == 2
    assert len(s.turns) == 4


def test_begin_exchange_raises_when_busy():
    s = Session()
    s.begin_exchange()
    with pytest.raises(ConcurrentExchangeRejected):
        s.begin_exchange()
