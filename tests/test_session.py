from __future__ import annotations

import pytest
from rich.console import Console

from fixtures import FakeReadline, scripted_input

from quiz_manager import session as session_mod
from quiz_manager.session import LineSession, SessionError


def _console() -> Console:
    return Console(record=True, width=80)


def test_question_returns_trimmed_reply_and_shows_prompt():
    provider = scripted_input(["  Roma  "])
    line_session = LineSession(
        _console(), input_provider=provider, interactive=False
    )

    reply = line_session.question("Capital de Italia? ")

    assert reply == "Roma"
    assert provider.prompts == ["Capital de Italia? "]


def test_read_command_requires_outstanding_prompt():
    line_session = LineSession(
        _console(), input_provider=scripted_input(["list"]), interactive=False
    )

    with pytest.raises(SessionError):
        line_session.read_command()


def test_prompt_arms_a_single_read():
    provider = scripted_input(["list", "show 1"])
    line_session = LineSession(
        _console(),
        prompt_text="quiz > ",
        input_provider=provider,
        interactive=False,
    )

    line_session.prompt()
    assert line_session.awaiting_command is True
    assert line_session.read_command() == "list"
    assert line_session.awaiting_command is False
    assert line_session.prompt_count == 1
    assert provider.prompts == ["quiz > "]
    with pytest.raises(SessionError):
        line_session.read_command()


def test_close_stops_prompting():
    line_session = LineSession(
        _console(), input_provider=scripted_input([]), interactive=False
    )

    line_session.close()
    line_session.prompt()

    assert line_session.closed is True
    assert line_session.prompt_count == 0
    with pytest.raises(SessionError):
        line_session.read_command()


def test_end_of_input_propagates_from_question():
    line_session = LineSession(
        _console(), input_provider=scripted_input([]), interactive=False
    )

    with pytest.raises(EOFError):
        line_session.question("Enter a question: ")


def test_default_prefills_buffer_on_interactive_terminal(monkeypatch):
    fake = FakeReadline()
    monkeypatch.setattr(session_mod, "readline", fake)

    def _provider(prompt):
        assert fake.hook is not None
        fake.hook()
        return fake.inserted[-1] + " edited"

    line_session = LineSession(
        _console(), input_provider=_provider, interactive=True
    )

    reply = line_session.question("Enter a question: ", default="Old text")

    assert reply == "Old text edited"
    assert fake.inserted == ["Old text"]
    assert fake.redisplays == 1
    assert fake.hook is None


def test_prefill_applies_only_to_the_next_read(monkeypatch):
    fake = FakeReadline()
    monkeypatch.setattr(session_mod, "readline", fake)
    hooks = []

    def _provider(prompt):
        hooks.append(fake.hook)
        return "reply"

    line_session = LineSession(
        _console(), input_provider=_provider, interactive=True
    )

    line_session.write("pre-filled")
    line_session.question("first")
    line_session.question("second")

    assert hooks[0] is not None
    assert hooks[1] is None


def test_prefill_is_skipped_when_not_interactive(monkeypatch):
    fake = FakeReadline()
    monkeypatch.setattr(session_mod, "readline", fake)
    hooks = []

    def _provider(prompt):
        hooks.append(fake.hook)
        return "typed"

    line_session = LineSession(
        _console(), input_provider=_provider, interactive=False
    )

    assert line_session.question("Q? ", default="old") == "typed"
    assert hooks == [None]
    assert fake.inserted == []


def test_prefill_is_skipped_without_readline(monkeypatch):
    monkeypatch.setattr(session_mod, "readline", None)
    line_session = LineSession(
        _console(), input_provider=scripted_input(["x"]), interactive=True
    )

    assert line_session.question("Q? ", default="old") == "x"
