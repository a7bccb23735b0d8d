"""Shared testing helpers for the quiz_manager test suite."""

from .consoles import error_text, make_output, output_text  # noqa: F401
from .session import (  # noqa: F401
    FakeReadline,
    ScriptedSession,
    scripted_input,
)

__all__ = [
    "FakeReadline",
    "ScriptedSession",
    "error_text",
    "make_output",
    "output_text",
    "scripted_input",
]
