"""Line-oriented input for the quiz shell.

``LineSession`` wraps a Rich console and ``input()``. It tracks whether a
command prompt is outstanding so the shell never reads a command line that
no handler asked for, and it can pre-fill the editable buffer through
``readline`` when the terminal supports it.
"""

from __future__ import annotations

import sys
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

from rich.console import Console
from rich.text import Text

try:  # readline is unavailable on some platforms (e.g. Windows)
    import readline
except ImportError:  # pragma: no cover - platform dependent
    readline = None  # type: ignore[assignment]

InputProvider = Callable[[Text], str]


class SessionError(RuntimeError):
    """Raised when the shell reads a command without an outstanding prompt."""


class LineSession:
    def __init__(
        self,
        console: Console,
        *,
        prompt_text: str = "quiz > ",
        input_provider: Optional[InputProvider] = None,
        interactive: Optional[bool] = None,
    ) -> None:
        self._console = console
        self._prompt_text = prompt_text
        self._input = input_provider or self._console.input
        if interactive is None:
            interactive = sys.stdin.isatty()
        self._interactive = interactive
        self._pending_prompt = False
        self._prefill: Optional[str] = None
        self.prompt_count = 0
        self.closed = False

    @property
    def awaiting_command(self) -> bool:
        return self._pending_prompt

    def prompt(self) -> None:
        """Arm the command prompt; the shell shows it on the next read."""

        if self.closed:
            return
        self._pending_prompt = True
        self.prompt_count += 1

    def read_command(self) -> str:
        if self.closed:
            raise SessionError("Session is closed.")
        if not self._pending_prompt:
            raise SessionError("No prompt is outstanding.")
        self._pending_prompt = False
        return self._read(Text(self._prompt_text, style="bold"))

    def question(self, text: str, default: Optional[str] = None) -> str:
        """Ask ``text`` and return the trimmed reply.

        ``default`` is placed in the editable buffer first so the user can
        accept or edit it.
        """

        if default is not None:
            self.write(default)
        return self._read(Text(text, style="red")).strip()

    def write(self, text: str) -> None:
        if self._interactive and readline is not None:
            self._prefill = text

    def close(self) -> None:
        self.closed = True
        self._pending_prompt = False

    def _read(self, prompt: Text) -> str:
        prefill, self._prefill = self._prefill, None
        with _prefilled(prefill):
            return self._input(prompt)


@contextmanager
def _prefilled(text: Optional[str]) -> Iterator[None]:
    if text is None or readline is None:
        yield
        return

    def _hook() -> None:
        readline.insert_text(text)
        readline.redisplay()

    readline.set_startup_hook(_hook)
    try:
        yield
    finally:
        readline.set_startup_hook()
