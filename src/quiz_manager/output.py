"""Rich-backed console output: plain log lines, errors and banners."""

from __future__ import annotations

from typing import Optional, Union

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

Renderable = Union[str, Text]


class Output:
    """Normal messages go to ``console``; errors go to ``error_console``.

    Text is never parsed as Rich markup, so quiz content containing square
    brackets prints verbatim. Build coloured fragments with :meth:`colorize`
    and join them with ``Text.assemble``.
    """

    def __init__(
        self,
        console: Optional[Console] = None,
        error_console: Optional[Console] = None,
    ) -> None:
        self.console = console or Console(highlight=False)
        self.error_console = error_console or Console(
            stderr=True, highlight=False
        )

    @staticmethod
    def colorize(text: object, color: Optional[str] = None) -> Text:
        return Text(str(text), style=color or "")

    def log(self, text: Renderable, color: Optional[str] = None) -> None:
        self.console.print(self._as_text(text, color))

    def errorlog(self, text: Renderable) -> None:
        self.error_console.print(
            Text.assemble(("Error: ", "bold red"), self._as_text(text, "red"))
        )

    def biglog(self, text: str, color: str) -> None:
        banner = Text(text.upper(), style=f"bold {color}", justify="center")
        self.console.print(
            Panel(banner, border_style=color, expand=False, padding=(1, 6))
        )

    @staticmethod
    def _as_text(text: Renderable, color: Optional[str]) -> Text:
        if isinstance(text, Text):
            if color:
                text = text.copy()
                text.stylize(color)
            return text
        return Text(str(text), style=color or "")
