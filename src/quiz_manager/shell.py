"""Read-dispatch loop for the interactive quiz shell."""

from __future__ import annotations

import logging
from typing import Optional

from .commands import CommandDispatcher
from .output import Output
from .session import LineSession

logger = logging.getLogger(__name__)


def parse_command_line(line: str) -> tuple[str, Optional[str]]:
    """Split ``line`` into a lower-cased command word and its argument.

    Only the first argument is kept; handlers take at most one.
    """

    words = line.split()
    if not words:
        return "", None
    argument = words[1] if len(words) > 1 else None
    return words[0].lower(), argument


def run_shell(
    dispatcher: CommandDispatcher,
    session: LineSession,
    output: Output,
) -> int:
    """Prompt once, then hand every line to ``dispatcher`` until ``quit``.

    Handlers re-arm the prompt themselves; the loop only reads when one is
    outstanding. End of input at the command prompt ends the session.
    """

    session.prompt()
    while not session.closed:
        try:
            line = session.read_command()
        except (EOFError, KeyboardInterrupt):
            output.log("")
            logger.info("Input closed; leaving shell")
            session.close()
            break
        name, argument = parse_command_line(line)
        dispatcher.dispatch(session, name, argument)
    output.log("Bye!", "green")
    return 0
