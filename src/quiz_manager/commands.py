"""Command handlers for the quiz shell.

Every handler takes the line session and the raw argument. Handlers run
their steps in order, report any failure on the error channel and then arm
exactly one new prompt, whatever happened. ``quit`` is the only handler that
closes the session instead.
"""

from __future__ import annotations

import logging
import re
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterator, Mapping, Optional, Protocol, Sequence

from rich.text import Text

from .errors import (
    InvalidArgument,
    MissingArgument,
    NotFound,
    QuizError,
    ValidationFailed,
)
from .output import Output
from .store import Quiz, QuizStore

logger = logging.getLogger(__name__)

AUTHORS: Sequence[str] = ("Quiz Manager contributors",)

_INTEGER_PREFIX = re.compile(r"\s*([+-]?\d+)")


class Session(Protocol):
    def prompt(self) -> None: ...

    def question(self, text: str, default: Optional[str] = None) -> str: ...

    def close(self) -> None: ...


Handler = Callable[[Session, Optional[str]], None]


@dataclass(frozen=True)
class CommandSpec:
    """A shell command as listed by ``help``."""

    name: str
    summary: str
    argument: Optional[str] = None
    aliases: tuple[str, ...] = ()

    @property
    def label(self) -> str:
        words = "|".join((*self.aliases, self.name))
        return f"{words} {self.argument}" if self.argument else words


COMMANDS: Sequence[CommandSpec] = (
    CommandSpec("help", "Show this help.", aliases=("h",)),
    CommandSpec("list", "List the stored quizzes."),
    CommandSpec("show", "Show the question and answer of a quiz.", "<id>"),
    CommandSpec("add", "Add a new quiz interactively."),
    CommandSpec("delete", "Delete a quiz.", "<id>"),
    CommandSpec("edit", "Edit a quiz.", "<id>"),
    CommandSpec("test", "Answer the given quiz.", "<id>"),
    CommandSpec(
        "play", "Answer every quiz in random order.", aliases=("p",)
    ),
    CommandSpec("credits", "Show the authors."),
    CommandSpec("quit", "Leave the program.", aliases=("q",)),
)

ALIASES: Mapping[str, str] = {
    word: spec.name
    for spec in COMMANDS
    for word in (spec.name, *spec.aliases)
}


def format_command_table() -> list[str]:
    width = max(len(spec.label) for spec in COMMANDS)
    return [
        f"  {spec.label.ljust(width)}  {spec.summary}" for spec in COMMANDS
    ]


def validate_id(raw: Optional[str]) -> int:
    """Turn a raw ``<id>`` argument into an integer.

    Parsing is permissive: leading whitespace and a sign are accepted and
    anything after the leading digits is ignored, so ``"3abc"`` gives ``3``.
    """

    if raw is None:
        raise MissingArgument()
    match = _INTEGER_PREFIX.match(raw)
    if match is None:
        raise InvalidArgument(raw)
    return int(match.group(1))


def make_question(
    session: Session, text: str, default: Optional[str] = None
) -> str:
    return session.question(text, default=default)


def answers_match(given: str, expected: str) -> bool:
    return given.strip().casefold() == expected.strip().casefold()


class CommandDispatcher:
    def __init__(
        self,
        store: QuizStore,
        output: Output,
        *,
        authors: Sequence[str] = AUTHORS,
    ) -> None:
        self._store = store
        self._out = output
        self._authors = tuple(authors)
        self._handlers: Mapping[str, Handler] = {
            "help": self.cmd_help,
            "list": self.cmd_list,
            "show": self.cmd_show,
            "add": self.cmd_add,
            "delete": self.cmd_delete,
            "edit": self.cmd_edit,
            "test": self.cmd_test,
            "play": self.cmd_play,
            "credits": self.cmd_credits,
            "quit": self.cmd_quit,
        }

    def dispatch(
        self, session: Session, name: str, argument: Optional[str] = None
    ) -> None:
        """Run the handler for ``name`` (or one of its aliases)."""

        if not name:
            session.prompt()
            return
        command = ALIASES.get(name.lower())
        if command is None:
            self._out.errorlog(f"Unknown command: '{name}'")
            self._out.log("Use 'help' to list the available commands.")
            session.prompt()
            return
        logger.debug(
            "Dispatching command",
            extra={"command": command, "argument": argument},
        )
        self._handlers[command](session, argument)

    def cmd_help(
        self, session: Session, argument: Optional[str] = None
    ) -> None:
        with self._reporting(session, "help"):
            self._out.log("Commands:")
            for line in format_command_table():
                self._out.log(line)

    def cmd_list(
        self, session: Session, argument: Optional[str] = None
    ) -> None:
        with self._reporting(session, "list"):
            for quiz in self._store.find_all():
                self._out.log(
                    Text.assemble(
                        self._out.colorize(quiz.id, "magenta"),
                        f": {quiz.question}",
                    )
                )

    def cmd_show(
        self, session: Session, argument: Optional[str] = None
    ) -> None:
        with self._reporting(session, "show"):
            quiz = self._fetch(validate_id(argument))
            self._out.log(self._describe(quiz))

    def cmd_add(
        self, session: Session, argument: Optional[str] = None
    ) -> None:
        with self._reporting(session, "add"):
            question = make_question(session, "Enter a question: ")
            answer = make_question(session, "Enter the answer: ")
            quiz = self._store.create(question, answer)
            self._out.log(
                Text.assemble(
                    self._out.colorize("Added", "magenta"),
                    ": ",
                    self._describe(quiz, with_id=False),
                )
            )

    def cmd_delete(
        self, session: Session, argument: Optional[str] = None
    ) -> None:
        with self._reporting(session, "delete"):
            quiz_id = validate_id(argument)
            if self._store.destroy(quiz_id):
                self._out.log(
                    Text.assemble(
                        "Deleted quiz ",
                        self._out.colorize(quiz_id, "magenta"),
                    )
                )

    def cmd_edit(
        self, session: Session, argument: Optional[str] = None
    ) -> None:
        with self._reporting(session, "edit"):
            quiz = self._fetch(validate_id(argument))
            question = make_question(
                session, "Enter a question: ", default=quiz.question
            )
            answer = make_question(
                session, "Enter the answer: ", default=quiz.answer
            )
            quiz.question = question
            quiz.answer = answer
            saved = self._store.save(quiz)
            self._out.log(
                Text.assemble(
                    "Quiz ",
                    self._out.colorize(saved.id, "magenta"),
                    " changed to: ",
                    self._describe(saved, with_id=False),
                )
            )

    def cmd_test(
        self, session: Session, argument: Optional[str] = None
    ) -> None:
        with self._reporting(session, "test"):
            quiz = self._fetch(validate_id(argument))
            reply = make_question(session, f"{quiz.question}? ")
            if answers_match(reply, quiz.answer):
                self._out.log("Your answer is correct.")
                self._out.biglog("Correct", "green")
            else:
                self._out.log("Your answer is incorrect.")
                self._out.biglog("Incorrect", "red")

    def cmd_play(
        self, session: Session, argument: Optional[str] = None
    ) -> None:
        with self._reporting(session, "play"):
            self._out.log("play is not implemented yet. Stay tuned.", "red")

    def cmd_credits(
        self, session: Session, argument: Optional[str] = None
    ) -> None:
        with self._reporting(session, "credits"):
            self._out.log("Authors:")
            for author in self._authors:
                self._out.log(author, "green")

    def cmd_quit(
        self, session: Session, argument: Optional[str] = None
    ) -> None:
        logger.info("Session closed by user")
        session.close()

    def _fetch(self, quiz_id: int) -> Quiz:
        quiz = self._store.find_by_id(quiz_id)
        if quiz is None:
            raise NotFound(quiz_id)
        return quiz

    def _describe(self, quiz: Quiz, *, with_id: bool = True) -> Text:
        parts: list[object] = []
        if with_id:
            parts += [self._out.colorize(quiz.id, "magenta"), ": "]
        parts += [
            quiz.question,
            " ",
            self._out.colorize("=>", "magenta"),
            " ",
            quiz.answer,
        ]
        return Text.assemble(*parts)  # type: ignore[arg-type]

    @contextmanager
    def _reporting(self, session: Session, command: str) -> Iterator[None]:
        try:
            yield
        except ValidationFailed as exc:
            logger.info(
                "Quiz rejected",
                extra={"command": command, "messages": list(exc.messages)},
            )
            self._out.errorlog("The quiz is invalid:")
            for message in exc.messages:
                self._out.errorlog(f"  {message}")
        except QuizError as exc:
            logger.info(
                "Command failed",
                extra={"command": command, "error": type(exc).__name__},
            )
            self._out.errorlog(str(exc))
        except (EOFError, KeyboardInterrupt):
            logger.info("Input cancelled", extra={"command": command})
            self._out.errorlog("Input cancelled.")
        except Exception as exc:
            logger.exception("Command crashed", extra={"command": command})
            self._out.errorlog(str(exc) or type(exc).__name__)
        finally:
            session.prompt()
