"""Interactive command-line manager for question/answer quizzes."""

from .commands import (
    COMMANDS,
    CommandDispatcher,
    CommandSpec,
    answers_match,
    make_question,
    validate_id,
)
from .errors import (
    InvalidArgument,
    MissingArgument,
    NotFound,
    QuizError,
    StoreError,
    ValidationFailed,
)
from .output import Output
from .session import LineSession
from .shell import parse_command_line, run_shell
from .store import Quiz, QuizStore, SeedReport

__all__ = [
    "COMMANDS",
    "CommandDispatcher",
    "CommandSpec",
    "answers_match",
    "make_question",
    "validate_id",
    "InvalidArgument",
    "MissingArgument",
    "NotFound",
    "QuizError",
    "StoreError",
    "ValidationFailed",
    "Output",
    "LineSession",
    "parse_command_line",
    "run_shell",
    "Quiz",
    "QuizStore",
    "SeedReport",
]
