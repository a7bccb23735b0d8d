"""Error kinds reported by the quiz shell."""

from __future__ import annotations

from typing import Iterable


class QuizError(RuntimeError):
    """Base class for errors a command reports to the user."""


class MissingArgument(QuizError):
    """A command that needs an ``<id>`` was called without one."""

    def __init__(self, name: str = "id") -> None:
        super().__init__(f"Missing parameter <{name}>.")
        self.name = name


class InvalidArgument(QuizError):
    """The ``<id>`` argument is not an integer."""

    def __init__(self, raw: str, name: str = "id") -> None:
        super().__init__(f"The value of parameter <{name}> is not a number.")
        self.raw = raw
        self.name = name


class NotFound(QuizError):
    """No quiz is stored under the requested id."""

    def __init__(self, quiz_id: int) -> None:
        super().__init__(f"There is no quiz with id={quiz_id}.")
        self.quiz_id = quiz_id


class ValidationFailed(QuizError):
    """One or more field constraints rejected a quiz."""

    def __init__(self, messages: Iterable[str]) -> None:
        self.messages = tuple(messages)
        super().__init__("; ".join(self.messages) or "Invalid quiz.")


class StoreError(QuizError):
    """The database failed for a reason other than validation."""


__all__ = [
    "QuizError",
    "MissingArgument",
    "InvalidArgument",
    "NotFound",
    "ValidationFailed",
    "StoreError",
]
