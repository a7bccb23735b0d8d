from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Iterator

import pytest

TESTS_DIR = Path(__file__).resolve().parent
ROOT = TESTS_DIR.parent
for extra in (TESTS_DIR, ROOT / "src"):
    path_str = str(extra)
    if path_str not in sys.path:
        sys.path.insert(0, path_str)

from fixtures import ScriptedSession, make_output  # noqa: E402

from quiz_manager.commands import CommandDispatcher  # noqa: E402
from quiz_manager.output import Output  # noqa: E402
from quiz_manager.store import QuizStore  # noqa: E402


@pytest.fixture(autouse=True)
def _reset_package_logger() -> Iterator[None]:
    """Drop handlers the CLI installs so tests stay isolated."""

    yield
    logger = logging.getLogger("quiz_manager")
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture(autouse=True)
def _clear_quiz_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in (
        "QUIZ_MANAGER_HOME",
        "QUIZ_MANAGER_CONFIG",
        "QUIZ_MANAGER_DATABASE",
        "QUIZ_MANAGER_LOG_LEVEL",
    ):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def store(tmp_path: Path) -> Iterator[QuizStore]:
    """An empty store backed by a temporary SQLite file."""

    quiz_store = QuizStore.open(tmp_path / "quizzes.sqlite")
    quiz_store.initialize(seed=False)
    yield quiz_store
    quiz_store.close()


@pytest.fixture
def seeded_store(tmp_path: Path) -> Iterator[QuizStore]:
    quiz_store = QuizStore.open(tmp_path / "seeded.sqlite")
    quiz_store.initialize()
    yield quiz_store
    quiz_store.close()


@pytest.fixture
def output() -> Output:
    return make_output()


@pytest.fixture
def dispatcher(store: QuizStore, output: Output) -> CommandDispatcher:
    return CommandDispatcher(store, output)


@pytest.fixture
def seeded_dispatcher(
    seeded_store: QuizStore, output: Output
) -> CommandDispatcher:
    return CommandDispatcher(seeded_store, output)


@pytest.fixture
def session() -> ScriptedSession:
    return ScriptedSession()
