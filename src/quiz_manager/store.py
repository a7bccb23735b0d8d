"""SQLite persistence for quizzes.

``QuizStore`` is the only owner of quiz rows. Every call opens its own short
session and hands back detached ``Quiz`` objects, so callers may change a
record in memory and pass it to :meth:`QuizStore.save` later.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, Sequence

from sqlalchemy import (
    DateTime,
    Integer,
    String,
    create_engine,
    delete,
    func,
    select,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    Session,
    mapped_column,
    sessionmaker,
)
from sqlalchemy.pool import StaticPool

from .errors import StoreError, ValidationFailed

logger = logging.getLogger(__name__)

SEED_QUIZZES: Sequence[tuple[str, str]] = (
    ("Capital de Italia", "Roma"),
    ("Capital de Francia", "París"),
    ("Capital de España", "Madrid"),
    ("Capital de Portugal", "Lisboa"),
)

EMPTY_QUESTION = "The question must not be empty."
DUPLICATE_QUESTION = "The question already exists."
EMPTY_ANSWER = "The answer must not be empty."

# SQLite INTEGER is a signed 64-bit value.
_MIN_ID = -(2**63)
_MAX_ID = 2**63 - 1


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _storable_id(quiz_id: int) -> bool:
    return _MIN_ID <= quiz_id <= _MAX_ID


class Base(DeclarativeBase):
    pass


class Quiz(Base):
    __tablename__ = "quizzes"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    question: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False
    )
    answer: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )

    def __repr__(self) -> str:
        return f"<Quiz(id={self.id}, question={self.question!r})>"


@dataclass(frozen=True)
class SeedReport:
    """Outcome of :meth:`QuizStore.initialize`."""

    created: bool
    count: int

    def describe(self) -> str:
        if self.created:
            return f"DB created with {self.count} elems"
        return f"DB exists & has {self.count} elems"


class QuizStore:
    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        self._sessions = sessionmaker(engine, expire_on_commit=False)

    @classmethod
    def open(cls, database: Path | str) -> "QuizStore":
        """Open the SQLite file at ``database``; ``":memory:"`` is scratch."""

        if str(database) == ":memory:":
            engine = create_engine(
                "sqlite://",
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        else:
            path = Path(database).expanduser()
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise StoreError(
                    f"Unable to prepare database: {exc}"
                ) from exc
            engine = create_engine(f"sqlite:///{path}")
        return cls(engine)

    def initialize(self, *, seed: bool = True) -> SeedReport:
        """Create the table and insert the sample quizzes when it is empty."""

        try:
            Base.metadata.create_all(self._engine)
        except SQLAlchemyError as exc:
            raise StoreError(f"Unable to prepare database: {exc}") from exc
        count = self.count()
        if count or not seed:
            return SeedReport(created=False, count=count)
        with self._session() as db:
            db.add_all(
                Quiz(question=question, answer=answer)
                for question, answer in SEED_QUIZZES
            )
            db.commit()
        logger.info("Seeded quiz database", extra={"rows": len(SEED_QUIZZES)})
        return SeedReport(created=True, count=len(SEED_QUIZZES))

    def count(self) -> int:
        with self._session() as db:
            return int(db.scalar(select(func.count()).select_from(Quiz)) or 0)

    def find_all(self) -> list[Quiz]:
        with self._session() as db:
            return list(db.scalars(select(Quiz).order_by(Quiz.id)))

    def find_by_id(self, quiz_id: int) -> Quiz | None:
        if not _storable_id(quiz_id):
            return None
        with self._session() as db:
            return db.get(Quiz, quiz_id)

    def create(self, question: str, answer: str) -> Quiz:
        with self._session() as db:
            self._validate(db, question, answer)
            quiz = Quiz(question=question, answer=answer)
            db.add(quiz)
            self._commit(db)
            logger.info("Created quiz", extra={"quiz_id": quiz.id})
            return quiz

    def save(self, quiz: Quiz) -> Quiz:
        """Persist in-place edits made to a previously fetched ``quiz``."""

        with self._session() as db:
            self._validate(db, quiz.question, quiz.answer, quiz_id=quiz.id)
            merged = db.merge(quiz)
            self._commit(db)
            logger.info("Updated quiz", extra={"quiz_id": merged.id})
            return merged

    def destroy(self, quiz_id: int) -> int:
        removed = 0
        if _storable_id(quiz_id):
            with self._session() as db:
                result = db.execute(delete(Quiz).where(Quiz.id == quiz_id))
                db.commit()
                removed = result.rowcount or 0
        logger.info(
            "Deleted quiz", extra={"quiz_id": quiz_id, "removed": removed}
        )
        return removed

    def close(self) -> None:
        self._engine.dispose()

    @contextmanager
    def _session(self) -> Iterator[Session]:
        try:
            with self._sessions() as db:
                yield db
        except SQLAlchemyError as exc:
            raise StoreError(f"Database error: {exc}") from exc

    @staticmethod
    def _validate(
        db: Session,
        question: str,
        answer: str,
        *,
        quiz_id: int | None = None,
    ) -> None:
        messages: list[str] = []
        if not question or not question.strip():
            messages.append(EMPTY_QUESTION)
        else:
            clash = select(Quiz.id).where(Quiz.question == question)
            if quiz_id is not None:
                clash = clash.where(Quiz.id != quiz_id)
            if db.scalar(clash.limit(1)) is not None:
                messages.append(DUPLICATE_QUESTION)
        if not answer or not answer.strip():
            messages.append(EMPTY_ANSWER)
        if messages:
            raise ValidationFailed(messages)

    @staticmethod
    def _commit(db: Session) -> None:
        # The unique index still guards against a row that slipped in
        # between the duplicate check and the commit.
        try:
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            raise ValidationFailed([DUPLICATE_QUESTION]) from exc
