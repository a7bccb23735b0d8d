from __future__ import annotations

import pytest

from quiz_manager.errors import StoreError, ValidationFailed
from quiz_manager.store import (
    DUPLICATE_QUESTION,
    EMPTY_ANSWER,
    EMPTY_QUESTION,
    SEED_QUIZZES,
    QuizStore,
)


def test_initialize_seeds_empty_database_once(tmp_path):
    path = tmp_path / "quizzes.sqlite"
    store = QuizStore.open(path)

    first = store.initialize()
    second = store.initialize()

    assert first.created is True
    assert first.describe() == "DB created with 4 elems"
    assert second.created is False
    assert second.describe() == "DB exists & has 4 elems"
    assert [(q.question, q.answer) for q in store.find_all()] == list(
        SEED_QUIZZES
    )
    store.close()


def test_initialize_without_seed_leaves_table_empty(tmp_path):
    store = QuizStore.open(tmp_path / "empty.sqlite")

    report = store.initialize(seed=False)

    assert report.created is False
    assert report.count == 0
    assert store.find_all() == []
    store.close()


def test_data_survives_reopening(tmp_path):
    path = tmp_path / "persist.sqlite"
    store = QuizStore.open(path)
    store.initialize(seed=False)
    store.create("Capital de Suecia", "Estocolmo")
    store.close()

    reopened = QuizStore.open(path)
    report = reopened.initialize()

    assert report.describe() == "DB exists & has 1 elems"
    assert reopened.find_by_id(1).answer == "Estocolmo"
    reopened.close()


def test_in_memory_store_shares_one_database():
    store = QuizStore.open(":memory:")
    store.initialize()

    assert store.count() == 4
    assert store.find_by_id(4).question == "Capital de Portugal"
    store.close()


def test_create_assigns_increasing_ids(store):
    first = store.create("Q1", "A1")
    second = store.create("Q2", "A2")

    assert (first.id, second.id) == (1, 2)
    assert store.count() == 2


def test_ids_are_not_reused_after_delete(store):
    store.create("Q1", "A1")
    doomed = store.create("Q2", "A2")
    store.destroy(doomed.id)

    fresh = store.create("Q3", "A3")

    assert fresh.id == 3


def test_find_by_id_returns_none_when_missing(store):
    assert store.find_by_id(123) is None


def test_ids_outside_sqlite_range_are_absent(store):
    store.create("Q1", "A1")

    assert store.find_by_id(2**63) is None
    assert store.find_by_id(-(2**63) - 1) is None
    assert store.destroy(2**63) == 0
    assert store.count() == 1


def test_create_collects_all_validation_messages(store):
    with pytest.raises(ValidationFailed) as excinfo:
        store.create("   ", "")

    assert excinfo.value.messages == (EMPTY_QUESTION, EMPTY_ANSWER)
    assert store.count() == 0


def test_create_rejects_duplicate_question(store):
    store.create("Capital de Italia", "Roma")

    with pytest.raises(ValidationFailed) as excinfo:
        store.create("Capital de Italia", "Milano")

    assert excinfo.value.messages == (DUPLICATE_QUESTION,)


def test_save_persists_in_place_edits(store):
    quiz = store.create("Capital de Italia", "Roma")
    quiz.answer = "Rome"
    quiz.question = "Capital of Italy"

    saved = store.save(quiz)

    assert saved.id == quiz.id
    reloaded = store.find_by_id(quiz.id)
    assert (reloaded.question, reloaded.answer) == ("Capital of Italy", "Rome")


def test_save_allows_unchanged_question(store):
    quiz = store.create("Capital de Italia", "Roma")
    quiz.answer = "ROMA"

    store.save(quiz)

    assert store.find_by_id(quiz.id).answer == "ROMA"


def test_save_rejects_clash_with_other_record(store):
    store.create("Q1", "A1")
    second = store.create("Q2", "A2")
    second.question = "Q1"
    second.answer = ""

    with pytest.raises(ValidationFailed) as excinfo:
        store.save(second)

    assert excinfo.value.messages == (DUPLICATE_QUESTION, EMPTY_ANSWER)
    assert store.find_by_id(second.id).question == "Q2"


def test_destroy_reports_removed_rows(store):
    quiz = store.create("Q1", "A1")

    assert store.destroy(quiz.id) == 1
    assert store.destroy(quiz.id) == 0
    assert store.find_by_id(quiz.id) is None


def test_database_errors_become_store_errors(tmp_path):
    folder = tmp_path / "not-a-db"
    folder.mkdir()
    (folder / "quizzes.sqlite").mkdir()
    store = QuizStore.open(folder / "quizzes.sqlite")

    with pytest.raises(StoreError):
        store.initialize()
    store.close()


def test_open_reports_unusable_directory(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")

    with pytest.raises(StoreError) as excinfo:
        QuizStore.open(blocker / "sub" / "quizzes.sqlite")

    assert "Unable to prepare database" in str(excinfo.value)
