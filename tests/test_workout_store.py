from __future__ import annotations

from datetime import datetime, timezone

import pytest

from mapty.workout.model import Workout, create_workout
from mapty.workout.store import DuplicateIdError, WorkoutNotFoundError, WorkoutStore

WHEN = datetime(2026, 3, 1, tzinfo=timezone.utc)


def _run(workout_id: str, distance: float = 5) -> Workout:
    return create_workout("running", (1, 2), distance, 25, 180, workout_id=workout_id, date=WHEN)


def test_add_keeps_insertion_order() -> None:
    store = WorkoutStore()
    store.add(_run("a"))
    store.add(_run("b"))
    store.add(_run("c"))

    assert store.ids() == ["a", "b", "c"]
    assert len(store) == 3
    assert "b" in store
    assert "z" not in store


def test_add_duplicate_id_fails() -> None:
    store = WorkoutStore([_run("a")])
    with pytest.raises(DuplicateIdError):
        store.add(_run("a", distance=9))
    assert store.ids() == ["a"]
    assert store.get("a").distance == 5


def test_constructor_rejects_duplicates() -> None:
    with pytest.raises(DuplicateIdError):
        WorkoutStore([_run("a"), _run("a")])


def test_replace_preserves_position() -> None:
    store = WorkoutStore([_run("a"), _run("b"), _run("c")])
    previous = store.replace("b", _run("b", distance=10))

    assert previous.distance == 5
    assert store.ids() == ["a", "b", "c"]
    assert store.get("b").distance == 10


def test_replace_missing_id_fails() -> None:
    store = WorkoutStore([_run("a")])
    with pytest.raises(WorkoutNotFoundError):
        store.replace("x", _run("x"))


def test_replace_with_other_id_fails() -> None:
    store = WorkoutStore([_run("a"), _run("b")])
    with pytest.raises(DuplicateIdError):
        store.replace("a", _run("b"))
    with pytest.raises(ValueError):
        store.replace("a", _run("new"))
    assert store.ids() == ["a", "b"]


def test_remove_and_not_found() -> None:
    store = WorkoutStore([_run("a"), _run("b")])
    removed = store.remove("a")
    assert removed.id == "a"
    assert store.ids() == ["b"]

    with pytest.raises(WorkoutNotFoundError) as info:
        store.remove("a")
    assert info.value.workout_id == "a"
    assert store.ids() == ["b"]


def test_clear_and_all_snapshot() -> None:
    store = WorkoutStore([_run("a"), _run("b")])
    snapshot = store.all()
    assert isinstance(snapshot, tuple)
    assert [w.id for w in store] == [w.id for w in store] == ["a", "b"]

    store.clear()
    assert len(store) == 0
    assert [w.id for w in snapshot] == ["a", "b"]


def test_reorder_requires_permutation() -> None:
    store = WorkoutStore([_run("a"), _run("b")])
    a, b = store.all()

    store.reorder([b, a])
    assert store.ids() == ["b", "a"]

    with pytest.raises(ValueError):
        store.reorder([a])
    with pytest.raises(ValueError):
        store.reorder([a, a])
    assert store.ids() == ["b", "a"]
