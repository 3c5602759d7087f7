"""Ordered in-memory collection of workouts."""

from __future__ import annotations

from typing import Iterable, Iterator

from mapty.workout.model import Workout


class WorkoutStoreError(Exception):
    """Base class for collection invariant violations."""


class WorkoutNotFoundError(WorkoutStoreError, KeyError):
    def __init__(self, workout_id: str) -> None:
        super().__init__(workout_id)
        self.workout_id = workout_id

    def __str__(self) -> str:
        return f"Workout '{self.workout_id}' not found"


class DuplicateIdError(WorkoutStoreError, ValueError):
    def __init__(self, workout_id: str) -> None:
        super().__init__(f"Workout id '{workout_id}' already exists")
        self.workout_id = workout_id


class WorkoutStore:
    """Workouts in canonical order, unique by id."""

    def __init__(self, workouts: Iterable[Workout] = ()) -> None:
        self._items: list[Workout] = []
        for workout in workouts:
            self.add(workout)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Workout]:
        return iter(self.all())

    def __contains__(self, workout_id: object) -> bool:
        return any(item.id == workout_id for item in self._items)

    def all(self) -> tuple[Workout, ...]:
        return tuple(self._items)

    def ids(self) -> list[str]:
        return [item.id for item in self._items]

    def get(self, workout_id: str) -> Workout:
        return self._items[self._index(workout_id)]

    def add(self, workout: Workout) -> None:
        if workout.id in self:
            raise DuplicateIdError(workout.id)
        self._items.append(workout)

    def replace(self, workout_id: str, workout: Workout) -> Workout:
        index = self._index(workout_id)
        if workout.id != workout_id:
            if workout.id in self:
                raise DuplicateIdError(workout.id)
            raise ValueError(
                f"Replacement for '{workout_id}' carries a different id '{workout.id}'"
            )
        previous = self._items[index]
        self._items[index] = workout
        return previous

    def remove(self, workout_id: str) -> Workout:
        return self._items.pop(self._index(workout_id))

    def clear(self) -> None:
        self._items.clear()

    def reorder(self, workouts: Iterable[Workout]) -> None:
        """Adopt ``workouts`` as the canonical order.

        The new sequence must hold exactly the current entities.
        """
        ordered = list(workouts)
        if sorted(w.id for w in ordered) != sorted(self.ids()):
            raise ValueError("Reordered workouts must be a permutation of the collection")
        self._items = ordered

    def _index(self, workout_id: str) -> int:
        for i, item in enumerate(self._items):
            if item.id == workout_id:
                return i
        raise WorkoutNotFoundError(workout_id)
