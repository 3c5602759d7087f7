"""Sort keys for the workout list."""

from __future__ import annotations

import math
from typing import Callable, Iterable, Sequence

from mapty.workout.model import Workout

SORT_KEYS = ("date", "distance", "duration", "cadence", "pace", "elevation")
DEFAULT_SORT_KEY = "date"


def _date(workout: Workout) -> float:
    return workout.date.timestamp()


def _distance(workout: Workout) -> float:
    return workout.distance


def _duration(workout: Workout) -> float:
    return workout.duration


def _cadence(workout: Workout) -> float:
    # cycling after every running workout
    return workout.cadence if workout.type == "running" else math.inf


def _pace(workout: Workout) -> float:
    return workout.pace if workout.type == "running" else math.inf


def _elevation(workout: Workout) -> float:
    # running before every cycling workout
    return workout.elevation_gain if workout.type == "cycling" else -math.inf


_SORT_FUNCS: dict[str, Callable[[Workout], float]] = {
    "date": _date,
    "distance": _distance,
    "duration": _duration,
    "cadence": _cadence,
    "pace": _pace,
    "elevation": _elevation,
}


def sort_workouts(workouts: Iterable[Workout], key: str) -> list[Workout]:
    """Return a new ascending ordering of ``workouts`` by ``key``.

    The sort is stable, so equal values keep their previous relative order.
    """
    func = _SORT_FUNCS.get(key)
    if func is None:
        raise ValueError(f"Unknown sort key '{key}'. Use one of: {', '.join(SORT_KEYS)}")
    return sorted(workouts, key=func)


def most_prominent(workouts: Sequence[Workout]) -> Workout | None:
    """Workout the map centers on: the last one in canonical order."""
    return workouts[-1] if workouts else None
