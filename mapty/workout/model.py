"""Workout domain models."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Literal, Union
from uuid import uuid4

logger = logging.getLogger(__name__)

WorkoutType = Literal["running", "cycling"]
WORKOUT_TYPES: tuple[WorkoutType, ...] = ("running", "cycling")

Coords = tuple[float, float]
DEFAULT_COORDS: Coords = (0.0, 0.0)

MONTHS = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


def now_utc() -> datetime:
    return datetime.now(tz=timezone.utc)


def new_workout_id() -> str:
    return uuid4().hex[:10]


def _is_finite_number(value: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def valid_coords(coords: object) -> bool:
    return (
        isinstance(coords, (list, tuple))
        and len(coords) == 2
        and all(_is_finite_number(num) for num in coords)
    )


def normalize_coords(coords: object) -> Coords:
    """Return ``coords`` as a ``(lat, lng)`` float pair.

    Anything that is not a two-element sequence of finite numbers falls back to
    ``DEFAULT_COORDS``. The anomaly is logged, never raised.
    """
    if valid_coords(coords):
        lat, lng = coords  # type: ignore[misc]
        return (float(lat), float(lng))
    logger.error("Invalid coords provided to workout: %r", coords)
    return DEFAULT_COORDS


def describe(workout_type: str, when: datetime) -> str:
    return f"{workout_type[:1].upper()}{workout_type[1:]} on {MONTHS[when.month - 1]} {when.day}"


@dataclass(frozen=True)
class Running:
    id: str
    date: datetime
    coords: Coords
    distance: float
    duration: float
    cadence: float
    type: Literal["running"] = field(default="running", init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "coords", normalize_coords(self.coords))

    @property
    def pace(self) -> float:
        # min/km
        return self.duration / self.distance

    @property
    def description(self) -> str:
        return describe(self.type, self.date)


@dataclass(frozen=True)
class Cycling:
    id: str
    date: datetime
    coords: Coords
    distance: float
    duration: float
    elevation_gain: float
    type: Literal["cycling"] = field(default="cycling", init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "coords", normalize_coords(self.coords))

    @property
    def speed(self) -> float:
        # km/h
        return self.distance / (self.duration / 60)

    @property
    def description(self) -> str:
        return describe(self.type, self.date)


Workout = Union[Running, Cycling]


def create_workout(
    workout_type: str,
    coords: object,
    distance: float,
    duration: float,
    extra: float,
    *,
    workout_id: str | None = None,
    date: datetime | None = None,
) -> Workout:
    """Build the variant named by ``workout_type``.

    ``extra`` is the cadence for running and the elevation gain for cycling.
    """
    wid = workout_id or new_workout_id()
    when = date or now_utc()
    if workout_type == "running":
        return Running(
            id=wid,
            date=when,
            coords=coords,  # type: ignore[arg-type]
            distance=distance,
            duration=duration,
            cadence=extra,
        )
    if workout_type == "cycling":
        return Cycling(
            id=wid,
            date=when,
            coords=coords,  # type: ignore[arg-type]
            distance=distance,
            duration=duration,
            elevation_gain=extra,
        )
    raise ValueError(f"Unknown workout type '{workout_type}'")


def extra_field(workout_type: str) -> str:
    """Form field holding the variant-specific input."""
    if workout_type == "running":
        return "cadence"
    if workout_type == "cycling":
        return "elevation"
    raise ValueError(f"Unknown workout type '{workout_type}'")


def extra_of(workout: Workout) -> float:
    if workout.type == "running":
        return workout.cadence
    return workout.elevation_gain


def metric_of(workout: Workout) -> float:
    """Pace (min/km) for running, speed (km/h) for cycling."""
    if workout.type == "running":
        return workout.pace
    return workout.speed


def icon_of(workout_type: str) -> str:
    return "🏃‍♂️" if workout_type == "running" else "🚴‍♀️"
