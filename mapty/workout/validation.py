"""Workout form input parsing and validation."""

from __future__ import annotations

import math
from dataclasses import dataclass

from mapty.workout.model import WORKOUT_TYPES, Workout, extra_of

RUNNING_INPUT_ERROR = "Inputs must be positive numbers!"
CYCLING_INPUT_ERROR = (
    "Distance/Duration must be positive numbers. Elevation cannot be negative."
)


class ValidationError(ValueError):
    """Raised when form input cannot produce a workout."""


@dataclass(frozen=True)
class FormInput:
    """Raw values as typed into the workout form."""

    type: str
    distance: object = None
    duration: object = None
    cadence: object = None
    elevation: object = None


@dataclass(frozen=True)
class ValidInput:
    type: str
    distance: float
    duration: float
    extra: float


def form_from_workout(workout: Workout) -> FormInput:
    if workout.type == "running":
        return FormInput(
            type=workout.type,
            distance=workout.distance,
            duration=workout.duration,
            cadence=extra_of(workout),
        )
    return FormInput(
        type=workout.type,
        distance=workout.distance,
        duration=workout.duration,
        elevation=extra_of(workout),
    )


def parse_number(raw: object) -> float:
    """Coerce a form value to float; unparseable input becomes NaN."""
    if raw is None or isinstance(raw, bool):
        return math.nan
    if isinstance(raw, (int, float)):
        return float(raw)
    text = str(raw).strip()
    if not text:
        return math.nan
    try:
        return float(text)
    except ValueError:
        return math.nan


def validate_form(form: FormInput) -> ValidInput:
    if form.type not in WORKOUT_TYPES:
        raise ValidationError(f"Unknown workout type '{form.type}'")

    distance = parse_number(form.distance)
    duration = parse_number(form.duration)

    if form.type == "running":
        cadence = parse_number(form.cadence)
        values = (distance, duration, cadence)
        if not all(math.isfinite(v) for v in values) or not all(v > 0 for v in values):
            raise ValidationError(RUNNING_INPUT_ERROR)
        return ValidInput(type=form.type, distance=distance, duration=duration, extra=cadence)

    elevation = parse_number(form.elevation)
    values = (distance, duration, elevation)
    # zero elevation is allowed
    if (
        not all(math.isfinite(v) for v in values)
        or not all(v > 0 for v in (distance, duration))
        or elevation < 0
    ):
        raise ValidationError(CYCLING_INPUT_ERROR)
    return ValidInput(type=form.type, distance=distance, duration=duration, extra=elevation)
