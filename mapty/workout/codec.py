"""JSON encoding of the workout collection."""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Iterable

from mapty.workout.model import WORKOUT_TYPES, Workout, create_workout, extra_of
from mapty.workout.validation import FormInput, ValidationError, validate_form

logger = logging.getLogger(__name__)


class MalformedStorageError(ValueError):
    """Raised when persisted workout data cannot be decoded."""


def workout_to_record(workout: Workout) -> dict[str, Any]:
    record: dict[str, Any] = {
        "id": workout.id,
        "date": workout.date.isoformat(),
        "coords": [workout.coords[0], workout.coords[1]],
        "distance": workout.distance,
        "duration": workout.duration,
        "type": workout.type,
    }
    if workout.type == "running":
        record["cadence"] = extra_of(workout)
    else:
        record["elevationGain"] = extra_of(workout)
    return record


def serialize(workouts: Iterable[Workout]) -> str:
    return json.dumps(
        [workout_to_record(w) for w in workouts], ensure_ascii=True, allow_nan=False
    )


def parse_date(raw: object) -> datetime:
    if not isinstance(raw, str) or not raw.strip():
        raise MalformedStorageError(f"invalid date {raw!r}")
    text = raw.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as exc:
        raise MalformedStorageError(f"invalid date {raw!r}") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _number(record: dict[str, Any], name: str) -> float:
    value = record.get(name)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedStorageError(f"field '{name}' must be a number, got {value!r}")
    return float(value)


def record_to_workout(record: object) -> Workout:
    if not isinstance(record, dict):
        raise MalformedStorageError("workout record must be an object")

    workout_type = record.get("type")
    if workout_type not in WORKOUT_TYPES:
        raise MalformedStorageError(f"unknown workout type {workout_type!r}")
    workout_id = record.get("id")
    if not isinstance(workout_id, str) or not workout_id:
        raise MalformedStorageError(f"invalid id {workout_id!r}")

    extra_name = "cadence" if workout_type == "running" else "elevationGain"
    extra = _number(record, extra_name)
    try:
        valid = validate_form(
            FormInput(
                type=workout_type,
                distance=_number(record, "distance"),
                duration=_number(record, "duration"),
                cadence=extra if workout_type == "running" else None,
                elevation=extra if workout_type == "cycling" else None,
            )
        )
    except ValidationError as exc:
        raise MalformedStorageError(f"out of range values: {exc}") from exc

    workout = create_workout(
        valid.type,
        record.get("coords"),
        valid.distance,
        valid.duration,
        valid.extra,
    )
    # Restore identity after the normal constructor ran.
    return replace(workout, id=workout_id, date=parse_date(record.get("date")))


def deserialize(raw: str | bytes | None) -> list[Workout]:
    """Decode a stored collection.

    Absent or unreadable data yields an empty list. Records that cannot be
    rebuilt are skipped.
    """
    if raw is None:
        return []
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError:
            logger.warning("Stored workouts are not valid UTF-8, starting empty")
            return []
    if not raw.strip():
        return []
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        logger.warning("Stored workouts are not valid JSON (%s), starting empty", exc)
        return []
    if not isinstance(data, list):
        logger.warning("Stored workouts must be a JSON array, starting empty")
        return []

    out: list[Workout] = []
    seen: set[str] = set()
    for i, item in enumerate(data):
        try:
            workout = record_to_workout(item)
        except MalformedStorageError as exc:
            logger.warning("Skipping stored workout %d: %s", i + 1, exc)
            continue
        if workout.id in seen:
            logger.warning("Skipping stored workout %d: duplicate id %s", i + 1, workout.id)
            continue
        seen.add(workout.id)
        out.append(workout)
    return out
