from __future__ import annotations

import json
import math
from dataclasses import replace
from datetime import datetime, timezone

import pytest

from mapty.workout.codec import deserialize, serialize
from mapty.workout.model import Running, create_workout

WHEN = datetime(2026, 4, 14, 9, 30, 12, 345000, tzinfo=timezone.utc)


def _collection() -> list:
    return [
        create_workout("running", [10, 20], 5, 25, 180, workout_id="r1", date=WHEN),
        create_workout("cycling", [10.5, 20.25], 20, 60, 150, workout_id="c1", date=WHEN),
    ]


def test_round_trip_restores_fields_and_derived_metrics() -> None:
    original = _collection()
    restored = deserialize(serialize(original))

    assert restored == original
    assert [w.description for w in restored] == [w.description for w in original]
    assert restored[0].pace == 5.0
    assert restored[1].speed == 20.0
    assert restored[0].date == WHEN


def test_serialize_is_idempotent() -> None:
    workouts = _collection()
    assert serialize(workouts) == serialize(workouts)


def test_record_layout() -> None:
    records = json.loads(serialize(_collection()))

    assert records[0] == {
        "id": "r1",
        "date": WHEN.isoformat(),
        "coords": [10.0, 20.0],
        "distance": 5,
        "duration": 25,
        "type": "running",
        "cadence": 180,
    }
    assert records[1]["elevationGain"] == 150
    assert "cadence" not in records[1]


def test_deserialize_accepts_browser_style_dates() -> None:
    raw = json.dumps(
        [
            {
                "id": "1713086400",
                "date": "2024-04-14T09:20:00.000Z",
                "coords": [51.5, -0.09],
                "distance": 5,
                "duration": 25,
                "type": "running",
                "cadence": 180,
                "pace": 5,
                "description": "Running on April 14",
            }
        ]
    )
    (workout,) = deserialize(raw)

    assert isinstance(workout, Running)
    assert workout.id == "1713086400"
    assert workout.date == datetime(2024, 4, 14, 9, 20, tzinfo=timezone.utc)
    assert workout.description == "Running on April 14"


@pytest.mark.parametrize("raw", [None, "", "   ", "not json", "{}", '"workouts"', b"\xff\xfe"])
def test_deserialize_malformed_storage_is_empty(raw: object) -> None:
    assert deserialize(raw) == []  # type: ignore[arg-type]


def test_deserialize_skips_bad_records() -> None:
    good = json.loads(serialize(_collection()))
    raw = json.dumps(
        [
            good[0],
            {"id": "x1", "type": "swimming", "distance": 1, "duration": 1},
            {**good[1], "date": "yesterday"},
            {**good[1], "distance": "far"},
            {**good[0], "id": "r2", "distance": 0},
            {**good[0], "id": "r3", "duration": -3},
            {**good[0], "id": "r4", "cadence": math.nan},
            {**good[1], "id": "c2", "elevationGain": -10},
            "junk",
            {**good[0], "distance": 9},
            good[1],
        ]
    )
    restored = deserialize(raw)

    assert [w.id for w in restored] == ["r1", "c1"]
    assert restored[0].distance == 5


def test_serialize_rejects_non_finite_numbers() -> None:
    workout = create_workout("running", [10, 20], 5, 25, 180, workout_id="r1", date=WHEN)
    with pytest.raises(ValueError):
        serialize([replace(workout, distance=math.nan)])
    with pytest.raises(ValueError):
        serialize([replace(workout, cadence=math.inf)])


def test_deserialize_bytes() -> None:
    workouts = _collection()
    assert deserialize(serialize(workouts).encode("utf-8")) == workouts
