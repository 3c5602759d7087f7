"""Capabilities the workout manager expects from its surroundings."""

from __future__ import annotations

from typing import Callable, Protocol, Sequence

from mapty.workout.model import Coords, Workout

ConfirmGate = Callable[[str], bool]


def always_confirm(_message: str) -> bool:
    return True


def never_confirm(_message: str) -> bool:
    return False


class LocationProvider(Protocol):
    def current_location(self) -> Coords | None: ...


class FixedLocation:
    def __init__(self, coords: Coords | None) -> None:
        self._coords = coords

    def current_location(self) -> Coords | None:
        return self._coords


class ViewSync(Protocol):
    def on_created(self, workout: Workout) -> None: ...

    def on_updated(self, workout: Workout) -> None: ...

    def on_deleted(self, workout_id: str) -> None: ...

    def on_cleared(self) -> None: ...

    def on_reordered(self, ordered_ids: Sequence[str]) -> None: ...

    def on_hidden(self, workout_id: str) -> None: ...

    def on_unhidden(self, workout_id: str) -> None: ...


class NullViewSync:
    """View sync that ignores every notification."""

    def on_created(self, workout: Workout) -> None:
        pass

    def on_updated(self, workout: Workout) -> None:
        pass

    def on_deleted(self, workout_id: str) -> None:
        pass

    def on_cleared(self) -> None:
        pass

    def on_reordered(self, ordered_ids: Sequence[str]) -> None:
        pass

    def on_hidden(self, workout_id: str) -> None:
        pass

    def on_unhidden(self, workout_id: str) -> None:
        pass
