"""Create/edit/delete/sort lifecycle of the workout collection.

``WorkoutManager`` is the only writer of the collection and of the persisted
snapshot. Each transition runs validate -> mutate store -> persist -> notify
views, and reports back through an ``Outcome`` instead of raising.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from mapty.core.interfaces import (
    ConfirmGate,
    FixedLocation,
    LocationProvider,
    NullViewSync,
    ViewSync,
    never_confirm,
)
from mapty.core.state import ManagerState, Mode
from mapty.storage.kv_store import SORT_BY_KEY, WORKOUTS_KEY, KeyValueStore
from mapty.workout.codec import deserialize, serialize
from mapty.workout.model import (
    Coords,
    Workout,
    create_workout,
    new_workout_id,
    now_utc,
    valid_coords,
)
from mapty.workout.sorting import DEFAULT_SORT_KEY, SORT_KEYS, most_prominent, sort_workouts
from mapty.workout.store import WorkoutNotFoundError, WorkoutStore, WorkoutStoreError
from mapty.workout.validation import (
    FormInput,
    ValidationError,
    ValidInput,
    form_from_workout,
    validate_form,
)

logger = logging.getLogger(__name__)

DELETE_PROMPT = "Are you sure you want to delete this workout?"
DELETE_ALL_PROMPT = "Are you sure you want to delete ALL workouts?"
RESET_PROMPT = "This will delete all data. Are you sure?"

NO_LOCATION_MESSAGE = "Please click on the map to set the workout location first!"
FORM_CLOSED_MESSAGE = "Open the form first"
EDIT_IN_PROGRESS_MESSAGE = "Finish or cancel the current edit first"
CONFIRM_PENDING_MESSAGE = "Another action is waiting for confirmation"
DECLINED_MESSAGE = "Cancelled"


@dataclass(frozen=True)
class Outcome:
    ok: bool
    message: str | None = None
    workout: Workout | None = None
    form: FormInput | None = None
    error: Exception | None = None


class WorkoutManager:
    def __init__(
        self,
        storage: KeyValueStore,
        *,
        views: ViewSync | None = None,
        confirm: ConfirmGate = never_confirm,
        location: LocationProvider | None = None,
        id_factory: Callable[[], str] = new_workout_id,
        clock: Callable[[], datetime] = now_utc,
    ) -> None:
        self._storage = storage
        self.views: ViewSync = views or NullViewSync()
        self._confirm = confirm
        self._location = location or FixedLocation(None)
        self._id_factory = id_factory
        self._clock = clock
        self.state = ManagerState()
        self._store = WorkoutStore()

    @property
    def mode(self) -> Mode:
        return self.state.mode

    @property
    def editing_id(self) -> str | None:
        return self.state.edit_id

    @property
    def sort_key(self) -> str | None:
        return self.state.sort_key

    @property
    def workouts(self) -> tuple[Workout, ...]:
        return self._store.all()

    @property
    def prominent(self) -> Workout | None:
        return most_prominent(self._store.all())

    def load(self) -> tuple[Workout, ...]:
        """Restore the collection and re-apply the saved sort preference."""
        self._store = WorkoutStore(deserialize(self._storage.get(WORKOUTS_KEY)))
        self.state = ManagerState()

        saved_key = (self._storage.get(SORT_BY_KEY) or "").strip()
        if saved_key in SORT_KEYS:
            stored_order = self._store.ids()
            self._store.reorder(sort_workouts(self._store.all(), saved_key))
            self.state.sort_key = saved_key
            if self._store.ids() != stored_order:
                self._persist()
        elif saved_key:
            logger.warning("Ignoring unknown saved sort key %r", saved_key)

        logger.info("Loaded %d workouts", len(self._store))
        self._notify("on_reordered", self._store.ids())
        return self._store.all()

    def begin_create(self, location: Coords | None = None) -> Outcome:
        if self.state.confirming:
            return Outcome(False, CONFIRM_PENDING_MESSAGE)
        if self.state.mode == "editing":
            return Outcome(False, EDIT_IN_PROGRESS_MESSAGE)

        coords = location if location is not None else self._location.current_location()
        if coords is None or not valid_coords(coords):
            return Outcome(False, NO_LOCATION_MESSAGE)

        self.state.mode = "creating"
        self.state.edit_id = None
        self.state.pending_coords = (float(coords[0]), float(coords[1]))
        return Outcome(True)

    def begin_edit(self, workout_id: str) -> Outcome:
        if self.state.confirming:
            return Outcome(False, CONFIRM_PENDING_MESSAGE)
        try:
            workout = self._store.get(workout_id)
        except WorkoutNotFoundError as exc:
            return self._abort(exc)

        if self.state.mode == "editing" and self.state.edit_id != workout_id:
            self._close_form()

        self.state.mode = "editing"
        self.state.edit_id = workout_id
        self.state.pending_coords = None
        self._notify("on_hidden", workout_id)
        return Outcome(True, workout=workout, form=form_from_workout(workout))

    def cancel(self) -> Outcome:
        self._close_form()
        return Outcome(True)

    def submit(self, form: FormInput) -> Outcome:
        if self.state.confirming:
            return Outcome(False, CONFIRM_PENDING_MESSAGE)
        if self.state.mode == "idle":
            return Outcome(False, FORM_CLOSED_MESSAGE)

        try:
            valid = validate_form(form)
        except ValidationError as exc:
            return Outcome(False, str(exc), error=exc)

        if self.state.mode == "creating":
            return self._create(valid)
        return self._apply_edit(valid)

    def delete(self, workout_id: str, confirm: ConfirmGate | None = None) -> Outcome:
        if self.state.confirming:
            return Outcome(False, CONFIRM_PENDING_MESSAGE)
        if workout_id not in self._store:
            return self._abort(WorkoutNotFoundError(workout_id))
        if not self._ask(DELETE_PROMPT, confirm):
            return Outcome(False, DECLINED_MESSAGE)

        try:
            removed = self._store.remove(workout_id)
        except WorkoutNotFoundError as exc:
            return self._abort(exc)
        self._persist()
        logger.info("Deleted workout %s", workout_id)
        self._notify("on_deleted", workout_id)
        return Outcome(True, workout=removed)

    def delete_all(self, confirm: ConfirmGate | None = None) -> Outcome:
        if self.state.confirming:
            return Outcome(False, CONFIRM_PENDING_MESSAGE)
        if not self._ask(DELETE_ALL_PROMPT, confirm):
            return Outcome(False, DECLINED_MESSAGE)

        self._store.clear()
        self._persist()
        logger.info("Deleted all workouts")
        self._notify("on_cleared")
        return Outcome(True)

    def reset(self, confirm: ConfirmGate | None = None) -> Outcome:
        """Drop the stored collection entirely and start over."""
        if self.state.confirming:
            return Outcome(False, CONFIRM_PENDING_MESSAGE)
        if not self._ask(RESET_PROMPT, confirm):
            return Outcome(False, DECLINED_MESSAGE)

        self._storage.remove(WORKOUTS_KEY)
        self._store.clear()
        self.state.reset_form()
        logger.info("Reset workout storage")
        self._notify("on_cleared")
        return Outcome(True)

    def sort(self, key: str | None) -> Outcome:
        """Reorder the collection by ``key``; the new order is persisted."""
        if self.state.confirming:
            return Outcome(False, CONFIRM_PENDING_MESSAGE)
        key = key or DEFAULT_SORT_KEY
        try:
            ordered = sort_workouts(self._store.all(), key)
        except ValueError as exc:
            logger.warning("Sort rejected: %s", exc)
            return Outcome(False, str(exc), error=exc)

        self._store.reorder(ordered)
        self.state.sort_key = key
        self._persist()
        self._storage.set(SORT_BY_KEY, key)
        self._notify("on_reordered", self._store.ids())
        return Outcome(True, workout=self.prominent)

    def focus(self, workout_id: str) -> Outcome:
        try:
            workout = self._store.get(workout_id)
        except WorkoutNotFoundError as exc:
            return Outcome(False, str(exc), error=exc)
        return Outcome(True, workout=workout)

    def _create(self, valid: ValidInput) -> Outcome:
        workout = create_workout(
            valid.type,
            self.state.pending_coords,
            valid.distance,
            valid.duration,
            valid.extra,
            workout_id=self._id_factory(),
            date=self._clock(),
        )
        try:
            self._store.add(workout)
        except WorkoutStoreError as exc:
            return self._abort(exc)
        self._persist()
        self.state.reset_form()
        logger.info("Created %s workout %s", workout.type, workout.id)
        self._notify("on_created", workout)
        return Outcome(True, workout=workout)

    def _apply_edit(self, valid: ValidInput) -> Outcome:
        edit_id = self.state.edit_id or ""
        try:
            original = self._store.get(edit_id)
            workout = create_workout(
                valid.type,
                original.coords,
                valid.distance,
                valid.duration,
                valid.extra,
                workout_id=original.id,
                date=original.date,
            )
            self._store.replace(edit_id, workout)
        except WorkoutStoreError as exc:
            return self._abort(exc)
        self._persist()
        self.state.reset_form()
        logger.info("Updated workout %s", workout.id)
        self._notify("on_updated", workout)
        self._notify("on_unhidden", workout.id)
        return Outcome(True, workout=workout)

    def _ask(self, message: str, confirm: ConfirmGate | None) -> bool:
        gate = confirm or self._confirm
        self.state.confirming = True
        try:
            return bool(gate(message))
        finally:
            self.state.confirming = False

    def _close_form(self) -> None:
        edit_id = self.state.edit_id if self.state.mode == "editing" else None
        self.state.reset_form()
        if edit_id is not None and edit_id in self._store:
            self._notify("on_unhidden", edit_id)

    def _abort(self, exc: WorkoutStoreError) -> Outcome:
        logger.error("Workout operation aborted: %s", exc)
        self._close_form()
        return Outcome(False, str(exc), error=exc)

    def _persist(self) -> None:
        self._storage.set(WORKOUTS_KEY, serialize(self._store.all()))

    def _notify(self, event: str, *args: object) -> None:
        try:
            getattr(self.views, event)(*args)
        except Exception:
            logger.exception("View sync %s failed", event)
