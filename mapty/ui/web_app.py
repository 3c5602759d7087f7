"""NiceGUI web UI for Mapty: workout list, Leaflet map and entry form."""

from __future__ import annotations

import logging
from typing import Any, Callable, Sequence

from nicegui import events, ui

from mapty.core.interfaces import FixedLocation
from mapty.core.manager import (
    DELETE_ALL_PROMPT,
    DELETE_PROMPT,
    Outcome,
    WorkoutManager,
)
from mapty.storage.kv_store import FileKeyValueStore
from mapty.workout.model import Coords, Workout, icon_of, metric_of
from mapty.workout.sorting import DEFAULT_SORT_KEY, SORT_KEYS
from mapty.workout.validation import FormInput

logger = logging.getLogger(__name__)

MAP_ZOOM_LEVEL = 17
FALLBACK_CENTER: Coords = (51.505, -0.09)
ITEM_CLICK = "click"
ITEM_ACTION_CLICK = "click.stop"


def _fmt_number(value: float, digits: int = 1) -> str:
    return f"{value:.{digits}f}"


def _popup_text(workout: Workout) -> str:
    return f"{icon_of(workout.type)} {workout.description}"


def _detail_rows(workout: Workout) -> list[tuple[str, str, str]]:
    rows = [
        (icon_of(workout.type), f"{workout.distance:g}", "km"),
        ("⏱", f"{workout.duration:g}", "min"),
    ]
    if workout.type == "running":
        rows.append(("⚡️", _fmt_number(metric_of(workout)), "min/km (pace)"))
        rows.append(("🦶🏼", f"{workout.cadence:g}", "spm"))
    else:
        rows.append(("⚡️", _fmt_number(metric_of(workout)), "km/h"))
        rows.append(("⛰", f"{workout.elevation_gain:g}", "m"))
    return rows


def _bind_item_actions(
    workout_id: str,
    *,
    card: Any,
    edit_btn: Any,
    delete_btn: Any,
    on_edit: Callable[[str], Any],
    on_delete: Callable[[str], Any],
    on_focus: Callable[[str], Any],
) -> None:
    # Button clicks must not reach the card, or focusing would run as well.
    edit_btn.on(ITEM_ACTION_CLICK, lambda _e: on_edit(workout_id))
    delete_btn.on(ITEM_ACTION_CLICK, lambda _e: on_delete(workout_id))
    card.on(ITEM_CLICK, lambda _e: on_focus(workout_id))


class LeafletViews:
    """Keeps the workout list and the map markers in step with the manager."""

    def __init__(
        self,
        leaflet: ui.leaflet,
        workouts: Callable[[], Sequence[Workout]],
        render_list: Callable[[], None],
    ) -> None:
        self._map = leaflet
        self._workouts = workouts
        self._render_list = render_list
        self._markers: dict[str, Any] = {}
        self.hidden: set[str] = set()

    def on_created(self, workout: Workout) -> None:
        self._add_marker(workout)
        self._render_list()

    def on_updated(self, workout: Workout) -> None:
        self._remove_marker(workout.id)
        self._add_marker(workout)
        self._render_list()

    def on_deleted(self, workout_id: str) -> None:
        self._remove_marker(workout_id)
        self.hidden.discard(workout_id)
        self._render_list()

    def on_cleared(self) -> None:
        for workout_id in list(self._markers):
            self._remove_marker(workout_id)
        self.hidden.clear()
        self._render_list()

    def on_reordered(self, ordered_ids: Sequence[str]) -> None:
        known = set(ordered_ids)
        for workout_id in [wid for wid in self._markers if wid not in known]:
            self._remove_marker(workout_id)
        for workout in self._workouts():
            if workout.id not in self._markers:
                self._add_marker(workout)
        self._render_list()

    def on_hidden(self, workout_id: str) -> None:
        self.hidden.add(workout_id)
        self._render_list()

    def on_unhidden(self, workout_id: str) -> None:
        self.hidden.discard(workout_id)
        self._render_list()

    def center_on(self, coords: Coords) -> None:
        self._map.set_center(coords)
        self._map.set_zoom(MAP_ZOOM_LEVEL)

    def _add_marker(self, workout: Workout) -> None:
        marker = self._map.marker(latlng=workout.coords)
        marker.run_method(
            "bindPopup",
            _popup_text(workout),
            {
                "maxWidth": 250,
                "minWidth": 100,
                "autoClose": False,
                "closeOnClick": False,
                "className": f"{workout.type}-popup",
            },
        )
        marker.run_method("openPopup")
        self._markers[workout.id] = marker

    def _remove_marker(self, workout_id: str) -> None:
        marker = self._markers.pop(workout_id, None)
        if marker is None:
            logger.warning("No marker to remove for workout %s", workout_id)
            return
        self._map.remove_layer(marker)


def run_web_ui(
    *,
    storage: FileKeyValueStore | None = None,
    location: Coords | None = None,
    host: str = "127.0.0.1",
    port: int = 8088,
) -> int:
    manager = WorkoutManager(
        storage or FileKeyValueStore(),
        location=FixedLocation(location),
    )

    ui.add_head_html(
        """
        <style>
          .workout--running { border-left: 5px solid #00c46a; }
          .workout--cycling { border-left: 5px solid #ffb545; }
          .running-popup .leaflet-popup-content-wrapper { border-left: 5px solid #00c46a; }
          .cycling-popup .leaflet-popup-content-wrapper { border-left: 5px solid #ffb545; }
        </style>
        """
    )

    with ui.row().classes("w-full h-screen no-wrap gap-0"):
        with ui.column().classes("w-[40%] h-full p-4 gap-3 overflow-auto"):
            ui.label("MAPTY").classes("text-xl font-semibold tracking-wide")
            with ui.row().classes("w-full items-end gap-2"):
                sort_select = ui.select(
                    {key: key.capitalize() for key in SORT_KEYS},
                    value=DEFAULT_SORT_KEY,
                    label="Sort by",
                ).classes("min-w-[140px]")
                delete_all_btn = ui.button("Delete all").props("color=negative outline")

            with ui.card().classes("w-full") as form_card:
                with ui.row().classes("w-full items-end gap-2"):
                    type_select = ui.select(
                        {"running": "Running", "cycling": "Cycling"},
                        value="running",
                        label="Type",
                    )
                    distance_input = ui.number("Distance (km)", min=0)
                    duration_input = ui.number("Duration (min)", min=0)
                    cadence_input = ui.number("Cadence (step/min)", min=0)
                    elevation_input = ui.number("Elev Gain (m)", min=0)
                with ui.row().classes("w-full justify-end gap-2"):
                    cancel_btn = ui.button("Cancel").props("outline")
                    submit_btn = ui.button("OK").props("color=primary")
            form_card.set_visibility(False)
            elevation_input.set_visibility(False)

            workout_list = ui.column().classes("w-full gap-2")

        center = location or FALLBACK_CENTER
        leaflet = ui.leaflet(center=center, zoom=MAP_ZOOM_LEVEL).classes("w-[60%] h-full")

    with ui.dialog() as confirm_dialog, ui.card():
        confirm_label = ui.label("")
        with ui.row().classes("w-full justify-end gap-2"):
            ui.button("No", on_click=lambda: confirm_dialog.submit(False)).props("outline")
            ui.button("Yes", on_click=lambda: confirm_dialog.submit(True)).props(
                "color=negative"
            )

    def render_list() -> None:
        workout_list.clear()
        with workout_list:
            # newest (last) on top
            for workout in reversed(manager.workouts):
                if workout.id in views.hidden:
                    continue
                with ui.card().classes(
                    f"w-full cursor-pointer workout--{workout.type}"
                ) as card:
                    ui.label(workout.description).classes("text-base font-semibold")
                    with ui.row().classes("gap-4"):
                        for icon, value, unit in _detail_rows(workout):
                            ui.label(f"{icon} {value} {unit}").classes("text-sm")
                    with ui.row().classes("gap-2"):
                        edit_btn = ui.button("Edit").props("flat dense")
                        delete_btn = ui.button("Delete").props("flat dense color=negative")
                _bind_item_actions(
                    workout.id,
                    card=card,
                    edit_btn=edit_btn,
                    delete_btn=delete_btn,
                    on_edit=on_edit,
                    on_delete=on_delete,
                    on_focus=on_focus,
                )

    views = LeafletViews(leaflet, lambda: manager.workouts, render_list)
    manager.views = views

    async def ask(message: str) -> bool:
        confirm_label.text = message
        return bool(await confirm_dialog)

    def report(outcome: Outcome) -> None:
        if not outcome.ok and outcome.message:
            ui.notify(outcome.message, color="negative")

    def clear_inputs() -> None:
        for field in (distance_input, duration_input, cadence_input, elevation_input):
            field.value = None

    def show_form(edit: bool) -> None:
        submit_btn.text = "Save Changes" if edit else "OK"
        form_card.set_visibility(True)
        distance_input.run_method("focus")

    def hide_form() -> None:
        clear_inputs()
        form_card.set_visibility(False)
        submit_btn.text = "OK"

    def toggle_extra_field() -> None:
        running = type_select.value == "running"
        cadence_input.set_visibility(running)
        elevation_input.set_visibility(not running)

    def on_map_click(e: events.GenericEventArguments) -> None:
        latlng = e.args.get("latlng") or {}
        outcome = manager.begin_create((latlng.get("lat"), latlng.get("lng")))
        report(outcome)
        if outcome.ok:
            show_form(edit=False)

    def on_edit(workout_id: str) -> None:
        outcome = manager.begin_edit(workout_id)
        report(outcome)
        if not outcome.ok or outcome.form is None:
            return
        form = outcome.form
        type_select.value = form.type
        distance_input.value = form.distance
        duration_input.value = form.duration
        cadence_input.value = form.cadence
        elevation_input.value = form.elevation
        toggle_extra_field()
        show_form(edit=True)

    def on_submit() -> None:
        outcome = manager.submit(
            FormInput(
                type=str(type_select.value),
                distance=distance_input.value,
                duration=duration_input.value,
                cadence=cadence_input.value,
                elevation=elevation_input.value,
            )
        )
        report(outcome)
        if manager.mode == "idle":
            hide_form()

    def on_cancel() -> None:
        manager.cancel()
        hide_form()

    async def on_delete(workout_id: str) -> None:
        answer = await ask(DELETE_PROMPT)
        outcome = manager.delete(workout_id, confirm=lambda _message: answer)
        if answer:
            report(outcome)

    async def on_delete_all() -> None:
        answer = await ask(DELETE_ALL_PROMPT)
        outcome = manager.delete_all(confirm=lambda _message: answer)
        if answer:
            report(outcome)

    def on_focus(workout_id: str) -> None:
        outcome = manager.focus(workout_id)
        if outcome.ok and outcome.workout is not None:
            views.center_on(outcome.workout.coords)

    def on_sort() -> None:
        outcome = manager.sort(str(sort_select.value or DEFAULT_SORT_KEY))
        report(outcome)
        if outcome.ok and outcome.workout is not None:
            views.center_on(outcome.workout.coords)

    manager.load()
    sort_select.value = manager.sort_key or DEFAULT_SORT_KEY
    top = manager.prominent
    if top is not None:
        views.center_on(top.coords)

    leaflet.on("map-click", on_map_click)
    type_select.on_value_change(lambda _: toggle_extra_field())
    sort_select.on_value_change(lambda _: on_sort())
    submit_btn.on_click(on_submit)
    cancel_btn.on_click(on_cancel)
    delete_all_btn.on_click(on_delete_all)

    ui.run(host=host, port=port, reload=False, title="Mapty")
    return 0
