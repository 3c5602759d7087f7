from __future__ import annotations

from typing import Any

from mapty.core.interfaces import FixedLocation
from mapty.core.manager import WorkoutManager
from mapty.storage.kv_store import MemoryKeyValueStore
from mapty.ui.web_app import (
    ITEM_ACTION_CLICK,
    ITEM_CLICK,
    LeafletViews,
    _bind_item_actions,
    _detail_rows,
)
from mapty.workout.model import create_workout
from mapty.workout.validation import FormInput


class FakeMarker:
    def __init__(self, latlng: tuple[float, float]) -> None:
        self.latlng = latlng
        self.calls: list[tuple[str, tuple[Any, ...]]] = []

    def run_method(self, name: str, *args: Any) -> None:
        self.calls.append((name, args))


class FakeLeaflet:
    def __init__(self) -> None:
        self.markers: list[FakeMarker] = []
        self.center: tuple[float, float] | None = None
        self.zoom: int | None = None

    def marker(self, *, latlng: tuple[float, float]) -> FakeMarker:
        marker = FakeMarker(latlng)
        self.markers.append(marker)
        return marker

    def remove_layer(self, marker: FakeMarker) -> None:
        self.markers.remove(marker)

    def set_center(self, center: tuple[float, float]) -> None:
        self.center = center

    def set_zoom(self, zoom: int) -> None:
        self.zoom = zoom


def test_views_track_markers_and_hidden_items() -> None:
    leaflet = FakeLeaflet()
    renders: list[int] = []
    manager = WorkoutManager(MemoryKeyValueStore(), location=FixedLocation((10.0, 20.0)))
    views = LeafletViews(leaflet, lambda: manager.workouts, lambda: renders.append(1))  # type: ignore[arg-type]
    manager.views = views

    manager.begin_create()
    created = manager.submit(FormInput(type="running", distance=5, duration=25, cadence=180))
    assert created.workout is not None
    assert [m.latlng for m in leaflet.markers] == [(10.0, 20.0)]
    popup_name, popup_args = leaflet.markers[0].calls[0]
    assert popup_name == "bindPopup"
    assert created.workout.description in popup_args[0]
    assert popup_args[1]["className"] == "running-popup"

    manager.begin_edit(created.workout.id)
    assert views.hidden == {created.workout.id}
    manager.cancel()
    assert views.hidden == set()

    manager.delete(created.workout.id, confirm=lambda _message: True)
    assert leaflet.markers == []
    assert renders

    views.center_on((1.0, 2.0))
    assert leaflet.center == (1.0, 2.0)


def test_reorder_adds_markers_for_loaded_workouts() -> None:
    leaflet = FakeLeaflet()
    workouts = (
        create_workout("running", (1, 1), 5, 25, 180, workout_id="a"),
        create_workout("cycling", (2, 2), 20, 60, 100, workout_id="b"),
    )
    views = LeafletViews(leaflet, lambda: workouts, lambda: None)  # type: ignore[arg-type]

    views.on_reordered(["a", "b"])
    assert len(leaflet.markers) == 2

    views.on_cleared()
    assert leaflet.markers == []


def test_detail_rows_per_variant() -> None:
    run = create_workout("running", (1, 1), 5, 25, 180)
    ride = create_workout("cycling", (1, 1), 20, 60, 150)

    assert ("⚡️", "5.0", "min/km (pace)") in _detail_rows(run)
    assert ("🦶🏼", "180", "spm") in _detail_rows(run)
    assert ("⚡️", "20.0", "km/h") in _detail_rows(ride)
    assert ("⛰", "150", "m") in _detail_rows(ride)


class FakeElement:
    def __init__(self) -> None:
        self.handlers: dict[str, Any] = {}

    def on(self, event: str, handler: Any) -> None:
        self.handlers[event] = handler


def test_item_buttons_do_not_trigger_focus() -> None:
    card, edit_btn, delete_btn = FakeElement(), FakeElement(), FakeElement()
    calls: list[tuple[str, str]] = []
    _bind_item_actions(
        "w1",
        card=card,
        edit_btn=edit_btn,
        delete_btn=delete_btn,
        on_edit=lambda wid: calls.append(("edit", wid)),
        on_delete=lambda wid: calls.append(("delete", wid)),
        on_focus=lambda wid: calls.append(("focus", wid)),
    )

    assert ITEM_ACTION_CLICK.endswith(".stop")
    assert list(edit_btn.handlers) == [ITEM_ACTION_CLICK]
    assert list(delete_btn.handlers) == [ITEM_ACTION_CLICK]
    assert list(card.handlers) == [ITEM_CLICK]

    edit_btn.handlers[ITEM_ACTION_CLICK](None)
    delete_btn.handlers[ITEM_ACTION_CLICK](None)
    card.handlers[ITEM_CLICK](None)
    assert calls == [("edit", "w1"), ("delete", "w1"), ("focus", "w1")]
