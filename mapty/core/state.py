"""Form state of the workout manager."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from mapty.workout.model import Coords

Mode = Literal["idle", "creating", "editing"]


@dataclass
class ManagerState:
    mode: Mode = "idle"
    edit_id: str | None = None
    pending_coords: Coords | None = None
    sort_key: str | None = None
    confirming: bool = False

    def reset_form(self) -> None:
        self.mode = "idle"
        self.edit_id = None
        self.pending_coords = None
