"""Terminal CLI entrypoint for Mapty."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from mapty.core.interfaces import ConfirmGate, FixedLocation, always_confirm
from mapty.core.manager import Outcome, WorkoutManager
from mapty.storage.kv_store import FileKeyValueStore
from mapty.workout.model import WORKOUT_TYPES, Workout, metric_of
from mapty.workout.sorting import SORT_KEYS
from mapty.workout.validation import FormInput


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Mapty workout tracker")
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=None,
        help="Directory holding saved workouts (default: ~/.mapty)",
    )
    parser.add_argument("--lat", type=float, default=None, help="Current latitude")
    parser.add_argument("--lng", type=float, default=None, help="Current longitude")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity",
    )
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("list", help="List saved workouts in canonical order")

    add = sub.add_parser("add", help="Log a new workout at --lat/--lng")
    _add_workout_fields(add, required=True)

    edit = sub.add_parser("edit", help="Edit an existing workout")
    edit.add_argument("id")
    _add_workout_fields(edit, required=False)

    delete = sub.add_parser("delete", help="Delete one workout")
    delete.add_argument("id")
    delete.add_argument("--yes", action="store_true", help="Skip the confirmation prompt")

    delete_all = sub.add_parser("delete-all", help="Delete every workout")
    delete_all.add_argument("--yes", action="store_true", help="Skip the confirmation prompt")

    reset = sub.add_parser("reset", help="Remove all stored workout data")
    reset.add_argument("--yes", action="store_true", help="Skip the confirmation prompt")

    sort = sub.add_parser("sort", help="Reorder workouts and remember the choice")
    sort.add_argument("key", choices=SORT_KEYS)

    web = sub.add_parser("web", help="Launch the web UI (NiceGUI)")
    web.add_argument("--web-host", default="127.0.0.1", help="Host bind for the web UI")
    web.add_argument("--web-port", type=int, default=8088, help="Port for the web UI")
    return parser


def _add_workout_fields(parser: argparse.ArgumentParser, required: bool) -> None:
    parser.add_argument("--type", choices=WORKOUT_TYPES, required=required)
    parser.add_argument("--distance", required=required, help="Distance in km")
    parser.add_argument("--duration", required=required, help="Duration in minutes")
    parser.add_argument("--cadence", default=None, help="Cadence in steps/min (running)")
    parser.add_argument("--elevation", default=None, help="Elevation gain in m (cycling)")


def terminal_confirm(message: str) -> bool:
    try:
        answer = input(f"{message} [y/N] ")
    except EOFError:
        return False
    return answer.strip().lower() in {"y", "yes"}


def format_workout(workout: Workout) -> str:
    if workout.type == "running":
        extra = f"{metric_of(workout):.1f} min/km, {workout.cadence:g} spm"
    else:
        extra = f"{metric_of(workout):.1f} km/h, {workout.elevation_gain:g} m"
    lat, lng = workout.coords
    return (
        f"{workout.id:<12} {workout.description:<24} {workout.distance:g} km "
        f"{workout.duration:g} min | {extra} @ {lat:.5f},{lng:.5f}"
    )


def _report(outcome: Outcome) -> int:
    if outcome.ok:
        if outcome.workout is not None:
            print(format_workout(outcome.workout))
        return 0
    print(outcome.message or "Operation failed", file=sys.stderr)
    return 1


def run_list(manager: WorkoutManager) -> int:
    if not manager.workouts:
        print("No workouts saved")
        return 0
    for workout in manager.workouts:
        print(format_workout(workout))
    return 0


def run_add(manager: WorkoutManager, args: argparse.Namespace) -> int:
    opened = manager.begin_create()
    if not opened.ok:
        return _report(opened)
    return _report(
        manager.submit(
            FormInput(
                type=args.type,
                distance=args.distance,
                duration=args.duration,
                cadence=args.cadence,
                elevation=args.elevation,
            )
        )
    )


def run_edit(manager: WorkoutManager, args: argparse.Namespace) -> int:
    opened = manager.begin_edit(args.id)
    if not opened.ok or opened.form is None:
        return _report(opened)
    current = opened.form

    def pick(new: object, old: object) -> object:
        return old if new is None else new

    outcome = manager.submit(
        FormInput(
            type=args.type or current.type,
            distance=pick(args.distance, current.distance),
            duration=pick(args.duration, current.duration),
            cadence=pick(args.cadence, current.cadence),
            elevation=pick(args.elevation, current.elevation),
        )
    )
    if not outcome.ok:
        manager.cancel()
    return _report(outcome)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 1

    storage = FileKeyValueStore(args.data_dir)
    location = (args.lat, args.lng) if args.lat is not None and args.lng is not None else None

    if args.command == "web":
        from mapty.ui.web_app import run_web_ui

        return run_web_ui(
            storage=storage,
            location=location,
            host=args.web_host,
            port=args.web_port,
        )

    confirm: ConfirmGate = always_confirm if getattr(args, "yes", False) else terminal_confirm
    manager = WorkoutManager(storage, confirm=confirm, location=FixedLocation(location))
    manager.load()

    if args.command == "list":
        return run_list(manager)
    if args.command == "add":
        return run_add(manager, args)
    if args.command == "edit":
        return run_edit(manager, args)
    if args.command == "delete":
        return _report(manager.delete(args.id))
    if args.command == "delete-all":
        return _report(manager.delete_all())
    if args.command == "reset":
        return _report(manager.reset())
    if args.command == "sort":
        outcome = manager.sort(args.key)
        if outcome.ok:
            return run_list(manager)
        return _report(outcome)

    parser.print_help()
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
