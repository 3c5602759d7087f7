"""Flat key-value persistence for the workout collection and preferences."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Protocol

WORKOUTS_KEY = "workouts"
SORT_BY_KEY = "sortBy"

_KEY_RE = re.compile(r"^[A-Za-z0-9_.-]+$")


def _default_data_dir() -> Path:
    return Path.home() / ".mapty"


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryKeyValueStore:
    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def remove(self, key: str) -> None:
        self.data.pop(key, None)


class FileKeyValueStore:
    """One UTF-8 file per key under ``base_dir``."""

    def __init__(self, base_dir: Path | None = None) -> None:
        self.base_dir = base_dir or _default_data_dir()

    def _path(self, key: str) -> Path:
        if not _KEY_RE.match(key):
            raise ValueError(f"Invalid storage key '{key}'")
        return self.base_dir / key

    def _tmp_path(self, key: str) -> Path:
        path = self._path(key)
        return path.with_name(path.name + ".tmp")

    def get(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._tmp_path(key)
        tmp.write_text(value, encoding="utf-8")
        tmp.replace(path)

    def remove(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)
