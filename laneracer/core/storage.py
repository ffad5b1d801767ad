from __future__ import annotations

"""Key/value stores for the persisted best score."""

import json
import os
from pathlib import Path
from typing import Protocol

from laneracer.core.log import get_logger

log = get_logger("storage")


class PersistentStore(Protocol):
    def get(self, key: str) -> int: ...
    def set(self, key: str, value: int) -> None: ...


def _as_count(value) -> int:
    """Coerce a stored value to a non-negative int, 0 if it isn't one."""
    if isinstance(value, bool):
        return 0
    try:
        n = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return 0
    return n if n > 0 else 0


class MemoryStore:
    def __init__(self, initial: dict | None = None):
        self.data = dict(initial or {})

    def get(self, key: str) -> int:
        return _as_count(self.data.get(key, 0))

    def set(self, key: str, value: int) -> None:
        self.data[key] = int(value)


class JsonFileStore:
    """Integers kept in a flat JSON object on disk, read once and cached."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self._cache: dict | None = None

    def _load(self) -> dict:
        if self._cache is not None:
            return self._cache
        data = {}
        if self.path.exists():
            try:
                with open(self.path, "r") as f:
                    data = json.load(f)
            except (OSError, json.JSONDecodeError) as exc:
                log.warning("ignoring unreadable store %s (%s)", self.path, exc)
                data = {}
        self._cache = data if isinstance(data, dict) else {}
        return self._cache

    def _write(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp, "w") as f:
            json.dump(data, f, indent=2)
        os.replace(tmp, self.path)
        self._cache = data

    def get(self, key: str) -> int:
        return _as_count(self._load().get(key, 0))

    def set(self, key: str, value: int) -> None:
        data = dict(self._load())
        data[key] = int(value)
        self._write(data)

    def delete(self, key: str) -> None:
        data = dict(self._load())
        if data.pop(key, None) is not None:
            self._write(data)
