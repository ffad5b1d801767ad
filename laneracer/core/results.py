from __future__ import annotations

"""Versioned JSON summaries of headless simulation batches."""

import json
from pathlib import Path
from typing import Any

SCHEMA_VERSION = 2
GAME = "laneracer"


def save_summary(path: Path, payload: dict[str, Any]) -> Path:
    """Write payload minus per-frame replay data, stamped with the schema."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    runs = [{k: v for k, v in run.items() if k != "frames"} for run in payload.get("runs", [])]
    data = {"schema_version": SCHEMA_VERSION, "game": GAME, **payload, "runs": runs}
    with open(path, "w") as f:
        json.dump(data, f, indent=2)
    return path


def load_summary(path: Path) -> dict[str, Any]:
    with open(path, "r") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a JSON object, got {type(data).__name__}")
    data.setdefault("schema_version", 0)
    data.setdefault("runs", [])
    return data
