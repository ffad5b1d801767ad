from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Literal

PolicyName = Literal["stay", "dodge"]


@dataclass(frozen=True)
class Paths:
    project_dir: Path
    data_dir: Path
    results_dir: Path

    best_score_json: Path
    sim_results_json: Path

    def ensure_dirs(self) -> None:
        for p in (self.data_dir, self.results_dir):
            p.mkdir(parents=True, exist_ok=True)


@dataclass(frozen=True)
class Settings:
    width: int
    height: int
    fps: int
    title: str
    paths: Paths

    seed: int | None = None
    sfx: bool = True
    sample_rate: int = 22050
    hold_repeat: float = 0.18

    sim_runs: int = 20
    sim_max_seconds: float = 180.0
    sim_policy: str = "dodge"

    def with_overrides(self, **kwargs) -> "Settings":
        return replace(self, **kwargs)
