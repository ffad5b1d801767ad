from __future__ import annotations

import importlib.util
from dataclasses import dataclass

from laneracer.config.schema import Settings
from simulator import available_policies


@dataclass(frozen=True)
class Check:
    name: str
    ok: bool
    detail: str


def _has_module(name: str) -> bool:
    return importlib.util.find_spec(name) is not None


def run_doctor(settings: Settings) -> list[Check]:
    checks: list[Check] = []
    checks.append(Check("viewport", settings.width > 0 and settings.height > 0, f"{settings.width}x{settings.height}"))
    checks.append(Check("policy", settings.sim_policy in available_policies(), f"policy={settings.sim_policy}"))
    checks.append(Check("pygame", _has_module("pygame"), "required for the game window, rendering and sound"))
    checks.append(Check("numpy", _has_module("numpy"), "required for audio synthesis and simulation stats"))
    checks.append(Check("pytest", _has_module("pytest"), "optional for running tests"))

    paths = settings.paths
    checks.append(Check("data_dir", paths.data_dir.exists(), str(paths.data_dir)))
    checks.append(Check("results_dir", paths.results_dir.exists(), str(paths.results_dir)))
    return checks
