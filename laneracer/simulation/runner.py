from __future__ import annotations

"""Batch simulation runner (package-native)."""

import random
import time
from typing import Any

import numpy as np

from laneracer.config.schema import Settings
from laneracer.core.results import save_summary
from simulator import load_policy, simulate


def run_simulations(
    settings: Settings,
    *,
    policy: str | None = None,
    n_runs: int | None = None,
    seed: int | None = None,
) -> dict[str, Any]:
    """Run repeated headless games under one autopilot and aggregate metrics."""
    policy_name = policy or settings.sim_policy
    autopilot = load_policy(policy_name)
    n_runs = n_runs or settings.sim_runs
    if n_runs <= 0:
        raise ValueError("n_runs must be > 0")

    seeds = random.Random(seed).sample(range(100_000), n_runs)
    runs: list[dict[str, Any]] = []
    for i, run_seed in enumerate(seeds, start=1):
        runs.append(simulate(
            autopilot,
            run_seed,
            max_seconds=settings.sim_max_seconds,
            width=settings.width,
            height=settings.height,
        ))
        if i % 5 == 0 or i == n_runs:
            avg_so_far = sum(r["score"] for r in runs) / len(runs)
            print(f"  {i}/{n_runs} runs complete (running avg score: {avg_so_far:.0f})")

    scores = [r["score"] for r in runs]
    alive = [r["alive_time"] for r in runs]
    return {
        "policy": policy_name,
        "n_runs": n_runs,
        "avg_score": float(np.mean(scores)),
        "std_score": float(np.std(scores)),
        "min_score": int(np.min(scores)),
        "max_score": int(np.max(scores)),
        "avg_alive": float(np.mean(alive)),
        "crash_rate": float(np.mean([r["crashed"] for r in runs])),
        "runs": runs,
    }


def run_and_save(settings: Settings, **kwargs) -> dict[str, Any]:
    """Run a batch, print a short report and save the versioned summary."""
    print("\n" + "=" * 50)
    print(f"SIMULATION: {kwargs.get('policy') or settings.sim_policy} autopilot")
    print("=" * 50)
    start = time.time()
    results = run_simulations(settings, **kwargs)
    print(f"  Time: {time.time() - start:.1f}s")
    print(
        f"  avg score = {results['avg_score']:.0f} (+/- {results['std_score']:.0f}), "
        f"avg alive = {results['avg_alive']:.1f}s, crash rate = {results['crash_rate']:.0%}"
    )
    path = save_summary(settings.paths.sim_results_json, results)
    print(f"  Saved: {path}")
    return results
