from __future__ import annotations

from pathlib import Path

import config as legacy_config

from .schema import Paths, Settings


def from_legacy_config() -> Settings:
    project_dir = Path(getattr(legacy_config, "PROJECT_DIR", Path(__file__).resolve().parents[2]))
    data_dir = Path(getattr(legacy_config, "DATA_DIR", project_dir / "data"))
    results_dir = Path(getattr(legacy_config, "RESULTS_DIR", project_dir / "results"))
    paths = Paths(
        project_dir=project_dir,
        data_dir=data_dir,
        results_dir=results_dir,
        best_score_json=Path(getattr(legacy_config, "BEST_SCORE_JSON", data_dir / "best_score.json")),
        sim_results_json=Path(getattr(legacy_config, "SIM_RESULTS_JSON", results_dir / "simulation.json")),
    )
    return Settings(
        width=int(getattr(legacy_config, "WINDOW_WIDTH", 480)),
        height=int(getattr(legacy_config, "WINDOW_HEIGHT", 720)),
        fps=int(getattr(legacy_config, "FPS", 60)),
        title=str(getattr(legacy_config, "WINDOW_TITLE", "LANERACER")),
        paths=paths,
        sfx=bool(getattr(legacy_config, "SFX_ENABLED", True)),
        sample_rate=int(getattr(legacy_config, "SAMPLE_RATE", 22050)),
        hold_repeat=float(getattr(legacy_config, "HOLD_REPEAT_SECONDS", 0.18)),
        sim_runs=int(getattr(legacy_config, "SIM_RUNS", 20)),
        sim_max_seconds=float(getattr(legacy_config, "SIM_MAX_SECONDS", 180)),
        sim_policy=str(getattr(legacy_config, "SIM_POLICY", "dodge")),
    )
