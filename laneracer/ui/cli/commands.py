from __future__ import annotations

from pathlib import Path

from game_engine import BEST_KEY
from laneracer.config.loader import load_settings
from laneracer.core.doctor import run_doctor
from laneracer.core.results import load_summary
from laneracer.core.storage import JsonFileStore


def _settings(args):
    return load_settings(width=args.width, height=args.height, seed=args.seed, sfx=args.sfx)


def cmd_play(args):
    settings = _settings(args)
    from laneracer.app import run

    try:
        return run(settings)
    except RuntimeError as exc:
        print(f"[play] {exc}")
        return 1


def cmd_simulate(args):
    settings = _settings(args)
    from laneracer.simulation.runner import run_and_save

    run_and_save(settings, policy=args.policy, n_runs=args.runs, seed=args.seed)
    return 0


def cmd_best(args):
    settings = _settings(args)
    store = JsonFileStore(settings.paths.best_score_json)
    if args.reset:
        store.delete(BEST_KEY)
        print(f"[best] Reset ({settings.paths.best_score_json})")
        return 0
    print(f"[best] {store.get(BEST_KEY)}")
    return 0


def cmd_doctor(args):
    settings = _settings(args)
    checks = run_doctor(settings)
    ok_count = 0
    for chk in checks:
        mark = "OK" if chk.ok else "FAIL"
        print(f"[{mark}] {chk.name}: {chk.detail}")
        ok_count += int(chk.ok)
    print(f"\n{ok_count}/{len(checks)} checks passing")
    return 0 if ok_count == len(checks) else 1


def cmd_report(args):
    settings = _settings(args)
    path = Path(settings.paths.sim_results_json)
    if not path.exists():
        print(f"[report] Missing simulation results: {path}")
        return 1
    data = load_summary(path)
    print(f"\nSIMULATION ({path})")
    print(f"  schema_version: {data.get('schema_version', 'n/a')}")
    print(f"  policy: {data.get('policy', 'n/a')}")
    for key in ("n_runs", "avg_score", "std_score", "min_score", "max_score", "avg_alive", "crash_rate"):
        if key in data:
            print(f"  {key}: {data[key]}")
    return 0
