#!/usr/bin/env python3
"""Headless game simulator — runs the engine under an autopilot, records replay data."""

from game_engine import FPS, RunState, SimulationEngine
from laneracer.core.storage import MemoryStore

# Safety limit: stop if a run exceeds this many simulated seconds
MAX_SECONDS = 180.0

# 8 decisions per second = every FPS/8 frames
DECISION_INTERVAL = max(1, FPS // 8)


class StayPolicy:
    """Never changes lane."""

    name = "stay"

    def decide(self, engine):
        return 0


class DodgePolicy:
    """Heads one lane at a time toward the lane with the most open road ahead."""

    name = "dodge"

    def __init__(self, danger=0.45):
        self.danger = danger

    def decide(self, engine):
        nearest = engine.get_nearest_obstacles()
        lane = engine.player.target_lane
        if nearest[lane] >= self.danger:
            return 0
        best = max(range(len(nearest)), key=lambda i: (nearest[i], -abs(i - lane)))
        if best == lane:
            return 0
        return 1 if best > lane else -1


_POLICIES = {
    "stay": StayPolicy,
    "dodge": DodgePolicy,
}


def load_policy(name):
    try:
        return _POLICIES[name]()
    except KeyError as exc:
        raise ValueError(f"Unknown policy: {name!r}. Expected one of {sorted(_POLICIES)}") from exc


def available_policies():
    return sorted(_POLICIES)


def simulate(policy, seed=0, *, max_seconds=MAX_SECONDS, width=None, height=None, store=None):
    """
    Run one headless game simulation at a fixed 1/FPS step.

    Args:
        policy: object with decide(engine) -> -1, 0 or 1
        seed: random seed for deterministic replay
        max_seconds: simulated-time cap for runs that never crash

    Returns:
        dict: {
            'alive_time': float (simulated seconds survived),
            'frames_survived': int,
            'score': int,
            'crashed': bool,
            'seed': int,
            'frames': list of frame dicts for replay
        }

    Each frame dict is SimulationEngine.encode() plus a 'decision' key.
    """
    kwargs = {}
    if width is not None and height is not None:
        kwargs = {"width": width, "height": height}
    engine = SimulationEngine(seed=seed, store=store if store is not None else MemoryStore(), **kwargs)
    engine.start()

    dt = 1.0 / FPS
    frames = []
    decision = 0
    max_frames = int(max_seconds * FPS)

    while engine.state is RunState.RUNNING and engine.frame < max_frames:
        if engine.frame % DECISION_INTERVAL == 0:
            decision = policy.decide(engine)
            if decision:
                engine.shift_lane(decision)

        # Record every other frame for replay (keeps data manageable)
        if engine.frame % 2 == 0:
            state = engine.encode()
            state["decision"] = decision
            frames.append(state)

        engine.step(dt)

    # Record final frame on death
    if frames and frames[-1].get("frame") != engine.frame:
        final = engine.encode()
        final["decision"] = decision
        frames.append(final)

    crashed = engine.state is RunState.GAMEOVER
    return {
        "alive_time": round(engine.session.elapsed, 4),
        "frames_survived": engine.frame,
        "score": engine.scores.final_score if crashed else int(engine.session.score),
        "crashed": crashed,
        "seed": seed,
        "frames": frames,
    }


def simulate_batch(policy, seeds, **kwargs):
    """Run multiple simulations sequentially with one policy instance."""
    return [simulate(policy, seed, **kwargs) for seed in seeds]


if __name__ == "__main__":
    result = simulate(DodgePolicy(), seed=42)
    print(f"Alive time: {result['alive_time']:.1f} sec, score {result['score']}")
    print(f"Frames recorded: {len(result['frames'])}")
