"""Tests for game_engine.py — geometry, player, spawner, collisions, scoring and lifecycle."""

import sys
from pathlib import Path

import pytest

# Ensure project root is on sys.path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from game_engine import (
    BARRIER, VEHICLE, BASE_SPEED, MAX_DT, SPAWN_CLEARANCE, SPAWN_GAP,
    Box, Obstacle, ObstacleSpawner, PlayerController, RunSession, RunState,
    RunStateMachine, ScoreKeeper, SimulationEngine, WorldGeometry,
    extra_spawn_chance, find_collision, spawn_interval,
)
from laneracer.core.storage import MemoryStore


class ScriptedRandom:
    """Random source that replays a fixed list of floats."""

    def __init__(self, values):
        self.values = list(values)

    def random(self):
        return self.values.pop(0)


class RecordingAudio:
    def __init__(self):
        self.cues = []

    def lane_changed(self):
        self.cues.append("lane_changed")

    def ui_click(self):
        self.cues.append("ui_click")

    def crashed(self):
        self.cues.append("crashed")


def _obstacle_on_player(engine, kind=VEHICLE):
    p = engine.player
    return Obstacle(kind, p.target_lane, p.x, p.y, 40, 70)


class TestWorldGeometry:
    def test_lane_centers_evenly_spaced(self):
        """Lane centers are strictly increasing and evenly spaced."""
        g = WorldGeometry(480, 720)
        gaps = [b - a for a, b in zip(g.lane_centers, g.lane_centers[1:])]
        assert all(gap > 0 for gap in gaps)
        assert gaps[0] == pytest.approx(gaps[1])
        assert gaps[0] == pytest.approx(g.lane_width)

    def test_road_is_centered(self):
        """Road band is centered, so the middle lane sits on the viewport center."""
        g = WorldGeometry(480, 720)
        assert g.road_left == pytest.approx(480 - g.road_right)
        assert g.lane_centers[1] == pytest.approx(240)
        assert g.road_left < g.lane_centers[0] < g.lane_centers[-1] < g.road_right

    def test_recompute_is_idempotent(self):
        """Recomputing with the same size changes nothing."""
        g = WorldGeometry(480, 720)
        before = (list(g.lane_centers), g.road_left, g.top_y, g.bottom_y)
        g.recompute(480, 720)
        assert (g.lane_centers, g.road_left, g.top_y, g.bottom_y) == before

    def test_resize_rederives_positions(self):
        """Obstacles keep their lane across a resize; x follows the new centers."""
        e = SimulationEngine(480, 720, seed=1)
        e.obstacles.append(Obstacle(BARRIER, 2, e.geometry.lane_centers[2], 200, 50, 50))
        e.resize(900, 600)
        assert e.obstacles[0].lane == 2
        assert e.obstacles[0].x == pytest.approx(e.geometry.lane_centers[2])
        assert e.player.x == pytest.approx(e.geometry.lane_centers[e.player.target_lane])
        assert e.player.y + e.player.h < e.geometry.bottom_y


class TestPlayerController:
    def test_player_initial_state(self):
        """Player starts in the middle lane, on its center."""
        c = PlayerController(WorldGeometry())
        assert c.player.lane == c.player.target_lane == 1
        assert c.player.x == pytest.approx(c.geometry.lane_centers[1])

    def test_shift_lane_clamps(self):
        """Target lane never leaves [0, lane_count - 1]."""
        c = PlayerController(WorldGeometry())
        for delta in (-1, -1, -1, 1, 1, 1, 1, -1, 1, 1):
            c.shift_lane(delta)
            assert 0 <= c.player.target_lane <= 2
        assert c.player.target_lane == 2

    def test_shift_lane_reports_change(self):
        """shift_lane returns False at a bound, True otherwise; logical lane follows instantly."""
        c = PlayerController(WorldGeometry())
        assert c.shift_lane(-1) is True
        assert c.player.lane == 0
        assert c.shift_lane(-1) is False
        assert c.player.lane == 0

    def test_advance_converges_without_overshoot(self):
        """Distance to the target center shrinks every step and never overshoots."""
        c = PlayerController(WorldGeometry())
        c.shift_lane(1)
        target = c.geometry.lane_centers[2]
        dist = abs(target - c.player.x)
        for _ in range(60):
            c.advance(1 / 60)
            assert c.player.x <= target
            new_dist = abs(target - c.player.x)
            assert new_dist < dist
            dist = new_dist
        assert dist < 0.5

    def test_advance_large_dt_snaps(self):
        """dt * 14 >= 1 lands exactly on the target."""
        c = PlayerController(WorldGeometry())
        c.shift_lane(-1)
        c.advance(0.2)
        assert c.player.x == pytest.approx(c.geometry.lane_centers[0])


class TestDifficulty:
    def test_spawn_interval_endpoints(self):
        """Interval ramps from 0.95 to 0.42 over 70 seconds, then holds."""
        assert spawn_interval(0) == pytest.approx(0.95)
        assert spawn_interval(35) == pytest.approx(0.685)
        assert spawn_interval(70) == pytest.approx(0.42)
        assert spawn_interval(500) == pytest.approx(0.42)

    def test_spawn_interval_monotonic(self):
        """Interval is non-increasing and stays within [0.42, 0.95]."""
        values = [spawn_interval(t / 4) for t in range(0, 400)]
        assert all(b <= a for a, b in zip(values, values[1:]))
        assert all(0.42 - 1e-9 <= v <= 0.95 + 1e-9 for v in values)

    def test_extra_spawn_chance(self):
        """Extra-spawn probability is clamped to [0, 0.35]."""
        assert extra_spawn_chance(320) == 0
        assert extra_spawn_chance(510) == pytest.approx(0.1)
        assert extra_spawn_chance(5000) == pytest.approx(0.35)

    def test_session_advance(self):
        """Speed grows by acceleration * dt, score by speed * dt * 0.06."""
        s = RunSession()
        s.advance(0.5)
        assert s.elapsed == pytest.approx(0.5)
        assert s.speed == pytest.approx(BASE_SPEED + 16 * 0.5)
        assert s.score == pytest.approx(s.speed * 0.5 * 0.06)


class TestObstacleSpawner:
    def test_spawn_vehicle(self):
        """Lane and kind come from the random source; spawn sits just above the road top."""
        g = WorldGeometry()
        sp = ObstacleSpawner(g, ScriptedRandom([0.5, 0.1]))
        obstacles = []
        o = sp.try_spawn(obstacles)
        assert obstacles == [o]
        assert (o.kind, o.lane) == (VEHICLE, 1)
        assert o.x == pytest.approx(g.lane_centers[1])
        assert o.y == pytest.approx(g.top_y - o.h - SPAWN_GAP)
        assert o.w == pytest.approx(46 * g.scale(0.85, 1.2))

    def test_spawn_barrier(self):
        """A kind draw >= 0.72 yields a barrier."""
        sp = ObstacleSpawner(WorldGeometry(), ScriptedRandom([0.0, 0.9]))
        o = sp.try_spawn([])
        assert (o.kind, o.lane) == (BARRIER, 0)

    def test_spacing_rule_rejects(self):
        """A lane with an obstacle inside the spawn region rejects the attempt."""
        g = WorldGeometry()
        sp = ObstacleSpawner(g, ScriptedRandom([0.5, 0.1]))
        blocker = Obstacle(VEHICLE, 1, g.lane_centers[1], g.top_y + 50, 40, 70)
        obstacles = [blocker]
        assert sp.try_spawn(obstacles) is None
        assert obstacles == [blocker]
        assert sp.dropped == 1

    def test_spacing_rule_allows_at_clearance(self):
        """An obstacle exactly SPAWN_CLEARANCE below the road top no longer blocks."""
        g = WorldGeometry()
        sp = ObstacleSpawner(g, ScriptedRandom([0.5, 0.1]))
        obstacles = [Obstacle(VEHICLE, 1, g.lane_centers[1], g.top_y + SPAWN_CLEARANCE, 40, 70)]
        assert sp.try_spawn(obstacles) is not None
        assert len(obstacles) == 2

    def test_other_lanes_do_not_block(self):
        """Only obstacles in the chosen lane count for spacing."""
        g = WorldGeometry()
        sp = ObstacleSpawner(g, ScriptedRandom([0.0, 0.1]))
        obstacles = [Obstacle(VEHICLE, 1, g.lane_centers[1], g.top_y, 40, 70)]
        assert sp.try_spawn(obstacles).lane == 0

    def test_rejected_spawn_consumes_credit(self):
        """The timer is decremented even when the spacing rule drops the spawn."""
        g = WorldGeometry()
        sp = ObstacleSpawner(g, ScriptedRandom([0.5, 0.1]))
        s = RunSession(spawn_timer=0.9)
        obstacles = [Obstacle(VEHICLE, 1, g.lane_centers[1], g.top_y, 40, 70)]
        spawned = sp.tick(s, obstacles, 0.1)
        assert spawned == []
        assert len(obstacles) == 1
        assert s.spawn_timer == pytest.approx(0.05)

    def test_extra_spawn_after_warmup(self):
        """Past 18 s at high speed a second attempt can happen in the same tick."""
        sp = ObstacleSpawner(WorldGeometry(), ScriptedRandom([0.0, 0.1, 0.2, 0.99, 0.9]))
        s = RunSession(elapsed=20.0, speed=1000.0, spawn_timer=0.96)
        obstacles = []
        spawned = sp.tick(s, obstacles, 0.0)
        assert [(o.lane, o.kind) for o in spawned] == [(0, VEHICLE), (2, BARRIER)]

    def test_no_extra_spawn_before_warmup(self):
        """Before 18 s no extra draw is made at all."""
        sp = ObstacleSpawner(WorldGeometry(), ScriptedRandom([0.0, 0.1]))
        s = RunSession(elapsed=5.0, speed=5000.0, spawn_timer=0.96)
        assert len(sp.tick(s, [], 0.0)) == 1

    def test_motion_and_despawn(self):
        """Obstacles move by speed * dt and are dropped past height + 120."""
        g = WorldGeometry(480, 720)
        sp = ObstacleSpawner(g, ScriptedRandom([]))
        near_bottom = Obstacle(VEHICLE, 0, 0, 839, 40, 70)
        top = Obstacle(VEHICLE, 1, 0, 0, 40, 70)
        obstacles = [near_bottom, top]
        sp.advance(obstacles, 100.0, 0.01)
        assert obstacles == [top]
        assert top.y == pytest.approx(1.0)


class TestCollision:
    def test_box_touching_is_not_overlap(self):
        """Edges that merely touch do not collide."""
        assert not Box(0, 0, 10, 10).overlaps(Box(10, 0, 10, 10))
        assert not Box(0, 0, 10, 10).overlaps(Box(0, 10, 10, 10))
        assert Box(0, 0, 10, 10).overlaps(Box(9, 9, 10, 10))

    def test_find_collision_first_in_order(self):
        """With several overlaps the first obstacle in the collection wins."""
        e = SimulationEngine(seed=1)
        a, b = _obstacle_on_player(e), _obstacle_on_player(e, BARRIER)
        assert find_collision(e.player, [a, b]) is a
        assert find_collision(e.player, [b, a]) is b

    def test_inset_allows_near_miss(self):
        """Boxes that overlap only within the insets do not collide."""
        e = SimulationEngine(seed=1)
        p = e.player
        o = Obstacle(VEHICLE, p.target_lane, p.x, p.y - 70 + 11, 40, 70)
        assert find_collision(p, [o]) is None

    def test_adjacent_lane_is_safe(self):
        """An obstacle in the next lane at the same height does not collide."""
        e = SimulationEngine(seed=1)
        g, p = e.geometry, e.player
        o = Obstacle(VEHICLE, 2, g.lane_centers[2], p.y, 46, 76)
        assert find_collision(p, [o]) is None


class TestScoreKeeper:
    def test_best_is_max_across_runs(self):
        """Crash scores 50, 30, 80 leave a best of 80."""
        store = MemoryStore()
        k = ScoreKeeper(store)
        for score in (50, 30, 80):
            k.on_crash(score)
        assert k.get_best() == 80

    def test_best_never_decreases(self):
        """A lower finalized score does not overwrite the best."""
        k = ScoreKeeper(MemoryStore())
        k.on_crash(50)
        assert k.on_crash(30) == 30
        assert k.final_score == 30
        assert k.get_best() == 50

    def test_score_truncated(self):
        """Finalized scores are truncated to integers."""
        k = ScoreKeeper(MemoryStore())
        assert k.on_crash(49.99) == 49
        assert k.get_best() == 49

    def test_invalid_best_reads_zero(self):
        """A corrupt stored best is treated as 0."""
        k = ScoreKeeper(MemoryStore({"laneracer:best": "abc"}))
        assert k.get_best() == 0
        k.on_crash(5)
        assert k.get_best() == 5


class TestRunStateMachine:
    def test_initial_state_is_menu(self):
        assert RunStateMachine().state is RunState.MENU

    def test_full_cycle(self):
        """Walks the transition table through every state."""
        m = RunStateMachine()
        steps = [
            ("open_how", RunState.HOW),
            ("close", RunState.MENU),
            ("start", RunState.RUNNING),
            ("pause", RunState.PAUSED),
            ("resume", RunState.RUNNING),
            ("hide", RunState.PAUSED),
            ("restart", RunState.RUNNING),
            ("crash", RunState.GAMEOVER),
            ("restart", RunState.RUNNING),
            ("crash", RunState.GAMEOVER),
            ("back_to_menu", RunState.MENU),
        ]
        for trigger, expected in steps:
            assert m.fire(trigger) is True
            assert m.state is expected

    @pytest.mark.parametrize("trigger", ["resume", "pause", "crash", "restart", "back_to_menu", "close"])
    def test_menu_ignores(self, trigger):
        """Triggers the menu does not accept are no-ops."""
        m = RunStateMachine()
        assert m.fire(trigger) is False
        assert m.state is RunState.MENU


class TestSimulationEngine:
    def test_nothing_moves_outside_running(self):
        """Ticks in the menu do not advance the session."""
        e = SimulationEngine(seed=1)
        e.tick(0.0)
        e.tick(0.02)
        assert e.session.elapsed == 0
        assert e.frame == 0

    def test_tick_clamps_dt(self):
        """First tick is 0, stalls clamp to 1/20, backwards time clamps to 0."""
        e = SimulationEngine(seed=1)
        e.start()
        assert e.tick(10.0) == 0
        assert e.tick(12.0) == pytest.approx(MAX_DT)
        assert e.tick(11.0) == 0
        assert e.session.elapsed == pytest.approx(MAX_DT)

    def test_shift_lane_only_while_running(self):
        """Lane commands are ignored outside Running and cue audio only on change."""
        audio = RecordingAudio()
        e = SimulationEngine(seed=1, audio=audio)
        assert e.shift_lane(1) is False
        e.start()
        assert e.shift_lane(1) is True
        assert e.shift_lane(1) is False
        assert audio.cues == ["ui_click", "lane_changed"]

    def test_score_and_speed_monotonic(self):
        """Score and speed never decrease while alive."""
        e = SimulationEngine(seed=7)
        e.start()
        prev_score, prev_speed = e.session.score, e.session.speed
        for _ in range(900):
            e.step(1 / 60)
            if not e.session.alive:
                break
            assert e.session.score >= prev_score
            assert e.session.speed >= prev_speed
            prev_score, prev_speed = e.session.score, e.session.speed

    def test_spacing_invariant_holds_in_play(self):
        """No obstacle ever spawns with a lane-mate inside the clearance band."""
        e = SimulationEngine(seed=3)
        original = e.spawner.try_spawn

        def checked(obstacles):
            o = original(obstacles)
            if o is not None:
                others = [x.y for x in obstacles if x.lane == o.lane and x is not o]
                assert min(others, default=float("inf")) >= e.geometry.top_y + SPAWN_CLEARANCE
            return o

        e.spawner.try_spawn = checked
        e.start()
        for _ in range(3000):
            e.step(1 / 60)
            if e.state is RunState.GAMEOVER:
                e.restart()

    def test_collision_crashes_once(self):
        """Overlap ends the run with exactly one crash; the score freezes."""
        audio = RecordingAudio()
        store = MemoryStore()
        e = SimulationEngine(seed=1, store=store, audio=audio)
        e.start()
        e.session.score = 123.7
        e.obstacles.append(_obstacle_on_player(e))
        e.obstacles.append(_obstacle_on_player(e, BARRIER))
        e.step(1 / 60)
        assert e.state is RunState.GAMEOVER
        assert e.session.alive is False
        assert e.crashes == 1
        assert audio.cues.count("crashed") == 1
        frozen = e.session.score
        for i in range(10):
            e.step(1 / 60)
            e.tick(float(i))
        assert e.crashes == 1
        assert e.session.score == frozen
        assert e.scores.final_score == int(frozen)
        assert store.get("laneracer:best") == int(frozen)

    def test_restart_resets_session(self):
        """GameOver --restart--> Running with a fresh session and an empty road."""
        e = SimulationEngine(seed=1)
        e.start()
        for _ in range(120):
            e.step(1 / 60)
        e.obstacles.append(_obstacle_on_player(e))
        e.step(1 / 60)
        assert e.state is RunState.GAMEOVER

        assert e.restart() is True
        assert e.state is RunState.RUNNING
        assert e.session.score == 0
        assert e.session.speed == BASE_SPEED
        assert e.session.alive is True
        assert e.obstacles == []

    def test_restart_ignored_in_menu(self):
        e = SimulationEngine(seed=1)
        assert e.restart() is False
        assert e.state is RunState.MENU

    def test_pause_contributes_no_time(self):
        """Wall-clock time spent paused never reaches the simulation."""
        e = SimulationEngine(seed=1)
        e.start()
        e.tick(10.0)
        e.tick(10.016)
        before = e.session.elapsed
        assert e.pause() is True
        e.tick(10.032)
        assert e.session.elapsed == before

        # host stops ticking entirely while paused
        assert e.resume() is True
        assert e.tick(900.0) == 0
        assert e.session.elapsed == before
        e.tick(900.016)
        assert e.session.elapsed == pytest.approx(before + 0.016)

    def test_resume_with_timestamp(self):
        """resume(now) makes the next tick measure from now."""
        e = SimulationEngine(seed=1)
        e.start()
        e.tick(1.0)
        e.hide()
        assert e.state is RunState.PAUSED
        e.resume(50.0)
        assert e.tick(50.01) == pytest.approx(0.01)

    def test_deterministic(self):
        """Same seed produces the same game."""
        def run_game(seed):
            e = SimulationEngine(seed=seed)
            e.start()
            for _ in range(600):
                e.step(1 / 60)
            return e.encode()

        assert run_game(123) == run_game(123)

    def test_encode(self):
        """encode() returns dict with expected keys and correct types."""
        e = SimulationEngine(seed=42)
        e.start()
        e.step(1 / 60)
        encoded = e.encode()
        assert encoded["state"] == "running"
        assert isinstance(encoded["lane"], int)
        assert isinstance(encoded["obs"], list)
        assert isinstance(encoded["alive"], bool)
        assert isinstance(encoded["score"], int)
        assert encoded["frame"] == 1

    def test_get_nearest_obstacles(self):
        """get_nearest_obstacles returns per-lane distances, 1.0 when clear."""
        e = SimulationEngine(seed=42)
        assert e.get_nearest_obstacles() == [1.0, 1.0, 1.0]
        g = e.geometry
        e.obstacles.append(Obstacle(VEHICLE, 0, g.lane_centers[0], e.player.y - g.height * 0.5, 40, 70))
        dists = e.get_nearest_obstacles()
        assert dists[0] == pytest.approx(0.5)
        assert dists[1] == dists[2] == 1.0
