"""
Pure game logic for LANERACER — no pygame dependency.
Used by the pygame app, the headless simulator, and the tests.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from enum import Enum
from typing import NamedTuple, Protocol

from laneracer.core.log import get_logger
from laneracer.core.storage import MemoryStore, PersistentStore

log = get_logger("engine")

# ─────────────────────────────────────────
# Constants
# ─────────────────────────────────────────
WIDTH, HEIGHT = 480, 720
FPS = 60
MAX_DT = 1 / 20

LANE_COUNT = 3
ROAD_WIDTH_FRAC = 0.78
ROAD_TOP_MARGIN = 0.12
ROAD_BOTTOM_MARGIN = 0.10

LANE_SMOOTHING = 14.0

BASE_SPEED = 320.0
ACCELERATION = 16.0
SCORE_RATE = 0.06

SPAWN_INTERVAL_START = 0.95
SPAWN_INTERVAL_END = 0.42
RAMP_SECONDS = 70.0
EXTRA_SPAWN_AFTER = 18.0
EXTRA_SPAWN_SPEED = 420.0
EXTRA_SPAWN_SPAN = 900.0
EXTRA_SPAWN_MAX = 0.35

SPAWN_CLEARANCE = 110.0
SPAWN_GAP = 20.0
DESPAWN_MARGIN = 120.0

VEHICLE = "vehicle"
BARRIER = "barrier"
VEHICLE_CHANCE = 0.72
OBSTACLE_SIZES = {VEHICLE: (46, 76), BARRIER: (58, 56)}
OBSTACLE_SCALE = (0.85, 1.2)
OBSTACLE_HIT_INSET = 6.0

CAR_W, CAR_H = 46, 76
PLAYER_SCALE = (0.85, 1.15)
PLAYER_HIT_INSET = 6.0
PLAYER_BOTTOM_GAP = 8.0

BEST_KEY = "laneracer:best"


def clamp(v, lo, hi):
    return max(lo, min(hi, v))


def lerp(a, b, t):
    return a + (b - a) * t


def clamp_dt(dt):
    return clamp(dt, 0.0, MAX_DT)


class RandomSource(Protocol):
    def random(self) -> float: ...


class AudioCue(Protocol):
    def lane_changed(self) -> None: ...
    def ui_click(self) -> None: ...
    def crashed(self) -> None: ...


# ─────────────────────────────────────────
# World geometry
# ─────────────────────────────────────────

@dataclass
class WorldGeometry:
    width: float = WIDTH
    height: float = HEIGHT
    lane_count: int = LANE_COUNT
    lane_width: float = 0.0
    lane_centers: list[float] = field(default_factory=list)
    road_left: float = 0.0
    road_right: float = 0.0
    top_y: float = 0.0
    bottom_y: float = 0.0

    def __post_init__(self):
        self.recompute(self.width, self.height)

    def recompute(self, width, height):
        """Lay the road out as a centered band split into equal lanes."""
        self.width, self.height = float(width), float(height)
        road_w = self.width * ROAD_WIDTH_FRAC
        self.road_left = (self.width - road_w) * 0.5
        self.road_right = self.road_left + road_w
        self.lane_width = road_w / self.lane_count
        self.lane_centers = [self.road_left + self.lane_width * (i + 0.5) for i in range(self.lane_count)]
        self.top_y = self.height * ROAD_TOP_MARGIN
        self.bottom_y = self.height * (1 - ROAD_BOTTOM_MARGIN)

    def scale(self, lo, hi):
        return clamp(min(self.width, self.height) / 520, lo, hi)


# ─────────────────────────────────────────
# Game objects
# ─────────────────────────────────────────

class Box(NamedTuple):
    x: float
    y: float
    w: float
    h: float

    def overlaps(self, other: "Box") -> bool:
        # Touching edges do not count.
        return (self.x < other.x + other.w and self.x + self.w > other.x
                and self.y < other.y + other.h and self.y + self.h > other.y)


def inset_box(cx, top, w, h, inset) -> Box:
    return Box(cx - w / 2 + inset, top + inset, w - inset * 2, h - inset * 2)


@dataclass
class Player:
    lane: int = 1
    target_lane: int = 1
    x: float = 0.0
    y: float = 0.0
    w: float = CAR_W
    h: float = CAR_H
    hit_inset: float = PLAYER_HIT_INSET

    def rect(self) -> Box:
        return inset_box(self.x, self.y, self.w, self.h, self.hit_inset)


@dataclass
class Obstacle:
    kind: str
    lane: int
    x: float
    y: float
    w: float
    h: float
    hit_inset: float = OBSTACLE_HIT_INSET

    def rect(self) -> Box:
        return inset_box(self.x, self.y, self.w, self.h, self.hit_inset)


class PlayerController:
    def __init__(self, geometry: WorldGeometry):
        self.geometry = geometry
        self.player = Player()
        self.reset()

    def reset(self):
        middle = self.geometry.lane_count // 2
        self.player.lane = self.player.target_lane = middle
        self.relayout()

    def relayout(self):
        """Re-derive size and position from the current geometry."""
        g, p = self.geometry, self.player
        s = g.scale(*PLAYER_SCALE)
        p.w, p.h = CAR_W * s, CAR_H * s
        p.y = g.bottom_y - p.h - PLAYER_BOTTOM_GAP
        p.x = g.lane_centers[p.target_lane]

    def shift_lane(self, delta) -> bool:
        """Move the target lane by delta, clamped. Returns True if it changed."""
        p = self.player
        prev = p.target_lane
        p.target_lane = int(clamp(p.target_lane + delta, 0, self.geometry.lane_count - 1))
        p.lane = p.target_lane
        return p.target_lane != prev

    def advance(self, dt):
        target = self.geometry.lane_centers[self.player.target_lane]
        self.player.x = lerp(self.player.x, target, clamp(dt * LANE_SMOOTHING, 0.0, 1.0))


# ─────────────────────────────────────────
# Run session + spawning
# ─────────────────────────────────────────

@dataclass
class RunSession:
    elapsed: float = 0.0
    speed: float = BASE_SPEED
    acceleration: float = ACCELERATION
    spawn_timer: float = 0.0
    spawn_interval: float = SPAWN_INTERVAL_START
    score: float = 0.0
    alive: bool = True

    def advance(self, dt):
        """Elapsed time, speed ramp, spawn interval and distance score."""
        self.elapsed += dt
        self.speed += self.acceleration * dt
        self.spawn_interval = spawn_interval(self.elapsed)
        self.score += self.speed * dt * SCORE_RATE


def spawn_interval(elapsed):
    return lerp(SPAWN_INTERVAL_START, SPAWN_INTERVAL_END, clamp(elapsed / RAMP_SECONDS, 0.0, 1.0))


def extra_spawn_chance(speed):
    return clamp((speed - EXTRA_SPAWN_SPEED) / EXTRA_SPAWN_SPAN, 0.0, EXTRA_SPAWN_MAX)


class ObstacleSpawner:
    def __init__(self, geometry: WorldGeometry, rng: RandomSource):
        self.geometry = geometry
        self.rng = rng
        self.dropped = 0

    def lane_is_clear(self, obstacles, lane) -> bool:
        nearest = min((o.y for o in obstacles if o.lane == lane), default=float("inf"))
        return nearest >= self.geometry.top_y + SPAWN_CLEARANCE

    def try_spawn(self, obstacles) -> Obstacle | None:
        g = self.geometry
        lane = min(int(self.rng.random() * g.lane_count), g.lane_count - 1)
        kind = VEHICLE if self.rng.random() < VEHICLE_CHANCE else BARRIER
        s = g.scale(*OBSTACLE_SCALE)
        base_w, base_h = OBSTACLE_SIZES[kind]
        w, h = base_w * s, base_h * s

        if not self.lane_is_clear(obstacles, lane):
            self.dropped += 1
            return None

        o = Obstacle(kind, lane, g.lane_centers[lane], g.top_y - h - SPAWN_GAP, w, h)
        obstacles.append(o)
        return o

    def tick(self, session: RunSession, obstacles, dt) -> list[Obstacle]:
        """Run the spawn timer. A rejected attempt still consumes its interval."""
        spawned = []
        session.spawn_timer += dt
        while session.spawn_timer > session.spawn_interval:
            session.spawn_timer -= session.spawn_interval
            spawned.append(self.try_spawn(obstacles))
            if session.elapsed > EXTRA_SPAWN_AFTER and self.rng.random() < extra_spawn_chance(session.speed):
                spawned.append(self.try_spawn(obstacles))
        return [o for o in spawned if o is not None]

    def advance(self, obstacles, speed, dt):
        """Scroll obstacles down and compact away the ones past the bottom."""
        limit = self.geometry.height + DESPAWN_MARGIN
        for o in obstacles:
            o.y += speed * dt
        obstacles[:] = [o for o in obstacles if o.y < limit]


def find_collision(player: Player, obstacles) -> Obstacle | None:
    """First obstacle (in collection order) whose inset box hits the player's."""
    pr = player.rect()
    for o in obstacles:
        if pr.overlaps(o.rect()):
            return o
    return None


# ─────────────────────────────────────────
# Score + lifecycle
# ─────────────────────────────────────────

class ScoreKeeper:
    def __init__(self, store: PersistentStore, key=BEST_KEY):
        self.store = store
        self.key = key
        self.final_score = 0

    def get_best(self) -> int:
        return self.store.get(self.key)

    def on_crash(self, score) -> int:
        self.final_score = max(0, int(score))
        best = self.get_best()
        if self.final_score > best:
            self.store.set(self.key, self.final_score)
            log.info("new best score %d (was %d)", self.final_score, best)
        return self.final_score


class RunState(str, Enum):
    MENU = "menu"
    HOW = "how"
    RUNNING = "running"
    PAUSED = "paused"
    GAMEOVER = "gameover"


TRANSITIONS = {
    (RunState.MENU, "start"): RunState.RUNNING,
    (RunState.MENU, "open_how"): RunState.HOW,
    (RunState.HOW, "close"): RunState.MENU,
    (RunState.RUNNING, "pause"): RunState.PAUSED,
    (RunState.RUNNING, "hide"): RunState.PAUSED,
    (RunState.PAUSED, "resume"): RunState.RUNNING,
    (RunState.RUNNING, "crash"): RunState.GAMEOVER,
    (RunState.RUNNING, "restart"): RunState.RUNNING,
    (RunState.PAUSED, "restart"): RunState.RUNNING,
    (RunState.GAMEOVER, "restart"): RunState.RUNNING,
    (RunState.PAUSED, "back_to_menu"): RunState.MENU,
    (RunState.GAMEOVER, "back_to_menu"): RunState.MENU,
}


class RunStateMachine:
    def __init__(self):
        self.state = RunState.MENU

    def can(self, trigger) -> bool:
        return (self.state, trigger) in TRANSITIONS

    def fire(self, trigger) -> bool:
        """Apply trigger if the current state accepts it. Unknown ones are ignored."""
        nxt = TRANSITIONS.get((self.state, trigger))
        if nxt is None:
            return False
        log.debug("state %s --%s--> %s", self.state.value, trigger, nxt.value)
        self.state = nxt
        return True


# ─────────────────────────────────────────
# Engine
# ─────────────────────────────────────────

class SimulationEngine:
    def __init__(self, width=WIDTH, height=HEIGHT, *, seed=None, rng: RandomSource | None = None,
                 store: PersistentStore | None = None, audio: AudioCue | None = None,
                 lane_count=LANE_COUNT):
        self.rng = rng if rng is not None else random.Random(seed)
        self.audio = audio
        self.geometry = WorldGeometry(width, height, lane_count)
        self.controller = PlayerController(self.geometry)
        self.spawner = ObstacleSpawner(self.geometry, self.rng)
        self.scores = ScoreKeeper(store if store is not None else MemoryStore())
        self.states = RunStateMachine()
        self.session = RunSession()
        self.obstacles: list[Obstacle] = []
        self.last_ts = None
        self.frame = 0
        self.crashes = 0

    @property
    def player(self) -> Player:
        return self.controller.player

    @property
    def state(self) -> RunState:
        return self.states.state

    @property
    def best(self) -> int:
        return self.scores.get_best()

    def _cue(self, name):
        if self.audio is not None:
            getattr(self.audio, name)()

    # ── Host hooks ──────────────────────

    def resize(self, width, height):
        self.geometry.recompute(width, height)
        self.controller.relayout()
        for o in self.obstacles:
            o.x = self.geometry.lane_centers[o.lane]

    def tick(self, timestamp) -> float:
        """Frame entry point. timestamp is in seconds; returns the dt simulated."""
        if self.last_ts is None:
            self.last_ts = timestamp
        dt = clamp_dt(timestamp - self.last_ts)
        self.last_ts = timestamp
        if self.state is RunState.RUNNING:
            self.step(dt)
        return dt

    def step(self, dt):
        """Advance one running frame by dt seconds (clamped)."""
        if self.state is not RunState.RUNNING or not self.session.alive:
            return
        dt = clamp_dt(dt)
        s = self.session
        self.frame += 1

        s.advance(dt)
        self.controller.advance(dt)
        self.spawner.advance(self.obstacles, s.speed, dt)
        self.spawner.tick(s, self.obstacles, dt)

        hit = find_collision(self.player, self.obstacles)
        if hit is not None:
            self._crash(hit)

    def _crash(self, hit):
        self.session.alive = False
        self.crashes += 1
        self._cue("crashed")
        final = self.scores.on_crash(self.session.score)
        log.info("crashed into %s in lane %d, score %d", hit.kind, hit.lane, final)
        self.states.fire("crash")

    def reset_run(self):
        self.session = RunSession()
        self.obstacles.clear()
        self.controller.reset()
        self.frame = 0

    # ── Commands ────────────────────────

    def shift_lane(self, delta) -> bool:
        if self.state is not RunState.RUNNING:
            return False
        changed = self.controller.shift_lane(delta)
        if changed:
            self._cue("lane_changed")
        return changed

    def _command(self, trigger, click=True) -> bool:
        if not self.states.fire(trigger):
            return False
        if click:
            self._cue("ui_click")
        return True

    def start(self) -> bool:
        if not self.states.can("start"):
            return False
        self.reset_run()
        return self._command("start")

    def restart(self) -> bool:
        if not self.states.can("restart"):
            return False
        self.reset_run()
        return self._command("restart")

    def pause(self) -> bool:
        return self._command("pause")

    def hide(self) -> bool:
        return self._command("hide", click=False)

    def resume(self, timestamp=None) -> bool:
        if not self._command("resume"):
            return False
        # Paused wall-clock time must not leak into the next dt.
        self.last_ts = timestamp
        return True

    def toggle_pause(self, timestamp=None) -> bool:
        if self.state is RunState.RUNNING:
            return self.pause()
        return self.resume(timestamp)

    def back_to_menu(self) -> bool:
        return self._command("back_to_menu")

    def open_how(self) -> bool:
        return self._command("open_how")

    def close(self) -> bool:
        return self._command("close")

    # ── Views ───────────────────────────

    def encode(self):
        """Encode current state as dict for replay/results."""
        h = self.geometry.height
        return {
            "state": self.state.value,
            "lane": self.player.target_lane,
            "x": round(self.player.x, 2),
            "obs": [[o.kind, o.lane, round(o.y / h, 4)] for o in self.obstacles],
            "alive": self.session.alive,
            "score": int(self.session.score),
            "speed": round(self.session.speed, 2),
            "elapsed": round(self.session.elapsed, 4),
            "frame": self.frame,
        }

    def get_nearest_obstacles(self):
        """Return normalized distance to nearest obstacle in each lane. 1.0 = no obstacle."""
        distances = [1.0] * self.geometry.lane_count
        player_y = self.player.y
        for o in self.obstacles:
            if o.y < player_y:
                norm_dist = (player_y - o.y) / self.geometry.height
                if norm_dist < distances[o.lane]:
                    distances[o.lane] = norm_dist
        return distances
