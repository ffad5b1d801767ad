from __future__ import annotations

"""Device-agnostic input helpers.

Keys, buttons or touch zones map onto a direction; the host calls
``press``/``release`` on device events and ``poll`` once per frame.
"""

from dataclasses import dataclass

HOLD_REPEAT_SECONDS = 0.18


@dataclass
class HoldRepeat:
    direction: int
    interval: float = HOLD_REPEAT_SECONDS
    held: bool = False
    elapsed: float = 0.0

    def press(self) -> int:
        """Start holding. Returns the direction to shift right away, or 0 if already held."""
        if self.held:
            return 0
        self.held = True
        self.elapsed = 0.0
        return self.direction

    def release(self) -> None:
        self.held = False
        self.elapsed = 0.0

    def poll(self, dt: float) -> int:
        """Returns the direction when a repeat is due this frame, else 0."""
        if not self.held:
            return 0
        self.elapsed += dt
        if self.elapsed > self.interval:
            self.elapsed = 0.0
            return self.direction
        return 0


class LaneControls:
    """Left/right hold-repeat pair feeding SimulationEngine.shift_lane."""

    def __init__(self, engine, interval: float = HOLD_REPEAT_SECONDS):
        self.engine = engine
        self.left = HoldRepeat(-1, interval)
        self.right = HoldRepeat(+1, interval)

    def control(self, direction: int) -> HoldRepeat:
        return self.left if direction < 0 else self.right

    def press(self, direction: int) -> None:
        d = self.control(direction).press()
        if d:
            self.engine.shift_lane(d)

    def release(self, direction: int) -> None:
        self.control(direction).release()

    def release_all(self) -> None:
        self.left.release()
        self.right.release()

    def poll(self, dt: float) -> None:
        for ctl in (self.left, self.right):
            d = ctl.poll(dt)
            if d:
                self.engine.shift_lane(d)
