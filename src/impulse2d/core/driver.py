# src/impulse2d/core/driver.py

from __future__ import annotations
import logging
from typing import TYPE_CHECKING, List

if TYPE_CHECKING:
    from .events import BaseEvent
    from .world import World

logger = logging.getLogger(__name__)


class FixedStepDriver:
    """
    Adapts a variable host frame rate to fixed physics steps.

    `advance(elapsed)` banks real time and runs as many `fixed_dt` steps as
    fit, at most `max_steps_per_tick` per call. Backlog beyond the cap is
    dropped so a slow host cannot fall further and further behind.
    """

    def __init__(self, world: World, fixed_dt: float | None = None, max_steps_per_tick: int | None = None) -> None:
        self.world = world
        self.fixed_dt = float(fixed_dt if fixed_dt is not None else world.config.fixed_dt)
        self.max_steps_per_tick = int(
            max_steps_per_tick if max_steps_per_tick is not None else world.config.max_steps_per_tick
        )
        if self.fixed_dt <= 0.0:
            raise ValueError(f"fixed_dt must be positive, got {self.fixed_dt}")
        if self.max_steps_per_tick < 1:
            raise ValueError("max_steps_per_tick must be >= 1")
        self.accumulator = 0.0
        self.total_steps = 0
        self.dropped_time = 0.0
        self.last_events: List[BaseEvent] = []

    @property
    def alpha(self) -> float:
        """Fraction of a step left in the accumulator, for render interpolation."""
        return self.accumulator / self.fixed_dt

    def advance(self, elapsed: float) -> int:
        """Bank `elapsed` seconds and run the fixed steps it pays for. Returns the step count."""
        if elapsed < 0.0:
            raise ValueError(f"elapsed time must be non-negative, got {elapsed}")
        self.accumulator += elapsed

        steps = 0
        events: List[BaseEvent] = []
        while self.accumulator >= self.fixed_dt and steps < self.max_steps_per_tick:
            events.extend(self.world.step(self.fixed_dt))
            self.accumulator -= self.fixed_dt
            steps += 1

        if self.accumulator >= self.fixed_dt:
            # Keep the sub-step remainder, drop whole steps we could not afford.
            backlog = self.accumulator - (self.accumulator % self.fixed_dt)
            self.accumulator -= backlog
            self.dropped_time += backlog
            logger.warning("Physics fell behind: dropped %.4f s after %d steps", backlog, steps)

        self.total_steps += steps
        self.last_events = events
        return steps
