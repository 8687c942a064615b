# src/impulse2d/core/world.py

from __future__ import annotations
from dataclasses import dataclass, field
import logging
from typing import Dict, List

from .broadphase import UniformGridBroadPhase
from .config import SimConfig
from .events import BaseEvent
from .physics import step_physics
from .recording import (
    BodyStateSnapshot,
    BodyStaticSnapshot,
    FrameSnapshot,
    SimulationRecording,
    make_body_state_snapshot,
    snapshot_world,
)
from .shapes import COLLIDER_TYPES, Body, BodyId

logger = logging.getLogger(__name__)


@dataclass
class World:
    """
    Owns the body store and drives the physics pipeline.

    Bodies may only be added or removed between steps.
    """
    config: SimConfig = field(default_factory=SimConfig)
    bodies: Dict[BodyId, Body] = field(default_factory=dict)
    time: float = 0.0
    broadphase: UniformGridBroadPhase = field(init=False)
    _next_id: int = 0
    _stepping: bool = field(default=False, init=False, repr=False)

    def __post_init__(self):
        self.broadphase = UniformGridBroadPhase(
            cell_size=self.config.cell_size,
            max_cells_per_body=self.config.max_cells_per_body,
        )

    @property
    def n_bodies(self) -> int:
        return len(self.bodies)

    def new_id(self) -> int:
        nid = self._next_id
        self._next_id += 1
        while nid in self.bodies:
            nid = self._next_id
            self._next_id += 1
        return nid

    def _check_not_stepping(self, action: str) -> None:
        if self._stepping:
            raise RuntimeError(f"Cannot {action} while the world is stepping")

    def add_body(self, body: Body) -> BodyId:
        """Register a body; duplicate ids are rejected. Returns the body id."""
        self._check_not_stepping("add a body")
        if not isinstance(body.collider, COLLIDER_TYPES):
            raise TypeError(f"Unsupported collider type {type(body.collider).__name__}")
        if body.id is None:
            body.id = self.new_id()
        elif body.id in self.bodies:
            raise ValueError(f"Body id {body.id!r} already exists in world")
        self.bodies[body.id] = body
        return body.id

    def remove_body(self, body_id: BodyId) -> Body:
        self._check_not_stepping("remove a body")
        try:
            return self.bodies.pop(body_id)
        except KeyError:
            raise KeyError(f"No body with id {body_id!r}") from None

    def get_body(self, body_id: BodyId) -> Body:
        try:
            return self.bodies[body_id]
        except KeyError:
            raise KeyError(f"No body with id {body_id!r}") from None

    def body_state(self, body_id: BodyId) -> BodyStateSnapshot:
        """Read-only copy of one body's dynamic state."""
        return make_body_state_snapshot(self.get_body(body_id))

    def snapshot(self, events: List[BaseEvent] | None = None) -> FrameSnapshot:
        return snapshot_world(self, t=self.time, events=events)

    def apply_force(self, body_id: BodyId, force, point=None) -> None:
        self.get_body(body_id).apply_force(force, point)

    def step(self, dt: float | None = None) -> List[BaseEvent]:
        """Advance by dt (defaults to config.fixed_dt) and return the step's events."""
        if dt is None:
            dt = self.config.fixed_dt
        self._stepping = True
        try:
            return step_physics(self, dt=float(dt))
        finally:
            self._stepping = False

    def total_kinetic_energy(self) -> float:
        return sum(b.kinetic_energy() for b in self.bodies.values())


def run_simulation(
    world: World,
    n_steps: int,
    dt: float | None = None,
    log_interval: int = 600,
    *,
    record_events: bool = True,
) -> SimulationRecording:
    """
    Step the world forward n_steps and record a snapshot after every step.
    """
    recording = SimulationRecording()
    body_static: dict[BodyId, BodyStaticSnapshot] = {}
    snapshot_world(world, t=world.time, body_static_registry=body_static)
    for step in range(n_steps):
        all_events = world.step(dt)
        frame_events = all_events if record_events else []
        snapshot = snapshot_world(world,
                                  t=world.time,
                                  events=frame_events,
                                  body_static_registry=body_static)
        recording.add_frame(snapshot)
        if log_interval and (step + 1) % log_interval == 0:
            logger.info("Simulated %.3f s (%d/%d steps), %d bodies",
                        world.time, step + 1, n_steps, world.n_bodies)
    recording.body_static.update(body_static)
    return recording
