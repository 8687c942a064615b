# src/impulse2d/core/recording.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Iterator, Tuple
import numpy as np

if TYPE_CHECKING:
    from .events import BaseEvent
    from .shapes import Body


@dataclass(frozen=True)
class ColliderSnapshot:
    kind: str                 # e.g. "CircleCollider"
    attrs: dict[str, Any]     # serializable parameters, e.g. {"radius": 0.3}


@dataclass(frozen=True)
class BodyStaticSnapshot:
    """Properties of a body that never change during a run."""
    id: Any
    mass: float
    inertia: float
    restitution: float
    collider: ColliderSnapshot


@dataclass(frozen=True)
class BodyStateSnapshot:
    """Read-only copy of a body's dynamic state, for renderers and callers."""
    pos: Tuple[float, float]
    vel: Tuple[float, float]
    angle: float
    angular_velocity: float


@dataclass
class EventSnapshot:
    t: float
    type: str               # e.g. "CollisionEvent"
    a_id: Any = None
    b_id: Any = None
    payload: dict[str, Any] = field(default_factory=dict)


@dataclass
class FrameSnapshot:
    t: float
    bodies: dict[Any, BodyStateSnapshot]
    events: list[EventSnapshot] = field(default_factory=list)


@dataclass
class SimulationRecording:
    """
    In-memory record of a simulation run.

    `meta` holds config, seed, etc.
    """
    frames: list[FrameSnapshot] = field(default_factory=list)
    meta: dict[str, Any] = field(default_factory=dict)
    body_static: Dict[Any, BodyStaticSnapshot] = field(default_factory=dict)

    def add_frame(self, frame: FrameSnapshot) -> None:
        self.frames.append(frame)

    @property
    def times(self) -> list[float]:
        return [f.t for f in self.frames]

    @property
    def t_end(self) -> float | None:
        """Time of the last frame, or None if no frames."""
        if not self.frames:
            return None
        return self.frames[-1].t

    def iter_events(self) -> Iterator[EventSnapshot]:
        """Iterate over all EventSnapshots in time order."""
        for frame in self.frames:
            yield from frame.events

    def trajectory(self, body_id) -> np.ndarray:
        """(n_frames, 2) positions of one body; frames where it is absent are skipped."""
        pts = [f.bodies[body_id].pos for f in self.frames if body_id in f.bodies]
        return np.array(pts, dtype=float).reshape(-1, 2)


def make_body_static_snapshot(body: "Body") -> BodyStaticSnapshot:
    return BodyStaticSnapshot(
        id=body.id,
        mass=float(body.mass),
        inertia=float(body.inertia),
        restitution=float(body.restitution),
        collider=body.collider.to_snapshot(),
    )


def make_body_state_snapshot(body: "Body") -> BodyStateSnapshot:
    return BodyStateSnapshot(
        pos=(float(body.pos[0]), float(body.pos[1])),
        vel=(float(body.vel[0]), float(body.vel[1])),
        angle=float(body.angle),
        angular_velocity=float(body.angular_velocity),
    )


def snapshot_world(
    world,
    t: float,
    events: list[BaseEvent] | None = None,
    *,
    body_static_registry: Dict[Any, BodyStaticSnapshot] | None = None,
) -> FrameSnapshot:
    bodies_state: Dict[Any, BodyStateSnapshot] = {}

    for body in world.bodies.values():
        # Static snapshot exists exactly once per body id
        if body_static_registry is not None and body.id not in body_static_registry:
            body_static_registry[body.id] = make_body_static_snapshot(body)
        bodies_state[body.id] = make_body_state_snapshot(body)

    event_snaps = [
        EventSnapshot(
            t=e.t,
            type=type(e).__name__,
            a_id=e.a_id,
            b_id=e.b_id,
            payload=e.to_payload_dict(),
        )
        for e in (events or [])
    ]
    return FrameSnapshot(t=t, bodies=bodies_state, events=event_snaps)
