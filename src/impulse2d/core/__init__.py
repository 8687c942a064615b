# src/impulse2d/core/__init__.py

from .config import SimConfig
from .world import World, run_simulation
from .physics import step_physics
from .driver import FixedStepDriver
from .shapes import (
    Body,
    CircleCollider,
    PolygonCollider,
    Collider,
    create_circle_body,
    create_polygon_body,
    create_box_body,
)
from .manifold import CollisionManifold
from .narrowphase import detect
from .broadphase import UniformGridBroadPhase, brute_force_pairs, compute_aabb
from .resolver import resolve_collision, positional_correction
from .integrator import integrate_bodies
from .recording import BodyStateSnapshot, FrameSnapshot, SimulationRecording
from .events import BaseEvent, CollisionEvent

__all__ = [
    "SimConfig",
    "World",
    "run_simulation",
    "step_physics",
    "FixedStepDriver",
    "Body",
    "CircleCollider",
    "PolygonCollider",
    "Collider",
    "create_circle_body",
    "create_polygon_body",
    "create_box_body",
    "CollisionManifold",
    "detect",
    "UniformGridBroadPhase",
    "brute_force_pairs",
    "compute_aabb",
    "resolve_collision",
    "positional_correction",
    "integrate_bodies",
    "BodyStateSnapshot",
    "FrameSnapshot",
    "SimulationRecording",
    "BaseEvent",
    "CollisionEvent",
]
