# src/impulse2d/core/physics.py

from __future__ import annotations
import logging
from typing import TYPE_CHECKING, List, Tuple
if TYPE_CHECKING:
    from .world import World
from .events import CollisionEvent
from .integrator import integrate_bodies
from .manifold import CollisionManifold
from .narrowphase import detect
from .resolver import positional_correction, relative_normal_speed, resolve_collision
from .shapes import Body

logger = logging.getLogger(__name__)


def step_physics(world: World, dt: float) -> List[CollisionEvent]:
    """
    Advance physics by dt seconds and return collision events.

    Pipeline: integrate -> broad-phase -> narrow-phase -> resolve -> correct.
    dt == 0 is a no-op.
    """
    if dt < 0.0:
        raise ValueError(f"dt must be non-negative, got {dt}")
    if dt == 0.0:
        return []

    cfg = world.config
    bodies = list(world.bodies.values())   # snapshot of bodies for this step

    integrate_bodies(bodies, cfg.gravity, dt)

    pairs = world.broadphase.candidate_pairs(bodies)
    contacts: List[Tuple[Body, Body, CollisionManifold]] = []
    for a, b in pairs:
        m = detect(a, b)
        if m is not None:
            contacts.append((a, b, m))

    # Manifolds are resolved in discovery order, which follows body order.
    closing = [relative_normal_speed(a, b, m) for a, b, m in contacts]
    impulses = [0.0] * len(contacts)
    for _ in range(cfg.solver_iterations):
        for k, (a, b, m) in enumerate(contacts):
            impulses[k] += resolve_collision(a, b, m)

    for a, b, m in contacts:
        positional_correction(a, b, m, percent=cfg.correction_percent, slop=cfg.slop)

    for b in bodies:
        b.clear_forces()

    world.time += dt
    logger.debug("t=%.4f: %d candidate pairs, %d contacts", world.time, len(pairs), len(contacts))

    return [
        CollisionEvent(
            t=world.time,
            a_id=a.id,
            b_id=b.id,
            pos=m.contacts[0],
            normal=m.normal,
            penetration=m.penetration,
            impulse=impulses[k],
            relative_speed=closing[k],
        )
        for k, (a, b, m) in enumerate(contacts)
    ]
