# src/impulse2d/core/integrator.py

from __future__ import annotations
from typing import Iterable
import numpy as np

from . import vec
from .shapes import Body


def integrate_body(body: Body, gravity: np.ndarray, dt: float) -> None:
    """
    Semi-implicit Euler: velocity first, then position from the new velocity.
    Immovable bodies (inv_mass == 0) are left alone.
    """
    if body.inv_mass == 0.0:
        return
    acc = body.force * body.inv_mass + gravity
    vec.add_scaled_(body.vel, acc, dt)
    vec.add_scaled_(body.pos, body.vel, dt)

    body.angular_velocity += body.torque * body.inv_inertia * dt
    body.angle += body.angular_velocity * dt


def integrate_bodies(bodies: Iterable[Body], gravity, dt: float) -> None:
    g = vec.as_vec2(gravity)
    for b in bodies:
        integrate_body(b, g, dt)
