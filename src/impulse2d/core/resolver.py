# src/impulse2d/core/resolver.py

from __future__ import annotations
import math
from typing import List, Optional, Tuple
import numpy as np

from . import vec
from .manifold import CollisionManifold
from .shapes import Body

# Relative size below which the two-contact normal matrix counts as singular
_SINGULAR_TOL = 1e-9


def _mixed_friction(x: float, y: float) -> float:
    return math.sqrt(x * y)


def _check_movable(a: Body, b: Body) -> None:
    if a.inv_mass + b.inv_mass == 0.0:
        raise ValueError(f"Cannot resolve a pair of immovable bodies ({a.id!r}, {b.id!r})")


Arms = Tuple[np.ndarray, np.ndarray]   # contact point relative to a.pos and b.pos


def _coupling(a: Body, b: Body, p: Arms, q: Arms, d: np.ndarray) -> float:
    """Change of relative velocity along d at contact p per unit impulse along d at contact q."""
    return (
        a.inv_mass + b.inv_mass
        + vec.cross(p[0], d) * vec.cross(q[0], d) * a.inv_inertia
        + vec.cross(p[1], d) * vec.cross(q[1], d) * b.inv_inertia
    )


def _normal_impulses(k: np.ndarray, bias: np.ndarray) -> np.ndarray:
    """
    Non-negative impulses x with w = k @ x + bias >= 0 and x * w == 0.

    One contact has a closed form. Two contacts are solved as a 2x2 linear
    complementarity problem by trying each active set in turn: both, first
    only, second only, none.
    """
    if len(bias) == 1:
        return np.array([max(-bias[0] / k[0, 0], 0.0)])

    det = k[0, 0] * k[1, 1] - k[0, 1] * k[1, 0]
    if abs(det) > _SINGULAR_TOL * k[0, 0] * k[1, 1]:
        x = np.linalg.solve(k, -bias)
        if x[0] >= 0.0 and x[1] >= 0.0:
            return x

    x1 = -bias[0] / k[0, 0]
    if x1 >= 0.0 and k[1, 0] * x1 + bias[1] >= 0.0:
        return np.array([x1, 0.0])

    x2 = -bias[1] / k[1, 1]
    if x2 >= 0.0 and k[0, 1] * x2 + bias[0] >= 0.0:
        return np.array([0.0, x2])

    return np.zeros(2)


def resolve_collision(a: Body, b: Body, m: CollisionManifold) -> float:
    """
    Apply normal and friction impulses for one manifold.

    Each contact follows
        j = -(1 + e) * (rv . n) / (1/ma + 1/mb + (ra x n)^2 / Ia + (rb x n)^2 / Ib)
    with the contacts of a manifold solved together from the velocities they
    see before any impulse is applied; with two contacts the angular terms
    couple the points and the pair is solved as one 2x2 system. Contacts that
    are already separating (rv . n > 0) receive no impulse.

    Returns the total normal impulse applied.
    """
    _check_movable(a, b)

    n = m.normal
    e = min(a.restitution, b.restitution)
    mu_s = _mixed_friction(a.static_friction, b.static_friction)
    mu_d = _mixed_friction(a.dynamic_friction, b.dynamic_friction)
    n_contacts = len(m.contacts)

    arms: List[Arms] = [(c - a.pos, c - b.pos) for c in m.contacts]

    # Normal impulses, all from the pre-impulse velocities
    bias = np.empty(n_contacts)
    k = np.empty((n_contacts, n_contacts))
    for i, (ra, rb) in enumerate(arms):
        vn = vec.dot(b.velocity_at(rb) - a.velocity_at(ra), n)
        bias[i] = vn * (1.0 + e) if vn < 0.0 else vn
        for col, other in enumerate(arms):
            k[i, col] = _coupling(a, b, (ra, rb), other, n)

    impulses = _normal_impulses(k, bias)
    for (ra, rb), j in zip(arms, impulses):
        if j > 0.0:
            a.apply_impulse(-n * j, ra)
            b.apply_impulse(n * j, rb)

    # Friction along each contact tangent, from the post-normal velocities
    frictions: List[Optional[np.ndarray]] = []
    for (ra, rb), j in zip(arms, impulses):
        if j <= 0.0:
            frictions.append(None)
            continue
        rv = b.velocity_at(rb) - a.velocity_at(ra)
        t = vec.normalize(rv - n * vec.dot(rv, n))
        if vec.is_zero(t):
            frictions.append(None)
            continue
        kt = _coupling(a, b, (ra, rb), (ra, rb), t)
        jt = -vec.dot(rv, t) / kt / n_contacts
        # Coulomb: stick while under the static cone, otherwise slide
        if abs(jt) < j * mu_s:
            frictions.append(t * jt)
        else:
            frictions.append(t * (-j * mu_d))
    for (ra, rb), friction in zip(arms, frictions):
        if friction is not None:
            a.apply_impulse(-friction, ra)
            b.apply_impulse(friction, rb)

    return float(impulses.sum())


def relative_normal_speed(a: Body, b: Body, m: CollisionManifold) -> float:
    """Closing speed along the normal at the first contact (positive = approaching)."""
    contact = m.contacts[0]
    rv = b.velocity_at(contact - b.pos) - a.velocity_at(contact - a.pos)
    return -vec.dot(rv, m.normal)


def positional_correction(
    a: Body,
    b: Body,
    m: CollisionManifold,
    percent: float = 0.8,
    slop: float = 0.01,
) -> None:
    """Push the pair apart along the normal, weighted by inverse mass."""
    _check_movable(a, b)
    correction_mag = max(m.penetration - slop, 0.0) * percent
    if correction_mag == 0.0:
        return

    denom = a.inv_mass + b.inv_mass
    correction = m.normal * (correction_mag / denom)
    vec.add_scaled_(a.pos, correction, -a.inv_mass)
    vec.add_scaled_(b.pos, correction, b.inv_mass)
