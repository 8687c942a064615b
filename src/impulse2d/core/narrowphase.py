# src/impulse2d/core/narrowphase.py

"""
Exact contact tests for candidate pairs.

Every detector returns a CollisionManifold whose normal points from the first
body to the second, or None when the shapes do not overlap. Shapes that only
touch (zero overlap) are reported as not colliding.
"""

from __future__ import annotations
import math
from typing import Callable, Dict, List, Tuple
import numpy as np

from . import vec
from .manifold import CollisionManifold
from .shapes import Body, CircleCollider, PolygonCollider, world_vertices

# Prefer the first body's face as the reference face unless the second is
# clearly better aligned.
_REFERENCE_BIAS = 1e-6
_CONTACT_TOLERANCE = 1e-9


def _project(verts: np.ndarray, axis: np.ndarray) -> Tuple[float, float]:
    d = verts @ axis
    return float(d.min()), float(d.max())


def _world_normals(body: Body) -> np.ndarray:
    return body.collider.normals @ vec.rotation_matrix(body.angle).T


def _circle_circle(a: Body, b: Body) -> CollisionManifold | None:
    ra, rb = a.collider.radius, b.collider.radius
    delta = b.pos - a.pos
    dist_sq = vec.length_sq(delta)
    r_sum = ra + rb
    if dist_sq >= r_sum * r_sum:
        return None
    dist = math.sqrt(dist_sq)
    if dist <= vec.EPSILON:
        # Coincident centres: any direction separates them
        normal = vec.vec2(1.0, 0.0)
        penetration = r_sum
    else:
        normal = delta / dist
        penetration = r_sum - dist
    contact = a.pos + normal * ra
    return CollisionManifold(a.id, b.id, normal, penetration, (contact,))


def _clip(v1: np.ndarray, v2: np.ndarray, direction: np.ndarray, offset: float) -> List[np.ndarray]:
    """Keep the part of segment v1-v2 where dot(direction, p) >= offset."""
    d1 = vec.dot(direction, v1) - offset
    d2 = vec.dot(direction, v2) - offset
    out: List[np.ndarray] = []
    if d1 >= 0.0:
        out.append(v1)
    if d2 >= 0.0:
        out.append(v2)
    if d1 * d2 < 0.0:
        out.append(v1 + (v2 - v1) * (d1 / (d1 - d2)))
    return out


def _polygon_contacts(
    va: np.ndarray,
    na: np.ndarray,
    vb: np.ndarray,
    nb: np.ndarray,
    normal: np.ndarray,
) -> Tuple[np.ndarray, ...]:
    """Reference/incident edge clipping; yields 1 or 2 contact points."""
    ia = int(np.argmax(na @ normal))
    ib = int(np.argmax(nb @ -normal))
    if vec.dot(na[ia], normal) >= vec.dot(nb[ib], -normal) - _REFERENCE_BIAS:
        ref_verts, ref_normals, ref_i, inc_verts, inc_normals = va, na, ia, vb, nb
    else:
        ref_verts, ref_normals, ref_i, inc_verts, inc_normals = vb, nb, ib, va, na

    r1 = ref_verts[ref_i]
    r2 = ref_verts[(ref_i + 1) % len(ref_verts)]
    face_normal = ref_normals[ref_i]

    k = int(np.argmin(inc_normals @ face_normal))
    i1 = inc_verts[k]
    i2 = inc_verts[(k + 1) % len(inc_verts)]

    tangent = vec.normalize(r2 - r1)
    pts = _clip(i1, i2, tangent, vec.dot(tangent, r1))
    if len(pts) == 2:
        pts = _clip(pts[0], pts[1], -tangent, -vec.dot(tangent, r2))

    contacts = tuple(
        np.array(p, dtype=float) for p in pts
        if vec.dot(face_normal, p - r1) <= _CONTACT_TOLERANCE
    )
    if len(pts) == 2 and contacts:
        return contacts
    # Clipping degenerated; fall back to B's deepest vertex.
    return (np.array(vb[int(np.argmin(vb @ normal))], dtype=float),)


def _polygon_polygon(a: Body, b: Body) -> CollisionManifold | None:
    va = world_vertices(a.collider, a.pos, a.angle)
    vb = world_vertices(b.collider, b.pos, b.angle)
    na = _world_normals(a)
    nb = _world_normals(b)

    best_overlap = math.inf
    best_normal: np.ndarray | None = None
    for axes in (na, nb):
        for axis in axes:
            min_a, max_a = _project(va, axis)
            min_b, max_b = _project(vb, axis)
            forward = max_a - min_b    # push b along +axis
            backward = max_b - min_a   # push b along -axis
            overlap = min(forward, backward)
            if overlap <= 0.0:
                return None
            if overlap < best_overlap:
                best_overlap = overlap
                best_normal = axis if forward <= backward else -axis

    normal = np.array(best_normal, dtype=float)
    contacts = _polygon_contacts(va, na, vb, nb, normal)
    return CollisionManifold(a.id, b.id, normal, best_overlap, contacts)


def _circle_polygon(a: Body, b: Body) -> CollisionManifold | None:
    center = a.pos
    r = a.collider.radius
    verts = world_vertices(b.collider, b.pos, b.angle)

    axes = list(_world_normals(b))
    nearest = verts[int(np.argmin(((verts - center) ** 2).sum(axis=1)))]
    vertex_axis = vec.normalize(nearest - center)
    if not vec.is_zero(vertex_axis):
        axes.append(vertex_axis)

    best_overlap = math.inf
    best_normal: np.ndarray | None = None
    for axis in axes:
        pc = vec.dot(center, axis)
        min_p, max_p = _project(verts, axis)
        forward = (pc + r) - min_p
        backward = max_p - (pc - r)
        overlap = min(forward, backward)
        if overlap <= 0.0:
            return None
        if overlap < best_overlap:
            best_overlap = overlap
            best_normal = axis if forward <= backward else -axis

    normal = np.array(best_normal, dtype=float)
    contact = center + normal * r   # deepest point of the circle along the normal
    return CollisionManifold(a.id, b.id, normal, best_overlap, (contact,))


def _polygon_circle(a: Body, b: Body) -> CollisionManifold | None:
    m = _circle_polygon(b, a)
    return None if m is None else m.flipped()


Detector = Callable[[Body, Body], "CollisionManifold | None"]

_DETECTORS: Dict[Tuple[type, type], Detector] = {
    (CircleCollider, CircleCollider): _circle_circle,
    (CircleCollider, PolygonCollider): _circle_polygon,
    (PolygonCollider, CircleCollider): _polygon_circle,
    (PolygonCollider, PolygonCollider): _polygon_polygon,
}


def detect(a: Body, b: Body) -> CollisionManifold | None:
    """Exact test for one pair. None means no contact."""
    key = (type(a.collider), type(b.collider))
    try:
        fn = _DETECTORS[key]
    except KeyError:
        raise TypeError(f"No detector for {key[0].__name__} vs {key[1].__name__}") from None
    return fn(a, b)
