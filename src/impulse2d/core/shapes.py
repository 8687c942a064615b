# src/impulse2d/core/shapes.py

from __future__ import annotations
from dataclasses import dataclass, field
import math
from typing import Sequence, Union
import numpy as np

from . import vec
from .recording import ColliderSnapshot

BodyId = Union[int, str]

# --------- Colliders (geometry only) ---------
# The set of collider kinds is closed: everything that dispatches on shape
# (AABBs, narrow-phase, mass properties) keys its tables on these two types.


@dataclass(frozen=True)
class CircleCollider:
    """Circle centred on the body origin."""
    radius: float

    def __post_init__(self):
        r = float(self.radius)
        if not math.isfinite(r) or r <= 0.0:
            raise ValueError(f"Circle radius must be positive and finite, got {self.radius}")
        object.__setattr__(self, "radius", r)

    def bounding_radius(self) -> float:
        return self.radius

    def to_snapshot(self) -> ColliderSnapshot:
        return ColliderSnapshot(
            kind="CircleCollider",
            attrs={"radius": float(self.radius)},
        )


@dataclass(frozen=True, eq=False)
class PolygonCollider:
    """
    Convex polygon in local space.

    - vertices: (N, 2) array, N >= 3, stored counter-clockwise.
      Clockwise input is re-wound; collinear or non-convex input is rejected.
    - normals: (N, 2) outward unit normal of edge i -> i+1.
    """
    vertices: np.ndarray
    normals: np.ndarray = field(init=False, repr=False)

    def __post_init__(self):
        verts = np.array(self.vertices, dtype=float)
        if verts.ndim != 2 or verts.shape[1] != 2:
            raise ValueError(f"Polygon vertices must have shape (N, 2), got {verts.shape}")
        if len(verts) < 3:
            raise ValueError(f"Polygon needs at least 3 vertices, got {len(verts)}")
        if not np.all(np.isfinite(verts)):
            raise ValueError("Polygon vertices must be finite")

        if _signed_area(verts) < 0.0:
            verts = verts[::-1].copy()
        _check_convex(verts)

        edges = np.roll(verts, -1, axis=0) - verts
        lengths = np.hypot(edges[:, 0], edges[:, 1])
        normals = np.column_stack([edges[:, 1], -edges[:, 0]]) / lengths[:, None]

        verts.setflags(write=False)
        normals.setflags(write=False)
        object.__setattr__(self, "vertices", verts)
        object.__setattr__(self, "normals", normals)

    def bounding_radius(self) -> float:
        return float(np.linalg.norm(self.vertices, axis=1).max())

    def area(self) -> float:
        return _signed_area(self.vertices)

    def centroid(self) -> np.ndarray:
        v = self.vertices
        w = np.roll(v, -1, axis=0)
        c = v[:, 0] * w[:, 1] - v[:, 1] * w[:, 0]
        return ((v + w) * c[:, None]).sum(axis=0) / (3.0 * c.sum())

    def to_snapshot(self) -> ColliderSnapshot:
        return ColliderSnapshot(
            kind="PolygonCollider",
            attrs={
                "vertices": self.vertices.tolist(),
                "bounding_radius": self.bounding_radius(),
            },
        )


Collider = Union[CircleCollider, PolygonCollider]
COLLIDER_TYPES = (CircleCollider, PolygonCollider)


def _signed_area(verts: np.ndarray) -> float:
    w = np.roll(verts, -1, axis=0)
    return 0.5 * float((verts[:, 0] * w[:, 1] - verts[:, 1] * w[:, 0]).sum())


def _check_convex(verts: np.ndarray) -> None:
    """Every turn must be a strict left turn for a CCW convex polygon."""
    n = len(verts)
    for i in range(n):
        e0 = verts[(i + 1) % n] - verts[i]
        e1 = verts[(i + 2) % n] - verts[(i + 1) % n]
        if vec.length_sq(e0) <= vec.EPSILON:
            raise ValueError(f"Polygon has a zero-length edge at vertex {i}")
        if vec.cross(e0, e1) <= vec.EPSILON:
            raise ValueError(f"Polygon is not strictly convex at vertex {(i + 1) % n}")
    # A star shape turns left everywhere yet winds twice around.
    winding = 0.0
    for i in range(n):
        a = math.atan2(*(verts[(i + 1) % n] - verts[i])[::-1])
        b = math.atan2(*(verts[(i + 2) % n] - verts[(i + 1) % n])[::-1])
        winding += (b - a) % (2 * math.pi)
    if winding > 2 * math.pi + 1e-6:
        raise ValueError("Polygon is self-intersecting")


def _circle_unit_inertia(c: CircleCollider) -> float:
    return 0.5 * c.radius ** 2


def _polygon_unit_inertia(p: PolygonCollider) -> float:
    """Moment of inertia per unit mass about the local origin (uniform density)."""
    v = p.vertices
    w = np.roll(v, -1, axis=0)
    c = v[:, 0] * w[:, 1] - v[:, 1] * w[:, 0]
    terms = (v * v).sum(axis=1) + (v * w).sum(axis=1) + (w * w).sum(axis=1)
    return float((c * terms).sum() / (6.0 * c.sum()))


_UNIT_INERTIA = {
    CircleCollider: _circle_unit_inertia,
    PolygonCollider: _polygon_unit_inertia,
}


def unit_inertia(collider: Collider) -> float:
    try:
        fn = _UNIT_INERTIA[type(collider)]
    except KeyError:
        raise TypeError(f"Unsupported collider type {type(collider).__name__}") from None
    return fn(collider)


def world_vertices(collider: PolygonCollider, pos: np.ndarray, angle: float) -> np.ndarray:
    """Polygon vertices transformed to world space, (N, 2)."""
    return collider.vertices @ vec.rotation_matrix(angle).T + pos


# --------- Bodies (physics state) ---------

@dataclass
class Body:
    """
    A rigid body in the world.

    - pos / vel: world-space position & velocity of the centre of mass
    - mass: positive, or math.inf for an immovable body
    - inertia: defaults to the collider's uniform-density moment for `mass`
    - force / torque: accumulators, cleared after every step

    inv_mass and inv_inertia are derived once; an infinite mass or inertia
    gives exactly 0.0, which is how static bodies are modelled.
    """
    id: BodyId | None
    pos: np.ndarray           # shape (2,)
    vel: np.ndarray           # shape (2,)
    mass: float
    collider: Collider
    angle: float = 0.0        # in radians
    angular_velocity: float = 0.0  # in radians per second
    inertia: float | None = None
    restitution: float = 0.2
    static_friction: float = 0.5
    dynamic_friction: float = 0.3
    force: np.ndarray = field(default_factory=lambda: np.zeros(2))
    torque: float = 0.0
    inv_mass: float = field(init=False)
    inv_inertia: float = field(init=False)

    def __post_init__(self):
        self.pos = vec.as_vec2(self.pos)
        self.vel = vec.as_vec2(self.vel)
        self.force = vec.as_vec2(self.force)
        self.angle = float(self.angle)
        self.angular_velocity = float(self.angular_velocity)
        self.torque = float(self.torque)

        self.mass = float(self.mass)
        if math.isnan(self.mass) or self.mass <= 0.0:
            raise ValueError(f"Body mass must be positive or math.inf, got {self.mass}")
        if self.inertia is None:
            self.inertia = self.mass * unit_inertia(self.collider)
        self.inertia = float(self.inertia)
        if math.isnan(self.inertia) or self.inertia <= 0.0:
            raise ValueError(f"Body inertia must be positive or math.inf, got {self.inertia}")

        if not 0.0 <= self.restitution <= 1.0:
            raise ValueError(f"restitution must be in [0, 1], got {self.restitution}")
        if self.static_friction < 0.0 or self.dynamic_friction < 0.0:
            raise ValueError("friction coefficients must be non-negative")

        self.inv_mass = 0.0 if math.isinf(self.mass) else 1.0 / self.mass
        self.inv_inertia = 0.0 if math.isinf(self.inertia) else 1.0 / self.inertia

    def apply_force(self, force, point=None) -> None:
        """Accumulate a world-space force, optionally at a world-space point."""
        f = vec.as_vec2(force)
        vec.add_scaled_(self.force, f, 1.0)
        if point is not None:
            self.torque += vec.cross(vec.as_vec2(point) - self.pos, f)

    def apply_torque(self, torque: float) -> None:
        self.torque += float(torque)

    def apply_impulse(self, impulse: np.ndarray, contact_vector: np.ndarray) -> None:
        """Instantaneous momentum change at `contact_vector` (relative to pos)."""
        vec.add_scaled_(self.vel, impulse, self.inv_mass)
        self.angular_velocity += self.inv_inertia * vec.cross(contact_vector, impulse)

    def clear_forces(self) -> None:
        vec.set_zero_(self.force)
        self.torque = 0.0

    def velocity_at(self, contact_vector: np.ndarray) -> np.ndarray:
        return self.vel + vec.cross_sv(self.angular_velocity, contact_vector)

    def kinetic_energy(self) -> float:
        linear = 0.0 if self.inv_mass == 0.0 else 0.5 * self.mass * vec.length_sq(self.vel)
        angular = 0.0 if self.inv_inertia == 0.0 else 0.5 * self.inertia * self.angular_velocity ** 2
        return linear + angular


def create_circle_body(
    pos,
    vel=None,
    radius: float = 1.0,
    mass: float = 1.0,
    body_id: BodyId | None = None,
    **kwargs,
) -> Body:
    """Helper to create a circular Body with sensible defaults."""
    return Body(
        id=body_id,
        pos=pos,
        vel=np.zeros(2) if vel is None else vel,
        mass=mass,
        collider=CircleCollider(radius=float(radius)),
        **kwargs,
    )


def create_polygon_body(
    pos,
    vertices: Sequence[Sequence[float]],
    vel=None,
    mass: float = 1.0,
    body_id: BodyId | None = None,
    angle: float = 0.0,
    **kwargs,
) -> Body:
    """
    Create a convex polygon Body.

    `vertices` are relative to `pos`. They are re-expressed about their
    centroid, and `pos` moves to that centroid, so the body rotates about
    its centre of mass.
    """
    raw = PolygonCollider(vertices=np.asarray(vertices, dtype=float))
    c = raw.centroid()
    collider = PolygonCollider(vertices=raw.vertices - c)
    return Body(
        id=body_id,
        pos=vec.as_vec2(pos) + vec.rotate(c, angle),
        vel=np.zeros(2) if vel is None else vel,
        mass=mass,
        collider=collider,
        angle=angle,
        **kwargs,
    )


def create_box_body(
    pos,
    width: float,
    height: float,
    vel=None,
    mass: float = 1.0,
    body_id: BodyId | None = None,
    **kwargs,
) -> Body:
    """Axis-aligned (at angle 0) rectangle centred on `pos`."""
    hw, hh = 0.5 * float(width), 0.5 * float(height)
    return create_polygon_body(
        pos,
        [(-hw, -hh), (hw, -hh), (hw, hh), (-hw, hh)],
        vel=vel,
        mass=mass,
        body_id=body_id,
        **kwargs,
    )
