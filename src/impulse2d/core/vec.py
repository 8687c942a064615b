# src/impulse2d/core/vec.py

"""
2D vector helpers operating on numpy arrays of shape (2,).

All functions are pure and return new arrays, except the ones whose name ends
with an underscore: those mutate their first argument in place.

Normalizing a zero-length vector returns the zero vector. Callers that need a
direction (SAT axes, contact normals, friction tangents) check for that and
skip the degenerate case.
"""

from __future__ import annotations
import math
import numpy as np

EPSILON = 1e-12

Vec2 = np.ndarray


def vec2(x: float = 0.0, y: float = 0.0) -> Vec2:
    return np.array([x, y], dtype=float)


def as_vec2(v) -> Vec2:
    """Copy anything array-like into a fresh float (2,) array."""
    arr = np.array(v, dtype=float)
    if arr.shape != (2,):
        raise ValueError(f"expected a 2D vector, got shape {arr.shape}")
    return arr


def add(a: Vec2, b: Vec2) -> Vec2:
    return np.array([a[0] + b[0], a[1] + b[1]])


def sub(a: Vec2, b: Vec2) -> Vec2:
    return np.array([a[0] - b[0], a[1] - b[1]])


def scale(v: Vec2, s: float) -> Vec2:
    return np.array([v[0] * s, v[1] * s])


def dot(a: Vec2, b: Vec2) -> float:
    return float(a[0] * b[0] + a[1] * b[1])


def cross(a: Vec2, b: Vec2) -> float:
    """z-component of the 3D cross product of (a, 0) and (b, 0)."""
    return float(a[0] * b[1] - a[1] * b[0])


def cross_sv(s: float, v: Vec2) -> Vec2:
    """Scalar (angular) times vector: the velocity of point v under spin s."""
    return np.array([-s * v[1], s * v[0]])


def cross_vs(v: Vec2, s: float) -> Vec2:
    return np.array([s * v[1], -s * v[0]])


def perp(v: Vec2) -> Vec2:
    """Rotate by +90 degrees."""
    return np.array([-v[1], v[0]])


def length_sq(v: Vec2) -> float:
    return float(v[0] * v[0] + v[1] * v[1])


def length(v: Vec2) -> float:
    return math.sqrt(length_sq(v))


def normalize(v: Vec2) -> Vec2:
    n = length(v)
    if n <= EPSILON:
        return np.zeros(2)
    return np.array([v[0] / n, v[1] / n])


def is_zero(v: Vec2) -> bool:
    return length_sq(v) <= EPSILON * EPSILON


def rotation_matrix(angle: float) -> np.ndarray:
    c, s = math.cos(angle), math.sin(angle)
    return np.array([[c, -s], [s, c]])


def rotate(v: Vec2, angle: float) -> Vec2:
    c, s = math.cos(angle), math.sin(angle)
    return np.array([c * v[0] - s * v[1], s * v[0] + c * v[1]])


# --------- in-place mutators ---------

def add_scaled_(out: Vec2, v: Vec2, s: float) -> Vec2:
    """out += v * s, in place. Returns out for chaining."""
    out[0] += v[0] * s
    out[1] += v[1] * s
    return out


def set_zero_(out: Vec2) -> Vec2:
    out[0] = 0.0
    out[1] = 0.0
    return out
