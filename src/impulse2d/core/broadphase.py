# src/impulse2d/core/broadphase.py

from __future__ import annotations
import logging
import math
from typing import Dict, List, Sequence, Tuple

from .shapes import Body, CircleCollider, PolygonCollider, world_vertices

logger = logging.getLogger(__name__)

AABB = Tuple[float, float, float, float]   # (xmin, ymin, xmax, ymax)
BodyPair = Tuple[Body, Body]


def _circle_aabb(body: Body) -> AABB:
    r = body.collider.radius
    x, y = float(body.pos[0]), float(body.pos[1])
    return x - r, y - r, x + r, y + r


def _polygon_aabb(body: Body) -> AABB:
    wv = world_vertices(body.collider, body.pos, body.angle)
    lo = wv.min(axis=0)
    hi = wv.max(axis=0)
    return float(lo[0]), float(lo[1]), float(hi[0]), float(hi[1])


_AABB_FUNCS = {
    CircleCollider: _circle_aabb,
    PolygonCollider: _polygon_aabb,
}


def compute_aabb(body: Body) -> AABB:
    return _AABB_FUNCS[type(body.collider)](body)


def aabb_overlap(a: AABB, b: AABB) -> bool:
    """Inclusive: boxes that only touch still count as overlapping."""
    return a[0] <= b[2] and b[0] <= a[2] and a[1] <= b[3] and b[1] <= a[3]


def _wants_pair(a: Body, b: Body) -> bool:
    # Two immovable bodies can never be resolved (zero total inverse mass).
    return a.inv_mass + b.inv_mass > 0.0


def brute_force_pairs(bodies: Sequence[Body]) -> List[BodyPair]:
    """O(n^2) reference broad-phase with the same filtering as the grid."""
    bodies = list(bodies)
    aabbs = [compute_aabb(b) for b in bodies]
    pairs: List[BodyPair] = []
    for i in range(len(bodies)):
        for j in range(i + 1, len(bodies)):
            a, b = bodies[i], bodies[j]
            if _wants_pair(a, b) and aabb_overlap(aabbs[i], aabbs[j]):
                pairs.append((a, b))
    return pairs


class UniformGridBroadPhase:
    """
    Spatial hash over AABBs, rebuilt on every call.

    Pairs come out in body order: (bodies[i], bodies[j]) with i < j, sorted
    by (i, j), so the downstream resolution order is reproducible.

    Bodies covering more than `max_cells_per_body` cells (floors, walls) are
    not hashed; they are paired with every other body instead.
    """

    def __init__(self, cell_size: float | None = None, max_cells_per_body: int = 1024) -> None:
        self.cell_size = cell_size
        self.max_cells_per_body = max_cells_per_body
        self.last_cell_size: float | None = None
        self.last_n_pairs: int = 0

    @staticmethod
    def auto_cell_size(bodies: Sequence[Body], aabbs: Sequence[AABB]) -> float:
        """Twice the mean AABB extent of the movable bodies."""
        extents = [
            max(box[2] - box[0], box[3] - box[1])
            for body, box in zip(bodies, aabbs)
            if body.inv_mass > 0.0
        ]
        if not extents:
            extents = [max(box[2] - box[0], box[3] - box[1]) for box in aabbs]
        return max(2.0 * sum(extents) / len(extents), 1e-6)

    def candidate_pairs(self, bodies: Sequence[Body]) -> List[BodyPair]:
        bodies = list(bodies)
        if len(bodies) < 2:
            self.last_n_pairs = 0
            return []

        aabbs = [compute_aabb(b) for b in bodies]
        cell = self.cell_size or self.auto_cell_size(bodies, aabbs)
        self.last_cell_size = cell

        cells: Dict[Tuple[int, int], List[int]] = {}
        oversized: List[int] = []
        for i, box in enumerate(aabbs):
            x0, y0 = math.floor(box[0] / cell), math.floor(box[1] / cell)
            x1, y1 = math.floor(box[2] / cell), math.floor(box[3] / cell)
            if (x1 - x0 + 1) * (y1 - y0 + 1) > self.max_cells_per_body:
                oversized.append(i)
                continue
            for cx in range(x0, x1 + 1):
                for cy in range(y0, y1 + 1):
                    cells.setdefault((cx, cy), []).append(i)

        candidates: set[Tuple[int, int]] = set()
        for members in cells.values():
            # members are in ascending body order
            for k, i in enumerate(members):
                for j in members[k + 1:]:
                    candidates.add((i, j))
        for i in oversized:
            for j in range(len(bodies)):
                if j != i:
                    candidates.add((i, j) if i < j else (j, i))

        pairs: List[BodyPair] = []
        for i, j in sorted(candidates):
            a, b = bodies[i], bodies[j]
            if _wants_pair(a, b) and aabb_overlap(aabbs[i], aabbs[j]):
                pairs.append((a, b))

        self.last_n_pairs = len(pairs)
        logger.debug(
            "broad-phase: %d bodies, %d cells (size %.4g), %d oversized, %d pairs",
            len(bodies), len(cells), cell, len(oversized), len(pairs),
        )
        return pairs
