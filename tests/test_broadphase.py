"""Tests for AABBs and the uniform-grid broad-phase."""
from __future__ import annotations

import math

import numpy as np
import pytest

from impulse2d.core import (
    Body,
    UniformGridBroadPhase,
    brute_force_pairs,
    compute_aabb,
    create_box_body,
    create_circle_body,
    detect,
)
from impulse2d.core.broadphase import aabb_overlap


def _random_bodies(seed: int, n: int = 60, extent: float = 10.0) -> list[Body]:
    gen = np.random.default_rng(seed)
    bodies: list[Body] = []
    for i in range(n):
        pos = gen.uniform(0.0, extent, size=2)
        size = float(gen.uniform(0.2, 0.8))
        if gen.random() < 0.5:
            body = create_circle_body(pos, radius=size, body_id=i)
        else:
            body = create_box_body(pos, 2 * size, size, body_id=i, angle=float(gen.uniform(0, 2 * math.pi)))
        bodies.append(body)
    return bodies


def _ids(pairs) -> list[tuple[int, int]]:
    return [(a.id, b.id) for a, b in pairs]


# ── AABB ──────────────────────────────────────────────────────────


class TestAABB:
    def test_circle(self) -> None:
        assert compute_aabb(create_circle_body((1.0, 2.0), radius=0.5)) == (0.5, 1.5, 1.5, 2.5)

    def test_rotated_box(self) -> None:
        box = compute_aabb(create_box_body((0.0, 0.0), 1.0, 1.0, angle=math.pi / 4))
        h = math.sqrt(0.5)
        np.testing.assert_allclose(box, (-h, -h, h, h), atol=1e-12)

    def test_touching_counts_as_overlap(self) -> None:
        assert aabb_overlap((0.0, 0.0, 1.0, 1.0), (1.0, 0.0, 2.0, 1.0))
        assert not aabb_overlap((0.0, 0.0, 1.0, 1.0), (1.01, 0.0, 2.0, 1.0))


# ── Grid broad-phase ──────────────────────────────────────────────


class TestUniformGrid:
    @pytest.mark.parametrize("seed", [0, 1, 2])
    @pytest.mark.parametrize("cell_size", [None, 0.3, 2.5])
    def test_superset_of_narrow_phase(self, seed: int, cell_size: float | None) -> None:
        bodies = _random_bodies(seed)
        candidates = set(_ids(UniformGridBroadPhase(cell_size=cell_size).candidate_pairs(bodies)))
        for i in range(len(bodies)):
            for j in range(i + 1, len(bodies)):
                if detect(bodies[i], bodies[j]) is not None:
                    assert (bodies[i].id, bodies[j].id) in candidates

    @pytest.mark.parametrize("seed", [3, 4])
    def test_matches_brute_force(self, seed: int) -> None:
        bodies = _random_bodies(seed)
        grid = _ids(UniformGridBroadPhase().candidate_pairs(bodies))
        assert grid == _ids(brute_force_pairs(bodies))

    def test_no_self_or_duplicate_pairs(self) -> None:
        bodies = _random_bodies(5, n=80, extent=5.0)
        pairs = _ids(UniformGridBroadPhase(cell_size=0.5).candidate_pairs(bodies))
        assert all(a != b for a, b in pairs)
        unordered = {frozenset(p) for p in pairs}
        assert len(unordered) == len(pairs)

    def test_pairs_follow_body_order(self) -> None:
        bodies = _random_bodies(6, n=50, extent=4.0)
        pairs = _ids(UniformGridBroadPhase().candidate_pairs(bodies))
        assert pairs == sorted(pairs)
        assert all(a < b for a, b in pairs)

    def test_excludes_distant_pairs(self) -> None:
        a = create_circle_body((0.0, 0.0), radius=0.5, body_id="a")
        b = create_circle_body((10.0, 0.0), radius=0.5, body_id="b")
        assert UniformGridBroadPhase().candidate_pairs([a, b]) == []

    def test_excludes_static_static(self) -> None:
        a = create_box_body((0.0, 0.0), 2.0, 2.0, mass=math.inf, body_id="a")
        b = create_box_body((0.5, 0.0), 2.0, 2.0, mass=math.inf, body_id="b")
        assert UniformGridBroadPhase().candidate_pairs([a, b]) == []
        assert brute_force_pairs([a, b]) == []

    def test_static_dynamic_kept(self) -> None:
        floor = create_box_body((0.0, -0.5), 10.0, 1.0, mass=math.inf, body_id="floor")
        ball = create_circle_body((0.0, 0.4), radius=0.5, body_id="ball")
        assert _ids(UniformGridBroadPhase().candidate_pairs([floor, ball])) == [("floor", "ball")]

    def test_oversized_body_is_still_paired(self) -> None:
        floor = create_box_body((0.0, -0.5), 1000.0, 1.0, mass=math.inf, body_id="floor")
        balls = [create_circle_body((x, 0.4), radius=0.5, body_id=f"ball{k}")
                 for k, x in enumerate([-300.0, 0.0, 450.0])]
        bp = UniformGridBroadPhase(cell_size=0.5, max_cells_per_body=16)
        pairs = set(_ids(bp.candidate_pairs([floor, *balls])))
        assert pairs == {("floor", "ball0"), ("floor", "ball1"), ("floor", "ball2")}

    def test_fewer_than_two_bodies(self) -> None:
        bp = UniformGridBroadPhase()
        assert bp.candidate_pairs([]) == []
        assert bp.candidate_pairs([create_circle_body((0.0, 0.0))]) == []

    def test_auto_cell_size_ignores_static_bodies(self) -> None:
        floor = create_box_body((0.0, -0.5), 1000.0, 1.0, mass=math.inf)
        ball = create_circle_body((0.0, 0.4), radius=0.5)
        bodies = [floor, ball]
        size = UniformGridBroadPhase.auto_cell_size(bodies, [compute_aabb(b) for b in bodies])
        assert math.isclose(size, 2.0)
