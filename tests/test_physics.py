"""Tests for the integrator and the full physics step."""
from __future__ import annotations

import math

import numpy as np
import pytest

from impulse2d.core import (
    CollisionEvent,
    SimConfig,
    World,
    create_box_body,
    create_circle_body,
    integrate_bodies,
    step_physics,
)


def _world(gravity=(0.0, 0.0), **kwargs) -> World:
    return World(config=SimConfig(gravity=gravity, **kwargs))


def _floor(world: World, width: float = 10.0) -> None:
    world.add_body(create_box_body((0.0, -0.5), width, 1.0, mass=math.inf, body_id="floor"))


# ── Integration ───────────────────────────────────────────────────


class TestIntegrator:
    def test_semi_implicit_free_fall(self) -> None:
        world = _world(gravity=(0.0, -10.0))
        world.add_body(create_circle_body((0.0, 0.0), radius=0.1, body_id="ball"))
        for _ in range(50):
            world.step(0.01)
        ball = world.get_body("ball")
        # v_n = g*dt*n, y_n = g*dt^2 * n(n+1)/2
        np.testing.assert_allclose(ball.vel, [0.0, -5.0], atol=1e-9)
        np.testing.assert_allclose(ball.pos, [0.0, -1.275], atol=1e-9)
        assert math.isclose(world.time, 0.5)

    def test_force_accelerates_by_inverse_mass(self) -> None:
        world = _world()
        world.add_body(create_circle_body((0.0, 0.0), mass=2.0, body_id="b"))
        world.apply_force("b", (20.0, 0.0))
        world.step(0.1)
        b = world.get_body("b")
        np.testing.assert_allclose(b.vel, [1.0, 0.0])
        np.testing.assert_allclose(b.pos, [0.1, 0.0])

    def test_torque_spins_body(self) -> None:
        world = _world()
        world.add_body(create_circle_body((0.0, 0.0), radius=1.0, mass=1.0, body_id="b"))  # I = 0.5
        world.get_body("b").apply_torque(2.0)
        world.step(0.1)
        b = world.get_body("b")
        assert math.isclose(b.angular_velocity, 0.4)
        assert math.isclose(b.angle, 0.04)

    def test_static_bodies_never_move(self) -> None:
        world = _world(gravity=(0.0, -10.0))
        _floor(world)
        world.apply_force("floor", (100.0, 100.0))
        for _ in range(10):
            world.step(0.05)
        floor = world.get_body("floor")
        np.testing.assert_array_equal(floor.pos, [0.0, -0.5])
        np.testing.assert_array_equal(floor.vel, [0.0, 0.0])
        assert floor.angle == 0.0

    def test_integrate_bodies_skips_static(self) -> None:
        ball = create_circle_body((0.0, 1.0))
        wall = create_box_body((5.0, 0.0), 1.0, 4.0, mass=math.inf)
        integrate_bodies([ball, wall], (0.0, -10.0), 0.1)
        np.testing.assert_allclose(ball.vel, [0.0, -1.0])
        np.testing.assert_array_equal(wall.vel, [0.0, 0.0])


# ── Step contract ─────────────────────────────────────────────────


class TestStepContract:
    def test_zero_dt_is_a_no_op(self) -> None:
        world = _world(gravity=(0.0, -10.0))
        world.add_body(create_circle_body((1.0, 2.0), vel=(3.0, 4.0), body_id="b"))
        world.apply_force("b", (1.0, 0.0))
        assert world.step(0.0) == []
        b = world.get_body("b")
        np.testing.assert_array_equal(b.pos, [1.0, 2.0])
        np.testing.assert_array_equal(b.vel, [3.0, 4.0])
        np.testing.assert_array_equal(b.force, [1.0, 0.0])
        assert world.time == 0.0

    def test_negative_dt_rejected(self) -> None:
        world = _world()
        with pytest.raises(ValueError):
            world.step(-0.01)
        with pytest.raises(ValueError):
            step_physics(world, -1.0)

    def test_forces_cleared_after_step(self) -> None:
        world = _world()
        world.add_body(create_circle_body((0.0, 0.0), body_id="b"))
        world.apply_force("b", (5.0, 0.0), point=(0.0, 1.0))
        world.step(0.1)
        b = world.get_body("b")
        np.testing.assert_array_equal(b.force, [0.0, 0.0])
        assert b.torque == 0.0

    def test_default_dt_comes_from_config(self) -> None:
        world = _world(fixed_dt=0.25)
        world.step()
        assert world.time == 0.25

    def test_empty_world_steps(self) -> None:
        world = _world()
        assert world.step(0.1) == []
        assert math.isclose(world.time, 0.1)


# ── Collisions through the pipeline ───────────────────────────────


class TestCollisionPipeline:
    def test_collision_event_reported(self) -> None:
        world = _world()
        world.add_body(create_circle_body((0.0, 0.0), vel=(1.0, 0.0), radius=0.5, body_id="a"))
        world.add_body(create_circle_body((0.95, 0.0), vel=(-1.0, 0.0), radius=0.5, body_id="b"))
        events = world.step(0.01)
        assert len(events) == 1
        ev = events[0]
        assert isinstance(ev, CollisionEvent)
        assert (ev.a_id, ev.b_id) == ("a", "b")
        assert ev.impulse > 0.0
        assert ev.relative_speed > 0.0
        assert ev.t == world.time
        np.testing.assert_allclose(ev.normal, [1.0, 0.0], atol=1e-12)

    def test_momentum_conserved_without_gravity(self) -> None:
        world = _world()
        world.add_body(create_box_body((0.0, 0.0), 1.0, 1.0, vel=(2.0, 0.3), mass=2.0, body_id="box"))
        world.add_body(create_circle_body((1.5, 0.2), vel=(-1.0, 0.0), radius=0.5, body_id="ball"))
        before = sum(b.mass * b.vel for b in world.bodies.values())
        n_events = 0
        for _ in range(60):
            n_events += len(world.step(1.0 / 60.0))
        after = sum(b.mass * b.vel for b in world.bodies.values())
        assert n_events > 0
        np.testing.assert_allclose(after, before, atol=1e-9)

    def test_ball_bounces_off_floor(self) -> None:
        world = _world(gravity=(0.0, -10.0))
        _floor(world)
        world.add_body(create_circle_body((0.0, 2.0), radius=0.5, restitution=1.0, body_id="ball"))
        bounced = False
        for _ in range(120):
            world.step(1.0 / 120.0)
            if world.get_body("ball").vel[1] > 0.0:
                bounced = True
                break
        assert bounced
        assert world.get_body("ball").pos[1] > 0.4

    def test_circle_comes_to_rest_on_floor(self) -> None:
        world = _world(gravity=(0.0, -9.81))
        _floor(world)
        world.add_body(create_circle_body((0.0, 0.5), radius=0.5, restitution=0.0, body_id="ball"))
        for _ in range(300):
            world.step(1.0 / 60.0)
        ball = world.get_body("ball")
        penetration = 0.5 - ball.pos[1]
        # steady state sits just past the slop
        assert 0.0 < penetration < 0.015
        assert abs(ball.vel[1]) < 1e-6
        assert abs(ball.pos[0]) < 1e-9
        assert abs(ball.angular_velocity) < 1e-9

    def test_box_comes_to_rest_on_floor(self) -> None:
        world = _world(gravity=(0.0, -9.81))
        _floor(world)
        world.add_body(create_box_body((0.0, 0.6), 1.0, 1.0, restitution=0.0, body_id="box"))
        for _ in range(300):
            world.step(1.0 / 60.0)
        box = world.get_body("box")
        assert 0.485 < box.pos[1] <= 0.5
        assert abs(box.pos[0]) < 1e-9
        assert abs(box.angle) < 1e-9
        assert abs(box.angular_velocity) < 1e-9
        assert abs(box.vel[1]) < 1e-6

    def test_elastic_box_bounces_without_spin(self) -> None:
        world = _world(gravity=(0.0, -10.0))
        world.add_body(create_box_body((0.0, -0.5), 10.0, 1.0, mass=math.inf, restitution=1.0, body_id="floor"))
        world.add_body(create_box_body((0.0, 1.5), 1.0, 1.0, restitution=1.0, body_id="box"))
        box = world.get_body("box")
        for _ in range(120):
            world.step(1.0 / 120.0)
            if box.vel[1] > 0.0:
                break
        assert box.vel[1] > 3.0
        assert abs(box.angular_velocity) < 1e-9
        assert abs(box.vel[0]) < 1e-9

    def test_static_pair_overlap_ignored(self) -> None:
        world = _world()
        world.add_body(create_box_body((0.0, 0.0), 2.0, 2.0, mass=math.inf, body_id="a"))
        world.add_body(create_box_body((0.5, 0.0), 2.0, 2.0, mass=math.inf, body_id="b"))
        assert world.step(0.1) == []
        np.testing.assert_array_equal(world.get_body("b").pos, [0.5, 0.0])
