from __future__ import annotations
import logging
import math
from typing import Any, Dict, List, Mapping
import numpy as np
from impulse2d.core import World, SimConfig, Body, create_circle_body, create_box_body, create_polygon_body
from impulse2d.core.broadphase import aabb_overlap, compute_aabb
from impulse2d.utils.random import rng

logger = logging.getLogger(__name__)

_PASSTHROUGH_KEYS = ("restitution", "static_friction", "dynamic_friction", "angular_velocity", "inertia")
_MAX_PLACEMENT_ATTEMPTS = 1000


def _mass(entry: Mapping[str, Any]) -> float:
    if entry.get("static", False):
        return math.inf
    return float(entry.get("mass", 1.0))


def body_from_dict(entry: Mapping[str, Any]) -> Body:
    """
    Build a body from a scene entry, e.g.

        {shape: box, width: 2, height: 1, pos: [0, 5], mass: 2, restitution: 0.3}
        {shape: circle, radius: 0.5, pos: [1, 8], vel: [0, -1]}
        {shape: polygon, vertices: [[0, 0], [1, 0], [0, 1]], pos: [3, 3], static: true}
    """
    shape = entry.get("shape")
    common: Dict[str, Any] = {k: entry[k] for k in _PASSTHROUGH_KEYS if k in entry}
    common["body_id"] = entry.get("id")
    common["mass"] = _mass(entry)
    pos = entry.get("pos", (0.0, 0.0))
    vel = entry.get("vel")

    if shape == "circle":
        return create_circle_body(pos, vel, radius=float(entry.get("radius", 1.0)),
                                  angle=float(entry.get("angle", 0.0)), **common)
    if shape == "box":
        return create_box_body(pos, float(entry["width"]), float(entry["height"]), vel=vel,
                               angle=float(entry.get("angle", 0.0)), **common)
    if shape == "polygon":
        return create_polygon_body(pos, entry["vertices"], vel=vel,
                                   angle=float(entry.get("angle", 0.0)), **common)
    raise ValueError(f"Unknown body shape {shape!r}; expected circle, box or polygon")


def make_walls(width: float, height: float, thickness: float = 1.0, **material) -> List[Body]:
    """Four immovable boxes whose inner faces enclose [0, width] x [0, height]."""
    t = float(thickness)
    w, h = float(width), float(height)
    specs = [
        ((0.5 * w, -0.5 * t), w + 2 * t, t),        # floor
        ((0.5 * w, h + 0.5 * t), w + 2 * t, t),     # ceiling
        ((-0.5 * t, 0.5 * h), t, h),                # left
        ((w + 0.5 * t, 0.5 * h), t, h),             # right
    ]
    return [create_box_body(pos, bw, bh, mass=math.inf, **material) for pos, bw, bh in specs]


def _overlaps_existing(world: World, pos: np.ndarray, radius: float) -> bool:
    box = (pos[0] - radius, pos[1] - radius, pos[0] + radius, pos[1] + radius)
    return any(aabb_overlap(box, compute_aabb(b)) for b in world.bodies.values())


def spawn_random_bodies(
    world: World,
    n: int,
    region: tuple[float, float, float, float],
    size: float = 0.5,
    kinds: tuple[str, ...] = ("circle", "box"),
    sigma_v: float = 0.0,
    mass: float = 1.0,
    **material,
) -> List[Body]:
    """Scatter n non-overlapping bodies inside region = (xmin, ymin, xmax, ymax)."""
    xmin, ymin, xmax, ymax = (float(x) for x in region)
    bound_r = size * math.sqrt(2.0)
    if xmax - xmin < 2 * bound_r or ymax - ymin < 2 * bound_r:
        raise ValueError(f"Region {region} is too small for bodies of size {size}")
    spawned: List[Body] = []
    for i in range(n):
        for _ in range(_MAX_PLACEMENT_ATTEMPTS):
            pos = np.array([
                rng("scene").uniform(xmin + bound_r, xmax - bound_r),
                rng("scene").uniform(ymin + bound_r, ymax - bound_r),
            ])
            if not _overlaps_existing(world, pos, bound_r):
                break
        else:
            raise ValueError(f"Could not place body {i} of {n} without overlap; region too crowded")

        vel = rng("velocity").normal(0.0, sigma_v, size=2) if sigma_v > 0 else np.zeros(2)
        kind = kinds[int(rng("scene").integers(len(kinds)))]
        if kind == "circle":
            body = create_circle_body(pos, vel, radius=size, mass=mass, **material)
        elif kind == "box":
            body = create_box_body(pos, 2 * size, 2 * size, vel=vel, mass=mass,
                                   angle=float(rng("scene").uniform(0, 2 * np.pi)), **material)
        else:
            raise ValueError(f"Unknown random body kind {kind!r}")
        world.add_body(body)
        spawned.append(body)
    return spawned


def make_world(sim_config: SimConfig, scene: Mapping[str, Any] | None = None) -> World:
    """Build a world from a preset's `scene` section."""
    scene = dict(scene or {})
    world = World(config=sim_config)

    walls = scene.get("walls")
    if walls:
        for wall in make_walls(**walls):
            world.add_body(wall)

    for entry in scene.get("bodies", []) or []:
        world.add_body(body_from_dict(entry))

    random_cfg = scene.get("random_bodies")
    if random_cfg:
        random_cfg = dict(random_cfg)
        random_cfg["kinds"] = tuple(random_cfg.get("kinds", ("circle", "box")))
        spawn_random_bodies(world, **random_cfg)

    logger.info("Built world with %d bodies", world.n_bodies)
    return world
