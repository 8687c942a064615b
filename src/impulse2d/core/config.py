# src/impulse2d/core/config.py

from __future__ import annotations
from dataclasses import dataclass, fields, asdict
import math
from typing import Any, Mapping


@dataclass
class SimConfig:
    gravity: tuple[float, float] = (0.0, -9.81)
    fixed_dt: float = 1.0 / 60.0
    correction_percent: float = 0.8     # fraction of penetration removed per step
    slop: float = 0.01                  # penetration left alone to avoid jitter
    solver_iterations: int = 1
    max_steps_per_tick: int = 8
    cell_size: float | None = None      # None: derived from body sizes every step
    max_cells_per_body: int = 1024

    def __post_init__(self):
        g = tuple(float(x) for x in self.gravity)
        if len(g) != 2 or not all(math.isfinite(x) for x in g):
            raise ValueError(f"gravity must be a finite 2-vector, got {self.gravity}")
        self.gravity = g
        if not self.fixed_dt > 0.0:
            raise ValueError(f"fixed_dt must be positive, got {self.fixed_dt}")
        if not 0.0 < self.correction_percent <= 1.0:
            raise ValueError(f"correction_percent must be in (0, 1], got {self.correction_percent}")
        if self.slop < 0.0:
            raise ValueError(f"slop must be non-negative, got {self.slop}")
        if self.solver_iterations < 1:
            raise ValueError("solver_iterations must be >= 1")
        if self.max_steps_per_tick < 1:
            raise ValueError("max_steps_per_tick must be >= 1")
        if self.cell_size is not None and not self.cell_size > 0.0:
            raise ValueError(f"cell_size must be positive or None, got {self.cell_size}")
        if self.max_cells_per_body < 1:
            raise ValueError("max_cells_per_body must be >= 1")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "SimConfig":
        data = dict(data or {})
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown SimConfig keys: {unknown}")
        if "gravity" in data:
            data["gravity"] = tuple(data["gravity"])
        return cls(**data)

    @classmethod
    def from_args(cls, args, base: "SimConfig | None" = None) -> "SimConfig":
        """Overlay argparse values that are set (not None) on top of `base`."""
        kwargs = asdict(base) if base is not None else {}
        for f in fields(cls):
            name = f.name
            value = getattr(args, name, None)
            if value is None:
                continue
            # CLI gravity is a single downward magnitude
            if name == 'gravity':
                kwargs[name] = (0.0, -float(value))
            else:
                kwargs[name] = value
        return cls(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
