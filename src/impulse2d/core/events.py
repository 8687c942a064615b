# src/impulse2d/core/events.py

from __future__ import annotations
from dataclasses import dataclass
from typing import Any
import numpy as np
from abc import ABC


@dataclass(kw_only=True)
class BaseEvent(ABC):
    """Marker base class so you can type on 'list[BaseEvent]'."""
    t: float  # simulation time at the end of the step that produced it
    a_id: Any = None
    b_id: Any = None

    def to_payload_dict(self) -> dict:
        """Convert event-specific data to a serializable dict."""
        return {}


@dataclass(kw_only=True)
class CollisionEvent(BaseEvent):
    a_id: Any
    b_id: Any
    pos: np.ndarray        # first contact point (2,)
    normal: np.ndarray     # unit normal from a to b (2,)
    penetration: float
    impulse: float         # total normal impulse applied this step
    relative_speed: float  # closing speed along the normal before resolution

    def to_payload_dict(self) -> dict:
        return {
            "pos": self.pos.tolist(),
            "normal": self.normal.tolist(),
            "penetration": self.penetration,
            "impulse": self.impulse,
            "relative_speed": self.relative_speed,
        }
