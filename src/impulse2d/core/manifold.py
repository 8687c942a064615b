# src/impulse2d/core/manifold.py

from __future__ import annotations
from dataclasses import dataclass
from typing import Tuple
import numpy as np

from .shapes import BodyId


@dataclass(frozen=True)
class CollisionManifold:
    """
    Contact data for one colliding pair, valid only for the step that built it.
    Bodies are referenced by id.
    """
    a_id: BodyId
    b_id: BodyId
    normal: np.ndarray                 # unit vector from a toward b
    penetration: float                 # >= 0
    contacts: Tuple[np.ndarray, ...]   # 1 or 2 world-space points

    def flipped(self) -> "CollisionManifold":
        """Same contact seen from b's side."""
        return CollisionManifold(
            a_id=self.b_id,
            b_id=self.a_id,
            normal=-self.normal,
            penetration=self.penetration,
            contacts=self.contacts,
        )
