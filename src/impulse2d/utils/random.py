# src/impulse2d/utils/random.py

from __future__ import annotations

from typing import Dict
import numpy as np

_master_seed: int | None = None
_rngs: Dict[str, np.random.Generator] = {}


def seed_all(seed: int | None) -> None:
    """
    Set the master seed for scene generation.

    - If seed is None: streams are entropy-seeded (non-reproducible).
    - Resets cached named streams.
    """
    global _master_seed
    _master_seed = seed
    _rngs.clear()


def rng(name: str = "scene") -> np.random.Generator:
    """
    Return a named RNG stream. Draws are order-dependent within a stream but
    independent across names, so adding bodies does not perturb e.g. velocities.
    """
    if name not in _rngs:
        if _master_seed is None:
            _rngs[name] = np.random.default_rng()
        else:
            ss = np.random.SeedSequence([_master_seed, _stable_int(name)])
            _rngs[name] = np.random.default_rng(ss)
    return _rngs[name]


def _stable_int(s: str) -> int:
    """FNV-1a fold of the name, stable across processes unlike hash()."""
    h = 2166136261
    for b in s.encode("utf-8"):
        h ^= b
        h = (h * 16777619) & 0xFFFFFFFF
    return h
