# src/impulse2d/utils/preset_loader.py

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Tuple

import yaml

from impulse2d.core.config import SimConfig


@dataclass(frozen=True)
class LoadedPreset:
    preset_path: Path
    resolved: Dict[str, Any]
    loaded_files: Tuple[Path, ...]  # includes, then the preset itself

    @property
    def sim_config(self) -> SimConfig:
        return SimConfig.from_dict(self.resolved.get("sim"))

    @property
    def scene(self) -> Dict[str, Any]:
        return dict(self.resolved.get("scene") or {})


def deep_merge(base: Any, override: Any) -> Any:
    """
    Merge override into base and return the merged value.

    Mappings merge recursively; lists and scalars in override replace base.
    """
    if isinstance(base, dict) and isinstance(override, dict):
        out = dict(base)
        for k, v in override.items():
            out[k] = deep_merge(out[k], v) if k in out else v
        return out
    if isinstance(override, list):
        return list(override)
    return override


def _load_yaml(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"YAML root must be a mapping: {path}")
    return data


def _resolve(path: Path, stack: Tuple[Path, ...], loaded: List[Path]) -> Dict[str, Any]:
    if path in stack:
        chain = " -> ".join(str(p) for p in (*stack, path))
        raise ValueError(f"Circular preset include: {chain}")
    data = _load_yaml(path)

    includes = data.pop("include", None) or []
    if not isinstance(includes, list):
        raise ValueError(f"'include' must be a list in {path}")

    merged: Dict[str, Any] = {}
    for rel in includes:
        if not isinstance(rel, str):
            raise ValueError(f"include entries must be strings, got {type(rel).__name__} in {path}")
        inc_path = (path.parent / rel).expanduser().resolve()
        merged = deep_merge(merged, _resolve(inc_path, (*stack, path), loaded))

    loaded.append(path)
    return deep_merge(merged, data)


def load_preset(preset_path: str | Path) -> LoadedPreset:
    """
    Load a preset YAML with optional nested includes:

      include:
        - base.yaml
      sim:
        gravity: [0.0, -9.81]
      scene:
        bodies: [...]

    Included files are merged first (in order), the preset's own keys last.
    """
    preset_path = Path(preset_path).expanduser().resolve()
    loaded: List[Path] = []
    resolved = _resolve(preset_path, (), loaded)
    return LoadedPreset(
        preset_path=preset_path,
        resolved=resolved,
        loaded_files=tuple(loaded),
    )
