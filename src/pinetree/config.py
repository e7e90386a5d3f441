"""Scene host configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

Vector3 = Tuple[float, float, float]


@dataclass(frozen=True)
class LightSettings:
    color: int = 0xFFFFFF
    intensity: float = 3.0
    position: Vector3 = (0.0, 1.0, 1.0)


@dataclass(frozen=True)
class SceneConfig:
    rotation_per_frame: float = 1e-3
    max_nodes: int = 200_000
    camera_fov: float = 45.0
    camera_near: float = 0.1
    camera_far: float = 1000.0
    camera_position: Vector3 = (0.0, 0.0, 300.0)
    viewport_width: int = 1280
    viewport_height: int = 720
    light: LightSettings = LightSettings()
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "SceneConfig":
        """Read overrides from ``PINETREE_*`` environment variables."""

        environ = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            rotation_per_frame=float(environ.get("PINETREE_ROTATION_PER_FRAME", defaults.rotation_per_frame)),
            max_nodes=int(environ.get("PINETREE_MAX_NODES", defaults.max_nodes)),
            log_level=environ.get("PINETREE_LOG_LEVEL", defaults.log_level).upper(),
        )
