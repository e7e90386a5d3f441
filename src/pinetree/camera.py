"""Perspective camera state used for viewport sizing and pointer rays."""

from __future__ import annotations

from dataclasses import dataclass, field
from math import radians, tan

import numpy as np

from .exceptions import InvalidParameterError
from .picking import Ray
from .transforms import normalize

WORLD_UP = np.array((0.0, 1.0, 0.0))


def pointer_to_ndc(client_x: float, client_y: float, width: float, height: float) -> tuple[float, float]:
    """Map pixel coordinates (origin top-left) to normalized device coordinates."""

    if width <= 0 or height <= 0:
        raise InvalidParameterError(f"Viewport size must be positive, got {width}x{height}")
    return (client_x / width) * 2 - 1, -(client_y / height) * 2 + 1


@dataclass
class PerspectiveCamera:
    fov: float = 45.0
    aspect: float = 1.0
    near: float = 0.1
    far: float = 1000.0
    position: np.ndarray = field(default_factory=lambda: np.array((0.0, 0.0, 300.0)))
    target: np.ndarray = field(default_factory=lambda: np.zeros(3))

    def resize(self, width: float, height: float) -> None:
        if width <= 0 or height <= 0:
            raise InvalidParameterError(f"Viewport size must be positive, got {width}x{height}")
        self.aspect = width / height

    def basis(self) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Return ``(forward, right, up)`` unit vectors in world space."""

        forward = normalize(self.target - self.position)
        right = normalize(np.cross(forward, WORLD_UP))
        if not np.any(right):
            right = np.array((1.0, 0.0, 0.0))
        up = np.cross(right, forward)
        return forward, right, up

    def ray_from_ndc(self, ndc_x: float, ndc_y: float) -> Ray:
        forward, right, up = self.basis()
        half_height = tan(radians(self.fov) / 2)
        direction = forward + right * (ndc_x * half_height * self.aspect) + up * (ndc_y * half_height)
        return Ray.from_points(self.position.copy(), direction)

