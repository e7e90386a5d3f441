"""Ray picking against the cylinders of a tree."""

from __future__ import annotations

from dataclasses import dataclass
from math import sqrt
from typing import Optional, Sequence

import numpy as np

from .exceptions import InvalidParameterError
from .models import BranchNode
from .transforms import normalize, transform_direction, transform_point

_EPSILON = 1e-9


@dataclass(frozen=True)
class Ray:
    origin: np.ndarray
    direction: np.ndarray

    @classmethod
    def from_points(cls, origin: Sequence[float], direction: Sequence[float]) -> "Ray":
        unit = normalize(direction)
        if not np.any(unit):
            raise InvalidParameterError("Ray direction must be non-zero")
        return cls(origin=np.asarray(origin, dtype=float), direction=unit)

    def at(self, distance: float) -> np.ndarray:
        return self.origin + self.direction * distance


@dataclass(frozen=True)
class Intersection:
    """A ray hit; ``distance`` and ``point`` are in world space."""

    distance: float
    point: np.ndarray
    local_point: np.ndarray
    local_normal: np.ndarray
    node: BranchNode


def _intersect_cylinder(
    origin: np.ndarray, direction: np.ndarray, radius: float, height: float
) -> Optional[tuple[float, np.ndarray]]:
    half_height = height / 2
    best: Optional[tuple[float, np.ndarray]] = None

    a = direction[0] ** 2 + direction[2] ** 2
    if a > _EPSILON:
        b = 2 * (origin[0] * direction[0] + origin[2] * direction[2])
        c = origin[0] ** 2 + origin[2] ** 2 - radius**2
        discriminant = b * b - 4 * a * c
        if discriminant >= 0:
            root = sqrt(discriminant)
            for t in sorted(((-b - root) / (2 * a), (-b + root) / (2 * a))):
                if t <= _EPSILON:
                    continue
                hit = origin + direction * t
                if -half_height <= hit[1] <= half_height:
                    best = (t, np.array((hit[0], 0.0, hit[2])) / radius)
                    break

    if abs(direction[1]) > _EPSILON:
        for cap_y, normal_y in ((half_height, 1.0), (-half_height, -1.0)):
            t = (cap_y - origin[1]) / direction[1]
            if t <= _EPSILON or (best is not None and t >= best[0]):
                continue
            hit = origin + direction * t
            if hit[0] ** 2 + hit[2] ** 2 <= radius**2:
                best = (t, np.array((0.0, normal_y, 0.0)))
    return best


def intersect_node(node: BranchNode, ray: Ray) -> Optional[Intersection]:
    """Intersect ``ray`` with the cylinder of ``node`` alone."""

    world = node.world_matrix
    inverse = np.linalg.inv(world)
    local_origin = transform_point(inverse, ray.origin)
    local_direction = transform_direction(inverse, ray.direction)

    hit = _intersect_cylinder(local_origin, local_direction, node.geometry.radius, node.geometry.height)
    if hit is None:
        return None
    # Affine maps keep the ray parameter, and the world direction is unit length.
    distance, local_normal = hit
    return Intersection(
        distance=float(distance),
        point=ray.at(distance),
        local_point=local_origin + local_direction * distance,
        local_normal=local_normal,
        node=node,
    )


def intersect_tree(root: BranchNode, ray: Ray) -> list[Intersection]:
    """All hits on ``root`` and its descendants, nearest first."""

    hits = []
    for node in (root, *root.iter_descendants()):
        intersection = intersect_node(node, ray)
        if intersection is not None:
            hits.append(intersection)
    hits.sort(key=lambda item: item.distance)
    return hits
