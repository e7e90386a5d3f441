"""Homogeneous 4x4 transform helpers.

Matrices are ``numpy`` arrays acting on column vectors, so ``a @ b`` applies
``b`` first. Applying a matrix to a node in its parent frame is therefore a
pre-multiplication.
"""

from __future__ import annotations

from math import atan2, cos, sin
from typing import Sequence

import numpy as np

_EPSILON = 1e-9


def identity() -> np.ndarray:
    return np.eye(4)


def make_translation(x: float, y: float, z: float) -> np.ndarray:
    matrix = np.eye(4)
    matrix[:3, 3] = (x, y, z)
    return matrix


def make_scale(x: float, y: float, z: float) -> np.ndarray:
    return np.diag((x, y, z, 1.0))


def make_rotation_y(theta: float) -> np.ndarray:
    c, s = cos(theta), sin(theta)
    return np.array(
        [
            [c, 0.0, s, 0.0],
            [0.0, 1.0, 0.0, 0.0],
            [-s, 0.0, c, 0.0],
            [0.0, 0.0, 0.0, 1.0],
        ]
    )


def make_rotation_z(theta: float) -> np.ndarray:
    c, s = cos(theta), sin(theta)
    return np.array(
        [
            [c, -s, 0.0, 0.0],
            [s, c, 0.0, 0.0],
            [0.0, 0.0, 1.0, 0.0],
            [0.0, 0.0, 0.0, 1.0],
        ]
    )


def normalize(vector: Sequence[float]) -> np.ndarray:
    """Return ``vector`` scaled to unit length, or a zero vector if it has none."""

    array = np.asarray(vector, dtype=float)
    length = float(np.linalg.norm(array))
    if length < _EPSILON:
        return np.zeros_like(array)
    return array / length


def make_rotation_axis(axis: Sequence[float], angle: float) -> np.ndarray:
    """Rotation of ``angle`` radians about ``axis`` (Rodrigues form)."""

    x, y, z = normalize(axis)
    c, s = cos(angle), sin(angle)
    t = 1.0 - c
    return np.array(
        [
            [t * x * x + c, t * x * y - s * z, t * x * z + s * y, 0.0],
            [t * x * y + s * z, t * y * y + c, t * y * z - s * x, 0.0],
            [t * x * z - s * y, t * y * z + s * x, t * z * z + c, 0.0],
            [0.0, 0.0, 0.0, 1.0],
        ]
    )


def rotate_vector(vector: Sequence[float], axis: Sequence[float], angle: float) -> np.ndarray:
    return make_rotation_axis(axis, angle)[:3, :3] @ np.asarray(vector, dtype=float)


def rotation_between(source: Sequence[float], target: Sequence[float]) -> np.ndarray:
    """Shortest rotation that carries unit vector ``source`` onto ``target``."""

    a = normalize(source)
    b = normalize(target)
    axis = np.cross(a, b)
    sine = float(np.linalg.norm(axis))
    cosine = float(np.dot(a, b))
    if sine < _EPSILON:
        if cosine > 0.0:
            return identity()
        # Opposite vectors: half turn about any axis perpendicular to ``a``.
        helper = np.array((1.0, 0.0, 0.0)) if abs(a[0]) < 0.9 else np.array((0.0, 0.0, 1.0))
        return make_rotation_axis(np.cross(a, helper), np.pi)
    return make_rotation_axis(axis / sine, atan2(sine, cosine))


def transform_point(matrix: np.ndarray, point: Sequence[float]) -> np.ndarray:
    homogeneous = matrix @ np.append(np.asarray(point, dtype=float), 1.0)
    return homogeneous[:3] / homogeneous[3]


def transform_direction(matrix: np.ndarray, direction: Sequence[float]) -> np.ndarray:
    """Apply the linear part of ``matrix`` only (no translation)."""

    return matrix[:3, :3] @ np.asarray(direction, dtype=float)


def matrix_scale(matrix: np.ndarray) -> np.ndarray:
    """Per-axis scale, read as the length of each basis column."""

    return np.linalg.norm(matrix[:3, :3], axis=0)


def to_column_major(matrix: np.ndarray) -> list[float]:
    """Flatten in the element order three.js ``Matrix4.fromArray`` expects."""

    return [float(value) for value in matrix.T.reshape(-1)]
