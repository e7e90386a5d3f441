"""Runtime grafting of single branches onto a live tree."""

from __future__ import annotations

import logging
from math import pi
from typing import Sequence

import numpy as np

from .exceptions import InvalidParameterError
from .models import BranchNode, PineTree, ShapeParameters
from .transforms import (
    make_scale,
    make_translation,
    normalize,
    rotate_vector,
    rotation_between,
)

logger = logging.getLogger(__name__)

UP_AXIS = np.array((0.0, 1.0, 0.0))
_FALLBACK_AXIS = np.array((1.0, 0.0, 0.0))


def graft_direction(local_normal: Sequence[float], branch_angle: float) -> np.ndarray:
    """Growth axis of a grafted branch, tilted ``branch_angle`` away from local up."""

    normal = normalize(local_normal)
    if not np.any(normal):
        raise InvalidParameterError("Surface normal must be non-zero")
    axis = normalize(np.cross(normal, UP_AXIS))
    if not np.any(axis):
        axis = _FALLBACK_AXIS
    return normalize(rotate_vector(normal, axis, pi / 2 - branch_angle))


def graft(
    target: BranchNode,
    local_point: Sequence[float],
    local_normal: Sequence[float],
    params: ShapeParameters,
    node_id: int = 0,
) -> BranchNode:
    """Attach one new branch to ``target`` at a point on its surface.

    ``local_point`` and ``local_normal`` are in ``target``'s local frame. The
    branch is one generation smaller than ``target`` and is pushed outward
    along its own axis by half its scaled length so its base sits on the
    surface.
    """

    point = np.asarray(local_point, dtype=float)
    if point.shape != (3,) or not np.all(np.isfinite(point)):
        raise InvalidParameterError(f"Attach point must be three finite numbers, got {local_point!r}")

    direction = graft_direction(local_normal, params.branch_angle)
    child_scale = params.child_scale
    offset = direction * (params.base_length * child_scale / 2)

    child = BranchNode(
        id=node_id,
        geometry=params.geometry,
        material=params.material,
        depth=target.depth + 1,
        grafted=True,
    )
    child.matrix = make_translation(*(point + offset)) @ rotation_between(UP_AXIS, direction) @ make_scale(
        child_scale, child_scale, child_scale
    )
    target.add_child(child)
    return child


def graft_onto_tree(
    tree: PineTree,
    node_id: int,
    local_point: Sequence[float],
    local_normal: Sequence[float],
) -> BranchNode:
    """Graft onto the node ``node_id`` of ``tree`` and index the new branch."""

    target = tree.get_node(node_id)
    child = graft(target, local_point, local_normal, tree.params, node_id=tree.next_node_id())
    tree.register_child(target, child)
    logger.info("Grafted node %d onto node %d", child.id, target.id)
    return child
