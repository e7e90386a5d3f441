"""Recursive branch generation."""

from __future__ import annotations

import logging
from itertools import count
from math import cos, pi, sin
from typing import Iterator

from .models import BranchNode, PineTree, ShapeParameters
from .transforms import make_rotation_y, make_rotation_z, make_scale, make_translation

logger = logging.getLogger(__name__)


class TreeBuilder:
    """Builds the full node hierarchy described by a :class:`ShapeParameters`.

    Each child is placed by pre-multiplying its local matrix, so every step is
    expressed in the parent frame:

    1. shrink by ``1 / scaling_factor``;
    2. tilt about Z by ``branch_angle``;
    3. shift along X so the tilted base meets the parent surface;
    4. fan around Y by ``i * 2π / branching_factor``;
    5. stagger along Y between near-base and near-tip.
    """

    def build(self, params: ShapeParameters) -> BranchNode:
        params.validate()
        ids = count(start=1)
        root = BranchNode(id=0, geometry=params.geometry, material=params.material)

        # Ids are handed out on pop and children pushed in reverse, giving depth-first pre-order.
        stack: list[tuple[BranchNode, int]] = [(root, params.recursion_depth)]
        while stack:
            node, remaining_depth = stack.pop()
            node.id = next(ids)
            if remaining_depth <= 0:
                continue
            children = list(self._spawn_children(node, params))
            stack.extend((child, remaining_depth - 1) for child in reversed(children))

        logger.debug(
            "Built tree with %d nodes (branching_factor=%d, recursion_depth=%d)",
            next(ids) - 1,
            params.branching_factor,
            params.recursion_depth,
        )
        return root

    def _spawn_children(self, parent: BranchNode, params: ShapeParameters) -> Iterator[BranchNode]:
        branching_factor = params.branching_factor
        parent_height = parent.geometry.height
        child_scale = params.child_scale
        angle = params.branch_angle

        x_offset = -parent_height * child_scale * sin(angle) / 2
        y_offset = (params.branch_length_padding - child_scale * cos(angle)) * parent_height / 2
        y_step = 2 * y_offset / (branching_factor - 1) if branching_factor > 1 else 0.0

        for index in range(branching_factor):
            child = BranchNode(
                id=0,
                geometry=params.geometry,
                material=params.material,
                depth=parent.depth + 1,
            )
            parent.add_child(child)
            child.matrix = make_scale(child_scale, child_scale, child_scale)
            child.apply_matrix(make_rotation_z(angle))
            child.apply_matrix(make_translation(x_offset, 0.0, 0.0))
            child.apply_matrix(make_rotation_y(index * 2 * pi / branching_factor))
            if branching_factor > 1:
                child.apply_matrix(make_translation(0.0, y_step * index - y_offset, 0.0))
            yield child


def build_tree(params: ShapeParameters) -> PineTree:
    """Build a tree and wrap its root in a :class:`PineTree` index."""

    return PineTree(params=params, root=TreeBuilder().build(params))
