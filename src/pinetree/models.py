"""Core structural primitives: shared resources, parameters, nodes and trees."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from itertools import count
from math import isfinite
from numbers import Integral, Real
from typing import Iterable, Iterator, Optional

import numpy as np

from .exceptions import InvalidParameterError, NodeNotFoundError
from .transforms import matrix_scale


@dataclass(frozen=True)
class CylinderGeometry:
    """Cylinder centred on the origin with its axis along local +Y."""

    radius: float
    height: float
    radial_segments: int = 32


@dataclass(frozen=True)
class StandardMaterial:
    color: int = 0x00FF00
    roughness: float = 0.5
    metalness: float = 0.5


@dataclass(frozen=True)
class ShapeParameters:
    """Inputs of one tree build.

    ``geometry`` and ``material`` are shared by every node the build produces.
    A geometry whose dimensions disagree with ``base_radius``/``base_length``
    is rejected; use :meth:`evolve` to change dimensions and get a matching one.
    """

    branching_factor: int = 4
    recursion_depth: int = 2
    base_radius: float = 1.0
    base_length: float = 200.0
    branch_angle: float = np.pi / 3
    scaling_factor: float = 2.0
    branch_length_padding: float = 0.8
    geometry: Optional[CylinderGeometry] = field(default=None, compare=False)
    material: Optional[StandardMaterial] = field(default=None, compare=False)

    def __post_init__(self) -> None:
        geometry = self.geometry
        if geometry is None:
            object.__setattr__(self, "geometry", CylinderGeometry(radius=self.base_radius, height=self.base_length))
        elif geometry.radius != self.base_radius or geometry.height != self.base_length:
            raise InvalidParameterError(
                f"Geometry {geometry.radius}x{geometry.height} does not match "
                f"base_radius={self.base_radius}, base_length={self.base_length}"
            )
        if self.material is None:
            object.__setattr__(self, "material", StandardMaterial())

    @property
    def child_scale(self) -> float:
        return 1.0 / self.scaling_factor

    def evolve(self, **changes: object) -> "ShapeParameters":
        """Copy with ``changes`` applied, keeping the shared geometry unless a dimension changes."""

        if "geometry" not in changes and ({"base_radius", "base_length"} & changes.keys()):
            changes["geometry"] = None
        return replace(self, **changes)

    def expected_node_count(self, limit: Optional[int] = None) -> int:
        """Total node count, or the first partial sum above ``limit`` once it is passed."""

        total = level = 1
        for _ in range(self.recursion_depth):
            level *= self.branching_factor
            total += level
            if limit is not None and total > limit:
                break
        return total

    def validate(self) -> None:
        """Raise :class:`InvalidParameterError` unless every value is usable."""

        for name in ("branching_factor", "recursion_depth"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, Integral):
                raise InvalidParameterError(f"{name} must be an integer, got {value!r}")
        if self.branching_factor < 1:
            raise InvalidParameterError(f"branching_factor must be >= 1, got {self.branching_factor}")
        if self.recursion_depth < 0:
            raise InvalidParameterError(f"recursion_depth must be >= 0, got {self.recursion_depth}")

        for name in ("base_radius", "base_length", "branch_angle", "scaling_factor", "branch_length_padding"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, Real) or not isfinite(value):
                raise InvalidParameterError(f"{name} must be a finite number, got {value!r}")
        if self.base_radius <= 0 or self.base_length <= 0:
            raise InvalidParameterError("base_radius and base_length must be positive")
        if self.scaling_factor <= 1:
            raise InvalidParameterError(f"scaling_factor must be > 1, got {self.scaling_factor}")
        if not 0 < self.branch_length_padding <= 1:
            raise InvalidParameterError(
                f"branch_length_padding must be in (0, 1], got {self.branch_length_padding}"
            )


@dataclass(eq=False)
class BranchNode:
    """One cylinder instance placed relative to its parent."""

    id: int
    geometry: CylinderGeometry
    material: StandardMaterial
    depth: int = 0
    grafted: bool = False
    matrix: np.ndarray = field(default_factory=lambda: np.eye(4))
    parent: Optional["BranchNode"] = field(default=None, repr=False)
    children: list["BranchNode"] = field(default_factory=list, repr=False)

    def add_child(self, child: "BranchNode") -> None:
        child.parent = self
        self.children.append(child)

    def apply_matrix(self, matrix: np.ndarray) -> None:
        """Apply ``matrix`` in the parent frame."""

        self.matrix = matrix @ self.matrix

    def iter_descendants(self) -> Iterable["BranchNode"]:
        for child in self.children:
            yield child
            yield from child.iter_descendants()

    def iter_ancestors(self) -> Iterator["BranchNode"]:
        node = self.parent
        while node is not None:
            yield node
            node = node.parent

    @property
    def parent_id(self) -> Optional[int]:
        return self.parent.id if self.parent is not None else None

    @property
    def position(self) -> np.ndarray:
        return self.matrix[:3, 3].copy()

    @property
    def scale(self) -> np.ndarray:
        return matrix_scale(self.matrix)

    @property
    def world_matrix(self) -> np.ndarray:
        world = self.matrix
        for ancestor in self.iter_ancestors():
            world = ancestor.matrix @ world
        return world

    @property
    def world_scale(self) -> np.ndarray:
        return matrix_scale(self.world_matrix)


@dataclass
class PineTree:
    """A built tree together with the parameters it came from."""

    params: ShapeParameters
    root: BranchNode
    _node_index: dict[int, BranchNode] = field(default_factory=dict, init=False, repr=False)
    _ids: Iterator[int] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._node_index = {}
        self._register_node(self.root)
        self._ids = count(start=max(self._node_index) + 1)

    def _register_node(self, node: BranchNode) -> None:
        self._node_index[node.id] = node
        for child in node.children:
            self._register_node(child)

    def next_node_id(self) -> int:
        return next(self._ids)

    def register_child(self, parent: BranchNode, child: BranchNode) -> None:
        if child.parent is not parent:
            parent.add_child(child)
        self._register_node(child)

    def find_node(self, node_id: int) -> Optional[BranchNode]:
        return self._node_index.get(node_id)

    def get_node(self, node_id: int) -> BranchNode:
        node = self.find_node(node_id)
        if node is None:
            raise NodeNotFoundError(node_id)
        return node

    def iter_nodes(self) -> Iterable[BranchNode]:
        yield self.root
        yield from self.root.iter_descendants()

    @property
    def node_count(self) -> int:
        return len(self._node_index)
