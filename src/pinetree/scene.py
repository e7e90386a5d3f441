"""Scene host: owns the current tree and applies user interaction to it."""

from __future__ import annotations

import logging
import threading
from typing import Optional, Sequence

import numpy as np

from .builder import build_tree
from .camera import PerspectiveCamera, pointer_to_ndc
from .config import SceneConfig
from .exceptions import InvalidParameterError
from .grafting import graft_onto_tree
from .models import BranchNode, PineTree, ShapeParameters
from .picking import Intersection, intersect_tree
from .presets import make_shape_parameters
from .serialization import camera_to_dict, light_to_dict, tree_to_dict
from .transforms import make_rotation_y

logger = logging.getLogger(__name__)

# Values the parameter control surface may change, with inclusive bounds.
ADJUSTABLE_RANGES: dict[str, tuple[int, int]] = {
    "branching_factor": (2, 10),
    "recursion_depth": (1, 10),
}


class SceneHost:
    """Holds exactly one current tree plus the camera and light around it.

    Builds run outside the lock; only the swap is serialized, so readers see
    either the old tree or the new one and the last finished rebuild wins.
    """

    def __init__(self, params: Optional[ShapeParameters] = None, config: Optional[SceneConfig] = None) -> None:
        self.config = config or SceneConfig()
        self.camera = PerspectiveCamera(
            fov=self.config.camera_fov,
            aspect=self.config.viewport_width / self.config.viewport_height,
            near=self.config.camera_near,
            far=self.config.camera_far,
            position=np.array(self.config.camera_position, dtype=float),
        )
        self.viewport = (self.config.viewport_width, self.config.viewport_height)
        self.generation = 0
        self.frame = 0
        self._lock = threading.Lock()
        self._tree = self._build(params or make_shape_parameters())

    @property
    def tree(self) -> PineTree:
        with self._lock:
            return self._tree

    @property
    def params(self) -> ShapeParameters:
        return self.tree.params

    def _build(self, params: ShapeParameters) -> PineTree:
        try:
            params.validate()
            limit = self.config.max_nodes
            if params.expected_node_count(limit=limit) > limit:
                raise InvalidParameterError(
                    f"Tree with branching_factor={params.branching_factor} and "
                    f"recursion_depth={params.recursion_depth} would exceed the limit of {limit} nodes"
                )
        except InvalidParameterError as error:
            logger.warning("Rejected tree parameters: %s", error)
            raise
        return build_tree(params)

    def rebuild(self, params: ShapeParameters) -> PineTree:
        """Replace the current tree; on invalid input the old tree stays."""

        tree = self._build(params)
        with self._lock:
            self._tree = tree
            self.generation += 1
            logger.info("Rebuilt tree generation %d with %d nodes", self.generation, tree.node_count)
        return tree

    def set_parameter(self, name: str, value: int) -> PineTree:
        """Commit one control-surface edit and rebuild."""

        if name not in ADJUSTABLE_RANGES:
            raise InvalidParameterError(f"{name!r} is not adjustable; expected one of {sorted(ADJUSTABLE_RANGES)}")
        low, high = ADJUSTABLE_RANGES[name]
        if isinstance(value, bool) or not isinstance(value, int) or not low <= value <= high:
            logger.warning("Rejected %s=%r outside [%d, %d]", name, value, low, high)
            raise InvalidParameterError(f"{name} must be an integer in [{low}, {high}], got {value!r}")
        return self.rebuild(self.params.evolve(**{name: value}))

    def graft(self, node_id: int, local_point: Sequence[float], local_normal: Sequence[float]) -> BranchNode:
        with self._lock:
            return graft_onto_tree(self._tree, node_id, local_point, local_normal)

    def _pick(self, ndc_x: float, ndc_y: float) -> list[Intersection]:
        return intersect_tree(self._tree.root, self.camera.ray_from_ndc(ndc_x, ndc_y))

    def pick(self, ndc_x: float, ndc_y: float) -> list[Intersection]:
        """Nodes under the pointer, nearest first, without changing the tree."""

        with self._lock:
            return self._pick(ndc_x, ndc_y)

    def click(self, ndc_x: float, ndc_y: float) -> Optional[BranchNode]:
        """Graft a branch where the pointer ray first meets the tree."""

        with self._lock:
            hits = self._pick(ndc_x, ndc_y)
            if not hits:
                logger.debug("Click at (%.3f, %.3f) missed the tree", ndc_x, ndc_y)
                return None
            hit = hits[0]
            return graft_onto_tree(self._tree, hit.node.id, hit.local_point, hit.local_normal)

    def click_pixel(self, client_x: float, client_y: float) -> Optional[BranchNode]:
        width, height = self.viewport
        return self.click(*pointer_to_ndc(client_x, client_y, width, height))

    def resize(self, width: int, height: int) -> None:
        with self._lock:
            self.camera.resize(width, height)
            self.viewport = (width, height)

    def advance_frames(self, count: int = 1) -> None:
        """Turn the whole tree about world Y, as the render loop does each frame.

        Only the root is rotated, so branches keep their pose relative to
        their parents. Rotating every node in its own parent frame would also
        spin each branch about its parent's axis.
        """

        if count < 0:
            raise InvalidParameterError(f"Frame count must be non-negative, got {count}")
        with self._lock:
            self._tree.root.apply_matrix(make_rotation_y(self.config.rotation_per_frame * count))
            self.frame += count

    def snapshot(self) -> dict[str, object]:
        with self._lock:
            return {
                "generation": self.generation,
                "frame": self.frame,
                "viewport": {"width": self.viewport[0], "height": self.viewport[1]},
                "camera": camera_to_dict(self.camera),
                "light": light_to_dict(self.config.light),
                "tree": tree_to_dict(self._tree),
            }
