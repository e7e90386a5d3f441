"""Procedural pine tree generation, grafting and scene hosting."""

from .builder import TreeBuilder, build_tree
from .camera import PerspectiveCamera, pointer_to_ndc
from .config import LightSettings, SceneConfig
from .exceptions import InvalidParameterError, NodeNotFoundError, PineTreeError
from .grafting import graft, graft_onto_tree
from .models import BranchNode, CylinderGeometry, PineTree, ShapeParameters, StandardMaterial
from .picking import Intersection, Ray, intersect_node, intersect_tree
from .presets import DEFAULT_SHAPE_PARAMS, SHAPE_PRESETS, make_shape_parameters
from .scene import ADJUSTABLE_RANGES, SceneHost
from .serialization import node_to_dict, tree_to_dict

__all__ = [
    "ADJUSTABLE_RANGES",
    "BranchNode",
    "CylinderGeometry",
    "DEFAULT_SHAPE_PARAMS",
    "Intersection",
    "InvalidParameterError",
    "LightSettings",
    "NodeNotFoundError",
    "PerspectiveCamera",
    "PineTree",
    "PineTreeError",
    "Ray",
    "SHAPE_PRESETS",
    "SceneConfig",
    "SceneHost",
    "ShapeParameters",
    "StandardMaterial",
    "TreeBuilder",
    "build_tree",
    "graft",
    "graft_onto_tree",
    "intersect_node",
    "intersect_tree",
    "make_shape_parameters",
    "node_to_dict",
    "pointer_to_ndc",
    "tree_to_dict",
]
