"""Serialization helpers for API and UI clients."""

from __future__ import annotations

from .camera import PerspectiveCamera
from .config import LightSettings
from .models import BranchNode, CylinderGeometry, PineTree, ShapeParameters, StandardMaterial
from .picking import Intersection
from .transforms import to_column_major


def geometry_to_dict(geometry: CylinderGeometry) -> dict[str, object]:
    return {
        "type": "cylinder",
        "radius": geometry.radius,
        "height": geometry.height,
        "radial_segments": geometry.radial_segments,
    }


def material_to_dict(material: StandardMaterial) -> dict[str, object]:
    return {
        "type": "standard",
        "color": material.color,
        "roughness": material.roughness,
        "metalness": material.metalness,
    }


def params_to_dict(params: ShapeParameters) -> dict[str, object]:
    return {
        "branching_factor": params.branching_factor,
        "recursion_depth": params.recursion_depth,
        "base_radius": params.base_radius,
        "base_length": params.base_length,
        "branch_angle": params.branch_angle,
        "scaling_factor": params.scaling_factor,
        "branch_length_padding": params.branch_length_padding,
    }


def node_to_dict(node: BranchNode) -> dict[str, object]:
    return {
        "id": node.id,
        "parent_id": node.parent_id,
        "depth": node.depth,
        "grafted": node.grafted,
        "matrix": to_column_major(node.matrix),
        "position": [float(value) for value in node.position],
        "scale": [float(value) for value in node.scale],
        "children": [child.id for child in node.children],
    }


def tree_to_dict(tree: PineTree) -> dict[str, object]:
    return {
        "params": params_to_dict(tree.params),
        "geometry": geometry_to_dict(tree.params.geometry),
        "material": material_to_dict(tree.params.material),
        "root": tree.root.id,
        "node_count": tree.node_count,
        "nodes": [node_to_dict(node) for node in tree.iter_nodes()],
    }


def camera_to_dict(camera: PerspectiveCamera) -> dict[str, object]:
    return {
        "fov": camera.fov,
        "aspect": camera.aspect,
        "near": camera.near,
        "far": camera.far,
        "position": [float(value) for value in camera.position],
        "target": [float(value) for value in camera.target],
    }


def light_to_dict(light: LightSettings) -> dict[str, object]:
    return {
        "type": "directional",
        "color": light.color,
        "intensity": light.intensity,
        "position": list(light.position),
    }


def intersection_to_dict(hit: Intersection) -> dict[str, object]:
    return {
        "node_id": hit.node.id,
        "distance": hit.distance,
        "point": [float(value) for value in hit.point],
        "local_point": [float(value) for value in hit.local_point],
        "local_normal": [float(value) for value in hit.local_normal],
    }
