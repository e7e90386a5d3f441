from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace

import numpy as np
import pytest

from pinetree import (
    InvalidParameterError,
    NodeNotFoundError,
    SceneConfig,
    SceneHost,
    ShapeParameters,
    make_shape_parameters,
)
from pinetree.transforms import make_rotation_y


def test_initial_scene_holds_default_tree(host):
    assert host.tree.node_count == 21
    assert host.generation == 0
    assert host.camera.aspect == pytest.approx(1280 / 720)


def test_parameter_commit_rebuilds_tree(host):
    old_tree = host.tree

    new_tree = host.set_parameter("branching_factor", 3)

    assert host.tree is new_tree
    assert new_tree is not old_tree
    assert new_tree.node_count == 1 + 3 + 9
    assert new_tree.params.recursion_depth == 2
    assert host.generation == 1


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("branching_factor", 1),
        ("branching_factor", 11),
        ("recursion_depth", 0),
        ("recursion_depth", 2.5),
        ("scaling_factor", 3),
    ],
)
def test_rejected_parameter_keeps_current_tree(host, name, value):
    old_tree = host.tree

    with pytest.raises(InvalidParameterError):
        host.set_parameter(name, value)

    assert host.tree is old_tree
    assert host.generation == 0


def test_invalid_rebuild_keeps_current_tree(host):
    old_tree = host.tree

    with pytest.raises(InvalidParameterError):
        host.rebuild(replace(host.params, branch_angle=float("nan")))

    assert host.tree is old_tree


def test_node_budget_rejects_huge_trees():
    host = SceneHost(config=SceneConfig(max_nodes=1_000))
    old_tree = host.tree

    with pytest.raises(InvalidParameterError):
        host.set_parameter("recursion_depth", 10)

    assert host.tree is old_tree


def test_rebuild_discards_grafts(host):
    host.graft(1, (1.0, 0.0, 0.0), (1.0, 0.0, 0.0))
    assert host.tree.node_count == 22

    host.set_parameter("recursion_depth", 2)

    assert host.tree.node_count == 21


def test_graft_unknown_node(host):
    with pytest.raises(NodeNotFoundError):
        host.graft(404, (0.0, 0.0, 0.0), (1.0, 0.0, 0.0))


def test_click_on_trunk_grafts_onto_root(trunk_only_params):
    host = SceneHost(params=trunk_only_params)

    node = host.click(0.0, 0.0)

    assert node is not None
    assert node.parent is host.tree.root
    assert node.grafted
    assert host.tree.node_count == 2


def test_click_pixel_uses_viewport(trunk_only_params):
    host = SceneHost(params=trunk_only_params)
    host.resize(800, 600)

    node = host.click_pixel(400, 300)

    assert node is not None
    assert node.parent_id == 1


def test_click_on_empty_space_misses(trunk_only_params):
    host = SceneHost(params=trunk_only_params)

    assert host.click(0.9, 0.9) is None
    assert host.tree.node_count == 1


def test_pick_reports_nearest_hit(trunk_only_params):
    host = SceneHost(params=trunk_only_params)

    hits = host.pick(0.0, 0.0)

    assert len(hits) == 1
    assert hits[0].distance == pytest.approx(299.0)


def test_frames_turn_whole_tree(host):
    before = [node.matrix.copy() for node in host.tree.iter_nodes()]

    host.advance_frames(250)

    nodes = list(host.tree.iter_nodes())
    np.testing.assert_allclose(nodes[0].matrix, make_rotation_y(0.25) @ before[0], atol=1e-12)
    for node, matrix in zip(nodes[1:], before[1:]):
        np.testing.assert_allclose(node.matrix, matrix)
    assert host.frame == 250


def test_resize_updates_camera(host):
    host.resize(1000, 500)

    assert host.camera.aspect == pytest.approx(2.0)
    assert host.viewport == (1000, 500)


def test_snapshot_is_serializable(host):
    snapshot = host.snapshot()

    assert set(snapshot) == {"generation", "frame", "viewport", "camera", "light", "tree"}
    tree = snapshot["tree"]
    assert tree["node_count"] == len(tree["nodes"]) == 21
    assert tree["nodes"][0]["parent_id"] is None
    assert len(tree["nodes"][0]["matrix"]) == 16
    assert snapshot["light"]["intensity"] == 3.0


def test_config_from_env():
    config = SceneConfig.from_env({"PINETREE_MAX_NODES": "50", "PINETREE_LOG_LEVEL": "debug"})

    assert config.max_nodes == 50
    assert config.log_level == "DEBUG"
    assert config.rotation_per_frame == pytest.approx(1e-3)


def test_node_budget_handles_enormous_depth(host):
    old_tree = host.tree

    with pytest.raises(InvalidParameterError, match="would exceed the limit"):
        host.rebuild(make_shape_parameters(branching_factor=10, recursion_depth=30_000_000))

    assert host.tree is old_tree


def test_concurrent_rebuilds_swap_whole_trees(caplog):
    caplog.set_level(logging.INFO, logger="pinetree.scene")
    host = SceneHost()
    requests = [host.params.evolve(branching_factor=b, recursion_depth=d) for b in (2, 3, 4, 5) for d in (1, 2, 3)]
    snapshots = []
    done = threading.Event()

    def read_while_building():
        while not done.is_set():
            snapshots.append(host.snapshot())

    reader = threading.Thread(target=read_while_building)
    reader.start()
    with ThreadPoolExecutor(max_workers=4) as pool:
        list(pool.map(host.rebuild, requests))
    done.set()
    reader.join()
    snapshots.append(host.snapshot())

    for snapshot in snapshots:
        tree = snapshot["tree"]
        params = ShapeParameters(**tree["params"])
        assert tree["node_count"] == len(tree["nodes"]) == params.expected_node_count()

    swaps = [record.args for record in caplog.records if record.getMessage().startswith("Rebuilt tree")]
    assert [generation for generation, _ in swaps] == list(range(1, len(requests) + 1))
    assert host.generation == len(requests)
    assert swaps[-1] == (host.generation, host.tree.node_count)
    assert host.tree.params in requests
