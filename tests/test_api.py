from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from api import main
from pinetree import SceneHost


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setattr(main, "CURRENT_SCENE", SceneHost())
    return TestClient(main.app)


def test_get_state(client):
    response = client.get("/state")

    assert response.status_code == 200
    tree = response.json()["tree"]
    assert tree["node_count"] == 21
    assert tree["params"]["branching_factor"] == 4
    assert tree["geometry"]["height"] == 200.0


def test_get_parameters_lists_control_ranges(client):
    body = client.get("/parameters").json()

    assert body["adjustable"]["branching_factor"] == {"min": 2, "max": 10}
    assert body["adjustable"]["recursion_depth"] == {"min": 1, "max": 10}


def test_parameter_commit(client):
    response = client.post("/parameters", json={"name": "recursion_depth", "value": 1})

    assert response.status_code == 200
    assert response.json()["tree"]["node_count"] == 5
    assert response.json()["generation"] == 1


def test_out_of_range_parameter_is_rejected(client):
    response = client.post("/parameters", json={"name": "branching_factor", "value": 11})

    assert response.status_code == 422
    assert client.get("/state").json()["tree"]["node_count"] == 21


def test_rebuild_with_overrides(client):
    response = client.post("/rebuild", json={"branching_factor": 3, "recursion_depth": 1})

    assert response.status_code == 200
    assert response.json()["tree"]["node_count"] == 4


def test_rebuild_from_preset(client):
    response = client.post("/rebuild", json={"preset": "sapling"})

    assert response.status_code == 200
    assert response.json()["tree"]["params"]["base_length"] == 120.0


def test_rebuild_rejects_invalid_values(client):
    assert client.post("/rebuild", json={"scaling_factor": 0.5}).status_code == 422
    assert client.post("/rebuild", json={"preset": "oak"}).status_code == 404
    assert client.get("/state").json()["tree"]["node_count"] == 21


def test_graft_endpoint(client):
    response = client.post("/graft", json={"node_id": 1, "point": [1, 0, 0], "normal": [1, 0, 0]})

    assert response.status_code == 200
    body = response.json()
    assert body["node"]["parent_id"] == 1
    assert body["node"]["grafted"] is True
    assert body["state"]["tree"]["node_count"] == 22


def test_graft_unknown_node(client):
    response = client.post("/graft", json={"node_id": 999, "point": [1, 0, 0], "normal": [1, 0, 0]})

    assert response.status_code == 404


def test_click_endpoint(client):
    client.post("/rebuild", json={"recursion_depth": 0})

    hit = client.post("/click", json={"x": 0.0, "y": 0.0}).json()
    miss = client.post("/click", json={"x": 0.9, "y": 0.9}).json()

    assert hit["node"]["parent_id"] == 1
    assert miss["node"] is None
    assert miss["state"]["tree"]["node_count"] == 2


def test_click_needs_coordinates(client):
    assert client.post("/click", json={}).status_code == 422


def test_frame_and_resize(client):
    assert client.post("/frame", json={"count": 10}).json()["frame"] == 10

    body = client.post("/resize", json={"width": 800, "height": 400}).json()

    assert body["camera"]["aspect"] == pytest.approx(2.0)
    assert client.post("/resize", json={"width": 0, "height": 400}).status_code == 422


def test_rebuild_rejects_enormous_depth(client):
    response = client.post("/rebuild", json={"branching_factor": 10, "recursion_depth": 5000})

    assert response.status_code == 422
    assert client.get("/state").json()["tree"]["node_count"] == 21


def test_pick_reports_hits_without_grafting(client):
    client.post("/rebuild", json={"recursion_depth": 0})

    hits = client.get("/pick", params={"x": 0.0, "y": 0.0}).json()["hits"]

    assert [hit["node_id"] for hit in hits] == [1]
    assert hits[0]["distance"] == pytest.approx(299.0)
    assert hits[0]["local_normal"] == pytest.approx([0.0, 0.0, 1.0])
    assert client.get("/state").json()["tree"]["node_count"] == 1
    assert client.get("/pick", params={"x": 2.0, "y": 0.0}).status_code == 422
