from __future__ import annotations

import pytest

from pinetree import SceneHost, ShapeParameters, make_shape_parameters


@pytest.fixture
def default_params() -> ShapeParameters:
    return make_shape_parameters()


@pytest.fixture
def trunk_only_params() -> ShapeParameters:
    return make_shape_parameters(recursion_depth=0)


@pytest.fixture
def host() -> SceneHost:
    return SceneHost()
