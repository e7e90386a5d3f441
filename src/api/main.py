"""FastAPI app exposing the pine tree scene to the browser viewer."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel, Field

from pinetree import (
    ADJUSTABLE_RANGES,
    InvalidParameterError,
    NodeNotFoundError,
    SceneConfig,
    SceneHost,
    make_shape_parameters,
)
from pinetree.serialization import intersection_to_dict, node_to_dict, params_to_dict

CONFIG = SceneConfig.from_env()
logging.basicConfig(level=CONFIG.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

WEB_DIR = Path(__file__).resolve().parents[2] / "web"

app = FastAPI(title="Pine Tree Scene API")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.mount("/web", StaticFiles(directory=WEB_DIR, html=True, check_dir=False), name="web")


class ShapePayload(BaseModel):
    preset: Optional[str] = Field(default=None, description="Start from a named preset instead of the current tree.")
    branching_factor: Optional[int] = None
    recursion_depth: Optional[int] = None
    base_radius: Optional[float] = None
    base_length: Optional[float] = None
    branch_angle: Optional[float] = Field(default=None, description="Radians.")
    scaling_factor: Optional[float] = None
    branch_length_padding: Optional[float] = None


class ParameterRequest(BaseModel):
    name: str
    value: int


class GraftRequest(BaseModel):
    node_id: int
    point: tuple[float, float, float]
    normal: tuple[float, float, float]


class ClickRequest(BaseModel):
    x: Optional[float] = Field(default=None, ge=-1.0, le=1.0)
    y: Optional[float] = Field(default=None, ge=-1.0, le=1.0)
    client_x: Optional[float] = None
    client_y: Optional[float] = None


class FrameRequest(BaseModel):
    count: int = Field(default=1, ge=0, le=100_000)


class ResizeRequest(BaseModel):
    width: int = Field(gt=0)
    height: int = Field(gt=0)


CURRENT_SCENE = SceneHost(config=CONFIG)
logger.info("Initial tree has %d nodes", CURRENT_SCENE.tree.node_count)


def _invalid(error: InvalidParameterError) -> HTTPException:
    return HTTPException(status_code=422, detail=str(error))


@app.get("/state")
def get_state() -> dict[str, object]:
    return CURRENT_SCENE.snapshot()


@app.get("/parameters")
def get_parameters() -> dict[str, object]:
    return {
        "params": params_to_dict(CURRENT_SCENE.params),
        "adjustable": {name: {"min": low, "max": high} for name, (low, high) in ADJUSTABLE_RANGES.items()},
    }


@app.post("/rebuild")
def rebuild(request: ShapePayload) -> dict[str, object]:
    overrides = request.model_dump(exclude_none=True, exclude={"preset"})
    try:
        base = make_shape_parameters(request.preset) if request.preset else CURRENT_SCENE.params
        CURRENT_SCENE.rebuild(base.evolve(**overrides))
    except KeyError as error:
        raise HTTPException(status_code=404, detail=str(error.args[0])) from error
    except InvalidParameterError as error:
        raise _invalid(error) from error
    return CURRENT_SCENE.snapshot()


@app.post("/parameters")
def set_parameter(request: ParameterRequest) -> dict[str, object]:
    try:
        CURRENT_SCENE.set_parameter(request.name, request.value)
    except InvalidParameterError as error:
        raise _invalid(error) from error
    return CURRENT_SCENE.snapshot()


@app.post("/graft")
def graft(request: GraftRequest) -> dict[str, object]:
    try:
        node = CURRENT_SCENE.graft(request.node_id, request.point, request.normal)
    except NodeNotFoundError as error:
        raise HTTPException(status_code=404, detail="Node not found") from error
    except InvalidParameterError as error:
        raise _invalid(error) from error
    return {"node": node_to_dict(node), "state": CURRENT_SCENE.snapshot()}


@app.get("/pick")
def pick(x: float = Query(ge=-1.0, le=1.0), y: float = Query(ge=-1.0, le=1.0)) -> dict[str, object]:
    return {"hits": [intersection_to_dict(hit) for hit in CURRENT_SCENE.pick(x, y)]}


@app.post("/click")
def click(request: ClickRequest) -> dict[str, object]:
    try:
        if request.x is not None and request.y is not None:
            node = CURRENT_SCENE.click(request.x, request.y)
        elif request.client_x is not None and request.client_y is not None:
            node = CURRENT_SCENE.click_pixel(request.client_x, request.client_y)
        else:
            raise HTTPException(status_code=422, detail="Provide either x/y or client_x/client_y")
    except InvalidParameterError as error:
        raise _invalid(error) from error
    return {"node": node_to_dict(node) if node is not None else None, "state": CURRENT_SCENE.snapshot()}


@app.post("/frame")
def advance_frame(request: FrameRequest) -> dict[str, object]:
    CURRENT_SCENE.advance_frames(request.count)
    return CURRENT_SCENE.snapshot()


@app.post("/resize")
def resize(request: ResizeRequest) -> dict[str, object]:
    CURRENT_SCENE.resize(request.width, request.height)
    return CURRENT_SCENE.snapshot()
