"""Named shape presets."""

from __future__ import annotations

from math import radians

from .models import ShapeParameters

DEFAULT_SHAPE_PARAMS: dict[str, float] = {
    "branching_factor": 4,
    "recursion_depth": 2,
    "base_radius": 1.0,
    "base_length": 200.0,
    "branch_angle": radians(60),
    "scaling_factor": 2.0,
    "branch_length_padding": 0.8,
}

_DEFAULT = ShapeParameters(**DEFAULT_SHAPE_PARAMS)

SHAPE_PRESETS: dict[str, ShapeParameters] = {
    "pine": _DEFAULT,
    "spruce": _DEFAULT.evolve(branching_factor=6, recursion_depth=3, branch_angle=radians(75)),
    "sapling": _DEFAULT.evolve(branching_factor=3, recursion_depth=1, base_length=120.0),
    "fir": _DEFAULT.evolve(branching_factor=5, recursion_depth=3, scaling_factor=2.5, branch_length_padding=1.0),
}


def make_shape_parameters(preset: str = "pine", **overrides: float) -> ShapeParameters:
    """Start from a named preset and apply keyword overrides."""

    try:
        base = SHAPE_PRESETS[preset]
    except KeyError:
        raise KeyError(f"Unknown preset {preset!r}; expected one of {sorted(SHAPE_PRESETS)}") from None
    return base.evolve(**overrides) if overrides else base
