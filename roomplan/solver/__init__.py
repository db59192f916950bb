"""Constraint solver façade: angle relaxation and fixed-length enforcement."""

from __future__ import annotations

from .angles import angle_error, enforce_all_angles
from .config import get_solver_options, set_solver_options
from .lengths import check_fixed_lengths, enforce_fixed_lengths, fixed_anchors
from .math_utils import (
    Point,
    circle_intersections,
    closest_circle_intersection,
    interior_angle,
    is_clockwise,
    project_onto_circle,
    raw_angle,
    rotate_about,
    wrap_degrees,
)
from .model import (
    AngleReport,
    AngleTargets,
    EdgeKey,
    LengthTargets,
    SolverOptions,
    VertexIndex,
    edge_key,
)

__all__ = [
    "AngleReport",
    "AngleTargets",
    "EdgeKey",
    "LengthTargets",
    "Point",
    "SolverOptions",
    "VertexIndex",
    "angle_error",
    "check_fixed_lengths",
    "circle_intersections",
    "closest_circle_intersection",
    "edge_key",
    "enforce_all_angles",
    "enforce_fixed_lengths",
    "fixed_anchors",
    "get_solver_options",
    "interior_angle",
    "is_clockwise",
    "project_onto_circle",
    "raw_angle",
    "rotate_about",
    "set_solver_options",
    "wrap_degrees",
]
