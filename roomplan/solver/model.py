"""Core data structures for the constraint solver."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from ..errors import ConvergenceWarning
from ..polish import PolishOptions
from .math_utils import Point

VertexIndex = int
EdgeKey = Tuple[int, int]
AngleTargets = Dict[VertexIndex, float]
LengthTargets = Dict[EdgeKey, float]


def edge_key(a: int, b: int) -> EdgeKey:
    """Order-independent key for the edge between ``a`` and ``b``."""

    return (a, b) if a <= b else (b, a)


@dataclass
class SolverOptions:
    """Tunable parameters of the relaxation solver.

    ``angle_tolerance`` is in degrees, ``length_tolerance`` in meters and
    ``max_iterations`` caps the number of full Gauss-Seidel sweeps per edit.
    """

    angle_tolerance: float = 1e-4
    length_tolerance: float = 1e-6
    max_iterations: int = 100
    polish: PolishOptions = field(default_factory=PolishOptions)


@dataclass
class AngleReport:
    """Outcome of one :func:`enforce_all_angles` call."""

    vertices: List[Point]
    converged: bool
    iterations: int
    max_error: float
    conflicts: List[VertexIndex] = field(default_factory=list)
    warnings: List[ConvergenceWarning] = field(default_factory=list)


__all__ = [
    "AngleReport",
    "AngleTargets",
    "EdgeKey",
    "LengthTargets",
    "SolverOptions",
    "VertexIndex",
    "edge_key",
]
