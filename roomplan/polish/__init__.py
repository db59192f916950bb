"""Least-squares polishing stage for room polygons."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import numpy as np
from scipy.optimize import least_squares

Point2D = Tuple[float, float]


@dataclass
class PolishOptions:
    """Configuration knobs for the polishing optimizer."""

    enable: bool = False
    w_length: float = 10.0
    w_anchor: float = 10.0
    w_shape: float = 0.05
    max_nfev: int = 200


@dataclass
class PolishResult:
    vertices: List[Point2D]
    success: bool
    iterations: int
    residuals: Dict[str, float] = field(default_factory=dict)
    notes: List[str] = field(default_factory=list)


def _characteristic_scale(points: np.ndarray) -> float:
    span = points.max(axis=0) - points.min(axis=0)
    return max(float(np.hypot(span[0], span[1])), 1.0)


def _is_clockwise(points: np.ndarray) -> bool:
    x, y = points[:, 0], points[:, 1]
    return float(np.sum(x * np.roll(y, -1) - np.roll(x, -1) * y)) < 0.0


def _interior_angles(points: np.ndarray, indices: np.ndarray, clockwise: bool) -> np.ndarray:
    n = points.shape[0]
    v1 = points[(indices - 1) % n] - points[indices]
    v2 = points[(indices + 1) % n] - points[indices]
    cross = v1[:, 0] * v2[:, 1] - v1[:, 1] * v2[:, 0]
    dot = v1[:, 0] * v2[:, 0] + v1[:, 1] * v2[:, 1]
    raw = np.degrees(np.arctan2(cross, dot)) % 360.0
    if clockwise:
        return raw
    return (360.0 - raw) % 360.0


def _wrapped(diff: np.ndarray) -> np.ndarray:
    return (diff + 180.0) % 360.0 - 180.0


def polish_polygon(
    vertices: Sequence[Point2D],
    angle_targets: Mapping[int, float],
    length_targets: Mapping[Tuple[int, int], float],
    pinned: Iterable[int],
    options: PolishOptions,
    *,
    clockwise: Optional[bool] = None,
) -> PolishResult:
    """Refine ``vertices`` toward every angle and length target at once.

    Used after the relaxation loop gives up: all constraints are minimised
    jointly, ``pinned`` vertices are held near their current position, and a
    weak term keeps the other vertices close to where they started. Angles
    are measured on the inside for the winding given by ``clockwise``, or the
    winding of ``vertices`` when omitted.
    """

    start = [(float(x), float(y)) for x, y in vertices]
    if not options.enable or not angle_targets:
        return PolishResult(vertices=start, success=True, iterations=0)

    initial = np.asarray(start, dtype=float)
    scale = _characteristic_scale(initial)
    if clockwise is None:
        clockwise = _is_clockwise(initial)
    angle_idx = np.array(sorted(angle_targets), dtype=int)
    angle_goal = np.array([float(angle_targets[i]) for i in angle_idx], dtype=float)
    edges = sorted(length_targets)
    edge_i = np.array([a for a, _ in edges], dtype=int)
    edge_j = np.array([b for _, b in edges], dtype=int)
    edge_goal = np.array([float(length_targets[e]) for e in edges], dtype=float)
    pinned_idx = np.array(sorted(set(pinned)), dtype=int)

    def residuals(flat: np.ndarray) -> np.ndarray:
        pts = flat.reshape(-1, 2)
        parts = [np.radians(_wrapped(_interior_angles(pts, angle_idx, clockwise) - angle_goal))]
        if edges:
            lengths = np.hypot(*(pts[edge_j] - pts[edge_i]).T)
            parts.append(options.w_length * (lengths - edge_goal) / scale)
        if pinned_idx.size:
            parts.append(options.w_anchor * (pts[pinned_idx] - initial[pinned_idx]).ravel() / scale)
        parts.append(options.w_shape * (pts - initial).ravel() / scale)
        return np.concatenate(parts)

    result = least_squares(residuals, initial.ravel(), method="trf", max_nfev=options.max_nfev)
    solved = result.x.reshape(-1, 2)

    breakdown: Dict[str, float] = {}
    final_angles = _wrapped(_interior_angles(solved, angle_idx, clockwise) - angle_goal)
    for idx, err in zip(angle_idx, final_angles):
        breakdown[f"angle:{int(idx)}"] = float(abs(err))
    for (a, b), goal in zip(edges, edge_goal):
        actual = math.hypot(solved[b, 0] - solved[a, 0], solved[b, 1] - solved[a, 1])
        breakdown[f"length:{a}-{b}"] = abs(actual - float(goal))

    return PolishResult(
        vertices=[(float(x), float(y)) for x, y in solved],
        success=bool(result.success),
        iterations=int(result.nfev),
        residuals=breakdown,
        notes=[] if result.success else ["least_squares did not converge"],
    )


__all__ = [
    "PolishOptions",
    "PolishResult",
    "polish_polygon",
]
