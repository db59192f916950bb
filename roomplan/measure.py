"""Pure polygon measurements: true and carpet area/perimeter."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

import numpy as np

Point = Tuple[float, float]

CARPET_MARGIN = 0.1
"""Outward installation allowance per edge, in meters."""

_EPS = 1e-12

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Measurements:
    true_area: float
    carpet_area: float
    true_perimeter: float
    carpet_perimeter: float

    def to_dict(self) -> Dict[str, float]:
        return {
            "trueArea": self.true_area,
            "carpetArea": self.carpet_area,
            "truePerimeter": self.true_perimeter,
            "carpetPerimeter": self.carpet_perimeter,
        }


def _as_array(vertices: Sequence[Point]) -> np.ndarray:
    return np.asarray(vertices, dtype=float).reshape(-1, 2)


def signed_area(vertices: Sequence[Point]) -> float:
    """Shoelace area; positive for counter-clockwise order, negative otherwise."""

    pts = _as_array(vertices)
    x, y = pts[:, 0], pts[:, 1]
    return 0.5 * float(np.sum(x * np.roll(y, -1) - np.roll(x, -1) * y))


def area(vertices: Sequence[Point]) -> float:
    return abs(signed_area(vertices))


def perimeter(vertices: Sequence[Point]) -> float:
    pts = _as_array(vertices)
    if pts.shape[0] < 2:
        return 0.0
    deltas = np.roll(pts, -1, axis=0) - pts
    return float(np.sum(np.hypot(deltas[:, 0], deltas[:, 1])))


def bounding_area(vertices: Sequence[Point]) -> float:
    """Area of the axis-aligned bounding box."""

    pts = _as_array(vertices)
    if pts.shape[0] == 0:
        return 0.0
    width, height = np.ptp(pts, axis=0)
    return float(width * height)


def centroid(vertices: Sequence[Point]) -> Point:
    """Vertex average, used as the anchor for room labels."""

    pts = _as_array(vertices)
    if pts.shape[0] == 0:
        return (0.0, 0.0)
    cx, cy = pts.mean(axis=0)
    return (float(cx), float(cy))


def _outward_normals(deltas: np.ndarray, orientation: float) -> np.ndarray:
    lengths = np.hypot(deltas[:, 0], deltas[:, 1])
    normals = orientation * np.stack([deltas[:, 1], -deltas[:, 0]], axis=1)
    safe = np.where(lengths > _EPS, lengths, 1.0)
    return np.where((lengths > _EPS)[:, None], normals / safe[:, None], 0.0)


def offset_polygon(vertices: Sequence[Point], margin: float = CARPET_MARGIN) -> List[Point]:
    """Push every vertex ``margin`` meters outward along its averaged edge normal.

    The outward side is taken from the winding, so clockwise and
    counter-clockwise rooms both grow. Where the two edge normals cancel out
    the outgoing edge's normal is used; a vertex with no usable edge stays put.
    """

    pts = _as_array(vertices)
    if pts.shape[0] < 3:
        return [(float(x), float(y)) for x, y in pts]

    orientation = -1.0 if signed_area(vertices) < 0.0 else 1.0
    incoming = _outward_normals(pts - np.roll(pts, 1, axis=0), orientation)
    outgoing = _outward_normals(np.roll(pts, -1, axis=0) - pts, orientation)

    averaged = 0.5 * (incoming + outgoing)
    norms = np.hypot(averaged[:, 0], averaged[:, 1])
    fallback = np.where(
        (np.hypot(outgoing[:, 0], outgoing[:, 1]) > _EPS)[:, None], outgoing, incoming
    )
    direction = np.where(
        (norms > _EPS)[:, None],
        averaged / np.where(norms > _EPS, norms, 1.0)[:, None],
        fallback,
    )
    expanded = pts + margin * direction
    return [(float(x), float(y)) for x, y in expanded]


def carpet_area(vertices: Sequence[Point], margin: float = CARPET_MARGIN) -> float:
    return area(offset_polygon(vertices, margin))


def carpet_perimeter(vertices: Sequence[Point], margin: float = CARPET_MARGIN) -> float:
    return perimeter(offset_polygon(vertices, margin))


def measure(vertices: Sequence[Point], margin: float = CARPET_MARGIN) -> Measurements:
    """Compute the true and carpet measurements of a room polygon."""

    expanded = offset_polygon(vertices, margin)
    result = Measurements(
        true_area=area(vertices),
        carpet_area=area(expanded),
        true_perimeter=perimeter(vertices),
        carpet_perimeter=perimeter(expanded),
    )
    logger.debug("Measured %d vertices: %s", len(vertices), result)
    return result


__all__ = [
    "CARPET_MARGIN",
    "Measurements",
    "area",
    "bounding_area",
    "carpet_area",
    "carpet_perimeter",
    "centroid",
    "measure",
    "offset_polygon",
    "perimeter",
    "signed_area",
]
