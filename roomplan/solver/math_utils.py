from __future__ import annotations

import math
from typing import List, Optional, Sequence, Tuple

from ..errors import InfeasibleConstraintError

Point = Tuple[float, float]

_DENOM_EPS = 1e-12
_TANGENT_EPS = 1e-9


def _vec2(a: Point, b: Point) -> Point:
    return b[0] - a[0], b[1] - a[1]


def _dot2(a: Point, b: Point) -> float:
    return a[0] * b[0] + a[1] * b[1]


def _cross2(a: Point, b: Point) -> float:
    return a[0] * b[1] - a[1] * b[0]


def _norm_sq2(v: Point) -> float:
    return _dot2(v, v)


def _norm2(v: Point) -> float:
    return math.sqrt(max(_norm_sq2(v), 0.0))


def _dist2(a: Point, b: Point) -> float:
    return _norm2(_vec2(a, b))


def _normalized(v: Point) -> Optional[Point]:
    norm = _norm2(v)
    if norm <= _DENOM_EPS:
        return None
    return (v[0] / norm, v[1] / norm)


def rotate_about(center: Point, point: Point, degrees: float) -> Point:
    """Rotate ``point`` counter-clockwise about ``center`` by ``degrees``."""

    radians = math.radians(degrees)
    cos_t = math.cos(radians)
    sin_t = math.sin(radians)
    dx, dy = _vec2(center, point)
    return (
        center[0] + dx * cos_t - dy * sin_t,
        center[1] + dx * sin_t + dy * cos_t,
    )


def raw_angle(prev: Point, vertex: Point, nxt: Point) -> float:
    """Signed sweep from ``prev - vertex`` to ``nxt - vertex`` in ``[0, 360)``."""

    v1 = _vec2(vertex, prev)
    v2 = _vec2(vertex, nxt)
    angle = math.degrees(math.atan2(_cross2(v1, v2), _dot2(v1, v2)))
    if angle < 0.0:
        angle += 360.0
    return angle % 360.0


def signed_area2(vertices: Sequence[Point]) -> float:
    """Shoelace area of a tuple polygon; negative for clockwise order."""

    n = len(vertices)
    total = 0.0
    for idx in range(n):
        x1, y1 = vertices[idx]
        x2, y2 = vertices[(idx + 1) % n]
        total += x1 * y2 - x2 * y1
    return 0.5 * total


def is_clockwise(vertices: Sequence[Point]) -> bool:
    """True when the polygon winds clockwise; degenerate polygons count as counter-clockwise."""

    return signed_area2(vertices) < 0.0


def interior_angle(prev: Point, vertex: Point, nxt: Point, *, clockwise: bool = False) -> float:
    """Interior angle at ``vertex`` in ``[0, 360)``.

    ``360 - raw`` for counter-clockwise polygons and ``raw`` for clockwise
    ones, so the result is measured on the inside of the room either way.
    """

    raw = raw_angle(prev, vertex, nxt)
    if clockwise:
        return raw
    return (360.0 - raw) % 360.0


def wrap_degrees(value: float) -> float:
    """Fold ``value`` into ``(-180, 180]``."""

    wrapped = math.fmod(value, 360.0)
    if wrapped <= -180.0:
        wrapped += 360.0
    elif wrapped > 180.0:
        wrapped -= 360.0
    return wrapped


def project_onto_circle(center: Point, radius: float, desired: Point, fallback: Point) -> Point:
    """Closest point to ``desired`` on the circle ``(center, radius)``.

    ``fallback`` is returned unchanged when ``desired`` sits exactly on the
    center and no direction can be derived.
    """

    direction = _normalized(_vec2(center, desired))
    if direction is None:
        return fallback
    return (center[0] + radius * direction[0], center[1] + radius * direction[1])


def circle_intersections(c1: Point, r1: float, c2: Point, r2: float) -> Optional[List[Point]]:
    """Intersection points of two circles, or ``None`` when they do not meet.

    Tangent circles yield the same point twice. Concentric circles of equal
    radius have no isolated intersection and also return ``None``.
    """

    dx, dy = _vec2(c1, c2)
    d = math.hypot(dx, dy)
    if d <= _DENOM_EPS:
        return None
    slack = _TANGENT_EPS * max(1.0, r1 + r2)
    if d > r1 + r2 + slack or d < abs(r1 - r2) - slack:
        return None
    a = (r1 * r1 - r2 * r2 + d * d) / (2.0 * d)
    h = math.sqrt(max(r1 * r1 - a * a, 0.0))
    ux, uy = dx / d, dy / d
    mx, my = c1[0] + a * ux, c1[1] + a * uy
    return [
        (mx - h * uy, my + h * ux),
        (mx + h * uy, my - h * ux),
    ]


def closest_circle_intersection(
    c1: Point, r1: float, c2: Point, r2: float, near: Point, *, vertex: int
) -> Point:
    """Circle/circle intersection nearest to ``near``.

    Raises :class:`InfeasibleConstraintError` when the circles do not meet.
    """

    candidates = circle_intersections(c1, r1, c2, r2)
    if candidates is None:
        d = _dist2(c1, c2)
        raise InfeasibleConstraintError(
            f"fixed lengths at vertex {vertex} cannot both hold: "
            f"anchor distance {d:.6g}, radii {r1:.6g} and {r2:.6g}",
            vertex=vertex,
        )
    return min(candidates, key=lambda pt: _norm_sq2(_vec2(near, pt)))


__all__ = [
    "Point",
    "_DENOM_EPS",
    "_cross2",
    "_dist2",
    "_dot2",
    "_norm2",
    "_norm_sq2",
    "_normalized",
    "_vec2",
    "circle_intersections",
    "closest_circle_intersection",
    "interior_angle",
    "is_clockwise",
    "project_onto_circle",
    "raw_angle",
    "rotate_about",
    "signed_area2",
    "wrap_degrees",
]
