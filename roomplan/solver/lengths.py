"""Fixed-length enforcement for a moved vertex."""

from __future__ import annotations

import logging
from typing import List, Sequence, Tuple

from .math_utils import Point, _dist2, closest_circle_intersection, project_onto_circle
from .model import EdgeKey, LengthTargets, VertexIndex, edge_key

logger = logging.getLogger(__name__)


def fixed_anchors(
    n: int, index: VertexIndex, length_targets: LengthTargets
) -> List[Tuple[VertexIndex, float]]:
    """Neighbours of ``index`` joined to it by a fixed edge, with target lengths."""

    anchors: List[Tuple[VertexIndex, float]] = []
    for neighbour in ((index - 1) % n, (index + 1) % n):
        target = length_targets.get(edge_key(index, neighbour))
        if target is not None and all(neighbour != seen for seen, _ in anchors):
            anchors.append((neighbour, float(target)))
    return anchors


def enforce_fixed_lengths(
    vertices: Sequence[Point],
    index: VertexIndex,
    desired: Point,
    length_targets: LengthTargets,
) -> Point:
    """Return where vertex ``index`` may go when the user asks for ``desired``.

    ``vertices`` holds the positions before the move. With no fixed edge at the
    vertex the desired position is returned as is; with one fixed edge it is
    projected onto the circle around the anchor; with two it is the
    circle/circle intersection closest to ``desired``. Raises
    :class:`~roomplan.errors.InfeasibleConstraintError` when two fixed edges
    cannot both hold.
    """

    n = len(vertices)
    anchors = fixed_anchors(n, index, length_targets)
    desired = (float(desired[0]), float(desired[1]))

    if not anchors:
        return desired

    if len(anchors) == 1:
        anchor, radius = anchors[0]
        position = project_onto_circle(vertices[anchor], radius, desired, vertices[index])
        logger.debug(
            "Projected vertex %d onto circle(anchor=%d, r=%.6g): %s -> %s",
            index,
            anchor,
            radius,
            desired,
            position,
        )
        return position

    (a_index, r1), (b_index, r2) = anchors
    position = closest_circle_intersection(
        vertices[a_index], r1, vertices[b_index], r2, desired, vertex=index
    )
    logger.debug(
        "Placed vertex %d at circle intersection of anchors %d/%d: %s",
        index,
        a_index,
        b_index,
        position,
    )
    return position


def check_fixed_lengths(
    vertices: Sequence[Point],
    length_targets: LengthTargets,
    tolerance: float,
) -> List[Tuple[EdgeKey, float, float]]:
    """Return ``(edge, actual, target)`` for every fixed length out of tolerance."""

    violations: List[Tuple[EdgeKey, float, float]] = []
    n = len(vertices)
    for (i, j), target in sorted(length_targets.items()):
        if not (0 <= i < n and 0 <= j < n):
            continue
        actual = _dist2(vertices[i], vertices[j])
        if abs(actual - target) > tolerance:
            violations.append(((i, j), actual, float(target)))
    return violations


__all__ = ["check_fixed_lengths", "enforce_fixed_lengths", "fixed_anchors"]
