"""Fixed-angle relaxation loop."""

from __future__ import annotations

import logging
from typing import Collection, List, Optional, Sequence, Tuple

from ..errors import ConvergenceWarning
from .math_utils import (
    _DENOM_EPS,
    Point,
    _dist2,
    interior_angle,
    is_clockwise,
    rotate_about,
    wrap_degrees,
)
from .model import AngleReport, AngleTargets, EdgeKey, SolverOptions, VertexIndex, edge_key

logger = logging.getLogger(__name__)


def angle_error(
    vertices: Sequence[Point],
    index: VertexIndex,
    target: float,
    *,
    clockwise: Optional[bool] = None,
) -> float:
    """Signed difference ``current - target`` at ``index``, folded into (-180, 180].

    ``clockwise`` fixes the winding used to measure the interior; it is taken
    from ``vertices`` when omitted.
    """

    if clockwise is None:
        clockwise = is_clockwise(vertices)
    n = len(vertices)
    current = interior_angle(
        vertices[(index - 1) % n], vertices[index], vertices[(index + 1) % n], clockwise=clockwise
    )
    return wrap_degrees(current - target)


def _pick_rotated_neighbour(
    index: VertexIndex,
    prev_index: VertexIndex,
    next_index: VertexIndex,
    fixed_edges: Collection[EdgeKey],
    pinned: Optional[VertexIndex],
) -> Optional[VertexIndex]:
    candidates: List[VertexIndex] = []
    if edge_key(index, next_index) not in fixed_edges:
        candidates.append(next_index)
    if edge_key(index, prev_index) not in fixed_edges:
        candidates.append(prev_index)
    if not candidates:
        return None
    if candidates[0] == pinned and len(candidates) > 1:
        return candidates[1]
    return candidates[0]


def _max_angle_error(
    vertices: Sequence[Point], order: Sequence[Tuple[VertexIndex, float]], clockwise: bool
) -> float:
    worst = 0.0
    for index, target in order:
        worst = max(worst, abs(angle_error(vertices, index, target, clockwise=clockwise)))
    return worst


def enforce_all_angles(
    vertices: Sequence[Point],
    angle_targets: AngleTargets,
    fixed_edges: Collection[EdgeKey] = (),
    *,
    pinned: Optional[VertexIndex] = None,
    options: Optional[SolverOptions] = None,
    clockwise: Optional[bool] = None,
) -> AngleReport:
    """Relax ``vertices`` until every constrained interior angle hits its target.

    Each sweep visits the constrained vertices in index order and rotates one
    neighbour about the vertex by exactly the remaining error: the next
    neighbour by default, the previous one when the next edge has a fixed
    length or when the next neighbour is ``pinned`` (the vertex the user just
    moved). A vertex whose two edges are both fixed, or whose only movable
    neighbour sits on top of it, is left alone and reported as a conflict.
    Sweeps stop once nothing adjustable is out of tolerance or after
    ``options.max_iterations`` sweeps; the result is best effort either way
    and never raises.

    The interior side is fixed by the winding of the input polygon (or by
    ``clockwise`` when given) for the whole run.
    """

    options = options or SolverOptions()
    pts: List[Point] = [(float(x), float(y)) for x, y in vertices]
    n = len(pts)
    order = sorted((idx, float(target)) for idx, target in angle_targets.items() if 0 <= idx < n)
    fixed = set(fixed_edges)
    tolerance = options.angle_tolerance
    if clockwise is None:
        clockwise = is_clockwise(pts)
    # Rotating the next neighbour counter-clockwise shrinks the interior of a
    # counter-clockwise polygon and grows it for a clockwise one.
    sense = -1.0 if clockwise else 1.0

    if not order:
        return AngleReport(vertices=pts, converged=True, iterations=0, max_error=0.0)

    iterations = 0
    conflicts: List[VertexIndex] = []
    coincident: List[VertexIndex] = []
    for sweep in range(max(1, int(options.max_iterations))):
        iterations = sweep + 1
        adjusted = False
        conflicts = []
        coincident = []
        for index, target in order:
            error = angle_error(pts, index, target, clockwise=clockwise)
            if abs(error) <= tolerance:
                continue
            prev_index = (index - 1) % n
            next_index = (index + 1) % n
            mover = _pick_rotated_neighbour(index, prev_index, next_index, fixed, pinned)
            if mover is None:
                conflicts.append(index)
                continue
            if _dist2(pts[index], pts[mover]) <= _DENOM_EPS:
                coincident.append(index)
                continue
            if mover == next_index:
                pts[mover] = rotate_about(pts[index], pts[mover], sense * error)
            else:
                pts[mover] = rotate_about(pts[index], pts[mover], -sense * error)
            adjusted = True
        logger.debug(
            "Angle sweep %d adjusted=%s conflicts=%s coincident=%s max_error=%.6g",
            iterations,
            adjusted,
            conflicts,
            coincident,
            _max_angle_error(pts, order, clockwise),
        )
        if not adjusted:
            break

    max_error = _max_angle_error(pts, order, clockwise)
    converged = max_error <= tolerance
    warnings: List[ConvergenceWarning] = []
    if not converged:
        unresolved = [
            idx
            for idx, target in order
            if abs(angle_error(pts, idx, target, clockwise=clockwise)) > tolerance
        ]
        if conflicts:
            warnings.append(
                ConvergenceWarning(
                    kind="conflict",
                    message=(
                        f"angle constraints at {conflicts} cannot be adjusted: "
                        "both adjacent edges have fixed lengths"
                    ),
                    iterations=iterations,
                    max_error=max_error,
                    vertices=list(conflicts),
                )
            )
        if coincident:
            warnings.append(
                ConvergenceWarning(
                    kind="conflict",
                    message=(
                        f"angle constraints at {coincident} cannot be adjusted: "
                        "the movable neighbour coincides with the vertex"
                    ),
                    iterations=iterations,
                    max_error=max_error,
                    vertices=list(coincident),
                )
            )
        stalled = [idx for idx in unresolved if idx not in conflicts and idx not in coincident]
        if stalled:
            warnings.append(
                ConvergenceWarning(
                    kind="iteration-cap",
                    message=(
                        f"angle relaxation stopped after {iterations} sweeps "
                        f"with max error {max_error:.6g} deg at {stalled}"
                    ),
                    iterations=iterations,
                    max_error=max_error,
                    vertices=stalled,
                )
            )
        for warning in warnings:
            logger.warning("Angle enforcement did not converge: %s", warning.message)

    return AngleReport(
        vertices=pts,
        converged=converged,
        iterations=iterations,
        max_error=max_error,
        conflicts=conflicts + coincident,
        warnings=warnings,
    )


__all__ = ["angle_error", "enforce_all_angles"]
