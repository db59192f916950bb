"""Mutable room polygon kept consistent with fixed-angle and fixed-length constraints."""

from __future__ import annotations

import itertools
import logging
import math
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from .errors import (
    ConvergenceWarning,
    InfeasibleConstraintError,
    InsufficientVerticesError,
    InvalidConstraintError,
)
from .logging_utils import debug_log_call
from .measure import CARPET_MARGIN, Measurements, measure
from .polish import polish_polygon
from .solver import (
    AngleTargets,
    EdgeKey,
    LengthTargets,
    Point,
    SolverOptions,
    angle_error,
    check_fixed_lengths,
    edge_key,
    enforce_all_angles,
    enforce_fixed_lengths,
    fixed_anchors,
    get_solver_options,
    interior_angle,
)
from .solver.math_utils import _dist2, _normalized, _vec2, is_clockwise

logger = logging.getLogger(__name__)

VertexId = int

_Snapshot = Tuple[List[Point], List[VertexId], Dict[VertexId, float], Dict[EdgeKey, float]]


@dataclass
class EditResult:
    """Outcome of an engine edit.

    ``vertices`` and the constraint maps always describe the engine state
    after the call; on ``accepted=False`` they are the pre-edit state.
    """

    vertices: List[Point]
    accepted: bool
    converged: bool
    angle_constraints: Dict[int, float]
    length_constraints: Dict[EdgeKey, float]
    warnings: List[ConvergenceWarning] = field(default_factory=list)
    reason: Optional[str] = None


def _validated_angle(degrees: float) -> float:
    try:
        value = float(degrees)
    except (TypeError, ValueError) as exc:
        raise InvalidConstraintError(f"angle must be a number, got {degrees!r}") from exc
    if not math.isfinite(value) or not 0.0 < value < 360.0:
        raise InvalidConstraintError(f"angle must lie in (0, 360) degrees, got {degrees!r}")
    return value


def _validated_length(meters: float) -> float:
    try:
        value = float(meters)
    except (TypeError, ValueError) as exc:
        raise InvalidConstraintError(f"length must be a number, got {meters!r}") from exc
    if not math.isfinite(value) or value <= 0.0:
        raise InvalidConstraintError(f"length must be a positive number of meters, got {meters!r}")
    return value


class PolygonConstraintEngine:
    """Owns a room polygon and its fixed-angle / fixed-length constraints.

    Constraints are stored against stable vertex ids that are assigned once and
    never reused, so inserting or deleting vertices never re-keys them. The
    public API speaks vertex indices; :attr:`angle_constraints` and
    :attr:`length_constraints` report the index-keyed view of the current
    state.

    Every edit that re-solves geometry is a transaction: if a fixed length
    cannot be honoured the polygon and constraint maps are restored and the
    result carries ``accepted=False``.
    """

    def __init__(
        self,
        vertices: Sequence[Point],
        *,
        angle_constraints: Optional[Mapping[int, float]] = None,
        length_constraints: Optional[Mapping[Tuple[int, int], float]] = None,
        options: Optional[SolverOptions] = None,
    ):
        if len(vertices) < 3:
            raise InsufficientVerticesError(
                f"a room polygon needs at least 3 vertices, got {len(vertices)}"
            )
        self._options = options if options is not None else get_solver_options()
        self._id_source = itertools.count()
        self._vertices: List[Point] = [(float(x), float(y)) for x, y in vertices]
        self._ids: List[VertexId] = [next(self._id_source) for _ in self._vertices]
        self._angles: Dict[VertexId, float] = {}
        self._lengths: Dict[EdgeKey, float] = {}

        for index, degrees in (angle_constraints or {}).items():
            self._check_index(index)
            self._angles[self._ids[index]] = _validated_angle(degrees)
        for (i, j), meters in (length_constraints or {}).items():
            self._check_edge(i, j)
            self._lengths[edge_key(self._ids[i], self._ids[j])] = _validated_length(meters)

        logger.info(
            "Created engine with %d vertices, %d angle and %d length constraints",
            len(self._vertices),
            len(self._angles),
            len(self._lengths),
        )

    # ------------------------------------------------------------------
    # Read-only views

    @property
    def options(self) -> SolverOptions:
        return self._options

    @property
    def vertices(self) -> List[Point]:
        return list(self._vertices)

    @property
    def vertex_ids(self) -> List[VertexId]:
        return list(self._ids)

    def __len__(self) -> int:
        return len(self._vertices)

    @property
    def angle_constraints(self) -> Dict[int, float]:
        return self._angle_targets()

    @property
    def length_constraints(self) -> Dict[EdgeKey, float]:
        return self._length_targets()

    def interior_angle(self, index: int) -> float:
        """Angle inside the room at vertex ``index``, for either winding."""

        self._check_index(index)
        n = len(self._vertices)
        return interior_angle(
            self._vertices[(index - 1) % n],
            self._vertices[index],
            self._vertices[(index + 1) % n],
            clockwise=is_clockwise(self._vertices),
        )

    def edge_length(self, i: int, j: int) -> float:
        self._check_index(i)
        self._check_index(j)
        return _dist2(self._vertices[i], self._vertices[j])

    def measurements(self, margin: float = CARPET_MARGIN) -> Measurements:
        return measure(self._vertices, margin)

    # ------------------------------------------------------------------
    # Edits

    @debug_log_call(logger)
    def move_vertex(self, index: int, position: Point) -> EditResult:
        """Drag vertex ``index`` toward ``position`` and re-satisfy all constraints."""

        self._check_index(index)
        snapshot = self._snapshot()
        return self._solve(snapshot, "move", moved=index, desired=position)

    @debug_log_call(logger)
    def insert_vertex(self, after_index: int, position: Point) -> EditResult:
        """Insert a vertex between ``after_index`` and its successor.

        A fixed length on the split edge is dropped because that edge no longer
        exists. No constraint re-solve happens here.
        """

        self._check_index(after_index)
        n = len(self._vertices)
        split = edge_key(self._ids[after_index], self._ids[(after_index + 1) % n])
        if self._lengths.pop(split, None) is not None:
            logger.info("Dropped fixed length on split edge %d-%d", after_index, (after_index + 1) % n)
        self._vertices.insert(after_index + 1, (float(position[0]), float(position[1])))
        self._ids.insert(after_index + 1, next(self._id_source))
        logger.info("Inserted vertex after %d; polygon now has %d vertices", after_index, n + 1)
        return self._result(True)

    @debug_log_call(logger)
    def delete_vertex(self, index: int) -> EditResult:
        """Remove vertex ``index`` together with every constraint that references it."""

        self._check_index(index)
        if len(self._vertices) <= 3:
            raise InsufficientVerticesError(
                f"cannot delete vertex {index}: a room polygon needs at least 3 vertices"
            )
        removed = self._ids.pop(index)
        self._vertices.pop(index)
        self._angles.pop(removed, None)
        stale = [key for key in self._lengths if removed in key]
        for key in stale:
            del self._lengths[key]
        logger.info(
            "Deleted vertex %d (dropped %d fixed lengths); polygon now has %d vertices",
            index,
            len(stale),
            len(self._vertices),
        )
        return self._result(True)

    @debug_log_call(logger)
    def set_angle_constraint(self, index: int, degrees: float) -> EditResult:
        self._check_index(index)
        value = _validated_angle(degrees)
        snapshot = self._snapshot()
        self._angles[self._ids[index]] = value
        return self._solve(snapshot, "set-angle")

    @debug_log_call(logger)
    def clear_angle_constraint(self, index: int) -> EditResult:
        self._check_index(index)
        self._angles.pop(self._ids[index], None)
        return self._result(True)

    @debug_log_call(logger)
    def set_length_constraint(self, i: int, j: int, meters: float) -> EditResult:
        """Fix the length of edge ``(i, j)`` and scale the edge to it.

        Endpoint ``j`` slides along the edge direction unless it already has
        another fixed edge and ``i`` does not, in which case ``i`` moves.
        """

        self._check_edge(i, j)
        value = _validated_length(meters)
        snapshot = self._snapshot()
        self._lengths[edge_key(self._ids[i], self._ids[j])] = value

        mover, desired = self._slide_endpoint(i, j, value)
        return self._solve(snapshot, "set-length", moved=mover, desired=desired)

    @debug_log_call(logger)
    def clear_length_constraint(self, i: int, j: int) -> EditResult:
        self._check_index(i)
        self._check_index(j)
        self._lengths.pop(edge_key(self._ids[i], self._ids[j]), None)
        return self._result(True)

    @debug_log_call(logger)
    def enforce_all(self) -> EditResult:
        """Re-run constraint enforcement on the current geometry.

        Fixed edges that do not currently hold (for instance constraints loaded
        with a room record) are first scaled to their targets the same way
        :meth:`set_length_constraint` scales a new one; then angles are
        relaxed and every fixed length is re-checked.
        """

        snapshot = self._snapshot()
        lengths = self._length_targets()
        violations = check_fixed_lengths(self._vertices, lengths, self._options.length_tolerance)
        for (i, j), actual, target in violations:
            mover, desired = self._slide_endpoint(i, j, target)
            try:
                position = enforce_fixed_lengths(self._vertices, mover, desired, lengths)
            except InfeasibleConstraintError as exc:
                return self._reject(snapshot, "enforce", str(exc))
            logger.info(
                "Scaled edge %d-%d from %.6g m to its fixed %.6g m", i, j, actual, target
            )
            self._vertices[mover] = position
        return self._solve(snapshot, "enforce")

    # ------------------------------------------------------------------
    # Internals

    def _check_index(self, index: int) -> None:
        n = len(self._vertices)
        if not isinstance(index, int) or not 0 <= index < n:
            raise IndexError(f"vertex index {index!r} out of range for {n} vertices")

    def _check_edge(self, i: int, j: int) -> None:
        self._check_index(i)
        self._check_index(j)
        n = len(self._vertices)
        if (j - i) % n not in (1, n - 1):
            raise InvalidConstraintError(f"vertices {i} and {j} do not share an edge")

    def _slide_endpoint(self, i: int, j: int, meters: float) -> Tuple[int, Point]:
        """Pick the endpoint of edge ``(i, j)`` to move and where it should go.

        ``j`` slides along the edge unless it has another fixed edge and ``i``
        does not. Coincident endpoints are separated along +x.
        """

        n = len(self._vertices)
        current = self._length_targets()
        mover, anchor = j, i
        if len(fixed_anchors(n, j, current)) > 1 and len(fixed_anchors(n, i, current)) == 1:
            mover, anchor = i, j
        direction = _normalized(_vec2(self._vertices[anchor], self._vertices[mover])) or (1.0, 0.0)
        desired = (
            self._vertices[anchor][0] + meters * direction[0],
            self._vertices[anchor][1] + meters * direction[1],
        )
        return mover, desired

    def _angle_targets(self) -> AngleTargets:
        index = {vid: idx for idx, vid in enumerate(self._ids)}
        return {index[vid]: deg for vid, deg in self._angles.items()}

    def _length_targets(self) -> LengthTargets:
        index = {vid: idx for idx, vid in enumerate(self._ids)}
        return {edge_key(index[a], index[b]): meters for (a, b), meters in self._lengths.items()}

    def _snapshot(self) -> _Snapshot:
        return list(self._vertices), list(self._ids), dict(self._angles), dict(self._lengths)

    def _restore(self, snapshot: _Snapshot) -> None:
        vertices, ids, angles, lengths = snapshot
        self._vertices = list(vertices)
        self._ids = list(ids)
        self._angles = dict(angles)
        self._lengths = dict(lengths)

    def _result(
        self,
        accepted: bool,
        *,
        converged: bool = True,
        warnings: Optional[List[ConvergenceWarning]] = None,
        reason: Optional[str] = None,
    ) -> EditResult:
        return EditResult(
            vertices=self.vertices,
            accepted=accepted,
            converged=converged,
            angle_constraints=self._angle_targets(),
            length_constraints=self._length_targets(),
            warnings=list(warnings or []),
            reason=reason,
        )

    def _reject(self, snapshot: _Snapshot, action: str, reason: str) -> EditResult:
        self._restore(snapshot)
        logger.info("Rolled back %s: %s", action, reason)
        return self._result(False, reason=reason)

    def _solve(
        self,
        snapshot: _Snapshot,
        action: str,
        *,
        moved: Optional[int] = None,
        desired: Optional[Point] = None,
    ) -> EditResult:
        lengths = self._length_targets()
        angles = self._angle_targets()
        clockwise = is_clockwise(snapshot[0])

        if moved is not None and desired is not None:
            try:
                position = enforce_fixed_lengths(self._vertices, moved, desired, lengths)
            except InfeasibleConstraintError as exc:
                return self._reject(snapshot, action, str(exc))
            self._vertices[moved] = position

        report = enforce_all_angles(
            self._vertices,
            angles,
            lengths.keys(),
            pinned=moved,
            options=self._options,
            clockwise=clockwise,
        )
        vertices = report.vertices
        converged = report.converged
        warnings = list(report.warnings)

        if not converged and self._options.polish.enable:
            pinned = [moved] if moved is not None else []
            polished = polish_polygon(
                vertices, angles, lengths, pinned, self._options.polish, clockwise=clockwise
            )
            before = max(
                abs(angle_error(vertices, i, t, clockwise=clockwise)) for i, t in angles.items()
            )
            after = max(
                abs(angle_error(polished.vertices, i, t, clockwise=clockwise))
                for i, t in angles.items()
            )
            logger.info(
                "Polish stage: success=%s iterations=%d max angle error %.6g -> %.6g",
                polished.success,
                polished.iterations,
                before,
                after,
            )
            if after < before:
                vertices = polished.vertices
                converged = after <= self._options.angle_tolerance
                if converged:
                    warnings = []

        violations = check_fixed_lengths(vertices, lengths, self._options.length_tolerance)
        if violations:
            (i, j), actual, target = violations[0]
            reason = (
                f"fixed length on edge {i}-{j} would become {actual:.6g} m "
                f"(target {target:.6g} m)"
            )
            if len(violations) > 1:
                reason += f" and {len(violations) - 1} more"
            return self._reject(snapshot, action, reason)

        self._vertices = list(vertices)
        logger.info(
            "Accepted %s (converged=%s, %d angle / %d length constraints)",
            action,
            converged,
            len(angles),
            len(lengths),
        )
        return self._result(True, converged=converged, warnings=warnings)


__all__ = ["EditResult", "PolygonConstraintEngine", "VertexId"]
