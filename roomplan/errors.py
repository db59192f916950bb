"""Error taxonomy for room editing."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List


class RoomplanError(Exception):
    """Base class for all errors raised by :mod:`roomplan`."""


class InsufficientVerticesError(RoomplanError):
    """Raised when an edit would leave a polygon with fewer than 3 vertices."""


class InvalidConstraintError(RoomplanError, ValueError):
    """Raised when a constraint value or target edge is rejected at the setter."""


class InfeasibleConstraintError(RoomplanError):
    """Raised when fixed lengths at a vertex have no geometric solution.

    The engine catches this and rolls the edit back; callers only ever see
    ``accepted=False``.
    """

    def __init__(self, message: str, *, vertex: int):
        super().__init__(message)
        self.vertex = vertex


@dataclass
class ConvergenceWarning:
    """Soft failure reported when angle relaxation stops short of tolerance.

    ``kind`` is ``"iteration-cap"`` when the sweep limit was reached and
    ``"conflict"`` when a constrained vertex could not be adjusted because both
    of its edges carry fixed lengths.
    """

    kind: str
    message: str
    iterations: int
    max_error: float
    vertices: List[int] = field(default_factory=list)

    def __str__(self) -> str:  # pragma: no cover - trivial string formatting
        return self.message


__all__ = [
    "RoomplanError",
    "InsufficientVerticesError",
    "InvalidConstraintError",
    "InfeasibleConstraintError",
    "ConvergenceWarning",
]
