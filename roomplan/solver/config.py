"""Process-wide default solver options."""

from __future__ import annotations

import copy

from .model import SolverOptions

_SOLVER_OPTIONS = SolverOptions()


def get_solver_options() -> SolverOptions:
    return copy.deepcopy(_SOLVER_OPTIONS)


def set_solver_options(options: SolverOptions) -> None:
    global _SOLVER_OPTIONS
    _SOLVER_OPTIONS = copy.deepcopy(options)
