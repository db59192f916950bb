from .errors import (
    RoomplanError,
    InsufficientVerticesError,
    InvalidConstraintError,
    InfeasibleConstraintError,
    ConvergenceWarning,
)
from .engine import PolygonConstraintEngine, EditResult
from .measure import (
    CARPET_MARGIN,
    Measurements,
    area,
    bounding_area,
    carpet_area,
    carpet_perimeter,
    centroid,
    measure,
    offset_polygon,
    perimeter,
    signed_area,
)
from .room import Room
from .validate import validate_room, ValidationError
from .solver import (
    SolverOptions,
    enforce_all_angles,
    enforce_fixed_lengths,
    check_fixed_lengths,
    interior_angle,
    get_solver_options,
    set_solver_options,
)
from .polish import PolishOptions, PolishResult, polish_polygon
from .svg_codegen import generate_svg_document, generate_svg_path

__all__ = [
    'RoomplanError',
    'InsufficientVerticesError',
    'InvalidConstraintError',
    'InfeasibleConstraintError',
    'ConvergenceWarning',
    'PolygonConstraintEngine',
    'EditResult',
    'CARPET_MARGIN',
    'Measurements',
    'area',
    'bounding_area',
    'carpet_area',
    'carpet_perimeter',
    'centroid',
    'measure',
    'offset_polygon',
    'perimeter',
    'signed_area',
    'Room',
    'validate_room',
    'ValidationError',
    'SolverOptions',
    'enforce_all_angles',
    'enforce_fixed_lengths',
    'check_fixed_lengths',
    'interior_angle',
    'get_solver_options',
    'set_solver_options',
    'PolishOptions',
    'PolishResult',
    'polish_polygon',
    'generate_svg_document',
    'generate_svg_path',
]
