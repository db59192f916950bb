import math
from typing import Any, Mapping


class ValidationError(Exception):
    pass


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _vertex_list(record: Mapping[str, Any]) -> Any:
    if 'vertices' in record:
        return record['vertices']
    return record.get('points')


def _ensure_index(value: Any, count: int, where: str) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValidationError(f'{where}: vertex index must be an integer, got {value!r}')
    if not 0 <= value < count:
        raise ValidationError(f'{where}: vertex index {value} out of range for {count} vertices')


def validate_room(record: Mapping[str, Any]) -> None:
    """Raise :class:`ValidationError` when ``record`` is not a usable room."""

    if not isinstance(record, Mapping):
        raise ValidationError(f'room record must be a mapping, got {type(record).__name__}')

    name = record.get('name')
    if not isinstance(name, str) or not name.strip():
        raise ValidationError('room name must be a non-empty string')

    vertices = _vertex_list(record)
    if not isinstance(vertices, (list, tuple)):
        raise ValidationError(f'room "{name}": vertices must be a list')
    if len(vertices) < 3:
        raise ValidationError(f'room "{name}": polygon needs at least 3 vertices, got {len(vertices)}')
    for idx, vertex in enumerate(vertices):
        if not isinstance(vertex, Mapping) or not _is_number(vertex.get('x')) or not _is_number(vertex.get('y')):
            raise ValidationError(f'room "{name}": vertex {idx} must have numeric x and y, got {vertex!r}')
    count = len(vertices)

    offset = record.get('offset')
    if offset is not None:
        if not isinstance(offset, Mapping) or not _is_number(offset.get('x', 0.0)) or not _is_number(offset.get('y', 0.0)):
            raise ValidationError(f'room "{name}": offset must have numeric x and y')

    seen_angles = set()
    for idx, item in enumerate(record.get('angleConstraints') or []):
        where = f'room "{name}" angle constraint {idx}'
        if not isinstance(item, Mapping):
            raise ValidationError(f'{where}: expected a mapping, got {item!r}')
        _ensure_index(item.get('vertexIndex'), count, where)
        degrees = item.get('degrees')
        if not _is_number(degrees) or not 0 < degrees < 360:
            raise ValidationError(f'{where}: degrees must lie in (0, 360), got {degrees!r}')
        if item['vertexIndex'] in seen_angles:
            raise ValidationError(f'{where}: vertex {item["vertexIndex"]} already has an angle constraint')
        seen_angles.add(item['vertexIndex'])

    seen_edges = set()
    for idx, item in enumerate(record.get('lengthConstraints') or []):
        where = f'room "{name}" length constraint {idx}'
        if not isinstance(item, Mapping):
            raise ValidationError(f'{where}: expected a mapping, got {item!r}')
        i, j = item.get('i'), item.get('j')
        _ensure_index(i, count, where)
        _ensure_index(j, count, where)
        if (j - i) % count not in (1, count - 1):
            raise ValidationError(f'{where}: vertices {i} and {j} do not share an edge')
        meters = item.get('meters')
        if not _is_number(meters) or meters <= 0:
            raise ValidationError(f'{where}: meters must be positive, got {meters!r}')
        key = (min(i, j), max(i, j))
        if key in seen_edges:
            raise ValidationError(f'{where}: edge {key[0]}-{key[1]} already has a length constraint')
        seen_edges.add(key)
