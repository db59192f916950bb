"""Room record: the persisted unit wrapping a polygon and its constraints."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .engine import PolygonConstraintEngine
from .measure import CARPET_MARGIN, Measurements, measure
from .solver import EdgeKey, Point, SolverOptions, edge_key
from .validate import validate_room

logger = logging.getLogger(__name__)


@dataclass
class Room:
    """Named room polygon with its constraints and canvas layout offset."""

    name: str
    vertices: List[Point]
    angle_constraints: Dict[int, float] = field(default_factory=dict)
    length_constraints: Dict[EdgeKey, float] = field(default_factory=dict)
    offset: Tuple[float, float] = (0.0, 0.0)
    notes: Optional[str] = None
    floor_type: Optional[str] = None

    @classmethod
    def from_dict(cls, record: Mapping[str, Any]) -> "Room":
        """Build a room from its wire form, accepting ``points`` for ``vertices``."""

        validate_room(record)
        raw_vertices = record["vertices"] if "vertices" in record else record["points"]
        offset = record.get("offset") or {}
        room = cls(
            name=record["name"].strip(),
            vertices=[(float(v["x"]), float(v["y"])) for v in raw_vertices],
            angle_constraints={
                int(item["vertexIndex"]): float(item["degrees"])
                for item in record.get("angleConstraints") or []
            },
            length_constraints={
                edge_key(int(item["i"]), int(item["j"])): float(item["meters"])
                for item in record.get("lengthConstraints") or []
            },
            offset=(float(offset.get("x", 0.0)), float(offset.get("y", 0.0))),
            notes=record.get("notes"),
            floor_type=record.get("floorType"),
        )
        logger.info("Loaded room %r with %d vertices", room.name, len(room.vertices))
        return room

    def to_dict(self, *, margin: float = CARPET_MARGIN) -> Dict[str, Any]:
        record: Dict[str, Any] = {
            "name": self.name,
            "vertices": [{"x": x, "y": y} for x, y in self.vertices],
            "angleConstraints": [
                {"vertexIndex": idx, "degrees": deg}
                for idx, deg in sorted(self.angle_constraints.items())
            ],
            "lengthConstraints": [
                {"i": i, "j": j, "meters": meters}
                for (i, j), meters in sorted(self.length_constraints.items())
            ],
            "offset": {"x": self.offset[0], "y": self.offset[1]},
            "measurements": self.measurements(margin).to_dict(),
        }
        if self.notes is not None:
            record["notes"] = self.notes
        if self.floor_type is not None:
            record["floorType"] = self.floor_type
        return record

    def measurements(self, margin: float = CARPET_MARGIN) -> Measurements:
        return measure(self.vertices, margin)

    def translated_vertices(self) -> List[Point]:
        """Vertices shifted by the room's canvas offset."""

        dx, dy = self.offset
        return [(x + dx, y + dy) for x, y in self.vertices]

    def to_engine(self, options: Optional[SolverOptions] = None) -> PolygonConstraintEngine:
        """Build an engine for this room with its stored constraints enforced."""

        engine = PolygonConstraintEngine(
            self.vertices,
            angle_constraints=self.angle_constraints,
            length_constraints=self.length_constraints,
            options=options,
        )
        result = engine.enforce_all()
        if not result.accepted:
            logger.warning(
                "Room %r: stored constraints cannot be enforced: %s", self.name, result.reason
            )
        for warning in result.warnings:
            logger.warning("Room %r: %s", self.name, warning.message)
        return engine

    def update_from_engine(self, engine: PolygonConstraintEngine) -> None:
        """Copy the engine's current polygon and constraints back into the record."""

        self.vertices = engine.vertices
        self.angle_constraints = engine.angle_constraints
        self.length_constraints = engine.length_constraints


__all__ = ["Room"]
