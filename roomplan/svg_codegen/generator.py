"""SVG renderer for room floorplans consumed by the print pipeline."""

from __future__ import annotations

import math
from typing import List, Sequence, Tuple
from xml.sax.saxutils import escape, quoteattr

from ..measure import centroid
from ..room import Room

Point = Tuple[float, float]

DEFAULT_SCALE = 100.0
"""Pixels per meter."""

ROOM_PADDING_PX = 40.0
LABEL_OFFSET_PX = 18.0
FONT_SIZE_PX = 14
STROKE = "#2563eb"
FILL = "#2563eb20"

svg_tpl = """<?xml version="1.0" encoding="UTF-8"?>
<svg xmlns="http://www.w3.org/2000/svg" viewBox="%s" width="%s" height="%s">
%s
</svg>
"""


def _fmt(value: float) -> str:
    text = f"{value:.3f}".rstrip("0").rstrip(".")
    return "0" if text in {"-0", ""} else text


def _scaled(points: Sequence[Point], scale: float, offset: Point) -> List[Point]:
    return [((x + offset[0]) * scale, (y + offset[1]) * scale) for x, y in points]


def generate_svg_path(
    vertices: Sequence[Point],
    *,
    scale: float = DEFAULT_SCALE,
    offset: Point = (0.0, 0.0),
) -> str:
    """Return the closed ``M x y L x y ... Z`` path data for a room outline."""

    if not vertices:
        return ""
    pts = _scaled(vertices, scale, offset)
    commands = [f"M {_fmt(pts[0][0])} {_fmt(pts[0][1])}"]
    commands.extend(f"L {_fmt(x)} {_fmt(y)}" for x, y in pts[1:])
    if len(pts) > 2:
        commands.append("Z")
    return " ".join(commands)


def _edge_labels(room: Room, scale: float) -> List[str]:
    """One length label per edge, centred on the edge and kept upright."""

    pts = room.translated_vertices()
    labels: List[str] = []
    n = len(pts)
    for i in range(n):
        j = (i + 1) % n
        (x1, y1), (x2, y2) = pts[i], pts[j]
        length = math.hypot(x2 - x1, y2 - y1)
        angle = math.atan2(y2 - y1, x2 - x1)
        perp = angle - math.pi / 2.0
        mx = (x1 + x2) / 2.0 * scale + math.cos(perp) * LABEL_OFFSET_PX
        my = (y1 + y2) / 2.0 * scale + math.sin(perp) * LABEL_OFFSET_PX
        label_angle = angle
        if abs(angle) > math.pi / 2.0:
            label_angle -= math.copysign(math.pi, angle)
        labels.append(
            f'    <text class="room-measurement" x="{_fmt(mx)}" y="{_fmt(my)}" '
            f'text-anchor="middle" dominant-baseline="middle" font-size="{FONT_SIZE_PX}" '
            f'transform="rotate({_fmt(math.degrees(label_angle))} {_fmt(mx)} {_fmt(my)})">'
            f"{length:.2f}m</text>"
        )
    return labels


def generate_room_svg(room: Room, *, scale: float = DEFAULT_SCALE, show_lengths: bool = True) -> str:
    """Render one room as an SVG ``<g>`` element."""

    path = generate_svg_path(room.vertices, scale=scale, offset=room.offset)
    cx, cy = centroid(room.translated_vertices())
    lines = [
        f"  <g class=\"room\" data-name={quoteattr(room.name)}>",
        f'    <path d="{path}" stroke="{STROKE}" stroke-width="2" fill="{FILL}"/>',
        f'    <text class="room-label" x="{_fmt(cx * scale)}" y="{_fmt(cy * scale)}" '
        f'text-anchor="middle" dominant-baseline="middle" font-size="{FONT_SIZE_PX + 2}">'
        f"{escape(room.name)}</text>",
    ]
    if show_lengths:
        lines.extend(_edge_labels(room, scale))
    lines.append("  </g>")
    return "\n".join(lines)


def generate_svg_document(
    rooms: Sequence[Room],
    *,
    scale: float = DEFAULT_SCALE,
    show_lengths: bool = True,
) -> str:
    """Render a standalone SVG floorplan containing every room.

    The view box spans the union of all room outlines (offsets applied) plus
    a fixed padding so edge labels are not clipped.
    """

    if not rooms:
        raise ValueError("generate_svg_document requires at least one room")

    all_points = [pt for room in rooms for pt in _scaled(room.translated_vertices(), scale, (0.0, 0.0))]
    min_x = min(x for x, _ in all_points) - ROOM_PADDING_PX
    min_y = min(y for _, y in all_points) - ROOM_PADDING_PX
    width = max(x for x, _ in all_points) - min_x + ROOM_PADDING_PX
    height = max(y for _, y in all_points) - min_y + ROOM_PADDING_PX
    view_box = " ".join(_fmt(v) for v in (min_x, min_y, width, height))

    body = "\n".join(generate_room_svg(room, scale=scale, show_lengths=show_lengths) for room in rooms)
    return svg_tpl % (view_box, _fmt(width), _fmt(height), body)
