"""Room → SVG code generation helpers."""

from .generator import (
    DEFAULT_SCALE,
    generate_room_svg,
    generate_svg_document,
    generate_svg_path,
)

__all__ = [
    "DEFAULT_SCALE",
    "generate_room_svg",
    "generate_svg_document",
    "generate_svg_path",
]
