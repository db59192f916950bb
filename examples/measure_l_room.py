"""Example: load an L-shaped room record, measure it and render it as SVG."""

import json

from roomplan import Room
from roomplan.svg_codegen import generate_svg_document

RECORD = {
    "name": "Living room",
    "vertices": [
        {"x": 0, "y": 0},
        {"x": 6, "y": 0},
        {"x": 6, "y": 3},
        {"x": 3, "y": 3},
        {"x": 3, "y": 5},
        {"x": 0, "y": 5},
    ],
    "angleConstraints": [{"vertexIndex": 3, "degrees": 270}],
    "lengthConstraints": [{"i": 0, "j": 1, "meters": 6}],
    "floorType": "carpet",
}


def main() -> None:
    room = Room.from_dict(RECORD)
    print(json.dumps(room.measurements().to_dict(), indent=2))
    print(generate_svg_document([room], scale=50.0))


if __name__ == "__main__":
    main()
