import argparse
import json
import logging
from pathlib import Path
from typing import Any, List, Optional, Sequence

from roomplan import InsufficientVerticesError, Room, ValidationError
from roomplan.solver import SolverOptions, get_solver_options
from roomplan.svg_codegen import DEFAULT_SCALE, generate_svg_document

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(levelname)s:%(name)s:%(message)s",
    )


def _load_rooms(path: str) -> List[Room]:
    with open(path, encoding="utf-8") as fin:
        payload: Any = json.load(fin)
    records = payload if isinstance(payload, list) else [payload]
    return [Room.from_dict(record) for record in records]


def _select_room(rooms: Sequence[Room], name: Optional[str]) -> Room:
    if name is None:
        return rooms[0]
    for room in rooms:
        if room.name == name:
            return room
    raise SystemExit(f"no room named {name!r}")


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Edit and measure floorplan rooms")
    parser.add_argument("path", help="Path to a room JSON record (or a list of records)")
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--room",
        help="Name of the room to edit (default: the first room in the file)",
    )
    parser.add_argument(
        "--move",
        nargs=3,
        action="append",
        metavar=("INDEX", "X", "Y"),
        default=[],
        help="Move vertex INDEX to (X, Y) meters; may be repeated",
    )
    parser.add_argument(
        "--delete",
        type=int,
        action="append",
        metavar="INDEX",
        default=[],
        help="Delete vertex INDEX after all moves; may be repeated",
    )
    parser.add_argument(
        "--max-iterations",
        type=int,
        help="Angle relaxation sweep cap (default: solver default)",
    )
    parser.add_argument(
        "--output",
        help="Write the edited room records as JSON to the given path",
    )
    parser.add_argument(
        "--svg-output-path",
        help="Write a standalone SVG floorplan of every room to the given path",
    )
    parser.add_argument(
        "--scale",
        type=float,
        default=DEFAULT_SCALE,
        help=f"SVG pixels per meter (default: {DEFAULT_SCALE:g})",
    )
    args = parser.parse_args(argv)

    _configure_logging(args.log_level)

    logger.info("Loading rooms from %s", args.path)
    try:
        rooms = _load_rooms(args.path)
    except ValidationError as exc:
        logger.error("Invalid room record: %s", exc)
        raise SystemExit(1)

    options: SolverOptions = get_solver_options()
    if args.max_iterations is not None:
        options.max_iterations = args.max_iterations

    if args.move or args.delete:
        room = _select_room(rooms, args.room)
        engine = room.to_engine(options)
        for index, x, y in args.move:
            try:
                result = engine.move_vertex(int(index), (float(x), float(y)))
            except (IndexError, ValueError) as exc:
                logger.error("Invalid --move %s %s %s: %s", index, x, y, exc)
                raise SystemExit(1)
            if not result.accepted:
                logger.warning("Move of vertex %s rejected: %s", index, result.reason)
            for warning in result.warnings:
                logger.warning("Move of vertex %s: %s", index, warning.message)
        for index in args.delete:
            try:
                engine.delete_vertex(index)
            except IndexError as exc:
                logger.error("Invalid --delete %s: %s", index, exc)
                raise SystemExit(1)
            except InsufficientVerticesError as exc:
                logger.error("%s", exc)
                raise SystemExit(1)
        room.update_from_engine(engine)

    summary = [{"name": room.name, "measurements": room.measurements().to_dict()} for room in rooms]
    print(json.dumps(summary if len(summary) > 1 else summary[0], indent=2))

    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        records = [room.to_dict() for room in rooms]
        output_path.write_text(
            json.dumps(records if len(records) > 1 else records[0], indent=2), encoding="utf-8"
        )
        logger.info("Wrote room records to %s", output_path)

    if args.svg_output_path:
        svg_path = Path(args.svg_output_path)
        svg_path.parent.mkdir(parents=True, exist_ok=True)
        svg_path.write_text(generate_svg_document(rooms, scale=args.scale), encoding="utf-8")
        logger.info("Wrote SVG floorplan to %s", svg_path)


if __name__ == "__main__":
    main()
