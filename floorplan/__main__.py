"""
Command line entry point.

    python -m floorplan plan.dxf preview.png --width 1200 --height 800

Builds the floor structure of a DXF/DWG drawing, prints a short room
report and optionally writes a PNG preview.
"""

from pathlib import Path
from typing import Optional, Sequence
import argparse
import logging
import os
import sys

from .services.cad_provider import load_entities
from .services.errors import FloorPlanError
from .services.floor_assembler import build_floor_structure, summarize
from .services.preview import generate_preview
from .services.room_detector import HeuristicRoomDetector, PolygonizeRoomDetector


logger = logging.getLogger("floorplan")

DETECTORS = {
    "heuristic": HeuristicRoomDetector,
    "polygonize": PolygonizeRoomDetector,
}

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="floorplan",
        description="Detect rooms in a CAD floor plan and render a preview.",
    )
    parser.add_argument("input", help="Path to the DXF or DWG drawing.")
    parser.add_argument(
        "output", nargs="?", default=None,
        help="PNG preview path. When omitted only the room report is printed.",
    )
    parser.add_argument("--width", type=int, default=800, help="Preview width (px).")
    parser.add_argument("--height", type=int, default=600, help="Preview height (px).")
    parser.add_argument(
        "--hover", default=None, metavar="ROOM_ID",
        help="Highlight one room, e.g. room-0.",
    )
    parser.add_argument(
        "--detector", choices=sorted(DETECTORS), default="heuristic",
        help="Room detection strategy.",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=os.getenv("FLOORPLAN_LOG_LEVEL", "WARNING"),
        help="Logging level (default: $FLOORPLAN_LOG_LEVEL or WARNING).",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    # Defaults from the environment bypass argparse choices.
    if args.log_level not in LOG_LEVELS:
        parser.error(f"invalid log level: {args.log_level!r}")
    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    input_path = Path(args.input)
    if not input_path.exists():
        logger.error("Input file '%s' not found.", input_path)
        return 1

    detector = DETECTORS[args.detector]()

    if args.output:
        floor = generate_preview(
            input_path,
            Path(args.output),
            args.width,
            args.height,
            hovered_room_id=args.hover,
            detector=detector,
        )
        if floor is None:
            return 1
    else:
        try:
            floor = build_floor_structure(load_entities(input_path), detector=detector)
        except FloorPlanError as exc:
            logger.error("%s", exc)
            return 1

    counts = summarize(floor)
    print(", ".join(f"{name}: {count}" for name, count in counts.items()))
    for room in floor.rooms:
        print(f"  {room.id:<10} {room.name:<14} {room.type.value:<9} {round(room.area)} sq ft")
    return 0


if __name__ == "__main__":
    sys.exit(main())
