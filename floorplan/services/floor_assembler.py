"""
Floor structure assembly.

Combines candidate regions, their classification and the global wall,
door and window lists into the final `FloorStructure`. Assembly is
deterministic: the same inputs always give an equal structure.
"""

from typing import Iterable, Optional, Sequence
import dataclasses
import logging

from .bounds import resolve_bounds
from .config import DEFAULT_LAYERS, LayerConfig
from .entity_extractor import EntityExtractor
from .geometry import BoundingBox, Door, Entity, FloorStructure, Room, Wall, Window
from .room_classifier import RoomClassifier
from .room_detector import HeuristicRoomDetector, RoomDetectionStrategy


logger = logging.getLogger(__name__)


class FloorStructureAssembler:
    """Binds walls, doors and windows to the rooms whose bounds contain them."""

    def __init__(self, classifier: Optional[RoomClassifier] = None):
        self.classifier = classifier or RoomClassifier()

    def assemble(
        self,
        regions: Sequence[BoundingBox],
        walls: Sequence[Wall],
        doors: Sequence[Door],
        windows: Sequence[Window],
        bounds: BoundingBox,
    ) -> FloorStructure:
        room_ids = [f"room-{index}" for index in range(len(regions))]

        # Doors learn which rooms they open into before rooms are frozen.
        linked_doors = tuple(
            dataclasses.replace(
                door,
                room_ids=tuple(
                    room_id
                    for room_id, region in zip(room_ids, regions)
                    if region.contains(door.position)
                ),
            )
            for door in doors
        )

        rooms = tuple(
            self._build_room(index, room_id, region, walls, linked_doors, windows)
            for index, (room_id, region) in enumerate(zip(room_ids, regions))
        )

        return FloorStructure(
            rooms=rooms,
            walls=tuple(walls),
            doors=linked_doors,
            windows=tuple(windows),
            bounds=bounds,
        )

    def _build_room(
        self,
        index: int,
        room_id: str,
        region: BoundingBox,
        walls: Sequence[Wall],
        doors: Sequence[Door],
        windows: Sequence[Window],
    ) -> Room:
        room_type = self.classifier.classify(region, doors, windows)
        return Room(
            id=room_id,
            name=f"{room_type.label} {index + 1}",
            type=room_type,
            bounds=region,
            walls=tuple(w for w in walls if is_wall_in_region(w, region)),
            doors=tuple(d for d in doors if region.contains(d.position)),
            windows=tuple(w for w in windows if region.contains(w.position)),
            area=region.area,
        )


def is_wall_in_region(wall: Wall, region: BoundingBox) -> bool:
    """A wall belongs to a region when either endpoint lies inside it."""
    return region.contains(wall.start) or region.contains(wall.end)


def build_floor_structure(
    entities: Iterable[Entity],
    detector: Optional[RoomDetectionStrategy] = None,
    layers: LayerConfig = DEFAULT_LAYERS,
    classifier: Optional[RoomClassifier] = None,
) -> FloorStructure:
    """Run extraction, bounds, detection, classification and assembly."""
    entities = list(entities)
    primitives = EntityExtractor(layers).extract(entities)
    bounds = resolve_bounds(entities)
    regions = (detector or HeuristicRoomDetector()).detect_candidate_regions(
        primitives.walls, bounds
    )

    floor = FloorStructureAssembler(classifier).assemble(
        regions,
        primitives.walls,
        primitives.doors,
        primitives.windows,
        bounds,
    )
    logger.info("Floor structure built: %s", summarize(floor))
    return floor


def summarize(floor: FloorStructure) -> dict[str, int]:
    """Counts of the main floor elements."""
    return {
        "rooms": len(floor.rooms),
        "walls": len(floor.walls),
        "doors": len(floor.doors),
        "windows": len(floor.windows),
    }
