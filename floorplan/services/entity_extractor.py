"""
Typed primitive extraction from drawing entities.

Walls, doors and windows are recognised by layer name (and, for doors,
by block insertion). Anything else is ignored; this module never raises
for unknown layers or kinds.
"""

from typing import Iterable, NamedTuple, Optional
import logging
import math

from .config import DEFAULT_LAYERS, LayerConfig
from .geometry import Door, Entity, EntityKind, Point2D, Wall, Window


logger = logging.getLogger(__name__)


class ExtractedPrimitives(NamedTuple):
    """Walls, doors and windows found in an entity list."""
    walls: list[Wall]
    doors: list[Door]
    windows: list[Window]


class EntityExtractor:
    """Filters an entity list into walls, doors and windows."""

    DEFAULT_WALL_THICKNESS = 0.3
    DEFAULT_DOOR_WIDTH = 30.0
    WIDTH_ATTRIBUTE_KEYS = ("width", "WIDTH", "W")

    def __init__(self, layers: LayerConfig = DEFAULT_LAYERS):
        self.layers = layers

    def extract(self, entities: Iterable[Entity]) -> ExtractedPrimitives:
        """Extract all three primitive lists in a single pass over `entities`."""
        entities = list(entities)
        result = ExtractedPrimitives(
            walls=self.extract_walls(entities),
            doors=self.extract_doors(entities),
            windows=self.extract_windows(entities),
        )
        logger.debug(
            "Extracted %d walls, %d doors, %d windows from %d entities",
            len(result.walls), len(result.doors), len(result.windows), len(entities),
        )
        return result

    def extract_walls(self, entities: Iterable[Entity]) -> list[Wall]:
        """Lines and polylines on a wall layer; one wall per polyline segment."""
        walls: list[Wall] = []
        for entity in entities:
            if not self.layers.is_wall_layer(entity.layer):
                continue

            kind = entity.kind
            if kind == EntityKind.LINE:
                if len(entity.vertices) >= 2:
                    self._append_wall(walls, entity.vertices[0], entity.vertices[1])
            elif kind == EntityKind.POLYLINE:
                vertices = entity.vertices
                for start, end in zip(vertices, vertices[1:]):
                    self._append_wall(walls, start, end)
                if entity.closed and len(vertices) > 2:
                    self._append_wall(walls, vertices[-1], vertices[0])
        return walls

    def extract_doors(self, entities: Iterable[Entity]) -> list[Door]:
        """Entities on the door layer and every block insertion."""
        doors: list[Door] = []
        for entity in entities:
            if not (self.layers.is_door_layer(entity.layer) or entity.kind == EntityKind.INSERT):
                continue

            if entity.position is not None:
                rotation = math.radians(entity.rotation) if entity.rotation else 0.0
                doors.append(Door(
                    position=entity.position,
                    width=self._width_attribute(entity) or self.DEFAULT_DOOR_WIDTH,
                    direction=rotation,
                ))
            elif len(entity.vertices) >= 2:
                start, end = entity.vertices[0], entity.vertices[1]
                doors.append(Door(
                    position=_midpoint(start, end),
                    width=start.distance_to(end),
                    direction=_direction(start, end),
                ))
            else:
                logger.debug("Skipping door entity without geometry on layer %s", entity.layer)
        return doors

    def extract_windows(self, entities: Iterable[Entity]) -> list[Window]:
        """Segments on the window layer, or lines on its legacy alias."""
        windows: list[Window] = []
        for entity in entities:
            on_window_layer = self.layers.is_window_layer(entity.layer)
            on_alias = self.layers.is_window_alias(entity.layer) and entity.kind == EntityKind.LINE
            if not (on_window_layer or on_alias):
                continue
            if len(entity.vertices) < 2:
                continue

            start, end = entity.vertices[0], entity.vertices[1]
            windows.append(Window(
                position=_midpoint(start, end),
                width=self._width_attribute(entity) or start.distance_to(end),
                direction=_direction(start, end),
            ))
        return windows

    def _append_wall(self, walls: list[Wall], start: Point2D, end: Point2D) -> None:
        if start == end:
            return
        walls.append(Wall(start=start, end=end, thickness=self.DEFAULT_WALL_THICKNESS))

    def _width_attribute(self, entity: Entity) -> Optional[float]:
        for key in self.WIDTH_ATTRIBUTE_KEYS:
            if key not in entity.attributes:
                continue
            try:
                width = float(entity.attributes[key])
            except (TypeError, ValueError):
                continue
            if width > 0:
                return width
        return None


def extract_primitives(
    entities: Iterable[Entity],
    layers: LayerConfig = DEFAULT_LAYERS,
) -> ExtractedPrimitives:
    """Module-level shortcut for `EntityExtractor(layers).extract(entities)`."""
    return EntityExtractor(layers).extract(entities)


def _midpoint(start: Point2D, end: Point2D) -> Point2D:
    return Point2D((start.x + end.x) / 2, (start.y + end.y) / 2)


def _direction(start: Point2D, end: Point2D) -> float:
    return math.atan2(end.y - start.y, end.x - start.x)
