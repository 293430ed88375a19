"""
Room segmentation over the overall drawing bounds.

The default detector is a best-effort heuristic, not an enclosure
solver: it either splits triangular layouts into a fixed three-region
topology, or scans a coarse grid and keeps the cells that have a wall
endpoint nearby. A polygonize-based detector can be swapped in through
the same `RoomDetectionStrategy` interface.
"""

from abc import ABC, abstractmethod
from typing import Optional, Sequence
import logging

from shapely.geometry import LineString
from shapely.ops import polygonize, unary_union

from .geometry import BoundingBox, Wall


logger = logging.getLogger(__name__)


class RoomDetectionStrategy(ABC):
    """Proposes candidate room rectangles from walls and overall bounds."""

    @abstractmethod
    def detect_candidate_regions(
        self, walls: Sequence[Wall], bounds: BoundingBox
    ) -> list[BoundingBox]:
        """Return candidate regions in emission order (never empty)."""


class HeuristicRoomDetector(RoomDetectionStrategy):
    """Triangular-layout split or wall-adjacent grid scan."""

    GRID_CELL_SIZE = 50.0
    MIN_GRID_DIVISIONS = 2
    WALL_TOLERANCE = 5.0
    TRIANGLE_ANGLES = (60.0, 120.0)
    TRIANGLE_ANGLE_TOLERANCE = 15.0
    MIN_ANGULAR_WALLS = 2

    def detect_candidate_regions(
        self, walls: Sequence[Wall], bounds: BoundingBox
    ) -> list[BoundingBox]:
        if self.is_triangular_layout(walls):
            logger.info("Triangular layout detected (%d walls)", len(walls))
            regions = self.triangular_regions(bounds)
        elif self.is_undivided_outline(walls, bounds):
            logger.info("Walls only trace the outline; treating it as one room")
            regions = [bounds]
        else:
            regions = self.grid_regions(walls, bounds)

        if not regions:
            logger.info("No enclosed cells found; falling back to a single room")
            regions = [bounds]
        return regions

    def is_triangular_layout(self, walls: Sequence[Wall]) -> bool:
        """At least two walls oriented near 60 or 120 degrees."""
        angular_walls = 0
        for wall in walls:
            angle = wall.get_angle_degrees() % 180.0
            if any(
                abs(angle - target) < self.TRIANGLE_ANGLE_TOLERANCE
                for target in self.TRIANGLE_ANGLES
            ):
                angular_walls += 1
        return angular_walls >= self.MIN_ANGULAR_WALLS

    def triangular_regions(self, bounds: BoundingBox) -> list[BoundingBox]:
        """Two half-width quadrants below the centre plus a centred cap above it."""
        center = bounds.center
        quarter = bounds.width * 0.25
        return [
            BoundingBox(bounds.min_x, bounds.min_y, center.x, center.y),
            BoundingBox(center.x, bounds.min_y, bounds.max_x, center.y),
            BoundingBox(bounds.min_x + quarter, center.y, bounds.max_x - quarter, bounds.max_y),
        ]

    def is_undivided_outline(self, walls: Sequence[Wall], bounds: BoundingBox) -> bool:
        """
        True when every wall runs along the bounds perimeter and all four
        sides are walled, i.e. there is no interior partition to split on.
        """
        if not walls:
            return False
        sides_seen: set[str] = set()
        for wall in walls:
            side = self._perimeter_side(wall, bounds)
            if side is None:
                return False
            sides_seen.add(side)
        return len(sides_seen) == 4

    def grid_regions(self, walls: Sequence[Wall], bounds: BoundingBox) -> list[BoundingBox]:
        """Row-major grid cells that have at least one wall endpoint nearby."""
        cols = max(self.MIN_GRID_DIVISIONS, int(bounds.width // self.GRID_CELL_SIZE))
        rows = max(self.MIN_GRID_DIVISIONS, int(bounds.height // self.GRID_CELL_SIZE))
        cell_width = bounds.width / cols
        cell_height = bounds.height / rows

        regions: list[BoundingBox] = []
        for row in range(rows):
            for col in range(cols):
                # The last row/column snaps to the bounds to avoid float drift.
                cell = BoundingBox(
                    bounds.min_x + col * cell_width,
                    bounds.min_y + row * cell_height,
                    bounds.max_x if col == cols - 1 else bounds.min_x + (col + 1) * cell_width,
                    bounds.max_y if row == rows - 1 else bounds.min_y + (row + 1) * cell_height,
                )
                if self.has_enclosing_walls(cell, walls):
                    regions.append(cell)

        logger.debug("Grid scan %dx%d kept %d cells", cols, rows, len(regions))
        return regions

    def has_enclosing_walls(self, cell: BoundingBox, walls: Sequence[Wall]) -> bool:
        """Any wall endpoint within the cell grown by the wall tolerance."""
        return any(
            cell.contains(wall.start, self.WALL_TOLERANCE)
            or cell.contains(wall.end, self.WALL_TOLERANCE)
            for wall in walls
        )

    def _perimeter_side(self, wall: Wall, bounds: BoundingBox) -> Optional[str]:
        tol = self.WALL_TOLERANCE
        sides = (
            ("left", lambda p: abs(p.x - bounds.min_x) <= tol),
            ("right", lambda p: abs(p.x - bounds.max_x) <= tol),
            ("top", lambda p: abs(p.y - bounds.min_y) <= tol),
            ("bottom", lambda p: abs(p.y - bounds.max_y) <= tol),
        )
        for name, on_side in sides:
            if on_side(wall.start) and on_side(wall.end):
                return name
        return None


class PolygonizeRoomDetector(RoomDetectionStrategy):
    """
    Stricter detector: polygonizes the wall network with shapely and
    proposes the bounding box of every enclosed face.

    Faces smaller than `min_room_area` are treated as noise. When no face
    survives, the heuristic detector is used instead.
    """

    def __init__(
        self,
        min_room_area: float = 100.0,
        fallback: Optional[RoomDetectionStrategy] = None,
    ):
        self.min_room_area = min_room_area
        self.fallback = fallback or HeuristicRoomDetector()

    def detect_candidate_regions(
        self, walls: Sequence[Wall], bounds: BoundingBox
    ) -> list[BoundingBox]:
        lines = [
            LineString([(w.start.x, w.start.y), (w.end.x, w.end.y)])
            for w in walls
            if w.start != w.end
        ]
        regions: list[BoundingBox] = []
        if lines:
            # unary_union nodes crossing segments so polygonize sees every face.
            for poly in polygonize(unary_union(lines)):
                if poly.area < self.min_room_area:
                    continue
                region = _clip(BoundingBox(*poly.bounds), bounds)
                if region is not None:
                    regions.append(region)

        if not regions:
            logger.info("Polygonize found no faces; using heuristic detector")
            return self.fallback.detect_candidate_regions(walls, bounds)

        regions.sort(key=lambda r: (r.min_y, r.min_x, r.max_y, r.max_x))
        logger.debug("Polygonize produced %d faces", len(regions))
        return regions


def detect_candidate_regions(
    walls: Sequence[Wall],
    bounds: BoundingBox,
    strategy: Optional[RoomDetectionStrategy] = None,
) -> list[BoundingBox]:
    """Run `strategy` (the heuristic detector by default)."""
    return (strategy or HeuristicRoomDetector()).detect_candidate_regions(walls, bounds)


def _clip(region: BoundingBox, bounds: BoundingBox) -> Optional[BoundingBox]:
    clipped = BoundingBox(
        max(region.min_x, bounds.min_x),
        max(region.min_y, bounds.min_y),
        min(region.max_x, bounds.max_x),
        min(region.max_y, bounds.max_y),
    )
    if clipped.width <= 0 or clipped.height <= 0:
        return None
    return clipped
