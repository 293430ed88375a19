"""
Room type classification from area and window count.
"""

from typing import Sequence

from .geometry import BoundingBox, Door, RoomType, Window


class RoomClassifier:
    """
    Labels a candidate region as bathroom, bedroom, living or room.

    Rules are evaluated in order and the first match wins:
    small areas are bathrooms, then bedrooms; a region with more than one
    window, or a very large one, is a living room; anything else is a
    plain room.
    """

    BATHROOM_MAX_AREA = 500.0
    BEDROOM_MAX_AREA = 1000.0
    LIVING_MIN_WINDOWS = 2
    LIVING_MIN_AREA = 2000.0

    def classify(
        self,
        region: BoundingBox,
        doors: Sequence[Door] = (),
        windows: Sequence[Window] = (),
    ) -> RoomType:
        """Classify a region given the global door and window lists."""
        return self.classify_area(region.area, count_in_region(windows, region))

    def classify_area(self, area: float, windows_in_region: int) -> RoomType:
        if area < self.BATHROOM_MAX_AREA:
            return RoomType.BATHROOM
        if area < self.BEDROOM_MAX_AREA:
            return RoomType.BEDROOM
        if windows_in_region >= self.LIVING_MIN_WINDOWS:
            return RoomType.LIVING
        if area > self.LIVING_MIN_AREA:
            return RoomType.LIVING
        return RoomType.ROOM


def count_in_region(items: Sequence, region: BoundingBox) -> int:
    """Number of doors/windows whose position lies inside `region` (inclusive)."""
    return sum(1 for item in items if region.contains(item.position))


def classify_room(
    region: BoundingBox,
    doors: Sequence[Door] = (),
    windows: Sequence[Window] = (),
) -> RoomType:
    return RoomClassifier().classify(region, doors, windows)
