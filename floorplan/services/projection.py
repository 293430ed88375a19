"""
Drawing-unit to canvas-pixel projection and hover hit-testing.
"""

from dataclasses import dataclass
from typing import Optional

from .geometry import BoundingBox, FloorStructure, Point2D, Room


@dataclass(frozen=True)
class Projection:
    """Uniform scale plus offset: pixel = offset + drawing * scale."""
    scale: float
    offset_x: float
    offset_y: float

    def to_canvas(self, x: float, y: float) -> tuple[float, float]:
        return (self.offset_x + x * self.scale, self.offset_y + y * self.scale)

    def to_drawing(self, px: float, py: float) -> tuple[float, float]:
        """Exact inverse of `to_canvas`."""
        return ((px - self.offset_x) / self.scale, (py - self.offset_y) / self.scale)


def compute_projection(
    bounds: BoundingBox,
    canvas_width: float,
    canvas_height: float,
    padding: float = 0.0,
    max_scale: float = 10.0,
) -> Projection:
    """
    Fit `bounds` into the canvas, centred, keeping the aspect ratio.

    The scale is capped at `max_scale` so tiny drawings are not blown up.
    `bounds` must have non-zero width and height (see `resolve_bounds`).
    """
    scale = min(
        (canvas_width - padding * 2) / bounds.width,
        (canvas_height - padding * 2) / bounds.height,
        max_scale,
    )
    scaled_width = bounds.width * scale
    scaled_height = bounds.height * scale
    return Projection(
        scale=scale,
        offset_x=(canvas_width - scaled_width) / 2 - bounds.min_x * scale,
        offset_y=(canvas_height - scaled_height) / 2 - bounds.min_y * scale,
    )


def room_at_pixel(
    floor: FloorStructure,
    projection: Projection,
    px: float,
    py: float,
) -> Optional[Room]:
    """Room under a pointer position given in canvas pixels."""
    x, y = projection.to_drawing(px, py)
    return floor.find_room_at(Point2D(x, y))
