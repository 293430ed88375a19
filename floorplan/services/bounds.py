"""
Overall drawing bounds.

Each entity kind contributes a small set of points (segment endpoints,
circle/arc bounding corners, insertion points, polyline vertices) and the
bounds are the min/max reduction over all of them.
"""

from typing import Iterable, Optional
import logging
import math

from .geometry import BoundingBox, Entity, EntityKind, Point2D


logger = logging.getLogger(__name__)

# Neutral 300 x 200 rectangle used when the drawing has no usable extent.
DEFAULT_BOUNDS = BoundingBox(-150.0, -100.0, 150.0, 100.0)


def get_entity_points(entity: Entity) -> list[Point2D]:
    """Return the points that define the extent of one entity."""
    kind = entity.kind

    if kind == EntityKind.LINE:
        return list(entity.vertices[:2]) if len(entity.vertices) >= 2 else []

    if kind == EntityKind.POLYLINE:
        return list(entity.vertices)

    if kind in (EntityKind.CIRCLE, EntityKind.ARC):
        if entity.center is None:
            return []
        radius = entity.radius or 1.0
        return [
            Point2D(entity.center.x - radius, entity.center.y - radius),
            Point2D(entity.center.x + radius, entity.center.y + radius),
        ]

    if kind == EntityKind.ELLIPSE:
        if entity.center is None or entity.major_axis is None:
            return []
        reach = math.hypot(entity.major_axis.x, entity.major_axis.y)
        return [
            Point2D(entity.center.x - reach, entity.center.y - reach),
            Point2D(entity.center.x + reach, entity.center.y + reach),
        ]

    if kind == EntityKind.SPLINE:
        return list(entity.control_points)

    if kind in (EntityKind.INSERT, EntityKind.TEXT, EntityKind.POINT):
        if entity.position is not None:
            return [entity.position]
        return list(entity.vertices)

    # DIMENSION and unrecognised kinds fall back to their vertices.
    return list(entity.vertices)


def calculate_bounds(entities: Iterable[Entity]) -> Optional[BoundingBox]:
    """
    Compute the bounding box spanning every entity.

    Returns None for an empty list, or when no entity yields a point.
    """
    points: list[Point2D] = []
    for entity in entities:
        points.extend(get_entity_points(entity))
    return BoundingBox.from_points(points)


def resolve_bounds(
    entities: Iterable[Entity],
    default: BoundingBox = DEFAULT_BOUNDS,
) -> BoundingBox:
    """
    Bounds safe for downstream ratios: the computed box, or `default`
    when the drawing is empty or has zero width or height.
    """
    bounds = calculate_bounds(entities)
    if bounds is None:
        logger.warning("No drawing extent found; using default bounds %s", default)
        return default
    if bounds.is_degenerate():
        logger.warning("Degenerate drawing bounds %s; using default bounds", bounds)
        return default
    return bounds
