"""
Floor model types shared by every stage of the pipeline.

Drawing entities arrive from the CAD entity provider as loose records;
`Entity` normalizes them into one tagged type. Walls, doors, windows,
rooms and the final `FloorStructure` are immutable once built.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional
import math


DEFAULT_LAYER = "0"


class EntityKind(Enum):
    """Drawing primitive kinds understood by the engine."""
    LINE = "LINE"
    POLYLINE = "POLYLINE"
    CIRCLE = "CIRCLE"
    ARC = "ARC"
    INSERT = "INSERT"
    TEXT = "TEXT"
    DIMENSION = "DIMENSION"
    ELLIPSE = "ELLIPSE"
    SPLINE = "SPLINE"
    POINT = "POINT"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def from_type(cls, type_name: Optional[str]) -> "EntityKind":
        """Map a provider type string (e.g. 'LWPOLYLINE') to a kind."""
        name = (type_name or "").strip().upper()
        aliases = {
            "LWPOLYLINE": cls.POLYLINE,
            "MTEXT": cls.TEXT,
        }
        if name in aliases:
            return aliases[name]
        try:
            return cls(name)
        except ValueError:
            return cls.UNKNOWN


class RoomType(Enum):
    """Room labels produced by the classifier."""
    BATHROOM = "bathroom"
    BEDROOM = "bedroom"
    LIVING = "living"
    ROOM = "room"

    @property
    def label(self) -> str:
        return self.value[:1].upper() + self.value[1:]


@dataclass(frozen=True)
class Point2D:
    """2D point in drawing units."""
    x: float
    y: float

    def distance_to(self, other: "Point2D") -> float:
        """Calculate 2D distance to another point."""
        return math.hypot(self.x - other.x, self.y - other.y)

    @classmethod
    def from_value(cls, value: Any) -> Optional["Point2D"]:
        """
        Build a point from a mapping ({'x':..,'y':..}), a sequence or
        an object with x/y attributes. Returns None when no usable
        coordinates are present.
        """
        if value is None:
            return None
        if isinstance(value, Point2D):
            return value
        try:
            if isinstance(value, Mapping):
                return cls(float(value["x"]), float(value["y"]))
            if hasattr(value, "x") and hasattr(value, "y"):
                return cls(float(value.x), float(value.y))
            return cls(float(value[0]), float(value[1]))
        except (KeyError, IndexError, TypeError, ValueError):
            return None


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned rectangle in drawing units."""
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def center(self) -> Point2D:
        return Point2D(self.min_x + self.width / 2, self.min_y + self.height / 2)

    def contains(self, point: Point2D, tolerance: float = 0.0) -> bool:
        """Inclusive containment test, optionally grown by `tolerance`."""
        return (
            self.min_x - tolerance <= point.x <= self.max_x + tolerance
            and self.min_y - tolerance <= point.y <= self.max_y + tolerance
        )

    def contains_box(self, other: "BoundingBox") -> bool:
        return (
            self.min_x <= other.min_x
            and self.min_y <= other.min_y
            and other.max_x <= self.max_x
            and other.max_y <= self.max_y
        )

    def is_degenerate(self) -> bool:
        """True when the box has no extent along either axis."""
        return self.width == 0 or self.height == 0

    @classmethod
    def from_points(cls, points: list[Point2D]) -> Optional["BoundingBox"]:
        if not points:
            return None
        xs = [p.x for p in points]
        ys = [p.y for p in points]
        return cls(min(xs), min(ys), max(xs), max(ys))


@dataclass(frozen=True)
class Entity:
    """
    One drawing primitive as delivered by the CAD entity provider.

    `type` keeps the provider's raw type name; `kind` is its normalized
    form. Geometry fields are filled according to the kind and left
    empty otherwise.
    """
    type: str
    layer: str = DEFAULT_LAYER
    vertices: tuple[Point2D, ...] = ()
    center: Optional[Point2D] = None
    radius: Optional[float] = None
    position: Optional[Point2D] = None
    control_points: tuple[Point2D, ...] = ()
    text: Optional[str] = None
    height: Optional[float] = None
    start_angle: Optional[float] = None  # degrees
    end_angle: Optional[float] = None  # degrees
    dimension_text: Optional[str] = None
    major_axis: Optional[Point2D] = None
    axis_ratio: Optional[float] = None
    closed: bool = False
    name: Optional[str] = None
    rotation: Optional[float] = None  # degrees
    attributes: Mapping[str, Any] = field(default_factory=dict)

    @property
    def kind(self) -> EntityKind:
        return EntityKind.from_type(self.type)

    @classmethod
    def from_dict(cls, record: Mapping[str, Any]) -> "Entity":
        """Build an entity from a provider record (dxf-parser style keys)."""
        if not isinstance(record, Mapping):
            raise TypeError(
                f"Entity record must be a mapping, got {type(record).__name__}"
            )

        vertices = _points(record.get("vertices"))
        # LINE records sometimes carry start/end instead of vertices.
        if not vertices and record.get("start") is not None and record.get("end") is not None:
            vertices = _points([record["start"], record["end"]])

        return cls(
            type=str(record.get("type") or ""),
            layer=str(record.get("layer") or DEFAULT_LAYER),
            vertices=vertices,
            center=Point2D.from_value(record.get("center")),
            radius=_number(record.get("radius")),
            position=Point2D.from_value(record.get("position")),
            control_points=_points(record.get("controlPoints")),
            text=record.get("text"),
            height=_number(record.get("height")),
            start_angle=_number(record.get("startAngle")),
            end_angle=_number(record.get("endAngle")),
            dimension_text=record.get("dimensionText"),
            major_axis=Point2D.from_value(record.get("majorAxis")),
            axis_ratio=_number(record.get("axisRatio")),
            closed=bool(record.get("closed") or record.get("shape")),
            name=record.get("name"),
            rotation=_number(record.get("rotation")),
            attributes=dict(record.get("attributes") or {}),
        )


@dataclass(frozen=True)
class Wall:
    """Wall segment."""
    start: Point2D
    end: Point2D
    thickness: float = 0.3

    def get_length(self) -> float:
        return self.start.distance_to(self.end)

    def get_angle_degrees(self) -> float:
        """Orientation of the segment in degrees, in (-180, 180]."""
        return math.degrees(
            math.atan2(self.end.y - self.start.y, self.end.x - self.start.x)
        )


@dataclass(frozen=True)
class Door:
    """Door opening. `room_ids` is filled during assembly, in room order."""
    position: Point2D
    width: float
    direction: float = 0.0  # radians
    room_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class Window:
    """Window opening."""
    position: Point2D
    width: float
    direction: float = 0.0  # radians


@dataclass(frozen=True)
class Room:
    """Detected room region with the walls and openings bound to it."""
    id: str
    name: str
    type: RoomType
    bounds: BoundingBox
    walls: tuple[Wall, ...] = ()
    doors: tuple[Door, ...] = ()
    windows: tuple[Window, ...] = ()
    area: float = 0.0

    def contains(self, point: Point2D) -> bool:
        return self.bounds.contains(point)


@dataclass(frozen=True)
class FloorStructure:
    """Structured floor model handed to renderers and other consumers."""
    rooms: tuple[Room, ...]
    walls: tuple[Wall, ...]
    doors: tuple[Door, ...]
    windows: tuple[Window, ...]
    bounds: BoundingBox

    def is_empty(self) -> bool:
        """True when the drawing produced no walls, doors or windows."""
        return not (self.walls or self.doors or self.windows)

    def find_room_at(self, point: Point2D) -> Optional[Room]:
        """Find the first room (in emission order) containing a point."""
        for room in self.rooms:
            if room.contains(point):
                return room
        return None


def _number(value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _points(values: Any) -> tuple[Point2D, ...]:
    if not values:
        return ()
    points = (Point2D.from_value(v) for v in values)
    return tuple(p for p in points if p is not None)
