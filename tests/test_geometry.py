"""Tests for the floor model types."""

import math

import pytest

from floorplan.services.geometry import (
    BoundingBox,
    Door,
    Entity,
    EntityKind,
    FloorStructure,
    Point2D,
    Room,
    RoomType,
    Wall,
)


# ── EntityKind ───────────────────────────────────────────────────────────────

class TestEntityKind:

    def test_aliases(self):
        assert EntityKind.from_type("LWPOLYLINE") is EntityKind.POLYLINE
        assert EntityKind.from_type("MTEXT") is EntityKind.TEXT

    def test_case_insensitive(self):
        assert EntityKind.from_type("line") is EntityKind.LINE

    def test_unknown(self):
        assert EntityKind.from_type("HATCH") is EntityKind.UNKNOWN
        assert EntityKind.from_type(None) is EntityKind.UNKNOWN


# ── Point2D / BoundingBox ────────────────────────────────────────────────────

class TestPoint2D:

    def test_from_mapping_and_sequence(self):
        assert Point2D.from_value({"x": 1, "y": 2}) == Point2D(1.0, 2.0)
        assert Point2D.from_value([3, 4, 5]) == Point2D(3.0, 4.0)

    def test_from_invalid_value(self):
        assert Point2D.from_value(None) is None
        assert Point2D.from_value({}) is None
        assert Point2D.from_value("ab") is None

    def test_distance(self):
        assert Point2D(0, 0).distance_to(Point2D(3, 4)) == pytest.approx(5.0)


class TestBoundingBox:

    def test_dimensions(self):
        box = BoundingBox(-10, -5, 10, 5)
        assert box.width == 20
        assert box.height == 10
        assert box.area == 200
        assert box.center == Point2D(0, 0)

    def test_contains_is_inclusive(self):
        box = BoundingBox(0, 0, 10, 10)
        assert box.contains(Point2D(0, 0))
        assert box.contains(Point2D(10, 10))
        assert not box.contains(Point2D(10.01, 5))

    def test_contains_with_tolerance(self):
        box = BoundingBox(0, 0, 10, 10)
        assert box.contains(Point2D(14, 5), tolerance=5)
        assert not box.contains(Point2D(16, 5), tolerance=5)

    def test_degenerate(self):
        assert BoundingBox(0, 0, 0, 10).is_degenerate()
        assert BoundingBox(0, 3, 10, 3).is_degenerate()
        assert not BoundingBox(0, 0, 1, 1).is_degenerate()

    def test_from_points(self):
        points = [Point2D(3, -1), Point2D(-2, 4), Point2D(0, 0)]
        assert BoundingBox.from_points(points) == BoundingBox(-2, -1, 3, 4)
        assert BoundingBox.from_points([]) is None


# ── Entity ───────────────────────────────────────────────────────────────────

class TestEntityFromDict:

    def test_line_record(self):
        entity = Entity.from_dict({
            "type": "LINE",
            "layer": "WALLS",
            "vertices": [{"x": 0, "y": 0}, {"x": 10, "y": 0}],
        })
        assert entity.kind is EntityKind.LINE
        assert entity.layer == "WALLS"
        assert entity.vertices == (Point2D(0, 0), Point2D(10, 0))

    def test_start_end_fallback(self):
        entity = Entity.from_dict({"type": "LINE", "start": [1, 2], "end": [3, 4]})
        assert entity.vertices == (Point2D(1, 2), Point2D(3, 4))

    def test_defaults(self):
        entity = Entity.from_dict({"type": "POINT", "position": {"x": 5, "y": 6}})
        assert entity.layer == "0"
        assert entity.position == Point2D(5, 6)
        assert entity.vertices == ()
        assert not entity.closed

    def test_shape_flag_closes_polyline(self):
        entity = Entity.from_dict({"type": "LWPOLYLINE", "shape": True, "vertices": []})
        assert entity.closed

    def test_geometry_fields(self):
        entity = Entity.from_dict({
            "type": "ARC",
            "center": {"x": 1, "y": 1},
            "radius": "2.5",
            "startAngle": 0,
            "endAngle": 90,
        })
        assert entity.radius == 2.5
        assert entity.start_angle == 0.0
        assert entity.end_angle == 90.0

    def test_non_mapping_raises(self):
        with pytest.raises(TypeError):
            Entity.from_dict(["LINE"])


# ── Walls / FloorStructure ───────────────────────────────────────────────────

class TestWall:

    def test_length_and_angle(self):
        wall = Wall(Point2D(0, 0), Point2D(0, 5))
        assert wall.get_length() == pytest.approx(5.0)
        assert wall.get_angle_degrees() == pytest.approx(90.0)
        assert wall.thickness == 0.3


class TestFloorStructure:

    def _room(self, room_id, bounds):
        return Room(id=room_id, name=room_id, type=RoomType.ROOM, bounds=bounds, area=bounds.area)

    def test_find_room_returns_first_match(self):
        first = self._room("room-0", BoundingBox(0, 0, 10, 10))
        second = self._room("room-1", BoundingBox(10, 0, 20, 10))
        floor = FloorStructure(
            rooms=(first, second),
            walls=(),
            doors=(),
            windows=(),
            bounds=BoundingBox(0, 0, 20, 10),
        )
        # The shared edge belongs to both; emission order decides.
        assert floor.find_room_at(Point2D(10, 5)) is first
        assert floor.find_room_at(Point2D(15, 5)) is second
        assert floor.find_room_at(Point2D(25, 5)) is None

    def test_is_empty_ignores_fallback_rooms(self):
        bounds = BoundingBox(0, 0, 10, 10)
        floor = FloorStructure((self._room("room-0", bounds),), (), (), (), bounds)
        assert floor.is_empty()

        with_door = FloorStructure((), (), (Door(Point2D(1, 1), 3.0),), (), bounds)
        assert not with_door.is_empty()


def test_room_type_label():
    assert RoomType.LIVING.label == "Living"
    assert RoomType.BATHROOM.value == "bathroom"


def test_door_direction_is_radians():
    door = Door(Point2D(0, 0), 30.0, direction=math.pi / 2)
    assert door.room_ids == ()
    assert door.direction == pytest.approx(math.radians(90))
