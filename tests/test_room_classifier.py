"""Tests for room type classification."""

import pytest

from floorplan.services.geometry import BoundingBox, Point2D, RoomType, Window
from floorplan.services.room_classifier import RoomClassifier, classify_room, count_in_region


def _window(x, y):
    return Window(Point2D(x, y), 10.0)


class TestClassifyArea:

    @pytest.mark.parametrize("area, windows, expected", [
        (450, 0, RoomType.BATHROOM),
        (499.9, 3, RoomType.BATHROOM),
        (500, 0, RoomType.BEDROOM),
        (999, 5, RoomType.BEDROOM),
        (1000, 0, RoomType.ROOM),
        (1500, 2, RoomType.LIVING),
        (2000, 1, RoomType.ROOM),
        (2000.5, 0, RoomType.LIVING),
    ])
    def test_rules_in_order(self, area, windows, expected):
        assert RoomClassifier().classify_area(area, windows) is expected

    def test_deterministic(self):
        classifier = RoomClassifier()
        results = {classifier.classify_area(1200, 1) for _ in range(10)}
        assert results == {RoomType.ROOM}


class TestClassifyRegion:

    def test_small_room_is_bathroom(self):
        # 450 square units, no windows.
        region = BoundingBox(0, 0, 30, 15)
        assert classify_room(region) is RoomType.BATHROOM

    def test_only_windows_inside_region_count(self):
        region = BoundingBox(0, 0, 40, 40)  # 1600
        inside = [_window(0, 20), _window(40, 20)]
        outside = [_window(100, 20), _window(-1, 20)]

        assert classify_room(region, windows=outside) is RoomType.ROOM
        assert classify_room(region, windows=inside + outside) is RoomType.LIVING

    def test_count_in_region_is_inclusive(self):
        region = BoundingBox(0, 0, 10, 10)
        windows = [_window(0, 0), _window(10, 10), _window(5, 11)]
        assert count_in_region(windows, region) == 2
