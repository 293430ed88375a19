"""Shared fixtures: sample drawings and a drawing context that records calls."""

from typing import Optional, Sequence

import pytest

from floorplan.services.geometry import Entity, Point2D


class RecordingContext:
    """
    Drawing context double that records every call with the style that was
    active at the time, so tests can assert on draw order and colours.
    """

    def __init__(self):
        self.stroke_style = "#000000"
        self.fill_style = "#000000"
        self.line_width = 1.0
        self.font_size = 10.0
        self.font_family = "sans-serif"
        self.text_align = "start"
        self.text_baseline = "alphabetic"
        self.global_alpha = 1.0
        self.dash: tuple = ()
        self.calls: list[tuple] = []
        self._stack: list[dict] = []

    def _record(self, name: str, *args) -> None:
        self.calls.append((name, args, {
            "stroke_style": self.stroke_style,
            "fill_style": self.fill_style,
            "line_width": self.line_width,
            "font_size": self.font_size,
            "global_alpha": self.global_alpha,
            "dash": self.dash,
        }))

    def named(self, name: str) -> list[tuple]:
        return [call for call in self.calls if call[0] == name]

    def save(self) -> None:
        self._stack.append(dict(vars(self), calls=None, _stack=None))
        self._record("save")

    def restore(self) -> None:
        state = self._stack.pop()
        for key, value in state.items():
            if key not in ("calls", "_stack"):
                setattr(self, key, value)
        self._record("restore")

    def translate(self, x: float, y: float) -> None:
        self._record("translate", x, y)

    def scale(self, sx: float, sy: Optional[float] = None) -> None:
        self._record("scale", sx, sy)

    def clear_rect(self, x, y, width, height) -> None:
        self._record("clear_rect", x, y, width, height)

    def begin_path(self) -> None:
        self._record("begin_path")

    def move_to(self, x, y) -> None:
        self._record("move_to", x, y)

    def line_to(self, x, y) -> None:
        self._record("line_to", x, y)

    def quadratic_curve_to(self, cpx, cpy, x, y) -> None:
        self._record("quadratic_curve_to", cpx, cpy, x, y)

    def arc(self, x, y, radius, start_angle, end_angle, anticlockwise=False) -> None:
        self._record("arc", x, y, radius, start_angle, end_angle)

    def ellipse(self, x, y, radius_x, radius_y, rotation, start_angle, end_angle,
                anticlockwise=False) -> None:
        self._record("ellipse", x, y, radius_x, radius_y, rotation, start_angle, end_angle)

    def close_path(self) -> None:
        self._record("close_path")

    def stroke(self) -> None:
        self._record("stroke")

    def fill(self) -> None:
        self._record("fill")

    def stroke_rect(self, x, y, width, height) -> None:
        self._record("stroke_rect", x, y, width, height)

    def fill_rect(self, x, y, width, height) -> None:
        self._record("fill_rect", x, y, width, height)

    def set_line_dash(self, segments: Sequence[float]) -> None:
        self.dash = tuple(segments)
        self._record("set_line_dash", tuple(segments))

    def fill_text(self, text, x, y) -> None:
        self._record("fill_text", text, x, y)

    def measure_text(self, text: str) -> float:
        return len(text) * self.font_size * 0.5


def wall_line(x1, y1, x2, y2, layer="WALLS") -> Entity:
    return Entity(type="LINE", layer=layer, vertices=(Point2D(x1, y1), Point2D(x2, y2)))


@pytest.fixture
def recording_ctx() -> RecordingContext:
    return RecordingContext()


@pytest.fixture
def rectangle_entities() -> list[Entity]:
    """Four walls tracing a 300 x 200 rectangle."""
    return [
        wall_line(0, 0, 300, 0),
        wall_line(300, 0, 300, 200),
        wall_line(300, 200, 0, 200),
        wall_line(0, 200, 0, 0),
    ]


@pytest.fixture
def two_room_entities() -> list[Entity]:
    """A 200 x 100 outline split in two by a wall at x=100."""
    return [
        wall_line(0, 0, 200, 0),
        wall_line(200, 0, 200, 100),
        wall_line(200, 100, 0, 100),
        wall_line(0, 100, 0, 0),
        wall_line(100, 0, 100, 100),
    ]


@pytest.fixture
def sample_dxf(tmp_path):
    """A 300 x 200 walled room with a door, a window and assorted annotation."""
    import ezdxf

    doc = ezdxf.new("R2010")
    for name in ("WALLS", "DOORS", "WINDOWS", "FURNITURE", "TEXT", "DIMENSIONS"):
        doc.layers.add(name)

    door_block = doc.blocks.new(name="DOOR")
    door_block.add_line((0, 0), (30, 0))

    msp = doc.modelspace()
    msp.add_lwpolyline(
        [(0, 0), (300, 0), (300, 200), (0, 200)],
        close=True,
        dxfattribs={"layer": "WALLS"},
    )
    msp.add_line((300, 50), (300, 150), dxfattribs={"layer": "WINDOWS"})
    door = msp.add_blockref("DOOR", (150, 0), dxfattribs={"layer": "DOORS", "rotation": 90})
    door.add_attrib("WIDTH", "36", (150, 0))
    msp.add_circle((100, 100), 10, dxfattribs={"layer": "FURNITURE"})
    msp.add_arc((50, 150), 5, 0, 90, dxfattribs={"layer": "FURNITURE"})
    msp.add_ellipse((200, 100), major_axis=(20, 0), ratio=0.5, dxfattribs={"layer": "FURNITURE"})
    msp.add_open_spline([(0, 0), (10, 10), (20, 0), (30, 10)], dxfattribs={"layer": "FURNITURE"})
    msp.add_text("Hall", dxfattribs={"layer": "TEXT", "height": 10, "insert": (50, 50)})
    msp.add_mtext("Kitchen", dxfattribs={"layer": "TEXT", "insert": (80, 80), "char_height": 5})
    msp.add_point((5, 5))
    msp.add_ray((0, 0), (1, 0))
    msp.add_linear_dim(
        base=(0, -20), p1=(0, 0), p2=(300, 0), dxfattribs={"layer": "DIMENSIONS"}
    ).render()

    path = tmp_path / "plan.dxf"
    doc.saveas(path)
    return path
