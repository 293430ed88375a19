"""
2D drawing surface used by the renderer.

`DrawingContext` describes the immediate-mode API the renderer relies on
(paths, fills, strokes, dashes, text with measurement, a save/restore
transform stack), modelled on an HTML canvas 2D context. `MatplotlibCanvas`
implements it on top of a matplotlib `Figure` in pixel coordinates with
the y axis pointing down, and can write the result to PNG.
"""

from io import BytesIO
from pathlib import Path
from typing import Optional, Protocol, Sequence, runtime_checkable
import math

from matplotlib import rcParams
from matplotlib.colors import to_rgba
from matplotlib.figure import Figure
from matplotlib.font_manager import FontProperties
from matplotlib.patches import PathPatch
from matplotlib.path import Path as MplPath
from matplotlib.textpath import TextPath
from matplotlib.transforms import Affine2D


@runtime_checkable
class DrawingContext(Protocol):
    """Immediate-mode 2D drawing API expected by the renderer."""

    stroke_style: str
    fill_style: str
    line_width: float
    font_size: float
    font_family: str
    text_align: str
    text_baseline: str
    global_alpha: float

    def save(self) -> None: ...
    def restore(self) -> None: ...
    def translate(self, x: float, y: float) -> None: ...
    def scale(self, sx: float, sy: Optional[float] = None) -> None: ...
    def clear_rect(self, x: float, y: float, width: float, height: float) -> None: ...
    def begin_path(self) -> None: ...
    def move_to(self, x: float, y: float) -> None: ...
    def line_to(self, x: float, y: float) -> None: ...
    def quadratic_curve_to(self, cpx: float, cpy: float, x: float, y: float) -> None: ...
    def arc(self, x: float, y: float, radius: float, start_angle: float,
            end_angle: float, anticlockwise: bool = False) -> None: ...
    def ellipse(self, x: float, y: float, radius_x: float, radius_y: float,
                rotation: float, start_angle: float, end_angle: float,
                anticlockwise: bool = False) -> None: ...
    def close_path(self) -> None: ...
    def stroke(self) -> None: ...
    def fill(self) -> None: ...
    def stroke_rect(self, x: float, y: float, width: float, height: float) -> None: ...
    def fill_rect(self, x: float, y: float, width: float, height: float) -> None: ...
    def set_line_dash(self, segments: Sequence[float]) -> None: ...
    def fill_text(self, text: str, x: float, y: float) -> None: ...
    def measure_text(self, text: str) -> float: ...


_HORIZONTAL_ALIGN = {
    "left": "left", "start": "left", "center": "center", "right": "right", "end": "right",
}
_VERTICAL_ALIGN = {
    "top": "top", "hanging": "top", "middle": "center",
    "bottom": "bottom", "ideographic": "bottom", "alphabetic": "baseline",
}


class MatplotlibCanvas:
    """`DrawingContext` backed by a matplotlib figure sized in pixels."""

    ARC_SEGMENTS_PER_TURN = 72

    def __init__(
        self,
        width: float,
        height: float,
        dpi: float = 100.0,
        background: str = "#ffffff",
    ):
        self.width = width
        self.height = height
        self.dpi = dpi
        self.background = background

        self.figure = Figure(figsize=(width / dpi, height / dpi), dpi=dpi)
        self.figure.patch.set_facecolor(background)
        self.axes = self.figure.add_axes((0.0, 0.0, 1.0, 1.0))
        self.axes.set_xlim(0, width)
        self.axes.set_ylim(height, 0)
        self.axes.axis("off")

        self.stroke_style = "#000000"
        self.fill_style = "#000000"
        self.line_width = 1.0
        self.font_size = 10.0
        self.font_family = "sans-serif"
        self.text_align = "start"
        self.text_baseline = "alphabetic"
        self.global_alpha = 1.0

        self._transform = Affine2D()
        self._dash: tuple[float, ...] = ()
        self._stack: list[tuple] = []
        self._vertices: list[tuple[float, float]] = []
        self._codes: list[int] = []
        self._subpath_start: Optional[tuple[float, float]] = None
        self._zorder = 0

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------
    def save(self) -> None:
        self._stack.append((
            self._transform, self._dash, self.stroke_style, self.fill_style,
            self.line_width, self.font_size, self.font_family, self.text_align,
            self.text_baseline, self.global_alpha,
        ))

    def restore(self) -> None:
        if not self._stack:
            return
        (
            self._transform, self._dash, self.stroke_style, self.fill_style,
            self.line_width, self.font_size, self.font_family, self.text_align,
            self.text_baseline, self.global_alpha,
        ) = self._stack.pop()

    def translate(self, x: float, y: float) -> None:
        self._apply(Affine2D().translate(x, y))

    def scale(self, sx: float, sy: Optional[float] = None) -> None:
        self._apply(Affine2D().scale(sx, sx if sy is None else sy))

    def set_line_dash(self, segments: Sequence[float]) -> None:
        self._dash = tuple(float(s) for s in segments)

    def clear_rect(self, x: float, y: float, width: float, height: float) -> None:
        """
        Paint the rectangle with the background colour. Clearing the whole
        canvas also drops every artist drawn before, so a new frame starts
        from an empty figure.
        """
        corners = self._rect_points(x, y, width, height)
        xs = [px for px, _ in corners]
        ys = [py for _, py in corners]
        if min(xs) <= 0 and min(ys) <= 0 and max(xs) >= self.width and max(ys) >= self.height:
            self.reset()
        path = MplPath(corners, closed=True)
        self._add_patch(path, fill=True, facecolor=to_rgba(self.background))

    def reset(self) -> None:
        """Drop every artist drawn so far (used before re-rendering a frame)."""
        for artist in list(self.axes.patches) + list(self.axes.texts):
            artist.remove()
        self.begin_path()
        self._zorder = 0

    # ------------------------------------------------------------------
    # Path construction
    # ------------------------------------------------------------------
    def begin_path(self) -> None:
        self._vertices = []
        self._codes = []
        self._subpath_start = None

    def move_to(self, x: float, y: float) -> None:
        point = self._point(x, y)
        self._vertices.append(point)
        self._codes.append(MplPath.MOVETO)
        self._subpath_start = point

    def line_to(self, x: float, y: float) -> None:
        if self._subpath_start is None:
            self.move_to(x, y)
            return
        self._vertices.append(self._point(x, y))
        self._codes.append(MplPath.LINETO)

    def quadratic_curve_to(self, cpx: float, cpy: float, x: float, y: float) -> None:
        if self._subpath_start is None:
            self.move_to(cpx, cpy)
        self._vertices.extend([self._point(cpx, cpy), self._point(x, y)])
        self._codes.extend([MplPath.CURVE3, MplPath.CURVE3])

    def arc(
        self,
        x: float,
        y: float,
        radius: float,
        start_angle: float,
        end_angle: float,
        anticlockwise: bool = False,
    ) -> None:
        self.ellipse(x, y, radius, radius, 0.0, start_angle, end_angle, anticlockwise)

    def ellipse(
        self,
        x: float,
        y: float,
        radius_x: float,
        radius_y: float,
        rotation: float,
        start_angle: float,
        end_angle: float,
        anticlockwise: bool = False,
    ) -> None:
        sweep = _sweep(start_angle, end_angle, anticlockwise)
        steps = max(2, math.ceil(abs(sweep) / (2 * math.pi) * self.ARC_SEGMENTS_PER_TURN))
        cos_r, sin_r = math.cos(rotation), math.sin(rotation)
        for i in range(steps + 1):
            t = start_angle + sweep * i / steps
            ex, ey = radius_x * math.cos(t), radius_y * math.sin(t)
            px = x + ex * cos_r - ey * sin_r
            py = y + ex * sin_r + ey * cos_r
            if i == 0 and self._subpath_start is None:
                self.move_to(px, py)
            else:
                self.line_to(px, py)

    def close_path(self) -> None:
        if self._subpath_start is None:
            return
        self._vertices.append(self._subpath_start)
        self._codes.append(MplPath.CLOSEPOLY)

    # ------------------------------------------------------------------
    # Painting
    # ------------------------------------------------------------------
    def stroke(self) -> None:
        if not self._vertices:
            return
        self._add_patch(
            MplPath(self._vertices, self._codes),
            fill=False,
            edgecolor=self._color(self.stroke_style),
        )

    def fill(self) -> None:
        if not self._vertices:
            return
        self._add_patch(
            MplPath(self._vertices, self._codes),
            fill=True,
            facecolor=self._color(self.fill_style),
        )

    def stroke_rect(self, x: float, y: float, width: float, height: float) -> None:
        path = MplPath(self._rect_points(x, y, width, height), closed=True)
        self._add_patch(path, fill=False, edgecolor=self._color(self.stroke_style))

    def fill_rect(self, x: float, y: float, width: float, height: float) -> None:
        path = MplPath(self._rect_points(x, y, width, height), closed=True)
        self._add_patch(path, fill=True, facecolor=self._color(self.fill_style))

    def fill_text(self, text: str, x: float, y: float) -> None:
        px, py = self._point(x, y)
        size_pt = self._to_points(self.font_size * self._scale_factor())
        self.axes.text(
            px,
            py,
            text,
            fontsize=size_pt,
            family=self.font_family,
            color=self._color(self.fill_style),
            ha=_HORIZONTAL_ALIGN.get(self.text_align, "left"),
            va=_VERTICAL_ALIGN.get(self.text_baseline, "baseline"),
            zorder=self._next_zorder(),
            clip_on=True,
        )

    def measure_text(self, text: str) -> float:
        """Advance width of `text` in current user units."""
        if not text:
            return 0.0
        prop = FontProperties(family=[self.font_family])
        path = TextPath((0, 0), text, size=self.font_size, prop=prop)
        return float(path.get_extents().width)

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------
    def save_png(self, png_path: Path) -> None:
        png_path = Path(png_path)
        png_path.parent.mkdir(parents=True, exist_ok=True)
        self.figure.savefig(str(png_path), dpi=self.dpi, facecolor=self.background)

    def to_png_bytes(self) -> bytes:
        buffer = BytesIO()
        self.figure.savefig(buffer, format="png", dpi=self.dpi, facecolor=self.background)
        return buffer.getvalue()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _apply(self, local: Affine2D) -> None:
        self._transform = Affine2D(self._transform.get_matrix() @ local.get_matrix())

    def _point(self, x: float, y: float) -> tuple[float, float]:
        px, py = self._transform.transform([(x, y)])[0]
        return (float(px), float(py))

    def _scale_factor(self) -> float:
        matrix = self._transform.get_matrix()
        return math.sqrt(abs(matrix[0][0] * matrix[1][1] - matrix[0][1] * matrix[1][0]))

    def _to_points(self, pixels: float) -> float:
        return pixels * 72.0 / self.dpi

    def _rect_points(self, x: float, y: float, width: float, height: float) -> list:
        corners = [(x, y), (x + width, y), (x + width, y + height), (x, y + height), (x, y)]
        return [self._point(cx, cy) for cx, cy in corners]

    def _color(self, color: str) -> tuple[float, float, float, float]:
        r, g, b, a = to_rgba(color)
        return (r, g, b, a * self.global_alpha)

    def _next_zorder(self) -> int:
        self._zorder += 1
        return self._zorder

    def _add_patch(self, path: MplPath, fill: bool, facecolor="none", edgecolor="none") -> None:
        line_width = self._to_points(self.line_width * self._scale_factor()) if not fill else 0.0
        patch = PathPatch(
            path,
            fill=fill,
            facecolor=facecolor if fill else "none",
            edgecolor=edgecolor,
            linewidth=line_width,
            capstyle="butt",
            joinstyle="miter",
            zorder=self._next_zorder(),
        )
        if self._dash and not fill and line_width > 0:
            dash = [self._to_points(d * self._scale_factor()) for d in self._dash]
            if rcParams["lines.scale_dashes"]:
                dash = [d / line_width for d in dash]
            patch.set_linestyle((0, dash))
        self.axes.add_patch(patch)


def _sweep(start: float, end: float, anticlockwise: bool) -> float:
    """Signed angular sweep following canvas arc semantics."""
    full_turn = 2 * math.pi
    if not anticlockwise:
        delta = end - start
        return full_turn if delta >= full_turn else delta % full_turn
    delta = start - end
    return -full_turn if delta >= full_turn else -(delta % full_turn)
