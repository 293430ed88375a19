"""
Layered floor plan rendering onto a 2D drawing context.

Entities are drawn in a fixed layer order (decorative layers first, walls
and the default layer last), then the detected rooms are overlaid with a
dashed outline, a translucent fill keyed by room type and a two-line
label. The renderer never raises: a missing context is a logged no-op and
an empty floor structure only gets a centred placeholder message.
"""

from typing import Callable, Iterable, Optional, Sequence
import logging
import math

from .bounds import DEFAULT_BOUNDS
from .canvas import DrawingContext
from .config import DEFAULT_LAYERS, DEFAULT_RENDER_CONFIG, LayerConfig, RenderConfig
from .geometry import BoundingBox, Entity, EntityKind, FloorStructure, Room, RoomType
from .projection import Projection, compute_projection


logger = logging.getLogger(__name__)


class FloorPlanRenderer:
    """Renders drawing entities and room overlays for one floor structure."""

    MAX_GRID_LINES = 500
    TEXT_PLATE_COLOR = "#000000B3"
    DEFAULT_TEXT_HEIGHT = 12.0
    MIN_TEXT_HEIGHT = 8.0
    DIMENSION_FONT_SIZE = 8.0

    def __init__(
        self,
        config: RenderConfig = DEFAULT_RENDER_CONFIG,
        layers: LayerConfig = DEFAULT_LAYERS,
    ):
        self.config = config
        self.layers = layers
        self._draw_routines: dict[EntityKind, Callable[[DrawingContext, Entity], None]] = {
            EntityKind.LINE: self.draw_line,
            EntityKind.POLYLINE: self.draw_polyline,
            EntityKind.CIRCLE: self.draw_circle,
            EntityKind.ARC: self.draw_arc,
            EntityKind.INSERT: self.draw_insert,
            EntityKind.TEXT: self.draw_text,
            EntityKind.DIMENSION: self.draw_dimension,
            EntityKind.ELLIPSE: self.draw_ellipse,
            EntityKind.SPLINE: self.draw_spline,
            EntityKind.POINT: self.draw_point,
        }

    def render(
        self,
        ctx: Optional[DrawingContext],
        floor: Optional[FloorStructure],
        entities: Iterable[Entity] = (),
        width: float = 800.0,
        height: float = 600.0,
        hovered_room_id: Optional[str] = None,
    ) -> Optional[Projection]:
        """
        Draw one complete frame and return the projection used.

        Every call recomputes the projection from scratch, so re-rendering
        after a resize or a hover change is idempotent. Returns None when
        only the placeholder (or nothing at all) was drawn.
        """
        if ctx is None:
            logger.warning("No drawing context available; skipping render")
            return None

        ctx.clear_rect(0, 0, width, height)

        if width <= 0 or height <= 0:
            logger.warning("Canvas has no area (%sx%s); skipping render", width, height)
            return None

        if floor is None or floor.is_empty():
            self.draw_placeholder(ctx, width, height)
            return None

        projection = self.projection_for(floor.bounds, width, height)
        bounds = self._drawable_bounds(floor.bounds)

        if self.config.grid_spacing:
            self.draw_grid(ctx, projection, bounds, width, height)

        ctx.save()
        ctx.translate(projection.offset_x, projection.offset_y)
        ctx.scale(projection.scale, projection.scale)
        self.draw_entities(ctx, list(entities), projection.scale)
        self.draw_rooms(ctx, floor.rooms, projection.scale, hovered_room_id)
        ctx.restore()
        return projection

    def projection_for(self, bounds: BoundingBox, width: float, height: float) -> Projection:
        """The projection `render` uses for a canvas of this size."""
        padding = self.config.padding
        if width <= padding * 2 or height <= padding * 2:
            padding = 0.0
        return compute_projection(
            self._drawable_bounds(bounds),
            width,
            height,
            padding=padding,
            max_scale=self.config.max_scale,
        )

    # ------------------------------------------------------------------
    # Frame parts
    # ------------------------------------------------------------------
    def draw_placeholder(self, ctx: DrawingContext, width: float, height: float) -> None:
        logger.warning("Nothing to render; drawing placeholder")
        ctx.save()
        ctx.fill_style = self.config.placeholder_color
        ctx.font_size = self.config.placeholder_font_size
        ctx.font_family = self.config.font_family
        ctx.text_align = "center"
        ctx.text_baseline = "middle"
        ctx.fill_text(self.config.placeholder_text, width / 2, height / 2)
        ctx.restore()

    def draw_grid(
        self,
        ctx: DrawingContext,
        projection: Projection,
        bounds: BoundingBox,
        width: float,
        height: float,
    ) -> None:
        """Faint background grid aligned to drawing units, in pixel space."""
        spacing = self.config.grid_spacing
        if spacing is None or spacing <= 0:
            return
        line_count = (bounds.width + bounds.height) / spacing
        if line_count > self.MAX_GRID_LINES:
            logger.debug("Skipping grid: %d lines at spacing %s", line_count, spacing)
            return

        ctx.save()
        ctx.global_alpha = self.config.grid_alpha
        ctx.stroke_style = self.config.grid_color
        ctx.line_width = 0.5

        x = bounds.min_x
        while x <= bounds.max_x:
            screen_x, _ = projection.to_canvas(x, 0)
            if 0 <= screen_x <= width:
                ctx.begin_path()
                ctx.move_to(screen_x, 0)
                ctx.line_to(screen_x, height)
                ctx.stroke()
            x += spacing

        y = bounds.min_y
        while y <= bounds.max_y:
            _, screen_y = projection.to_canvas(0, y)
            if 0 <= screen_y <= height:
                ctx.begin_path()
                ctx.move_to(0, screen_y)
                ctx.line_to(width, screen_y)
                ctx.stroke()
            y += spacing

        ctx.restore()

    def draw_entities(self, ctx: DrawingContext, entities: Sequence[Entity], scale: float) -> None:
        """Draw entities grouped by layer, bottom layer first."""
        for layer_group in self.layer_groups(entities):
            for entity in layer_group:
                style = self.config.style_for(_canonical_layer(entity.layer, self.config))
                ctx.stroke_style = style.color
                ctx.fill_style = _with_alpha(style.color, self.config.fill_alpha_suffix)
                ctx.line_width = style.line_width / scale
                ctx.global_alpha = 1.0
                self.draw_entity(ctx, entity)

    def layer_groups(self, entities: Sequence[Entity]) -> list[list[Entity]]:
        """
        Entities split by the configured layer order. Layers that are not
        listed join the last (default layer) group.
        """
        order = [name.upper() for name in self.config.layer_order]
        groups: list[list[Entity]] = [[] for _ in order]
        for entity in entities:
            layer = (entity.layer or "").upper()
            index = order.index(layer) if layer in order else len(order) - 1
            groups[index].append(entity)
        return groups

    def draw_entity(self, ctx: DrawingContext, entity: Entity) -> None:
        routine = self._draw_routines.get(entity.kind)
        if routine is None:
            if not entity.vertices:
                return
            routine = self.draw_polyline

        ctx.begin_path()
        try:
            routine(ctx, entity)
        except Exception:  # noqa: BLE001
            # One malformed entity must not abort the frame.
            logger.warning("Failed to render %s entity on layer %s", entity.type, entity.layer, exc_info=True)

    def draw_rooms(
        self,
        ctx: DrawingContext,
        rooms: Sequence[Room],
        scale: float,
        hovered_room_id: Optional[str] = None,
    ) -> None:
        for room in rooms:
            self.draw_room(ctx, room, scale, hovered=room.id == hovered_room_id)

    def draw_room(self, ctx: DrawingContext, room: Room, scale: float, hovered: bool = False) -> None:
        """Dashed outline, type-coloured fill and a centred two-line label."""
        cfg = self.config
        bounds = room.bounds
        ctx.global_alpha = 1.0

        ctx.stroke_style = cfg.hover_color if hovered else cfg.room_stroke_color
        ctx.line_width = (cfg.hover_line_width if hovered else cfg.room_line_width) / scale
        ctx.set_line_dash([segment / scale for segment in cfg.room_dash])
        ctx.stroke_rect(bounds.min_x, bounds.min_y, bounds.width, bounds.height)
        ctx.set_line_dash([])

        if hovered:
            ctx.fill_style = cfg.hover_fill_color
        else:
            ctx.fill_style = cfg.room_fill_colors.get(
                room.type, cfg.room_fill_colors.get(RoomType.ROOM, "none")
            )
        ctx.fill_rect(bounds.min_x, bounds.min_y, bounds.width, bounds.height)

        center = bounds.center
        ctx.font_family = cfg.font_family
        ctx.text_align = "center"
        ctx.text_baseline = "middle"

        ctx.fill_style = cfg.hover_color if hovered else cfg.room_name_color
        ctx.font_size = max(8.0, 12.0 / scale)
        ctx.fill_text(room.name, center.x, center.y)

        ctx.fill_style = cfg.hover_color if hovered else cfg.room_detail_color
        ctx.font_size = max(6.0, 8.0 / scale)
        ctx.fill_text(
            f"{room.type.value} • {round(room.area)} {cfg.area_unit}",
            center.x,
            center.y + 14.0 / scale,
        )

    # ------------------------------------------------------------------
    # Per-kind draw routines (drawing units, context already projected)
    # ------------------------------------------------------------------
    def draw_line(self, ctx: DrawingContext, entity: Entity) -> None:
        if len(entity.vertices) < 2:
            return
        start, end = entity.vertices[0], entity.vertices[1]
        ctx.move_to(start.x, start.y)
        ctx.line_to(end.x, end.y)
        ctx.stroke()

        # Walls get a wider translucent pass to read as thick lines.
        if _same_layer(entity.layer, self.layers.wall_layers[0]):
            line_width = ctx.line_width
            ctx.line_width = line_width * 2
            ctx.global_alpha = 0.3
            ctx.stroke()
            ctx.global_alpha = 1.0
            ctx.line_width = line_width

    def draw_polyline(self, ctx: DrawingContext, entity: Entity) -> None:
        if not entity.vertices:
            return
        first = entity.vertices[0]
        ctx.move_to(first.x, first.y)
        for vertex in entity.vertices[1:]:
            ctx.line_to(vertex.x, vertex.y)

        if entity.closed:
            ctx.close_path()
            if self.layers.is_furniture_layer(entity.layer):
                ctx.fill()
        ctx.stroke()

    def draw_circle(self, ctx: DrawingContext, entity: Entity) -> None:
        if entity.center is None or not entity.radius:
            return
        ctx.arc(entity.center.x, entity.center.y, entity.radius, 0, math.pi * 2)
        ctx.stroke()

    def draw_arc(self, ctx: DrawingContext, entity: Entity) -> None:
        if entity.center is None or not entity.radius:
            return
        start = math.radians(entity.start_angle or 0.0)
        end = math.radians(entity.end_angle or 0.0)
        ctx.arc(entity.center.x, entity.center.y, entity.radius, start, end)
        ctx.stroke()

    def draw_insert(self, ctx: DrawingContext, entity: Entity) -> None:
        if entity.position is None:
            return
        size = self.config.insert_size
        x, y = entity.position.x, entity.position.y

        if self.layers.is_door_layer(entity.layer):
            # Door glyph: frame rectangle plus the swing arc.
            ctx.save()
            ctx.translate(x, y)
            ctx.stroke_rect(-size / 2, -size / 4, size, size / 2)
            ctx.begin_path()
            ctx.arc(size / 2, 0, size / 2, math.pi, 0)
            ctx.stroke()
            ctx.restore()
        else:
            ctx.fill_rect(x - size / 2, y - size / 2, size, size)
            ctx.stroke_rect(x - size / 2, y - size / 2, size, size)

    def draw_text(self, ctx: DrawingContext, entity: Entity) -> None:
        if entity.position is None or not entity.text:
            return
        font_size = max(entity.height or self.DEFAULT_TEXT_HEIGHT, self.MIN_TEXT_HEIGHT)
        x, y = entity.position.x, entity.position.y

        ctx.font_size = font_size
        ctx.font_family = self.config.font_family
        ctx.text_align = "left"
        ctx.text_baseline = "bottom"

        text_width = ctx.measure_text(entity.text)
        ctx.fill_style = self.TEXT_PLATE_COLOR
        ctx.fill_rect(x - 2, y - font_size - 2, text_width + 4, font_size + 4)

        ctx.fill_style = ctx.stroke_style
        ctx.fill_text(entity.text, x, y)

    def draw_dimension(self, ctx: DrawingContext, entity: Entity) -> None:
        if len(entity.vertices) < 2:
            return
        start, end = entity.vertices[0], entity.vertices[1]
        ctx.move_to(start.x, start.y)
        ctx.line_to(end.x, end.y)
        ctx.stroke()

        angle = math.atan2(end.y - start.y, end.x - start.x)
        arrow = self.config.dimension_arrow_size
        for tip, sign in ((start, 1.0), (end, -1.0)):
            ctx.begin_path()
            for spread in (math.pi * 0.75, -math.pi * 0.75):
                ctx.move_to(tip.x, tip.y)
                ctx.line_to(
                    tip.x + sign * arrow * math.cos(angle + spread),
                    tip.y + sign * arrow * math.sin(angle + spread),
                )
            ctx.stroke()

        if entity.dimension_text:
            ctx.save()
            ctx.font_size = self.DIMENSION_FONT_SIZE
            ctx.font_family = self.config.font_family
            ctx.fill_style = ctx.stroke_style
            ctx.text_align = "center"
            ctx.text_baseline = "middle"
            ctx.fill_text(
                entity.dimension_text,
                (start.x + end.x) / 2,
                (start.y + end.y) / 2 - 5,
            )
            ctx.restore()

    def draw_ellipse(self, ctx: DrawingContext, entity: Entity) -> None:
        if entity.center is None or entity.major_axis is None or not entity.axis_ratio:
            return
        radius_x = math.hypot(entity.major_axis.x, entity.major_axis.y)
        rotation = math.atan2(entity.major_axis.y, entity.major_axis.x)
        ctx.ellipse(
            entity.center.x,
            entity.center.y,
            radius_x,
            radius_x * entity.axis_ratio,
            rotation,
            0,
            math.pi * 2,
        )
        ctx.stroke()

    def draw_spline(self, ctx: DrawingContext, entity: Entity) -> None:
        points = entity.control_points
        if len(points) < 2:
            return
        ctx.move_to(points[0].x, points[0].y)
        # Each inner control point bends a quadratic segment ending at the
        # midpoint to the next one.
        for current, following in zip(points[1:-1], points[2:]):
            ctx.quadratic_curve_to(
                current.x,
                current.y,
                (current.x + following.x) / 2,
                (current.y + following.y) / 2,
            )
        ctx.line_to(points[-1].x, points[-1].y)
        ctx.stroke()

    def draw_point(self, ctx: DrawingContext, entity: Entity) -> None:
        if entity.position is None:
            return
        ctx.fill_rect(entity.position.x - 1, entity.position.y - 1, 2, 2)

    def _drawable_bounds(self, bounds: BoundingBox) -> BoundingBox:
        if bounds.is_degenerate():
            logger.warning("Degenerate floor bounds %s; rendering default extent", bounds)
            return DEFAULT_BOUNDS
        return bounds


def _with_alpha(color: str, alpha_suffix: str) -> str:
    """Append a hex alpha to '#RRGGBB' colours; leave anything else as is."""
    if color.startswith("#") and len(color) == 7:
        return color + alpha_suffix
    return color


def _same_layer(a: Optional[str], b: Optional[str]) -> bool:
    return (a or "").upper() == (b or "").upper()


def _canonical_layer(layer_name: str, config: RenderConfig) -> str:
    """Map an entity layer onto the key used in `config.layer_styles`."""
    for name in config.layer_styles:
        if _same_layer(name, layer_name):
            return name
    return layer_name
