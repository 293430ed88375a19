"""
Static configuration for layer semantics and rendering styles.

Everything here is immutable and passed explicitly into the extractor
and the renderer; nothing reads or mutates module state at draw time.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

from .geometry import DEFAULT_LAYER, RoomType


@dataclass(frozen=True)
class LayerConfig:
    """Layer names that carry a semantic role."""
    wall_layers: tuple[str, ...] = ("WALLS", DEFAULT_LAYER)
    door_layer: str = "DOORS"
    window_layer: str = "WINDOWS"
    window_alias: str = "WINDOW"
    furniture_layer: str = "FURNITURE"

    def is_wall_layer(self, layer_name: str) -> bool:
        return _normalize(layer_name) in {_normalize(n) for n in self.wall_layers}

    def is_door_layer(self, layer_name: str) -> bool:
        return _normalize(layer_name) == _normalize(self.door_layer)

    def is_window_layer(self, layer_name: str) -> bool:
        return _normalize(layer_name) == _normalize(self.window_layer)

    def is_window_alias(self, layer_name: str) -> bool:
        return _normalize(layer_name) == _normalize(self.window_alias)

    def is_furniture_layer(self, layer_name: str) -> bool:
        return _normalize(layer_name) == _normalize(self.furniture_layer)


@dataclass(frozen=True)
class LayerStyle:
    """Stroke colour and width (in pixels) for one layer."""
    color: str
    line_width: float


def _frozen(mapping: dict) -> Mapping:
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class RenderConfig:
    """Colours, layer ordering and sizing used by the renderer."""
    layer_styles: Mapping[str, LayerStyle] = field(default_factory=lambda: _frozen({
        "0": LayerStyle("#FFFFFF", 0.5),
        "WALLS": LayerStyle("#FF0000", 1.2),
        "DOORS": LayerStyle("#00FF00", 0.8),
        "WINDOWS": LayerStyle("#0080FF", 0.8),
        "FURNITURE": LayerStyle("#FF8000", 0.6),
        "TEXT": LayerStyle("#FFFF00", 0.4),
        "DIMENSIONS": LayerStyle("#FF00FF", 0.3),
    }))
    default_style: LayerStyle = LayerStyle("#AAAAAA", 0.5)
    # Bottom to top. Layers not listed here are drawn with the last group.
    layer_order: tuple[str, ...] = (
        "DIMENSIONS", "FURNITURE", "TEXT", "WINDOWS", "DOORS", "WALLS", DEFAULT_LAYER,
    )
    # Hex alpha suffix applied to the layer colour for closed-shape fills.
    fill_alpha_suffix: str = "40"
    room_fill_colors: Mapping[RoomType, str] = field(default_factory=lambda: _frozen({
        RoomType.LIVING: "#4CAF501A",
        RoomType.BEDROOM: "#9C27B01A",
        RoomType.BATHROOM: "#2196F31A",
        RoomType.ROOM: "#607D8B1A",
    }))
    room_stroke_color: str = "#4CAF50"
    room_name_color: str = "#2E7D32"
    room_detail_color: str = "#616161"
    hover_color: str = "#C36BA8"
    hover_fill_color: str = "#C36BA833"
    room_line_width: float = 0.4
    hover_line_width: float = 0.8
    room_dash: tuple[float, float] = (2.0, 2.0)
    area_unit: str = "sq ft"
    background_color: str = "#ffffff"
    placeholder_text: str = "No entities found in CAD file"
    placeholder_color: str = "#6b7280"
    placeholder_font_size: float = 16.0
    font_family: str = "sans-serif"
    padding: float = 40.0
    max_scale: float = 10.0
    grid_spacing: Optional[float] = 10.0
    grid_color: str = "#444444"
    grid_alpha: float = 0.1
    insert_size: float = 8.0
    dimension_arrow_size: float = 3.0

    def style_for(self, layer_name: str) -> LayerStyle:
        return self.layer_styles.get(layer_name, self.default_style)


DEFAULT_LAYERS = LayerConfig()
DEFAULT_RENDER_CONFIG = RenderConfig()


def _normalize(layer_name: Optional[str]) -> str:
    return (layer_name or DEFAULT_LAYER).strip().upper()
