"""
PNG preview generation for CAD drawings.

Loads the drawing, builds its floor structure and renders entities plus
room overlays on a matplotlib-backed canvas. Loading failures never break
the caller: a placeholder PNG carrying the reason is written instead and
the error is logged.
"""

from pathlib import Path
from typing import Optional
import logging

from .canvas import MatplotlibCanvas
from .config import DEFAULT_RENDER_CONFIG, RenderConfig
from .errors import FloorPlanError
from .floor_assembler import build_floor_structure
from .geometry import FloorStructure
from .cad_provider import load_entities
from .renderer import FloorPlanRenderer
from .room_detector import RoomDetectionStrategy


logger = logging.getLogger(__name__)


def generate_preview(
    cad_path: Path,
    png_path: Path,
    width: int = 800,
    height: int = 600,
    hovered_room_id: Optional[str] = None,
    detector: Optional[RoomDetectionStrategy] = None,
    config: RenderConfig = DEFAULT_RENDER_CONFIG,
) -> Optional[FloorStructure]:
    """
    Render a CAD file to a PNG image with room overlays.

    Returns the floor structure that was drawn, or None when the file could
    not be loaded and a placeholder image was written instead.
    """
    cad_path = Path(cad_path)
    png_path = Path(png_path)
    canvas = MatplotlibCanvas(width, height, background=config.background_color)

    try:
        entities = load_entities(cad_path)
    except (FloorPlanError, OSError) as exc:
        logger.exception("Failed to load %s; writing placeholder preview", cad_path)
        write_placeholder(canvas, f"Preview not available\n({exc.__class__.__name__})", config)
        canvas.save_png(png_path)
        return None

    floor = build_floor_structure(entities, detector=detector)
    FloorPlanRenderer(config).render(
        canvas,
        floor,
        entities,
        width,
        height,
        hovered_room_id=hovered_room_id,
    )
    canvas.save_png(png_path)
    logger.info("Preview written to %s", png_path)
    return floor


def write_placeholder(canvas: MatplotlibCanvas, message: str, config: RenderConfig) -> None:
    canvas.clear_rect(0, 0, canvas.width, canvas.height)
    canvas.fill_style = config.placeholder_color
    canvas.font_size = config.placeholder_font_size
    canvas.font_family = config.font_family
    canvas.text_align = "center"
    canvas.text_baseline = "middle"
    canvas.fill_text(message, canvas.width / 2, canvas.height / 2)
