"""
CAD entity provider adapter.

Reads DXF files with ezdxf and converts model space entities into the
engine's `Entity` records. DWG files are first converted to DXF through
an external command configured by the DWG_CONVERTER_CMD env var, e.g.

    DWG_CONVERTER_CMD="dwg2dxf {input} {output}"

Provider JSON records (dxf-parser style dictionaries) can be converted
with `entities_from_records` instead.
"""

from pathlib import Path
from typing import Any, Callable, Iterable, Mapping, Optional
import logging
import os
import subprocess
import tempfile

import ezdxf
from ezdxf import recover
from ezdxf.lldxf.const import DXFStructureError

from .errors import ConversionError, UnsupportedFormatError
from .geometry import DEFAULT_LAYER, Entity, Point2D


logger = logging.getLogger(__name__)

DWG_CONVERTER_ENV = "DWG_CONVERTER_CMD"
WIDTH_ATTRIBUTE_TAGS = ("WIDTH", "W")


def load_entities(path: Path) -> list[Entity]:
    """Load every supported model space entity from a DXF or DWG file."""
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix == ".dxf":
        return entities_from_modelspace(read_dxf(path).modelspace())

    if suffix == ".dwg":
        with tempfile.TemporaryDirectory() as tmp_dir:
            dxf_path = Path(tmp_dir) / f"{path.stem}.dxf"
            convert_dwg_to_dxf(path, dxf_path)
            return entities_from_modelspace(read_dxf(dxf_path).modelspace())

    raise UnsupportedFormatError(f"Unsupported CAD file type: {path.suffix or path.name}")


def read_dxf(dxf_path: Path):
    """Open a DXF document, recovering structurally damaged files."""
    try:
        return ezdxf.readfile(str(dxf_path))
    except DXFStructureError:
        logger.warning("DXF structure error in %s; trying recover mode", dxf_path)

    try:
        doc, auditor = recover.readfile(str(dxf_path), errors="ignore")
    except DXFStructureError as exc:
        raise UnsupportedFormatError(f"Unreadable DXF file {dxf_path}: {exc}") from exc

    if auditor.has_errors:
        logger.warning("Recovered %s with %d unfixed errors", dxf_path, len(auditor.errors))
    return doc


def convert_dwg_to_dxf(dwg_path: Path, dxf_path: Path) -> None:
    """
    DWG -> DXF conversion via external converter.

    The DWG_CONVERTER_CMD template accepts two placeholders, {input} and
    {output}. Binary DWG cannot be read without it.
    """
    cmd_template = os.getenv(DWG_CONVERTER_ENV)
    if not cmd_template:
        raise UnsupportedFormatError(
            f"Cannot read {dwg_path.name}: binary DWG needs a converter.\n"
            f"Set {DWG_CONVERTER_ENV} to a DWG->DXF converter command, for example:\n"
            f'  {DWG_CONVERTER_ENV}="dwg2dxf {{input}} {{output}}"'
        )

    cmd = cmd_template.format(input=str(dwg_path), output=str(dxf_path))
    logger.info("Converting %s with: %s", dwg_path, cmd)
    completed = subprocess.run(cmd, shell=True, capture_output=True, text=True)
    if completed.returncode != 0:
        raise ConversionError(
            f"DWG conversion failed: {completed.stderr or completed.stdout}"
        )
    if not dxf_path.exists():
        raise ConversionError(f"DWG converter did not produce {dxf_path}")


def entities_from_records(records: Iterable[Mapping[str, Any]]) -> list[Entity]:
    """Convert provider JSON records into entities."""
    return [Entity.from_dict(record) for record in records]


def entities_from_modelspace(modelspace) -> list[Entity]:
    entities: list[Entity] = []
    skipped = 0
    for dxf_entity in modelspace:
        converter = _CONVERTERS.get(dxf_entity.dxftype())
        if converter is None:
            skipped += 1
            continue
        try:
            entities.append(converter(dxf_entity))
        except (AttributeError, TypeError, ValueError):
            logger.debug("Skipping malformed %s entity", dxf_entity.dxftype(), exc_info=True)
            skipped += 1

    logger.info("Loaded %d entities (%d skipped)", len(entities), skipped)
    return entities


def _layer(dxf_entity) -> str:
    return dxf_entity.dxf.get("layer", DEFAULT_LAYER) or DEFAULT_LAYER


def _point(vec) -> Point2D:
    return Point2D(float(vec[0]), float(vec[1]))


def _line(e) -> Entity:
    return Entity(
        type="LINE",
        layer=_layer(e),
        vertices=(_point(e.dxf.start), _point(e.dxf.end)),
    )


def _lwpolyline(e) -> Entity:
    return Entity(
        type="LWPOLYLINE",
        layer=_layer(e),
        vertices=tuple(_point(p) for p in e.get_points("xy")),
        closed=bool(e.closed),
    )


def _polyline(e) -> Entity:
    return Entity(
        type="POLYLINE",
        layer=_layer(e),
        vertices=tuple(_point(v.dxf.location) for v in e.vertices),
        closed=bool(e.is_closed),
    )


def _circle(e) -> Entity:
    return Entity(
        type="CIRCLE",
        layer=_layer(e),
        center=_point(e.dxf.center),
        radius=float(e.dxf.radius),
    )


def _arc(e) -> Entity:
    return Entity(
        type="ARC",
        layer=_layer(e),
        center=_point(e.dxf.center),
        radius=float(e.dxf.radius),
        start_angle=float(e.dxf.start_angle),
        end_angle=float(e.dxf.end_angle),
    )


def _insert(e) -> Entity:
    attributes: dict[str, Any] = {}
    for attrib in e.attribs:
        tag = attrib.dxf.tag.upper()
        value = attrib.dxf.text
        if tag in WIDTH_ATTRIBUTE_TAGS:
            try:
                value = float(value)
            except ValueError:
                logger.debug("Ignoring non-numeric %s attribute %r", tag, value)
                continue
            tag = "WIDTH"
        attributes[tag] = value

    return Entity(
        type="INSERT",
        layer=_layer(e),
        position=_point(e.dxf.insert),
        name=e.dxf.name,
        rotation=float(e.dxf.get("rotation", 0.0)),
        attributes=attributes,
    )


def _text(e) -> Entity:
    return Entity(
        type="TEXT",
        layer=_layer(e),
        position=_point(e.dxf.insert),
        text=e.dxf.text,
        height=float(e.dxf.get("height", 0.0)) or None,
    )


def _mtext(e) -> Entity:
    return Entity(
        type="MTEXT",
        layer=_layer(e),
        position=_point(e.dxf.insert),
        text=e.plain_text(),
        height=float(e.dxf.get("char_height", 0.0)) or None,
    )


def _dimension(e) -> Entity:
    start = e.dxf.get("defpoint2")
    end = e.dxf.get("defpoint3")
    vertices = (_point(start), _point(end)) if start is not None and end is not None else ()
    text = e.dxf.get("text", "")
    return Entity(
        type="DIMENSION",
        layer=_layer(e),
        vertices=vertices,
        position=_point(e.dxf.defpoint),
        # "<>" stands for the measured value in DXF.
        dimension_text=text if text and text != "<>" else _measurement_text(e),
    )


def _measurement_text(e) -> Optional[str]:
    try:
        measurement = e.get_measurement()
    except (AttributeError, TypeError, ValueError):
        return None
    if isinstance(measurement, (int, float)):
        return f"{measurement:g}"
    return None


def _ellipse(e) -> Entity:
    return Entity(
        type="ELLIPSE",
        layer=_layer(e),
        center=_point(e.dxf.center),
        major_axis=_point(e.dxf.major_axis),
        axis_ratio=float(e.dxf.ratio),
    )


def _spline(e) -> Entity:
    points = list(e.control_points) or list(e.fit_points)
    return Entity(
        type="SPLINE",
        layer=_layer(e),
        control_points=tuple(_point(p) for p in points),
        closed=bool(e.closed),
    )


def _point_entity(e) -> Entity:
    return Entity(
        type="POINT",
        layer=_layer(e),
        position=_point(e.dxf.location),
    )


_CONVERTERS: dict[str, Callable[[Any], Entity]] = {
    "LINE": _line,
    "LWPOLYLINE": _lwpolyline,
    "POLYLINE": _polyline,
    "CIRCLE": _circle,
    "ARC": _arc,
    "INSERT": _insert,
    "TEXT": _text,
    "MTEXT": _mtext,
    "DIMENSION": _dimension,
    "ELLIPSE": _ellipse,
    "SPLINE": _spline,
    "POINT": _point_entity,
}
