"""Errors raised at the file-loading boundary."""


class FloorPlanError(RuntimeError):
    """Base class for floor plan loading failures."""


class UnsupportedFormatError(FloorPlanError):
    """The file cannot be turned into drawing entities."""


class ConversionError(FloorPlanError):
    """The external DWG -> DXF converter failed."""
