"""Floor structure extraction and rendering for CAD floor plans."""

__version__ = "0.1.0"
