"""Batch time-lapse processing with keyframed adjustments."""

__version__ = "0.1.0"
