"""Validation helpers for user inputs."""

from __future__ import annotations

from typing import List, Sequence, Tuple

from lapsify import config
from lapsify.errors import UnsupportedOutputFormat, ValidationError
from lapsify.pipeline.request import AdjustmentSettings, OutputOptions
from lapsify.pipeline.resolution import parse_resolution


def parse_value_array(value: str, field: str = "value") -> List[float]:
    """Parse a single number or a comma-separated list like '0.0,1.5,-0.5'."""

    if value is None or value.strip() == "":
        raise ValidationError(f"{field} needs at least one value")
    try:
        return [float(part.strip()) for part in value.split(",")]
    except ValueError as exc:
        raise ValidationError(f"Failed to parse {field} values {value!r}: {exc}") from exc


def validate_value_array(values: Sequence[float], name: str, bounds: Tuple[float, float]) -> None:
    """Every control value must lie within the declared range."""

    low, high = bounds
    for i, value in enumerate(values):
        if value < low or value > high:
            raise ValidationError(
                f"{name} value at index {i} ({value}) is outside valid range [{low}, {high}]"
            )


def validate_settings(settings: AdjustmentSettings) -> None:
    validate_value_array(settings.exposure.values, "Exposure", config.EXPOSURE_RANGE)
    validate_value_array(settings.brightness.values, "Brightness", config.BRIGHTNESS_RANGE)
    validate_value_array(settings.contrast.values, "Contrast", config.CONTRAST_RANGE)
    validate_value_array(settings.saturation.values, "Saturation", config.SATURATION_RANGE)


def validate_output(options: OutputOptions) -> None:
    """Format, fps, CRF and resolution checks for the chosen output mode."""

    ext = options.extension
    if ext not in config.IMAGE_OUTPUT_FORMATS and ext not in config.VIDEO_OUTPUT_FORMATS:
        supported = ", ".join(config.IMAGE_OUTPUT_FORMATS + config.VIDEO_OUTPUT_FORMATS)
        raise UnsupportedOutputFormat(f"Unsupported output format: {options.format!r} (supported: {supported})")

    if not options.is_video:
        return

    fps_low, fps_high = config.FPS_RANGE
    if not fps_low <= options.fps <= fps_high:
        raise ValidationError(f"FPS must be between {fps_low} and {fps_high}")
    crf_low, crf_high = config.CRF_RANGE
    if not crf_low <= options.quality <= crf_high:
        raise ValidationError(f"Quality (CRF) must be between {crf_low} and {crf_high}")
    if options.resolution:
        parse_resolution(options.resolution)


def validate_threads(threads: int) -> None:
    if threads < 0:
        raise ValidationError("Threads must be zero (auto) or greater")


def validate_raw_boost(boost: float) -> None:
    if boost <= 0:
        raise ValidationError("RAW exposure boost must be greater than zero")
