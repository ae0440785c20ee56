from dataclasses import dataclass
from typing import Optional, Tuple

from loguru import logger

from lapsify import config
from lapsify.crop import CropRect
from lapsify.errors import InvalidResolution

Size = Tuple[int, int]


@dataclass(frozen=True)
class ResolutionPlan:
    width: int
    height: int
    source_size: Size
    target_size: Size
    warning: Optional[str] = None

    @property
    def size(self) -> Size:
        return self.width, self.height


def parse_resolution(resolution: str) -> Size:
    """`4K`, `HD`, `1080p`, `720p` or literal `WIDTHxHEIGHT`."""
    text = resolution.strip().lower()
    if text in config.RESOLUTION_PRESETS:
        return config.RESOLUTION_PRESETS[text]

    parts = text.split('x')
    if len(parts) != 2:
        raise InvalidResolution(f"Invalid resolution format: {resolution!r} (expected WIDTHxHEIGHT or a preset)")
    try:
        width, height = int(parts[0]), int(parts[1])
    except ValueError as exc:
        raise InvalidResolution(f"Invalid resolution format: {resolution!r}") from exc
    if width <= 0 or height <= 0:
        raise InvalidResolution(f"Resolution must be positive: {resolution!r}")
    return width, height


def _round_up_even(value: int) -> int:
    return value + 1 if value % 2 else value


def plan_resolution(
    first_frame_size: Size,
    crop: Optional[CropRect] = None,
    target: Optional[str] = None,
) -> Optional[ResolutionPlan]:
    """
    Final even output size for the encoder, or None when no target is requested.

    The source aspect ratio is preserved. An uncropped source always keeps the
    target height. A cropped source is fitted: wider than the target keeps the
    target height, narrower keeps the target width.
    """
    if target is None:
        return None

    target_w, target_h = parse_resolution(target)
    source_w, source_h = crop.size if crop is not None else first_frame_size
    if source_w <= 0 or source_h <= 0:
        raise InvalidResolution(f"Cannot scale a {source_w}x{source_h} frame")

    source_ratio = source_w / source_h
    target_ratio = target_w / target_h

    if crop is None or source_ratio > target_ratio:
        width = int(target_h * source_ratio)
        height = target_h
    else:
        width = target_w
        height = int(target_w / source_ratio)

    # H.264 with 4:2:0 needs even dimensions
    width = max(2, _round_up_even(width))
    height = max(2, _round_up_even(height))

    warning = None
    if abs(source_ratio - target_ratio) / target_ratio > config.ASPECT_TOLERANCE:
        warning = (
            f"Source aspect ratio ({source_ratio:.2f}:1) differs from target ({target_ratio:.2f}:1). "
            f"Output resolution: {width}x{height}"
        )
        logger.warning(f"⚠️  {warning}")
    else:
        logger.info(f"Aspect ratio validation passed ({source_ratio:.2f}:1). Output resolution: {width}x{height}")

    if crop is not None:
        logger.info(f"Cropped dimensions {source_w}x{source_h} -> final output {width}x{height}")

    return ResolutionPlan(width, height, (source_w, source_h), (target_w, target_h), warning)
