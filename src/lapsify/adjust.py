"""
Per-frame adjustments: crop, exposure, brightness, contrast, saturation
"""
from typing import Optional

import colour
import numpy as np
from loguru import logger

from lapsify import math_ops
from lapsify.crop import CropRect, CropSpec
from lapsify.errors import InvalidCropValue
from lapsify.pipeline.request import AdjustmentSettings, FrameValues

# BT.601 luma weights: WEIGHTS_YCBCR holds (Kr, Kb), Kg is the remainder
_KR, _KB = (float(w) for w in colour.WEIGHTS_YCBCR['ITU-R BT.601'])
LUMA_COEFFS = (_KR, 1.0 - _KR - _KB, _KB)


def resolve_crop_rect(crop: Optional[CropSpec], width: int, height: int) -> CropRect:
    """Crop rectangle for an image, full frame when no crop is set."""
    if crop is None:
        return CropRect.full(width, height)
    rect = crop.resolve(width, height)
    if rect.is_empty:
        raise InvalidCropValue(
            f"Crop {crop} resolves to an empty region on a {width}x{height} image"
        )
    return rect


def adjust_pixels(img: np.ndarray, values: FrameValues) -> np.ndarray:
    """
    Apply the four tone/colour steps to a uint8 RGB array and return a new uint8 array.
    """
    exposure, brightness, contrast, saturation = values

    work = np.ascontiguousarray(img, dtype=np.float32)
    work /= 255.0

    gain = 2.0 ** exposure if exposure != 0.0 else 1.0
    kr, kg, kb = LUMA_COEFFS
    math_ops.apply_adjustments_inplace(
        work, float(gain), float(brightness) / 100.0, float(contrast), float(saturation), kr, kg, kb
    )

    out = np.empty(work.shape, dtype=np.uint8)
    math_ops.float_to_uint8(work, out)
    return out


def apply_adjustments(
    image: np.ndarray,
    settings: AdjustmentSettings,
    frame_index: int,
    total_frames: int,
) -> np.ndarray:
    """
    Produce the processed version of one frame.

    Args:
        image: HxWx3 uint8 RGB array
        settings: run-wide adjustment timelines and crop
        frame_index: position of this frame in the original, unfiltered sequence
        total_frames: length of the original sequence

    Returns:
        HxWx3 uint8 array sized to the crop rectangle
    """
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an HxWx3 RGB image, got shape {image.shape}")

    height, width = image.shape[:2]
    rect = resolve_crop_rect(settings.crop_spec, width, height)

    values = settings.values_at(frame_index, total_frames)
    logger.debug(
        f"Frame {frame_index}/{total_frames}: exposure={values.exposure:.3f} "
        f"brightness={values.brightness:.3f} contrast={values.contrast:.3f} "
        f"saturation={values.saturation:.3f} crop={rect.width}x{rect.height}+{rect.start_x}+{rect.start_y}"
    )

    # Pixels outside the crop are dropped before any maths runs
    region = image[rect.start_y:rect.end_y, rect.start_x:rect.end_x, :]
    return adjust_pixels(region, values)
