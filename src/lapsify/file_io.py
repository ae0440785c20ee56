"""
File input/output
Decodes frames (standard codecs first, RAW sensor data as fallback) and
writes processed frames in the requested format
"""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple, Union

import colour
import numpy as np
import pillow_heif
import rawpy
import tifffile
from loguru import logger
from PIL import Image

from lapsify import config
from lapsify.errors import FrameWriteError, UnsupportedOrCorruptImage, ValidationError

# Let Pillow decode HEIC/HEIF frames shot by phones
pillow_heif.register_heif_opener()

PathLike = Union[str, os.PathLike]


# =========================================================
# Discovery
# =========================================================

def is_image_file(path: PathLike) -> bool:
    return os.path.splitext(str(path))[1].lower() in config.SUPPORTED_IMAGE_EXTENSIONS


def is_raw_file(path: PathLike) -> bool:
    return os.path.splitext(str(path))[1].lower() in config.SUPPORTED_RAW_EXTENSIONS


def list_image_files(folder: PathLike) -> List[Path]:
    """Sorted list of supported image files directly inside `folder`."""
    folder = Path(folder)
    if not folder.is_dir():
        raise ValidationError(f"Input directory does not exist: {folder}")

    files = []
    with os.scandir(folder) as entries:
        for entry in entries:
            if entry.is_file() and is_image_file(entry.name):
                files.append(Path(entry.path))
    files.sort()
    return files


# =========================================================
# Decoding
# =========================================================

@dataclass
class RawSamples:
    """Undemosaiced sensor samples (integer or floating point)."""
    data: np.ndarray


# Result of the decode dispatch: a displayable RGB frame or raw samples
Decoded = Union[np.ndarray, RawSamples]


def _decode_standard(path: PathLike) -> Tuple[Optional[np.ndarray], Optional[str]]:
    try:
        with Image.open(path) as im:
            im.load()
            rgb = im.convert("RGB")
        return np.asarray(rgb, dtype=np.uint8), None
    except (OSError, ValueError, SyntaxError, Image.DecompressionBombError) as e:
        return None, str(e) or type(e).__name__


def _decode_raw(path: PathLike) -> Tuple[Optional[RawSamples], Optional[str]]:
    try:
        with rawpy.imread(str(path)) as raw:
            # Copy: the buffer belongs to LibRaw and dies with the handle
            samples = np.array(raw.raw_image_visible, copy=True)
        return RawSamples(samples), None
    except (rawpy.LibRawError, OSError, ValueError) as e:
        return None, str(e) or type(e).__name__


def decode(path: PathLike) -> Decoded:
    """
    Decode a file into either an RGB array or raw sensor samples.

    RAW extensions go to rawpy first: most RAW formats are TIFF containers and
    Pillow would only see the embedded preview. Everything else tries Pillow
    first and falls back to rawpy.

    Raises:
        UnsupportedOrCorruptImage: neither decoder understood the file
    """
    name = os.path.basename(str(path))
    if is_raw_file(path):
        samples, raw_error = _decode_raw(path)
        if samples is not None:
            return samples
        logger.debug(f"RAW decode failed for {name} ({raw_error}), trying image decoder")
        img, standard_error = _decode_standard(path)
        if img is not None:
            return img
    else:
        img, standard_error = _decode_standard(path)
        if img is not None:
            return img
        logger.debug(f"Standard decode failed for {name} ({standard_error}), trying RAW")
        samples, raw_error = _decode_raw(path)
        if samples is not None:
            return samples

    raise UnsupportedOrCorruptImage(path, f"image decoder: {standard_error}; RAW decoder: {raw_error}")


def normalize_sensor_samples(samples: np.ndarray, boost: float = config.DEFAULT_RAW_BOOST) -> np.ndarray:
    """
    Turn raw sensor samples into a displayable 8-bit image.

    Min/max normalise to [0, 1], multiply by `boost`, gamma 1/2.2, scale to
    [0, 255] and replicate the single channel into RGB. No demosaic: the result
    looks grayscale.
    """
    data = np.asarray(samples, dtype=np.float64)
    if data.ndim == 3:
        # Some sensors deliver several planes per photosite; keep a scalar
        data = data.mean(axis=2)
    if data.ndim != 2 or data.size == 0:
        raise ValueError(f"Expected a 2D sensor array, got shape {np.shape(samples)}")

    lo = float(np.nanmin(data))
    hi = float(np.nanmax(data))
    if hi > lo:
        normalized = (data - lo) / (hi - lo)
    else:
        normalized = np.zeros_like(data)
    normalized = np.nan_to_num(normalized, nan=0.0)

    # Clip before the power function so the boost cannot produce NaN/inf
    boosted = np.clip(normalized * boost, 0.0, None)
    corrected = colour.gamma_function(boosted, config.RAW_GAMMA)

    scalar = np.clip(np.rint(corrected * 255.0), 0, 255).astype(np.uint8)
    return np.repeat(scalar[:, :, np.newaxis], 3, axis=2)


def load_image(path: PathLike, raw_exposure_boost: float = config.DEFAULT_RAW_BOOST) -> np.ndarray:
    """
    Open a frame as an HxWx3 uint8 RGB array.

    Raises:
        UnsupportedOrCorruptImage: file could not be decoded by either path
    """
    decoded = decode(path)
    if isinstance(decoded, RawSamples):
        logger.debug(f"RAW fallback for {os.path.basename(str(path))}: {decoded.data.shape} {decoded.data.dtype}")
        try:
            return normalize_sensor_samples(decoded.data, raw_exposure_boost)
        except ValueError as e:
            raise UnsupportedOrCorruptImage(path, f"RAW decoder: {e}") from e
    return decoded


def read_frame_size(path: PathLike, raw_exposure_boost: float = config.DEFAULT_RAW_BOOST) -> Tuple[int, int]:
    """(width, height) of one frame, reading only the header when possible."""
    if is_raw_file(path):
        img = load_image(path, raw_exposure_boost)
        return img.shape[1], img.shape[0]
    try:
        with Image.open(path) as im:
            return im.size
    except (OSError, ValueError, SyntaxError):
        img = load_image(path, raw_exposure_boost)
        return img.shape[1], img.shape[0]


# =========================================================
# Encoding
# =========================================================

def save_image(img: np.ndarray, output_path: PathLike):
    """
    Save an 8-bit RGB array, picking the format from the extension.

    Raises:
        FrameWriteError: unsupported extension or I/O failure
    """
    file_ext = os.path.splitext(str(output_path))[1].lower()

    try:
        if file_ext in ['.tif', '.tiff']:
            _save_tiff(img, output_path)
        elif file_ext in ['.jpg', '.jpeg']:
            _save_jpeg(img, output_path)
        elif file_ext == '.png':
            Image.fromarray(img).save(output_path, format='PNG')
        else:
            raise FrameWriteError(output_path, f"unsupported output format: {file_ext or '<none>'}")
    except (OSError, ValueError) as e:
        raise FrameWriteError(output_path, str(e)) from e


def _save_tiff(img: np.ndarray, output_path: PathLike):
    """8-bit TIFF, zlib compressed"""
    tifffile.imwrite(
        output_path,
        img,
        photometric='rgb',
        compression='zlib',
        compressionargs={'level': 8}
    )


def _save_jpeg(img: np.ndarray, output_path: PathLike):
    Image.fromarray(img).save(
        output_path,
        format='JPEG',
        quality=config.JPEG_QUALITY,
        subsampling=2,
        optimize=True
    )
