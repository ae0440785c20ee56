"""
Crop descriptors in FFmpeg-like `width:height:x:y` form.

Each field is a bare number (pixels) or a `%`-suffixed percentage of the
original dimension. Negative x/y are percentage offsets from the right/bottom
edge; width/height <= 0 take the remainder of the dimension after the offset.
"""
import math
from dataclasses import dataclass
from typing import Tuple

from lapsify.errors import InvalidCropFormat, InvalidCropValue


@dataclass(frozen=True)
class CropValue:
    value: float
    percent: bool = False

    @classmethod
    def parse(cls, text: str) -> "CropValue":
        text = text.strip()
        percent = text.endswith('%')
        number = text[:-1].strip() if percent else text
        try:
            value = float(number)
        except ValueError as exc:
            kind = "percentage" if percent else "pixel"
            raise InvalidCropValue(f"Invalid {kind} value: {text!r}") from exc
        if not math.isfinite(value):
            raise InvalidCropValue(f"Crop value must be finite: {text!r}")
        if percent and abs(value) > 100.0:
            raise InvalidCropValue(f"Percentage must be between -100 and 100: {text!r}")
        return cls(value, percent)

    def __str__(self) -> str:
        return f"{self.value:g}%" if self.percent else f"{self.value:g}"


@dataclass(frozen=True)
class CropRect:
    """Resolved pixel rectangle, end-exclusive, clamped to the image."""

    start_x: int
    start_y: int
    end_x: int
    end_y: int

    @property
    def width(self) -> int:
        return self.end_x - self.start_x

    @property
    def height(self) -> int:
        return self.end_y - self.start_y

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    @property
    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0

    @classmethod
    def full(cls, width: int, height: int) -> "CropRect":
        return cls(0, 0, width, height)

    def to_spec(self) -> str:
        """Literal pixel descriptor that resolves back to this rectangle."""
        return f"{self.width}:{self.height}:{self.start_x}:{self.start_y}"


def _resolve_offset(field: CropValue, dimension: int) -> float:
    if field.value < 0:
        # Negative offsets are always percentages measured from the far edge
        return dimension + (field.value / 100.0) * dimension
    if field.percent:
        return (field.value / 100.0) * dimension
    return field.value


def _resolve_extent(field: CropValue, dimension: int, offset: float) -> float:
    if field.value <= 0:
        return dimension - offset
    if field.percent:
        return (field.value / 100.0) * dimension
    return field.value


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


@dataclass(frozen=True)
class CropSpec:
    width: CropValue
    height: CropValue
    x: CropValue
    y: CropValue

    @classmethod
    def parse(cls, text: str) -> "CropSpec":
        parts = text.split(':')
        if len(parts) != 4:
            raise InvalidCropFormat(
                f"Crop string must have 4 parts (width:height:x:y), got {len(parts)} parts: {text!r}"
            )
        return cls(*(CropValue.parse(p) for p in parts))

    def resolve(self, width: int, height: int) -> CropRect:
        """Resolve against the original (pre-crop) image size."""
        x_offset = _resolve_offset(self.x, width)
        y_offset = _resolve_offset(self.y, height)
        crop_w = _resolve_extent(self.width, width, x_offset)
        crop_h = _resolve_extent(self.height, height, y_offset)

        start_x = _clamp(int(x_offset), 0, width)
        start_y = _clamp(int(y_offset), 0, height)
        end_x = _clamp(start_x + int(crop_w), start_x, width)
        end_y = _clamp(start_y + int(crop_h), start_y, height)
        return CropRect(start_x, start_y, end_x, end_y)

    def __str__(self) -> str:
        return f"{self.width}:{self.height}:{self.x}:{self.y}"


def resolve_crop(text: str, width: int, height: int) -> CropRect:
    return CropSpec.parse(text).resolve(width, height)
