from dataclasses import dataclass, field
from pathlib import Path
from typing import List, NamedTuple, Optional, Sequence

from lapsify import config
from lapsify.crop import CropSpec
from lapsify.timeline import ValueTimeline


class FrameValues(NamedTuple):
    exposure: float
    brightness: float
    contrast: float
    saturation: float


def _timeline(default: float):
    return field(default_factory=lambda: ValueTimeline.constant(default))


@dataclass(frozen=True)
class AdjustmentSettings:
    """Immutable adjustment settings, shared read-only by every worker."""
    exposure: ValueTimeline = _timeline(config.DEFAULT_EXPOSURE)
    brightness: ValueTimeline = _timeline(config.DEFAULT_BRIGHTNESS)
    contrast: ValueTimeline = _timeline(config.DEFAULT_CONTRAST)
    saturation: ValueTimeline = _timeline(config.DEFAULT_SATURATION)
    crop: Optional[str] = None

    def __post_init__(self):
        # Parse once so a malformed crop fails before any frame is touched
        object.__setattr__(self, '_crop_spec', CropSpec.parse(self.crop) if self.crop else None)

    @classmethod
    def from_values(
        cls,
        exposure: Sequence[float] = (config.DEFAULT_EXPOSURE,),
        brightness: Sequence[float] = (config.DEFAULT_BRIGHTNESS,),
        contrast: Sequence[float] = (config.DEFAULT_CONTRAST,),
        saturation: Sequence[float] = (config.DEFAULT_SATURATION,),
        crop: Optional[str] = None,
    ) -> "AdjustmentSettings":
        return cls(
            exposure=ValueTimeline(exposure),
            brightness=ValueTimeline(brightness),
            contrast=ValueTimeline(contrast),
            saturation=ValueTimeline(saturation),
            crop=crop or None,
        )

    @property
    def crop_spec(self) -> Optional[CropSpec]:
        return self._crop_spec

    def values_at(self, frame_index: int, total_frames: int) -> FrameValues:
        return FrameValues(
            self.exposure.value_at(frame_index, total_frames),
            self.brightness.value_at(frame_index, total_frames),
            self.contrast.value_at(frame_index, total_frames),
            self.saturation.value_at(frame_index, total_frames),
        )


@dataclass(frozen=True)
class OutputOptions:
    """Output mode: image sequence or video."""
    format: str = "mp4"
    fps: int = config.DEFAULT_FPS
    quality: int = config.DEFAULT_CRF
    resolution: Optional[str] = None

    @property
    def extension(self) -> str:
        return self.format.lower().lstrip('.')

    @property
    def is_video(self) -> bool:
        return self.extension in config.VIDEO_OUTPUT_FORMATS


@dataclass(frozen=True)
class FrameTask:
    """One unit of parallel work."""
    input_path: Path
    original_index: int          # drives interpolation
    total_original_frames: int
    output_index: int            # 1-based among retained frames, drives naming


@dataclass(frozen=True)
class FrameError:
    path: Path
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


@dataclass
class ProcessingResult:
    """Accumulated outcome of a run."""
    total: int = 0
    processed: int = 0
    errors: List[FrameError] = field(default_factory=list)
    outputs: List[Path] = field(default_factory=list)
    elapsed: float = 0.0
    video_path: Optional[Path] = None
    failure_reason: Optional[str] = None

    @property
    def success(self) -> bool:
        return not self.errors and self.failure_reason is None
