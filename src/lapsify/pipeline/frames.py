from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from lapsify import config
from lapsify.errors import FrameIndexOutOfRange, InvalidFrameRange, NoInputFrames
from lapsify.pipeline.request import FrameTask

IndexedPath = Tuple[Path, int]


def select_frames(
    sorted_paths: Sequence[Path],
    start: Optional[int] = None,
    end: Optional[int] = None,
) -> Tuple[List[IndexedPath], int]:
    """
    Keep the inclusive [start, end] slice of the sorted input list.

    Returns the retained paths paired with their index in the original list,
    plus the original length. Interpolation uses those original indices so a
    trimmed run samples the same curve as a full one.
    """
    total = len(sorted_paths)
    if total == 0:
        raise NoInputFrames("No image files found in input directory")

    if start is not None and end is not None and start > end:
        raise InvalidFrameRange(f"Start frame {start} must be less than or equal to end frame {end}")

    start_idx = 0 if start is None else start
    end_idx = total - 1 if end is None else end

    for name, idx in (("Start", start_idx), ("End", end_idx)):
        if idx < 0 or idx >= total:
            raise FrameIndexOutOfRange(f"{name} frame {idx} is out of range (0-{total - 1})")

    selected = [(Path(sorted_paths[i]), i) for i in range(start_idx, end_idx + 1)]
    return selected, total


def build_tasks(selected: Sequence[IndexedPath], total_original: int) -> List[FrameTask]:
    return [
        FrameTask(
            input_path=path,
            original_index=original_index,
            total_original_frames=total_original,
            output_index=position + 1,
        )
        for position, (path, original_index) in enumerate(selected)
    ]


def frame_padding(count: int) -> int:
    """Digits needed for the largest frame number."""
    return max(1, len(str(max(count, 0))))


def temp_frame_name(output_index: int, padding: int) -> str:
    return f"{config.TEMP_FRAME_PREFIX}{output_index:0{padding}d}.jpg"


def temp_frame_pattern(count: int) -> str:
    """printf-style pattern matching temp_frame_name for `count` frames."""
    return f"{config.TEMP_FRAME_PREFIX}%0{frame_padding(count)}d.jpg"
