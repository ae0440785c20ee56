"""
Run orchestration: validate, select frames, process in parallel, optionally encode
"""
import os
import shutil
import time
from pathlib import Path
from typing import Any, Optional, Sequence, Tuple

from loguru import logger

from lapsify import config, encoder, file_io, validation
from lapsify.adjust import resolve_crop_rect
from lapsify.errors import EnvironmentFailure, OutputDirectoryError, UnsupportedOrCorruptImage
from lapsify.pipeline.frames import build_tasks, select_frames
from lapsify.pipeline.processor import ImageFileSink, ParallelFrameProcessor, TempFrameSink
from lapsify.pipeline.request import AdjustmentSettings, OutputOptions, ProcessingResult
from lapsify.pipeline.resolution import plan_resolution
from lapsify.pipeline.state import ProgressCallback


def _ensure_dir(path: Path):
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise OutputDirectoryError(f"Cannot create directory {path}: {e}") from e


def _first_frame_size(tasks, raw_boost) -> Optional[Tuple[int, int]]:
    """Size of the first readable frame, None when none can be read."""
    for task in tasks:
        try:
            return file_io.read_frame_size(task.input_path, raw_boost)
        except UnsupportedOrCorruptImage as e:
            logger.warning(f"Cannot read size of {task.input_path.name}: {e}")
    return None


def _log_settings(settings: AdjustmentSettings, options: OutputOptions, threads: int):
    logger.info("Processing images with settings:")
    logger.info(f"  Exposure: {settings.exposure}EV")
    logger.info(f"  Brightness: {settings.brightness}")
    logger.info(f"  Contrast: {settings.contrast}x")
    logger.info(f"  Saturation: {settings.saturation}x")
    if settings.crop:
        logger.info(f"  Crop: {settings.crop}")
    logger.info(f"  Threads: {threads if threads else f'auto-detect ({os.cpu_count()} available)'}")
    if options.is_video:
        logger.info(f"  Output: {options.extension} video at {options.fps} fps (CRF {options.quality})")
        if options.resolution:
            logger.info(f"  Resolution: {options.resolution}")
    else:
        logger.info(f"  Output format: {options.extension} images")


def process_sequence(
    paths: Sequence[Path],
    output_dir: Path,
    settings: AdjustmentSettings,
    options: OutputOptions,
    start_frame: Optional[int] = None,
    end_frame: Optional[int] = None,
    threads: int = 0,
    raw_boost: float = config.DEFAULT_RAW_BOOST,
    on_progress: Optional[ProgressCallback] = None,
    log_target: Optional[Any] = None,
) -> ProcessingResult:
    """
    Process a sorted list of input paths into images or a video.

    Validation errors are raised before anything touches the disk, as are a
    missing ffmpeg and an output directory that cannot be created. Per-frame
    failures and encoder failures end up in the returned result.
    """
    start = time.perf_counter()

    validation.validate_settings(settings)
    validation.validate_output(options)
    validation.validate_threads(threads)
    validation.validate_raw_boost(raw_boost)
    if options.is_video:
        # Fail before any frame is processed
        encoder.find_ffmpeg()

    selected, total_original = select_frames(paths, start_frame, end_frame)
    tasks = build_tasks(selected, total_original)

    logger.info(f"Found {total_original} image files")
    if len(tasks) != total_original:
        logger.info(f"Processing {len(tasks)} frames ({selected[0][1]} to {selected[-1][1]})")

    # Crop and resolution are checked against the first readable retained frame
    plan = None
    crop_spec = settings.crop_spec
    if crop_spec is not None or (options.is_video and options.resolution):
        first_size = _first_frame_size(tasks, raw_boost)
        if first_size is None:
            # Every frame fails again in the workers and lands in the result
            logger.warning("No readable frame to plan crop and resolution against")
        else:
            crop_rect = resolve_crop_rect(crop_spec, *first_size) if crop_spec is not None else None
            if options.is_video:
                plan = plan_resolution(first_size, crop_rect, options.resolution)

    _log_settings(settings, options, threads)

    output_dir = Path(output_dir)
    _ensure_dir(output_dir)

    if options.is_video:
        result = _process_to_video(tasks, output_dir, settings, options, plan, threads, raw_boost, on_progress, log_target)
    else:
        sink = ImageFileSink(output_dir, options.extension)
        processor = ParallelFrameProcessor(settings, sink, raw_boost, threads, on_progress, log_target)
        result = processor.run(tasks)

    result.elapsed = time.perf_counter() - start
    if result.success:
        logger.success(f"Processing complete: {result.processed} frames in {result.elapsed:.2f}s")
    else:
        logger.error(f"Processing failed: {result.failure_reason}")
        for err in result.errors:
            logger.error(f"  {err}")
    return result


def _process_to_video(tasks, output_dir, settings, options, plan, threads, raw_boost, on_progress, log_target):
    temp_dir = output_dir / config.TEMP_FRAMES_DIRNAME
    if temp_dir.exists():
        # Stale frames from an earlier run would end up in the video
        try:
            shutil.rmtree(temp_dir)
        except OSError as e:
            raise OutputDirectoryError(f"Cannot clear stale frames in {temp_dir}: {e}") from e
    _ensure_dir(temp_dir)

    sink = TempFrameSink(temp_dir, len(tasks))
    processor = ParallelFrameProcessor(settings, sink, raw_boost, threads, on_progress, log_target)
    result = processor.run(tasks)

    if result.errors:
        # A missing frame would cut the numbered sequence short
        result.failure_reason = (
            f"{len(result.errors)} of {result.total} frames failed; video not encoded, frames kept in {temp_dir}"
        )
        return result

    video_path = output_dir / f"{config.VIDEO_STEM}.{options.extension}"
    try:
        result.video_path = encoder.assemble_video(
            temp_dir,
            len(tasks),
            options.fps,
            options.quality,
            plan.size if plan is not None else None,
            video_path,
        )
        result.outputs = [result.video_path]
    except EnvironmentFailure as e:
        result.failure_reason = str(e)
    return result


def process_images_to_images(paths, output_dir, settings, output_format="jpg", **kwargs) -> ProcessingResult:
    return process_sequence(paths, output_dir, settings, OutputOptions(format=output_format), **kwargs)


def process_images_to_video(
    paths, output_dir, settings, video_format="mp4", fps=config.DEFAULT_FPS,
    quality=config.DEFAULT_CRF, resolution=None, **kwargs
) -> ProcessingResult:
    options = OutputOptions(format=video_format, fps=fps, quality=quality, resolution=resolution)
    return process_sequence(paths, output_dir, settings, options, **kwargs)


def run_folder(input_dir: Path, output_dir: Path, settings: AdjustmentSettings, options: OutputOptions, **kwargs) -> ProcessingResult:
    """Discover and sort the inputs of `input_dir`, then process them."""
    paths = file_io.list_image_files(input_dir)
    return process_sequence(paths, output_dir, settings, options, **kwargs)
