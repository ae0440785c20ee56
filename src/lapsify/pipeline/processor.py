import concurrent.futures
import os
import threading
import time
from pathlib import Path
from typing import Any, List, Optional, Protocol, Sequence

import numpy as np
from loguru import logger

from lapsify import config, file_io, math_ops
from lapsify.adjust import apply_adjustments
from lapsify.errors import FrameProcessingError, LapsifyError
from lapsify.logger import create_logger
from lapsify.pipeline.frames import frame_padding, temp_frame_name
from lapsify.pipeline.request import AdjustmentSettings, FrameError, FrameTask, ProcessingResult
from lapsify.pipeline.state import ProgressCallback, ProgressTracker


class OutputSink(Protocol):
    """Where processed frames go"""

    def path_for(self, task: FrameTask) -> Path:
        ...

    def write(self, task: FrameTask, image: np.ndarray) -> Path:
        ...


class ImageFileSink:
    """Final images named `<original_stem>_processed.<ext>`."""

    def __init__(self, output_dir: Path, output_format: str):
        self.output_dir = Path(output_dir)
        self.extension = output_format.lower().lstrip('.')

    def path_for(self, task: FrameTask) -> Path:
        return self.output_dir / f"{task.input_path.stem}_processed.{self.extension}"

    def write(self, task: FrameTask, image: np.ndarray) -> Path:
        path = self.path_for(task)
        file_io.save_image(image, path)
        return path


class TempFrameSink:
    """Sequentially numbered JPEG frames for the encoder."""

    def __init__(self, temp_dir: Path, frame_count: int):
        self.temp_dir = Path(temp_dir)
        self.padding = frame_padding(frame_count)

    def path_for(self, task: FrameTask) -> Path:
        return self.temp_dir / temp_frame_name(task.output_index, self.padding)

    def write(self, task: FrameTask, image: np.ndarray) -> Path:
        path = self.path_for(task)
        file_io.save_image(image, path)
        return path


def resolve_worker_count(threads: Optional[int]) -> int:
    """Explicit thread count, or the host's parallelism when unset/0."""
    if threads and threads > 0:
        return threads
    return os.cpu_count() or 1


class ParallelFrameProcessor:
    """
    Runs load -> adjust -> write for every frame on a bounded thread pool.
    A failing frame is recorded and never stops the others.
    """

    def __init__(
        self,
        settings: AdjustmentSettings,
        sink: OutputSink,
        raw_boost: float = config.DEFAULT_RAW_BOOST,
        threads: Optional[int] = 0,
        on_progress: Optional[ProgressCallback] = None,
        log_target: Optional[Any] = None,
    ):
        self.settings = settings
        self.sink = sink
        self.raw_boost = raw_boost
        self.max_workers = resolve_worker_count(threads)
        self.on_progress = on_progress
        self.log_target = log_target

        self.errors: List[FrameError] = []
        self.errors_lock = threading.Lock()

    def process_frame(self, task: FrameTask) -> Path:
        """Single frame, executed inside a worker thread."""
        frame_log = create_logger(self.log_target, task.input_path.name)

        img = file_io.load_image(task.input_path, self.raw_boost)
        try:
            processed = apply_adjustments(img, self.settings, task.original_index, task.total_original_frames)
        except (LapsifyError, ValueError) as e:
            raise FrameProcessingError(task.input_path, f"failed to apply adjustments: {e}") from e

        output_path = self.sink.write(task, processed)
        frame_log.debug(f"✅ Saved: {output_path.name}")
        return output_path

    def _record_error(self, task: FrameTask, message: str):
        with self.errors_lock:
            self.errors.append(FrameError(task.input_path, message))
        create_logger(self.log_target, task.input_path.name).error(f"❌ {message}")

    def run(self, tasks: Sequence[FrameTask]) -> ProcessingResult:
        start = time.perf_counter()
        total = len(tasks)
        tracker = ProgressTracker(total, self.on_progress)
        outputs: List[Path] = []
        with self.errors_lock:
            self.errors = []

        logger.info(f"Processing {total} frames with {self.max_workers} threads")
        if total:
            math_ops.warmup()

        with concurrent.futures.ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            future_to_task = {executor.submit(self.process_frame, t): t for t in tasks}

            for future in concurrent.futures.as_completed(future_to_task):
                task = future_to_task[future]
                try:
                    outputs.append(future.result())
                except FrameProcessingError as e:
                    self._record_error(task, str(e))
                except Exception as e:
                    # Anything unexpected still only costs this one frame
                    logger.exception(f"Worker exception for {task.input_path}")
                    self._record_error(task, f"Unexpected error processing {task.input_path}: {e}")
                tracker.advance()

        outputs.sort()
        result = ProcessingResult(
            total=total,
            processed=len(outputs),
            errors=sorted(self.errors, key=lambda err: str(err.path)),
            outputs=outputs,
            elapsed=time.perf_counter() - start,
        )
        if result.errors:
            result.failure_reason = f"{len(result.errors)} of {total} frames failed"
        return result
