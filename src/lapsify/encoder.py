"""
Video assembly: hands a directory of numbered frames to ffmpeg
"""
import shutil
import subprocess
from pathlib import Path
from typing import List, Optional, Tuple

from loguru import logger

from lapsify import config
from lapsify.errors import EncoderNotFound, EncodingFailed
from lapsify.pipeline.frames import temp_frame_pattern


def find_ffmpeg(binary: str = config.FFMPEG_BINARY) -> str:
    path = shutil.which(binary)
    if path is None:
        raise EncoderNotFound(f"{binary} is not installed or not found in PATH")
    return path


def build_ffmpeg_command(
    ffmpeg: str,
    frame_pattern: Path,
    fps: int,
    crf: int,
    resolution: Optional[Tuple[int, int]],
    output_path: Path,
) -> List[str]:
    cmd = [
        ffmpeg, "-y", "-hide_banner", "-loglevel", "error",
        "-framerate", str(fps),
        "-start_number", "1",
        "-i", str(frame_pattern),
        "-c:v", config.FFMPEG_CODEC,
        "-crf", str(crf),
        "-pix_fmt", config.FFMPEG_PIXEL_FORMAT,
    ]
    if resolution is not None:
        width, height = resolution
        cmd += ["-vf", f"scale={width}:{height}"]
    cmd.append(str(output_path))
    return cmd


def assemble_video(
    temp_dir: Path,
    frame_count: int,
    fps: int,
    crf: int,
    resolution: Optional[Tuple[int, int]],
    output_path: Path,
    timeout: Optional[float] = config.FFMPEG_TIMEOUT,
    ffmpeg_binary: str = config.FFMPEG_BINARY,
) -> Path:
    """
    Encode the numbered frames in `temp_dir` into `output_path`.

    The temp directory is removed on success and left in place on failure so
    the frames can be inspected.

    Raises:
        EncoderNotFound: ffmpeg is not on PATH
        EncodingFailed: non-zero exit or timeout
    """
    ffmpeg = find_ffmpeg(ffmpeg_binary)
    temp_dir = Path(temp_dir)
    output_path = Path(output_path)
    cmd = build_ffmpeg_command(ffmpeg, temp_dir / temp_frame_pattern(frame_count), fps, crf, resolution, output_path)

    logger.info(f"Creating video with ffmpeg: {frame_count} frames at {fps} fps (CRF {crf})")
    logger.debug("ffmpeg command: " + " ".join(cmd))

    try:
        proc = subprocess.run(cmd, stdout=subprocess.PIPE, stderr=subprocess.PIPE, text=True, timeout=timeout)
    except subprocess.TimeoutExpired as e:
        stderr = e.stderr.decode(errors="replace") if isinstance(e.stderr, bytes) else (e.stderr or "")
        logger.error(f"ffmpeg timed out after {timeout}s; frames kept in {temp_dir}")
        raise EncodingFailed(f"timed out after {timeout}s. {stderr}") from e
    except OSError as e:
        raise EncoderNotFound(f"Failed to start ffmpeg: {e}") from e

    if proc.returncode != 0:
        logger.error(f"ffmpeg failed (exit code {proc.returncode}); frames kept in {temp_dir}")
        raise EncodingFailed(proc.stderr or "", proc.returncode)

    shutil.rmtree(temp_dir)
    logger.success(f"Video created successfully: {output_path}")
    logger.info(f"Video duration: {frame_count / fps:.2f} seconds at {fps} fps")
    return output_path
