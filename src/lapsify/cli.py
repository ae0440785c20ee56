"""Command-line entry point for timelapse processing."""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from loguru import logger

from lapsify import config, core
from lapsify.errors import LapsifyError, ValidationError
from lapsify.logger import configure_logging, get_log_file_path
from lapsify.pipeline.request import AdjustmentSettings, OutputOptions
from lapsify.validation import parse_value_array

EXIT_OK = 0
EXIT_PROCESSING_FAILED = 1
EXIT_INVALID_INPUT = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lapsify",
        description="Apply animated exposure, brightness, contrast and saturation to a timelapse sequence.",
    )
    parser.add_argument("-i", "--input", type=Path, required=True, help="Folder containing the source frames")
    parser.add_argument("-o", "--output", type=Path, required=True, help="Destination folder")
    parser.add_argument(
        "-e", "--exposure", default="0",
        help="Exposure in EV, one value or a comma-separated curve (range -3..3, default: 0)",
    )
    parser.add_argument(
        "-b", "--brightness", default="0",
        help="Brightness, one value or a comma-separated curve (range -100..100, default: 0)",
    )
    parser.add_argument(
        "-c", "--contrast", default="1",
        help="Contrast multiplier, one value or a comma-separated curve (range 0.1..3, default: 1)",
    )
    parser.add_argument(
        "-s", "--saturation", default="1",
        help="Saturation multiplier, one value or a comma-separated curve (range 0..2, default: 1)",
    )
    parser.add_argument(
        "-f", "--format", default="mp4",
        help="Output format: mp4, mov, avi for video; jpg, png, tiff for images (default: mp4)",
    )
    parser.add_argument("-r", "--fps", type=int, default=config.DEFAULT_FPS, help="Video frame rate (default: 24)")
    parser.add_argument(
        "-q", "--quality", type=int, default=config.DEFAULT_CRF,
        help="Video CRF, lower is better (0-51, default: 20)",
    )
    parser.add_argument("--resolution", help="Video resolution: 4K, HD, 1080p, 720p or WIDTHxHEIGHT")
    parser.add_argument("-t", "--threads", type=int, default=0, help="Worker threads, 0 for auto (default: 0)")
    parser.add_argument("--start-frame", type=int, help="First frame to process (0-based, inclusive)")
    parser.add_argument("--end-frame", type=int, help="Last frame to process (0-based, inclusive)")
    parser.add_argument(
        "--crop",
        help="Crop as width:height:x:y; values in pixels or percent, negative x/y count from the far edge",
    )
    parser.add_argument(
        "--raw-boost", type=float, default=config.DEFAULT_RAW_BOOST,
        help="Exposure boost applied to RAW sensor data (default: 2.0)",
    )
    parser.add_argument(
        "--log-file", type=Path, nargs="?", const=True,
        help="Also write a rotating debug log; without a path uses ~/.lapsify/logs/lapsify.log",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def _log_progress(current: int, total: int):
    logger.info(f"Progress: {current}/{total} ({current * 100 // total}%)")


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    log_file = get_log_file_path() if args.log_file is True else args.log_file
    configure_logging("DEBUG" if args.verbose else "INFO", log_file=log_file)

    try:
        settings = AdjustmentSettings.from_values(
            exposure=parse_value_array(args.exposure, "exposure"),
            brightness=parse_value_array(args.brightness, "brightness"),
            contrast=parse_value_array(args.contrast, "contrast"),
            saturation=parse_value_array(args.saturation, "saturation"),
            crop=args.crop,
        )
        options = OutputOptions(
            format=args.format,
            fps=args.fps,
            quality=args.quality,
            resolution=args.resolution,
        )
        result = core.run_folder(
            args.input,
            args.output,
            settings,
            options,
            start_frame=args.start_frame,
            end_frame=args.end_frame,
            threads=args.threads,
            raw_boost=args.raw_boost,
            on_progress=_log_progress,
        )
    except ValidationError as e:
        logger.error(f"Invalid input: {e}")
        return EXIT_INVALID_INPUT
    except LapsifyError as e:
        logger.error(str(e))
        return EXIT_PROCESSING_FAILED

    if not result.success:
        return EXIT_PROCESSING_FAILED
    if result.video_path is not None:
        logger.info(f"Output: {result.video_path}")
    else:
        logger.info(f"Output: {result.processed} images in {args.output}")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
