"""
Unified logging module
Uses loguru for a consistent interface, with optional rotating log file output
"""
from typing import Optional, Any
from loguru import logger
import sys
from pathlib import Path


def get_log_file_path() -> str:
    """Default log file location"""
    log_dir = Path.home() / ".lapsify" / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    return str(log_dir / "lapsify.log")


def configure_logging(level: str = "INFO", log_file: Optional[str] = None, colorize: bool = True):
    """
    Replace loguru's default sink with the lapsify console (and optional file) sinks.

    Args:
        level: minimum level shown on the console
        log_file: path of a rotating DEBUG log file; None disables it
        colorize: colour console output
    """
    logger.remove()

    # Console only when stderr exists (not in windowed builds)
    if sys.stderr is not None:
        logger.add(
            sys.stderr,
            format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>",
            level=level,
            colorize=colorize
        )

    if log_file:
        logger.add(
            log_file,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {message}",
            level="DEBUG",
            rotation="1 day",
            retention="7 days",
            compression="zip",
            encoding="utf-8"
        )


class FrameLogger:
    """
    Loguru wrapper bound to one frame file.

    Messages get a ``[file name]`` prefix. When `log_target` has a ``put``
    method (queue.Queue, multiprocessing.Queue) each record is also mirrored
    there as ``{'id', 'msg', 'level'}`` so a front end can show per-frame status.
    """

    def __init__(self, log_target: Optional[Any] = None, file_id: Optional[str] = None):
        self.log_target = log_target
        self.file_id = file_id

    def _emit(self, level: str, message: str):
        if hasattr(self.log_target, 'put'):
            self.log_target.put({'id': self.file_id, 'msg': message, 'level': level})

        text = f"[{self.file_id}] {message}" if self.file_id else message
        # depth=2: attribute the record to the worker, not this wrapper
        logger.opt(depth=2).log(level, text)

    def error(self, message: str):
        self._emit("ERROR", message)

    def debug(self, message: str):
        self._emit("DEBUG", message)


def create_logger(log_target: Optional[Any] = None, file_id: Optional[str] = None) -> FrameLogger:
    return FrameLogger(log_target, file_id)
