"""Exceptions raised by the lapsify pipeline."""

from pathlib import Path
from typing import Optional, Union


class LapsifyError(Exception):
    """Base class for every error the pipeline raises on purpose."""


# --- Validation: detected before any work starts ---------------------------

class ValidationError(LapsifyError, ValueError):
    """Raised when user-provided settings fail validation."""


class InvalidCropFormat(ValidationError):
    """Crop descriptor does not have the width:height:x:y shape."""


class InvalidCropValue(ValidationError):
    """A crop field is not a number/percentage, or the crop is empty."""


class InvalidFrameRange(ValidationError):
    """Start frame is after end frame."""


class FrameIndexOutOfRange(ValidationError):
    """Start or end frame points past the discovered sequence."""


class NoInputFrames(ValidationError):
    """No supported image files were found."""


class UnsupportedOutputFormat(ValidationError):
    """Requested output format is neither an image nor a video format."""


class InvalidResolution(ValidationError):
    """Resolution is neither a known preset nor WIDTHxHEIGHT."""


# --- Per-frame: collected, never abort sibling frames ----------------------

class FrameProcessingError(LapsifyError):
    """Raised when a single frame cannot be read, adjusted or written."""

    _prefix = "Frame processing failed"

    def __init__(self, path: Union[str, Path], reason: Optional[str] = None):
        self.path = Path(path)
        self.reason = reason
        message = f"{self._prefix}: {self.path}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class UnsupportedOrCorruptImage(FrameProcessingError):
    _prefix = "Unsupported or corrupt image"


class FrameWriteError(FrameProcessingError):
    _prefix = "Failed to write frame"


# --- Fatal environment errors: abort the rest of the run -------------------

class EnvironmentFailure(LapsifyError, RuntimeError):
    """Raised when the host environment prevents the run from continuing."""


class OutputDirectoryError(EnvironmentFailure):
    pass


class EncoderNotFound(EnvironmentFailure):
    pass


class EncodingFailed(EnvironmentFailure):
    """The external encoder exited with an error; `stderr` keeps its output."""

    def __init__(self, stderr: str, returncode: Optional[int] = None):
        self.stderr = stderr
        self.returncode = returncode
        detail = stderr.strip() or "no output"
        if returncode is not None:
            super().__init__(f"ffmpeg failed (exit code {returncode}): {detail}")
        else:
            super().__init__(f"ffmpeg failed: {detail}")
