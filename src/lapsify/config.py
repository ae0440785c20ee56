"""
Run-wide constants: parameter ranges, file formats and encoder settings
"""

# Adjustment parameter ranges (inclusive)
EXPOSURE_RANGE = (-3.0, 3.0)        # EV stops
BRIGHTNESS_RANGE = (-100.0, 100.0)
CONTRAST_RANGE = (0.1, 3.0)         # 1.0 = unchanged
SATURATION_RANGE = (0.0, 2.0)       # 1.0 = unchanged

DEFAULT_EXPOSURE = 0.0
DEFAULT_BRIGHTNESS = 0.0
DEFAULT_CONTRAST = 1.0
DEFAULT_SATURATION = 1.0

# RAW fallback
DEFAULT_RAW_BOOST = 2.0
RAW_GAMMA = 1.0 / 2.2

SUPPORTED_RAW_EXTENSIONS = {
    '.raw', '.cr2', '.cr3', '.nef', '.arw', '.dng', '.orf', '.rw2', '.raf',
}

SUPPORTED_IMAGE_EXTENSIONS = {
    '.jpg', '.jpeg', '.png', '.tiff', '.tif', '.bmp', '.webp', '.heic', '.heif',
} | SUPPORTED_RAW_EXTENSIONS

# Output
IMAGE_OUTPUT_FORMATS = ('jpg', 'jpeg', 'png', 'tif', 'tiff')
VIDEO_OUTPUT_FORMATS = ('mp4', 'mov', 'avi')
JPEG_QUALITY = 95

FPS_RANGE = (1, 120)
CRF_RANGE = (0, 51)
DEFAULT_FPS = 24
DEFAULT_CRF = 20

# Video assembly
FFMPEG_BINARY = "ffmpeg"
FFMPEG_CODEC = "libx264"
FFMPEG_PIXEL_FORMAT = "yuv420p"
FFMPEG_TIMEOUT = 3600  # seconds
TEMP_FRAMES_DIRNAME = "temp_frames"
TEMP_FRAME_PREFIX = "frame_"
VIDEO_STEM = "timelapse"

RESOLUTION_PRESETS = {
    '4k': (3840, 2160),
    'hd': (1920, 1080),
    '1080p': (1920, 1080),
    '720p': (1280, 720),
}
ASPECT_TOLERANCE = 0.05  # relative
