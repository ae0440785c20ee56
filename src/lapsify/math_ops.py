from numba import njit
import numpy as np

# =========================================================
# Numba kernels (in-place, no allocation)
# =========================================================

# nogil lets the frame worker threads run these kernels concurrently.
# Inputs must be C-contiguous float32 HxWx3 arrays normalised to [0, 1].


@njit(cache=True, nogil=True)
def apply_adjustments_inplace(img, gain, offset, contrast, saturation, kr, kg, kb):
    rows, cols, _ = img.shape

    for r in range(rows):
        for c in range(cols):
            r_v = img[r, c, 0]
            g_v = img[r, c, 1]
            b_v = img[r, c, 2]

            # Exposure
            if gain != 1.0:
                r_v *= gain
                g_v *= gain
                b_v *= gain

            # Brightness
            if offset != 0.0:
                r_v += offset
                g_v += offset
                b_v += offset

            # Contrast around mid grey
            if contrast != 1.0:
                r_v = (r_v - 0.5) * contrast + 0.5
                g_v = (g_v - 0.5) * contrast + 0.5
                b_v = (b_v - 0.5) * contrast + 0.5

            # Saturation against luma of the values so far
            if saturation != 1.0:
                lum = r_v * kr + g_v * kg + b_v * kb
                r_v = lum + (r_v - lum) * saturation
                g_v = lum + (g_v - lum) * saturation
                b_v = lum + (b_v - lum) * saturation

            if r_v < 0.0: r_v = 0.0
            if g_v < 0.0: g_v = 0.0
            if b_v < 0.0: b_v = 0.0
            if r_v > 1.0: r_v = 1.0
            if g_v > 1.0: g_v = 1.0
            if b_v > 1.0: b_v = 1.0

            img[r, c, 0] = r_v
            img[r, c, 1] = g_v
            img[r, c, 2] = b_v


@njit(cache=True, nogil=True)
def float_to_uint8(img, out):
    rows, cols, channels = img.shape
    for r in range(rows):
        for c in range(cols):
            for ch in range(channels):
                # round half up; img is already clamped to [0, 1]
                out[r, c, ch] = np.uint8(img[r, c, ch] * 255.0 + 0.5)


def warmup():
    """Compile the kernels once before worker threads fan out."""
    img = np.full((2, 2, 3), 0.5, dtype=np.float32)
    apply_adjustments_inplace(img, 2.0, 0.1, 1.2, 0.8, 0.299, 0.587, 0.114)
    out = np.empty((2, 2, 3), dtype=np.uint8)
    float_to_uint8(img, out)
