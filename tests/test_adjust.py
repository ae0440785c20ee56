import numpy as np
import pytest

from lapsify.adjust import LUMA_COEFFS, adjust_pixels, apply_adjustments
from lapsify.pipeline.request import AdjustmentSettings, FrameValues

NEUTRAL = FrameValues(exposure=0.0, brightness=0.0, contrast=1.0, saturation=1.0)


@pytest.fixture
def gradient():
    rng = np.random.default_rng(0)
    return rng.integers(0, 256, size=(12, 16, 3), dtype=np.uint8)


def test_luma_coefficients_are_bt601():
    assert LUMA_COEFFS == pytest.approx((0.299, 0.587, 0.114))


def test_neutral_values_leave_pixels_untouched(gradient):
    out = adjust_pixels(gradient, NEUTRAL)
    assert out.dtype == np.uint8
    np.testing.assert_array_equal(out, gradient)


def test_one_stop_doubles_and_clamps():
    img = np.array([[[50, 100, 200]]], dtype=np.uint8)
    out = adjust_pixels(img, NEUTRAL._replace(exposure=1.0))
    np.testing.assert_array_equal(out, [[[100, 200, 255]]])


def test_brightness_offsets_in_percent_of_range():
    img = np.full((2, 2, 3), 100, dtype=np.uint8)
    out = adjust_pixels(img, NEUTRAL._replace(brightness=-100.0))
    assert out.max() == 0


def test_contrast_pivots_on_mid_grey():
    img = np.array([[[64, 128, 192]]], dtype=np.uint8)
    out = adjust_pixels(img, NEUTRAL._replace(contrast=2.0)).astype(int)
    assert out[0, 0, 0] < 64
    assert out[0, 0, 2] > 192


def test_zero_saturation_gives_grey():
    img = np.array([[[200, 50, 10]]], dtype=np.uint8)
    out = adjust_pixels(img, NEUTRAL._replace(saturation=0.0))
    assert out[0, 0, 0] == out[0, 0, 1] == out[0, 0, 2]


def test_apply_adjustments_crops_before_adjusting(gradient):
    settings = AdjustmentSettings.from_values(crop="8:6:4:2")
    out = apply_adjustments(gradient, settings, 0, 1)
    assert out.shape == (6, 8, 3)
    np.testing.assert_array_equal(out, gradient[2:8, 4:12])


def test_apply_adjustments_samples_timeline_at_frame():
    img = np.full((4, 4, 3), 60, dtype=np.uint8)
    settings = AdjustmentSettings.from_values(exposure=[0.0, 1.0])
    assert apply_adjustments(img, settings, 0, 10)[0, 0, 0] == 60
    assert apply_adjustments(img, settings, 9, 10)[0, 0, 0] == 120


def test_apply_adjustments_rejects_non_rgb():
    with pytest.raises(ValueError):
        apply_adjustments(np.zeros((4, 4), dtype=np.uint8), AdjustmentSettings(), 0, 1)
