import pytest

from lapsify.crop import CropRect
from lapsify.errors import InvalidResolution
from lapsify.pipeline.resolution import parse_resolution, plan_resolution


@pytest.mark.parametrize(
    "text,size",
    [("4K", (3840, 2160)), ("hd", (1920, 1080)), ("1080P", (1920, 1080)), ("720p", (1280, 720)), ("640x360", (640, 360))],
)
def test_parse_resolution(text, size):
    assert parse_resolution(text) == size


@pytest.mark.parametrize("text", ["big", "1920", "0x100", "axb", "1x2x3"])
def test_parse_resolution_rejects(text):
    with pytest.raises(InvalidResolution):
        parse_resolution(text)


def test_no_target_means_no_plan():
    assert plan_resolution((1920, 1080)) is None


def test_matching_aspect_has_no_warning():
    plan = plan_resolution((6000, 3376), target="1080p")
    assert plan.size == (1920, 1080)
    assert plan.warning is None


def test_wider_source_keeps_target_height():
    plan = plan_resolution((3000, 1000), target="1080p")
    assert plan.height == 1080
    assert plan.width == 3240
    assert plan.warning is not None


def test_uncropped_taller_source_keeps_target_height():
    plan = plan_resolution((1000, 1000), target="720p")
    assert plan.size == (720, 720)
    assert plan.warning is not None


def test_four_by_three_source_at_720p():
    assert plan_resolution((4000, 3000), target="720p").size == (960, 720)


def test_cropped_taller_source_keeps_target_width():
    plan = plan_resolution((2000, 2000), crop=CropRect(0, 0, 1000, 1000), target="720p")
    assert plan.size == (1280, 1280)
    assert plan.warning is not None


def test_dimensions_are_even():
    plan = plan_resolution((1001, 777), target="1281x721")
    assert plan.width % 2 == 0
    assert plan.height % 2 == 0


def test_crop_rect_drives_source_size():
    plan = plan_resolution((4000, 3000), crop=CropRect(0, 0, 1600, 900), target="hd")
    assert plan.source_size == (1600, 900)
    assert plan.size == (1920, 1080)
    assert plan.warning is None
