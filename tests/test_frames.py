from pathlib import Path

import pytest

from lapsify.errors import FrameIndexOutOfRange, InvalidFrameRange, NoInputFrames
from lapsify.pipeline.frames import build_tasks, frame_padding, select_frames, temp_frame_name, temp_frame_pattern

PATHS = [Path(f"img_{i:03d}.jpg") for i in range(100)]


def test_full_range_by_default():
    selected, total = select_frames(PATHS)
    assert total == 100
    assert [idx for _, idx in selected] == list(range(100))


def test_trimmed_range_keeps_original_indices():
    selected, total = select_frames(PATHS, 20, 29)
    tasks = build_tasks(selected, total)
    assert len(tasks) == 10
    assert tasks[0].original_index == 20
    assert tasks[-1].original_index == 29
    assert all(t.total_original_frames == 100 for t in tasks)
    assert [t.output_index for t in tasks] == list(range(1, 11))


def test_open_ended_ranges():
    selected, _ = select_frames(PATHS, start=95)
    assert [idx for _, idx in selected] == [95, 96, 97, 98, 99]
    selected, _ = select_frames(PATHS, end=2)
    assert [idx for _, idx in selected] == [0, 1, 2]


def test_start_after_end():
    with pytest.raises(InvalidFrameRange):
        select_frames(PATHS, 30, 20)


@pytest.mark.parametrize("start,end", [(100, None), (None, 100), (-1, None)])
def test_out_of_range(start, end):
    with pytest.raises(FrameIndexOutOfRange):
        select_frames(PATHS, start, end)


def test_no_frames():
    with pytest.raises(NoInputFrames):
        select_frames([])


@pytest.mark.parametrize("count,padding", [(1, 1), (9, 1), (10, 2), (99, 2), (100, 3), (1000, 4)])
def test_frame_padding(count, padding):
    assert frame_padding(count) == padding


def test_temp_frame_names_sort_numerically():
    names = [temp_frame_name(i, frame_padding(120)) for i in range(1, 121)]
    assert names[0] == "frame_001.jpg"
    assert names == sorted(names)
    assert temp_frame_pattern(120) == "frame_%03d.jpg"


def test_single_frame_range_keeps_curve_position():
    from lapsify.timeline import ValueTimeline

    selected, total = select_frames(PATHS[:5], 2, 2)
    (task,) = build_tasks(selected, total)
    assert (task.original_index, task.total_original_frames, task.output_index) == (2, 5, 1)
    assert ValueTimeline([0.0, 1.0]).value_at(task.original_index, task.total_original_frames) == 0.5
