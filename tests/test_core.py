import pytest

from lapsify import core, file_io
from lapsify.errors import (
    EncoderNotFound,
    FrameIndexOutOfRange,
    InvalidCropValue,
    OutputDirectoryError,
    ValidationError,
)
from lapsify.pipeline.request import AdjustmentSettings, OutputOptions


def test_images_mode_writes_processed_copies(frames_dir, output_dir):
    result = core.run_folder(frames_dir, output_dir, AdjustmentSettings(), OutputOptions(format="jpg"))
    assert result.success
    assert result.processed == 10
    assert sorted(p.name for p in output_dir.iterdir())[0] == "frame_00_processed.jpg"


def test_trimmed_range_samples_original_curve(frames_dir, output_dir):
    settings = AdjustmentSettings.from_values(exposure=[0.0, 1.0])
    result = core.run_folder(
        frames_dir, output_dir, settings, OutputOptions(format="png"), start_frame=9, end_frame=9
    )
    assert result.processed == 1
    assert file_io.load_image(output_dir / "frame_09_processed.png")[0, 0, 0] == 200


def test_crop_applies_to_every_frame(frames_dir, output_dir):
    settings = AdjustmentSettings.from_values(crop="50%:50%:25%:25%")
    core.run_folder(frames_dir, output_dir, settings, OutputOptions(format="png"))
    img = file_io.load_image(output_dir / "frame_05_processed.png")
    assert img.shape == (3, 4, 3)


def test_validation_fails_before_touching_disk(frames_dir, output_dir):
    settings = AdjustmentSettings.from_values(exposure=[5.0])
    with pytest.raises(ValidationError):
        core.run_folder(frames_dir, output_dir, settings, OutputOptions(format="jpg"))
    assert not output_dir.exists()


def test_frame_range_checked_against_sequence(frames_dir, output_dir):
    with pytest.raises(FrameIndexOutOfRange):
        core.run_folder(frames_dir, output_dir, AdjustmentSettings(), OutputOptions(format="jpg"), end_frame=10)


def test_empty_crop_rejected_up_front(frames_dir, output_dir):
    settings = AdjustmentSettings.from_values(crop="10:10:100%:0")
    with pytest.raises(InvalidCropValue):
        core.run_folder(frames_dir, output_dir, settings, OutputOptions(format="jpg"))
    assert not output_dir.exists()


def test_video_mode_requires_ffmpeg(frames_dir, output_dir, monkeypatch):
    monkeypatch.setattr(core.encoder.shutil, "which", lambda binary: None)
    with pytest.raises(EncoderNotFound):
        core.run_folder(frames_dir, output_dir, AdjustmentSettings(), OutputOptions(format="mp4"))
    assert not output_dir.exists()


def test_video_mode_encodes_and_cleans_up(frames_dir, output_dir, fake_ffmpeg):
    options = OutputOptions(format="mp4", fps=30, quality=18, resolution="720p")
    result = core.run_folder(frames_dir, output_dir, AdjustmentSettings(), options)

    assert result.success
    assert result.video_path == output_dir / "timelapse.mp4"
    assert result.video_path.exists()
    assert not (output_dir / "temp_frames").exists()
    cmd = fake_ffmpeg.calls[0]
    assert cmd[cmd.index("-vf") + 1] == "scale=960:720"


def test_video_mode_skips_encoding_when_a_frame_fails(frames_dir, output_dir, fake_ffmpeg):
    (frames_dir / "frame_04.png").write_bytes(b"garbage")
    result = core.run_folder(frames_dir, output_dir, AdjustmentSettings(), OutputOptions(format="mp4"))

    assert not result.success
    assert result.video_path is None
    assert fake_ffmpeg.calls == []
    assert len(list((output_dir / "temp_frames").iterdir())) == 9


def test_encoder_failure_is_reported(frames_dir, output_dir, fake_ffmpeg):
    fake_ffmpeg.returncode = 1
    fake_ffmpeg.stderr = "boom"
    result = core.run_folder(frames_dir, output_dir, AdjustmentSettings(), OutputOptions(format="mov"))

    assert not result.success
    assert "boom" in result.failure_reason
    assert (output_dir / "temp_frames").exists()


def test_stale_temp_frames_are_cleared(frames_dir, output_dir, fake_ffmpeg):
    fake_ffmpeg.returncode = 1
    stale = output_dir / "temp_frames"
    stale.mkdir(parents=True)
    (stale / "frame_99.jpg").write_bytes(b"old")
    core.run_folder(frames_dir, output_dir, AdjustmentSettings(), OutputOptions(format="mp4"))
    assert not (stale / "frame_99.jpg").exists()
    assert len(list(stale.iterdir())) == 10


def test_unreadable_sequence_with_crop_is_reported_per_frame(tmp_path, output_dir):
    folder = tmp_path / "input"
    folder.mkdir()
    for i in range(3):
        (folder / f"f{i}.png").write_bytes(b"garbage")
    settings = AdjustmentSettings.from_values(crop="50%:50%:0:0")

    result = core.run_folder(folder, output_dir, settings, OutputOptions(format="png"))

    assert not result.success
    assert result.processed == 0
    assert sorted(err.path.name for err in result.errors) == ["f0.png", "f1.png", "f2.png"]


def test_stale_frames_that_cannot_be_removed(frames_dir, output_dir, fake_ffmpeg, monkeypatch):
    (output_dir / "temp_frames").mkdir(parents=True)

    def locked(path, *args, **kwargs):
        raise PermissionError(13, "Permission denied", str(path))

    monkeypatch.setattr(core.shutil, "rmtree", locked)
    with pytest.raises(OutputDirectoryError):
        core.run_folder(frames_dir, output_dir, AdjustmentSettings(), OutputOptions(format="mp4"))
