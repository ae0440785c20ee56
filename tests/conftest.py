from pathlib import Path

import numpy as np
import pytest
from PIL import Image


def write_solid(path: Path, value=(100, 100, 100), size=(8, 6)) -> Path:
    """Solid colour RGB image; size is (width, height)."""
    width, height = size
    arr = np.empty((height, width, 3), dtype=np.uint8)
    arr[:, :] = value
    Image.fromarray(arr).save(path)
    return path


@pytest.fixture
def frames_dir(tmp_path):
    """Ten solid grey PNG frames named frame_00.png .. frame_09.png."""
    folder = tmp_path / "input"
    folder.mkdir()
    for i in range(10):
        write_solid(folder / f"frame_{i:02d}.png")
    return folder


@pytest.fixture
def output_dir(tmp_path):
    return tmp_path / "output"


@pytest.fixture
def fake_ffmpeg(monkeypatch):
    """Pretend ffmpeg is installed; records commands and lets tests pick the exit code."""
    from lapsify import encoder

    class FakeRun:
        def __init__(self):
            self.calls = []
            self.returncode = 0
            self.stderr = ""

        def __call__(self, cmd, **kwargs):
            self.calls.append(cmd)
            if self.returncode == 0:
                Path(cmd[-1]).write_bytes(b"video")
            return _Completed(cmd, self.returncode, "", self.stderr)

    fake = FakeRun()
    monkeypatch.setattr(encoder.shutil, "which", lambda binary: f"/usr/bin/{binary}")
    monkeypatch.setattr(encoder.subprocess, "run", fake)
    return fake


class _Completed:
    def __init__(self, args, returncode, stdout, stderr):
        self.args = args
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
