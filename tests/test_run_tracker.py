import json
from pathlib import Path

import numpy as np
import pytest

pytest.importorskip("cv2")

from facedome import run_tracker
from facedome.types import BoundingBox, Detection


class _FakeCapture:
    def __init__(self, frames: int, fps: float = 25.0) -> None:
        self._frames = [np.zeros((8, 8, 3), dtype=np.uint8) for _ in range(frames)]
        self._fps = fps

    def isOpened(self) -> bool:
        return True

    def get(self, prop):
        if prop == run_tracker.cv2.CAP_PROP_FPS:
            return self._fps
        if prop == run_tracker.cv2.CAP_PROP_FRAME_COUNT:
            return len(self._frames)
        return 0

    def read(self):
        if not self._frames:
            return False, None
        return True, self._frames.pop(0)

    def release(self) -> None:
        return None


class _StaticDetector:
    def detect(self, image, timestamp_ms):
        return [Detection(bbox=BoundingBox(10.0, 10.0, 40.0, 40.0), score=0.9)]


def test_cli_overrides_take_precedence_over_config():
    args = run_tracker.parse_args(["clip.mp4", "--match-factor", "1.2"])
    cfg = {"tracker": {"match_factor": 1.5, "expiry_window_ms": 800}}

    config = run_tracker.build_tracker_config(args, cfg)

    assert config.match_factor == 1.2
    assert config.expiry_window_ms == 800.0


def test_main_writes_faces_csv_and_annotations(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    video_path = tmp_path / "episode.mp4"
    video_path.write_bytes(b"")
    monkeypatch.setattr(run_tracker.cv2, "VideoCapture", lambda path: _FakeCapture(frames=4))
    monkeypatch.setattr(run_tracker, "load_face_detector", lambda **kwargs: _StaticDetector())

    run_tracker.main(
        [
            str(video_path),
            "--output-dir",
            str(tmp_path / "out"),
            "--config",
            str(tmp_path / "missing.yaml"),
        ]
    )

    out_dir = tmp_path / "out" / "episode"
    faces_csv = (out_dir / "episode-faces.csv").read_text(encoding="utf-8").splitlines()
    assert faces_csv[0].split(",") == run_tracker.FACE_COLUMNS
    assert len(faces_csv) == 5

    annotations = json.loads((out_dir / "episode-annotations.json").read_text(encoding="utf-8"))
    assert sorted(annotations) == ["0", "1", "2", "3"]
    assert {face["id"] for faces in annotations.values() for face in faces} == {"1"}
