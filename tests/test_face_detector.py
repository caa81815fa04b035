from types import SimpleNamespace

import numpy as np
import pytest

from facedome.detectors import face_retina
from facedome.detectors.face_retina import faces_to_detections, load_face_detector
from facedome.types import BoundingBox


def test_faces_to_detections_converts_corners_and_filters_scores():
    faces = [
        SimpleNamespace(bbox=np.array([10.0, 20.0, 60.0, 90.0], dtype=np.float32), det_score=0.8),
        SimpleNamespace(bbox=np.array([0.0, 0.0, 5.0, 5.0], dtype=np.float32), det_score=0.2),
        SimpleNamespace(bbox=None, det_score=0.95),
    ]

    detections = faces_to_detections(faces, det_thresh=0.5)

    assert len(detections) == 2
    assert detections[0].bbox == BoundingBox(10.0, 20.0, 50.0, 70.0)
    assert detections[0].score == pytest.approx(0.8)
    assert detections[1].bbox == BoundingBox()


def test_faces_to_detections_clips_scores_and_inverted_boxes():
    faces = [SimpleNamespace(bbox=[30.0, 30.0, 20.0, 10.0], det_score=1.3)]

    detections = faces_to_detections(faces)

    assert detections[0].score == 1.0
    assert detections[0].bbox.width == 0.0
    assert detections[0].bbox.height == 0.0


def test_load_face_detector_returns_none_without_insightface(monkeypatch: pytest.MonkeyPatch):
    def _missing(**kwargs):
        raise RuntimeError("insightface is required")

    monkeypatch.setattr(face_retina, "RetinaFaceDetector", _missing)

    assert load_face_detector() is None


def test_load_face_detector_falls_back_to_cpu(monkeypatch: pytest.MonkeyPatch):
    attempts = []

    class _FlakyDetector:
        def __init__(self, providers, det_size, det_thresh):
            attempts.append(tuple(providers))
            if tuple(providers) != face_retina.CPU_PROVIDERS:
                raise ValueError("provider not available")
            self.providers = tuple(providers)

    monkeypatch.setattr(face_retina, "RetinaFaceDetector", _FlakyDetector)

    detector = load_face_detector(providers=["CUDAExecutionProvider", "CPUExecutionProvider"])

    assert detector is not None
    assert detector.providers == face_retina.CPU_PROVIDERS
    assert attempts == [("CUDAExecutionProvider", "CPUExecutionProvider"), face_retina.CPU_PROVIDERS]
