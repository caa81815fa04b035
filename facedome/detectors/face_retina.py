"""RetinaFace detection adapter producing tracker-ready detections."""

from __future__ import annotations

import logging
import os
import platform
from typing import Any, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from facedome.types import BoundingBox, Detection

LOGGER = logging.getLogger("facedome.detectors.face")

CPU_PROVIDERS: Tuple[str, ...] = ("CPUExecutionProvider",)


def _default_providers() -> Tuple[str, ...]:
    """Choose default ONNX providers for RetinaFace."""
    system = platform.system()
    machine = platform.machine().lower()
    if system == "Darwin" and machine in {"arm64", "aarch64"}:
        return ("CoreMLExecutionProvider", "CPUExecutionProvider")
    return ("CUDAExecutionProvider", "CPUExecutionProvider")


class RetinaFaceDetector:
    """Wrapper around the InsightFace RetinaFace detector."""

    def __init__(
        self,
        providers: Optional[Sequence[str]] = None,
        det_size: Tuple[int, int] = (640, 640),
        det_thresh: float = 0.5,
    ) -> None:
        os.environ.setdefault("OMP_NUM_THREADS", "2")
        os.environ.setdefault("ORT_INTRA_OP_NUM_THREADS", "2")
        try:
            from insightface.app import FaceAnalysis
        except ImportError as exc:  # pragma: no cover - import guard
            raise RuntimeError(
                "insightface is required for RetinaFaceDetector. "
                "Install it via `pip install insightface`."
            ) from exc

        self.det_size = tuple(det_size)
        self.det_thresh = det_thresh
        self.providers = tuple(providers) if providers is not None else _default_providers()
        self.app = FaceAnalysis(name="buffalo_l", allowed_modules=["detection"], providers=list(self.providers))
        self.app.prepare(ctx_id=0, det_size=self.det_size)
        LOGGER.info(
            "Loaded RetinaFace detector det_size=%s det_thresh=%.2f providers=%s",
            self.det_size,
            det_thresh,
            self.providers,
        )

    def detect(self, image: np.ndarray, timestamp_ms: float) -> List[Detection]:
        """Run RetinaFace on a frame and return detections above threshold."""
        return faces_to_detections(self.app.get(image), self.det_thresh)


def faces_to_detections(faces: Iterable[Any], det_thresh: float = 0.0) -> List[Detection]:
    """Convert InsightFace face records into top-left/size detections.

    Records without a box are kept with a zero box; scores are clipped to
    ``[0, 1]``.
    """
    detections: List[Detection] = []
    for face in faces:
        score = float(np.clip(getattr(face, "det_score", 0.0) or 0.0, 0.0, 1.0))
        if score < det_thresh:
            continue
        bbox = getattr(face, "bbox", None)
        if bbox is None or len(bbox) < 4:
            box = BoundingBox()
        else:
            x1, y1, x2, y2 = (float(v) for v in bbox[:4])
            box = BoundingBox.from_xyxy(x1, y1, x2, y2)
        detections.append(Detection(bbox=box, score=score))
    return detections


def load_face_detector(
    providers: Optional[Sequence[str]] = None,
    det_size: Tuple[int, int] = (640, 640),
    det_thresh: float = 0.5,
) -> Optional[RetinaFaceDetector]:
    """Build a detector, retrying on CPU when accelerated providers fail.

    Returns ``None`` when InsightFace cannot be loaded at all; callers then
    treat every frame as having no detections.
    """
    requested = tuple(providers) if providers is not None else _default_providers()
    try:
        return RetinaFaceDetector(providers=requested, det_size=det_size, det_thresh=det_thresh)
    except RuntimeError as exc:
        LOGGER.warning("Face detector unavailable: %s", exc)
        return None
    except Exception as exc:
        if requested == CPU_PROVIDERS:
            LOGGER.warning("Face detector failed to initialise on CPU: %s", exc)
            return None
        LOGGER.warning("Failed to initialise detector with providers=%s (%s); falling back to CPU", requested, exc)
    try:
        return RetinaFaceDetector(providers=CPU_PROVIDERS, det_size=det_size, det_thresh=det_thresh)
    except Exception as exc:
        LOGGER.warning("Face detector failed to initialise on CPU: %s", exc)
        return None
