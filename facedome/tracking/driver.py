"""Per-frame driver connecting a face detector to the tracker."""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Protocol, Sequence

from facedome.tracking.lifecycle import FaceTracker
from facedome.types import Detection, TrackedFace

LOGGER = logging.getLogger("facedome.tracking.driver")


class FaceDetectorLike(Protocol):
    def detect(self, image: Any, timestamp_ms: float) -> Sequence[Detection]:
        ...


class FrameDriver:
    """Calls the detector and tracker at most once per distinct timestamp.

    Repeated or out-of-order timestamps are ignored and return the faces of
    the last processed frame. With no detector every tick advances the tracker
    with an empty detection list so stale tracks still expire.
    """

    def __init__(self, tracker: FaceTracker, detector: Optional[FaceDetectorLike] = None) -> None:
        self.tracker = tracker
        self.detector = detector
        self.last_timestamp_ms: Optional[float] = None
        self.frames_processed = 0
        self._last_faces: List[TrackedFace] = []

    @property
    def last_faces(self) -> List[TrackedFace]:
        return list(self._last_faces)

    def detect(self, image: Any, timestamp_ms: float) -> List[Detection]:
        if self.detector is None:
            return []
        return list(self.detector.detect(image, timestamp_ms) or [])

    def tick(self, image: Any, timestamp_ms: float) -> List[TrackedFace]:
        if self.last_timestamp_ms is not None and timestamp_ms <= self.last_timestamp_ms:
            LOGGER.debug(
                "Skipping frame at %.3f ms (last processed %.3f ms)",
                timestamp_ms,
                self.last_timestamp_ms,
            )
            return self.last_faces
        self.last_timestamp_ms = timestamp_ms
        detections = self.detect(image, timestamp_ms)
        self._last_faces = self.tracker.advance(detections, timestamp_ms)
        self.frames_processed += 1
        return self.last_faces

    def switch_source(self) -> None:
        """Reset tracking state before frames from a new video source arrive."""
        LOGGER.info(
            "Switching video source after %d frames; resetting tracker",
            self.frames_processed,
        )
        self.tracker.reset()
        self.last_timestamp_ms = None
        self.frames_processed = 0
        self._last_faces = []
