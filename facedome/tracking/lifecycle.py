"""Per-frame track lifecycle: prune, associate, update, spawn."""

from __future__ import annotations

import logging
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from facedome.tracking.associate import greedy_associate
from facedome.tracking.config import TrackerConfig
from facedome.tracking.store import Track, TrackStore
from facedome.types import Detection, TrackedFace

LOGGER = logging.getLogger("facedome.tracking.lifecycle")

RawDetection = Union[Detection, Mapping[str, Any]]


class FaceTracker:
    """Turns per-frame face detections into stable, smoothed tracked faces."""

    def __init__(self, config: Optional[TrackerConfig] = None) -> None:
        self.config = config or TrackerConfig()
        self.store = TrackStore()
        LOGGER.info(
            "Initialised FaceTracker expiry_window_ms=%.1f match_factor=%.2f",
            self.config.expiry_window_ms,
            self.config.match_factor,
        )

    @property
    def tracks(self) -> Tuple[Track, ...]:
        return self.store.snapshot()

    def reset(self) -> None:
        """Start a new session: drop all tracks and restart ids at 1."""
        self.store.reset()

    def advance(self, raw_detections: Iterable[RawDetection], now: float) -> List[TrackedFace]:
        """Advance tracking by one frame taken at ``now`` (milliseconds).

        Returns matched tracks in creation order followed by newly spawned
        tracks in detection order.
        """
        detections = normalize_detections(raw_detections)
        self.store.prune(now, self.config.expiry_window_ms)

        association = greedy_associate(self.store.snapshot(), detections, self.config.match_factor)

        faces: List[TrackedFace] = []
        for track, det_idx in association.matches:
            track.observe(detections[det_idx], now)
            faces.append(track.to_face())

        for det_idx in association.unmatched_detections:
            detection = detections[det_idx]
            track = Track.spawn(self.store.allocate_id(), detection, now, self.config)
            self.store.add(track)
            LOGGER.debug(
                "Spawned track %s at (%.1f, %.1f) score=%.2f",
                track.id,
                detection.bbox.origin_x,
                detection.bbox.origin_y,
                detection.score,
            )
            faces.append(track.to_face())
        return faces


def normalize_detections(raw_detections: Optional[Iterable[RawDetection]]) -> Sequence[Detection]:
    """Coerce detector output into ``Detection`` objects; ``None`` means none."""
    if raw_detections is None:
        return []
    return [
        det.normalized() if isinstance(det, Detection) else Detection.from_mapping(det)
        for det in raw_detections
    ]
