"""Live track storage and identity allocation."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterator, List, Tuple

from facedome.tracking.config import AXES, TrackerConfig
from facedome.tracking.smoother import KalmanState
from facedome.types import BoundingBox, Detection, TrackedFace

LOGGER = logging.getLogger("facedome.tracking.store")


@dataclass
class Track:
    """Mutable state of one tracked face.

    ``filters`` holds one ``KalmanState`` per axis in ``AXES``. States are
    immutable, so a track never shares a filter with another track.
    """

    id: str
    last_seen: float
    filters: Dict[str, KalmanState]
    score: float
    current_box: BoundingBox

    @classmethod
    def spawn(cls, track_id: str, detection: Detection, now: float, config: TrackerConfig) -> "Track":
        box = detection.bbox
        raw = _box_values(box)
        filters = {axis: KalmanState.seed(raw[axis], config.noise_for(axis)) for axis in AXES}
        return cls(
            id=track_id,
            last_seen=now,
            filters=filters,
            score=detection.score,
            current_box=box,
        )

    def observe(self, detection: Detection, now: float) -> BoundingBox:
        """Feed a matched detection through the smoothers and return the new box."""
        if now > self.last_seen:
            self.last_seen = now
        self.score = detection.score
        raw = _box_values(detection.bbox)
        smoothed: Dict[str, float] = {}
        for axis in AXES:
            self.filters[axis], smoothed[axis] = self.filters[axis].update(raw[axis])
        self.current_box = BoundingBox(
            origin_x=smoothed["x"],
            origin_y=smoothed["y"],
            width=max(0.0, smoothed["width"]),
            height=max(0.0, smoothed["height"]),
        )
        return self.current_box

    def age(self, now: float) -> float:
        return now - self.last_seen

    def to_face(self) -> TrackedFace:
        return TrackedFace(id=self.id, bounding_box=self.current_box, score=self.score)


class TrackStore:
    """Owns the live tracks of one tracking session.

    Tracks are kept in a list in creation order. Association visits tracks in
    this order, so it must stay insertion-ordered.
    """

    def __init__(self) -> None:
        self._tracks: List[Track] = []
        self._next_id = 1

    def __len__(self) -> int:
        return len(self._tracks)

    def __iter__(self) -> Iterator[Track]:
        return iter(self._tracks)

    @property
    def next_id(self) -> int:
        return self._next_id

    def snapshot(self) -> Tuple[Track, ...]:
        return tuple(self._tracks)

    def allocate_id(self) -> str:
        track_id = str(self._next_id)
        self._next_id += 1
        return track_id

    def add(self, track: Track) -> None:
        self._tracks.append(track)

    def prune(self, now: float, expiry_window_ms: float) -> List[Track]:
        """Drop tracks unseen for at least ``expiry_window_ms``; return them."""
        kept: List[Track] = []
        expired: List[Track] = []
        for track in self._tracks:
            if track.age(now) >= expiry_window_ms:
                expired.append(track)
            else:
                kept.append(track)
        self._tracks = kept
        for track in expired:
            LOGGER.debug("Expired track %s (unseen for %.1f ms)", track.id, track.age(now))
        return expired

    def reset(self) -> None:
        """Forget every track and restart identifiers at 1."""
        if self._tracks:
            LOGGER.debug("Resetting track store with %d live tracks", len(self._tracks))
        self._tracks = []
        self._next_id = 1


def _box_values(box: BoundingBox) -> Dict[str, float]:
    return {"x": box.origin_x, "y": box.origin_y, "width": box.width, "height": box.height}
