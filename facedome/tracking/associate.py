"""Greedy nearest-centroid association of detections to live tracks."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

import numpy as np

from facedome.tracking.store import Track
from facedome.types import Detection


@dataclass
class AssociationResult:
    matches: List[Tuple[Track, int]] = field(default_factory=list)
    unmatched_tracks: List[Track] = field(default_factory=list)
    unmatched_detections: List[int] = field(default_factory=list)


def greedy_associate(
    tracks: Sequence[Track],
    detections: Sequence[Detection],
    match_factor: float = 1.5,
) -> AssociationResult:
    """Pair each track with at most one detection, visiting tracks in order.

    For each track the candidate detections are those not yet claimed whose
    centroid lies strictly closer than ``max(track width, detection width) *
    match_factor``; the closest candidate wins, the lowest index on ties.

    This is track-major greedy matching, not an optimal assignment: an
    earlier track can take a detection that a later track was closer to.
    Well-separated faces are unaffected; faces closer than about a box width
    apart can swap identities.
    """
    result = AssociationResult()
    if not detections:
        result.unmatched_tracks.extend(tracks)
        return result

    centroids = np.array([det.bbox.centroid for det in detections], dtype=np.float64)
    widths = np.array([det.bbox.width for det in detections], dtype=np.float64)
    claimed = np.zeros(len(detections), dtype=bool)

    for track in tracks:
        tx, ty = track.current_box.centroid
        distances = np.hypot(centroids[:, 0] - tx, centroids[:, 1] - ty)
        thresholds = np.maximum(widths, track.current_box.width) * match_factor
        candidates = ~claimed & (distances < thresholds)
        if not candidates.any():
            result.unmatched_tracks.append(track)
            continue
        best_idx = int(np.argmin(np.where(candidates, distances, np.inf)))
        claimed[best_idx] = True
        result.matches.append((track, best_idx))

    result.unmatched_detections.extend(int(idx) for idx in np.flatnonzero(~claimed))
    return result
