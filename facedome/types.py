"""Common dataclasses and type aliases used across the facedome package."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple

Point = Tuple[float, float]

# Accepted spellings for each box field in loosely-typed detector payloads.
_BOX_KEYS = {
    "origin_x": ("originX", "origin_x", "x"),
    "origin_y": ("originY", "origin_y", "y"),
    "width": ("width", "w"),
    "height": ("height", "h"),
}


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned box in video pixel coordinates, top-left origin."""

    origin_x: float = 0.0
    origin_y: float = 0.0
    width: float = 0.0
    height: float = 0.0

    @property
    def centroid(self) -> Point:
        return self.origin_x + self.width / 2.0, self.origin_y + self.height / 2.0

    @classmethod
    def from_xyxy(cls, x1: float, y1: float, x2: float, y2: float) -> "BoundingBox":
        return cls(
            origin_x=float(x1),
            origin_y=float(y1),
            width=max(0.0, float(x2) - float(x1)),
            height=max(0.0, float(y2) - float(y1)),
        )

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "BoundingBox":
        """Build a box from a detector payload, treating missing fields as zero."""
        data = data or {}
        values = {field: _first_number(data, keys) for field, keys in _BOX_KEYS.items()}
        return cls(
            origin_x=values["origin_x"],
            origin_y=values["origin_y"],
            width=max(0.0, values["width"]),
            height=max(0.0, values["height"]),
        )

    def to_dict(self) -> Dict[str, float]:
        return {
            "originX": self.origin_x,
            "originY": self.origin_y,
            "width": self.width,
            "height": self.height,
        }


@dataclass(frozen=True)
class Detection:
    """One raw face detection for a single frame."""

    bbox: BoundingBox
    score: float = 0.0

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "Detection":
        """Normalise a raw detector record.

        Accepts either ``{"boundingBox": {...}, "score": s}`` or a flat mapping
        carrying the box fields directly. Anything missing becomes ``0``.
        """
        data = data or {}
        box_data = data.get("boundingBox", data.get("bbox", data.get("box")))
        if not isinstance(box_data, Mapping):
            box_data = data
        return cls(bbox=BoundingBox.from_mapping(box_data), score=_as_float(data.get("score")))

    def normalized(self) -> "Detection":
        """Return a copy with NaN or non-numeric fields set to zero and negative sizes clamped."""
        box = self.bbox
        clean = BoundingBox(
            origin_x=_as_float(box.origin_x),
            origin_y=_as_float(box.origin_y),
            width=max(0.0, _as_float(box.width)),
            height=max(0.0, _as_float(box.height)),
        )
        score = _as_float(self.score)
        if clean == box and score == self.score:
            return self
        return Detection(bbox=clean, score=score)


@dataclass(frozen=True)
class TrackedFace:
    """A face emitted by the tracker for one frame."""

    id: str
    bounding_box: BoundingBox
    score: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "boundingBox": self.bounding_box.to_dict(),
            "score": self.score,
        }


def _as_float(value: Any) -> float:
    if value is None:
        return 0.0
    try:
        result = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(result):
        return 0.0
    return result


def _first_number(data: Mapping[str, Any], keys: Tuple[str, ...]) -> float:
    for key in keys:
        if key in data:
            return _as_float(data[key])
    return 0.0
