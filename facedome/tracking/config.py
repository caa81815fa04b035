"""Tracker configuration and YAML loading."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from facedome.io_utils import load_yaml
from facedome.tracking.smoother import AxisNoise

LOGGER = logging.getLogger("facedome.tracking.config")

AXES = ("x", "y", "width", "height")

# Accepted aliases for axis keys in config files.
_AXIS_ALIASES = {"w": "width", "h": "height"}


def default_axis_noise() -> Dict[str, AxisNoise]:
    position = AxisNoise(process_noise=2.0, measurement_noise=15.0)
    size = AxisNoise(process_noise=1.0, measurement_noise=15.0)
    return {"x": position, "y": position, "width": size, "height": size}


@dataclass(frozen=True)
class TrackerConfig:
    expiry_window_ms: float = 500.0
    match_factor: float = 1.5
    axis_noise: Dict[str, AxisNoise] = field(default_factory=default_axis_noise)

    def __post_init__(self) -> None:
        if not self.expiry_window_ms > 0:
            raise ValueError(f"expiry_window_ms must be > 0, got {self.expiry_window_ms!r}")
        if not self.match_factor > 0:
            raise ValueError(f"match_factor must be > 0, got {self.match_factor!r}")
        missing = [axis for axis in AXES if axis not in self.axis_noise]
        if missing:
            raise ValueError(f"axis_noise is missing axes: {missing}")

    def noise_for(self, axis: str) -> AxisNoise:
        return self.axis_noise[axis]

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "TrackerConfig":
        """Merge a config mapping over the defaults.

        ``axis_noise`` may set any subset of axes, each with any subset of
        ``process_noise`` / ``measurement_noise``; the remainder keep their
        defaults.
        """
        data = dict(data or {})
        config = cls()
        axis_noise = dict(config.axis_noise)
        for raw_axis, values in (data.pop("axis_noise", None) or {}).items():
            axis = _AXIS_ALIASES.get(raw_axis, raw_axis)
            if axis not in AXES:
                raise ValueError(f"Unknown axis {raw_axis!r}; expected one of {AXES}")
            current = axis_noise[axis]
            values = values or {}
            axis_noise[axis] = AxisNoise(
                process_noise=float(values.get("process_noise", current.process_noise)),
                measurement_noise=float(values.get("measurement_noise", current.measurement_noise)),
            )

        overrides: Dict[str, Any] = {"axis_noise": axis_noise}
        for key in ("expiry_window_ms", "match_factor"):
            if data.get(key) is not None:
                overrides[key] = float(data.pop(key))
            else:
                data.pop(key, None)
        if data:
            LOGGER.warning("Ignoring unknown tracker config keys: %s", sorted(data))
        return replace(config, **overrides)

    @classmethod
    def from_yaml(cls, path: Path, section: Optional[str] = "tracker") -> "TrackerConfig":
        """Load the tracker settings from ``path`` (optionally a sub-section)."""
        raw = load_yaml(path)
        if section is not None:
            raw = raw.get(section) or {}
        config = cls.from_dict(raw)
        LOGGER.info(
            "Loaded tracker config %s expiry_window_ms=%.1f match_factor=%.2f",
            path,
            config.expiry_window_ms,
            config.match_factor,
        )
        return config
