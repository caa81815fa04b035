"""One-dimensional Kalman smoothing for a single box coordinate."""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Tuple

INITIAL_ERROR_COVARIANCE = 1.0


def _check_noise(process_noise: float, measurement_noise: float) -> None:
    if not (math.isfinite(process_noise) and process_noise > 0):
        raise ValueError(f"process_noise must be finite and > 0, got {process_noise!r}")
    if not (math.isfinite(measurement_noise) and measurement_noise > 0):
        raise ValueError(f"measurement_noise must be finite and > 0, got {measurement_noise!r}")


@dataclass(frozen=True)
class AxisNoise:
    """Tuning pair for one tracked axis.

    Higher ``process_noise`` makes the axis more reactive; higher
    ``measurement_noise`` makes it smoother at the cost of lag.
    """

    process_noise: float
    measurement_noise: float

    def __post_init__(self) -> None:
        _check_noise(self.process_noise, self.measurement_noise)


@dataclass(frozen=True)
class KalmanState:
    """Immutable state of a constant-position scalar Kalman filter."""

    estimate: float
    error_covariance: float
    process_noise: float
    measurement_noise: float
    gain: float = 0.0

    def __post_init__(self) -> None:
        _check_noise(self.process_noise, self.measurement_noise)
        if not self.error_covariance >= 0:
            raise ValueError(f"error_covariance must be >= 0, got {self.error_covariance!r}")

    @classmethod
    def seed(cls, measurement: float, noise: AxisNoise) -> "KalmanState":
        """Start a filter at ``measurement`` and run one warm-up correction.

        The estimate starts at the first observation rather than zero, and the
        extra update with the same value lets the covariance settle before the
        filter's output is used.
        """
        state = cls(
            estimate=float(measurement),
            error_covariance=INITIAL_ERROR_COVARIANCE,
            process_noise=noise.process_noise,
            measurement_noise=noise.measurement_noise,
        )
        state, _ = state.update(measurement)
        return state

    def update(self, measurement: float) -> Tuple["KalmanState", float]:
        """Apply one predict/correct cycle and return ``(new_state, estimate)``."""
        covariance = self.error_covariance + self.process_noise
        gain = covariance / (covariance + self.measurement_noise)
        estimate = self.estimate + gain * (float(measurement) - self.estimate)
        covariance = (1.0 - gain) * covariance
        new_state = replace(self, estimate=estimate, error_covariance=covariance, gain=gain)
        return new_state, estimate
