"""
Face Tracking Module.

Responsibilities:
- Persistent face ID assignment
- Greedy nearest-centroid association
- Per-coordinate Kalman smoothing
- Track expiry
"""

from .associate import AssociationResult, greedy_associate
from .config import TrackerConfig
from .driver import FrameDriver
from .lifecycle import FaceTracker
from .smoother import AxisNoise, KalmanState
from .store import Track, TrackStore
