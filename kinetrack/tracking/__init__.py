"""
Tracking module: per-subject track state.
Combines lag-based velocity, a Kalman filter and dead-reckoning during missed detections.
"""

from .estimator import RecursiveEstimator
from .kalman_filter import KalmanEstimator
from .history import LineHistory, SampleHistory, TrackSample
from .track import Track

__all__ = ['RecursiveEstimator', 'KalmanEstimator', 'LineHistory', 'SampleHistory', 'TrackSample', 'Track']
