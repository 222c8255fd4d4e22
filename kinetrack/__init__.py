"""
kinetrack
Per-subject kinematic track state for multi-object visual tracking.
"""

from .tracking import Track, KalmanEstimator, RecursiveEstimator
from .utils import TrackingConfig, load_tracking_config

__version__ = '1.0.0'

__all__ = ['Track', 'KalmanEstimator', 'RecursiveEstimator', 'TrackingConfig', 'load_tracking_config']
