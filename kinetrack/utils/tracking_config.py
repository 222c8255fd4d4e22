import logging
from dataclasses import dataclass, fields
from typing import Any, Dict, Optional

from .config_loader import load_config, merge_configs

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = 'configs/tracking_config.yml'


@dataclass
class TrackingConfig:
    """Tuning values shared by every Track of a tracking session."""

    default_cost: float = 50.0
    max_frames_predict: int = 30        # ~1 second at 30 fps
    max_velocity: float = 80.0
    line_history_size: int = 72
    sample_history_size: Optional[int] = None
    velocity_lag: int = 3
    displacement_threshold: float = 10.0
    predict_with_velocity: bool = True
    debug: bool = False
    process_noise: float = 0.01
    measurement_noise: float = 5.0
    filter_dt: Optional[float] = None    # None: taken from the first update's dt

    def __post_init__(self):
        if self.max_frames_predict <= 0:
            raise ValueError(f"max_frames_predict must be positive, got {self.max_frames_predict}")
        if self.velocity_lag <= 0:
            raise ValueError(f"velocity_lag must be positive, got {self.velocity_lag}")
        if self.line_history_size <= self.velocity_lag:
            raise ValueError(
                f"line_history_size ({self.line_history_size}) must exceed velocity_lag ({self.velocity_lag})"
            )
        if self.sample_history_size is not None and self.sample_history_size <= 0:
            raise ValueError(f"sample_history_size must be positive or null, got {self.sample_history_size}")
        if self.max_velocity < 0:
            raise ValueError(f"max_velocity must be non-negative, got {self.max_velocity}")
        if self.filter_dt is not None and self.filter_dt <= 0:
            raise ValueError(f"filter_dt must be positive or null, got {self.filter_dt}")

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> 'TrackingConfig':
        section = config.get('tracking', config) if config else {}
        if section is None:
            section = {}
        if not isinstance(section, dict):
            raise ValueError(f"Tracking config section must be a mapping, got {type(section).__name__}")
        known = {f.name for f in fields(cls)}

        unknown = sorted(set(section) - known)
        if unknown:
            logger.warning(f"Ignoring unknown tracking config keys: {', '.join(unknown)}")

        return cls(**{k: v for k, v in section.items() if k in known})


def load_tracking_config(*config_paths: str) -> TrackingConfig:
    paths = config_paths or (DEFAULT_CONFIG_PATH,)
    config = merge_configs(*(load_config(p) for p in paths))
    logger.info(f"Tracking config loaded from {', '.join(paths)}")
    return TrackingConfig.from_dict(config)
