from .config_loader import load_config, merge_configs
from .tracking_config import TrackingConfig, load_tracking_config
from .logging_setup import setup_logging

__all__ = ['load_config', 'merge_configs', 'TrackingConfig', 'load_tracking_config', 'setup_logging']
