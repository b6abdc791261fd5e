from diskcached.core.config.loader import load_app_config, load_config
from diskcached.core.config.models import DiskCacheConfig, LoggingConfig

__all__ = ["DiskCacheConfig", "LoggingConfig", "load_app_config", "load_config"]
