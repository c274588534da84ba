"""
Configuration management for lockgraph.
"""

from .config_manager import (
    ConfigManager, AppConfig, ResolutionConfig, LoggingConfig,
    SUPPORTED_ECOSYSTEMS, get_config_manager, get_config, reset_config_manager
)

__all__ = [
    "ConfigManager",
    "AppConfig",
    "ResolutionConfig",
    "LoggingConfig",
    "SUPPORTED_ECOSYSTEMS",
    "get_config_manager",
    "get_config",
    "reset_config_manager"
]
