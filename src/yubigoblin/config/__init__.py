"""Configuration module for YubiGoblin."""

from .logger_config import setup_logging
from .settings import (
    ConfigManager,
    DeviceConfig,
    KeyStoreConfig,
    LoggingConfig,
    PackageConfig,
    PamConfig,
    ServerConfig,
    YubiGoblinConfig,
    get_config_manager,
    get_current_config,
)

__all__ = [
    "YubiGoblinConfig",
    "PamConfig",
    "KeyStoreConfig",
    "DeviceConfig",
    "PackageConfig",
    "ServerConfig",
    "LoggingConfig",
    "ConfigManager",
    "get_config_manager",
    "get_current_config",
    "setup_logging",
]
