"""Configuration management for YubiGoblin.

This module provides the host-level paths and tool names the enrollment
engine works against, with environment variable overrides so the same code
runs against a scratch directory in tests.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from loguru import logger


@dataclass
class PamConfig:
    """Configuration for the PAM service files that get the marker line."""

    sudo_file: Path = field(default_factory=lambda: Path("/etc/pam.d/sudo"))
    login_file: Path = field(default_factory=lambda: Path("/etc/pam.d/gdm-password"))
    marker_line: str = "auth required pam_u2f.so"
    include_directive: str = "@include common-auth"
    backup_suffix: str = ".bak"

    @property
    def service_files(self) -> list[Path]:
        """PAM files in the order they are edited."""
        return [self.sudo_file, self.login_file]


@dataclass
class KeyStoreConfig:
    """Configuration for per-user key registration storage."""

    home_root: Path = field(default_factory=lambda: Path("/home"))
    vendor_dir: str = "Yubico"
    keys_filename: str = "u2f_keys"
    passwd_file: Path = field(default_factory=lambda: Path("/etc/passwd"))

    # Key generator
    keygen_command: list[str] = field(default_factory=lambda: ["pamu2fcfg", "-n"])


@dataclass
class DeviceConfig:
    """Configuration for authenticator detection."""

    vendor_id: int = 0x1050  # Yubico
    fallback_name: str = "YubiKey"


@dataclass
class PackageConfig:
    """Configuration for the OS package manager."""

    manager: str = "apt"
    driver_package: str = "libpam-u2f"
    keygen_package: str = "pamu2fcfg"

    @property
    def optional_packages(self) -> list[str]:
        """Packages installed for U2F support and removable again."""
        return [self.driver_package, self.keygen_package]


@dataclass
class ServerConfig:
    """Configuration for the local REST API."""

    host: str = "127.0.0.1"
    port: int = 55584
    lock_file: Path = field(default_factory=lambda: Path("/run/yubigoblin.lock"))


@dataclass
class LoggingConfig:
    """Configuration for loguru sinks."""

    level: str = "INFO"
    to_console: bool = True
    to_file: bool = False
    file_path: Path = field(default_factory=lambda: Path("/var/log/yubigoblin/yubigoblin.log"))
    rotation: str = "10 MB"
    retention: str = "14 days"


@dataclass
class YubiGoblinConfig:
    """Complete YubiGoblin configuration."""

    pam: PamConfig = field(default_factory=PamConfig)
    keys: KeyStoreConfig = field(default_factory=KeyStoreConfig)
    device: DeviceConfig = field(default_factory=DeviceConfig)
    packages: PackageConfig = field(default_factory=PackageConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def __post_init__(self):
        """Apply environment variable overrides."""
        self._apply_env_overrides()

    def _apply_env_overrides(self):
        """Apply configuration overrides from environment variables."""
        # PAM files
        if sudo_file := os.getenv("YUBIGOBLIN_PAM_SUDO_FILE"):
            self.pam.sudo_file = Path(sudo_file)

        if login_file := os.getenv("YUBIGOBLIN_PAM_LOGIN_FILE"):
            self.pam.login_file = Path(login_file)

        # Key storage
        if home_root := os.getenv("YUBIGOBLIN_HOME_ROOT"):
            self.keys.home_root = Path(home_root)

        if passwd_file := os.getenv("YUBIGOBLIN_PASSWD_FILE"):
            self.keys.passwd_file = Path(passwd_file)

        if keygen_command := os.getenv("YUBIGOBLIN_KEYGEN_COMMAND"):
            self.keys.keygen_command = keygen_command.split()

        # Server settings
        if host := os.getenv("YUBIGOBLIN_HOST"):
            self.server.host = host

        if port := os.getenv("YUBIGOBLIN_PORT"):
            try:
                self.server.port = int(port)
            except ValueError:
                logger.warning(f"Invalid port: {port}")

        if lock_file := os.getenv("YUBIGOBLIN_LOCK_FILE"):
            self.server.lock_file = Path(lock_file)

        # Logging
        if level := os.getenv("YUBIGOBLIN_LOG_LEVEL"):
            self.logging.level = level.upper()

        if log_file := os.getenv("YUBIGOBLIN_LOG_FILE"):
            self.logging.file_path = Path(log_file)
            self.logging.to_file = True

    def validate(self) -> tuple[bool, list[str]]:
        """Validate the configuration.

        Returns:
            Tuple of (is_valid, error_messages)
        """
        errors = []

        if not self.pam.marker_line.strip():
            errors.append("PAM marker line is required")

        if self.pam.sudo_file == self.pam.login_file:
            errors.append("PAM sudo and login files must differ")

        if not self.keys.keygen_command:
            errors.append("Key generator command is required")

        if not 0 < self.server.port < 65536:
            errors.append("Server port must be between 1 and 65535")

        if not 0 <= self.device.vendor_id <= 0xFFFF:
            errors.append("USB vendor id must be a 16-bit value")

        return len(errors) == 0, errors


class ConfigManager:
    """Manages YubiGoblin configuration."""

    def __init__(self):
        """Initialize configuration manager."""
        self._config: Optional[YubiGoblinConfig] = None

    def load_config(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        log_level: Optional[str] = None,
    ) -> YubiGoblinConfig:
        """Load configuration with optional overrides.

        Args:
            host: REST API bind address override
            port: REST API port override
            log_level: Log level override

        Returns:
            Configured YubiGoblinConfig instance
        """
        config = YubiGoblinConfig()

        if host:
            config.server.host = host

        if port:
            config.server.port = port

        if log_level:
            config.logging.level = log_level.upper()

        self._config = config
        return config

    def get_config(self) -> YubiGoblinConfig:
        """Get current configuration, loading defaults on first use."""
        if self._config is None:
            return self.load_config()
        return self._config

    def validate_config(self) -> tuple[bool, list[str]]:
        """Validate current configuration.

        Returns:
            Tuple of (is_valid, error_messages)
        """
        if not self._config:
            return False, ["No configuration loaded"]

        return self._config.validate()


# Global configuration manager instance
_config_manager = ConfigManager()


def get_config_manager() -> ConfigManager:
    """Get the global configuration manager."""
    return _config_manager


def get_current_config() -> YubiGoblinConfig:
    """Get the current configuration."""
    return _config_manager.get_config()
