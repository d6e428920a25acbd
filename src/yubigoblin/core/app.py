"""Wiring of the default host adapters into one application object."""

from __future__ import annotations

from typing import Optional

from loguru import logger

from ..config import YubiGoblinConfig, get_current_config
from ..enroll import EnrollmentEngine, KeyGenerator, Pamu2fcfgGenerator
from ..errors import ConfigurationError
from ..system import (
    AptPackageAdapter,
    DependencyService,
    DeviceEnumerator,
    PackageAdapter,
    PasswdUserDirectory,
    UsbDeviceEnumerator,
    UserDirectory,
)
from .lock import PamLock


class YubiGoblinApp:
    """Holds the engine, the dependency service and the mutation lock.

    Every collaborator can be swapped for tests or for another package
    ecosystem; anything left out gets the host default.
    """

    def __init__(
        self,
        config: Optional[YubiGoblinConfig] = None,
        packages: Optional[PackageAdapter] = None,
        devices: Optional[DeviceEnumerator] = None,
        users: Optional[UserDirectory] = None,
        keygen: Optional[KeyGenerator] = None,
        lock: Optional[PamLock] = None,
    ):
        self.config = config or get_current_config()

        is_valid, errors = self.config.validate()
        if not is_valid:
            raise ConfigurationError(errors)

        self.packages = packages or AptPackageAdapter(self.config.packages)
        self.devices = devices or UsbDeviceEnumerator(self.config.device)
        self.users = users or PasswdUserDirectory(self.config.keys)
        self.keygen = keygen or Pamu2fcfgGenerator(self.config.keys)
        self.lock = lock or PamLock(self.config.server.lock_file)

        self.engine = EnrollmentEngine(
            self.config,
            packages=self.packages,
            devices=self.devices,
            users=self.users,
            keygen=self.keygen,
        )
        self.dependencies = DependencyService(self.packages, self.config.packages)

        logger.debug("Initialized YubiGoblin application")


def create_app_context(config: Optional[YubiGoblinConfig] = None, **kwargs) -> YubiGoblinApp:
    """Create a YubiGoblin application with host defaults.

    Args:
        config: Configuration to use (defaults to the global configuration)
        **kwargs: Collaborator overrides for YubiGoblinApp

    Returns:
        Configured application
    """
    return YubiGoblinApp(config=config, **kwargs)
