"""OS package management for the U2F PAM module and its key generator.

The engine only talks to the ``PackageAdapter`` protocol, so a different
package ecosystem can be plugged in by providing the same three
capabilities: check, install and remove.
"""

from __future__ import annotations

from typing import Iterable, Optional, Protocol

from loguru import logger

from ..config.settings import PackageConfig
from ..errors import InstallFailed, RemoveFailed, ToolUnavailable
from ..models import Dependencies
from .commands import CommandRunner, run_command


class PackageAdapter(Protocol):
    """Capability set the enrollment engine needs from a package manager."""

    def check_dependencies(self) -> Dependencies: ...

    def install_packages(self, names: Iterable[str]) -> None: ...

    def remove_packages(self, names: Iterable[str]) -> None: ...


class AptPackageAdapter:
    """Package adapter backed by ``apt`` and ``dpkg``."""

    def __init__(self, config: Optional[PackageConfig] = None, runner: CommandRunner = run_command):
        self.config = config or PackageConfig()
        self._run = runner

    def is_manager_available(self) -> bool:
        """Check if the package manager is on PATH using ``which``."""
        result = self._run(["which", self.config.manager], capture=False)
        if result.not_found:
            raise ToolUnavailable("which", result.stderr_text())
        return result.ok

    def is_package_installed(self, package: str) -> bool:
        """Check if ``package`` is installed using ``dpkg -s``."""
        result = self._run(["dpkg", "-s", package], capture=False)
        if result.not_found:
            raise ToolUnavailable("dpkg", result.stderr_text())
        return result.ok

    def check_dependencies(self) -> Dependencies:
        deps = Dependencies(
            apt=self.is_manager_available(),
            libpam_u2f=self.is_package_installed(self.config.driver_package),
            pamu2fcfg=self.is_package_installed(self.config.keygen_package),
        )
        logger.debug(f"Dependency state: {deps.model_dump(by_alias=True)}")
        return deps

    def install_packages(self, names: Iterable[str]) -> None:
        """Refresh the package index, then install ``names``.

        A failed refresh aborts before anything is installed.
        """
        packages = sorted(set(names))
        if not packages:
            return

        logger.info(f"Refreshing package index with {self.config.manager} update")
        result = self._run([self.config.manager, "update"])
        if not result.ok:
            logger.error(f"`{self.config.manager} update` failed: {result.stderr_text()}")
            raise InstallFailed(packages, result.returncode, step="index refresh")

        logger.info(f"Installing packages: {', '.join(packages)}")
        result = self._run([self.config.manager, "install", "-y", *packages])
        if not result.ok:
            logger.error(f"`{self.config.manager} install` failed: {result.stderr_text()}")
            raise InstallFailed(packages, result.returncode)

    def remove_packages(self, names: Iterable[str]) -> None:
        packages = sorted(set(names))
        if not packages:
            return

        logger.info(f"Removing packages: {', '.join(packages)}")
        result = self._run([self.config.manager, "remove", "-y", *packages])
        if not result.ok:
            logger.error(f"`{self.config.manager} remove` failed: {result.stderr_text()}")
            raise RemoveFailed(packages, result.returncode)


class DependencyService:
    """Reconciles the installed packages with a desired ``Dependencies`` state."""

    def __init__(self, adapter: PackageAdapter, config: Optional[PackageConfig] = None):
        self.adapter = adapter
        self.config = config or PackageConfig()

    def current(self) -> Dependencies:
        return self.adapter.check_dependencies()

    def install_desired(self, desired: Dependencies) -> Dependencies:
        """Install every package that is wanted and currently absent.

        Returns the dependency state after the install attempt.
        """
        current = self.adapter.check_dependencies()
        wanted = [
            (desired.apt, current.apt, self.config.manager),
            (desired.libpam_u2f, current.libpam_u2f, self.config.driver_package),
            (desired.pamu2fcfg, current.pamu2fcfg, self.config.keygen_package),
        ]
        to_install = [pkg for want, have, pkg in wanted if want and not have]

        if not to_install:
            logger.debug("No packages need installation")
            return current

        self.adapter.install_packages(to_install)
        return self.adapter.check_dependencies()

    def remove_optional(self) -> Dependencies:
        """Remove the U2F packages that are installed.

        Returns the dependency state after the removal attempt.
        """
        current = self.adapter.check_dependencies()
        to_remove = []
        if current.libpam_u2f:
            to_remove.append(self.config.driver_package)
        if current.pamu2fcfg:
            to_remove.append(self.config.keygen_package)

        if not to_remove:
            logger.debug("No packages need removal")
            return current

        self.adapter.remove_packages(to_remove)
        return self.adapter.check_dependencies()
