"""Exception hierarchy for YubiGoblin.

Every leaf operation raises one of these with enough context (path, package
names, exit code, username) to log and display. The REST layer turns any
``YubiGoblinError`` into a 500 response and the CLI into exit status 1.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Optional

if TYPE_CHECKING:
    from .enroll.transaction import EnrollmentTransaction


class YubiGoblinError(Exception):
    """Base exception for YubiGoblin."""


# Package manager
class PackageError(YubiGoblinError):
    """Base exception for package manager operations."""


class ToolUnavailable(PackageError):
    """Raised when the dependency probing tools cannot be executed."""

    def __init__(self, tool: str, reason: str = ""):
        self.tool = tool
        message = f"Unable to run '{tool}'"
        super().__init__(f"{message}: {reason}" if reason else message)


class InstallFailed(PackageError):
    """Raised when refreshing the package index or installing fails."""

    def __init__(self, packages: Iterable[str], exit_code: int, step: str = "install"):
        self.packages = sorted(packages)
        self.exit_code = exit_code
        self.step = step
        super().__init__(f"Package {step} of {', '.join(self.packages)} failed with exit code {exit_code}")


class RemoveFailed(PackageError):
    """Raised when removing packages fails."""

    def __init__(self, packages: Iterable[str], exit_code: int):
        self.packages = sorted(packages)
        self.exit_code = exit_code
        super().__init__(f"Package removal of {', '.join(self.packages)} failed with exit code {exit_code}")


# Host state
class DeviceSubsystemUnavailable(YubiGoblinError):
    """Raised when the USB subsystem cannot be initialized."""


class AccountDatabaseUnreadable(YubiGoblinError):
    """Raised when the system account database cannot be read."""

    def __init__(self, path: Path, reason: str = ""):
        self.path = Path(path)
        super().__init__(f"Unable to read account database {self.path}: {reason}")


class IoError(YubiGoblinError):
    """Raised when a file read, write or copy fails."""

    def __init__(self, path: Path, action: str, reason: str = ""):
        self.path = Path(path)
        self.action = action
        super().__init__(f"Failed to {action} {self.path}: {reason}")


class NoBackupFound(YubiGoblinError):
    """Raised when a restore is attempted without a preceding backup."""

    def __init__(self, path: Path):
        self.path = Path(path)
        super().__init__(f"Backup file '{self.path}' does not exist, cannot restore.")


# Enrollment preconditions
class EnrollmentError(YubiGoblinError):
    """Base exception for enrollment preconditions."""

    def __init__(self, username: str, message: str):
        self.username = username
        super().__init__(message)


class AlreadyEnrolled(EnrollmentError):
    def __init__(self, username: str):
        super().__init__(username, f"YubiKey is installed already for user {username}")


class NotEnrolled(EnrollmentError):
    def __init__(self, username: str):
        super().__init__(username, f"YubiKey not installed for user {username}")


class UnknownUser(EnrollmentError):
    def __init__(self, username: str):
        super().__init__(username, f"User '{username}' does not exist on the system")


class NoTokenPresent(EnrollmentError):
    def __init__(self, username: str):
        super().__init__(username, "No YubiKeys detected on the system")


class MissingDependencies(EnrollmentError):
    def __init__(self, username: str, missing: Iterable[str]):
        self.missing = sorted(missing)
        super().__init__(username, f"Not all required dependencies are installed (missing: {', '.join(self.missing)})")


class KeygenFailed(EnrollmentError):
    def __init__(self, username: str, exit_code: int, stderr: str = ""):
        self.exit_code = exit_code
        self.stderr = stderr
        message = f"Key generator failed for user {username} with exit code {exit_code}"
        super().__init__(username, f"{message}: {stderr}" if stderr else message)


class EnrollmentStepError(YubiGoblinError):
    """Wraps a leaf failure with the enrollment step it happened in."""

    def __init__(self, step: str, cause: YubiGoblinError, transaction: Optional["EnrollmentTransaction"] = None):
        self.step = step
        self.cause = cause
        self.transaction = transaction
        super().__init__(f"{step}: {cause}")


# Runtime
class ConfigurationError(YubiGoblinError):
    """Raised when the loaded configuration fails validation."""

    def __init__(self, errors: Iterable[str]):
        self.errors = list(errors)
        super().__init__(f"Invalid configuration: {'; '.join(self.errors)}")


class LockUnavailable(YubiGoblinError):
    """Raised when the PAM mutation lock is held by another process."""

    def __init__(self, path: Path):
        self.path = Path(path)
        super().__init__(f"Another YubiGoblin operation holds {self.path}")


class PrivilegeError(YubiGoblinError):
    """Raised when root privileges are required but not available."""
