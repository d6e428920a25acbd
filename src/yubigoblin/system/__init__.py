"""Host-level leaves: packages, USB devices, accounts, PAM files and key files."""

from .commands import CommandResult, run_command
from .devices import DeviceEnumerator, UsbDeviceEnumerator
from .keys import KeyMaterialStore
from .packages import AptPackageAdapter, DependencyService, PackageAdapter
from .pam import PamFileEditor
from .users import PasswdUserDirectory, UserDirectory

__all__ = [
    "CommandResult",
    "run_command",
    "PackageAdapter",
    "AptPackageAdapter",
    "DependencyService",
    "DeviceEnumerator",
    "UsbDeviceEnumerator",
    "UserDirectory",
    "PasswdUserDirectory",
    "PamFileEditor",
    "KeyMaterialStore",
]
