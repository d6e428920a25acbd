"""Detection of attached authenticator tokens over USB."""

from __future__ import annotations

import errno
from typing import Any, Callable, Iterable, Optional, Protocol

import usb.core
import usb.util
from loguru import logger

from ..config.settings import DeviceConfig
from ..errors import DeviceSubsystemUnavailable
from ..models import YubiKey

# Errors that mean the device itself could not be opened.
_OPEN_ERRNOS = {errno.EACCES, errno.EPERM, errno.ENODEV, errno.EBUSY, errno.ENOENT}


class DeviceEnumerator(Protocol):
    def list_auth_tokens(self) -> list[YubiKey]: ...


class UsbDeviceEnumerator:
    """Lists USB devices from the authenticator vendor.

    Each call returns a new snapshot; bus addresses change across
    reconnects so a ``YubiKey`` must never be used as a durable key.
    """

    def __init__(self, config: Optional[DeviceConfig] = None, finder: Callable[..., Iterable[Any]] = usb.core.find):
        self.config = config or DeviceConfig()
        self._find = finder

    def list_auth_tokens(self) -> list[YubiKey]:
        try:
            devices = list(self._find(find_all=True, idVendor=self.config.vendor_id))
        except usb.core.NoBackendError as e:
            raise DeviceSubsystemUnavailable(f"Failed to initialize USB context: {e}") from e
        except usb.core.USBError as e:
            raise DeviceSubsystemUnavailable(f"Failed to list USB devices: {e}") from e

        found = []
        for device in devices:
            name = self._product_name(device)
            if name is None:
                continue
            found.append(YubiKey(name=name, usb_port=int(device.address)))

        logger.debug(f"Found {len(found)} authenticator(s)")
        return found

    def _product_name(self, device: Any) -> Optional[str]:
        """Read the product string, or ``None`` if the device can't be opened."""
        if not getattr(device, "iProduct", 0):
            return self.config.fallback_name

        try:
            product = usb.util.get_string(device, device.iProduct)
        except usb.core.USBError as e:
            if e.errno in _OPEN_ERRNOS:
                logger.warning(f"Skipping USB device at address {device.address}: {e}")
                return None
            return self.config.fallback_name
        except (ValueError, NotImplementedError):
            return self.config.fallback_name

        return product or self.config.fallback_name
