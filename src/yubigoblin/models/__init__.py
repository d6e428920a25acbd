"""Models package."""

from .models import ActionResponse, Dependencies, ErrorMessage, SuccessMessage, YubiKey, YubikeyInstallRequest, YubikeyStatusResponse

__all__ = [
    "Dependencies",
    "YubiKey",
    "ErrorMessage",
    "SuccessMessage",
    "YubikeyInstallRequest",
    "ActionResponse",
    "YubikeyStatusResponse",
]
