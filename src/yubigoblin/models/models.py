"""Pydantic models for YubiGoblin data structures."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Dependencies(BaseModel):
    """Installed state of the packages U2F enrollment relies on."""

    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    apt: bool = Field(default=False, description="Set to true if apt is installed", examples=[True])
    libpam_u2f: bool = Field(default=False, alias="libpam-u2f", description="Set to true if libpam-u2f is installed", examples=[True])
    pamu2fcfg: bool = Field(default=False, description="Set to true if pamu2fcfg is installed", examples=[True])

    @property
    def all_present(self) -> bool:
        return self.apt and self.libpam_u2f and self.pamu2fcfg

    def missing(self) -> list[str]:
        """Names of the packages reported absent."""
        flags = {"apt": self.apt, "libpam-u2f": self.libpam_u2f, "pamu2fcfg": self.pamu2fcfg}
        return [name for name, present in flags.items() if not present]


class YubiKey(BaseModel):
    """An attached authenticator token, valid only for the moment it was read."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="A friendly name of the USB device", examples=["YubiKey OTP+FIDO+CCID"])
    usb_port: int = Field(..., description="The bus address the USB device is plugged into", examples=[4])


class ErrorMessage(BaseModel):
    """Error body returned by every failing endpoint."""

    message: str = Field(default="", description="Human readable error message")
    error: bool = Field(default=True, description="Always true for errors")


class SuccessMessage(BaseModel):
    message: str
    error: bool = False


class YubikeyInstallRequest(BaseModel):
    """Request body for enrolling a user."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    username: str = Field(..., min_length=1, description="The username to install the Yubikey for")


class ActionResponse(BaseModel):
    """Result of removing a user's key."""

    username: str = Field(..., description="The username the yubikey was removed for")
    removed: bool = Field(..., description="Whether the yubikey was successfully removed")


class YubikeyStatusResponse(BaseModel):
    """Enrollment status of a user."""

    username: str
    enrolled: bool
