"""REST routes."""

from .dependencies import router as dependencies_router
from .users import router as users_router
from .yubikey import router as yubikey_router

__all__ = ["dependencies_router", "users_router", "yubikey_router"]
