"""Core YubiGoblin components - application wiring, locking and privileges."""

from .app import YubiGoblinApp, create_app_context
from .lock import PamLock
from .privileges import elevate_with_pkexec, is_root

__all__ = [
    "YubiGoblinApp",
    "create_app_context",
    "PamLock",
    "is_root",
    "elevate_with_pkexec",
]
