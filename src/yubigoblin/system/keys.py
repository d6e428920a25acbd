"""Per-user U2F key registration storage.

This module handles:
- Creating the ``~/.config/Yubico`` directory for a user
- Appending key registrations produced by the key generator
- Keeping the registration file readable by its owner only
- Removing the registration and pruning the emptied directory
"""

from __future__ import annotations

import os
import stat
from pathlib import Path
from typing import Callable, Optional

from loguru import logger

from ..config.settings import KeyStoreConfig
from ..errors import IoError


class KeyMaterialStore:
    """Storage for ``u2f_keys`` registration files."""

    def __init__(self, config: Optional[KeyStoreConfig] = None, home_resolver: Optional[Callable[[str], Path]] = None):
        """Initialize key store.

        Args:
            config: Key storage configuration
            home_resolver: Maps a username to its home directory (defaults to
                ``<home_root>/<username>``)
        """
        self.config = config or KeyStoreConfig()
        self._home_resolver = home_resolver or (lambda username: self.config.home_root / username)

    def home_directory(self, username: str) -> Path:
        return Path(self._home_resolver(username))

    def config_dir(self, username: str) -> Path:
        return self.home_directory(username) / ".config" / self.config.vendor_dir

    def registration_path(self, username: str) -> Path:
        return self.config_dir(username) / self.config.keys_filename

    def ensure_user_config_dir(self, username: str) -> Path:
        config_dir = self.config_dir(username)
        try:
            config_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise IoError(config_dir, "create directory", str(e)) from e
        return config_dir

    def append_registration(self, username: str, data: bytes) -> Path:
        """Append ``data`` to the user's registration file and chmod it 0600."""
        keys_path = self.registration_path(username)
        try:
            with open(keys_path, "ab") as f:
                f.write(data)

            # Set secure permissions (owner read/write only)
            os.chmod(keys_path, stat.S_IRUSR | stat.S_IWUSR)
        except OSError as e:
            raise IoError(keys_path, "write", str(e)) from e

        logger.info(f"Stored key registration for {username} in {keys_path}")
        return keys_path

    def delete_registration(self, username: str) -> None:
        """Remove the registration file and its directory if nothing else is left."""
        keys_path = self.registration_path(username)
        config_dir = keys_path.parent

        try:
            keys_path.unlink()
            logger.info(f"Removed key registration {keys_path}")
        except FileNotFoundError:
            pass
        except OSError as e:
            raise IoError(keys_path, "remove", str(e)) from e

        try:
            if config_dir.is_dir() and not any(config_dir.iterdir()):
                config_dir.rmdir()
                logger.debug(f"Removed empty directory {config_dir}")
        except FileNotFoundError:
            pass
        except OSError as e:
            raise IoError(config_dir, "remove directory", str(e)) from e

    def registration_exists(self, username: str) -> bool:
        return self.registration_path(username).exists()
