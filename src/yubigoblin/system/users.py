"""Local account lookup."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Protocol

from loguru import logger

from ..config.settings import KeyStoreConfig
from ..errors import AccountDatabaseUnreadable

MIN_HUMAN_UID = 1000
DISABLED_SHELL_SUFFIXES = ("nologin", "false")


class UserDirectory(Protocol):
    def list_human_users(self) -> list[str]: ...

    def home_directory(self, username: str) -> Path: ...


class PasswdUserDirectory:
    """Reads human accounts from a passwd(5) formatted file."""

    def __init__(self, config: Optional[KeyStoreConfig] = None):
        self.config = config or KeyStoreConfig()

    def _entries(self) -> list[list[str]]:
        try:
            contents = self.config.passwd_file.read_text()
        except (OSError, UnicodeDecodeError) as e:
            raise AccountDatabaseUnreadable(self.config.passwd_file, str(e)) from e

        entries = []
        for line in contents.splitlines():
            parts = line.split(":")
            if len(parts) >= 7:
                entries.append(parts)
        return entries

    def list_human_users(self) -> list[str]:
        """List accounts with UID >= 1000 and a login shell."""
        users = []
        for parts in self._entries():
            name, uid_str, shell = parts[0], parts[2], parts[6]
            try:
                uid = int(uid_str)
            except ValueError:
                continue
            if uid >= MIN_HUMAN_UID and not shell.endswith(DISABLED_SHELL_SUFFIXES):
                users.append(name)

        logger.debug(f"Found {len(users)} human account(s)")
        return users

    def home_directory(self, username: str) -> Path:
        """Home directory from the account database, else ``<home_root>/<username>``."""
        for parts in self._entries():
            if parts[0] == username and parts[5]:
                return Path(parts[5])
        return self.config.home_root / username
