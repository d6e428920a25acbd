"""Backup, edit and restore of PAM service configuration files."""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Optional

from loguru import logger

from ..config.settings import PamConfig
from ..errors import IoError, NoBackupFound


class PamFileEditor:
    """Line-level editor for files under ``/etc/pam.d``."""

    def __init__(self, config: Optional[PamConfig] = None):
        self.config = config or PamConfig()

    def backup_path(self, path: Path) -> Path:
        path = Path(path)
        return path.with_name(path.name + self.config.backup_suffix)

    def backup(self, path: Path) -> Path:
        """Copy ``path`` to ``<path>.bak``, overwriting any earlier backup."""
        path = Path(path)
        backup = self.backup_path(path)
        try:
            shutil.copy2(path, backup)
        except OSError as e:
            raise IoError(path, "back up", str(e)) from e

        logger.info(f"Backed up {path} to {backup}")
        return backup

    def restore(self, path: Path) -> None:
        """Copy ``<path>.bak`` back over ``path`` and discard the backup."""
        path = Path(path)
        backup = self.backup_path(path)
        if not backup.exists():
            raise NoBackupFound(backup)

        try:
            shutil.copyfile(backup, path)
            backup.unlink()
        except OSError as e:
            raise IoError(path, "restore", str(e)) from e

        logger.info(f"Restored {path} from {backup}")

    def read(self, path: Path) -> str:
        path = Path(path)
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise IoError(path, "read", str(e)) from e

    def contains_line(self, path: Path, marker: str) -> bool:
        return marker in self.read(path)

    def ensure_line_inserted(self, path: Path, marker: str) -> bool:
        """Insert ``marker`` ahead of the common-auth include.

        Nothing is written when the marker is already present. Without an
        include directive the marker goes on the first line. Returns whether
        the file changed.
        """
        path = Path(path)
        content = self.read(path)
        if marker in content:
            logger.debug(f"{path} already contains '{marker}'")
            return False

        lines = content.split("\n")
        if lines[-1] == "":
            lines.pop()
        insert_index = 0
        for i, line in enumerate(lines):
            if self.config.include_directive in line:
                insert_index = i
                break
        lines.insert(insert_index, marker)

        try:
            with open(path, "w", encoding="utf-8") as f:
                for line in lines:
                    f.write(f"{line}\n")
        except OSError as e:
            raise IoError(path, "write", str(e)) from e

        logger.info(f"Inserted '{marker}' into {path} at line {insert_index + 1}")
        return True
