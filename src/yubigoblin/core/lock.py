"""Host-wide lock serializing PAM and package mutations."""

from __future__ import annotations

import fcntl
import os
import threading
from pathlib import Path
from typing import IO, Optional

from loguru import logger

from ..errors import IoError, LockUnavailable


class PamLock:
    """Exclusive ``flock`` on a lock file.

    Both PAM service files are shared by every user, so two enrollments for
    different users still need serializing. Threads of one process are
    serialized by an in-process mutex before the file lock is taken.
    """

    def __init__(self, path: Path, blocking: bool = True):
        self.path = Path(path)
        self.blocking = blocking
        self._mutex = threading.Lock()
        self._fh: Optional[IO[str]] = None

    def acquire(self) -> None:
        if not self._mutex.acquire(blocking=self.blocking):
            raise LockUnavailable(self.path)

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._fh = open(self.path, "w")
            os.chmod(self.path, 0o600)
        except OSError as e:
            self._mutex.release()
            raise IoError(self.path, "open lock file", str(e)) from e

        flags = fcntl.LOCK_EX if self.blocking else fcntl.LOCK_EX | fcntl.LOCK_NB
        try:
            fcntl.flock(self._fh, flags)
        except BlockingIOError as e:
            self._close()
            raise LockUnavailable(self.path) from e
        except OSError as e:
            self._close()
            raise IoError(self.path, "lock", str(e)) from e

        logger.debug(f"Acquired lock: {self.path}")

    def release(self) -> None:
        if self._fh is None:
            return
        fcntl.flock(self._fh, fcntl.LOCK_UN)
        self._close()
        logger.debug(f"Released lock: {self.path}")

    def _close(self) -> None:
        if self._fh is not None:
            self._fh.close()
            self._fh = None
        self._mutex.release()

    def __enter__(self) -> "PamLock":
        self.acquire()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()
