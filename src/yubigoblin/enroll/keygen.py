"""Runs the external U2F key registration generator."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional, Protocol

from loguru import logger

from ..config.settings import KeyStoreConfig
from ..errors import KeygenFailed
from ..system.commands import CommandRunner, run_command


class KeyGenerator(Protocol):
    def generate(self, username: str, home: Path) -> bytes: ...


class Pamu2fcfgGenerator:
    """Invokes ``pamu2fcfg -n`` with ``HOME`` pointed at the target user.

    The tool blocks until the key is touched and prints the registration
    line on stdout.
    """

    def __init__(self, config: Optional[KeyStoreConfig] = None, runner: CommandRunner = run_command):
        self.config = config or KeyStoreConfig()
        self._run = runner

    def generate(self, username: str, home: Path) -> bytes:
        env = dict(os.environ)
        env["HOME"] = str(home)

        logger.info(f"Touch the YubiKey to register it for {username}")
        result = self._run(self.config.keygen_command, env=env)
        if not result.ok:
            raise KeygenFailed(username, result.returncode, result.stderr_text())

        return result.stdout
