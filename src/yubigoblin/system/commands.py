"""Child process execution shared by the package adapter and key generator."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from typing import Mapping, Optional, Protocol, Sequence

from loguru import logger

COMMAND_NOT_FOUND = 127


@dataclass
class CommandResult:
    """Outcome of a finished child process."""

    args: list[str]
    returncode: int
    stdout: bytes = b""
    stderr: bytes = b""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def not_found(self) -> bool:
        return self.returncode == COMMAND_NOT_FOUND

    def stderr_text(self) -> str:
        return self.stderr.decode(errors="replace").strip()


class CommandRunner(Protocol):
    """Anything that can run a command and report its outcome."""

    def __call__(self, args: Sequence[str], env: Optional[Mapping[str, str]] = None, capture: bool = True) -> CommandResult: ...


def run_command(args: Sequence[str], env: Optional[Mapping[str, str]] = None, capture: bool = True) -> CommandResult:
    """Run ``args`` to completion and capture its output.

    A missing executable is reported as exit code 127 instead of raising,
    the same way a shell would.
    """
    argv = list(args)
    logger.debug(f"Running {' '.join(argv)}")
    try:
        proc = subprocess.run(
            argv,
            env=dict(env) if env is not None else None,
            stdout=subprocess.PIPE if capture else subprocess.DEVNULL,
            stderr=subprocess.PIPE if capture else subprocess.DEVNULL,
            check=False,
        )
    except FileNotFoundError as e:
        return CommandResult(argv, COMMAND_NOT_FOUND, b"", str(e).encode())
    except PermissionError as e:
        return CommandResult(argv, 126, b"", str(e).encode())

    return CommandResult(argv, proc.returncode, proc.stdout or b"", proc.stderr or b"")
