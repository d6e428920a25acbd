"""Root privilege checks for the mutating commands."""

from __future__ import annotations

import os
import shlex
import subprocess
import sys
from typing import Optional, Sequence

from loguru import logger

from ..errors import PrivilegeError


def is_root() -> bool:
    return os.geteuid() == 0


def elevate_with_pkexec(argv: Optional[Sequence[str]] = None) -> int:
    """Re-run this program as root through ``pkexec`` and return its exit status.

    ``DISPLAY`` and ``XAUTHORITY`` are passed through so a polkit agent can
    prompt on the current session.
    """
    args = list(argv if argv is not None else sys.argv[1:])
    display = os.environ.get("DISPLAY", "")
    xauthority = os.environ.get("XAUTHORITY", "")

    command_line = " ".join(
        [
            f"DISPLAY={shlex.quote(display)}",
            f"XAUTHORITY={shlex.quote(xauthority)}",
            shlex.quote(sys.executable),
            "-m",
            "yubigoblin",
            *(shlex.quote(a) for a in args),
        ]
    )

    logger.info("Requesting root privileges via pkexec")
    try:
        proc = subprocess.run(["pkexec", "bash", "-c", command_line], check=False)
    except FileNotFoundError as e:
        raise PrivilegeError(f"Failed to start pkexec: {e}") from e

    if proc.returncode != 0:
        logger.error(f"Failed to acquire root privileges via pkexec. Status: {proc.returncode}")
    return proc.returncode
