"""Per-operation record of what an enrollment or revocation has done so far."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional


class Operation(Enum):
    ENROLL = "enroll"
    REVOKE = "revoke"


class Step(Enum):
    """Mutating steps, in the order they run."""

    CONFIG_DIR = "ensure config directory"
    KEYGEN = "generate key registration"
    STORE_REGISTRATION = "store key registration"
    BACKUP_PAM = "back up PAM file"
    EDIT_PAM = "insert PAM marker"
    RESTORE_PAM = "restore PAM file"
    DELETE_REGISTRATION = "delete key registration"


@dataclass
class EnrollmentTransaction:
    """Tracks the steps of one ``enroll``/``revoke`` call.

    Nothing here is persisted. On failure the transaction travels with the
    raised ``EnrollmentStepError`` so the caller can see how far it got.
    """

    operation: Operation
    username: str
    started_at: datetime = field(default_factory=datetime.now)
    completed: list[tuple[Step, Optional[Path]]] = field(default_factory=list)
    backed_up: list[Path] = field(default_factory=list)
    finished: bool = False

    def record(self, step: Step, path: Optional[Path] = None) -> None:
        self.completed.append((step, path))
        if step is Step.BACKUP_PAM and path is not None:
            self.backed_up.append(path)

    def has_backup(self, path: Path) -> bool:
        return Path(path) in self.backed_up

    def steps(self) -> list[str]:
        return [f"{step.value} {path}" if path else step.value for step, path in self.completed]

    def to_dict(self) -> dict:
        return {
            "operation": self.operation.value,
            "username": self.username,
            "started_at": self.started_at.isoformat(),
            "completed": self.steps(),
            "finished": self.finished,
        }
