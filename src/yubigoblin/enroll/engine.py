"""Enrollment and revocation of a user's YubiKey second factor.

A user counts as enrolled only when their ``u2f_keys`` file exists and both
PAM service files carry the marker line. Nothing else is stored, so every
call re-derives the state from the filesystem and any disagreement between
the three reads as "not enrolled".
"""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from loguru import logger

from ..config.settings import YubiGoblinConfig
from ..errors import (
    AlreadyEnrolled,
    EnrollmentStepError,
    MissingDependencies,
    NoBackupFound,
    NoTokenPresent,
    NotEnrolled,
    UnknownUser,
    YubiGoblinError,
)
from ..models import YubikeyStatusResponse
from ..system.devices import DeviceEnumerator
from ..system.keys import KeyMaterialStore
from ..system.packages import PackageAdapter
from ..system.pam import PamFileEditor
from ..system.users import UserDirectory
from .keygen import KeyGenerator
from .transaction import EnrollmentTransaction, Operation, Step


class EnrollmentEngine:
    """Orchestrates packages, devices, accounts, PAM files and key files."""

    def __init__(
        self,
        config: YubiGoblinConfig,
        packages: PackageAdapter,
        devices: DeviceEnumerator,
        users: UserDirectory,
        keygen: KeyGenerator,
        pam: Optional[PamFileEditor] = None,
        keys: Optional[KeyMaterialStore] = None,
    ):
        self.config = config
        self.packages = packages
        self.devices = devices
        self.users = users
        self.keygen = keygen
        self.pam = pam or PamFileEditor(config.pam)
        self.keys = keys or KeyMaterialStore(config.keys, home_resolver=users.home_directory)

    @property
    def marker(self) -> str:
        return self.config.pam.marker_line

    @property
    def pam_files(self) -> list[Path]:
        return self.config.pam.service_files

    def is_enrolled(self, username: str) -> bool:
        if not self.keys.registration_exists(username):
            return False

        for pam_file in self.pam_files:
            if not self.pam.contains_line(pam_file, self.marker):
                logger.debug(f"{pam_file} is missing the marker line, {username} is not enrolled")
                return False

        return True

    def _require_known_user(self, username: str) -> None:
        if username not in self.users.list_human_users():
            raise UnknownUser(username)

    def enroll(self, username: str) -> EnrollmentTransaction:
        """Register a YubiKey for ``username`` and require it in PAM.

        Preconditions are checked in order and nothing is touched until all
        of them hold. Completed steps are not rolled back if a later step
        fails; run ``revoke`` and then ``enroll`` again to recover.
        """
        logger.info(f"Starting enrollment for user: {username}")

        if self.is_enrolled(username):
            raise AlreadyEnrolled(username)

        self._require_known_user(username)

        if not self.devices.list_auth_tokens():
            raise NoTokenPresent(username)

        deps = self.packages.check_dependencies()
        if not deps.all_present:
            raise MissingDependencies(username, deps.missing())

        tx = EnrollmentTransaction(Operation.ENROLL, username)

        with self._step(tx, Step.CONFIG_DIR):
            config_dir = self.keys.ensure_user_config_dir(username)
            tx.record(Step.CONFIG_DIR, config_dir)

        with self._step(tx, Step.KEYGEN):
            registration = self.keygen.generate(username, self.keys.home_directory(username))
            tx.record(Step.KEYGEN)

        with self._step(tx, Step.STORE_REGISTRATION):
            keys_path = self.keys.append_registration(username, registration)
            tx.record(Step.STORE_REGISTRATION, keys_path)

        for pam_file in self.pam_files:
            if not tx.has_backup(pam_file):
                with self._step(tx, Step.BACKUP_PAM):
                    self.pam.backup(pam_file)
                    tx.record(Step.BACKUP_PAM, pam_file)

            with self._step(tx, Step.EDIT_PAM):
                self.pam.ensure_line_inserted(pam_file, self.marker)
                tx.record(Step.EDIT_PAM, pam_file)

        tx.finished = True
        logger.info(f"✅ YubiKey enrolled for {username}")
        return tx

    def revoke(self, username: str) -> EnrollmentTransaction:
        """Remove ``username``'s YubiKey requirement.

        The PAM files are restored from their backups rather than edited, so
        a missing backup aborts before anything is changed.
        """
        logger.info(f"Starting revocation for user: {username}")

        self._require_known_user(username)

        if not self.is_enrolled(username):
            raise NotEnrolled(username)

        for pam_file in self.pam_files:
            backup = self.pam.backup_path(pam_file)
            if not backup.exists():
                raise NoBackupFound(backup)

        tx = EnrollmentTransaction(Operation.REVOKE, username)

        for pam_file in self.pam_files:
            with self._step(tx, Step.RESTORE_PAM):
                self.pam.restore(pam_file)
                tx.record(Step.RESTORE_PAM, pam_file)

        with self._step(tx, Step.DELETE_REGISTRATION):
            self.keys.delete_registration(username)
            tx.record(Step.DELETE_REGISTRATION, self.keys.registration_path(username))

        tx.finished = True
        logger.info(f"✅ YubiKey removed for {username}")
        return tx

    def status(self, username: str) -> YubikeyStatusResponse:
        return YubikeyStatusResponse(username=username, enrolled=self.is_enrolled(username))

    @contextmanager
    def _step(self, tx: EnrollmentTransaction, step: Step) -> Iterator[None]:
        """Wrap leaf failures inside a step with the step name and transaction."""
        try:
            yield
        except YubiGoblinError as e:
            logger.error(f"❌ {tx.operation.value} for {tx.username} failed at '{step.value}': {e}")
            raise EnrollmentStepError(step.value, e, tx) from e
