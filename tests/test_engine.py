"""Tests for the enrollment engine: enroll, revoke and status checks."""

import pytest
from loguru import logger

from yubigoblin.enroll import Operation, Step
from yubigoblin.errors import (
    AlreadyEnrolled,
    EnrollmentStepError,
    IoError,
    KeygenFailed,
    MissingDependencies,
    NoBackupFound,
    NoTokenPresent,
    NotEnrolled,
    UnknownUser,
)

MARKER = "auth required pam_u2f.so"


def test_not_enrolled_without_registration_file(engine, config):
    """PAM markers alone never make a user enrolled."""
    for path in config.pam.service_files:
        path.write_text(f"{MARKER}\n@include common-auth\n")

    assert not engine.is_enrolled("alice")


def test_not_enrolled_when_a_pam_marker_is_missing(engine, config):
    engine.keys.ensure_user_config_dir("alice")
    engine.keys.append_registration("alice", b"alice:key\n")
    config.pam.sudo_file.write_text(f"{MARKER}\n@include common-auth\n")

    assert not engine.is_enrolled("alice"), "gdm-password still lacks the marker"


def test_undecodable_pam_file_is_an_io_error(engine, config):
    engine.keys.ensure_user_config_dir("alice")
    engine.keys.append_registration("alice", b"alice:key\n")
    config.pam.sudo_file.write_bytes(b"# r\xe9seau\n@include common-auth\n")

    with pytest.raises(IoError) as exc_info:
        engine.is_enrolled("alice")

    assert exc_info.value.path == config.pam.sudo_file


def test_enroll_happy_path(engine, config, keygen, host):
    logger.info("Testing enrollment happy path...")

    tx = engine.enroll("alice")

    assert tx.finished
    assert tx.operation is Operation.ENROLL
    assert engine.is_enrolled("alice")
    assert engine.status("alice").enrolled

    keys_path = host / "home" / "alice" / ".config" / "Yubico" / "u2f_keys"
    assert keys_path.read_bytes() == keygen.output
    assert keygen.calls == [("alice", host / "home" / "alice")]

    for path in config.pam.service_files:
        lines = path.read_text().splitlines()
        assert lines.index(MARKER) == lines.index("@include common-auth") - 1
        assert path.with_name(path.name + ".bak").exists()

    assert tx.backed_up == config.pam.service_files
    logger.info("✓ Enrollment happy path passed")


def test_enroll_step_order(engine, config):
    tx = engine.enroll("alice")

    assert [step for step, _ in tx.completed] == [
        Step.CONFIG_DIR,
        Step.KEYGEN,
        Step.STORE_REGISTRATION,
        Step.BACKUP_PAM,
        Step.EDIT_PAM,
        Step.BACKUP_PAM,
        Step.EDIT_PAM,
    ]
    assert [path for step, path in tx.completed if step is Step.EDIT_PAM] == [config.pam.sudo_file, config.pam.login_file]


def test_enroll_twice_fails_without_changes(engine, config, host, pam_snapshot):
    engine.enroll("alice")
    keys_path = engine.keys.registration_path("alice")
    pam_before = pam_snapshot()
    keys_before = keys_path.read_bytes()
    backups_before = [p.with_name(p.name + ".bak").read_bytes() for p in config.pam.service_files]

    with pytest.raises(AlreadyEnrolled):
        engine.enroll("alice")

    assert pam_snapshot() == pam_before
    assert keys_path.read_bytes() == keys_before
    assert [p.with_name(p.name + ".bak").read_bytes() for p in config.pam.service_files] == backups_before


def test_revoke_restores_pam_files_exactly(engine, config, pam_snapshot):
    logger.info("Testing revoke restore fidelity...")
    original = pam_snapshot()

    engine.enroll("alice")
    assert pam_snapshot() != original

    tx = engine.revoke("alice")

    assert tx.finished
    assert not engine.is_enrolled("alice")
    assert pam_snapshot() == original
    for path in config.pam.service_files:
        assert MARKER not in path.read_text()
        assert not path.with_name(path.name + ".bak").exists()
    assert not engine.keys.registration_exists("alice")
    assert not engine.keys.config_dir("alice").exists()


def test_enroll_after_revoke(engine):
    engine.enroll("alice")
    engine.revoke("alice")
    engine.enroll("alice")

    assert engine.is_enrolled("alice")


def test_revoke_never_enrolled_user(engine, host, pam_snapshot):
    before = pam_snapshot()

    with pytest.raises(NotEnrolled):
        engine.revoke("alice")

    assert pam_snapshot() == before
    assert not (host / "home" / "alice" / ".config").exists()
    assert not list((host / "etc" / "pam.d").glob("*.bak"))


def test_revoke_unknown_user(engine):
    with pytest.raises(UnknownUser):
        engine.revoke("mallory")


def test_revoke_without_backup_changes_nothing(engine, config, pam_snapshot):
    engine.enroll("alice")
    config.pam.login_file.with_name("gdm-password.bak").unlink()
    enrolled_state = pam_snapshot()

    with pytest.raises(NoBackupFound):
        engine.revoke("alice")

    assert pam_snapshot() == enrolled_state
    assert config.pam.sudo_file.with_name("sudo.bak").exists()
    assert engine.is_enrolled("alice")


def test_enroll_unknown_user(engine, devices, keygen):
    with pytest.raises(UnknownUser):
        engine.enroll("svc")

    assert devices.calls == 0, "User check runs before device enumeration"
    assert keygen.calls == []


def test_enroll_without_token(engine, devices, pam_snapshot):
    devices.tokens = []
    before = pam_snapshot()

    with pytest.raises(NoTokenPresent):
        engine.enroll("alice")

    assert pam_snapshot() == before
    assert not engine.keys.config_dir("alice").exists()


def test_enroll_with_missing_dependencies(engine, packages, keygen):
    packages.state.pamu2fcfg = False

    with pytest.raises(MissingDependencies) as exc_info:
        engine.enroll("alice")

    assert exc_info.value.missing == ["pamu2fcfg"]
    assert keygen.calls == []


def test_keygen_failure_leaves_pam_untouched(engine, keygen, config, pam_snapshot):
    keygen.exit_code = 1
    before = pam_snapshot()

    with pytest.raises(EnrollmentStepError) as exc_info:
        engine.enroll("alice")

    err = exc_info.value
    assert isinstance(err.cause, KeygenFailed)
    assert err.step == Step.KEYGEN.value
    assert [step for step, _ in err.transaction.completed] == [Step.CONFIG_DIR]
    assert not err.transaction.finished
    assert pam_snapshot() == before
    assert not engine.keys.registration_exists("alice")
    assert not engine.is_enrolled("alice")


def test_partial_failure_is_recoverable(engine, config, pam_snapshot):
    """A missing login PAM file stops enrollment half way; the user stays not enrolled."""
    login_content = config.pam.login_file.read_bytes()
    config.pam.login_file.unlink()

    with pytest.raises(EnrollmentStepError) as exc_info:
        engine.enroll("alice")

    assert exc_info.value.step == Step.BACKUP_PAM.value
    assert MARKER in config.pam.sudo_file.read_text()

    # Operator fixes the file and retries
    config.pam.login_file.write_bytes(login_content)
    assert not engine.is_enrolled("alice")
    engine.enroll("alice")
    assert engine.is_enrolled("alice")
