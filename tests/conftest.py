"""Shared fixtures: a scratch host layout and fake hardware/package adapters."""

from pathlib import Path

import pytest

from yubigoblin.config import YubiGoblinConfig
from yubigoblin.core import PamLock, YubiGoblinApp
from yubigoblin.errors import InstallFailed, KeygenFailed, RemoveFailed
from yubigoblin.models import Dependencies, YubiKey
from yubigoblin.system import PasswdUserDirectory

SUDO_PAM = """#%PAM-1.0

session    required   pam_limits.so

@include common-auth
@include common-account
@include common-session-noninteractive
"""

GDM_PAM = """#%PAM-1.0
auth    requisite       pam_nologin.so
auth\trequired\tpam_succeed_if.so user != root quiet_success
@include common-auth
auth    optional        pam_gnome_keyring.so
@include common-account
"""

REGISTRATION = b"alice:Zm9vYmFy,cHVia2V5,es256,+presence\n"


class FakePackages:
    """In-memory package manager."""

    def __init__(self, apt=True, libpam_u2f=True, pamu2fcfg=True, fail_install=None, fail_remove=None):
        self.state = Dependencies(apt=apt, libpam_u2f=libpam_u2f, pamu2fcfg=pamu2fcfg)
        self.fail_install = fail_install
        self.fail_remove = fail_remove
        self.installed: list[list[str]] = []
        self.removed: list[list[str]] = []

    def check_dependencies(self) -> Dependencies:
        return self.state.model_copy()

    def _set(self, names, value):
        for name in names:
            if name == "apt":
                self.state.apt = value
            elif name == "libpam-u2f":
                self.state.libpam_u2f = value
            elif name == "pamu2fcfg":
                self.state.pamu2fcfg = value

    def install_packages(self, names):
        names = sorted(names)
        if self.fail_install is not None:
            raise InstallFailed(names, self.fail_install)
        self.installed.append(names)
        self._set(names, True)

    def remove_packages(self, names):
        names = sorted(names)
        if self.fail_remove is not None:
            raise RemoveFailed(names, self.fail_remove)
        self.removed.append(names)
        self._set(names, False)


class FakeDevices:
    def __init__(self, tokens=None):
        self.tokens = list(tokens) if tokens is not None else [YubiKey(name="YubiKey OTP+FIDO+CCID", usb_port=7)]
        self.calls = 0

    def list_auth_tokens(self):
        self.calls += 1
        return list(self.tokens)


class FakeKeygen:
    def __init__(self, output=REGISTRATION, exit_code=0):
        self.output = output
        self.exit_code = exit_code
        self.calls: list[tuple[str, Path]] = []

    def generate(self, username, home):
        self.calls.append((username, Path(home)))
        if self.exit_code != 0:
            raise KeygenFailed(username, self.exit_code, "no device found")
        return self.output


@pytest.fixture
def host(tmp_path):
    """A fake host root with PAM files, a passwd file and home directories."""
    pam_dir = tmp_path / "etc" / "pam.d"
    pam_dir.mkdir(parents=True)
    (pam_dir / "sudo").write_text(SUDO_PAM)
    (pam_dir / "gdm-password").write_text(GDM_PAM)

    home_root = tmp_path / "home"
    for name in ("alice", "bob"):
        (home_root / name).mkdir(parents=True)

    passwd = tmp_path / "etc" / "passwd"
    passwd.write_text(
        "root:x:0:0:root:/root:/bin/bash\n"
        "messagebus:x:999:999::/nonexistent:/usr/sbin/nologin\n"
        f"alice:x:1001:1001:Alice,,,:{home_root / 'alice'}:/bin/bash\n"
        f"bob:x:1002:1002::{home_root / 'bob'}:/bin/zsh\n"
        "svc:x:1003:1003::/srv/svc:/bin/false\n"
        "nobody:x:65534:65534:nobody:/nonexistent:/usr/sbin/nologin\n"
        "broken-line\n"
    )
    return tmp_path


@pytest.fixture
def config(host):
    config = YubiGoblinConfig()
    config.pam.sudo_file = host / "etc" / "pam.d" / "sudo"
    config.pam.login_file = host / "etc" / "pam.d" / "gdm-password"
    config.keys.home_root = host / "home"
    config.keys.passwd_file = host / "etc" / "passwd"
    config.server.lock_file = host / "run" / "yubigoblin.lock"
    return config


@pytest.fixture
def packages():
    return FakePackages()


@pytest.fixture
def devices():
    return FakeDevices()


@pytest.fixture
def keygen():
    return FakeKeygen()


@pytest.fixture
def app_context(config, packages, devices, keygen):
    return YubiGoblinApp(
        config=config,
        packages=packages,
        devices=devices,
        users=PasswdUserDirectory(config.keys),
        keygen=keygen,
        lock=PamLock(config.server.lock_file),
    )


@pytest.fixture
def engine(app_context):
    return app_context.engine


@pytest.fixture
def pam_snapshot(config):
    """Returns a callable reading the bytes of both PAM files, in edit order."""

    def snapshot():
        return [path.read_bytes() for path in config.pam.service_files]

    return snapshot
