"""Tests for the REST API."""

import pytest
from fastapi.testclient import TestClient

from yubigoblin.api import create_api


@pytest.fixture
def client(app_context):
    return TestClient(create_api(app_context))


def test_get_dependencies(client):
    response = client.get("/api/v1/dependencies")

    assert response.status_code == 200
    assert response.json() == {"apt": True, "libpam-u2f": True, "pamu2fcfg": True}


def test_post_dependencies_installs_missing(client, packages):
    packages.state.libpam_u2f = False
    packages.state.pamu2fcfg = False

    response = client.post("/api/v1/dependencies", json={"apt": True, "libpam-u2f": True, "pamu2fcfg": False})

    assert response.status_code == 200
    assert response.json() == {"apt": True, "libpam-u2f": True, "pamu2fcfg": False}
    assert packages.installed == [["libpam-u2f"]]


def test_post_dependencies_failure(client, packages):
    packages.state.pamu2fcfg = False
    packages.fail_install = 100

    response = client.post("/api/v1/dependencies", json={"apt": True, "libpam-u2f": True, "pamu2fcfg": True})

    assert response.status_code == 500
    body = response.json()
    assert body["error"] is True
    assert "exit code 100" in body["message"]


def test_delete_dependencies(client, packages):
    response = client.delete("/api/v1/dependencies")

    assert response.status_code == 200
    assert response.json() == {"apt": True, "libpam-u2f": False, "pamu2fcfg": False}
    assert packages.removed == [["libpam-u2f", "pamu2fcfg"]]


def test_list_yubikeys(client):
    response = client.get("/api/v1/yubikey")

    assert response.status_code == 200
    assert response.json() == [{"name": "YubiKey OTP+FIDO+CCID", "usb_port": 7}]


def test_list_users(client):
    response = client.get("/api/v1/users")

    assert response.status_code == 200
    assert response.json() == ["alice", "bob"]


def test_enroll_check_and_remove(client):
    response = client.get("/api/v1/yubikey/alice/check")
    assert response.json() == {"username": "alice", "enrolled": False}

    response = client.post("/api/v1/yubikey", json={"username": "alice"})
    assert response.status_code == 200
    assert response.json() == {"message": "YubiKey installed for user alice", "error": False}

    response = client.get("/api/v1/yubikey/alice/check")
    assert response.json() == {"username": "alice", "enrolled": True}

    response = client.delete("/api/v1/yubikey/alice")
    assert response.status_code == 200
    assert response.json() == {"username": "alice", "removed": True}

    response = client.get("/api/v1/yubikey/alice/check")
    assert response.json() == {"username": "alice", "enrolled": False}


def test_enroll_twice_is_an_error(client):
    client.post("/api/v1/yubikey", json={"username": "alice"})

    response = client.post("/api/v1/yubikey", json={"username": "alice"})

    assert response.status_code == 500
    assert response.json() == {"message": "YubiKey is installed already for user alice", "error": True}


def test_enroll_without_token(client, devices):
    devices.tokens = []

    response = client.post("/api/v1/yubikey", json={"username": "alice"})

    assert response.status_code == 500
    assert response.json()["message"] == "No YubiKeys detected on the system"


def test_remove_not_enrolled(client):
    response = client.delete("/api/v1/yubikey/bob")

    assert response.status_code == 500
    assert response.json() == {"message": "YubiKey not installed for user bob", "error": True}


def test_openapi_docs(client):
    schema = client.get("/openapi.json").json()

    assert schema["info"]["title"] == "YubiGoblin"
    assert "/api/v1/yubikey/{username}/check" in schema["paths"]
