# tests/test_security.py

from __future__ import annotations

from datetime import timedelta

import pytest

from taskflow.config.settings import DEV_SECRET_KEY, Settings
from taskflow.models import Role
from taskflow.utils.auth import Identity, identity_from_token
from taskflow.utils.errors import UnauthorizedError
from taskflow.utils.permissions import Permission, ROLE_PERMISSIONS, has_permission, roles_with
from taskflow.utils.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)


def test_hash_password_is_not_plaintext_and_verifies() -> None:
    hashed = hash_password("s3cret")

    assert hashed != "s3cret"
    assert verify_password("s3cret", hashed)
    assert not verify_password("wrong", hashed)


def test_verify_password_rejects_malformed_hash() -> None:
    assert verify_password("s3cret", "not-a-bcrypt-hash") is False


def test_access_token_round_trip_carries_id_and_role() -> None:
    token = create_access_token({"id": 42, "role": "Manager"})

    payload = decode_access_token(token)

    assert payload["id"] == 42
    assert payload["role"] == "Manager"
    assert "exp" in payload


def test_expired_token_does_not_decode() -> None:
    token = create_access_token({"id": 1, "role": "Admin"}, expires_delta=timedelta(seconds=-10))

    assert decode_access_token(token) is None


def test_tampered_token_does_not_decode() -> None:
    token = create_access_token({"id": 1, "role": "Employee"})
    header, payload, signature = token.split(".")
    forged = ".".join([header, payload, signature[::-1]])

    assert decode_access_token(forged) is None


def test_identity_from_token() -> None:
    token = create_access_token({"id": 7, "role": "Employee"})

    assert identity_from_token(token) == Identity(id=7, role=Role.EMPLOYEE)


@pytest.mark.parametrize(
    "payload",
    [
        {"role": "Admin"},
        {"id": 3},
        {"id": 3, "role": "Owner"},
        {"id": "abc", "role": "Admin"},
    ],
)
def test_identity_from_token_rejects_incomplete_payload(payload: dict) -> None:
    with pytest.raises(UnauthorizedError):
        identity_from_token(create_access_token(payload))


def test_permission_table() -> None:
    assert has_permission(Role.ADMIN, Permission.CHANGE_ROLE)
    assert not has_permission(Role.MANAGER, Permission.CHANGE_ROLE)
    assert has_permission(Role.MANAGER, Permission.DELETE_ATTACHMENT)
    assert ROLE_PERMISSIONS[Role.EMPLOYEE] == frozenset()
    # Admins can do everything a Manager can
    assert ROLE_PERMISSIONS[Role.MANAGER] <= ROLE_PERMISSIONS[Role.ADMIN]

    assert roles_with(Permission.LIST_USERS) == (Role.ADMIN,)
    assert roles_with(Permission.CREATE_TASK) == (Role.ADMIN, Role.MANAGER)


def test_settings_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SECRET_KEY", "abc")
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("ALLOWED_ORIGINS", "https://a.example, https://b.example")
    monkeypatch.setenv("RELOAD", "true")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = Settings.from_env()

    assert settings.secret_key == "abc"
    assert settings.port == 8080
    assert settings.cors_origins == ("https://a.example", "https://b.example")
    assert settings.reload is True
    assert settings.log_level == "DEBUG"
    assert settings.access_token_expire_days == 7


def test_settings_fall_back_to_development_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SECRET_KEY", raising=False)

    assert Settings.from_env().secret_key == DEV_SECRET_KEY


def test_settings_are_immutable() -> None:
    settings = Settings()

    with pytest.raises(AttributeError):
        settings.port = 1  # type: ignore[misc]
