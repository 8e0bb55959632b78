from __future__ import annotations

import pytest

from chirpy.core.errors import (
    ConflictError,
    InvalidCredentialsError,
    InvalidTokenError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from chirpy.core.security import verify_password
from chirpy.services.auth_service import AuthService
from chirpy.services.chirp_service import ChirpService


@pytest.fixture()
def auth(store, sessions) -> AuthService:
    return AuthService(store=store, sessions=sessions)


def test_register_and_login(auth, store, sessions):
    user = auth.register("  walt@breakingbad.com ", "04234")
    assert user.email == "walt@breakingbad.com"

    result = auth.login("walt@breakingbad.com", "04234")

    assert result.user.id == user.id
    assert sessions.validate_access_token(result.access_token) == user.id
    stored = store.get_user(user.id)
    assert stored.refresh_token == result.refresh_token
    assert stored.refresh_token_expires_at == result.refresh_expires_at


def test_register_validation_and_conflict(auth):
    with pytest.raises(ValidationError):
        auth.register("", "pw")
    with pytest.raises(ValidationError):
        auth.register("a@example.com", "")
    auth.register("a@example.com", "pw")
    with pytest.raises(ConflictError):
        auth.register("a@example.com", "other")


def test_login_failures_look_the_same(auth):
    auth.register("a@example.com", "right")

    with pytest.raises(InvalidCredentialsError) as wrong_password:
        auth.login("a@example.com", "wrong")
    with pytest.raises(InvalidCredentialsError) as unknown_user:
        auth.login("ghost@example.com", "right")

    assert str(wrong_password.value) == str(unknown_user.value)


def test_refresh_and_revoke(auth, sessions):
    auth.register("a@example.com", "pw")
    login = auth.login("a@example.com", "pw")

    access = auth.refresh(login.refresh_token)
    assert sessions.validate_access_token(access) == login.user.id

    auth.revoke(login.refresh_token)
    with pytest.raises(InvalidTokenError):
        auth.refresh(login.refresh_token)


def test_login_again_replaces_refresh_token(auth):
    auth.register("a@example.com", "pw")
    first = auth.login("a@example.com", "pw")
    second = auth.login("a@example.com", "pw")

    assert first.refresh_token != second.refresh_token
    with pytest.raises(InvalidTokenError):
        auth.refresh(first.refresh_token)
    auth.refresh(second.refresh_token)


def test_update_user_changes_credentials_and_logs_out(auth, store):
    user = auth.register("a@example.com", "pw")
    login = auth.login("a@example.com", "pw")

    updated = auth.update_user(user.id, "b@example.com", "new-pw")

    assert updated.email == "b@example.com"
    assert verify_password("new-pw", store.get_user(user.id).password_hash)
    with pytest.raises(InvalidTokenError):
        auth.refresh(login.refresh_token)
    with pytest.raises(InvalidCredentialsError):
        auth.login("a@example.com", "pw")
    assert auth.login("b@example.com", "new-pw").user.id == user.id


def test_update_unknown_user(auth):
    with pytest.raises(NotFoundError):
        auth.update_user(99, "a@example.com", "pw")


def test_chirp_delete_requires_author(store, author):
    chirps = ChirpService(store=store)
    chirp = chirps.create(author, "mine")

    with pytest.raises(PermissionDeniedError):
        chirps.delete(author + 1, chirp.id)
    assert chirps.get(chirp.id) == chirp

    chirps.delete(author, chirp.id)
    assert chirps.list_chirps() == []
    with pytest.raises(NotFoundError):
        chirps.delete(author, chirp.id)
