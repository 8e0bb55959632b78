from __future__ import annotations

from datetime import timedelta

import jwt
import pytest

from chirpy.core.errors import ExpiredTokenError, InvalidTokenError, NotFoundError, UnknownTokenError
from chirpy.services.session_service import REVOKED_SENTINEL, SessionManager

SECRET = "test-secret-with-at-least-thirty-two-bytes!!"


def test_access_token_claims(sessions, clock):
    token = sessions.issue_access_token(5)

    payload = jwt.decode(token, SECRET, algorithms=["HS256"], options={"verify_exp": False, "verify_iat": False})
    issued_at = int(clock.now.timestamp())
    assert payload == {"iss": "chirpy", "iat": issued_at, "exp": issued_at + 3600, "sub": "5"}


def test_access_token_valid_until_one_hour_boundary(sessions, clock):
    token = sessions.issue_access_token(5)

    assert sessions.validate_access_token(token) == 5
    clock.advance(minutes=59, seconds=59)
    assert sessions.validate_access_token(token) == 5

    clock.advance(seconds=1)
    with pytest.raises(ExpiredTokenError):
        sessions.validate_access_token(token)
    clock.advance(days=1)
    with pytest.raises(InvalidTokenError):
        sessions.validate_access_token(token)


def test_access_token_rejects_tampering(store, sessions, clock):
    token = sessions.issue_access_token(5)
    other = SessionManager(store, SECRET + "-other", clock=clock)
    foreign_issuer = SessionManager(store, SECRET, issuer="someone-else", clock=clock)

    with pytest.raises(InvalidTokenError):
        other.validate_access_token(token)
    with pytest.raises(InvalidTokenError):
        foreign_issuer.validate_access_token(token)
    with pytest.raises(InvalidTokenError):
        sessions.validate_access_token(token[:-2] + ("A" if token[-2] != "A" else "B") + token[-1])
    with pytest.raises(InvalidTokenError):
        sessions.validate_access_token("not.a.jwt")
    with pytest.raises(InvalidTokenError):
        sessions.validate_access_token("")


def test_access_token_with_non_numeric_subject(sessions, clock):
    now = int(clock.now.timestamp())
    token = jwt.encode({"iss": "chirpy", "iat": now, "exp": now + 60, "sub": "alice"}, SECRET, algorithm="HS256")

    with pytest.raises(InvalidTokenError):
        sessions.validate_access_token(token)


def test_secret_is_required(store):
    with pytest.raises(ValueError):
        SessionManager(store, "")


def test_refresh_token_shape(sessions, clock):
    refresh = sessions.issue_refresh_token()

    assert len(refresh.token) == 64
    int(refresh.token, 16)
    assert refresh.expires_at == clock.now + timedelta(days=60)
    assert sessions.issue_refresh_token().token != refresh.token


def test_authenticate_until_expiry(store, sessions, clock):
    user = store.create_user("a@example.com", "pw")
    refresh = sessions.issue_refresh_token()
    store.set_refresh_token(user.id, refresh.token, refresh.expires_at)

    assert sessions.authenticate(refresh.token) == user.id

    clock.advance(days=60)
    with pytest.raises(ExpiredTokenError):
        sessions.authenticate(refresh.token)


def test_authenticate_unknown_or_empty_token(store, sessions):
    store.create_user("logged-out@example.com", "pw")

    with pytest.raises(UnknownTokenError):
        sessions.authenticate("deadbeef")
    # logged-out users hold an empty token, which must never match
    with pytest.raises(InvalidTokenError):
        sessions.authenticate("")


def test_revoke_then_authenticate_and_revoke_again(store, sessions):
    user = store.create_user("a@example.com", "pw")
    other = store.create_user("b@example.com", "pw")
    refresh = sessions.issue_refresh_token()
    other_refresh = sessions.issue_refresh_token()
    store.set_refresh_token(user.id, refresh.token, refresh.expires_at)
    store.set_refresh_token(other.id, other_refresh.token, other_refresh.expires_at)

    sessions.revoke(refresh.token)

    revoked = store.get_user(user.id)
    assert revoked.refresh_token == ""
    assert revoked.refresh_token_expires_at == REVOKED_SENTINEL
    with pytest.raises((ExpiredTokenError, NotFoundError)):
        sessions.authenticate(refresh.token)
    with pytest.raises(NotFoundError):
        sessions.revoke(refresh.token)
    assert sessions.authenticate(other_refresh.token) == other.id


def test_revoke_unknown_token_does_not_touch_file(db_path, store, sessions):
    store.create_user("a@example.com", "pw")
    before = db_path.read_bytes()

    with pytest.raises(NotFoundError):
        sessions.revoke("unknown")

    assert db_path.read_bytes() == before


def test_revoked_refresh_does_not_invalidate_issued_access_token(store, sessions):
    user = store.create_user("a@example.com", "pw")
    refresh = sessions.issue_refresh_token()
    store.set_refresh_token(user.id, refresh.token, refresh.expires_at)
    access = sessions.issue_access_token(user.id)

    sessions.revoke(refresh.token)

    assert sessions.validate_access_token(access) == user.id


def test_non_ascii_refresh_token_is_unknown(store, sessions):
    user = store.create_user("a@example.com", "pw")
    refresh = sessions.issue_refresh_token()
    store.set_refresh_token(user.id, refresh.token, refresh.expires_at)

    with pytest.raises(UnknownTokenError):
        sessions.authenticate("ü" * 64)
    with pytest.raises(UnknownTokenError):
        sessions.authenticate("caf\xe9")
    with pytest.raises(NotFoundError):
        sessions.revoke("é")
    assert sessions.authenticate(refresh.token) == user.id


def test_access_token_lifetime_is_exact_with_sub_second_clock(sessions, clock):
    clock.advance(microseconds=900000)
    token = sessions.issue_access_token(5)

    payload = jwt.decode(token, SECRET, algorithms=["HS256"], options={"verify_exp": False, "verify_iat": False})
    assert payload["exp"] - payload["iat"] == pytest.approx(3600)

    clock.advance(minutes=59, seconds=59, microseconds=500000)
    assert sessions.validate_access_token(token) == 5
    clock.advance(seconds=1)
    with pytest.raises(ExpiredTokenError):
        sessions.validate_access_token(token)
