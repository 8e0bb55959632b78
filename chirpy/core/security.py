"""Security helpers (hashing and verification)."""

from __future__ import annotations

from argon2 import PasswordHasher, exceptions as argon_exc

from .errors import HashError, NoMatchError

_ph = PasswordHasher()
_BURN_HASH = _ph.hash("chirpy-placeholder-password")


def hash_password(password: str) -> str:
    """Create a salted Argon2id hash of ``password``."""
    try:
        return _ph.hash(password)
    except argon_exc.HashingError as exc:
        raise HashError("Password hashing failed") from exc


def verify_password(password: str, stored_hash: str | None) -> bool:
    stored = stored_hash or ""
    if not stored:
        return False
    try:
        return _ph.verify(stored, password)
    except (argon_exc.VerifyMismatchError, argon_exc.VerificationError, argon_exc.InvalidHashError):
        return False


def check_password(password: str, stored_hash: str | None) -> None:
    """Raise NoMatchError unless ``password`` matches ``stored_hash``."""
    if not verify_password(password, stored_hash):
        raise NoMatchError("Password does not match")


def burn_password_check(password: str) -> None:
    """Spend one verification on a throwaway hash.

    Used when the account does not exist so that the caller pays the same
    hashing cost as for a wrong password.
    """
    verify_password(password, _BURN_HASH)
