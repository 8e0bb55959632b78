"""Exception hierarchy shared by the store, the session layer and the routers."""

from __future__ import annotations


class ChirpyError(Exception):
    """Base class for every error raised by the chirpy core."""


class ValidationError(ChirpyError):
    """Input violates a stated constraint (e.g. chirp body too long)."""


class ConflictError(ChirpyError):
    """Uniqueness violation, such as a duplicate e-mail."""


class NotFoundError(ChirpyError):
    """No record matches the given id, e-mail or token."""


class PermissionDeniedError(ChirpyError):
    """Caller is authenticated but does not own the resource."""


class InvalidTokenError(ChirpyError):
    """Session credential rejected."""


class ExpiredTokenError(InvalidTokenError):
    pass


class UnknownTokenError(InvalidTokenError, NotFoundError):
    """No user holds the presented refresh token."""


class InvalidCredentialsError(ChirpyError):
    pass


class HashError(ChirpyError):
    """Password hashing failed; never replaced by a default hash."""


class NoMatchError(ChirpyError):
    """Plaintext does not match the stored password hash."""


class StoreError(ChirpyError):
    """I/O or decode failure against the backing file."""


class StoreReadError(StoreError):
    pass


class StoreWriteError(StoreError):
    pass
