"""Session helpers (access tokens, refresh tokens, revocation)."""
from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import jwt

from chirpy.core.errors import ExpiredTokenError, InvalidTokenError, UnknownTokenError
from chirpy.repositories.json_storage import JsonStore

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
DEFAULT_ISSUER = "chirpy"
ACCESS_TOKEN_TTL = timedelta(hours=1)
REFRESH_TOKEN_TTL = timedelta(days=60)
REFRESH_TOKEN_BYTES = 32
REVOKED_SENTINEL = datetime(2000, 1, 1, tzinfo=timezone.utc)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _same_token(stored: str, presented: str) -> bool:
    # compare_digest only accepts ASCII str; header values may carry latin-1.
    return secrets.compare_digest(
        stored.encode("utf-8", "surrogatepass"), presented.encode("utf-8", "surrogatepass")
    )


@dataclass(frozen=True)
class RefreshToken:
    token: str
    expires_at: datetime


class SessionManager:
    """Issues and validates the two session credentials.

    Access tokens are stateless HS256 JWTs. Refresh tokens are opaque hex
    strings stored on the user record; their lookup is a linear scan over
    all users.
    """

    def __init__(
        self,
        store: JsonStore,
        secret: str,
        *,
        issuer: str = DEFAULT_ISSUER,
        access_ttl: timedelta = ACCESS_TOKEN_TTL,
        refresh_ttl: timedelta = REFRESH_TOKEN_TTL,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        if not secret:
            raise ValueError("A signing secret is required")
        self.store = store
        self._secret = secret
        self.issuer = issuer
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl
        self._clock = clock or _utcnow

    def _now(self) -> datetime:
        return self._clock()

    # -------------------------------------- access tokens --------------------------------------
    def issue_access_token(self, user_id: int) -> str:
        # NumericDate claims keep sub-second precision so the lifetime is exact.
        issued_at = self._now().timestamp()
        payload = {
            "iss": self.issuer,
            "iat": issued_at,
            "exp": issued_at + self.access_ttl.total_seconds(),
            "sub": str(user_id),
        }
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    def validate_access_token(self, token: str) -> int:
        """Return the subject user id or raise InvalidTokenError/ExpiredTokenError."""
        if not token:
            raise InvalidTokenError("Missing token")
        try:
            # Time claims are checked below against the injected clock.
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[ALGORITHM],
                issuer=self.issuer,
                options={
                    "require": ["iss", "iat", "exp", "sub"],
                    "verify_exp": False,
                    "verify_iat": False,
                },
            )
        except jwt.InvalidTokenError as exc:
            raise InvalidTokenError("Invalid token") from exc

        exp = payload["exp"]
        if isinstance(exp, bool) or not isinstance(exp, (int, float)):
            raise InvalidTokenError("Invalid token expiry")
        if self._now().timestamp() >= exp:
            raise ExpiredTokenError("Token has expired")
        try:
            user_id = int(payload["sub"])
        except (TypeError, ValueError) as exc:
            raise InvalidTokenError("Invalid user ID in token") from exc
        if user_id < 1:
            raise InvalidTokenError("Invalid user ID in token")
        return user_id

    # -------------------------------------- refresh tokens --------------------------------------
    def issue_refresh_token(self) -> RefreshToken:
        return RefreshToken(
            token=secrets.token_hex(REFRESH_TOKEN_BYTES),
            expires_at=self._now() + self.refresh_ttl,
        )

    def authenticate(self, refresh_token: str) -> int:
        """Resolve a refresh token to its owner's id."""
        if refresh_token:
            now = self._now()
            for user in self.store.list_users():
                if user.refresh_token and _same_token(user.refresh_token, refresh_token):
                    expires_at = user.refresh_token_expires_at
                    if expires_at is None or now >= expires_at:
                        raise ExpiredTokenError("Refresh token has expired")
                    return user.id
        raise UnknownTokenError("Refresh token not recognised")

    def revoke(self, refresh_token: str) -> None:
        """Clear the session of the user holding ``refresh_token``."""
        with self.store.transaction() as tx:
            owner = None
            if refresh_token:
                for user in tx.users.values():
                    if user.refresh_token and _same_token(user.refresh_token, refresh_token):
                        owner = user
                        break
            if owner is None:
                raise UnknownTokenError("No user found for this token")
            owner.clear_session(REVOKED_SENTINEL)
        logger.info("Revoked refresh token for user %d", owner.id)
