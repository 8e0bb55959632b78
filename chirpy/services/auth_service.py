"""
Authentication and identity related use cases.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from chirpy.core.errors import InvalidCredentialsError, NoMatchError, NotFoundError, ValidationError
from chirpy.core.security import burn_password_check, check_password
from chirpy.domain.models import User
from chirpy.repositories.json_storage import JsonStore
from chirpy.services.session_service import SessionManager

logger = logging.getLogger(__name__)


@dataclass
class LoginSuccess:
    user: User
    access_token: str
    refresh_token: str
    refresh_expires_at: datetime


@dataclass
class AuthService:
    """Handles registration, login, token refresh/revocation and credential updates."""

    store: JsonStore
    sessions: SessionManager

    def _clean_credentials(self, email: str, password: str) -> tuple[str, str]:
        raw_email = (email or "").strip()
        if not raw_email:
            raise ValidationError("Email is required")
        if not password:
            raise ValidationError("Password is required")
        return raw_email, password

    # -------------------------------------- registration --------------------------------------
    def register(self, email: str, password: str) -> User:
        raw_email, password = self._clean_credentials(email, password)
        return self.store.create_user(raw_email, password)

    # -------------------------------------- login --------------------------------------
    def login(self, email: str, password: str) -> LoginSuccess:
        raw_email = (email or "").strip()
        try:
            user = self.store.get_user_by_email(raw_email)
        except NotFoundError:
            burn_password_check(password or "")
            raise InvalidCredentialsError("Invalid email or password") from None
        try:
            check_password(password or "", user.password_hash)
        except NoMatchError:
            raise InvalidCredentialsError("Invalid email or password") from None

        refresh = self.sessions.issue_refresh_token()
        user = self.store.set_refresh_token(user.id, refresh.token, refresh.expires_at)
        logger.info("User %d logged in", user.id)
        return LoginSuccess(
            user=user,
            access_token=self.sessions.issue_access_token(user.id),
            refresh_token=refresh.token,
            refresh_expires_at=refresh.expires_at,
        )

    # -------------------------------------- tokens --------------------------------------
    def refresh(self, refresh_token: str) -> str:
        """Exchange a live refresh token for a new access token."""
        user_id = self.sessions.authenticate(refresh_token)
        return self.sessions.issue_access_token(user_id)

    def revoke(self, refresh_token: str) -> None:
        self.sessions.revoke(refresh_token)

    # -------------------------------------- profile --------------------------------------
    def update_user(self, user_id: int, email: str, password: str) -> User:
        """Replace e-mail and password; the user is left logged out."""
        raw_email, password = self._clean_credentials(email, password)
        return self.store.replace_user(user_id, raw_email, password)
