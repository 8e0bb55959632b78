"""Request-scoped dependencies shared by the routers."""
from __future__ import annotations

from fastapi import Depends, Header, HTTPException, Request

from chirpy.core.errors import InvalidTokenError
from chirpy.services.auth_service import AuthService
from chirpy.services.chirp_service import ChirpService
from chirpy.services.session_service import SessionManager


def _state(request: Request, name: str):
    value = getattr(getattr(request.app, "state", None), name, None)
    if value is None:
        raise RuntimeError(f"{name} is not configured on the application")
    return value


def get_auth_service(request: Request) -> AuthService:
    return _state(request, "auth_service")


def get_chirp_service(request: Request) -> ChirpService:
    return _state(request, "chirp_service")


def get_sessions(request: Request) -> SessionManager:
    return _state(request, "sessions")


def bearer_token(authorization: str | None = Header(None)) -> str:
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Authorization header missing or malformed")
    token = authorization[len("Bearer "):].strip()
    if not token:
        raise HTTPException(status_code=401, detail="Authorization header missing or malformed")
    return token


def current_user_id(
    token: str = Depends(bearer_token),
    sessions: SessionManager = Depends(get_sessions),
) -> int:
    """Dependency: require a valid access token, return its subject."""
    try:
        return sessions.validate_access_token(token)
    except InvalidTokenError:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
