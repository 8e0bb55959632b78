from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel

from chirpy.core.errors import (
    ConflictError,
    InvalidCredentialsError,
    InvalidTokenError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from chirpy.routers.deps import bearer_token, current_user_id, get_auth_service
from chirpy.services.auth_service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["auth"])


class CredentialsRequest(BaseModel):
    email: str = ""
    password: str = ""


class UserResponse(BaseModel):
    id: int
    email: str


class LoginResponse(UserResponse):
    token: str
    refresh_token: str


class TokenResponse(BaseModel):
    token: str


def _store_failure(exc: StoreError) -> HTTPException:
    logger.error("Store failure: %s", exc)
    return HTTPException(status_code=500, detail="Something went wrong")


@router.post("/users", status_code=201, response_model=UserResponse)
def create_user(body: CredentialsRequest, auth: AuthService = Depends(get_auth_service)):
    try:
        user = auth.register(body.email, body.password)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except ConflictError:
        raise HTTPException(status_code=409, detail="Email already in use")
    except StoreError as exc:
        raise _store_failure(exc)
    return UserResponse(id=user.id, email=user.email)


@router.put("/users", response_model=UserResponse)
def update_user(
    body: CredentialsRequest,
    user_id: int = Depends(current_user_id),
    auth: AuthService = Depends(get_auth_service),
):
    try:
        user = auth.update_user(user_id, body.email, body.password)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except NotFoundError:
        raise HTTPException(status_code=404, detail="User not found")
    except ConflictError:
        raise HTTPException(status_code=409, detail="Email already in use")
    except StoreError as exc:
        raise _store_failure(exc)
    return UserResponse(id=user.id, email=user.email)


@router.post("/login", response_model=LoginResponse)
def login(body: CredentialsRequest, auth: AuthService = Depends(get_auth_service)):
    try:
        result = auth.login(body.email, body.password)
    except InvalidCredentialsError:
        raise HTTPException(status_code=401, detail="Invalid email or password")
    except StoreError as exc:
        raise _store_failure(exc)
    return LoginResponse(
        id=result.user.id,
        email=result.user.email,
        token=result.access_token,
        refresh_token=result.refresh_token,
    )


@router.post("/refresh", response_model=TokenResponse)
def refresh(token: str = Depends(bearer_token), auth: AuthService = Depends(get_auth_service)):
    try:
        access_token = auth.refresh(token)
    except InvalidTokenError:
        raise HTTPException(status_code=401, detail="Invalid or expired refresh token")
    except StoreError as exc:
        raise _store_failure(exc)
    return TokenResponse(token=access_token)


@router.post("/revoke", status_code=204)
def revoke(token: str = Depends(bearer_token), auth: AuthService = Depends(get_auth_service)):
    try:
        auth.revoke(token)
    except InvalidTokenError:
        raise HTTPException(status_code=401, detail="No user found for this token")
    except StoreError as exc:
        raise _store_failure(exc)
    return Response(status_code=204)
