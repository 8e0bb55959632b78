from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from chirpy.core.errors import NotFoundError, PermissionDeniedError, StoreError, ValidationError
from chirpy.domain.models import Chirp
from chirpy.routers.deps import current_user_id, get_chirp_service
from chirpy.services.chirp_service import ChirpService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["chirps"])


class ChirpRequest(BaseModel):
    body: str = ""


class ChirpResponse(BaseModel):
    id: int
    body: str
    author_id: Optional[int] = None

    @classmethod
    def from_chirp(cls, chirp: Chirp) -> "ChirpResponse":
        return cls(id=chirp.id, body=chirp.body, author_id=chirp.author_id)


def _store_failure(exc: StoreError) -> HTTPException:
    logger.error("Store failure: %s", exc)
    return HTTPException(status_code=500, detail="Failed to load chirps from the database")


@router.get("/healthz", response_class=PlainTextResponse)
def healthz() -> str:
    return "OK"


@router.get("/chirps", response_model=list[ChirpResponse])
def list_chirps(chirps: ChirpService = Depends(get_chirp_service)):
    try:
        return [ChirpResponse.from_chirp(c) for c in chirps.list_chirps()]
    except StoreError as exc:
        raise _store_failure(exc)


@router.get("/chirps/{chirp_id}", response_model=ChirpResponse)
def get_chirp(chirp_id: int, chirps: ChirpService = Depends(get_chirp_service)):
    try:
        return ChirpResponse.from_chirp(chirps.get(chirp_id))
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Chirp not found")
    except StoreError as exc:
        raise _store_failure(exc)


@router.post("/chirps", status_code=201, response_model=ChirpResponse)
def create_chirp(
    body: ChirpRequest,
    user_id: int = Depends(current_user_id),
    chirps: ChirpService = Depends(get_chirp_service),
):
    try:
        chirp = chirps.create(user_id, body.body)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except NotFoundError:
        # signed token whose user is no longer in the store
        raise HTTPException(status_code=401, detail="User not found")
    except StoreError as exc:
        logger.error("Failed to save chirp: %s", exc)
        raise HTTPException(status_code=500, detail="Failed to save chirp")
    return ChirpResponse.from_chirp(chirp)


@router.delete("/chirps/{chirp_id}", status_code=204)
def delete_chirp(
    chirp_id: int,
    user_id: int = Depends(current_user_id),
    chirps: ChirpService = Depends(get_chirp_service),
):
    try:
        chirps.delete(user_id, chirp_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Chirp not found")
    except PermissionDeniedError as exc:
        raise HTTPException(status_code=403, detail=str(exc))
    except StoreError as exc:
        logger.error("Failed to delete chirp: %s", exc)
        raise HTTPException(status_code=500, detail="Failed to delete chirp")
    return Response(status_code=204)
