"""Chirp use cases on top of the document store."""
from __future__ import annotations

import logging
from dataclasses import dataclass

from chirpy.core.errors import NotFoundError, PermissionDeniedError
from chirpy.domain.models import Chirp
from chirpy.repositories.json_storage import JsonStore

logger = logging.getLogger(__name__)


@dataclass
class ChirpService:
    store: JsonStore

    def create(self, author_id: int, body: str) -> Chirp:
        return self.store.create_chirp(author_id, body or "")

    def list_chirps(self) -> list[Chirp]:
        return self.store.list_chirps()

    def get(self, chirp_id: int) -> Chirp:
        return self.store.get_chirp(chirp_id)

    def delete(self, user_id: int, chirp_id: int) -> None:
        """Delete a chirp on behalf of its author (ownership checked in the same transaction)."""
        with self.store.transaction() as tx:
            chirp = tx.chirps.get(chirp_id)
            if chirp is None:
                raise NotFoundError(f"Chirp {chirp_id} not found")
            if chirp.author_id != user_id:
                logger.warning("User %d tried to delete chirp %d owned by someone else", user_id, chirp_id)
                raise PermissionDeniedError("You are not authorized to delete this chirp")
            del tx.chirps[chirp_id]
        logger.info("Deleted chirp %d", chirp_id)
