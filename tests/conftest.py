"""Shared fixtures: temporary store, fake clock, session manager."""
from __future__ import annotations

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Make the chirpy package importable when running tests from a checkout
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from chirpy.repositories.json_storage import JsonStore  # noqa: E402
from chirpy.services.session_service import SessionManager  # noqa: E402

SECRET = "test-secret-with-at-least-thirty-two-bytes!!"


class FakeClock:
    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture()
def db_path(tmp_path) -> Path:
    return tmp_path / "database.json"


@pytest.fixture()
def store(db_path) -> JsonStore:
    return JsonStore.open(db_path, banned_words=("kerfuffle", "sharbert", "fornax"))


@pytest.fixture()
def author(store) -> int:
    """Id of a registered user that chirps can be attributed to."""
    return store.create_user("author@example.com", "pw").id


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(datetime.now(timezone.utc).replace(microsecond=0))


@pytest.fixture()
def sessions(store, clock) -> SessionManager:
    return SessionManager(store, SECRET, clock=clock)
