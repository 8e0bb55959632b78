"""
JSON-file document store for users and chirps.

The whole snapshot lives in one file. Reads decode the full file under a
shared lock; writes run inside ``JsonStore.transaction()``, which holds the
exclusive lock while the snapshot is read, mutated in memory, encoded and
atomically swapped onto disk.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from contextlib import contextmanager, suppress
from datetime import datetime
from pathlib import Path
from typing import Iterable, Iterator, Optional

from chirpy.core.config import DEFAULT_BANNED_WORDS
from chirpy.core.errors import (
    ConflictError,
    NotFoundError,
    StoreReadError,
    StoreWriteError,
    ValidationError,
)
from chirpy.core.locks import ReadWriteLock
from chirpy.core.security import hash_password
from chirpy.domain.models import Chirp, SchemaError, Snapshot, User
from chirpy.domain.profanity import censor

logger = logging.getLogger(__name__)

FILE_MODE = 0o644
MAX_CHIRP_LENGTH = 140


class IdAllocator:
    """Process-local id counter for one collection.

    Starts at 1 on every open. Each allocation also clears the highest id
    already present in the snapshot, so records kept in the file from a
    previous process are never reissued.
    """

    def __init__(self, start: int = 1) -> None:
        self._next = start

    @property
    def next_value(self) -> int:
        return self._next

    def allocate(self, existing: Iterable[int] = ()) -> int:
        value = max(self._next, max(existing, default=0) + 1)
        self._next = value + 1
        return value

    def reset(self, value: int) -> None:
        self._next = value


class Transaction:
    """Mutable view of one snapshot inside an exclusive store transaction."""

    def __init__(self, snapshot: Snapshot, chirp_ids: IdAllocator, user_ids: IdAllocator) -> None:
        self.snapshot = snapshot
        self._chirp_ids = chirp_ids
        self._user_ids = user_ids

    @property
    def users(self) -> dict[int, User]:
        return self.snapshot.users

    @property
    def chirps(self) -> dict[int, Chirp]:
        return self.snapshot.chirps

    def user(self, user_id: int) -> User:
        user = self.users.get(user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found")
        return user

    def add_chirp(self, body: str, author_id: Optional[int]) -> Chirp:
        if author_id is not None and author_id not in self.users:
            raise NotFoundError(f"Author {author_id} not found")
        chirp = Chirp(id=self._chirp_ids.allocate(self.chirps), body=body, author_id=author_id)
        self.chirps[chirp.id] = chirp
        return chirp

    def add_user(self, email: str, password_hash: str) -> User:
        if self.snapshot.user_by_email(email) is not None:
            raise ConflictError("Email already in use")
        user = User(id=self._user_ids.allocate(self.users), email=email, password_hash=password_hash)
        self.users[user.id] = user
        return user


class JsonStore:
    """Durable storage of the users and chirps collections."""

    def __init__(
        self,
        path: str | os.PathLike,
        *,
        banned_words: Iterable[str] = DEFAULT_BANNED_WORDS,
        max_chirp_length: int = MAX_CHIRP_LENGTH,
    ) -> None:
        self.path = Path(path)
        self.banned_words = tuple(banned_words)
        self.max_chirp_length = max_chirp_length
        self._lock = ReadWriteLock()
        self._chirp_ids = IdAllocator()
        self._user_ids = IdAllocator()
        self._ensure_file()

    @classmethod
    def open(cls, path: str | os.PathLike, **kwargs) -> "JsonStore":
        """Create the backing file if needed and return a store bound to it."""
        return cls(path, **kwargs)

    # -------------------------------------- file helpers --------------------------------------
    def _ensure_file(self) -> None:
        if self.path.exists():
            logger.debug("Database file %s exists", self.path)
            return
        logger.info("Database file %s does not exist, creating it", self.path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        try:
            fd = os.open(self.path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, FILE_MODE)
        except FileExistsError:
            return
        os.close(fd)
        os.chmod(self.path, FILE_MODE)

    def _load(self) -> Snapshot:
        """Read and decode the whole file. Caller holds the lock."""
        try:
            raw = self.path.read_bytes()
        except FileNotFoundError:
            return Snapshot()
        except OSError as exc:
            logger.error("Error reading database file %s: %s", self.path, exc)
            raise StoreReadError(f"Could not read {self.path}") from exc
        if not raw:
            return Snapshot()
        try:
            return Snapshot.from_dict(json.loads(raw.decode("utf-8")))
        except (UnicodeDecodeError, json.JSONDecodeError, SchemaError) as exc:
            logger.error("Error decoding database file %s: %s", self.path, exc)
            raise StoreReadError(f"Could not decode {self.path}: {exc}") from exc

    def _persist(self, snapshot: Snapshot) -> None:
        """Encode fully, then swap a temp file onto the target. Caller holds the write lock."""
        try:
            data = json.dumps(snapshot.to_dict(), ensure_ascii=False, indent=2).encode("utf-8")
        except (TypeError, ValueError) as exc:
            raise StoreWriteError(f"Could not encode snapshot: {exc}") from exc

        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path: Optional[Path] = None
        try:
            with tempfile.NamedTemporaryFile(
                mode="wb", dir=str(self.path.parent), prefix=f".{self.path.name}.", delete=False
            ) as tf:
                tmp_path = Path(tf.name)
                tf.write(data)
                tf.flush()
                os.fsync(tf.fileno())
            os.chmod(tmp_path, FILE_MODE)
            os.replace(tmp_path, self.path)
        except OSError as exc:
            logger.error("Error writing database file %s: %s", self.path, exc)
            if tmp_path is not None:
                with suppress(OSError):
                    tmp_path.unlink()
            raise StoreWriteError(f"Could not write {self.path}") from exc

    def snapshot(self) -> Snapshot:
        """Return a freshly decoded copy of the whole document."""
        with self._lock.read():
            return self._load()

    @contextmanager
    def transaction(self) -> Iterator[Transaction]:
        """Exclusive read-modify-write unit over the whole document.

        Changes made to the yielded Transaction are written on a clean exit.
        If the block raises, nothing is written and the id counters are
        restored to their values before the transaction.
        """
        with self._lock.write():
            snapshot = self._load()
            chirp_mark = self._chirp_ids.next_value
            user_mark = self._user_ids.next_value
            try:
                yield Transaction(snapshot, self._chirp_ids, self._user_ids)
                self._persist(snapshot)
            except BaseException:
                self._chirp_ids.reset(chirp_mark)
                self._user_ids.reset(user_mark)
                raise

    # -------------------------------------- chirps --------------------------------------
    def list_chirps(self) -> list[Chirp]:
        return self.snapshot().sorted_chirps()

    def get_chirp(self, chirp_id: int) -> Chirp:
        chirp = self.snapshot().chirps.get(chirp_id)
        if chirp is None:
            raise NotFoundError(f"Chirp {chirp_id} not found")
        return chirp

    def create_chirp(self, author_id: Optional[int], body: str) -> Chirp:
        if len(body) > self.max_chirp_length:
            raise ValidationError("Chirp is too long")
        cleaned = censor(body, self.banned_words)
        with self.transaction() as tx:
            chirp = tx.add_chirp(cleaned, author_id)
        logger.info("Created chirp %d", chirp.id)
        return chirp

    def delete_chirp(self, chirp_id: int) -> None:
        with self.transaction() as tx:
            if tx.chirps.pop(chirp_id, None) is None:
                raise NotFoundError(f"Chirp {chirp_id} not found")
        logger.info("Deleted chirp %d", chirp_id)

    # -------------------------------------- users --------------------------------------
    def list_users(self) -> list[User]:
        return self.snapshot().sorted_users()

    def get_user(self, user_id: int) -> User:
        user = self.snapshot().users.get(user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found")
        return user

    def get_user_by_email(self, email: str) -> User:
        user = self.snapshot().user_by_email(email)
        if user is None:
            raise NotFoundError("No user was found for this email")
        return user

    def create_user(self, email: str, password: str) -> User:
        # Hashing is slow; keep it outside the exclusive lock.
        password_hash = hash_password(password)
        with self.transaction() as tx:
            user = tx.add_user(email, password_hash)
        logger.info("Created user %d", user.id)
        return user

    def replace_user(
        self,
        user_id: int,
        email: str,
        password: Optional[str],
        refresh_token: str = "",
        refresh_token_expires_at: Optional[datetime] = None,
    ) -> User:
        """Overwrite every field of a user record.

        ``password=None`` keeps the stored hash. Empty session fields leave
        the user logged out.
        """
        password_hash = hash_password(password) if password is not None else None
        with self.transaction() as tx:
            user = tx.user(user_id)
            owner = tx.snapshot.user_by_email(email)
            if owner is not None and owner.id != user_id:
                raise ConflictError("Email already in use")
            user.email = email
            if password_hash is not None:
                user.password_hash = password_hash
            user.refresh_token = refresh_token
            user.refresh_token_expires_at = refresh_token_expires_at if refresh_token else None
        logger.info("Replaced user %d", user_id)
        return user

    def set_refresh_token(self, user_id: int, token: str, expires_at: datetime) -> User:
        with self.transaction() as tx:
            user = tx.user(user_id)
            user.refresh_token = token
            user.refresh_token_expires_at = expires_at
        return user
