"""Record types persisted in the JSON document, decoded strictly."""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping, Optional


class SchemaError(ValueError):
    """Raised when a decoded document does not match the expected shape."""


def _require_keys(raw: Any, expected: set[str], where: str) -> Mapping[str, Any]:
    if not isinstance(raw, dict):
        raise SchemaError(f"{where}: expected an object")
    keys = set(raw)
    if keys != expected:
        missing = sorted(expected - keys)
        unknown = sorted(keys - expected)
        raise SchemaError(f"{where}: missing={missing} unknown={unknown}")
    return raw


def _positive_id(value: Any, where: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise SchemaError(f"{where}: id must be a positive integer")
    return value


def _string(value: Any, where: str) -> str:
    if not isinstance(value, str):
        raise SchemaError(f"{where}: expected a string")
    return value


def _timestamp(value: Any, where: str) -> Optional[datetime]:
    if value is None:
        return None
    try:
        parsed = datetime.fromisoformat(_string(value, where))
    except ValueError as exc:
        raise SchemaError(f"{where}: invalid timestamp") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


@dataclass
class Chirp:
    id: int
    body: str
    author_id: Optional[int] = None

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, raw: Any) -> "Chirp":
        data = _require_keys(raw, {"id", "body", "author_id"}, "chirp")
        author_id = data["author_id"]
        if author_id is not None:
            author_id = _positive_id(author_id, "chirp.author_id")
        return cls(
            id=_positive_id(data["id"], "chirp.id"),
            body=_string(data["body"], "chirp.body"),
            author_id=author_id,
        )


@dataclass
class User:
    id: int
    email: str
    password_hash: str
    refresh_token: str = ""
    refresh_token_expires_at: Optional[datetime] = None

    @property
    def logged_in(self) -> bool:
        return bool(self.refresh_token)

    def clear_session(self, expires_at: Optional[datetime] = None) -> None:
        self.refresh_token = ""
        self.refresh_token_expires_at = expires_at

    def to_dict(self) -> dict:
        expires = self.refresh_token_expires_at
        return {
            "id": self.id,
            "email": self.email,
            "password_hash": self.password_hash,
            "refresh_token": self.refresh_token,
            "refresh_token_expires_at": expires.isoformat() if expires else None,
        }

    @classmethod
    def from_dict(cls, raw: Any) -> "User":
        data = _require_keys(
            raw,
            {"id", "email", "password_hash", "refresh_token", "refresh_token_expires_at"},
            "user",
        )
        return cls(
            id=_positive_id(data["id"], "user.id"),
            email=_string(data["email"], "user.email"),
            password_hash=_string(data["password_hash"], "user.password_hash"),
            refresh_token=_string(data["refresh_token"], "user.refresh_token"),
            refresh_token_expires_at=_timestamp(data["refresh_token_expires_at"], "user.refresh_token_expires_at"),
        )


@dataclass
class Snapshot:
    """Both collections at one instant, keyed by record id."""

    users: dict[int, User] = field(default_factory=dict)
    chirps: dict[int, Chirp] = field(default_factory=dict)

    def sorted_chirps(self) -> list[Chirp]:
        return [self.chirps[k] for k in sorted(self.chirps)]

    def sorted_users(self) -> list[User]:
        return [self.users[k] for k in sorted(self.users)]

    def user_by_email(self, email: str) -> Optional[User]:
        for user in self.users.values():
            if user.email == email:
                return user
        return None

    def to_dict(self) -> dict:
        return {
            "chirps": {str(k): c.to_dict() for k, c in sorted(self.chirps.items())},
            "users": {str(k): u.to_dict() for k, u in sorted(self.users.items())},
        }

    @classmethod
    def from_dict(cls, raw: Any) -> "Snapshot":
        data = _require_keys(raw, {"chirps", "users"}, "snapshot")
        snapshot = cls()
        for name, decode, target in (
            ("chirps", Chirp.from_dict, snapshot.chirps),
            ("users", User.from_dict, snapshot.users),
        ):
            collection = data[name]
            if not isinstance(collection, dict):
                raise SchemaError(f"{name}: expected an object")
            for key, value in collection.items():
                record = decode(value)
                if key != str(record.id):
                    raise SchemaError(f"{name}: key {key!r} does not match id {record.id}")
                target[record.id] = record
        emails = [u.email for u in snapshot.users.values()]
        if len(emails) != len(set(emails)):
            raise SchemaError("users: duplicate email")
        return snapshot
