"""Domain records and pure helpers (no I/O)."""

from .models import Chirp, Snapshot, User
from .profanity import censor

__all__ = ["Chirp", "Snapshot", "User", "censor"]
