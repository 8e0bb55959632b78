"""Banned-word masking for chirp bodies."""
from __future__ import annotations

import re
from typing import Iterable

MASK = "****"
_WHITESPACE = re.compile(r"(\s+)")


def censor(text: str, banned_words: Iterable[str], mask: str = MASK) -> str:
    """Replace whole whitespace-delimited words found in ``banned_words``.

    Matching is case-insensitive and exact: ``"Kerfuffle!"`` is left alone
    because the trailing punctuation makes it a different token. The
    original separators (spaces, tabs, newlines) are kept as they were.
    """
    banned = {w.lower() for w in banned_words}
    if not text or not banned:
        return text
    # split with a capture group: words at even indexes, separators at odd ones
    parts = _WHITESPACE.split(text)
    return "".join(
        mask if i % 2 == 0 and part.lower() in banned else part
        for i, part in enumerate(parts)
    )
