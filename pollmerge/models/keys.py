"""
Canonical join key.

Both sources are reduced to the same textual shape,
"<state token> <3-digit precinct number>", so they can be joined by exact match.
"""

from __future__ import annotations

import re
from typing import Optional

PRECINCT_WIDTH = 3

CANONICAL_KEY_PATTERN = re.compile(r"^\S+ \d{3}$")


def make_key(state: Optional[str], number: Optional[str]) -> Optional[str]:
    """
    Build a canonical key from a state token and a precinct number.

    The number is zero-padded to three digits. Returns None when either part
    is missing, so callers never see a half-formed key.
    """
    if not isinstance(state, str) or not isinstance(number, str):
        return None
    state = state.strip()
    number = number.strip()
    # Tokens with inner whitespace would break the "<token> <number>" shape
    if not state or any(ch.isspace() for ch in state):
        return None
    if not re.fullmatch(r"[0-9]{1,3}", number):
        return None
    return f"{state} {number.zfill(PRECINCT_WIDTH)}"


def is_canonical_key(value: object) -> bool:
    """Check whether a value has the canonical key shape."""
    return isinstance(value, str) and bool(CANONICAL_KEY_PATTERN.match(value))
