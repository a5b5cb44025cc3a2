"""
Handle utilities: normalization and local validation.

Local validation is pure (no I/O) and runs on every keystroke, so it must stay
cheap. Only handles that pass it are ever sent to the alias registry.
"""
from __future__ import annotations

import re
from typing import Optional

MIN_HANDLE_LENGTH = 3
MAX_HANDLE_LENGTH = 20

HANDLE_PATTERN = re.compile(r"[a-z0-9_]+")

RESERVED_HANDLES = frozenset(
    {
        "admin",
        "root",
        "system",
        "gns",
        "layer",
        "browser",
        "support",
        "help",
        "official",
        "verified",
    }
)

TOO_SHORT = "too short"
TOO_LONG = "too long"
INVALID_CHARACTERS = "invalid characters"
RESERVED = "reserved"


def normalize_handle(raw: Optional[str]) -> str:
    """
    Normalize raw input to a handle candidate.

    Rules:
    - Convert to lowercase
    - Remove every '@' (users often type the prefix themselves)
    - Strip leading/trailing whitespace

    Example:
        >>> normalize_handle("  @Alice_01 ")
        'alice_01'
        >>> normalize_handle("@")
        ''
    """
    if not raw:
        return ""
    return raw.lower().replace("@", "").strip()


def validate_handle(handle: str) -> Optional[str]:
    """
    Check a normalized handle against the local rules, first failure wins.

    Returns:
        None when the handle passes, otherwise one of
        'too short', 'too long', 'invalid characters', 'reserved'.
    """
    if len(handle) < MIN_HANDLE_LENGTH:
        return TOO_SHORT
    if len(handle) > MAX_HANDLE_LENGTH:
        return TOO_LONG
    if not HANDLE_PATTERN.fullmatch(handle):
        return INVALID_CHARACTERS
    if handle in RESERVED_HANDLES:
        return RESERVED
    return None


def is_handle_valid(handle: str) -> bool:
    return validate_handle(handle) is None
