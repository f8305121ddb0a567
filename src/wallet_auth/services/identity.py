"""Canonical account identities."""

from __future__ import annotations

import re

ADDRESS_PATTERN = re.compile(r"^0x[0-9a-fA-F]{40}$")


def to_identity(address: str) -> str:
    """Return the canonical lowercase ``0x``-prefixed form of ``address``.

    Raises:
        ValueError: If ``address`` is not a 20-byte hex address.
    """
    cleaned = address.strip()
    if not ADDRESS_PATTERN.match(cleaned):
        raise ValueError("Address must be 0x followed by 40 hex characters")
    return cleaned.lower()


def is_identity(value: str) -> bool:
    """Return True if ``value`` is already in canonical form."""
    return bool(ADDRESS_PATTERN.match(value)) and value == value.lower()
