"""Random identifiers."""

from __future__ import annotations

import uuid


def uuid4_hex() -> str:
    """Return a random version 4 UUID as 32 lower-case hex digits."""
    return uuid.uuid4().hex