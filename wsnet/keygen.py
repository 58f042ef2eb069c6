"""Computation of the Sec-WebSocket-Accept value."""

from __future__ import annotations

import base64
import hashlib
from typing import Union

_WEBSOCKET_GUID = b"258EAFA5-E914-47DA-95CA-C5AB0DC85B11"
_KEY_LENGTH = 24


def generate_accept_key(key: Union[str, bytes]) -> str:
    """Return the Sec-WebSocket-Accept value for a Sec-WebSocket-Key.

    Only the first 24 bytes of the key take part, as a well-formed key is
    exactly that long; a shorter key is padded with NUL bytes and anything
    after an embedded NUL byte is ignored.
    """
    raw = key.encode("latin-1") if isinstance(key, str) else bytes(key)
    raw = raw[:_KEY_LENGTH].split(b"\0", 1)[0].ljust(_KEY_LENGTH, b"\0")
    digest = hashlib.sha1(raw + _WEBSOCKET_GUID).digest()
    return base64.b64encode(digest).decode("ascii")