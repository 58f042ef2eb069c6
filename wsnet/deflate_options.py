"""Negotiation options of the permessage-deflate extension."""

from __future__ import annotations

import re
from dataclasses import dataclass

DEFAULT_CLIENT_MAX_WINDOW_BITS = 15
DEFAULT_SERVER_MAX_WINDOW_BITS = 15
_MIN_WINDOW_BITS = 8
_MAX_WINDOW_BITS = 15

_C_SPACE = frozenset(" \t\n\v\f\r")
_C_STRTOL = re.compile(r"([+-]?[0-9]+)")


def remove_spaces(text: str) -> str:
    """Return ``text`` without any ASCII whitespace."""
    return "".join(c for c in text if c not in _C_SPACE)


def _window_bits(token: str) -> int:
    """Parse the value after the last '=' as a byte and clamp it to [8, 15]."""
    match = _C_STRTOL.match(token.rpartition("=")[2])
    value = int(match.group(1)) & 0xFF if match else 0
    return min(_MAX_WINDOW_BITS, max(value, _MIN_WINDOW_BITS))


@dataclass
class PerMessageDeflateOptions:
    """Settings of the permessage-deflate extension.

    A client window of 8 bits is raised to 9, as deflate does not work
    reliably with the smallest window.
    """

    enabled: bool = False
    client_no_context_takeover: bool = False
    server_no_context_takeover: bool = False
    client_max_window_bits: int = DEFAULT_CLIENT_MAX_WINDOW_BITS
    server_max_window_bits: int = DEFAULT_SERVER_MAX_WINDOW_BITS

    def __post_init__(self) -> None:
        self._sanitize_client_max_window_bits()

    def _sanitize_client_max_window_bits(self) -> None:
        if self.client_max_window_bits == 8:
            self.client_max_window_bits = 9

    @classmethod
    def from_header(cls, extension: str) -> "PerMessageDeflateOptions":
        """Build options from a Sec-WebSocket-Extensions header value.

        Unknown parameters are ignored and window sizes are clamped to the
        range the RFC allows.
        """
        options = cls()
        for token in remove_spaces(extension).split(";"):
            if token == "permessage-deflate":
                options.enabled = True
            elif token == "server_no_context_takeover":
                options.server_no_context_takeover = True
            elif token == "client_no_context_takeover":
                options.client_no_context_takeover = True
            elif token.startswith("server_max_window_bits="):
                options.server_max_window_bits = _window_bits(token)
            elif token.startswith("client_max_window_bits="):
                options.client_max_window_bits = _window_bits(token)
                options._sanitize_client_max_window_bits()
        return options

    def generate_header(self) -> str:
        """Return the full Sec-WebSocket-Extensions header line, with CRLF."""
        parts = ["Sec-WebSocket-Extensions: permessage-deflate"]
        if self.client_no_context_takeover:
            parts.append("client_no_context_takeover")
        if self.server_no_context_takeover:
            parts.append("server_no_context_takeover")
        parts.append(f"server_max_window_bits={self.server_max_window_bits}")
        parts.append(f"client_max_window_bits={self.client_max_window_bits}")
        return "; ".join(parts) + "\r\n"