"""Parsing of ws://, wss://, http:// and https:// URLs."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

_C_ATOI = re.compile(r"[ \t\n\v\f\r]*([+-]?[0-9]+)")


class UrlParseError(ValueError):
    """Raised when a URL cannot be parsed."""


@dataclass(frozen=True)
class ParsedUrl:
    """The parts of a URL a WebSocket or HTTP client needs.

    ``path`` always starts with ``/`` and carries the query string, if any.
    """

    protocol: str
    host: str
    path: str
    query: str
    port: int
    is_protocol_default_port: bool


def protocol_port(protocol: str) -> int:
    """Return the default port of a scheme, or -1 if it has none."""
    if protocol in ("ws", "http"):
        return 80
    if protocol in ("wss", "https"):
        return 443
    return -1


def _is_scheme_valid(scheme: str) -> bool:
    return all((c.isascii() and c.isalpha()) or c in "+-." for c in scheme)


def _find_any(text: str, chars: str, start: int) -> int:
    return next((i for i, c in enumerate(text[start:], start) if c in chars), len(text))


def _port_number(port_text: str) -> Optional[int]:
    match = _C_ATOI.match(port_text)
    value = int(match.group(1)) if match else 0
    return value if 0 < value <= 65535 else None


def parse_url(url: str) -> ParsedUrl:
    """Split ``url`` into its parts; raise :class:`UrlParseError` if malformed.

    A missing or out-of-range port falls back to the scheme's default.
    """
    text = url.split("\0", 1)[0]

    colon = text.find(":")
    if colon < 0:
        raise UrlParseError(f"no ':' found in URL: {url!r}")
    scheme = text[:colon]
    if not _is_scheme_valid(scheme):
        raise UrlParseError(f"invalid scheme name: {scheme!r}")
    scheme = scheme.lower()

    pos = colon + 1
    if text[pos : pos + 2] != "//":
        raise UrlParseError(f"expected '//' after the scheme: {url!r}")
    pos += 2

    marker = _find_any(text, "@/?", pos)
    if marker < len(text) and text[marker] == "@":
        # user name and password are not reported, only skipped
        pos = _find_any(text, ":@", pos)
        if text.startswith(":", pos):
            pos = _find_any(text, "@", pos + 1)
        if not text.startswith("@", pos):
            raise UrlParseError(f"expected '@' after the user info: {url!r}")
        pos += 1

    if text.startswith("[", pos):
        close = text.find("]", pos)
        end = len(text) if close < 0 else close + 1
    else:
        end = _find_any(text, ":/?", pos)
    host = text[pos:end]
    pos = end

    port_text = ""
    if text.startswith(":", pos):
        end = _find_any(text, "/", pos + 1)
        port_text = text[pos + 1 : end]
        pos = end

    path = ""
    query = ""
    if pos < len(text):
        if text[pos] not in "/?":
            raise UrlParseError(f"expected '/' after the host: {url!r}")
        if text[pos] == "/":
            pos += 1
        end = _find_any(text, "#?", pos)
        path = text[pos:end]
        pos = end
        if text.startswith("?", pos):
            end = _find_any(text, "#", pos + 1)
            query = text[pos + 1 : end]

    default_port = protocol_port(scheme)
    port = _port_number(port_text)
    if port is None:
        port = default_port

    if not path.startswith("/"):
        path = "/" + path
    if query:
        path = f"{path}?{query}"

    return ParsedUrl(
        protocol=scheme,
        host=host,
        path=path,
        query=query,
        port=port,
        is_protocol_default_port=port == default_port,
    )