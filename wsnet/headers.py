"""Case-insensitive HTTP header mapping and HTTP header block parsing."""

from __future__ import annotations

import string
from collections.abc import Callable, Iterable, Iterator, Mapping, MutableMapping
from typing import Optional, Union

_ASCII_FOLD = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)

# A header line is read up to this many bytes, the rest is left in the stream.
_MAX_LINE = 1023

_CR = 0x0D
_LF = 0x0A
_COLON = 0x3A


def _fold(text: str) -> str:
    return text.translate(_ASCII_FOLD)


def case_insensitive_less(a: str, b: str) -> bool:
    """Return True if ``a`` sorts before ``b`` when ASCII case is ignored."""
    return _fold(a) < _fold(b)


class CaseInsensitiveDict(MutableMapping[str, str]):
    """A mapping of header names to values whose keys ignore ASCII case.

    The spelling of a key is the one used when it was first inserted, and
    iteration yields keys in case-insensitive sorted order.
    """

    def __init__(
        self,
        data: Union[Mapping[str, str], Iterable[tuple[str, str]], None] = None,
    ) -> None:
        self._items: dict[str, tuple[str, str]] = {}
        if data is not None:
            self.update(data)

    def __getitem__(self, key: str) -> str:
        if not isinstance(key, str):
            raise KeyError(key)
        return self._items[_fold(key)][1]

    def __setitem__(self, key: str, value: str) -> None:
        folded = _fold(key)
        existing = self._items.get(folded)
        original_key = existing[0] if existing is not None else key
        self._items[folded] = (original_key, value)

    def __delitem__(self, key: str) -> None:
        if not isinstance(key, str):
            raise KeyError(key)
        del self._items[_fold(key)]

    def __iter__(self) -> Iterator[str]:
        for folded in sorted(self._items):
            yield self._items[folded][0]

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and _fold(key) in self._items

    def copy(self) -> "CaseInsensitiveDict":
        return CaseInsensitiveDict(self.items())

    def __repr__(self) -> str:
        return f"{type(self).__name__}({dict(self.items())!r})"


class HeaderParseError(Exception):
    """Raised when an HTTP header block cannot be read."""


def _read_line(read_byte: Callable[[], Optional[bytes]]) -> tuple[bytes, int]:
    line = bytearray()
    colon = 0
    while len(line) < 2 or (
        len(line) < _MAX_LINE and line[-2] != _CR and line[-1] != _LF
    ):
        try:
            byte = read_byte()
        except OSError as exc:
            raise HeaderParseError(f"error reading HTTP headers: {exc}") from exc
        if not byte:
            raise HeaderParseError("connection closed while reading HTTP headers")
        index = len(line)
        line += byte[:1]
        if line[index] == _COLON and colon == 0:
            colon = index
    return bytes(line), colon


def parse_http_headers(read_byte: Callable[[], Optional[bytes]]) -> CaseInsensitiveDict:
    """Read header lines up to the empty line that ends them.

    ``read_byte`` is called for each byte and returns it as a one-byte
    ``bytes``; an empty or ``None`` result means the stream ended.
    Lines without a colon are ignored.  Raises :class:`HeaderParseError`
    if the stream ends before the header block does.
    """
    headers = CaseInsensitiveDict()
    while True:
        raw, colon = _read_line(read_byte)
        if raw[:2] == b"\r\n":
            break
        if colon <= 0:
            continue

        text = raw.split(b"\0", 1)[0].decode("latin-1")
        start = colon + 1
        while start < len(text) and text[start] == " ":
            start += 1
        end = len(text) - 2
        value = text[start:end] if end >= start else text[start:]
        headers[text[:colon]] = value
    return headers