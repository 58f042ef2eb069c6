"""Compression and decompression of messages for the permessage-deflate extension."""

from __future__ import annotations

import zlib
from typing import Union

from .deflate_options import PerMessageDeflateOptions

# An empty stored block; it ends every flushed deflate stream and is
# stripped from, then restored to, each message on the wire.
EMPTY_UNCOMPRESSED_BLOCK = b"\x00\x00\xff\xff"

# What an empty message compresses to once the trailing block is removed.
_EMPTY_MESSAGE = b"\x02\x00"

_MEMORY_LEVEL = 4

Data = Union[bytes, bytearray, memoryview, str]


class DeflateError(Exception):
    """Raised when the deflate engine cannot be set up or fed bad data."""


def _as_bytes(data: Data) -> bytes:
    if isinstance(data, str):
        return data.encode("utf-8")
    return bytes(data)


class DeflateCompressor:
    """Compresses successive messages of one connection.

    With ``no_context_takeover`` every message is compressed on its own;
    otherwise the sliding window carries over from message to message.
    """

    def __init__(self, window_bits: int = 15, no_context_takeover: bool = False) -> None:
        try:
            self._compressor = zlib.compressobj(
                zlib.Z_DEFAULT_COMPRESSION,
                zlib.DEFLATED,
                -window_bits,
                _MEMORY_LEVEL,
                zlib.Z_DEFAULT_STRATEGY,
            )
        except (ValueError, zlib.error) as exc:
            raise DeflateError(
                f"cannot initialise deflate with window bits {window_bits}: {exc}"
            ) from exc
        self._flush_mode = zlib.Z_FULL_FLUSH if no_context_takeover else zlib.Z_SYNC_FLUSH

    def compress(self, data: Data) -> bytes:
        """Return the compressed payload of one message, without the trailing block."""
        payload = _as_bytes(data)
        if not payload:
            return _EMPTY_MESSAGE
        try:
            out = self._compressor.compress(payload) + self._compressor.flush(self._flush_mode)
        except zlib.error as exc:
            raise DeflateError(f"compression failed: {exc}") from exc
        if out.endswith(EMPTY_UNCOMPRESSED_BLOCK):
            out = out[: -len(EMPTY_UNCOMPRESSED_BLOCK)]
        return out


class DeflateDecompressor:
    """Decompresses successive messages of one connection."""

    def __init__(self, window_bits: int = 15, no_context_takeover: bool = False) -> None:
        try:
            self._decompressor = zlib.decompressobj(-window_bits)
        except (ValueError, zlib.error) as exc:
            raise DeflateError(
                f"cannot initialise inflate with window bits {window_bits}: {exc}"
            ) from exc
        self._no_context_takeover = no_context_takeover

    def decompress(self, data: Data) -> bytes:
        """Return the original payload of one compressed message."""
        payload = _as_bytes(data) + EMPTY_UNCOMPRESSED_BLOCK
        try:
            return self._decompressor.decompress(payload)
        except zlib.error as exc:
            raise DeflateError(f"decompression failed: {exc}") from exc


class PerMessageDeflate:
    """A compressor and a decompressor set up from negotiated options."""

    def __init__(self, options: PerMessageDeflateOptions) -> None:
        no_context_takeover = options.client_no_context_takeover
        self._compressor = DeflateCompressor(options.client_max_window_bits, no_context_takeover)
        self._decompressor = DeflateDecompressor(
            options.server_max_window_bits, no_context_takeover
        )

    def compress(self, data: Data) -> bytes:
        return self._compressor.compress(data)

    def decompress(self, data: Data) -> bytes:
        return self._decompressor.decompress(data)