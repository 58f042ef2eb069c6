"""The opening handshake of the WebSocket protocol, for clients and servers."""

from __future__ import annotations

import base64
import re
import secrets
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import NoReturn, Optional, Protocol, Union

from .deflate import DeflateError, PerMessageDeflate
from .deflate_options import PerMessageDeflateOptions
from .headers import (
    CaseInsensitiveDict,
    HeaderParseError,
    case_insensitive_less,
    parse_http_headers,
)
from .keygen import generate_accept_key
from .urlparser import parse_url
from .useragent import user_agent

_KEY_ALPHABET = "0123456789ABCDEFGHabcdefgh"
_KEY_SOURCE_LENGTH = 16
_C_INT = re.compile(r"[ \t\n\v\f\r]*([+-]?[0-9]+)")

HeadersLike = Union[Mapping[str, str], Iterable[tuple[str, str]], None]


class Stream(Protocol):
    """A connected, blocking binary stream such as ``socket.makefile("rwb")``."""

    def read(self, size: int = ..., /) -> bytes: ...

    def readline(self) -> bytes: ...

    def write(self, data: bytes, /) -> Optional[int]: ...


class HandshakeError(Exception):
    """Raised when the opening handshake fails.

    ``http_status`` is the status received or sent, 0 when there is none.
    """

    def __init__(
        self,
        message: str,
        http_status: int = 0,
        headers: Optional[CaseInsensitiveDict] = None,
        uri: str = "",
    ) -> None:
        super().__init__(message)
        self.message = message
        self.http_status = http_status
        self.headers = headers if headers is not None else CaseInsensitiveDict()
        self.uri = uri


@dataclass
class HandshakeResult:
    """The outcome of a successful handshake.

    ``deflate`` is the compression engine when permessage-deflate was
    negotiated, otherwise None.
    """

    status: int
    headers: CaseInsensitiveDict = field(default_factory=CaseInsensitiveDict)
    uri: str = ""
    deflate: Optional[PerMessageDeflate] = None


def generate_random_string(length: int) -> str:
    """Return ``length`` random characters taken from a small alphanumeric set."""
    return "".join(secrets.choice(_KEY_ALPHABET) for _ in range(length))


def generate_key() -> str:
    """Return a fresh Sec-WebSocket-Key value: 16 random characters, base64-encoded."""
    raw = generate_random_string(_KEY_SOURCE_LENGTH).encode("ascii")
    return base64.b64encode(raw).decode("ascii")


def _as_headers(headers: HeadersLike) -> CaseInsensitiveDict:
    if isinstance(headers, CaseInsensitiveDict):
        return headers
    return CaseInsensitiveDict(headers)


def _token_matches(value: str, expected: str) -> bool:
    # Accepts any value that does not sort before the expected token, ignoring case.
    return not case_insensitive_less(value, expected)


def _send(stream: Stream, data: bytes) -> None:
    stream.write(data)
    flush = getattr(stream, "flush", None)
    if flush is not None:
        flush()


def _read_line(stream: Stream) -> Optional[str]:
    try:
        line = stream.readline()
    except OSError:
        return None
    if not line.endswith(b"\n"):
        return None
    return line.decode("latin-1").rstrip("\r\n")


def _parse_status_line(line: str) -> tuple[str, int]:
    parts = line.split()
    version = parts[0] if parts else ""
    code = parts[1] if len(parts) > 1 else ""
    status = int(code) if code.isascii() and code.isdigit() else -1
    return version, status


def _parse_request_line(line: str) -> tuple[str, str, str]:
    parts = line.split()
    parts += [""] * (3 - len(parts))
    return parts[0], parts[1], parts[2]


def _deflate_engine(options: PerMessageDeflateOptions) -> PerMessageDeflate:
    try:
        return PerMessageDeflate(options)
    except DeflateError as exc:
        raise HandshakeError("Failed to initialize per message deflate engine") from exc


def build_client_request(
    path: str,
    host: str,
    port: int,
    protocol: str,
    key: str,
    extra_headers: HeadersLike = None,
    deflate_options: Optional[PerMessageDeflateOptions] = None,
) -> bytes:
    """Return the client's upgrade request.

    Host, User-Agent and Origin are added unless ``extra_headers`` sets them.
    """
    extra = _as_headers(extra_headers)
    lines = [f"GET {path} HTTP/1.1"]
    if "Host" not in extra:
        lines.append(f"Host: {host}:{port}")
    lines += [
        "Upgrade: websocket",
        "Connection: Upgrade",
        "Sec-WebSocket-Version: 13",
        f"Sec-WebSocket-Key: {key}",
    ]
    if "User-Agent" not in extra:
        lines.append(f"User-Agent: {user_agent()}")
    if "Origin" not in extra:
        lines.append(f"Origin: {protocol}://{host}:{port}")
    lines.extend(f"{name}: {value}" for name, value in extra.items())

    text = "".join(f"{line}\r\n" for line in lines)
    if deflate_options is not None and deflate_options.enabled:
        text += deflate_options.generate_header()
    return (text + "\r\n").encode("utf-8")


def _check_status_version(url: str, status_line: str) -> int:
    version, status = _parse_status_line(status_line)
    if version != "HTTP/1.1":
        raise HandshakeError(
            f"Expecting HTTP/1.1, got {version}. Rejecting connection to {url}, "
            f"status: {status}, HTTP Status line: {status_line}",
            status,
        )
    return status


def check_server_response(
    url: str,
    key: str,
    status_line: str,
    headers: HeadersLike,
    path: str,
    deflate_options: Optional[PerMessageDeflateOptions] = None,
) -> HandshakeResult:
    """Validate the server's answer to an upgrade request sent with ``key``.

    Raises :class:`HandshakeError` if the server did not switch protocols.
    """
    status_line = status_line.rstrip("\r\n")
    status = _check_status_version(url, status_line)
    received = _as_headers(headers)

    if status != 101:
        raise HandshakeError(
            f"Expecting status 101 (Switching Protocol), got {status} status "
            f"connecting to {url}, HTTP Status line: {status_line}",
            status,
            received,
            path,
        )
    if "connection" not in received:
        raise HandshakeError("Missing connection value", status)
    connection = received["connection"]
    if not _token_matches(connection, "Upgrade"):
        raise HandshakeError(f"Invalid connection value: {connection}", status)
    if generate_accept_key(key) != received.get("sec-websocket-accept", ""):
        raise HandshakeError("Invalid Sec-WebSocket-Accept value", status)

    deflate = None
    if deflate_options is not None and deflate_options.enabled:
        negotiated = PerMessageDeflateOptions.from_header(
            received.get("sec-websocket-extensions", "")
        )
        if negotiated.enabled:
            deflate = _deflate_engine(negotiated)

    return HandshakeResult(status=status, headers=received, uri=path, deflate=deflate)


def _check_request_line(method: str, version: str) -> None:
    if method != "GET":
        raise HandshakeError(f"Invalid HTTP method, need GET, got {method}", 400)
    if version != "HTTP/1.1":
        raise HandshakeError(f"Invalid HTTP version, need HTTP/1.1, got: {version}", 400)


def check_client_request(method: str, version: str, headers: HeadersLike) -> str:
    """Validate a client's upgrade request and return its Sec-WebSocket-Key.

    Raises :class:`HandshakeError` with status 400 describing the problem.
    """
    _check_request_line(method, version)
    received = _as_headers(headers)

    if "sec-websocket-key" not in received:
        raise HandshakeError("Missing Sec-WebSocket-Key value", 400)
    if "upgrade" not in received:
        raise HandshakeError("Missing Upgrade header", 400)
    upgrade = received["upgrade"]
    # Some browsers send this combined value.
    if not _token_matches(upgrade, "WebSocket") and upgrade != "keep-alive, Upgrade":
        raise HandshakeError(f"Invalid Upgrade header, need WebSocket, got {upgrade}", 400)
    if "sec-websocket-version" not in received:
        raise HandshakeError("Missing Sec-WebSocket-Version value", 400)
    raw_version = received["sec-websocket-version"]
    match = _C_INT.match(raw_version)
    if (int(match.group(1)) if match else 0) != 13:
        raise HandshakeError(
            f"Invalid Sec-WebSocket-Version, need 13, got {raw_version}", 400
        )
    return received["sec-websocket-key"]


def build_server_response(
    headers: HeadersLike, enable_deflate: bool = False
) -> tuple[bytes, Optional[PerMessageDeflate]]:
    """Return the 101 response to a client request and the deflate engine, if any.

    Compression is agreed to only when the client asked for it and
    ``enable_deflate`` is set.
    """
    received = _as_headers(headers)
    accept = generate_accept_key(received.get("sec-websocket-key", ""))
    text = (
        "HTTP/1.1 101 Switching Protocols\r\n"
        f"Sec-WebSocket-Accept: {accept}\r\n"
        "Upgrade: websocket\r\n"
        "Connection: Upgrade\r\n"
        f"Server: {user_agent()}\r\n"
    )

    deflate = None
    requested = PerMessageDeflateOptions.from_header(
        received.get("sec-websocket-extensions", "")
    )
    if requested.enabled and enable_deflate:
        deflate = _deflate_engine(requested)
        text += requested.generate_header()

    return (text + "\r\n").encode("utf-8"), deflate


def build_error_response(code: int, reason: str) -> bytes:
    """Return the status line and Server header sent when a request is refused."""
    return f"HTTP/1.1 {code} {reason}\r\nServer: {user_agent()}\r\n".encode("utf-8")


def client_handshake(
    stream: Stream,
    url: str,
    extra_headers: HeadersLike = None,
    deflate_options: Optional[PerMessageDeflateOptions] = None,
) -> HandshakeResult:
    """Perform the client side of the handshake over an already connected stream."""
    parsed = parse_url(url)
    key = generate_key()
    request = build_client_request(
        parsed.path,
        parsed.host,
        parsed.port,
        parsed.protocol,
        key,
        extra_headers,
        deflate_options,
    )
    try:
        _send(stream, request)
    except OSError as exc:
        raise HandshakeError(f"Failed sending GET request to {url}") from exc

    status_line = _read_line(stream)
    if status_line is None:
        raise HandshakeError(f"Failed reading HTTP status line from {url}")
    status = _check_status_version(url, status_line)

    try:
        headers = parse_http_headers(lambda: stream.read(1))
    except HeaderParseError as exc:
        raise HandshakeError("Error parsing HTTP headers", status) from exc

    return check_server_response(url, key, status_line, headers, parsed.path, deflate_options)


def _reject(stream: Stream, error: HandshakeError) -> NoReturn:
    try:
        _send(stream, build_error_response(error.http_status, error.message))
    except OSError as exc:
        raise HandshakeError("Timed out while sending error response", 500) from exc
    raise error


def server_handshake(stream: Stream, enable_deflate: bool = False) -> HandshakeResult:
    """Perform the server side of the handshake over an accepted stream.

    A bad request is answered with an error response before
    :class:`HandshakeError` is raised.
    """
    request_line = _read_line(stream)
    if request_line is None:
        _reject(stream, HandshakeError("Error reading HTTP request line", 400))
    method, uri, version = _parse_request_line(request_line)

    try:
        _check_request_line(method, version)
    except HandshakeError as exc:
        _reject(stream, exc)

    try:
        headers = parse_http_headers(lambda: stream.read(1))
    except HeaderParseError:
        _reject(stream, HandshakeError("Error parsing HTTP headers", 400))

    try:
        check_client_request(method, version, headers)
    except HandshakeError as exc:
        _reject(stream, exc)

    response, deflate = build_server_response(headers, enable_deflate)
    try:
        _send(stream, response)
    except OSError as exc:
        raise HandshakeError("Failed sending response to remote end") from exc

    return HandshakeResult(status=200, headers=headers, uri=uri, deflate=deflate)