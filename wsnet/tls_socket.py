"""A TCP socket secured with TLS, for both the client and the server side."""

from __future__ import annotations

import os
import select
import socket
import ssl
import threading
from collections.abc import Callable
from typing import Optional, Union

from .tls_context import (
    TLSError,
    create_client_context,
    create_server_context,
    describe_ssl_error,
)
from .tls_options import SocketTLSOptions
from .udp import is_wait_needed

# How long to wait for readiness before checking for cancellation again.
_POLL_INTERVAL = 0.05

CancellationCheck = Callable[[], bool]


def _never_cancelled() -> bool:
    return False


def _check_cancelled(is_cancelled: CancellationCheck) -> None:
    if is_cancelled():
        raise TLSError("Cancellation requested")


def _open_connection(host: str, port: int, is_cancelled: CancellationCheck) -> socket.socket:
    """Connect a non-blocking TCP socket to ``host``:``port``."""
    try:
        addresses = socket.getaddrinfo(host, port, type=socket.SOCK_STREAM)
    except OSError as exc:
        raise TLSError(f"Unable to connect to {host} on port {port}, error: {exc}") from exc

    last_error: Optional[OSError] = None
    for family, kind, proto, _, address in addresses:
        sock = socket.socket(family, kind, proto)
        try:
            sock.setblocking(False)
            error = sock.connect_ex(address)
            if error and not is_wait_needed(error):
                raise OSError(error, os.strerror(error))
            while error:
                _check_cancelled(is_cancelled)
                _, writable, _ = select.select([], [sock], [], _POLL_INTERVAL)
                if writable:
                    error = sock.getsockopt(socket.SOL_SOCKET, socket.SO_ERROR)
                    if error:
                        raise OSError(error, os.strerror(error))
                    break
            sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
            return sock
        except TLSError:
            sock.close()
            raise
        except OSError as exc:
            sock.close()
            last_error = exc
    raise TLSError(f"Unable to connect to {host} on port {port}, error: {last_error}")


def _handshake(tls: ssl.SSLSocket, is_cancelled: CancellationCheck) -> None:
    while True:
        _check_cancelled(is_cancelled)
        try:
            tls.do_handshake()
            return
        except ssl.SSLWantReadError:
            select.select([tls], [], [], _POLL_INTERVAL)
        except ssl.SSLWantWriteError:
            select.select([], [tls], [], _POLL_INTERVAL)
        except OSError as exc:
            raise TLSError(describe_ssl_error(exc)) from exc


class TLSSocket:
    """A TLS connection over a non-blocking TCP socket.

    A client calls :meth:`connect`; a server hands an accepted socket to
    the constructor and calls :meth:`accept`.  Failures raise
    :class:`TLSError` and leave the socket closed.
    """

    def __init__(
        self,
        options: Optional[SocketTLSOptions] = None,
        sock: Optional[socket.socket] = None,
    ) -> None:
        self._options = options if options is not None else SocketTLSOptions()
        self._raw: Optional[socket.socket] = sock
        self._tls: Optional[ssl.SSLSocket] = None
        self._lock = threading.RLock()

    def connect(
        self,
        host: str,
        port: int,
        is_cancelled: Optional[CancellationCheck] = None,
    ) -> None:
        """Open a TCP connection to ``host``:``port`` and run the client handshake.

        ``is_cancelled`` is polled while waiting; when it returns True the
        attempt stops with :class:`TLSError`.
        """
        check = is_cancelled if is_cancelled is not None else _never_cancelled
        try:
            with self._lock:
                self._raw = _open_connection(host, port, check)
                context = create_client_context(self._options)
                self._tls = context.wrap_socket(
                    self._raw, server_hostname=host, do_handshake_on_connect=False
                )
                _handshake(self._tls, check)
                if (
                    not self._options.disable_hostname_validation
                    and self._tls.getpeercert(binary_form=True) is None
                ):
                    raise TLSError(
                        "OpenSSL failed - peer didn't present a X509 certificate."
                    )
        except BaseException:
            self.close()
            raise

    def accept(self) -> None:
        """Run the server handshake on the socket given to the constructor."""
        try:
            with self._lock:
                if self._raw is None:
                    raise TLSError("no connected socket to accept a TLS session on")
                self._raw.setblocking(False)
                context = create_server_context(self._options)
                self._tls = context.wrap_socket(
                    self._raw, server_side=True, do_handshake_on_connect=False
                )
                _handshake(self._tls, _never_cancelled)
        except BaseException:
            self.close()
            raise

    def send(self, data: Union[bytes, bytearray, memoryview]) -> int:
        """Write ``data`` and return how many bytes were taken, 0 if not connected.

        Raises :class:`BlockingIOError` when the write must be retried later.
        """
        with self._lock:
            if self._tls is None:
                return 0
            try:
                return self._tls.send(data)
            except (ssl.SSLWantReadError, ssl.SSLWantWriteError) as exc:
                raise BlockingIOError(str(exc)) from exc
            except OSError as exc:
                if is_wait_needed(exc):
                    raise
                raise TLSError(describe_ssl_error(exc)) from exc

    def recv(self, size: int) -> bytes:
        """Read at most ``size`` bytes; empty when not connected or at end of stream.

        Raises :class:`BlockingIOError` when no data is available yet.
        """
        with self._lock:
            if self._tls is None:
                return b""
            try:
                return self._tls.recv(size)
            except (ssl.SSLWantReadError, ssl.SSLWantWriteError) as exc:
                raise BlockingIOError(str(exc)) from exc
            except OSError as exc:
                if is_wait_needed(exc):
                    raise
                raise TLSError(describe_ssl_error(exc)) from exc

    def close(self) -> None:
        """Close the TLS session and the socket under it; safe to call twice."""
        with self._lock:
            if self._tls is not None:
                self._tls.close()
                self._tls = None
            if self._raw is not None:
                self._raw.close()
                self._raw = None

    def __enter__(self) -> "TLSSocket":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()