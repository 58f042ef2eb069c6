"""A non-blocking UDP socket bound to one remote address."""

from __future__ import annotations

import errno
import socket
from typing import Optional, Union

_WAIT_ERRNOS = frozenset({errno.EWOULDBLOCK, errno.EAGAIN, errno.EINPROGRESS})


def is_wait_needed(error: Union[int, OSError, None]) -> bool:
    """Return True if ``error`` only means the operation would block."""
    code = error.errno if isinstance(error, OSError) else error
    return code in _WAIT_ERRNOS


class UdpSocket:
    """A non-blocking IPv4 UDP socket that sends to ``host``:``port``.

    The remote address is resolved once, when the socket is created;
    a failed resolution raises :class:`OSError`.  Receiving a datagram
    makes its sender the new destination.
    """

    def __init__(self, host: str, port: int) -> None:
        self._sock: Optional[socket.socket] = socket.socket(
            socket.AF_INET, socket.SOCK_DGRAM, socket.IPPROTO_UDP
        )
        try:
            self._sock.setblocking(False)
            infos = socket.getaddrinfo(host, None, socket.AF_INET, socket.SOCK_DGRAM)
            if not infos:
                raise OSError(f"cannot resolve {host!r}")
            address = infos[0][4][0]
        except BaseException:
            self.close()
            raise
        self._address: tuple[str, int] = (address, port & 0xFFFF)

    def _socket(self) -> socket.socket:
        if self._sock is None:
            raise OSError(errno.EBADF, "socket is closed")
        return self._sock

    def send(self, data: Union[bytes, bytearray, memoryview, str]) -> int:
        """Send one datagram and return the number of bytes sent."""
        payload = data.encode("utf-8") if isinstance(data, str) else data
        return self._socket().sendto(payload, self._address)

    def receive(self, size: int) -> bytes:
        """Return one datagram of at most ``size`` bytes.

        Raises :class:`BlockingIOError` when none is waiting.
        """
        data, sender = self._socket().recvfrom(size)
        self._address = sender
        return data

    def close(self) -> None:
        if self._sock is not None:
            self._sock.close()
            self._sock = None

    def __enter__(self) -> "UdpSocket":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()