import errno
import socket
import time

import pytest

from wsnet.udp import UdpSocket, is_wait_needed


@pytest.fixture
def receiver():
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.bind(("127.0.0.1", 0))
    sock.settimeout(5)
    yield sock
    sock.close()


def _receive_with_retry(udp, size, deadline=5.0):
    end = time.monotonic() + deadline
    while True:
        try:
            return udp.receive(size)
        except BlockingIOError:
            if time.monotonic() > end:
                raise
            time.sleep(0.01)


@pytest.mark.parametrize("code", [errno.EAGAIN, errno.EWOULDBLOCK, errno.EINPROGRESS])
def test_wait_needed_codes(code):
    assert is_wait_needed(code) is True


def test_wait_not_needed_for_other_errors():
    assert is_wait_needed(errno.ECONNREFUSED) is False
    assert is_wait_needed(None) is False


def test_wait_needed_from_exception():
    assert is_wait_needed(BlockingIOError(errno.EAGAIN, "again")) is True
    assert is_wait_needed(OSError(errno.EBADF, "bad")) is False


def test_send_reaches_receiver(receiver):
    port = receiver.getsockname()[1]
    with UdpSocket("127.0.0.1", port) as udp:
        assert udp.send(b"hello") == 5
        data, _ = receiver.recvfrom(64)
    assert data == b"hello"


def test_send_str_is_encoded(receiver):
    port = receiver.getsockname()[1]
    with UdpSocket("localhost", port) as udp:
        assert udp.send("ping") == 4
        data, _ = receiver.recvfrom(64)
    assert data == b"ping"


def test_receive_reply(receiver):
    port = receiver.getsockname()[1]
    with UdpSocket("127.0.0.1", port) as udp:
        udp.send(b"question")
        _, sender = receiver.recvfrom(64)
        receiver.sendto(b"answer", sender)
        assert _receive_with_retry(udp, 64) == b"answer"


def test_receive_without_data_would_block(receiver):
    port = receiver.getsockname()[1]
    with UdpSocket("127.0.0.1", port) as udp:
        udp.send(b"x")
        with pytest.raises(BlockingIOError) as info:
            udp.receive(64)
    assert is_wait_needed(info.value)


def test_send_after_close_fails(receiver):
    port = receiver.getsockname()[1]
    with UdpSocket("127.0.0.1", port) as udp:
        pass
    with pytest.raises(OSError):
        udp.send(b"late")


def test_close_twice_then_receive_fails(receiver):
    udp = UdpSocket("127.0.0.1", receiver.getsockname()[1])
    udp.close()
    udp.close()
    with pytest.raises(OSError):
        udp.receive(10)


def test_unresolvable_host_raises():
    with pytest.raises(OSError):
        UdpSocket("nonexistent.invalid", 9)