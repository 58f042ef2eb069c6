import dataclasses

import pytest

from wsnet.close import CloseCode, CloseInfo, CloseMessage


def test_close_code_lookup_by_value():
    assert CloseCode(1000) is CloseCode.NORMAL_CLOSURE
    assert CloseCode(1006) is CloseCode.ABNORMAL_CLOSE


def test_unknown_close_code_raises():
    with pytest.raises(ValueError):
        CloseCode(4999)


def test_close_message_lookup_by_value():
    assert CloseMessage("Normal closure") is CloseMessage.NORMAL_CLOSURE
    assert str(CloseMessage.PING_TIMEOUT) == "Ping timeout"


def test_close_message_behaves_as_string():
    message = CloseMessage("Invalid frame payload data")
    assert message + "!" == "Invalid frame payload data!"
    assert message.upper() == "INVALID FRAME PAYLOAD DATA"


def test_close_info_defaults():
    info = CloseInfo()
    assert (info.code, info.reason, info.remote) == (0, "", False)


def test_close_info_holds_values():
    info = CloseInfo(CloseCode.NORMAL_CLOSURE, CloseMessage.NORMAL_CLOSURE, True)
    assert info.code == 1000
    assert info.reason == "Normal closure"
    assert info.remote is True
    assert info == CloseInfo(1000, "Normal closure", True)


def test_close_info_is_immutable():
    info = CloseInfo()
    with pytest.raises(dataclasses.FrozenInstanceError):
        info.code = 1000
    assert info.code == 0