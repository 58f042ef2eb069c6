"""WebSocket close codes, reasons and close information."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum


class CloseCode(IntEnum):
    """Close status codes used by the WebSocket implementation."""

    NORMAL_CLOSURE = 1000
    PROTOCOL_ERROR = 1002
    NO_STATUS_CODE = 1005
    ABNORMAL_CLOSE = 1006
    INVALID_FRAME_PAYLOAD_DATA = 1007
    INTERNAL_ERROR = 1011


class CloseMessage(str, Enum):
    """Human-readable close reasons."""

    NORMAL_CLOSURE = "Normal closure"
    INTERNAL_ERROR = "Internal error"
    ABNORMAL_CLOSE = "Abnormal closure"
    PING_TIMEOUT = "Ping timeout"
    PROTOCOL_ERROR = "Protocol error"
    NO_STATUS_CODE = "No status code"
    PROTOCOL_ERROR_RESERVED_BIT_USED = "Reserved bit used"
    PROTOCOL_ERROR_PING_PAYLOAD_OVERSIZED = (
        "Ping reason control frame with payload length > 125 octets"
    )
    PROTOCOL_ERROR_CONTROL_MESSAGE_FRAGMENTED = "Control message fragmented"
    PROTOCOL_ERROR_DATA_OPCODE_OUT_OF_SEQUENCE = "Fragmentation: data message out of sequence"
    PROTOCOL_ERROR_CONTINUATION_OPCODE_OUT_OF_SEQUENCE = (
        "Fragmentation: continuation opcode out of sequence"
    )
    INVALID_FRAME_PAYLOAD_DATA = "Invalid frame payload data"
    INVALID_CLOSE_CODE = "Invalid close code"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class CloseInfo:
    """Why and by whom a connection was closed."""

    code: int = 0
    reason: str = ""
    remote: bool = False