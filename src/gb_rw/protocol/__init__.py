"""Reader protocol layer - serial transport, handshake and command frames."""

from .transport import (
    SerialTransport,
    TransportError,
    PortOpenError,
    PortConfigError,
    PortDrainError,
    PortTimeout,
)
from .commands import (
    Command,
    Reply,
    AddressRange,
    encode_command,
    encode_read,
    decode_frame,
    FRAME_SIZE,
)
from .handshake import wait_for_hello, HELLO_TOKEN

__all__ = [
    # Transport
    "SerialTransport",
    "TransportError",
    "PortOpenError",
    "PortConfigError",
    "PortDrainError",
    "PortTimeout",
    # Commands
    "Command",
    "Reply",
    "AddressRange",
    "encode_command",
    "encode_read",
    "decode_frame",
    "FRAME_SIZE",
    # Handshake
    "wait_for_hello",
    "HELLO_TOKEN",
]
