"""
Command framing for the cartridge reader firmware.

Frame layout (host -> device, 5 bytes, little-endian addresses):
    [opcode | start_lo | start_hi | end_lo | end_hi]

Only READ has a defined response: exactly ``end - start`` raw bytes.
"""

import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import Tuple

from gb_rw.errors import UnimplementedOperation

FRAME_FORMAT = "<BHH"
FRAME_SIZE = struct.calcsize(FRAME_FORMAT)

ADDR_MAX = 0xFFFF


class Command(IntEnum):
    """Opcodes understood by the device."""
    READ = 0
    WRITE = 1
    WRITE_RAW = 2
    WRITE_FLASH = 3
    ERASE = 4


class Reply(IntEnum):
    """Acknowledgement bytes (reserved, not consumed by the read path)."""
    ACK = 0
    NACK = 1


@dataclass(frozen=True)
class AddressRange:
    """Half-open cartridge address window [start, end)."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if not 0 <= self.start < self.end <= ADDR_MAX:
            raise ValueError(
                f"Invalid address range 0x{self.start:04X}-0x{self.end:04X} "
                f"(need 0 <= start < end <= 0x{ADDR_MAX:04X})"
            )

    def __len__(self) -> int:
        return self.end - self.start

    def __str__(self) -> str:
        return f"0x{self.start:04X}-0x{self.end:04X}"


def encode_command(command: Command, addr_range: AddressRange) -> bytes:
    """
    Serialize a command into its 5-byte frame.

    Raises:
        UnimplementedOperation: For any opcode other than READ
    """
    if command != Command.READ:
        raise UnimplementedOperation(
            f"Command {command.name} has no encoder yet"
        )
    return struct.pack(FRAME_FORMAT, command, addr_range.start, addr_range.end)


def encode_read(start: int, end: int) -> bytes:
    """Build a READ frame for [start, end)."""
    return encode_command(Command.READ, AddressRange(start, end))


def decode_frame(frame: bytes) -> Tuple[Command, AddressRange]:
    """
    Parse a 5-byte command frame.

    Raises:
        ValueError: On wrong length, unknown opcode or invalid range
    """
    if len(frame) != FRAME_SIZE:
        raise ValueError(f"Frame must be {FRAME_SIZE} bytes, got {len(frame)}")
    opcode, start, end = struct.unpack(FRAME_FORMAT, frame)
    try:
        command = Command(opcode)
    except ValueError:
        raise ValueError(f"Unknown opcode 0x{opcode:02X}")
    return command, AddressRange(start, end)
