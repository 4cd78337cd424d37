"""Tests for command frame encoding."""

import pytest

from gb_rw.errors import UnimplementedOperation
from gb_rw.protocol.commands import (
    FRAME_SIZE,
    AddressRange,
    Command,
    Reply,
    decode_frame,
    encode_command,
    encode_read,
)


def test_opcode_values_match_firmware():
    assert [c.value for c in Command] == [0, 1, 2, 3, 4]
    assert Reply.ACK == 0
    assert Reply.NACK == 1


def test_read_bank0_frame_bytes():
    # opcode | start_lo start_hi | end_lo end_hi
    assert encode_read(0x0000, 0x4000) == bytes([0x00, 0x00, 0x00, 0x00, 0x40])


def test_read_switchable_window_frame_bytes():
    assert encode_read(0x4000, 0x8000) == bytes([0x00, 0x00, 0x40, 0x00, 0x80])


def test_addresses_are_little_endian():
    frame = encode_read(0x1234, 0xABCD)
    assert frame == bytes([0x00, 0x34, 0x12, 0xCD, 0xAB])


@pytest.mark.parametrize(
    "start,end",
    [(0x0000, 0x0001), (0x0000, 0x4000), (0x4000, 0x8000), (0x00FF, 0x0100), (0xFFFE, 0xFFFF)],
)
def test_decode_inverts_encode(start, end):
    frame = encode_read(start, end)
    assert len(frame) == FRAME_SIZE == 5
    command, addr_range = decode_frame(frame)
    assert command == Command.READ
    assert (addr_range.start, addr_range.end) == (start, end)


def test_address_range_length_is_end_minus_start():
    assert len(AddressRange(0x4000, 0x8000)) == 0x4000


@pytest.mark.parametrize("start,end", [(0x10, 0x10), (0x20, 0x10), (-1, 0x10), (0, 0x10000)])
def test_invalid_address_range_rejected(start, end):
    with pytest.raises(ValueError):
        AddressRange(start, end)


@pytest.mark.parametrize(
    "command", [Command.WRITE, Command.WRITE_RAW, Command.WRITE_FLASH, Command.ERASE]
)
def test_non_read_commands_are_unimplemented(command):
    with pytest.raises(UnimplementedOperation):
        encode_command(command, AddressRange(0x0000, 0x4000))


def test_decode_rejects_wrong_length():
    with pytest.raises(ValueError):
        decode_frame(b"\x00\x00\x00\x00")


def test_decode_rejects_unknown_opcode():
    with pytest.raises(ValueError):
        decode_frame(bytes([0x09, 0x00, 0x00, 0x00, 0x40]))
