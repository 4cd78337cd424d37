"""Shared fixtures: a scripted reader board and header-bearing bank 0 images."""

from typing import Dict, List, Tuple

import pytest

from gb_rw.header import BANK_SIZE, header_checksum
from gb_rw.protocol.commands import Command, decode_frame


class ScriptedSerial:
    """
    pyserial stand-in for the reader board.

    Serves ``lines`` first (boot banner, HELLO), then answers each READ
    frame with the next queued response for that exact address window.
    """

    def __init__(self, lines=(), responses: Dict[Tuple[int, int], List[bytes]] = None):
        self.port = "/dev/scripted"
        self.rx = bytearray(b"".join(lines))
        self.responses = {key: list(value) for key, value in (responses or {}).items()}
        self.writes: List[bytes] = []
        self.requests: List[Tuple[int, int]] = []
        self.reads = 0
        self.flushes = 0
        self.timeout = None
        self.is_open = True

    def open(self) -> None:
        self.is_open = True

    def write(self, data: bytes) -> int:
        data = bytes(data)
        self.writes.append(data)
        command, addr_range = decode_frame(data)
        assert command == Command.READ
        key = (addr_range.start, addr_range.end)
        self.requests.append(key)
        queue = self.responses.get(key)
        if queue:
            self.rx.extend(queue.pop(0))
        return len(data)

    def flush(self) -> None:
        self.flushes += 1

    def read(self, size: int = 1) -> bytes:
        self.reads += 1
        chunk = bytes(self.rx[:size])
        del self.rx[:size]
        return chunk

    def read_until(self, expected: bytes = b"\n") -> bytes:
        idx = self.rx.find(expected)
        end = len(self.rx) if idx < 0 else idx + len(expected)
        line = bytes(self.rx[:end])
        del self.rx[:end]
        return line

    def close(self) -> None:
        self.is_open = False


def build_bank0(rom_size_code: int = 0x00, title: bytes = b"TESTCART", bad_checksum: bool = False) -> bytes:
    bank = bytearray((i * 7 + 3) & 0xFF for i in range(BANK_SIZE))
    bank[0x0100:0x0104] = b"\x00\xC3\x50\x01"
    bank[0x0134:0x0144] = title.ljust(16, b"\x00")
    bank[0x0144:0x0146] = b"01"
    bank[0x0146] = 0x00
    bank[0x0147] = 0x01
    bank[0x0148] = rom_size_code
    bank[0x0149] = 0x00
    bank[0x014A] = 0x01
    bank[0x014B] = 0x33
    bank[0x014C] = 0x00
    checksum = header_checksum(bank)
    bank[0x014D] = checksum ^ 0xFF if bad_checksum else checksum
    bank[0x014E:0x0150] = b"\x12\x34"
    return bytes(bank)


@pytest.fixture
def make_bank0():
    return build_bank0


@pytest.fixture
def scripted_serial():
    return ScriptedSerial
