"""
Dump engine: handshake, bank 0, header gate, remaining banks, write-out.

The engine drives a transport strictly one request at a time:

    AWAIT_HANDSHAKE -> READ_BANK0 -> VALIDATE_HEADER
        -> READ_REMAINING_BANKS -> FINALIZE -> DONE

A failed header check is terminal; no further request is sent.
"""

import hashlib
import logging
from enum import Enum
from typing import BinaryIO, Callable, Optional

from gb_rw.errors import GBRWError, UnimplementedOperation
from gb_rw.header import BANK_SIZE, HEADER_DUMP_SIZE, HeaderCheck, validate_header
from gb_rw.protocol.commands import AddressRange, Command, encode_command
from gb_rw.protocol.handshake import wait_for_hello
from .results import DumpResult, KnownLimitation

logger = logging.getLogger(__name__)

BANK0_WINDOW = AddressRange(0x0000, BANK_SIZE)
SWITCHABLE_WINDOW = AddressRange(BANK_SIZE, 2 * BANK_SIZE)


class ChecksumMismatch(GBRWError):
    """Declared header checksum differs from the recomputed one"""

    def __init__(self, declared: int, computed: int):
        super().__init__(f"Header checksum mismatch: {declared:02x} != {computed:02x}")
        self.declared = declared
        self.computed = computed


class MemoryRegion(Enum):
    """Cartridge memory space targeted by a session."""
    ROM = "ROM"
    RAM = "RAM"


class Mode(Enum):
    """Operation modes selectable by the operator."""
    READ_ROM = "read_ROM"
    READ_RAM = "read_RAM"
    WRITE_ROM = "write_ROM"
    WRITE_RAM = "write_RAM"

    @property
    def reads_cartridge(self) -> bool:
        return self in (Mode.READ_ROM, Mode.READ_RAM)

    @property
    def region(self) -> MemoryRegion:
        return MemoryRegion.ROM if self in (Mode.READ_ROM, Mode.WRITE_ROM) else MemoryRegion.RAM


class SessionState(Enum):
    AWAIT_HANDSHAKE = "await_handshake"
    READ_BANK0 = "read_bank0"
    VALIDATE_HEADER = "validate_header"
    READ_REMAINING_BANKS = "read_remaining_banks"
    FINALIZE = "finalize"
    DONE = "done"


class DumpEngine:
    """
    Reads a cartridge image over a transport.

    Args:
        transport: Object with write_all(), read_exact() and read_line()
        progress_cb: Optional callback(banks_done, banks_total)
        on_header: Optional callback(bank0, header_check), called before the
            checksum gate so callers can show the header even on mismatch
    """

    def __init__(
        self,
        transport,
        progress_cb: Optional[Callable[[int, int], None]] = None,
        on_header: Optional[Callable[[bytes, HeaderCheck], None]] = None,
    ):
        self.transport = transport
        self.progress_cb = progress_cb
        self.on_header = on_header
        self.state = SessionState.AWAIT_HANDSHAKE

    def _enter(self, state: SessionState) -> None:
        logger.debug(f"Session state {self.state.value} -> {state.value}")
        self.state = state

    def _request(self, addr_range: AddressRange) -> bytes:
        self.transport.write_all(encode_command(Command.READ, addr_range))
        return self.transport.read_exact(len(addr_range))

    def handshake(self) -> None:
        """
        Block until the device says HELLO.

        Raises:
            GBRWError: If this engine already ran a session
        """
        if self.state != SessionState.AWAIT_HANDSHAKE:
            raise GBRWError(f"Session already started (state {self.state.value})")
        wait_for_hello(self.transport)
        self._enter(SessionState.READ_BANK0)

    def read_memory(self, region: MemoryRegion, sink: BinaryIO) -> DumpResult:
        """
        Dump a memory region into ``sink``. Call handshake() first.

        Raises:
            UnimplementedOperation: For the RAM region
            HeaderParseError: If bank 0 carries no parsable header
            ChecksumMismatch: If the header checksum does not match
            TransportError: On any I/O failure
            GBRWError: If the handshake has not completed
        """
        if self.state != SessionState.READ_BANK0:
            raise GBRWError(f"Cannot read memory in state {self.state.value}")
        if region != MemoryRegion.ROM:
            raise UnimplementedOperation(f"Reading cartridge {region.value} is not implemented yet")

        logger.info("Reading bank 000")
        bank0 = self._request(BANK0_WINDOW)

        self._enter(SessionState.VALIDATE_HEADER)
        check = validate_header(bank0[:HEADER_DUMP_SIZE])
        if self.on_header is not None:
            self.on_header(bank0, check)
        if not check.ok:
            raise ChecksumMismatch(check.declared, check.computed)

        header = check.header
        result = DumpResult(ok=False, operation=f"read_{region.value}", header=header)

        self._enter(SessionState.READ_REMAINING_BANKS)
        image = bytearray(bank0)
        total = header.rom_banks
        if self.progress_cb:
            self.progress_cb(1, total)

        for bank in range(1, total):
            if bank != 1:
                logger.warning(f"Switching to bank {bank:03d} is not implemented; re-reading {SWITCHABLE_WINDOW}")
                result.add_limitation(KnownLimitation.BANK_SWITCH)
            logger.info(f"Reading bank {bank:03d}")
            image.extend(self._request(SWITCHABLE_WINDOW))
            if self.progress_cb:
                self.progress_cb(bank + 1, total)

        self._enter(SessionState.FINALIZE)
        logger.warning("Global checksum verification is not implemented")
        result.add_limitation(KnownLimitation.GLOBAL_CHECKSUM)

        sink.write(bytes(image))
        sink.flush()

        result.ok = True
        result.bytes_len = len(image)
        result.rom_banks = total
        result.hashes["sha256"] = hashlib.sha256(image).hexdigest()
        self._enter(SessionState.DONE)
        return result

    def run(self, region: MemoryRegion, sink: BinaryIO) -> DumpResult:
        """Handshake, then dump ``region`` into ``sink``."""
        self.handshake()
        return self.read_memory(region, sink)
