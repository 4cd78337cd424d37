"""
Game Boy cartridge header parsing and header checksum.

Header layout (offsets into bank 0):
    0x0100-0x0103  entry point
    0x0104-0x0133  Nintendo logo
    0x0134-0x0143  title (0x0143 doubles as CGB flag)
    0x0144-0x0145  new licensee code
    0x0146         SGB flag
    0x0147         cartridge type
    0x0148         ROM size code
    0x0149         RAM size code
    0x014A         destination code
    0x014B         old licensee code
    0x014C         mask ROM version
    0x014D         header checksum over 0x0134-0x014C
    0x014E-0x014F  global checksum (big-endian)

Reference: https://gbdev.io/pandocs/The_Cartridge_Header.html
"""

from dataclasses import dataclass
from typing import Dict

from gb_rw.errors import GBRWError

HEADER_START = 0x0100
HEADER_END = 0x0150
HEADER_DUMP_SIZE = 0x0200

CHECKSUM_START = 0x0134
CHECKSUM_END = 0x014D

BANK_SIZE = 0x4000

CARTRIDGE_TYPES: Dict[int, str] = {
    0x00: "ROM ONLY",
    0x01: "MBC1",
    0x02: "MBC1+RAM",
    0x03: "MBC1+RAM+BATTERY",
    0x05: "MBC2",
    0x06: "MBC2+BATTERY",
    0x08: "ROM+RAM",
    0x09: "ROM+RAM+BATTERY",
    0x0B: "MMM01",
    0x0C: "MMM01+RAM",
    0x0D: "MMM01+RAM+BATTERY",
    0x0F: "MBC3+TIMER+BATTERY",
    0x10: "MBC3+TIMER+RAM+BATTERY",
    0x11: "MBC3",
    0x12: "MBC3+RAM",
    0x13: "MBC3+RAM+BATTERY",
    0x19: "MBC5",
    0x1A: "MBC5+RAM",
    0x1B: "MBC5+RAM+BATTERY",
    0x1C: "MBC5+RUMBLE",
    0x1D: "MBC5+RUMBLE+RAM",
    0x1E: "MBC5+RUMBLE+RAM+BATTERY",
    0x20: "MBC6",
    0x22: "MBC7+SENSOR+RUMBLE+RAM+BATTERY",
    0xFC: "POCKET CAMERA",
    0xFD: "BANDAI TAMA5",
    0xFE: "HuC3",
    0xFF: "HuC1+RAM+BATTERY",
}

# ROM size code -> number of 16 KiB banks
ROM_BANKS: Dict[int, int] = {code: 2 << code for code in range(0x09)}
ROM_BANKS.update({0x52: 72, 0x53: 80, 0x54: 96})

# RAM size code -> bytes
RAM_SIZES: Dict[int, int] = {
    0x00: 0,
    0x01: 2 * 1024,
    0x02: 8 * 1024,
    0x03: 32 * 1024,
    0x04: 128 * 1024,
    0x05: 64 * 1024,
}

DESTINATIONS: Dict[int, str] = {
    0x00: "Japan",
    0x01: "Overseas",
}

CGB_FLAGS: Dict[int, str] = {
    0x80: "CGB enhanced",
    0xC0: "CGB only",
}


class HeaderParseError(GBRWError):
    """Bytes do not look like a cartridge header"""
    pass


@dataclass(frozen=True)
class CartridgeHeader:
    """Parsed cartridge header fields."""

    entry_point: bytes
    logo: bytes
    title: str
    cgb_flag: int
    new_licensee: str
    sgb_flag: int
    cartridge_type: int
    rom_size_code: int
    rom_banks: int
    ram_size_code: int
    ram_size: int
    destination: int
    old_licensee: int
    version: int
    checksum: int
    global_checksum: int

    @property
    def cartridge_type_name(self) -> str:
        return CARTRIDGE_TYPES.get(self.cartridge_type, f"UNKNOWN (0x{self.cartridge_type:02X})")

    @property
    def rom_size(self) -> int:
        """ROM size in bytes."""
        return self.rom_banks * BANK_SIZE

    @property
    def destination_name(self) -> str:
        return DESTINATIONS.get(self.destination, f"UNKNOWN (0x{self.destination:02X})")

    @property
    def cgb_mode(self) -> str:
        return CGB_FLAGS.get(self.cgb_flag, "DMG")


@dataclass(frozen=True)
class HeaderCheck:
    """Outcome of comparing the declared and recomputed header checksums."""

    header: CartridgeHeader
    declared: int
    computed: int

    @property
    def ok(self) -> bool:
        return self.declared == self.computed


def _decode_title(raw: bytes) -> str:
    if b"\x00" in raw:
        raw = raw[:raw.index(b"\x00")]
    return raw.decode("ascii", errors="replace").rstrip()


def parse_header(data: bytes) -> CartridgeHeader:
    """
    Parse the cartridge header from the start of bank 0.

    Args:
        data: At least the first 0x0150 bytes of the cartridge

    Raises:
        HeaderParseError: If the buffer is short or a size code is unknown
    """
    if len(data) < HEADER_END:
        raise HeaderParseError(
            f"Need at least 0x{HEADER_END:04X} bytes for the header, got 0x{len(data):04X}"
        )

    rom_size_code = data[0x0148]
    if rom_size_code not in ROM_BANKS:
        raise HeaderParseError(f"Unknown ROM size code 0x{rom_size_code:02X}")

    ram_size_code = data[0x0149]
    if ram_size_code not in RAM_SIZES:
        raise HeaderParseError(f"Unknown RAM size code 0x{ram_size_code:02X}")

    cgb_flag = data[0x0143]
    title_end = 0x0143 if cgb_flag in CGB_FLAGS else 0x0144

    return CartridgeHeader(
        entry_point=bytes(data[0x0100:0x0104]),
        logo=bytes(data[0x0104:0x0134]),
        title=_decode_title(bytes(data[0x0134:title_end])),
        cgb_flag=cgb_flag,
        new_licensee=bytes(data[0x0144:0x0146]).decode("ascii", errors="replace"),
        sgb_flag=data[0x0146],
        cartridge_type=data[0x0147],
        rom_size_code=rom_size_code,
        rom_banks=ROM_BANKS[rom_size_code],
        ram_size_code=ram_size_code,
        ram_size=RAM_SIZES[ram_size_code],
        destination=data[0x014A],
        old_licensee=data[0x014B],
        version=data[0x014C],
        checksum=data[0x014D],
        global_checksum=int.from_bytes(data[0x014E:0x0150], "big"),
    )


def header_checksum(data: bytes) -> int:
    """Recompute the one-byte header checksum over 0x0134-0x014C."""
    checksum = 0
    for byte in data[CHECKSUM_START:CHECKSUM_END]:
        checksum = (checksum - byte - 1) & 0xFF
    return checksum


def validate_header(data: bytes) -> HeaderCheck:
    """
    Parse the header and compare its declared checksum to the recomputed one.

    Raises:
        HeaderParseError: If the header cannot be parsed
    """
    header = parse_header(data)
    return HeaderCheck(header=header, declared=header.checksum, computed=header_checksum(data))
