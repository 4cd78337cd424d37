"""
Result objects for core operations.

Provides a result structure the CLI can print as a table or as JSON.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Dict, Any, Optional

from gb_rw.header import CartridgeHeader


class KnownLimitation(Enum):
    """Paths the dump does not implement yet, recorded when they apply."""
    BANK_SWITCH = "bank_switch"
    GLOBAL_CHECKSUM = "global_checksum"


LIMITATION_NOTES: Dict[KnownLimitation, str] = {
    KnownLimitation.BANK_SWITCH:
        "No bank-select command is sent; banks >= 2 repeat the 0x4000-0x7FFF window.",
    KnownLimitation.GLOBAL_CHECKSUM:
        "Global checksum was not verified.",
}


@dataclass
class DumpResult:
    """
    Outcome of a cartridge session.

    Attributes:
        ok: Whether the operation completed successfully
        operation: Mode name (e.g., "read_ROM")
        path: Output file path
        bytes_len: Number of bytes written
        rom_banks: Banks read from the cartridge
        header: Parsed cartridge header
        hashes: Dict of hash values of the image
        limitations: Known limitations that affected this dump
        metadata: Additional operation-specific data
    """
    ok: bool
    operation: str
    path: str = ""
    bytes_len: int = 0
    rom_banks: int = 0
    header: Optional[CartridgeHeader] = None
    hashes: Dict[str, str] = field(default_factory=dict)
    limitations: List[KnownLimitation] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def add_limitation(self, limitation: KnownLimitation) -> None:
        if limitation not in self.limitations:
            self.limitations.append(limitation)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "ok": self.ok,
            "operation": self.operation,
            "path": self.path,
            "bytes_len": self.bytes_len,
            "rom_banks": self.rom_banks,
            "title": self.header.title if self.header is not None else None,
            "hashes": self.hashes,
            "limitations": [limitation.value for limitation in self.limitations],
            "metadata": self.metadata,
        }
