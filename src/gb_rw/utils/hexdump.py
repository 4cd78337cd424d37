"""Hex dump formatting for memory windows."""

from __future__ import annotations

from typing import Iterator


def iter_hex_lines(data: bytes, base_addr: int = 0, width: int = 16) -> Iterator[str]:
    """
    Yield classic hex dump lines: address, hex bytes, printable ASCII.

    Example:
        0100  00 C3 50 01 CE ED 66 66  CC 0D 00 0B 03 73 00 83  |..P...ff.....s..|
    """
    half = width // 2
    for offset in range(0, len(data), width):
        chunk = data[offset:offset + width]
        left = " ".join(f"{b:02X}" for b in chunk[:half])
        right = " ".join(f"{b:02X}" for b in chunk[half:])
        hex_part = f"{left:<{half * 3 - 1}}  {right:<{half * 3 - 1}}"
        text = "".join(chr(b) if 0x20 <= b < 0x7F else "." for b in chunk)
        yield f"{base_addr + offset:04X}  {hex_part}  |{text}|"


def format_hex(data: bytes, base_addr: int = 0, width: int = 16) -> str:
    """Return the whole hex dump as one string."""
    return "\n".join(iter_hex_lines(data, base_addr, width))
