"""
Utility modules for gb-rw.

This package groups pure helpers that are shared across core logic and the CLI.
"""

from .hexdump import format_hex, iter_hex_lines

__all__ = [
    "format_hex",
    "iter_hex_lines",
]
