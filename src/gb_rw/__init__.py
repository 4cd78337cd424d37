"""
gb-rw - Game Boy cartridge reader/writer host tool

Dumps cartridge ROM over a serial link to a microcontroller reader board.
"""

__version__ = "0.1.0"

from gb_rw.protocol import SerialTransport
from gb_rw.core import DumpEngine, run_session

__all__ = [
    "SerialTransport",
    "DumpEngine",
    "run_session",
    "__version__",
]
