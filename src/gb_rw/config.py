"""
Session defaults and configuration container.

CLI options override these values; nothing is read from disk.
"""

from dataclasses import dataclass
from typing import Optional

DEFAULT_SERIAL_DEVICE = "/dev/ttyACM0"
DEFAULT_BAUD_RATE = 1_000_000
DEFAULT_BOARD = "st"

# Short timeout used while discarding leftover bytes before the session.
DRAIN_TIMEOUT = 0.1

# None blocks until the device answers (it may still be booting).
SESSION_TIMEOUT: Optional[float] = None

RESET_TOOL = "st-flash"
RESET_TOOL_ARGS = ("reset",)


@dataclass
class SessionConfig:
    """
    Everything needed to run one cartridge session.

    Attributes:
        mode: Operation mode name (read_ROM, read_RAM, write_ROM, write_RAM)
        path: File to create (read modes) or to read from (write modes)
        serial_device: Serial device path
        baud_rate: Serial baud rate
        board: Development board name (generic, st)
        timeout: Read timeout in seconds, None for unbounded
    """
    mode: str
    path: str
    serial_device: str = DEFAULT_SERIAL_DEVICE
    baud_rate: int = DEFAULT_BAUD_RATE
    board: str = DEFAULT_BOARD
    timeout: Optional[float] = SESSION_TIMEOUT
