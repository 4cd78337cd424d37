"""
Centralized parsing helpers for operator-supplied option values.

The CLI wraps these, converting ValueError into typer.BadParameter.
"""

from typing import Optional

from .board import Board
from .session import Mode

UNBOUNDED_TIMEOUTS = ("none", "inf", "infinite", "forever")


def parse_mode(value: str) -> Mode:
    """
    Parse an operation mode.

    Accepts: read_ROM, read_RAM, write_ROM, write_RAM (case-insensitive,
    '-' accepted in place of '_').

    Raises:
        ValueError: If mode is not recognized.
    """
    normalized = value.strip().lower().replace("-", "_")
    for mode in Mode:
        if mode.value.lower() == normalized:
            return mode
    raise ValueError(
        f"Invalid operation mode: {value}. Use one of: "
        + ", ".join(mode.value for mode in Mode)
    )


def parse_board(value: str) -> Board:
    """
    Parse a development board name (generic, st).

    Raises:
        ValueError: If board is not recognized.
    """
    try:
        return Board(value.strip().lower())
    except ValueError:
        raise ValueError(f"Invalid development board: {value}")


def parse_baud(value: str) -> int:
    """
    Parse a positive integer baud rate.

    Raises:
        ValueError: If value is not a positive integer.
    """
    try:
        baud = int(value.strip())
    except ValueError:
        raise ValueError(f"Invalid baud rate '{value}'")
    if baud <= 0:
        raise ValueError(f"Baud rate must be positive, got {baud}")
    return baud


def parse_timeout(value: Optional[str]) -> Optional[float]:
    """
    Parse a read timeout in seconds.

    None, empty string or one of "none", "inf", "infinite", "forever"
    select an unbounded timeout (returns None).

    Raises:
        ValueError: If value is not a non-negative number.
    """
    if value is None:
        return None

    value = value.strip()
    if not value or value.lower() in UNBOUNDED_TIMEOUTS:
        return None

    try:
        timeout = float(value)
    except ValueError:
        raise ValueError(f"Invalid timeout '{value}'. Use seconds (e.g. 30) or 'none'.")
    if timeout < 0:
        raise ValueError(f"Timeout must not be negative, got {value}")
    return timeout
