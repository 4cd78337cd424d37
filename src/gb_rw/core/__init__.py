"""
Core module for gb-rw.

This module provides the single source of truth for:
- Option parsing (parsing.py)
- Board reset strategies (board.py)
- The dump state machine (session.py)
- Result objects (results.py)
- The end-to-end session workflow (actions.py)

The CLI should call into this module rather than implementing its own logic.
"""

from .board import (
    Board,
    BoardResetError,
    ResetStrategy,
    ManualReset,
    ExternalToolReset,
    reset_strategy_for,
)
from .parsing import parse_mode, parse_board, parse_baud, parse_timeout
from .results import DumpResult, KnownLimitation, LIMITATION_NOTES
from .session import (
    DumpEngine,
    ChecksumMismatch,
    MemoryRegion,
    Mode,
    SessionState,
)
from .actions import run_session, open_target_file

__all__ = [
    # Board
    "Board",
    "BoardResetError",
    "ResetStrategy",
    "ManualReset",
    "ExternalToolReset",
    "reset_strategy_for",
    # Parsing
    "parse_mode",
    "parse_board",
    "parse_baud",
    "parse_timeout",
    # Results
    "DumpResult",
    "KnownLimitation",
    "LIMITATION_NOTES",
    # Session
    "DumpEngine",
    "ChecksumMismatch",
    "MemoryRegion",
    "Mode",
    "SessionState",
    # Actions
    "run_session",
    "open_target_file",
]
