"""
Development board reset strategies.

The session never spawns processes itself; it is handed a ResetStrategy.
"""

import logging
import subprocess
from enum import Enum
from typing import Callable, Optional, Sequence

from gb_rw.config import RESET_TOOL, RESET_TOOL_ARGS
from gb_rw.errors import GBRWError

logger = logging.getLogger(__name__)


class BoardResetError(GBRWError):
    """External reset tool failed"""

    def __init__(self, message: str, returncode: Optional[int] = None, output: str = ""):
        super().__init__(message)
        self.returncode = returncode
        self.output = output


class Board(Enum):
    """Supported development boards."""
    GENERIC = "generic"
    ST = "st"


class ResetStrategy:
    """Resets the reader board before a session."""

    def reset(self) -> None:
        raise NotImplementedError


class ManualReset(ResetStrategy):
    """Ask the operator to press the reset button."""

    def __init__(self, prompt: Optional[Callable[[str], None]] = None):
        self.prompt = prompt or logger.info

    def reset(self) -> None:
        self.prompt("Press the reset button on the board")


class ExternalToolReset(ResetStrategy):
    """Run an external utility (e.g. ``st-flash reset``) and check its exit code."""

    def __init__(self, program: str, args: Sequence[str] = ()):
        self.program = program
        self.args = list(args)

    @property
    def command(self):
        return [self.program, *self.args]

    def reset(self) -> None:
        """
        Raises:
            BoardResetError: If the tool is missing or exits non-zero
        """
        logger.info(f"Resetting board using {self.program} utility...")
        try:
            proc = subprocess.run(self.command, check=False, capture_output=True, text=True)
        except FileNotFoundError:
            raise BoardResetError(f"{self.program} not found in PATH")

        diagnostics = (proc.stderr or proc.stdout or "").strip()
        if diagnostics:
            logger.info(diagnostics)

        if proc.returncode != 0:
            raise BoardResetError(
                f"{self.program} returned with error code {proc.returncode}",
                returncode=proc.returncode,
                output=diagnostics,
            )


def reset_strategy_for(board: Board, prompt: Optional[Callable[[str], None]] = None) -> ResetStrategy:
    """Pick the reset strategy matching a board."""
    if board == Board.ST:
        return ExternalToolReset(RESET_TOOL, RESET_TOOL_ARGS)
    return ManualReset(prompt)
