"""
Core workflow actions for gb-rw.

run_session() is the single entry point the CLI calls: it applies the
file-open policy, prepares the serial port, resets the board and hands
control to the DumpEngine.
"""

import logging
from pathlib import Path
from typing import Callable, Optional

from gb_rw.config import SessionConfig
from gb_rw.errors import UnimplementedOperation
from gb_rw.header import HeaderCheck
from gb_rw.protocol.transport import SerialTransport
from .board import ResetStrategy, reset_strategy_for
from .parsing import parse_board, parse_mode
from .results import DumpResult
from .session import DumpEngine, Mode

logger = logging.getLogger(__name__)


def default_transport_factory(config: SessionConfig) -> SerialTransport:
    return SerialTransport(config.serial_device, baudrate=config.baud_rate, timeout=config.timeout)


def open_target_file(mode: Mode, path: str):
    """
    Open the session file according to the mode.

    Read modes create the file exclusively so an existing image is never
    overwritten; write modes require the file to exist.

    Raises:
        FileExistsError: Read mode and ``path`` already exists
        FileNotFoundError: Write mode and ``path`` is missing
    """
    if mode.reads_cartridge:
        logger.info(f"Reading cartridge {mode.region.value} into {path}")
        return open(path, "xb")
    logger.info(f"Writing {path} into cartridge {mode.region.value}")
    return open(path, "rb")


def run_session(
    config: SessionConfig,
    reset: Optional[ResetStrategy] = None,
    transport_factory: Callable[[SessionConfig], SerialTransport] = default_transport_factory,
    progress_cb: Optional[Callable[[int, int], None]] = None,
    on_header: Optional[Callable[[bytes, HeaderCheck], None]] = None,
) -> DumpResult:
    """
    Run one cartridge session end to end.

    Args:
        config: Session configuration
        reset: Reset strategy, defaults to the one matching config.board
        transport_factory: Builds the (unopened) transport from config
        progress_cb: Optional progress callback(banks_done, banks_total)
        on_header: Optional callback(bank0, header_check)

    Returns:
        DumpResult for the completed dump

    Raises:
        GBRWError: Any protocol, transport, reset or header failure
        OSError: If the target file violates the mode's open policy
    """
    mode = parse_mode(config.mode)
    if reset is None:
        reset = reset_strategy_for(parse_board(config.board))

    target = open_target_file(mode, config.path)
    transport = None
    try:
        logger.info(f"Using serial device: {config.serial_device} at baud rate: {config.baud_rate}")
        transport = transport_factory(config)
        transport.open()
        transport.drain()
        transport.set_timeout(config.timeout)

        reset.reset()

        engine = DumpEngine(transport, progress_cb=progress_cb, on_header=on_header)
        engine.handshake()

        if not mode.reads_cartridge:
            raise UnimplementedOperation(f"Operation mode {mode.value} not implemented yet")

        result = engine.read_memory(mode.region, target)
        result.path = config.path
        result.metadata["serial_device"] = config.serial_device
        result.metadata["baud_rate"] = config.baud_rate
        return result
    except BaseException:
        if mode.reads_cartridge:
            target.close()
            Path(config.path).unlink(missing_ok=True)
            logger.debug(f"Removed incomplete output {config.path}")
        raise
    finally:
        target.close()
        if transport is not None:
            transport.close()
