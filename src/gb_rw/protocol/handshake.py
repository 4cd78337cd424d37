"""Boot handshake: wait for the device's HELLO line."""

import logging

logger = logging.getLogger(__name__)

HELLO_TOKEN = b"HELLO\n"


def wait_for_hello(transport, token: bytes = HELLO_TOKEN) -> None:
    """
    Discard lines until one equals ``token`` exactly.

    Anything before it (boot banner, noise) is ignored. There is no timeout
    here; the transport's read timeout is the only bound.

    Raises:
        PortTimeout: If the transport timed out first
    """
    delimiter = token[-1:]
    while True:
        line = transport.read_line(delimiter)
        if line == token:
            logger.info("Connected!")
            return
        logger.debug(f"Ignoring line before handshake: {line!r}")
