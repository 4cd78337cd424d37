"""
Cartridge Reader Serial Transport

Handles low-level serial communication with the cartridge reader board.

This module provides:
- Serial port opening and 8N1 configuration
- Write-then-flush and exact-length reads
- Line reads for the boot handshake
- Draining of leftover bytes before a session
"""

import logging
from typing import Optional

try:
    import serial
except ImportError:
    raise ImportError("PySerial required: pip install pyserial")

from gb_rw.config import DRAIN_TIMEOUT
from gb_rw.errors import GBRWError

logger = logging.getLogger(__name__)

DRAIN_CHUNK = 16


class TransportError(GBRWError):
    """Base exception for transport layer errors"""
    pass


class PortOpenError(TransportError):
    """Serial device could not be opened"""
    pass


class PortConfigError(TransportError):
    """Serial device rejected the requested settings"""
    pass


class PortDrainError(TransportError):
    """I/O failure while discarding leftover bytes"""
    pass


class PortTimeout(TransportError):
    """Read or write did not complete before the configured timeout"""
    pass


class SerialTransport:
    """
    Serial transport for the cartridge reader.

    Strictly half-duplex: every request is written and flushed before the
    response is read, and only one request is outstanding at a time.

    Example:
        transport = SerialTransport("/dev/ttyACM0", baudrate=1000000)
        transport.open()
        transport.drain()
        transport.write_all(frame)
        data = transport.read_exact(0x4000)
        transport.close()
    """

    def __init__(
        self,
        port: str,
        baudrate: int = 1_000_000,
        timeout: Optional[float] = None,
    ):
        """
        Initialize transport layer.

        Args:
            port: Serial port (e.g., "/dev/ttyACM0", "COM3")
            baudrate: Serial baud rate
            timeout: Read timeout in seconds, None blocks indefinitely
        """
        self.port = port
        self.baudrate = baudrate
        self.timeout = timeout
        self.ser = None

    @classmethod
    def from_serial(cls, ser, timeout: Optional[float] = None) -> "SerialTransport":
        """Wrap an already opened serial object."""
        transport = cls(getattr(ser, "port", None) or "<serial>", timeout=timeout)
        transport.ser = ser
        ser.timeout = timeout
        return transport

    def __enter__(self) -> "SerialTransport":
        if self.ser is None:
            self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def open(self) -> None:
        """
        Open the serial device and configure 8N1 without flow control.

        Raises:
            PortOpenError: If the device cannot be opened
            PortConfigError: If the settings are rejected
        """
        ser = serial.Serial()
        ser.port = self.port
        try:
            ser.open()
        except serial.SerialException as e:
            raise PortOpenError(f"Error opening {self.port}: {e}")

        try:
            ser.baudrate = self.baudrate
            ser.bytesize = serial.EIGHTBITS
            ser.parity = serial.PARITY_NONE
            ser.stopbits = serial.STOPBITS_ONE
            ser.xonxoff = False
            ser.rtscts = False
            ser.dsrdtr = False
            ser.timeout = self.timeout
        except (ValueError, serial.SerialException) as e:
            ser.close()
            raise PortConfigError(f"Error configuring {self.port}: {e}")

        self.ser = ser
        logger.debug(f"Opened {self.port} at {self.baudrate} bps (timeout={self.timeout})")

    def close(self) -> None:
        """Close serial port."""
        if self.ser is not None and self.ser.is_open:
            self.ser.close()
            logger.debug(f"Closed {self.port}")

    def _require_open(self):
        if self.ser is None or not self.ser.is_open:
            raise TransportError("Serial port not open")
        return self.ser

    def set_timeout(self, timeout: Optional[float]) -> None:
        """
        Change the read timeout.

        Raises:
            PortConfigError: If the port rejects the value
        """
        ser = self._require_open()
        try:
            ser.timeout = timeout
        except (ValueError, serial.SerialException) as e:
            raise PortConfigError(f"Error setting timeout for {self.port}: {e}")
        self.timeout = timeout

    def write_all(self, data: bytes) -> None:
        """
        Send every byte and flush before returning.

        Raises:
            PortTimeout: If the write timed out
            TransportError: On any other write failure
        """
        ser = self._require_open()
        try:
            written = ser.write(data)
            if written is not None and written != len(data):
                raise TransportError(
                    f"Incomplete write: sent {written}/{len(data)} bytes"
                )
            ser.flush()
        except serial.SerialTimeoutException as e:
            raise PortTimeout(f"Write timeout: {e}")
        except serial.SerialException as e:
            raise TransportError(f"Write error: {e}")
        logger.debug(f">>> {data.hex().upper()}")

    def read_exact(self, length: int) -> bytes:
        """
        Receive exactly ``length`` bytes.

        Raises:
            PortTimeout: If fewer bytes arrived before the timeout
            TransportError: On any other read failure
        """
        ser = self._require_open()
        try:
            data = ser.read(length)
        except serial.SerialException as e:
            raise TransportError(f"Read error: {e}")

        if len(data) != length:
            raise PortTimeout(
                f"Timed out after {len(data)}/{length} bytes"
            )
        logger.debug(f"<<< {length} bytes")
        return bytes(data)

    def read_line(self, delimiter: bytes = b"\n") -> bytes:
        """
        Receive bytes up to and including ``delimiter``.

        Raises:
            PortTimeout: If the delimiter did not arrive before the timeout
            TransportError: On any other read failure
        """
        ser = self._require_open()
        try:
            line = ser.read_until(delimiter)
        except serial.SerialException as e:
            raise TransportError(f"Read error: {e}")

        if not line.endswith(delimiter):
            raise PortTimeout(f"Timed out waiting for line (got {bytes(line)!r})")
        return bytes(line)

    def drain(self) -> int:
        """
        Discard bytes already in flight from the device.

        Reads small chunks with a short timeout until a read returns nothing.
        Running out of bytes is the normal end, not an error. The previous
        timeout is restored afterwards.

        Returns:
            Number of bytes discarded

        Raises:
            PortDrainError: On any I/O failure other than the timeout
        """
        ser = self._require_open()
        old_timeout = ser.timeout
        drained = 0
        try:
            ser.timeout = DRAIN_TIMEOUT
            while True:
                junk = ser.read(DRAIN_CHUNK)
                if not junk:
                    break
                drained += len(junk)
        except (ValueError, serial.SerialException) as e:
            raise PortDrainError(f"Error clearing port {self.port}: {e}")
        finally:
            ser.timeout = old_timeout

        if drained:
            logger.debug(f"Drained {drained} bytes of junk from buffer")
        return drained
