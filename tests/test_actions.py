"""Tests for the end-to-end session workflow."""

from unittest.mock import MagicMock

import pytest

from gb_rw.config import SessionConfig
from gb_rw.core.actions import run_session
from gb_rw.core.board import BoardResetError, ResetStrategy
from gb_rw.core.session import ChecksumMismatch
from gb_rw.errors import UnimplementedOperation
from gb_rw.protocol.transport import SerialTransport


class BootingReset(ResetStrategy):
    """Reset that makes the scripted board print its boot lines."""

    def __init__(self, ser=None, boot=(b"HELLO\n",)):
        self.ser = ser
        self.boot = boot
        self.calls = 0

    def reset(self) -> None:
        self.calls += 1
        if self.ser is not None:
            self.ser.rx.extend(b"".join(self.boot))


class ScriptedTransport(SerialTransport):
    """SerialTransport whose open() attaches a scripted board."""

    def __init__(self, ser, config):
        super().__init__(config.serial_device, config.baud_rate, config.timeout)
        self._scripted = ser

    def open(self) -> None:
        self.ser = self._scripted


def _factory(ser):
    return lambda config: ScriptedTransport(ser, config)


def test_end_to_end_read_rom(tmp_path, scripted_serial, make_bank0):
    bank0 = make_bank0(rom_size_code=0x00)
    bank1 = bytes(range(256)) * 64
    ser = scripted_serial(
        responses={(0x0000, 0x4000): [bank0], (0x4000, 0x8000): [bank1]},
    )
    out = tmp_path / "cart.gb"
    reset = BootingReset(ser, boot=(b"BOOT\n", b"HELLO\n"))

    result = run_session(
        SessionConfig(mode="read_ROM", path=str(out)),
        reset=reset,
        transport_factory=_factory(ser),
    )

    data = out.read_bytes()
    assert len(data) == 0x8000
    assert data[:0x4000] == bank0
    assert data[0x4000:] == bank1
    assert ser.requests == [(0x0000, 0x4000), (0x4000, 0x8000)]
    assert reset.calls == 1
    assert result.path == str(out)
    assert result.header.title == "TESTCART"
    assert not ser.is_open


def test_stale_bytes_are_drained_before_reset(tmp_path, scripted_serial, make_bank0):
    ser = scripted_serial(
        lines=[b"\xFF\xFE stale bytes\nHELLO\n"],
        responses={(0x0000, 0x4000): [make_bank0()], (0x4000, 0x8000): [b"\x00" * 0x4000]},
    )

    class CheckDrainedReset(BootingReset):
        def reset(self) -> None:
            assert bytes(ser.rx) == b""
            super().reset()

    run_session(
        SessionConfig(mode="read_ROM", path=str(tmp_path / "cart.gb")),
        reset=CheckDrainedReset(ser),
        transport_factory=_factory(ser),
    )
    assert ser.requests == [(0x0000, 0x4000), (0x4000, 0x8000)]
    assert ser.timeout is None


def test_read_mode_refuses_existing_file(tmp_path):
    out = tmp_path / "cart.gb"
    out.write_bytes(b"keep me")
    factory = MagicMock()

    with pytest.raises(FileExistsError):
        run_session(SessionConfig(mode="read_ROM", path=str(out)), reset=BootingReset(), transport_factory=factory)

    factory.assert_not_called()
    assert out.read_bytes() == b"keep me"


def test_write_mode_requires_existing_file(tmp_path):
    factory = MagicMock()
    reset = BootingReset()

    with pytest.raises(FileNotFoundError):
        run_session(
            SessionConfig(mode="write_ROM", path=str(tmp_path / "missing.gb")),
            reset=reset,
            transport_factory=factory,
        )

    factory.assert_not_called()
    assert reset.calls == 0


@pytest.mark.parametrize("mode", ["write_ROM", "write_RAM"])
def test_write_modes_unimplemented_after_handshake(tmp_path, scripted_serial, mode):
    src = tmp_path / "cart.gb"
    src.write_bytes(b"\x00" * 0x8000)
    ser = scripted_serial()

    with pytest.raises(UnimplementedOperation):
        run_session(SessionConfig(mode=mode, path=str(src)), reset=BootingReset(ser), transport_factory=_factory(ser))

    assert ser.writes == []
    assert src.read_bytes() == b"\x00" * 0x8000


def test_read_ram_unimplemented_leaves_no_file(tmp_path, scripted_serial):
    out = tmp_path / "save.sav"
    ser = scripted_serial()

    with pytest.raises(UnimplementedOperation):
        run_session(SessionConfig(mode="read_RAM", path=str(out)), reset=BootingReset(ser), transport_factory=_factory(ser))

    assert ser.writes == []
    assert not out.exists()


def test_checksum_mismatch_removes_created_file(tmp_path, scripted_serial, make_bank0):
    out = tmp_path / "cart.gb"
    ser = scripted_serial(responses={(0x0000, 0x4000): [make_bank0(bad_checksum=True)]})

    with pytest.raises(ChecksumMismatch):
        run_session(SessionConfig(mode="read_ROM", path=str(out)), reset=BootingReset(ser), transport_factory=_factory(ser))

    assert not out.exists()
    assert ser.requests == [(0x0000, 0x4000)]


def test_reset_failure_is_fatal_before_handshake(tmp_path, scripted_serial):
    out = tmp_path / "cart.gb"
    ser = scripted_serial(lines=[b"HELLO\n"])

    class FailingReset(ResetStrategy):
        def reset(self) -> None:
            raise BoardResetError("st-flash returned with error code 2", returncode=2, output="No ST-LINK found")

    with pytest.raises(BoardResetError) as excinfo:
        run_session(SessionConfig(mode="read_ROM", path=str(out)), reset=FailingReset(), transport_factory=_factory(ser))

    assert excinfo.value.returncode == 2
    assert ser.writes == []
    assert not out.exists()
    assert not ser.is_open


def test_cleanup_keeps_original_error_when_output_already_gone(tmp_path, scripted_serial):
    out = tmp_path / "cart.gb"
    ser = scripted_serial()

    class RemovingReset(ResetStrategy):
        def reset(self) -> None:
            out.unlink()
            raise BoardResetError("st-flash returned with error code 1", returncode=1)

    with pytest.raises(BoardResetError):
        run_session(SessionConfig(mode="read_ROM", path=str(out)), reset=RemovingReset(), transport_factory=_factory(ser))

    assert not out.exists()
