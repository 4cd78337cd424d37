"""
gb-rw CLI

Command-line interface for dumping Game Boy cartridges over a serial reader.
"""

import sys
import json
import logging
from pathlib import Path
from typing import Optional

import click
import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.logging import RichHandler
from rich.progress import Progress, BarColumn, TextColumn

from gb_rw.config import (
    DEFAULT_SERIAL_DEVICE,
    DEFAULT_BAUD_RATE,
    DEFAULT_BOARD,
    SessionConfig,
)
from gb_rw.errors import GBRWError
from gb_rw.header import (
    CartridgeHeader,
    HeaderCheck,
    HeaderParseError,
    HEADER_DUMP_SIZE,
    validate_header,
)
from gb_rw.core import (
    ChecksumMismatch,
    BoardResetError,
    LIMITATION_NOTES,
    reset_strategy_for,
    run_session,
)
from gb_rw.core.parsing import (
    parse_mode as _parse_mode_core,
    parse_board as _parse_board_core,
    parse_baud as _parse_baud_core,
    parse_timeout as _parse_timeout_core,
)
from gb_rw.utils import format_hex

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format="%(message)s",
    handlers=[RichHandler(rich_tracebacks=True)],
)
logger = logging.getLogger("gb_rw")

# Setup Rich console
console = Console()

app = typer.Typer(help="Game Boy cartridge reader/writer")


def print_header(text: str) -> None:
    """Print fancy header."""
    console.print(Panel(text, expand=False, style="bold blue"))


def print_success(text: str) -> None:
    """Print success message."""
    console.print(f"✓ {text}", style="green")


def print_warning(text: str) -> None:
    """Print warning message."""
    console.print(f"⚠️  {text}", style="yellow")


def print_error(text: str) -> None:
    """Print error message."""
    console.print(f"❌ {text}", style="red")


def parse_mode(value: str):
    """CLI wrapper around core.parsing.parse_mode."""
    try:
        return _parse_mode_core(value)
    except ValueError as e:
        raise typer.BadParameter(str(e))


def parse_board(value: str):
    """CLI wrapper around core.parsing.parse_board."""
    try:
        return _parse_board_core(value)
    except ValueError as e:
        raise typer.BadParameter(str(e))


def parse_baud(value: str) -> int:
    """CLI wrapper around core.parsing.parse_baud."""
    try:
        return _parse_baud_core(value)
    except ValueError as e:
        raise typer.BadParameter(str(e))


def parse_timeout(value: Optional[str]) -> Optional[float]:
    """CLI wrapper around core.parsing.parse_timeout."""
    try:
        return _parse_timeout_core(value)
    except ValueError as e:
        raise typer.BadParameter(str(e))


def header_table(header: CartridgeHeader) -> Table:
    """Render parsed header fields as a table."""
    table = Table(title="Cartridge Header")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Title", header.title or "-")
    table.add_row("CGB", f"{header.cgb_mode} (0x{header.cgb_flag:02X})")
    table.add_row("SGB", "Yes" if header.sgb_flag == 0x03 else "No")
    table.add_row("Cartridge Type", f"{header.cartridge_type_name} (0x{header.cartridge_type:02X})")
    table.add_row("ROM Size", f"{header.rom_size // 1024} KiB, {header.rom_banks} banks")
    table.add_row("RAM Size", f"{header.ram_size // 1024} KiB")
    table.add_row("Destination", header.destination_name)
    table.add_row("Licensee", f"0x{header.old_licensee:02X} / {header.new_licensee!r}")
    table.add_row("Version", str(header.version))
    table.add_row("Header Checksum", f"0x{header.checksum:02X}")
    table.add_row("Global Checksum", f"0x{header.global_checksum:04X} (not verified)")
    return table


def show_header(bank0: bytes, check: HeaderCheck) -> None:
    """Print the header window hex dump and the parsed fields."""
    console.print()
    console.print(format_hex(bank0[:HEADER_DUMP_SIZE], 0x0000), highlight=False)
    console.print()
    console.print(header_table(check.header))


@app.command()
def ports() -> None:
    """List available serial ports."""
    print_header("Available Serial Ports")

    import serial.tools.list_ports

    ports_list = list(serial.tools.list_ports.comports())

    if not ports_list:
        print_warning("No serial ports found")
        return

    table = Table(title="Serial Ports")
    table.add_column("Port", style="cyan")
    table.add_column("Device", style="magenta")
    table.add_column("Description", style="green")

    for port in ports_list:
        table.add_row(port.device, port.name or "-", port.description or "-")

    console.print(table)


@app.command()
def header(image: str = typer.Argument(..., help="Path to a ROM image file")) -> None:
    """Parse and show the header of a ROM image on disk."""
    print_header(f"Header: {image}")

    path = Path(image)
    if not path.exists():
        print_error(f"File not found: {image}")
        sys.exit(1)

    with path.open("rb") as f:
        data = f.read(HEADER_DUMP_SIZE)

    try:
        check = validate_header(data)
    except HeaderParseError as e:
        print_error(f"Error parsing cartridge header: {e}")
        sys.exit(1)

    console.print(header_table(check.header))
    if check.ok:
        print_success(f"Header checksum OK (0x{check.computed:02X})")
    else:
        print_error(
            f"Header checksum mismatch: {check.declared:02x} != {check.computed:02x}"
        )
        sys.exit(1)


@app.command()
def run(
    mode: str = typer.Option(..., "--mode", "-m", help="Operation mode: read_ROM, read_RAM, write_ROM, write_RAM"),
    file: str = typer.Option(..., "--file", "-f", help="File to read/write for the cartridge ROM/RAM"),
    serial_device: str = typer.Option(DEFAULT_SERIAL_DEVICE, "--serial", "-s", help="Serial device"),
    baud: str = typer.Option(str(DEFAULT_BAUD_RATE), "--baud", "-b", help="Baud rate"),
    board: str = typer.Option(DEFAULT_BOARD, "--board", "-d", help="Development board: generic, st"),
    timeout: Optional[str] = typer.Option(None, "--timeout", "-t", help="Read timeout in seconds, or 'none' to wait forever"),
    output_json: bool = typer.Option(False, "--json", "-j", help="Print the result as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log protocol traffic"),
) -> None:
    """Run a cartridge session (only read_ROM is implemented)."""
    if verbose:
        logger.setLevel(logging.DEBUG)

    parsed_mode = parse_mode(mode)
    parsed_board = parse_board(board)
    config = SessionConfig(
        mode=parsed_mode.value,
        path=file,
        serial_device=serial_device,
        baud_rate=parse_baud(baud),
        board=parsed_board.value,
        timeout=parse_timeout(timeout),
    )

    print_header(f"gb-rw: {parsed_mode.value}")
    console.print(f"Development board is: {parsed_board.value}")
    console.print(f"Using serial device: {config.serial_device} at baud rate: {config.baud_rate}")

    reset = reset_strategy_for(parsed_board, prompt=lambda text: console.print(f"\n[bold]{text}[/bold]"))

    try:
        with Progress(
            TextColumn("[{task.description}]"),
            BarColumn(),
            TextColumn("{task.completed}/{task.total} banks"),
            console=console,
            transient=True,
        ) as progress:
            task = progress.add_task("Dumping", total=None)

            def on_progress(done: int, total: int) -> None:
                progress.update(task, completed=done, total=total)

            result = run_session(
                config,
                reset=reset,
                progress_cb=on_progress,
                on_header=show_header,
            )
    except ChecksumMismatch as e:
        print_error(str(e))
        sys.exit(1)
    except BoardResetError as e:
        print_error(f"Error resetting development board: {e}")
        if e.output:
            console.print(e.output, style="dim")
        sys.exit(1)
    except (GBRWError, OSError) as e:
        print_error(f"{parsed_mode.value} failed: {e}")
        sys.exit(1)

    if output_json:
        console.print_json(json.dumps(result.to_dict()))
        return

    table = Table(title="Dump Result")
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("File", result.path)
    table.add_row("Banks", str(result.rom_banks))
    table.add_row("Size", f"{result.bytes_len:,} bytes")
    table.add_row("SHA-256", result.hashes.get("sha256", "-"))
    console.print(table)

    for limitation in result.limitations:
        print_warning(LIMITATION_NOTES[limitation])
    print_success(f"Cartridge {parsed_mode.region.value} saved to {result.path}")


def main() -> None:
    """Main entry point."""
    try:
        app(standalone_mode=False)
    except (KeyboardInterrupt, click.exceptions.Abort):
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        sys.exit(0)
    except click.ClickException as e:
        e.show()
        sys.exit(e.exit_code)
    except Exception as e:
        console.print(f"\n[red bold]Fatal error:[/red bold] {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
