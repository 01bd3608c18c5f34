"""
zxtapi - ZX-Spectrum TAP Inspector Command-Line Interface
=========================================================

This module implements the command-line interface for inspecting
ZX-Spectrum .tap files: listing blocks, printing BASIC programs,
exporting machine code and extracting everything to files.

Commands
--------
- **list**: List all blocks in a tape
- **detail**: List blocks with offsets, checksums and header meaning
- **basic**: Print a detokenized BASIC program
- **binary**: Print or write a CODE block as Intel HEX
- **extract**: Extract blocks to .bas/.hex/.bin files

Usage Examples
--------------
List the blocks of a tape:
    $ zxtapi list game.tap

Print the first BASIC program:
    $ zxtapi basic game.tap

Print the second header's program by index:
    $ zxtapi basic -i 2 game.tap

Export a CODE block by name:
    $ zxtapi binary -n SCREEN -o screen.hex game.tap

Extract everything into ./output/game/:
    $ zxtapi extract -o ./output game.tap
"""

from pathlib import Path
from typing import Optional
import logging

import click

from zxtap import __version__
from zxtap.cli.errors import Diagnostics, handle_cli_exception
from zxtap.config import InspectorConfig
from zxtap.inspector import (
    extract_entries,
    format_block_list,
    render_basic,
    render_code_hex,
    select_entry,
)
from zxtap.tap import DataType, TapReader


# =============================================================================
# CLI Context and Utilities
# =============================================================================

class DiagnosticsHandler(logging.Handler):
    """Forward log records from the zxtap package to a Diagnostics sink."""

    def __init__(self, diagnostics: Diagnostics) -> None:
        super().__init__()
        self.diagnostics = diagnostics

    def emit(self, record: logging.LogRecord) -> None:
        message = self.format(record)
        if record.levelno >= logging.ERROR:
            self.diagnostics.error(message)
        elif record.levelno >= logging.WARNING:
            self.diagnostics.warning(message)
        else:
            self.diagnostics.info(message)


class Context:
    """
    Shared context for CLI commands.

    Stores the configuration, the diagnostic sink and verbosity.
    """

    def __init__(self) -> None:
        self.config: InspectorConfig = InspectorConfig()
        self.diagnostics: Diagnostics = Diagnostics(color=self.config.color)
        self.verbose: bool = False

    def load_config(self) -> None:
        """Read settings from the environment."""
        self.config = InspectorConfig.from_env()
        self.diagnostics.color = self.config.color

    def setup_logging(self) -> None:
        """Route zxtap log records to the diagnostic sink."""
        package_logger = logging.getLogger("zxtap")
        for handler in list(package_logger.handlers):
            if isinstance(handler, DiagnosticsHandler):
                package_logger.removeHandler(handler)
        package_logger.addHandler(DiagnosticsHandler(self.diagnostics))
        package_logger.setLevel(logging.DEBUG if self.verbose else logging.WARNING)

    def load(self, tap_file: Path) -> TapReader:
        return TapReader.from_file(tap_file, strict=self.config.strict_checksums)


pass_context = click.make_pass_decorator(Context, ensure=True)


def _tap_argument(func):
    return click.argument(
        "tap_file",
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
    )(func)


def _selection_options(func):
    func = click.option(
        "-i", "--index",
        type=click.IntRange(min=1),
        default=None,
        help="Select the N-th header (1-based)",
    )(func)
    func = click.option(
        "-n", "--name",
        default=None,
        help="Select the header with this filename",
    )(func)
    return func


# =============================================================================
# Main CLI Group
# =============================================================================

@click.group()
@click.version_option(__version__, "--version", "-V", prog_name="zxtapi")
@click.option("--no-color", is_flag=True, help="Disable colored diagnostics")
@click.option("--strict", is_flag=True, help="Treat block checksum mismatches as errors")
@click.option("-v", "--verbose", is_flag=True, help="Verbose output")
@pass_context
def main(ctx: Context, no_color: bool, strict: bool, verbose: bool) -> None:
    """
    ZX-Spectrum TAP file inspector.

    List blocks, print BASIC programs, export machine code and extract
    the contents of ZX-Spectrum .tap tape images.

    \b
    Commands:
      list      List all blocks
      detail    List blocks with checksums and header details
      basic     Print a BASIC program
      binary    Print a CODE block as Intel HEX
      extract   Extract blocks to files

    \b
    Examples:
      zxtapi list game.tap
      zxtapi basic -i 1 game.tap
      zxtapi extract -o ./output game.tap
    """
    try:
        ctx.load_config()
    except Exception as e:
        handle_cli_exception(e, ctx.diagnostics, verbose)

    if no_color:
        ctx.config.color = False
        ctx.diagnostics.color = False
    if strict:
        ctx.config.strict_checksums = True
    ctx.verbose = verbose
    ctx.setup_logging()


# =============================================================================
# List / Detail Commands
# =============================================================================

def _print_listing(ctx: Context, tap_file: Path, detail: bool) -> None:
    try:
        reader = ctx.load(tap_file)
        if ctx.verbose or detail:
            click.echo(f"Contents of {tap_file}:")
        for row in format_block_list(reader, detail=detail):
            click.echo(row)

        if ctx.verbose or detail:
            info = reader.get_info()
            click.echo("-" * 60)
            click.echo(
                f"Total: {info['block_count']} blocks, {info['header_count']} headers, "
                f"{info['headerless_count']} headerless, {info['total_bytes']} bytes"
            )
            if info["bad_checksums"]:
                click.echo(f"Bad checksums: {info['bad_checksums']}")
    except Exception as e:
        handle_cli_exception(e, ctx.diagnostics, ctx.verbose)


@main.command("list")
@_tap_argument
@pass_context
def cmd_list(ctx: Context, tap_file: Path) -> None:
    """
    List all blocks contained in a .tap file.

    \b
    Example:
      zxtapi list game.tap
    """
    _print_listing(ctx, tap_file, detail=False)


@main.command("detail")
@_tap_argument
@pass_context
def cmd_detail(ctx: Context, tap_file: Path) -> None:
    """
    Show detailed information about each block.

    Adds block offsets, checksum status and the meaning of the header
    parameters (autostart line, load address, array name).
    """
    _print_listing(ctx, tap_file, detail=True)


# =============================================================================
# BASIC Command
# =============================================================================

@main.command("basic")
@_tap_argument
@_selection_options
@pass_context
def cmd_basic(ctx: Context, tap_file: Path, name: Optional[str], index: Optional[int]) -> None:
    """
    Print a detokenized BASIC program.

    Without --name or --index the first BASIC program on the tape is used.

    \b
    Examples:
      zxtapi basic game.tap
      zxtapi basic -n LOADER game.tap
    """
    try:
        reader = ctx.load(tap_file)
        entry = select_entry(reader, name=name, index=index, datatype=DataType.BASIC)
        if ctx.verbose:
            click.echo(f"BASIC program {entry.index}: \"{entry.name}\"")
        click.echo(render_basic(entry))
    except Exception as e:
        handle_cli_exception(e, ctx.diagnostics, ctx.verbose)


# =============================================================================
# Binary Command
# =============================================================================

@main.command("binary")
@_tap_argument
@_selection_options
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Output HEX file (default: stdout)",
)
@pass_context
def cmd_binary(
    ctx: Context,
    tap_file: Path,
    name: Optional[str],
    index: Optional[int],
    output: Optional[Path],
) -> None:
    """
    Print a CODE block in Intel HEX format at its load address.

    Without --name or --index the first CODE block on the tape is used.

    \b
    Examples:
      zxtapi binary game.tap
      zxtapi binary -i 3 -o game.hex game.tap
    """
    try:
        reader = ctx.load(tap_file)
        entry = select_entry(reader, name=name, index=index, datatype=DataType.CODE)
        hex_text = render_code_hex(entry, ctx.config.hex_record_size)

        if output is None:
            click.echo(hex_text, nl=False)
        else:
            output.write_text(hex_text)
            click.echo(
                f"Wrote \"{entry.name}\" ({len(entry.payload)} bytes at "
                f"0x{entry.header.load_address:04X}) to {output}"
            )
    except Exception as e:
        handle_cli_exception(e, ctx.diagnostics, ctx.verbose)


# =============================================================================
# Extract Command
# =============================================================================

@main.command("extract")
@_tap_argument
@_selection_options
@click.option(
    "-o", "--output",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Base output directory (default: current directory)",
)
@pass_context
def cmd_extract(
    ctx: Context,
    tap_file: Path,
    name: Optional[str],
    index: Optional[int],
    output: Optional[Path],
) -> None:
    """
    Extract blocks into separate files.

    \b
    BASIC programs are saved as .bas listings, machine code as Intel
    HEX (.hex) and everything else as raw .bin files. Files are placed
    in a folder named after the tape inside the output directory.

    \b
    Examples:
      zxtapi extract game.tap
      zxtapi extract -o ./output -n LOADER game.tap
    """
    try:
        base_dir = output if output is not None else ctx.config.output_dir
        target_dir = base_dir / tap_file.stem

        reader = ctx.load(tap_file)
        written = extract_entries(
            reader,
            target_dir,
            name=name,
            index=index,
            record_size=ctx.config.hex_record_size,
        )

        for extracted in written:
            click.echo(f"Extracting: {extracted.path.name}")
        if not written:
            click.echo("No blocks to extract")
        else:
            click.echo(f"Extracted {len(written)} files to {target_dir}")
    except Exception as e:
        handle_cli_exception(e, ctx.diagnostics, ctx.verbose)


# =============================================================================
# Entry Point
# =============================================================================

if __name__ == "__main__":
    main()
