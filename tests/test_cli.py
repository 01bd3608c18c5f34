"""
zxtapi Command-Line Tests
=========================

End-to-end tests for the zxtapi commands using click's CliRunner.
"""

from pathlib import Path

import pytest
from click.testing import CliRunner

from zxtap import __version__
from zxtap.cli.errors import ExitCode
from zxtap.cli.zxtapi import main
from zxtap.tap import RawBlock, TapBuilder, build_basic_program


# =============================================================================
# Test Fixtures
# =============================================================================

@pytest.fixture
def runner() -> CliRunner:
    """Runner with the zxtapi environment variables cleared."""
    return CliRunner(env={
        "NO_COLOR": None,
        "ZXTAPI_NO_COLOR": None,
        "ZXTAPI_STRICT": None,
        "ZXTAPI_OUTPUT_DIR": None,
        "ZXTAPI_HEX_RECORD_SIZE": None,
    })


@pytest.fixture
def game_tap(tmp_path: Path) -> Path:
    """Tape with a BASIC loader, a CODE block and a headerless block."""
    program = build_basic_program([(10, bytes([0xF5]) + b'"HI"')])
    data = (TapBuilder()
            .add_basic("HELLO", program, autostart=10)
            .add_code("SCREEN", 0x8000, bytes([0x3E, 0x01, 0xC9]))
            .add_raw(b"\xaa\xbb")
            .build())
    path = tmp_path / "game.tap"
    path.write_bytes(data)
    return path


@pytest.fixture
def bad_checksum_tap(tmp_path: Path) -> Path:
    path = tmp_path / "bad.tap"
    path.write_bytes(RawBlock(kind=0xFF, payload=b"ab", checksum=0x00).to_bytes())
    return path


# =============================================================================
# Group Options
# =============================================================================

class TestMainGroup:
    """Tests for the top-level command group."""

    def test_help(self, runner: CliRunner):
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "ZX-Spectrum TAP file inspector" in result.output

    def test_version(self, runner: CliRunner):
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_missing_file(self, runner: CliRunner, tmp_path: Path):
        result = runner.invoke(main, ["list", str(tmp_path / "none.tap")])
        assert result.exit_code == ExitCode.INVALID_ARGS

    def test_index_must_be_positive(self, runner: CliRunner, game_tap: Path):
        result = runner.invoke(main, ["basic", "-i", "0", str(game_tap)])
        assert result.exit_code == ExitCode.INVALID_ARGS


# =============================================================================
# List / Detail
# =============================================================================

class TestListCommands:
    """Tests for list and detail."""

    def test_list(self, runner: CliRunner, game_tap: Path):
        result = runner.invoke(main, ["list", str(game_tap)])
        assert result.exit_code == 0, result.output
        assert '"HELLO"' in result.output
        assert "BASIC-PROGRAM" in result.output
        assert '"SCREEN"' in result.output
        assert "//headerless" in result.output

    def test_detail(self, runner: CliRunner, game_tap: Path):
        result = runner.invoke(main, ["detail", str(game_tap)])
        assert result.exit_code == 0, result.output
        assert "LINE 10" in result.output
        assert "0x8000" in result.output
        assert "Total: 5 blocks, 2 headers, 1 headerless" in result.output

    def test_malformed_tape(self, runner: CliRunner, tmp_path: Path):
        path = tmp_path / "short.tap"
        path.write_bytes(b"\x13\x00\x00abc")
        result = runner.invoke(main, ["list", str(path)])
        assert result.exit_code == ExitCode.DECODE_ERROR
        assert "truncated block" in result.output

    def test_bad_checksum_warns(self, runner: CliRunner, bad_checksum_tap: Path):
        result = runner.invoke(main, ["--no-color", "list", str(bad_checksum_tap)])
        assert result.exit_code == 0
        assert "[WARNING]" in result.output
        assert "\x1b[" not in result.output

    def test_bad_checksum_strict(self, runner: CliRunner, bad_checksum_tap: Path):
        result = runner.invoke(main, ["--strict", "list", str(bad_checksum_tap)])
        assert result.exit_code == ExitCode.DECODE_ERROR
        assert "checksum mismatch" in result.output

    def test_strict_from_environment(self, bad_checksum_tap: Path):
        result = CliRunner(env={"ZXTAPI_STRICT": "1"}).invoke(main, ["list", str(bad_checksum_tap)])
        assert result.exit_code == ExitCode.DECODE_ERROR

    def test_invalid_environment_setting(self, game_tap: Path):
        result = CliRunner(env={"ZXTAPI_HEX_RECORD_SIZE": "abc"}).invoke(main, ["list", str(game_tap)])
        assert result.exit_code == ExitCode.INVALID_ARGS
        assert "[ERROR] ZXTAPI_HEX_RECORD_SIZE must be an integer" in result.output


# =============================================================================
# BASIC / Binary
# =============================================================================

class TestBasicCommand:
    """Tests for printing BASIC programs."""

    def test_first_program(self, runner: CliRunner, game_tap: Path):
        result = runner.invoke(main, ["basic", str(game_tap)])
        assert result.exit_code == 0, result.output
        assert result.output == '  10 PRINT "HI"\n'

    def test_by_name(self, runner: CliRunner, game_tap: Path):
        result = runner.invoke(main, ["basic", "-n", "HELLO", str(game_tap)])
        assert result.exit_code == 0
        assert 'PRINT "HI"' in result.output

    def test_index_out_of_range(self, runner: CliRunner, game_tap: Path):
        result = runner.invoke(main, ["basic", "-i", "3", str(game_tap)])
        assert result.exit_code == ExitCode.DECODE_ERROR
        assert "No block found with index 3" in result.output

    def test_wrong_datatype(self, runner: CliRunner, game_tap: Path):
        result = runner.invoke(main, ["basic", "-n", "SCREEN", str(game_tap)])
        assert result.exit_code == ExitCode.DECODE_ERROR
        assert "not supported for CODE blocks" in result.output


class TestBinaryCommand:
    """Tests for Intel HEX export."""

    def test_stdout(self, runner: CliRunner, game_tap: Path):
        result = runner.invoke(main, ["binary", str(game_tap)])
        assert result.exit_code == 0, result.output
        assert result.output == ":038000003E01C975\n:00000001FF\n"

    def test_output_file(self, runner: CliRunner, game_tap: Path, tmp_path: Path):
        target = tmp_path / "screen.hex"
        result = runner.invoke(main, ["binary", "-i", "2", "-o", str(target), str(game_tap)])
        assert result.exit_code == 0, result.output
        assert "0x8000" in result.output
        assert target.read_text().endswith(":00000001FF\n")

    def test_basic_block_rejected(self, runner: CliRunner, game_tap: Path):
        result = runner.invoke(main, ["binary", "-i", "1", str(game_tap)])
        assert result.exit_code == ExitCode.DECODE_ERROR


# =============================================================================
# Extract
# =============================================================================

class TestExtractCommand:
    """Tests for extracting blocks to files."""

    def test_extract_all(self, runner: CliRunner, game_tap: Path, tmp_path: Path):
        out = tmp_path / "out"
        result = runner.invoke(main, ["extract", "-o", str(out), str(game_tap)])
        assert result.exit_code == 0, result.output
        assert "Extracted 3 files" in result.output

        target = out / "game"
        assert (target / "01_HELLO.bas").read_text() == '  10 PRINT "HI"\n'
        assert (target / "02_SCREEN.hex").exists()
        assert (target / "headerless01.bin").read_bytes() == b"\xaa\xbb"

    def test_extract_one(self, runner: CliRunner, game_tap: Path, tmp_path: Path):
        result = runner.invoke(main, ["extract", "-o", str(tmp_path), "-n", "SCREEN", str(game_tap)])
        assert result.exit_code == 0, result.output
        assert sorted(p.name for p in (tmp_path / "game").iterdir()) == ["02_SCREEN.hex"]

    def test_extract_default_directory(self, runner: CliRunner, game_tap: Path):
        with runner.isolated_filesystem():
            result = runner.invoke(main, ["extract", str(game_tap)])
            assert result.exit_code == 0, result.output
            assert Path("game", "01_HELLO.bas").exists()

    def test_extract_empty_tape(self, runner: CliRunner, tmp_path: Path):
        path = tmp_path / "empty.tap"
        path.write_bytes(b"")
        result = runner.invoke(main, ["extract", "-o", str(tmp_path), str(path)])
        assert result.exit_code == 0
        assert "No blocks to extract" in result.output
