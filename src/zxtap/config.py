"""
Inspector Configuration
=======================

Settings shared by the inspector and the zxtapi command line. Values
come from:
- Default values (defined here)
- Environment variables (InspectorConfig.from_env)
- Command-line options, which override both

Environment Variables
---------------------
    NO_COLOR                 Disable colored output (any value)
    ZXTAPI_NO_COLOR          Same, tool-specific ("1"/"true"/"yes")
    ZXTAPI_STRICT            Treat checksum mismatches as errors
    ZXTAPI_OUTPUT_DIR        Default extraction directory
    ZXTAPI_HEX_RECORD_SIZE   Data bytes per Intel HEX record
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional
import os

from zxtap.errors import ConfigError
from zxtap.intelhex import DEFAULT_RECORD_SIZE, MAX_RECORD_SIZE


def _env_flag(value: Optional[str]) -> bool:
    return value is not None and value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class InspectorConfig:
    """
    Configuration for tape inspection and extraction.

    Attributes:
        color: Use ANSI colors for diagnostics
        strict_checksums: Raise on block checksum mismatches instead of warning
        output_dir: Base directory for extracted files
        hex_record_size: Data bytes per Intel HEX record
    """
    color: bool = True
    strict_checksums: bool = False
    output_dir: Path = field(default_factory=lambda: Path("."))
    hex_record_size: int = DEFAULT_RECORD_SIZE

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "InspectorConfig":
        """
        Create an InspectorConfig from environment variables.

        Args:
            environ: Mapping to read instead of os.environ (for tests)

        Raises:
            ConfigError: If ZXTAPI_HEX_RECORD_SIZE is not an integer in 1-255
        """
        env = os.environ if environ is None else environ
        config = cls()

        if "NO_COLOR" in env or _env_flag(env.get("ZXTAPI_NO_COLOR")):
            config.color = False

        if _env_flag(env.get("ZXTAPI_STRICT")):
            config.strict_checksums = True

        if env.get("ZXTAPI_OUTPUT_DIR"):
            config.output_dir = Path(env["ZXTAPI_OUTPUT_DIR"])

        if env.get("ZXTAPI_HEX_RECORD_SIZE"):
            value = env["ZXTAPI_HEX_RECORD_SIZE"]
            try:
                config.hex_record_size = int(value)
            except ValueError as e:
                raise ConfigError(f"ZXTAPI_HEX_RECORD_SIZE must be an integer, got '{value}'") from e
            if not 1 <= config.hex_record_size <= MAX_RECORD_SIZE:
                raise ConfigError(
                    f"ZXTAPI_HEX_RECORD_SIZE must be 1-{MAX_RECORD_SIZE}, got {config.hex_record_size}"
                )

        return config
