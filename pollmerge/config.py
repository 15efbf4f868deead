"""
Centralized configuration management.

Configuration is loaded from:
1. Environment variables
2. .env file (if present)
3. Default values

Usage:
    from pollmerge.config import Config
    config = Config()
    print(config.merged_csv)  # output/merged.csv unless MERGED_CSV is set
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parent.parent

# Does not override variables already present in the environment
load_dotenv(PROJECT_ROOT / ".env", override=False)


def _get_bool_env(key: str, default: bool = False) -> bool:
    """Get boolean from environment variable."""
    value = os.getenv(key, "").strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off"):
        return False
    return default


def _get_path_env(key: str, default: Optional[str]) -> Optional[Path]:
    """
    Get a path from environment variable.

    Relative paths are resolved against the project root so the run does not
    depend on the current working directory.
    """
    value = os.getenv(key, "").strip()
    if not value:
        if default is None:
            return None
        value = default
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = PROJECT_ROOT / path
    return path


@dataclass
class ColumnConfig:
    """Column names and layout of the two input sources."""
    # Address source
    address_precinct: str = "Precinct.ID"
    address_state: str = "State"

    # Polling source, before namespacing
    polling_id: str = "ID"
    polling_state: str = "State"
    polling_prefix: str = "Polling."

    # Shared canonical key column
    key: str = "Key"

    delimiter: str = ","

    @property
    def namespaced_polling_id(self) -> str:
        return f"{self.polling_prefix}{self.polling_id}"

    @property
    def namespaced_polling_state(self) -> str:
        return f"{self.polling_prefix}{self.polling_state}"


@dataclass
class Config:
    """
    Main application configuration.

    Input and output locations are explicit fields; nothing depends on the
    process working directory. Set DEBUG=1 in environment to enable debug mode.
    """

    # Inputs
    address_csv: Path = field(default_factory=lambda: _get_path_env("ADDRESS_CSV", "data/addresses.csv"))
    polling_csv: Path = field(default_factory=lambda: _get_path_env("POLLING_CSV", "data/polling_locations.csv"))
    corrections_file: Path = field(
        default_factory=lambda: _get_path_env("CORRECTIONS_FILE", "data/polling_corrections.json")
    )
    # A missing correction file is fatal only when its location was set explicitly
    corrections_required: bool = field(default_factory=lambda: bool(os.getenv("CORRECTIONS_FILE", "").strip()))

    # Outputs
    merged_csv: Path = field(default_factory=lambda: _get_path_env("MERGED_CSV", "output/merged.csv"))
    address_out_csv: Path = field(default_factory=lambda: _get_path_env("ADDRESS_OUT_CSV", "output/addresses.csv"))
    polling_out_csv: Path = field(default_factory=lambda: _get_path_env("POLLING_OUT_CSV", "output/polling.csv"))

    # Optional discrepancy report (not written unless configured)
    discrepancy_csv: Optional[Path] = field(default_factory=lambda: _get_path_env("DISCREPANCY_CSV", None))

    # Logging
    logs_dir: Path = field(default_factory=lambda: _get_path_env("LOG_DIR", "logs"))
    log_to_file: bool = field(default_factory=lambda: _get_bool_env("LOG_TO_FILE", True))

    # Debug mode (verbose console logging, per-line repair details)
    debug: bool = field(default_factory=lambda: _get_bool_env("DEBUG", False))

    columns: ColumnConfig = field(default_factory=ColumnConfig)

    def __post_init__(self):
        """Normalize paths after initialization."""
        self.address_csv = Path(self.address_csv)
        self.polling_csv = Path(self.polling_csv)
        self.corrections_file = Path(self.corrections_file)
        self.merged_csv = Path(self.merged_csv)
        self.address_out_csv = Path(self.address_out_csv)
        self.polling_out_csv = Path(self.polling_out_csv)
        self.logs_dir = Path(self.logs_dir)
        if self.discrepancy_csv is not None:
            self.discrepancy_csv = Path(self.discrepancy_csv)

    def output_paths(self) -> dict[str, Path]:
        """Destinations of the three exported tables, by table name."""
        return {
            "merged": self.merged_csv,
            "addresses": self.address_out_csv,
            "polling": self.polling_out_csv,
        }


# Global config instance (lazily initialized)
_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def reset_config() -> None:
    """Reset the global configuration (useful for testing)."""
    global _config
    _config = None
