"""
CSV file-based output storage.

Writes the merged, address and polling tables as flat CSV files with a
header row. Each table is written to a temporary file beside its
destination first; the temporaries only replace the destinations once all
of them have been written, so a failed run leaves earlier outputs intact.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Iterable, List, Tuple

import pandas as pd

from ..exceptions import ConfigurationError, ExportError
from ..logger import get_logger

logger = get_logger("csv_store")

NamedTable = Tuple[str, Path, pd.DataFrame]


class CSVStore:
    """
    Flat-file table storage.

    Usage:
        store = CSVStore()
        store.export([("merged", Path("output/merged.csv"), merged_df)])
    """

    def __init__(self, delimiter: str = ",", encoding: str = "utf-8"):
        self.delimiter = delimiter
        self.encoding = encoding

    def _write_temp(self, path: Path, df: pd.DataFrame) -> Path:
        """Write a table to a temporary file in the destination directory."""
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
            os.close(fd)
        except OSError as e:
            raise ExportError(f"Cannot prepare output directory for {path}: {e}", file_path=str(path)) from e

        tmp_path = Path(tmp_name)
        try:
            df.to_csv(tmp_path, sep=self.delimiter, index=False, encoding=self.encoding)
        except OSError as e:
            tmp_path.unlink(missing_ok=True)
            raise ExportError(f"Failed to write {path}: {e}", file_path=str(path)) from e
        return tmp_path

    def export(self, tables: Iterable[NamedTable]) -> List[Path]:
        """
        Write tables to their destinations, overwriting existing files.

        Args:
            tables: (name, destination, DataFrame) triples

        Returns:
            Destination paths in the order given

        Raises:
            ConfigurationError: two tables share a destination, or a
                destination is a directory
            ExportError: a write or replace failed
        """
        tables = list(tables)

        destinations = [Path(path).resolve() for _, path, _ in tables]
        if len(set(destinations)) != len(destinations):
            raise ConfigurationError("Output tables must be written to distinct files")
        for (name, _, _), path in zip(tables, destinations):
            if path.is_dir():
                raise ConfigurationError(f"Output path for {name} is a directory: {path}")

        staged: List[Tuple[Path, Path]] = []
        try:
            for (name, _, df), path in zip(tables, destinations):
                staged.append((self._write_temp(path, df), path))
                logger.debug(f"Staged {name} ({len(df)} rows) for {path}")

            for tmp_path, path in staged:
                try:
                    os.replace(tmp_path, path)
                except OSError as e:
                    raise ExportError(f"Failed to move output into place at {path}: {e}", file_path=str(path)) from e
        finally:
            for tmp_path, _ in staged:
                tmp_path.unlink(missing_ok=True)

        for (name, _, df), path in zip(tables, destinations):
            logger.info(f"Wrote {name}: {len(df)} rows -> {path}")

        return [Path(path) for _, path, _ in tables]
