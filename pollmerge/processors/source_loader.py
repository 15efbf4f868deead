"""
Source Loader.

Reads both inputs and the correction set into the processing context.
"""

from __future__ import annotations

from .base import BaseProcessor
from ..persistence import load_corrections, read_address_table, read_polling_lines
from ..utils.timing import timed_operation


class SourceLoader(BaseProcessor):
    """Loads the address table, raw polling lines and correction set."""

    name = "LoadSources"

    def process(self) -> None:
        columns = self.config.columns

        with timed_operation("Read address table", self.logger):
            self.context.address_table = read_address_table(
                self.config.address_csv,
                required_columns=[columns.address_precinct, columns.address_state],
                delimiter=columns.delimiter,
            )
        with timed_operation("Read polling lines", self.logger):
            self.context.raw_polling_lines = read_polling_lines(self.config.polling_csv)

        self.context.corrections = load_corrections(
            self.config.corrections_file,
            required=self.config.corrections_required,
        )

        stats = self.context.stats
        stats.address_rows = len(self.context.address_table)
        stats.raw_polling_lines = len(self.context.raw_polling_lines)

        self.log_info(
            "Sources loaded",
            address_rows=stats.address_rows,
            polling_lines=stats.raw_polling_lines,
            corrections=len(self.context.corrections),
        )
