"""
Exporter.

Writes the merged, normalized address and normalized polling tables,
plus the discrepancy report when one is configured.
"""

from __future__ import annotations

from .base import BaseProcessor
from ..exceptions import ExportError
from ..persistence import CSVStore


class ExportProcessor(BaseProcessor):
    """Writes the output tables through the CSV store."""

    name = "Export"

    def validate(self) -> None:
        if self.context.linkage is None:
            raise ExportError("Nothing to export: tables have not been linked")

    def process(self) -> None:
        paths = self.config.output_paths()
        tables = [
            ("merged", paths["merged"], self.context.linkage.merged),
            ("addresses", paths["addresses"], self.context.normalized_address),
            ("polling", paths["polling"], self.context.normalized_polling),
        ]
        if self.config.discrepancy_csv is not None:
            tables.append(
                ("discrepancies", self.config.discrepancy_csv, self.context.linkage.discrepancy_frame())
            )

        store = CSVStore(delimiter=self.config.columns.delimiter)
        self.context.written_paths = store.export(tables)
        self.log_info("Outputs written", files=len(self.context.written_paths))
