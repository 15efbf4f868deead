"""
Table Builder.

Turns repaired polling lines into a DataFrame whose columns are
namespaced with a fixed prefix ("Polling.ID", "Polling.State", ...), so
they stay distinguishable from the address columns after the join.
"""

from __future__ import annotations

from typing import Optional, Sequence

import pandas as pd

from .base import BaseProcessor
from ..exceptions import TableStructureError


def namespace_columns(columns: Sequence[str], prefix: str) -> list[str]:
    """Prefix every column name, stripping surrounding whitespace first."""
    return [f"{prefix}{name.strip()}" for name in columns]


def build_polling_table(
    lines: Sequence[str],
    delimiter: str = ",",
    prefix: str = "Polling.",
    line_numbers: Optional[Sequence[int]] = None,
) -> pd.DataFrame:
    """
    Build the namespaced polling table from repaired lines.

    Args:
        lines: Repaired lines, header first
        delimiter: Field separator
        prefix: Namespace prepended to every header field
        line_numbers: Source line number of each entry in lines, used in
            error reports (defaults to positions in lines)

    Returns:
        DataFrame of stripped string values, one row per data line

    Raises:
        TableStructureError: no header, duplicate header names, or a data
            row whose field count differs from the header
    """
    if not lines:
        raise TableStructureError("Polling source has no header row")

    header = lines[0].split(delimiter)
    columns = namespace_columns(header, prefix)

    if not line_numbers:
        line_numbers = range(1, len(lines) + 1)

    duplicates = sorted({c for c in columns if columns.count(c) > 1})
    if duplicates:
        raise TableStructureError(
            f"Duplicate column names in polling header: {', '.join(duplicates)}",
            line_number=line_numbers[0],
            line=lines[0],
        )

    rows = []
    for row_number, line in zip(line_numbers[1:], lines[1:]):
        fields = line.split(delimiter)
        if len(fields) != len(columns):
            raise TableStructureError(
                f"Row {row_number} has {len(fields)} fields, header has {len(columns)}",
                line_number=row_number,
                expected=len(columns),
                actual=len(fields),
                line=line,
            )
        rows.append([value.strip() for value in fields])

    return pd.DataFrame(rows, columns=columns, dtype=object)


class TableBuilderProcessor(BaseProcessor):
    """Builds the polling table from the repaired lines."""

    name = "TableBuilder"

    def validate(self) -> None:
        if self.context.repair is None:
            raise TableStructureError("Row repair has not produced any lines")

    def process(self) -> None:
        columns = self.config.columns
        table = build_polling_table(
            self.context.repair.lines,
            delimiter=columns.delimiter,
            prefix=columns.polling_prefix,
            line_numbers=self.context.repair.line_numbers,
        )
        self.context.polling_table = table
        self.context.stats.polling_rows = len(table)

        self.log_info(
            "Polling table built",
            rows=len(table),
            columns=len(table.columns),
        )
        self.log_debug("Polling columns", names=",".join(table.columns))
