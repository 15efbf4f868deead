"""
Linkage & Discrepancy Reporter.

Inner-joins the normalized address and polling tables on the canonical
key and records which keys on each side found no partner. Unmatched
keys are reportable output, never an error.
"""

from __future__ import annotations

import pandas as pd

from .base import BaseProcessor
from ..exceptions import SchemaError, TableStructureError
from ..logger import get_logger
from ..models import LinkageResult

logger = get_logger("linker")


def link_tables(
    address_df: pd.DataFrame,
    polling_df: pd.DataFrame,
    key_column: str = "Key",
) -> LinkageResult:
    """
    Join addresses to polling places on the canonical key.

    Every combination of rows sharing a key is emitted (standard relational
    join semantics). Rows without a key take no part in the join.

    Args:
        address_df: Normalized address table
        polling_df: Normalized, namespaced polling table
        key_column: Shared key column

    Returns:
        LinkageResult with the merged table (key, polling columns, address
        columns) and the discrepancy sets

    Raises:
        SchemaError: the key column is missing on either side
        TableStructureError: the tables share a column other than the key
    """
    for source, df in (("address", address_df), ("polling", polling_df)):
        if key_column not in df.columns:
            raise SchemaError(
                f"{source} table has no '{key_column}' column; normalize keys first",
                missing_columns=[key_column],
                source=source,
            )

    overlap = sorted((set(address_df.columns) & set(polling_df.columns)) - {key_column})
    if overlap:
        raise TableStructureError(
            f"Address and polling tables share column(s) {', '.join(overlap)}; "
            "polling columns must be namespaced"
        )

    left = address_df[address_df[key_column].notna()]
    right = polling_df[polling_df[key_column].notna()]

    merged = left.merge(right, on=key_column, how="inner", sort=False)
    polling_columns = [c for c in polling_df.columns if c != key_column]
    address_columns = [c for c in address_df.columns if c != key_column]
    merged = merged[[key_column] + polling_columns + address_columns].reset_index(drop=True)

    address_counts = left[key_column].value_counts().to_dict()
    polling_counts = right[key_column].value_counts().to_dict()
    merged_keys = set(merged[key_column].unique())

    result = LinkageResult(
        merged=merged,
        key_column=key_column,
        unmatched_address_keys=sorted(k for k in address_counts if k not in merged_keys),
        unmatched_polling_keys=sorted(k for k in polling_counts if k not in merged_keys),
        duplicate_address_keys={k: n for k, n in sorted(address_counts.items()) if n > 1},
        duplicate_polling_keys={k: n for k, n in sorted(polling_counts.items()) if n > 1},
        unkeyed_address_rows=len(address_df) - len(left),
        unkeyed_polling_rows=len(polling_df) - len(right),
        address_key_counts=address_counts,
        polling_key_counts=polling_counts,
    )

    # A precinct with several polling places repeats each of its addresses
    for key, count in result.duplicate_polling_keys.items():
        if key in merged_keys:
            logger.warning(
                f"Key {key!r} matches {count} polling rows and "
                f"{address_counts[key]} address rows; {count * address_counts[key]} merged rows emitted"
            )

    return result


class LinkageProcessor(BaseProcessor):
    """Joins the normalized tables and reports discrepancies."""

    name = "Linkage"

    def validate(self) -> None:
        if self.context.normalized_address is None or self.context.normalized_polling is None:
            raise SchemaError("Keys have not been normalized on both tables")

    def process(self) -> None:
        result = link_tables(
            self.context.normalized_address,
            self.context.normalized_polling,
            key_column=self.config.columns.key,
        )
        self.context.linkage = result
        self.log_debug("Linkage outcome", **result.to_dict())

        stats = self.context.stats
        stats.merged_rows = len(result.merged)
        stats.matched_address_rows = result.matched_address_rows
        stats.unmatched_address_keys = len(result.unmatched_address_keys)
        stats.unmatched_polling_keys = len(result.unmatched_polling_keys)

        self.log_info(
            "Tables linked",
            merged_rows=len(result.merged),
            merged_keys=len(result.merged_keys),
        )
        if result.unmatched_address_keys:
            self.log_warning(
                f"{len(result.unmatched_address_keys)} address key(s) have no polling location",
                sample=",".join(result.unmatched_address_keys[:10]),
            )
        if result.unmatched_polling_keys:
            self.log_warning(
                f"{len(result.unmatched_polling_keys)} polling key(s) have no address on file",
                sample=",".join(result.unmatched_polling_keys[:10]),
            )
        if result.duplicate_address_keys:
            self.log_debug(
                f"{len(result.duplicate_address_keys)} address key(s) cover more than one row"
            )
