"""
Linkage result model.

Holds the merged table and the discrepancy sets produced by joining the
address and polling tables on the canonical key.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Dict, Any

import pandas as pd

SEVERITY_HIGH = "high"
SEVERITY_LOW = "low"


@dataclass
class LinkageResult:
    """
    Inner join of the two normalized tables plus what failed to match.

    Address keys without a polling place are the severe class: they mean
    voters with no known place to vote.
    """

    merged: pd.DataFrame
    key_column: str = "Key"

    unmatched_address_keys: List[str] = field(default_factory=list)
    unmatched_polling_keys: List[str] = field(default_factory=list)

    # Keys seen on more than one row of a side, with their row counts
    duplicate_address_keys: Dict[str, int] = field(default_factory=dict)
    duplicate_polling_keys: Dict[str, int] = field(default_factory=dict)

    # Rows excluded from the join because no key could be derived
    unkeyed_address_rows: int = 0
    unkeyed_polling_rows: int = 0

    # Row counts of unmatched keys, for the report
    address_key_counts: Dict[str, int] = field(default_factory=dict, repr=False)
    polling_key_counts: Dict[str, int] = field(default_factory=dict, repr=False)

    @property
    def merged_keys(self) -> set:
        return set(self.merged[self.key_column].dropna().unique())

    @property
    def matched_address_rows(self) -> int:
        """Address rows whose key found at least one polling place."""
        return int(sum(self.address_key_counts[k] for k in self.merged_keys))

    @property
    def has_discrepancies(self) -> bool:
        return bool(self.unmatched_address_keys or self.unmatched_polling_keys)

    def discrepancy_frame(self) -> pd.DataFrame:
        """
        Tidy frame of unmatched keys for reporting.

        Columns: side, key, severity, rows. Address-side rows come first.
        """
        records = [
            {
                "side": "address",
                "key": key,
                "severity": SEVERITY_HIGH,
                "rows": self.address_key_counts.get(key, 0),
            }
            for key in self.unmatched_address_keys
        ]
        records.extend(
            {
                "side": "polling",
                "key": key,
                "severity": SEVERITY_LOW,
                "rows": self.polling_key_counts.get(key, 0),
            }
            for key in self.unmatched_polling_keys
        )
        return pd.DataFrame(records, columns=["side", "key", "severity", "rows"])

    def to_dict(self) -> dict[str, Any]:
        return {
            "merged_rows": len(self.merged),
            "merged_keys": len(self.merged_keys),
            "matched_address_rows": self.matched_address_rows,
            "unmatched_address_keys": len(self.unmatched_address_keys),
            "unmatched_polling_keys": len(self.unmatched_polling_keys),
            "duplicate_address_keys": len(self.duplicate_address_keys),
            "duplicate_polling_keys": len(self.duplicate_polling_keys),
            "unkeyed_address_rows": self.unkeyed_address_rows,
            "unkeyed_polling_rows": self.unkeyed_polling_rows,
        }
