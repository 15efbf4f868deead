"""
Key Normalizer.

Derives the canonical join key "<state token> <3-digit precinct>" on
both sides:

- address side: "006-074" + "MAS" -> "MAS 074". The leading numeric
  state code is ignored; one state is known to appear with two codes.
- polling side: "NEWJ--12" + "NEWJ" -> "NEWJ-012" -> "NEWJ 012". A bare
  "-" standing in for a leading zero is recovered first.

State tokens are used exactly as they appear. "MA" and "MAS" are
different tokens and will not join.
"""

from __future__ import annotations

import re
from typing import Optional

import pandas as pd

from .base import BaseProcessor
from ..exceptions import SchemaError
from ..logger import get_logger
from ..models import make_key
from ..models.keys import PRECINCT_WIDTH

logger = get_logger("key_normalizer")

# Trailing group of NNN-NNN; a lone group is accepted too
ADDRESS_PRECINCT_PATTERN = re.compile(r"(?:^|-)\s*(\d{1,3})\s*$")
THREE_DIGITS = re.compile(r"\d{3}")
DIGIT_RUN = re.compile(r"\d+")


def recover_leading_zero(raw_id: str) -> str:
    """Rewrite "--" to "-0" ("WIS--07" -> "WIS-007")."""
    return raw_id.replace("--", "-0")


def extract_precinct_number(raw_id: str) -> Optional[str]:
    """
    Extract the precinct number from a polling identifier.

    The first run of three digits wins. Identifiers with only a shorter
    run ("MAS-74") are zero-padded from their last run. Returns None when
    the identifier has no digits.
    """
    match = THREE_DIGITS.search(raw_id)
    if match:
        return match.group(0)
    runs = DIGIT_RUN.findall(raw_id)
    if not runs:
        return None
    return runs[-1].zfill(PRECINCT_WIDTH)


def address_key(precinct_id: Optional[str], state: Optional[str]) -> Optional[str]:
    """Canonical key for an address record, or None if it cannot be derived."""
    if not isinstance(precinct_id, str):
        return None
    match = ADDRESS_PRECINCT_PATTERN.search(precinct_id.strip())
    if not match:
        return None
    return make_key(state, match.group(1))


def polling_key(raw_id: Optional[str], state: Optional[str]) -> Optional[str]:
    """Canonical key for a polling record, or None if it cannot be derived."""
    if not isinstance(raw_id, str):
        return None
    return make_key(state, extract_precinct_number(recover_leading_zero(raw_id)))


def _require_columns(df: pd.DataFrame, columns: list[str], source: str) -> None:
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise SchemaError(
            f"{source} table is missing required column(s): {', '.join(missing)}",
            missing_columns=missing,
            source=source,
        )


def _log_unkeyed(df: pd.DataFrame, key_column: str, id_column: str, source: str) -> int:
    unkeyed = df[df[key_column].isna()]
    if len(unkeyed):
        sample = ", ".join(repr(v) for v in unkeyed[id_column].head(5))
        logger.warning(f"{len(unkeyed)} {source} row(s) have no derivable key (e.g. {sample})")
    return len(unkeyed)


def normalize_address_table(
    df: pd.DataFrame,
    precinct_column: str = "Precinct.ID",
    state_column: str = "State",
    key_column: str = "Key",
) -> pd.DataFrame:
    """Return a copy of the address table with the canonical key column added."""
    _require_columns(df, [precinct_column, state_column], "address")
    if key_column in df.columns:
        logger.warning(f"Address table already has a '{key_column}' column; it will be replaced")

    out = df.copy()
    out[key_column] = [
        address_key(precinct, state)
        for precinct, state in zip(out[precinct_column], out[state_column])
    ]
    _log_unkeyed(out, key_column, precinct_column, "address")
    return out


def normalize_polling_table(
    df: pd.DataFrame,
    id_column: str = "Polling.ID",
    state_column: str = "Polling.State",
    key_column: str = "Key",
) -> pd.DataFrame:
    """Return a copy of the polling table with the canonical key column added."""
    _require_columns(df, [id_column, state_column], "polling")
    if key_column in df.columns:
        logger.warning(f"Polling table already has a '{key_column}' column; it will be replaced")

    out = df.copy()
    out[key_column] = [
        polling_key(raw_id, state)
        for raw_id, state in zip(out[id_column], out[state_column])
    ]
    _log_unkeyed(out, key_column, id_column, "polling")
    return out


class KeyNormalizerProcessor(BaseProcessor):
    """Adds the canonical key to both tables."""

    name = "KeyNormalizer"

    def validate(self) -> None:
        if self.context.address_table is None:
            raise SchemaError("Address table has not been loaded", source="address")
        if self.context.polling_table is None:
            raise SchemaError("Polling table has not been built", source="polling")

    def process(self) -> None:
        columns = self.config.columns

        self.context.normalized_address = normalize_address_table(
            self.context.address_table,
            precinct_column=columns.address_precinct,
            state_column=columns.address_state,
            key_column=columns.key,
        )
        self.context.normalized_polling = normalize_polling_table(
            self.context.polling_table,
            id_column=columns.namespaced_polling_id,
            state_column=columns.namespaced_polling_state,
            key_column=columns.key,
        )

        address_keys = self.context.normalized_address[columns.key]
        polling_keys = self.context.normalized_polling[columns.key]
        self.log_info(
            "Keys derived",
            address_keys=address_keys.nunique(),
            polling_keys=polling_keys.nunique(),
        )
