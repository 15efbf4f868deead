"""
Input source readers.

The address source is read straight into a DataFrame. The polling source
is read as raw lines because it has to go through row repair before it
can be parsed.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Optional

import pandas as pd

from ..exceptions import InputLoadError, SchemaError
from ..logger import get_logger

logger = get_logger("sources")

ENCODINGS = ["utf-8-sig", "latin-1"]


def _check_file(path: Path, label: str) -> None:
    if not path.exists():
        raise InputLoadError(f"{label} file not found: {path}", file_path=str(path))
    if not path.is_file():
        raise InputLoadError(f"{label} path is not a file: {path}", file_path=str(path))


def read_address_table(
    path: Path,
    required_columns: Optional[Iterable[str]] = None,
    delimiter: str = ",",
) -> pd.DataFrame:
    """
    Read the address table with every value kept as a string.

    Args:
        path: Address CSV
        required_columns: Columns that must be present
        delimiter: Field separator

    Returns:
        DataFrame of string values (empty cells are "")

    Raises:
        InputLoadError: file missing, unreadable, empty or unparseable
        SchemaError: a required column is absent
    """
    path = Path(path)
    _check_file(path, "Address")

    df = None
    for encoding in ENCODINGS:
        try:
            df = pd.read_csv(
                path,
                sep=delimiter,
                dtype=str,
                keep_default_na=False,
                encoding=encoding,
            )
            break
        except UnicodeDecodeError:
            logger.warning(f"Retrying {path.name} with fallback encoding (failed as {encoding})")
            continue
        except pd.errors.EmptyDataError as e:
            raise InputLoadError(f"Address file is empty: {path}", file_path=str(path)) from e
        except pd.errors.ParserError as e:
            raise InputLoadError(f"Address file could not be parsed: {e}", file_path=str(path)) from e
        except OSError as e:
            raise InputLoadError(f"Address file could not be read: {e}", file_path=str(path)) from e

    if df is None:
        raise InputLoadError(f"Address file could not be decoded: {path}", file_path=str(path))

    df.columns = [str(c).strip() for c in df.columns]

    missing = [c for c in (required_columns or []) if c not in df.columns]
    if missing:
        raise SchemaError(
            f"Address file is missing required column(s): {', '.join(missing)}",
            missing_columns=missing,
            source=str(path),
        )

    logger.info(f"Read {len(df)} address rows from {path.name}")
    return df


def read_polling_lines(path: Path) -> List[str]:
    """
    Read the polling source as raw lines, header first.

    Raises:
        InputLoadError: file missing, unreadable or empty
    """
    path = Path(path)
    _check_file(path, "Polling")

    text = None
    for encoding in ENCODINGS:
        try:
            text = path.read_text(encoding=encoding)
            break
        except UnicodeDecodeError:
            logger.warning(f"Retrying {path.name} with fallback encoding (failed as {encoding})")
            continue
        except OSError as e:
            raise InputLoadError(f"Polling file could not be read: {e}", file_path=str(path)) from e

    if text is None:
        raise InputLoadError(f"Polling file could not be decoded: {path}", file_path=str(path))

    lines = text.splitlines()
    if not lines or not lines[0].strip():
        raise InputLoadError(f"Polling file has no header line: {path}", file_path=str(path))

    logger.info(f"Read {len(lines)} raw polling lines from {path.name}")
    return lines
