"""
Correction set loader.

The corrections for known malformed polling lines are hand-curated and
kept under version control as JSON:

    {
      "corrections": [
        {"original": "<line as it appears>", "corrected": "<fixed line>", "note": "..."}
      ]
    }
"""

from __future__ import annotations

import json
from pathlib import Path

from ..exceptions import CorrectionSetError
from ..logger import get_logger
from ..models import Correction, CorrectionSet

logger = get_logger("corrections")


def load_corrections(path: Path, required: bool = False) -> CorrectionSet:
    """
    Load the correction set.

    Args:
        path: JSON correction file
        required: Raise if the file is missing instead of using an empty set

    Returns:
        CorrectionSet (empty when an optional file is absent)

    Raises:
        CorrectionSetError: file unreadable, invalid JSON, bad entry
            structure or duplicate originals
    """
    path = Path(path)
    if not path.exists():
        if required:
            raise CorrectionSetError(f"Correction file not found: {path}", file_path=str(path))
        logger.warning(f"No correction file at {path}; malformed polling lines will be dropped")
        return CorrectionSet(source=path)

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise CorrectionSetError(f"Correction file is not valid JSON: {e}", file_path=str(path)) from e
    except OSError as e:
        raise CorrectionSetError(f"Correction file could not be read: {e}", file_path=str(path)) from e

    entries = data.get("corrections") if isinstance(data, dict) else data
    if not isinstance(entries, list):
        raise CorrectionSetError(
            'Correction file must hold a list or an object with a "corrections" list',
            file_path=str(path),
        )

    corrections = []
    seen = set()
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise CorrectionSetError(f"Correction #{index} is not an object", file_path=str(path), entry=entry)
        original = entry.get("original")
        corrected = entry.get("corrected")
        if not isinstance(original, str) or not isinstance(corrected, str):
            raise CorrectionSetError(
                f'Correction #{index} needs string "original" and "corrected" fields',
                file_path=str(path),
                entry=entry,
            )
        correction = Correction(original=original, corrected=corrected, note=str(entry.get("note", "")))
        if correction.original in seen:
            raise CorrectionSetError(
                f"Correction #{index} duplicates an earlier original line",
                file_path=str(path),
                entry=original,
            )
        seen.add(correction.original)
        corrections.append(correction)

    logger.info(f"Loaded {len(corrections)} correction(s) from {path.name}")
    return CorrectionSet(corrections, source=path)
