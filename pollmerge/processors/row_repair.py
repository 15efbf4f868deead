"""
Row Repair.

Fixes the raw polling-location lines before structured parsing:

- splits the combined "State/ZIP" header into two fields
- splits "AA NNNNN" state/ZIP fields on the delimiter
- replaces lines with the wrong number of separators from the
  hand-curated correction set, and drops the ones it does not cover

Every line that leaves this phase has exactly as many separators as
the header.
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Iterable, Optional, Set

from .base import BaseProcessor
from ..exceptions import CorrectionSetError
from ..logger import get_logger
from ..models import CorrectionSet, DroppedLine, RepairResult

logger = get_logger("row_repair")

STATE_ZIP_HEADER = "State/ZIP"


@lru_cache(maxsize=8)
def _state_zip_pattern(delimiter: str) -> re.Pattern:
    d = re.escape(delimiter)
    # A whole field holding a 2-letter state, one space, a 5-digit ZIP
    return re.compile(rf"(^|{d}) *([A-Z]{{2}}) (\d{{5}}) *(?={d}|$)")


def count_separators(line: str, delimiter: str = ",") -> int:
    """Number of field separators in a raw line."""
    return line.count(delimiter)


def split_state_zip_header(header: str, delimiter: str = ",") -> str:
    """Rewrite the "State/ZIP" header fragment into two delimited fields."""
    return header.replace(STATE_ZIP_HEADER, f"State{delimiter}ZIP")


def split_state_zip_field(line: str, delimiter: str = ",") -> str:
    """
    Rewrite "AA NNNNN" fields into "AA<delimiter>NNNNN".

    Only fields consisting of exactly a state code and a ZIP are touched;
    street names containing digits are left alone. Idempotent.
    """
    return _state_zip_pattern(delimiter).sub(
        lambda m: f"{m.group(1)}{m.group(2)}{delimiter}{m.group(3)}", line
    )


def repair_lines(
    lines: Iterable[str],
    corrections: Optional[CorrectionSet] = None,
    delimiter: str = ",",
) -> RepairResult:
    """
    Repair raw polling-location lines.

    The first line is the header and defines the expected separator count.
    A data line with a different count is replaced by its corrected text
    when the correction set knows it, and dropped otherwise.

    Args:
        lines: Raw lines of the polling source, header first
        corrections: Known-bad lines mapped to their corrected text
        delimiter: Field separator

    Returns:
        RepairResult whose lines all have the header's separator count

    Raises:
        CorrectionSetError: a corrected line still has the wrong count
    """
    if corrections is None:
        corrections = CorrectionSet()

    raw = [line.rstrip("\r\n") for line in lines]
    result = RepairResult()
    if not raw:
        return result

    header = split_state_zip_header(raw[0], delimiter)
    result.header_rewritten = header != raw[0]
    result.expected_separators = count_separators(header, delimiter)
    result.lines.append(header)
    result.line_numbers.append(1)

    used: Set[str] = set()

    for line_number, line in enumerate(raw[1:], start=2):
        if not line.strip():
            logger.debug(f"Skipping blank line {line_number}")
            continue

        rewritten = split_state_zip_field(line, delimiter)
        found = count_separators(rewritten, delimiter)

        if found == result.expected_separators:
            if rewritten != line:
                result.state_zip_rewrites += 1
            result.lines.append(rewritten)
            result.line_numbers.append(line_number)
            continue

        correction = corrections.lookup(line, rewritten)
        if correction is None:
            logger.warning(
                f"Dropping malformed line {line_number}: "
                f"{found} separators, expected {result.expected_separators}: {line!r}"
            )
            result.dropped.append(DroppedLine(line_number=line_number, text=line, field_separators=found))
            continue

        fixed = split_state_zip_field(correction.corrected, delimiter)
        if count_separators(fixed, delimiter) != result.expected_separators:
            raise CorrectionSetError(
                f"Correction for line {line_number} has {count_separators(fixed, delimiter)} "
                f"separators, expected {result.expected_separators}",
                file_path=str(corrections.source) if corrections.source else None,
                entry=correction.corrected,
            )

        logger.debug(f"Replaced line {line_number} from correction set")
        used.add(correction.original)
        result.replaced_line_numbers.append(line_number)
        result.lines.append(fixed)
        result.line_numbers.append(line_number)

    result.unused_corrections = [c for c in corrections.corrections if c.original not in used]
    return result


class RowRepairProcessor(BaseProcessor):
    """Repairs the raw polling lines loaded into the context."""

    name = "RowRepair"

    def validate(self) -> None:
        if not self.context.raw_polling_lines:
            self.log_warning("Polling source has no lines to repair")

    def process(self) -> None:
        result = repair_lines(
            self.context.raw_polling_lines,
            self.context.corrections,
            delimiter=self.config.columns.delimiter,
        )
        self.context.repair = result

        stats = self.context.stats
        stats.repaired_lines = len(result.replaced_line_numbers)
        stats.dropped_lines = len(result.dropped)

        self.log_debug("Repair outcome", **result.to_dict())

        if result.header_rewritten:
            self.log_info(f"Split '{STATE_ZIP_HEADER}' header into State and ZIP")
        self.log_info(
            "Row repair finished",
            kept=result.data_line_count,
            replaced=len(result.replaced_line_numbers),
            dropped=len(result.dropped),
            state_zip_rewrites=result.state_zip_rewrites,
        )
        if result.dropped:
            self.log_warning(
                f"{len(result.dropped)} malformed line(s) had no correction and were dropped",
                lines=",".join(str(d.line_number) for d in result.dropped[:20]),
            )
        if result.unused_corrections:
            self.log_info(f"{len(result.unused_corrections)} correction(s) matched no line")
            for correction in result.unused_corrections:
                self.log_debug("Unused correction", original=repr(correction.original))
