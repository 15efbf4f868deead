"""
Row repair models.

Describe the hand-curated correction set and the outcome of repairing the
raw polling-location lines.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, List, Dict, Any


@dataclass
class Correction:
    """A known malformed line and the text that replaces it."""
    original: str
    corrected: str
    note: str = ""

    def __post_init__(self):
        # Line endings are never part of the match
        self.original = self.original.rstrip("\r\n")
        self.corrected = self.corrected.rstrip("\r\n")

    def to_dict(self) -> dict[str, Any]:
        data = {"original": self.original, "corrected": self.corrected}
        if self.note:
            data["note"] = self.note
        return data


@dataclass
class CorrectionSet:
    """
    Lookup of known-bad polling lines to their corrected text.

    Loaded from a version-controlled file so operators can extend it
    without touching the repair logic.
    """
    corrections: List[Correction] = field(default_factory=list)
    source: Optional[Path] = None

    def __post_init__(self):
        self._by_original: Dict[str, Correction] = {c.original: c for c in self.corrections}

    def __len__(self) -> int:
        return len(self.corrections)

    def lookup(self, *candidates: str) -> Optional[Correction]:
        """Return the first correction whose original matches any candidate text."""
        for candidate in candidates:
            correction = self._by_original.get(candidate)
            if correction is not None:
                return correction
        return None

    @classmethod
    def from_mapping(cls, mapping: Dict[str, str]) -> "CorrectionSet":
        """Create a set from a plain {original: corrected} mapping."""
        return cls([Correction(original=k, corrected=v) for k, v in mapping.items()])


@dataclass
class DroppedLine:
    """A malformed line that had no correction and was removed."""
    line_number: int  # 1-based position in the raw file
    text: str
    field_separators: int


@dataclass
class RepairResult:
    """Outcome of repairing the raw polling-location lines."""
    lines: List[str] = field(default_factory=list)
    # Raw 1-based line number of each entry in lines (header is 1)
    line_numbers: List[int] = field(default_factory=list)
    expected_separators: int = 0

    # 1-based raw line numbers replaced from the correction set
    replaced_line_numbers: List[int] = field(default_factory=list)
    dropped: List[DroppedLine] = field(default_factory=list)

    # Lines whose "AA NNNNN" field was split into state and ZIP
    state_zip_rewrites: int = 0
    header_rewritten: bool = False

    unused_corrections: List[Correction] = field(default_factory=list)

    @property
    def header(self) -> str:
        return self.lines[0] if self.lines else ""

    @property
    def data_line_count(self) -> int:
        return max(len(self.lines) - 1, 0)

    def to_dict(self) -> dict[str, Any]:
        return {
            "data_lines": self.data_line_count,
            "expected_separators": self.expected_separators,
            "replaced": len(self.replaced_line_numbers),
            "dropped": len(self.dropped),
            "state_zip_rewrites": self.state_zip_rewrites,
            "header_rewritten": self.header_rewritten,
            "unused_corrections": len(self.unused_corrections),
        }
