"""
Processing statistics and timing models.

Tracks counts and per-phase durations for one pipeline run.
"""

from __future__ import annotations

from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from typing import List, Any


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass
class PhaseTiming:
    """Timing information for a single pipeline phase."""
    phase: str = ""
    duration_sec: float = 0.0
    success: bool = True

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["duration_sec"] = round(self.duration_sec, 4)
        return data


@dataclass
class ProcessingStats:
    """
    Complete statistics for a pipeline run.

    Tracks timing and row counts for all phases.
    """

    # Timestamps
    started_at: str = ""  # ISO format
    completed_at: str = ""  # ISO format

    # Status
    status: str = "pending"  # pending, processing, completed, failed
    error_message: str = ""
    failed_phase: str = ""

    # Polling source
    raw_polling_lines: int = 0
    repaired_lines: int = 0
    dropped_lines: int = 0
    polling_rows: int = 0

    # Address source
    address_rows: int = 0

    # Linkage
    merged_rows: int = 0
    matched_address_rows: int = 0
    unmatched_address_keys: int = 0
    unmatched_polling_keys: int = 0

    total_time_sec: float = 0.0

    phase_timings: List[PhaseTiming] = field(default_factory=list)

    def start(self) -> None:
        """Mark processing as started."""
        self.started_at = _utc_now()
        self.status = "processing"

    def complete(self) -> None:
        """Mark processing as completed."""
        self.completed_at = _utc_now()
        self.status = "completed"
        self.total_time_sec = sum(pt.duration_sec for pt in self.phase_timings)

    def fail(self, error: str, phase: str = "") -> None:
        """Mark processing as failed."""
        self.completed_at = _utc_now()
        self.status = "failed"
        self.error_message = error
        self.failed_phase = phase
        self.total_time_sec = sum(pt.duration_sec for pt in self.phase_timings)

    def add_phase_timing(self, timing: PhaseTiming) -> None:
        """Add timing for a finished phase."""
        self.phase_timings.append(timing)

    @property
    def match_rate(self) -> float:
        """Percentage of address rows that found a polling place."""
        if self.address_rows == 0:
            return 0.0
        return self.matched_address_rows / self.address_rows * 100

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "started_at": self.started_at,
            "completed_at": self.completed_at,
            "status": self.status,
            "error_message": self.error_message,
            "failed_phase": self.failed_phase,

            "counts": {
                "raw_polling_lines": self.raw_polling_lines,
                "repaired_lines": self.repaired_lines,
                "dropped_lines": self.dropped_lines,
                "polling_rows": self.polling_rows,
                "address_rows": self.address_rows,
                "merged_rows": self.merged_rows,
                "matched_address_rows": self.matched_address_rows,
                "unmatched_address_keys": self.unmatched_address_keys,
                "unmatched_polling_keys": self.unmatched_polling_keys,
            },

            "timing": {
                "total_time_sec": round(self.total_time_sec, 4),
                "phases": [pt.to_dict() for pt in self.phase_timings],
            },
        }

    def summary_str(self) -> str:
        """Generate a human-readable summary string."""
        lines = [
            "Merge Summary:",
            f"  Status: {self.status}",
            f"  Polling lines: {self.raw_polling_lines} read, "
            f"{self.repaired_lines} repaired, {self.dropped_lines} dropped",
            f"  Rows: {self.address_rows} addresses, {self.polling_rows} polling, {self.merged_rows} merged, "
            f"{self.matched_address_rows} addresses matched",
            f"  Unmatched keys: {self.unmatched_address_keys} address, {self.unmatched_polling_keys} polling",
            f"  Total time: {self.total_time_sec:.2f}s",
        ]

        if self.error_message:
            lines.append(f"  Error ({self.failed_phase or 'unknown phase'}): {self.error_message}")

        return "\n".join(lines)
