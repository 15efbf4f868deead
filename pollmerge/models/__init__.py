"""
Data models for the polling-place merge pipeline.

Tables themselves are pandas DataFrames; these models describe keys,
repair outcomes, linkage results and run statistics.
"""

from .keys import CANONICAL_KEY_PATTERN, make_key, is_canonical_key
from .repair import Correction, CorrectionSet, DroppedLine, RepairResult
from .linkage import LinkageResult, SEVERITY_HIGH, SEVERITY_LOW
from .processing_stats import ProcessingStats, PhaseTiming

__all__ = [
    # Keys
    "CANONICAL_KEY_PATTERN",
    "make_key",
    "is_canonical_key",

    # Row repair
    "Correction",
    "CorrectionSet",
    "DroppedLine",
    "RepairResult",

    # Linkage
    "LinkageResult",
    "SEVERITY_HIGH",
    "SEVERITY_LOW",

    # Processing stats
    "ProcessingStats",
    "PhaseTiming",
]
