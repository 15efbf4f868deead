"""
Base processor class and processing context.

Provides common functionality for all pipeline phases including
logging, timing, error handling, and configuration access.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Any, List

import pandas as pd

from ..config import Config
from ..exceptions import PollMergeError
from ..logger import get_logger
from ..models import CorrectionSet, LinkageResult, PhaseTiming, ProcessingStats, RepairResult
from ..utils.timing import Timer


@dataclass
class ProcessingContext:
    """
    Shared context passed between processors.

    Contains:
    - Configuration
    - Inputs as loaded
    - Intermediate tables produced by each phase
    - Accumulated statistics
    """

    config: Config

    # Loaded inputs
    corrections: CorrectionSet = field(default_factory=CorrectionSet)
    raw_polling_lines: List[str] = field(default_factory=list)
    address_table: Optional[pd.DataFrame] = None

    # Phase outputs
    repair: Optional[RepairResult] = None
    polling_table: Optional[pd.DataFrame] = None
    normalized_address: Optional[pd.DataFrame] = None
    normalized_polling: Optional[pd.DataFrame] = None
    linkage: Optional[LinkageResult] = None
    written_paths: List[Path] = field(default_factory=list)

    # Name of the phase that raised, if any
    failed_phase: Optional[str] = None

    # Processing statistics
    stats: ProcessingStats = field(default_factory=ProcessingStats)


class BaseProcessor(ABC):
    """
    Abstract base class for all pipeline phases.

    Provides:
    - Consistent logging
    - Timing instrumentation
    - Phase-tagged error propagation
    - Configuration access
    """

    # Phase name for logging and error reports (override in subclass)
    name: str = "BaseProcessor"

    def __init__(self, context: ProcessingContext):
        """
        Initialize processor.

        Args:
            context: Shared processing context
        """
        self.context = context
        self.config = context.config
        self.logger = get_logger(self.name)
        self._timer = Timer()

    @property
    def debug_mode(self) -> bool:
        """Check if debug mode is enabled."""
        return self.config.debug

    def log_debug(self, message: str, **kwargs: Any) -> None:
        """Log debug message (only in debug mode)."""
        if self.debug_mode:
            extra = " ".join(f"{k}={v}" for k, v in kwargs.items())
            self.logger.debug(f"{message} {extra}".strip())

    def log_info(self, message: str, **kwargs: Any) -> None:
        """Log info message."""
        extra = " ".join(f"{k}={v}" for k, v in kwargs.items())
        self.logger.info(f"{message} {extra}".strip())

    def log_warning(self, message: str, **kwargs: Any) -> None:
        """Log warning message."""
        extra = " ".join(f"{k}={v}" for k, v in kwargs.items())
        self.logger.warning(f"{message} {extra}".strip())

    def log_error(self, message: str, error: Optional[Exception] = None) -> None:
        """Log error message."""
        if error:
            self.logger.error(f"{message}: {error}", exc_info=self.debug_mode)
        else:
            self.logger.error(message)

    @abstractmethod
    def process(self) -> None:
        """Execute the phase, storing its output on the context."""

    def validate(self) -> None:
        """
        Check that the phase can run.

        Override in subclass to check prerequisites; raise on failure.
        """

    def run(self) -> None:
        """
        Run processor with timing and error handling.

        Errors are tagged with this phase's name and re-raised; a phase
        never reports success after a failure.
        """
        self.log_info(f"Starting {self.name}")
        self._timer = Timer()

        try:
            self.validate()
            self.process()
        except PollMergeError as e:
            e.details.setdefault("phase", self.name)
            self._record(success=False)
            self.log_error(f"{self.name} failed after {self._timer.elapsed:.2f}s", error=e)
            raise
        except Exception as e:
            self._record(success=False)
            self.log_error(f"{self.name} failed unexpectedly after {self._timer.elapsed:.2f}s", error=e)
            raise

        self._record(success=True)
        self.log_info(f"Completed {self.name}", duration=f"{self._timer.elapsed:.2f}s")

    def _record(self, success: bool) -> None:
        if not success:
            self.context.failed_phase = self.name
        self.context.stats.add_phase_timing(
            PhaseTiming(phase=self.name, duration_sec=self._timer.elapsed, success=success)
        )
