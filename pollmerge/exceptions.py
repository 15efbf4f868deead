"""
Custom exceptions for the polling-place merge pipeline.

All application-specific exceptions inherit from PollMergeError.
"""

from __future__ import annotations

from typing import Optional, Any


class PollMergeError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message: Human-readable error message
        details: Additional error details (for debugging)
        recoverable: Whether the error can potentially be recovered from
    """

    def __init__(
        self,
        message: str,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable

    @property
    def phase(self) -> Optional[str]:
        """Pipeline phase the error was raised in, if known."""
        return self.details.get("phase")

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(PollMergeError):
    """
    Invalid or missing configuration.

    Examples:
        - Output path points at a directory
        - Two outputs share one destination
    """

    def __init__(self, message: str):
        super().__init__(message, recoverable=False)


class InputLoadError(PollMergeError):
    """
    Failed to read an input source.

    Examples:
        - File does not exist
        - Permission denied
        - File is empty
    """

    def __init__(self, message: str, file_path: Optional[str] = None):
        details = {"operation": "load"}
        if file_path:
            details["file_path"] = file_path
        super().__init__(message, details=details, recoverable=False)


class SchemaError(PollMergeError):
    """Required columns are absent from an input table."""

    def __init__(
        self,
        message: str,
        missing_columns: Optional[list[str]] = None,
        source: Optional[str] = None
    ):
        details: dict[str, Any] = {}
        if missing_columns:
            details["missing_columns"] = list(missing_columns)
        if source:
            details["source"] = source
        super().__init__(message, details=details, recoverable=False)


class CorrectionSetError(PollMergeError):
    """
    The hand-curated correction set is unusable.

    Examples:
        - Invalid JSON
        - Entry without "original" or "corrected"
        - Corrected line still has the wrong field count
    """

    def __init__(
        self,
        message: str,
        file_path: Optional[str] = None,
        entry: Optional[Any] = None
    ):
        details: dict[str, Any] = {}
        if file_path:
            details["file_path"] = file_path
        if entry is not None:
            details["entry"] = str(entry)[:200]
        super().__init__(message, details=details, recoverable=False)


class TableStructureError(PollMergeError):
    """
    A table does not have the shape its header promises.

    Raised when a data row's field count disagrees with the header after
    row repair, which means downstream columns would be misaligned.
    """

    def __init__(
        self,
        message: str,
        line_number: Optional[int] = None,
        expected: Optional[int] = None,
        actual: Optional[int] = None,
        line: Optional[str] = None
    ):
        details: dict[str, Any] = {}
        if line_number is not None:
            details["line_number"] = line_number
        if expected is not None:
            details["expected_fields"] = expected
        if actual is not None:
            details["actual_fields"] = actual
        if line is not None:
            details["line"] = line[:200]
        super().__init__(message, details=details, recoverable=False)


class ExportError(PollMergeError):
    """
    Failed to write an output table.

    Examples:
        - Permission denied
        - Disk full
    """

    def __init__(self, message: str, file_path: Optional[str] = None):
        details = {"operation": "save"}
        if file_path:
            details["file_path"] = file_path
        super().__init__(message, details=details, recoverable=False)
