"""
Utility functions for the polling-place merge pipeline.
"""

from .timing import Timer, timed_operation

__all__ = [
    "Timer",
    "timed_operation",
]
