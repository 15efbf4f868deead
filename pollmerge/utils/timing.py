"""
Timing helpers for phases and input reads.
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from typing import Iterator, Optional


class Timer:
    """
    Elapsed-time tracker started on creation.

    Usage:
        timer = Timer()
        # do work
        print(f"{timer.elapsed:.2f}s")
    """

    def __init__(self):
        self._start: float = time.perf_counter()

    @property
    def elapsed(self) -> float:
        return time.perf_counter() - self._start


@contextmanager
def timed_operation(name: str, logger: Optional[logging.Logger] = None) -> Iterator[Timer]:
    """
    Time a block and log its duration at DEBUG.

    Usage:
        with timed_operation("Read address table", logger) as timer:
            df = read_address_table(path)
    """
    timer = Timer()
    try:
        yield timer
    except Exception:
        if logger:
            logger.debug(f"{name} failed after {timer.elapsed * 1000:.1f}ms")
        raise
    if logger:
        logger.debug(f"{name}: {timer.elapsed * 1000:.1f}ms")
