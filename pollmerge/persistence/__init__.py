"""
Data persistence layer.

Readers for the two input sources and the correction set, and the
flat-file store the output tables are written to.
"""

from .corrections import load_corrections
from .csv_store import CSVStore
from .sources import read_address_table, read_polling_lines

__all__ = [
    "CSVStore",
    "load_corrections",
    "read_address_table",
    "read_polling_lines",
]
