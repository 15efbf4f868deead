"""
Pipeline phases.

Contains all processing components of the polling-place merge, in run order:
- SourceLoader: Read the address table, raw polling lines and correction set
- RowRepairProcessor: Fix or drop malformed polling lines
- TableBuilderProcessor: Build the namespaced polling table
- KeyNormalizerProcessor: Derive the canonical join key on both tables
- LinkageProcessor: Inner-join on the key and collect discrepancies
- ExportProcessor: Write the output tables
"""

from .base import BaseProcessor, ProcessingContext
from .source_loader import SourceLoader
from .row_repair import RowRepairProcessor, repair_lines
from .table_builder import TableBuilderProcessor, build_polling_table
from .key_normalizer import (
    KeyNormalizerProcessor,
    address_key,
    polling_key,
    normalize_address_table,
    normalize_polling_table,
)
from .linker import LinkageProcessor, link_tables
from .exporter import ExportProcessor

__all__ = [
    "BaseProcessor",
    "ProcessingContext",
    "SourceLoader",
    "RowRepairProcessor",
    "repair_lines",
    "TableBuilderProcessor",
    "build_polling_table",
    "KeyNormalizerProcessor",
    "address_key",
    "polling_key",
    "normalize_address_table",
    "normalize_polling_table",
    "LinkageProcessor",
    "link_tables",
    "ExportProcessor",
]
