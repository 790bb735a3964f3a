"""`sheetbind` maps worksheet rows onto dataclass records via the header row."""

# Module responsibilities:
# - Re-export header resolution, schema building, column binding and cell
#   scanning so consumers have a stable API surface.
# - Expose the workbook and token-stream readers built on top of them.

from __future__ import annotations

from .bindings import BindingCache, bind_columns
from .columns import column_to_index, index_to_column, split_reference
from .config import ReaderConfig, load_reader_config
from .errors import (
    BadDefaultError,
    ConfigError,
    ConversionError,
    HeaderResolutionError,
    MalformedReferenceError,
    MissingColumnError,
    NoHeaderRowError,
    RowReadError,
    SchemaError,
    SheetBindError,
)
from .header import HeaderTable, read_row, resolve_header
from .rows import RowBinder, RowResult, iter_records, new_record
from .scanner import scan_cell, scan_default
from .schema import FieldBinding, FieldConfig, FieldShape, Schema, build_schema, field_tag
from .tokens import CharData, EndElement, StartElement, iter_xml_tokens
from .workbook import iter_workbook_rows, read_frame, read_records

__all__ = [
    "BindingCache",
    "bind_columns",
    "column_to_index",
    "index_to_column",
    "split_reference",
    "ReaderConfig",
    "load_reader_config",
    "SheetBindError",
    "ConfigError",
    "MalformedReferenceError",
    "NoHeaderRowError",
    "HeaderResolutionError",
    "RowReadError",
    "SchemaError",
    "MissingColumnError",
    "ConversionError",
    "BadDefaultError",
    "HeaderTable",
    "read_row",
    "resolve_header",
    "RowBinder",
    "RowResult",
    "iter_records",
    "new_record",
    "scan_cell",
    "scan_default",
    "FieldBinding",
    "FieldConfig",
    "FieldShape",
    "Schema",
    "build_schema",
    "field_tag",
    "StartElement",
    "EndElement",
    "CharData",
    "iter_xml_tokens",
    "iter_workbook_rows",
    "read_records",
    "read_frame",
]

__version__ = "0.1.0"
