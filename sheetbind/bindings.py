"""Column -> field binding tables derived from a schema and a header row."""

# Module responsibilities:
# - Join a schema against a header table, enforcing required columns.
# - Memoize the resulting tables in an explicitly owned, lock-guarded cache.

from __future__ import annotations

import threading
from types import MappingProxyType
from typing import Dict, List, Mapping, Tuple

from .errors import MissingColumnError
from .header import HeaderTable
from .schema import FieldBinding, Schema
from .utils.log import get_logger

logger = get_logger("bindings")

ColumnBindings = Mapping[int, Tuple[FieldBinding, ...]]


def bind_columns(schema: Schema, header: Mapping[str, int]) -> ColumnBindings:
    """Map every header column to the field bindings it populates.

    One column may feed several fields. Fields whose column is missing are
    skipped unless they are required.

    Raises:
        MissingColumnError: When a required column is absent from ``header``.
    """

    buckets: Dict[int, List[FieldBinding]] = {}
    for binding in schema.fields:
        column = header.get(binding.column_name)
        if column is None:
            if binding.required:
                raise MissingColumnError(binding.column_name)
            logger.debug(
                "Column not found, field left unset",
                extra={"column": binding.column_name, "field": binding.name},
            )
            continue
        buckets.setdefault(column, []).append(binding)
    return MappingProxyType({column: tuple(fields) for column, fields in buckets.items()})


class BindingCache:
    """Memoizes binding tables per ``(record type, header layout)``.

    The cache is owned by the caller; concurrent scans may share one instance.
    """

    def __init__(self) -> None:
        self._tables: Dict[Tuple[type, HeaderTable], ColumnBindings] = {}
        self._lock = threading.Lock()

    def resolve(self, schema: Schema, header: HeaderTable) -> ColumnBindings:
        key = (schema.record_type, header)
        with self._lock:
            table = self._tables.get(key)
            if table is None:
                table = bind_columns(schema, header)
                self._tables[key] = table
        return table

    def clear(self) -> None:
        with self._lock:
            self._tables.clear()

    def __len__(self) -> int:
        return len(self._tables)
