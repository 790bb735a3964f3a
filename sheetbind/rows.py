"""Row binding: turn resolved data rows into populated records."""

# Module responsibilities:
# - Create records with zero values, apply configured defaults, then scan
#   every bound cell of a row.
# - Apply the conversion-failure policy (raise on first failure or collect all).
# - Drive a worksheet token stream: title row, header, skipped rows, data rows.

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Callable, Generic, Iterable, Iterator, List, Mapping, Optional, Tuple, Type, TypeVar, get_type_hints

from .bindings import BindingCache, ColumnBindings
from .config import ErrorPolicy, ReaderConfig
from .convert import ScanFunc, scan_text, zero_value
from .errors import ConversionError, MalformedReferenceError, NoHeaderRowError, RowReadError
from .header import HeaderTable, SharedStringLookup, read_row, resolve_header
from .scanner import scan_cell, scan_default
from .schema import FieldShape, Schema, build_schema, resolve_shape
from .tokens import Token
from .utils.log import get_logger

logger = get_logger("rows")

T = TypeVar("T")


@dataclass(slots=True)
class RowResult(Generic[T]):
    """A bound record plus the conversion failures collected for its row."""

    record: T
    row_number: Optional[int] = None
    errors: List[ConversionError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def _zero_factory(hint: Any) -> Callable[[], Any]:
    shape, value_type, _, container = resolve_shape(hint)
    if shape is FieldShape.OPTIONAL:
        return lambda: None
    if shape is FieldShape.REPEATED:
        return container
    return lambda: zero_value(value_type)


@lru_cache(maxsize=None)
def _zero_factories(record_type: type) -> Tuple[Tuple[str, Callable[[], Any]], ...]:
    hints = get_type_hints(record_type)
    factories = []
    for item in dataclasses.fields(record_type):
        if not item.init:
            continue
        if item.default is dataclasses.MISSING and item.default_factory is dataclasses.MISSING:
            factories.append((item.name, _zero_factory(hints.get(item.name, str))))
    return tuple(factories)


def new_record(record_type: Type[T]) -> T:
    """Instantiate ``record_type`` with zero values for fields lacking defaults."""

    kwargs = {name: factory() for name, factory in _zero_factories(record_type)}
    return record_type(**kwargs)


class RowBinder(Generic[T]):
    """Binds data rows of one sheet to records of one type.

    The column bindings are resolved on construction, so a missing required
    column fails before any row is scanned.
    """

    def __init__(
        self,
        record_type: Type[T],
        header: HeaderTable,
        *,
        cache: Optional[BindingCache] = None,
        scan: ScanFunc = scan_text,
        on_error: ErrorPolicy = "raise",
    ) -> None:
        self.record_type = record_type
        self.header = header
        self.schema: Schema = build_schema(record_type)
        self.cache = cache if cache is not None else BindingCache()
        self.columns: ColumnBindings = self.cache.resolve(self.schema, header)
        self.scan = scan
        self.on_error = on_error

    def bind(self, cells: Mapping[int, str], *, row_number: Optional[int] = None) -> RowResult[T]:
        """Bind one row of ``column -> text`` cells.

        Raises:
            BadDefaultError: When a configured default fails conversion.
            ConversionError: On the first failing non-empty cell when the
                policy is ``"raise"``.
        """

        record = new_record(self.record_type)
        for binding in self.schema.fields:
            scan_default(binding, record, scan=self.scan)

        result: RowResult[T] = RowResult(record=record, row_number=row_number)
        for column, text in cells.items():
            for binding in self.columns.get(column, ()):
                try:
                    scan_cell(binding, text, record, scan=self.scan)
                except ConversionError as exc:
                    if not text:
                        continue
                    if self.on_error == "raise":
                        raise
                    result.errors.append(exc)
        if result.errors:
            logger.warning(
                "Row bound with conversion failures",
                extra={"row": row_number, "errors": [str(exc) for exc in result.errors]},
            )
        return result


def _next_row(stream: Iterator[Token], shared_strings: SharedStringLookup) -> Optional[dict]:
    try:
        return read_row(stream, shared_strings)
    except MalformedReferenceError:
        raise
    except Exception as exc:
        raise RowReadError(f"failed to read worksheet row: {exc}") from exc


def iter_records(
    tokens: Iterable[Token],
    record_type: Type[T],
    shared_strings: SharedStringLookup,
    *,
    config: Optional[ReaderConfig] = None,
    cache: Optional[BindingCache] = None,
    scan: ScanFunc = scan_text,
) -> Iterator[RowResult[T]]:
    """Yield bound rows from a worksheet token stream.

    Rows before ``config.title_row_index`` are skipped, the next row becomes
    the header, ``config.skip`` rows after it are skipped and every further
    non-empty row is bound to ``record_type``.

    Raises:
        NoHeaderRowError: When the stream ends before the header row.
        MissingColumnError: When a required column is absent from the header.
    """

    config = config if config is not None else ReaderConfig()
    stream = iter(tokens)
    for _ in range(config.title_row_index):
        if _next_row(stream, shared_strings) is None:
            raise NoHeaderRowError(
                f"token stream ended before title row {config.title_row_index}"
            )

    header = resolve_header(stream, shared_strings, prefix=config.prefix, suffix=config.suffix)
    binder = RowBinder(
        record_type,
        header,
        cache=cache,
        scan=scan,
        on_error=config.on_conversion_error,
    )
    logger.info(
        "Header resolved",
        extra={"record_type": record_type.__name__, "columns": list(header)},
    )

    row_number = config.title_row_index + 1
    while True:
        cells = _next_row(stream, shared_strings)
        if cells is None:
            return
        row_number += 1
        if row_number - config.title_row_index - 1 <= config.skip or not cells:
            continue
        yield binder.bind(cells, row_number=row_number)
