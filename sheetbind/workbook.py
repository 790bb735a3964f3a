"""Workbook helpers binding openpyxl worksheets to records."""

# Module responsibilities:
# - Open workbooks read-only through openpyxl and resolve the requested sheet.
# - Feed header and data rows through the same binding engine as token streams.
# - Offer a pandas DataFrame view over bound records.

from __future__ import annotations

import dataclasses
from datetime import date, datetime, time
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple, Type, TypeVar

import pandas as pd
from openpyxl import load_workbook

from .bindings import BindingCache
from .config import ReaderConfig
from .convert import ScanFunc, scan_text
from .errors import NoHeaderRowError
from .header import HeaderTable
from .rows import RowBinder, RowResult
from .utils.log import get_logger

logger = get_logger("workbook")

T = TypeVar("T")


def cell_text(value: Any) -> str:
    """Render an openpyxl cell value as the text the scanners expect."""

    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, datetime) and value.time() == time(0):
        # Excel stores dates as datetimes at midnight.
        return value.date().isoformat()
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return str(value)


def _row_cells(values: Tuple[Any, ...]) -> Dict[int, str]:
    return {index: cell_text(value) for index, value in enumerate(values) if value is not None}


def _select_sheet(workbook: Any, sheet: Optional[str | int]) -> Any:
    if sheet is None:
        return workbook.active
    if isinstance(sheet, int):
        names = workbook.sheetnames
        if not 0 <= sheet < len(names):
            raise KeyError(f"Sheet index {sheet} out of range ({len(names)} sheets)")
        return workbook[names[sheet]]
    if sheet not in workbook.sheetnames:
        raise KeyError(f"Sheet '{sheet}' not found in workbook")
    return workbook[sheet]


def iter_workbook_rows(
    path: Path,
    record_type: Type[T],
    *,
    config: Optional[ReaderConfig] = None,
    cache: Optional[BindingCache] = None,
    scan: ScanFunc = scan_text,
) -> Iterator[RowResult[T]]:
    """Yield bound rows of one worksheet.

    Args:
        path: Path to the ``.xlsx`` workbook.
        record_type: Dataclass describing one row.
        config: Sheet selection, title row, skipped rows and error policy.
        cache: Optional binding cache shared across calls.
        scan: Scan primitive used for scalar conversion.

    Raises:
        FileNotFoundError: When the workbook does not exist.
        KeyError: When the requested sheet is missing.
        NoHeaderRowError: When the sheet has no row at ``title_row_index``.
    """

    if not path.exists():
        raise FileNotFoundError(f"Source workbook not found: {path}")
    config = config if config is not None else ReaderConfig()

    logger.info("Reading workbook", extra={"path": str(path), "sheet": config.sheet})
    workbook = load_workbook(path, read_only=True, data_only=True)
    try:
        worksheet = _select_sheet(workbook, config.sheet)
        rows = worksheet.iter_rows(values_only=True)
        header_values = None
        for _ in range(config.title_row_index + 1):
            header_values = next(rows, None)
            if header_values is None:
                raise NoHeaderRowError(
                    f"sheet '{worksheet.title}' has no row {config.title_row_index + 1}"
                )

        header = HeaderTable.from_cells(
            _row_cells(header_values), prefix=config.prefix, suffix=config.suffix
        )
        binder = RowBinder(
            record_type,
            header,
            cache=cache,
            scan=scan,
            on_error=config.on_conversion_error,
        )

        row_number = config.title_row_index + 1
        for values in rows:
            row_number += 1
            if row_number - config.title_row_index - 1 <= config.skip:
                continue
            cells = _row_cells(values)
            if not cells:
                continue
            yield binder.bind(cells, row_number=row_number)
    finally:
        workbook.close()


def read_records(
    path: Path,
    record_type: Type[T],
    *,
    config: Optional[ReaderConfig] = None,
    cache: Optional[BindingCache] = None,
    scan: ScanFunc = scan_text,
) -> List[T]:
    """Load every data row of a worksheet as a ``record_type`` instance.

    With ``on_conversion_error="collect"`` the failing cells are only logged
    and the records keep their defaults; use ``iter_workbook_rows`` to get
    each row's ``RowResult.errors``.
    """

    records = [
        result.record
        for result in iter_workbook_rows(path, record_type, config=config, cache=cache, scan=scan)
    ]
    logger.info(
        "Workbook rows bound",
        extra={"rows": len(records), "record_type": record_type.__name__},
    )
    return records


def read_frame(
    path: Path,
    record_type: Type[T],
    *,
    config: Optional[ReaderConfig] = None,
    cache: Optional[BindingCache] = None,
) -> pd.DataFrame:
    """Load a worksheet into a DataFrame with one column per record field."""

    records = read_records(path, record_type, config=config, cache=cache)
    columns = [item.name for item in dataclasses.fields(record_type)]
    return pd.DataFrame([dataclasses.asdict(record) for record in records], columns=columns)
