"""Header row resolution from a worksheet token stream."""

# Module responsibilities:
# - Walk the tokens of one <row> and resolve each cell's text, following
#   shared-string indirection when the cell's type marker asks for it.
# - Freeze the header row into an immutable name -> column index table.

from __future__ import annotations

from collections.abc import Mapping
from typing import Callable, Dict, Iterable, Iterator, Optional, Tuple

from .columns import column_to_index, split_reference
from .errors import HeaderResolutionError, MalformedReferenceError, NoHeaderRowError
from .tokens import (
    CELL,
    REF_ATTR,
    ROW,
    SHARED_STRING_TYPE,
    TEXT_ELEMENTS,
    TYPE_ATTR,
    CharData,
    EndElement,
    StartElement,
    Token,
)
from .utils.log import get_logger

logger = get_logger("header")

SharedStringLookup = Callable[[int], str]


class HeaderTable(Mapping):
    """Immutable mapping of header text to zero-based column index.

    Duplicate header text keeps the last column seen. Tables are hashable so
    they can key binding caches.
    """

    __slots__ = ("_columns", "_hash")

    def __init__(self, pairs: Iterable[Tuple[str, int]] = ()) -> None:
        columns: Dict[str, int] = {}
        for name, index in pairs:
            columns[name] = index
        self._columns = columns
        self._hash: Optional[int] = None

    @classmethod
    def from_cells(
        cls, cells: Mapping[int, str], *, prefix: str = "", suffix: str = ""
    ) -> "HeaderTable":
        """Build a table from an already resolved ``column -> text`` row."""

        pairs = []
        for index in sorted(cells):
            name = cells[index]
            if prefix and name.startswith(prefix):
                name = name[len(prefix):]
            if suffix and name.endswith(suffix):
                name = name[: -len(suffix)]
            pairs.append((name, index))
        return cls(pairs)

    def __getitem__(self, name: str) -> int:
        return self._columns[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._columns)

    def __len__(self) -> int:
        return len(self._columns)

    def __hash__(self) -> int:
        if self._hash is None:
            self._hash = hash(frozenset(self._columns.items()))
        return self._hash

    def __repr__(self) -> str:
        return f"HeaderTable({self._columns!r})"


def _cell_text(raw: str, cell_type: str, shared_strings: SharedStringLookup) -> str:
    if cell_type == SHARED_STRING_TYPE:
        return shared_strings(int(raw.strip()))
    return raw


def read_row(
    tokens: Iterator[Token], shared_strings: SharedStringLookup
) -> Optional[Dict[int, str]]:
    """Consume the tokens of the next row and return its ``column -> text`` cells.

    Returns ``None`` when the stream is exhausted before a row end token.
    Cells without text are left out; a cell without a reference takes the
    column after the previous cell.
    """

    cells: Dict[int, str] = {}
    in_cell = False
    capture = False
    ref = ""
    cell_type = ""
    parts: list[str] = []
    last_index = -1

    for token in tokens:
        if isinstance(token, StartElement):
            if token.name == CELL:
                in_cell = True
                ref = token.attrs.get(REF_ATTR, "")
                cell_type = token.attrs.get(TYPE_ATTR, "")
                parts = []
            elif in_cell and token.name in TEXT_ELEMENTS:
                capture = True
        elif isinstance(token, CharData):
            if capture:
                parts.append(token.text)
        elif isinstance(token, EndElement):
            if token.name in TEXT_ELEMENTS:
                capture = False
            elif token.name == CELL:
                in_cell = False
                if ref:
                    letters, _ = split_reference(ref)
                    index = column_to_index(letters)
                else:
                    index = last_index + 1
                last_index = index
                if parts:
                    cells[index] = _cell_text("".join(parts), cell_type, shared_strings)
            elif token.name == ROW:
                return cells
    return None


def resolve_header(
    tokens: Iterable[Token],
    shared_strings: SharedStringLookup,
    *,
    prefix: str = "",
    suffix: str = "",
) -> HeaderTable:
    """Resolve the next row of ``tokens`` into a header table.

    ``prefix`` and ``suffix`` are stripped from every header text.

    Raises:
        NoHeaderRowError: When the stream ends before a row end token.
        MalformedReferenceError: When a cell reference cannot be decoded.
        HeaderResolutionError: For any other failure while walking the tokens,
            such as a shared-string index that is not an integer or not known
            to the lookup.
    """

    try:
        cells = read_row(iter(tokens), shared_strings)
    except MalformedReferenceError:
        raise
    except Exception as exc:
        raise HeaderResolutionError(f"failed to resolve header row: {exc}") from exc
    if cells is None:
        raise NoHeaderRowError("token stream ended before a header row was found")

    table = HeaderTable.from_cells(cells, prefix=prefix, suffix=suffix)
    if len(table) < len(cells):
        logger.info(
            "Duplicate header text resolved to last column",
            extra={"cells": len(cells), "columns": len(table)},
        )
    return table
