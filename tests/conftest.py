from __future__ import annotations

import sys
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from sheetbind.tokens import CharData, EndElement, StartElement, Token

Cell = Tuple[Optional[str], str, str]


def row_tokens(cells: Iterable[Cell], row: int = 1) -> List[Token]:
    """Build the token sequence of one <row> from ``(ref, text, type)`` triples."""

    tokens: List[Token] = [StartElement("row", {"r": str(row)}), CharData("\n  ")]
    for ref, text, cell_type in cells:
        attrs = {}
        if ref is not None:
            attrs["r"] = ref
        if cell_type:
            attrs["t"] = cell_type
        tokens.append(StartElement("c", attrs))
        tokens.append(StartElement("v"))
        tokens.append(CharData(text))
        tokens.append(EndElement("v"))
        tokens.append(EndElement("c"))
        tokens.append(CharData("\n  "))
    tokens.append(EndElement("row"))
    return tokens


@pytest.fixture()
def shared_strings() -> List[str]:
    return ["Score", "Alice", "Bob"]
