"""Column reference codec for spreadsheet cell addresses."""

# Module responsibilities:
# - Convert letter column references ("A", "AB") to zero-based indexes and back.
# - Split a cell reference such as "B12" into its column letters and row number.

from __future__ import annotations

import string
from typing import Optional, Tuple

from .errors import MalformedReferenceError

_BASE = 26
_LETTERS = string.ascii_uppercase


def column_to_index(ref: str) -> int:
    """Decode a column reference into a zero-based column index.

    The reference is a base-26 numeral over ``A``-``Z`` without a zero digit,
    most significant letter first, so ``A`` is 0, ``Z`` is 25 and ``AA`` is 26.

    Raises:
        MalformedReferenceError: When ``ref`` is empty or holds a symbol
            outside ``A``-``Z``.
    """

    if not ref:
        raise MalformedReferenceError("empty column reference")
    value = 0
    for symbol in ref:
        if symbol not in _LETTERS:
            raise MalformedReferenceError(f"malformed column reference: {ref!r}")
        value = value * _BASE + (ord(symbol) - ord("A") + 1)
    return value - 1


def index_to_column(index: int) -> str:
    """Encode a zero-based column index as a letter reference."""

    if index < 0:
        raise MalformedReferenceError(f"column index must be non-negative: {index}")
    letters = []
    value = index + 1
    while value > 0:
        value, remainder = divmod(value - 1, _BASE)
        letters.append(_LETTERS[remainder])
    return "".join(reversed(letters))


def split_reference(ref: str) -> Tuple[str, Optional[int]]:
    """Split ``"B12"`` into ``("B", 12)``; a bare ``"B"`` yields ``("B", None)``."""

    letters = ref.rstrip(string.digits)
    digits = ref[len(letters):]
    return letters, int(digits) if digits else None
