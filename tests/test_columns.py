"""Unit tests for the column reference codec."""

from __future__ import annotations

import pytest

from sheetbind.columns import column_to_index, index_to_column, split_reference
from sheetbind.errors import MalformedReferenceError


@pytest.mark.parametrize(
    ("ref", "index"),
    [("A", 0), ("Z", 25), ("AA", 26), ("AZ", 51), ("BA", 52), ("ZZ", 701), ("AAA", 702), ("XFD", 16383)],
)
def test_column_to_index_known_values(ref: str, index: int) -> None:
    assert column_to_index(ref) == index
    assert index_to_column(index) == ref


def test_codec_round_trips_up_to_three_letters() -> None:
    for n in range(18278):
        assert column_to_index(index_to_column(n)) == n
    assert index_to_column(18277) == "ZZZ"


@pytest.mark.parametrize("ref", ["", "A1", "a", "Ä", "A-B"])
def test_column_to_index_rejects_malformed(ref: str) -> None:
    with pytest.raises(MalformedReferenceError):
        column_to_index(ref)


def test_index_to_column_rejects_negative() -> None:
    with pytest.raises(MalformedReferenceError):
        index_to_column(-1)


def test_split_reference() -> None:
    assert split_reference("B12") == ("B", 12)
    assert split_reference("AB") == ("AB", None)
