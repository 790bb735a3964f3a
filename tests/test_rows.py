"""Unit tests for row binding and token-stream record iteration."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

import pytest

from sheetbind.bindings import BindingCache
from sheetbind.config import ReaderConfig
from sheetbind.errors import BadDefaultError, ConversionError, MissingColumnError, NoHeaderRowError, RowReadError
from sheetbind.header import HeaderTable
from sheetbind.rows import RowBinder, iter_records, new_record
from sheetbind.schema import field_tag

from conftest import row_tokens


@dataclass
class Player:
    name: str = field_tag("column(Name);req")
    level: int = field_tag("column(Level);default(1)")
    score: Optional[float] = field_tag("Score")
    tags: List[str] = field_tag("column(Tags);split(,)")
    rank: int = field_tag("column(Rank);nil(-)")
    team: str = "red"
    notes: List[str] = field(default_factory=list, metadata={"xlsx": "-"})


@dataclass
class BadDefault:
    name: str = field_tag("Name")
    count: int = field_tag("column(Count);default(abc)")


HEADER = HeaderTable([("Name", 0), ("Level", 1), ("Score", 2), ("Tags", 3), ("Rank", 4)])


def _sheet_tokens(shared: List[str]) -> list:
    tokens = row_tokens([("A1", "Name", ""), ("B1", "Level", ""), ("C1", "Score", "")], row=1)
    tokens += row_tokens([("A2", "1", "s"), ("B2", "5", ""), ("C2", "9.5", "")], row=2)
    tokens += row_tokens([], row=3)
    tokens += row_tokens([("A4", "2", "s"), ("C4", "7", "")], row=4)
    return tokens


def test_new_record_uses_zero_values_and_declared_defaults() -> None:
    record = new_record(Player)

    assert record == Player(name="", level=0, score=None, tags=[], rank=0)
    assert record.team == "red"
    assert record.notes == []


def test_bind_applies_defaults_then_cells() -> None:
    binder = RowBinder(Player, HEADER)

    result = binder.bind({0: "Alice", 2: "88.5", 3: "x,y"}, row_number=2)

    assert result.ok
    assert result.row_number == 2
    assert result.record == Player(name="Alice", level=1, score=88.5, tags=["x", "y"], rank=0)


def test_bind_nil_and_empty_cells_keep_defaults() -> None:
    binder = RowBinder(Player, HEADER)

    record = binder.bind({0: "Bob", 1: "", 4: "-"}).record

    assert record.level == 1
    assert record.rank == 0


def test_bind_raises_on_first_conversion_failure() -> None:
    binder = RowBinder(Player, HEADER)

    with pytest.raises(ConversionError) as excinfo:
        binder.bind({0: "Carol", 1: "high", 4: "first"})
    assert excinfo.value.column == "Level"


def test_bind_collects_conversion_failures() -> None:
    binder = RowBinder(Player, HEADER, on_error="collect")

    result = binder.bind({0: "Carol", 1: "high", 2: "9", 4: "first"})

    assert not result.ok
    assert sorted(exc.column for exc in result.errors) == ["Level", "Rank"]
    assert result.record.name == "Carol"
    assert result.record.score == 9.0
    assert result.record.level == 1


def test_binder_fails_fast_on_missing_required_column() -> None:
    with pytest.raises(MissingColumnError):
        RowBinder(Player, HeaderTable([("Level", 0)]))


def test_bad_default_is_fatal_for_every_row() -> None:
    binder = RowBinder(BadDefault, HeaderTable([("Name", 0)]), on_error="collect")

    with pytest.raises(BadDefaultError):
        binder.bind({0: "Alice"})


def test_iter_records_reads_token_stream(shared_strings: List[str]) -> None:
    cache = BindingCache()

    results = list(
        iter_records(_sheet_tokens(shared_strings), Player, shared_strings.__getitem__, cache=cache)
    )

    assert [r.row_number for r in results] == [2, 4]
    assert results[0].record.name == "Alice"
    assert results[0].record.level == 5
    assert results[0].record.score == 9.5
    assert results[1].record.name == "Bob"
    assert results[1].record.level == 1
    assert results[1].record.score == 7.0
    assert len(cache) == 1


def test_iter_records_honours_title_row_and_skip(shared_strings: List[str]) -> None:
    tokens = row_tokens([("A1", "Quarterly report", "")], row=1) + _sheet_tokens(shared_strings)
    config = ReaderConfig(title_row_index=1, skip=1)

    results = list(iter_records(tokens, Player, shared_strings.__getitem__, config=config))

    assert [r.record.name for r in results] == ["Bob"]


def test_iter_records_without_header_row(shared_strings: List[str]) -> None:
    with pytest.raises(NoHeaderRowError):
        list(iter_records([], Player, shared_strings.__getitem__))
    with pytest.raises(NoHeaderRowError):
        list(
            iter_records(
                row_tokens([("A1", "Title", "")]),
                Player,
                shared_strings.__getitem__,
                config=ReaderConfig(title_row_index=3),
            )
        )


def test_iter_records_wraps_data_row_lookup_failures(shared_strings: List[str]) -> None:
    tokens = row_tokens([("A1", "Name", "")], row=1) + row_tokens([("A2", "42", "s")], row=2)

    with pytest.raises(RowReadError):
        list(iter_records(tokens, Player, shared_strings.__getitem__))


def test_binders_share_a_caller_owned_cache() -> None:
    cache = BindingCache()
    assert len(cache) == 0

    first = RowBinder(Player, HEADER, cache=cache)
    second = RowBinder(Player, HEADER, cache=cache)

    assert first.cache is cache
    assert len(cache) == 1
    assert second.columns is first.columns
