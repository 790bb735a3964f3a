"""Unit tests for column binding tables and the binding cache."""

from __future__ import annotations

from dataclasses import dataclass

import pytest

from sheetbind.bindings import BindingCache, bind_columns
from sheetbind.errors import MissingColumnError
from sheetbind.header import HeaderTable
from sheetbind.schema import build_schema, field_tag


@dataclass
class Employee:
    name: str = field_tag("Name")
    display: str = field_tag("Name")
    dept: str = field_tag("column(Dept);req")
    phone: str = field_tag("Phone")


@dataclass
class OptionalDept:
    name: str = field_tag("Name")
    dept: str = field_tag("column(Dept)")


def test_bind_columns_groups_fields_by_column() -> None:
    header = HeaderTable([("Name", 0), ("Dept", 2)])

    table = bind_columns(build_schema(Employee), header)

    assert sorted(table) == [0, 2]
    assert [b.name for b in table[0]] == ["name", "display"]
    assert [b.name for b in table[2]] == ["dept"]


def test_missing_required_column_is_reported() -> None:
    header = HeaderTable([("Name", 0)])

    with pytest.raises(MissingColumnError) as excinfo:
        bind_columns(build_schema(Employee), header)
    assert excinfo.value.column == "Dept"
    assert "Dept" in str(excinfo.value)


def test_missing_optional_column_is_skipped() -> None:
    header = HeaderTable([("Name", 0)])

    table = bind_columns(build_schema(OptionalDept), header)

    assert list(table) == [0]


def test_binding_table_is_read_only() -> None:
    table = bind_columns(build_schema(OptionalDept), HeaderTable([("Name", 0)]))

    with pytest.raises(TypeError):
        table[1] = ()  # type: ignore[index]


def test_cache_memoizes_per_type_and_header_layout() -> None:
    cache = BindingCache()
    schema = build_schema(OptionalDept)
    first_layout = HeaderTable([("Name", 0), ("Dept", 1)])
    swapped_layout = HeaderTable([("Dept", 0), ("Name", 1)])

    first = cache.resolve(schema, first_layout)
    again = cache.resolve(schema, HeaderTable([("Name", 0), ("Dept", 1)]))
    swapped = cache.resolve(schema, swapped_layout)

    assert first is again
    assert [b.name for b in first[0]] == ["name"]
    assert [b.name for b in swapped[0]] == ["dept"]
    assert len(cache) == 2

    cache.clear()
    assert len(cache) == 0


def test_cache_does_not_store_failed_resolution() -> None:
    cache = BindingCache()

    with pytest.raises(MissingColumnError):
        cache.resolve(build_schema(Employee), HeaderTable([("Name", 0)]))
    assert len(cache) == 0
