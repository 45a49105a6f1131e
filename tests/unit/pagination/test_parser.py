"""Unit tests for :mod:`pageable.pagination.parser`."""

from __future__ import annotations

import pytest

from pageable.pagination.errors import PaginationError, PaginationErrorKind
from pageable.pagination.pageable import PageDirection, PageSort
from pageable.pagination.parser import format_sort_directive, parse_sort_directives


def test_field_only_defaults_to_asc():
    assert parse_sort_directives(["name"]) == [PageSort("name", PageDirection.ASC)]


def test_direction_is_case_insensitive():
    sorts = parse_sort_directives(["price,desc", "name,Asc"])

    assert [s.direction for s in sorts] == [PageDirection.DESC, PageDirection.ASC]


def test_table_qualifier_split_at_first_dot():
    (sort,) = parse_sort_directives(["employees.first.name,DESC"])

    assert sort.table == "employees"
    assert sort.field == "first.name"
    assert sort.direction is PageDirection.DESC


def test_qualified_field_without_direction_is_asc():
    (sort,) = parse_sort_directives(["employees.name"])

    assert sort.table == "employees"
    assert sort.direction is PageDirection.ASC


def test_order_is_preserved():
    sorts = parse_sort_directives(["b", "a", "c,desc"])

    assert [s.field for s in sorts] == ["b", "a", "c"]


def test_segments_are_trimmed():
    (sort,) = parse_sort_directives([" employees . name , desc "])

    assert (sort.table, sort.field, sort.direction) == ("employees", "name", PageDirection.DESC)


@pytest.mark.parametrize("tokens", [None, []])
def test_empty_input_returns_none(tokens):
    assert parse_sort_directives(tokens) is None


@pytest.mark.parametrize("token", ["", "   ", ",desc", "employees.,asc"])
def test_missing_field(token):
    with pytest.raises(PaginationError) as exc:
        parse_sort_directives([token])

    assert exc.value.kind is PaginationErrorKind.MISSING_SORT_DIRECTIVE


def test_invalid_direction_carries_raw_value():
    with pytest.raises(PaginationError) as exc:
        parse_sort_directives(["name,sideways"])

    assert exc.value.kind is PaginationErrorKind.INVALID_ORDER_DIRECTION
    assert "sideways" in exc.value.description


def test_fails_fast_on_first_bad_token():
    with pytest.raises(PaginationError):
        parse_sort_directives(["name", "price,up", ""])


def test_blank_qualifier_is_ignored():
    (sort,) = parse_sort_directives([".name"])

    assert sort.table is None
    assert sort.field == "name"


def test_format_round_trip():
    (sort,) = parse_sort_directives(["field,desc"])

    assert sort.direction.value == "DESC"
    assert format_sort_directive(sort) == "field,DESC"
