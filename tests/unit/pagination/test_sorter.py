"""Unit tests for :mod:`pageable.pagination.sorter`."""

from __future__ import annotations

import pytest
from sqlalchemy import func, select
from sqlalchemy.orm import aliased

from pageable.pagination.errors import PaginationError
from pageable.pagination.pageable import PageDirection, PageSort
from pageable.pagination.sorter import QuerySorter, apply_order
from tests.models import Contractor, Department, Employee


def _sql(stmt) -> str:
    return " ".join(str(stmt).split())


@pytest.fixture()
def sorter(resolver) -> QuerySorter:
    return QuerySorter(resolver)


def test_no_directives_is_noop(sorter):
    stmt = select(Employee)

    assert sorter.apply_order(stmt, None) is stmt
    assert sorter.apply_order(stmt, []) is stmt


def test_directive_order_is_preserved(sorter):
    stmt = sorter.apply_order(
        select(Employee),
        [PageSort("salary", PageDirection.DESC), PageSort("name")],
    )

    assert _sql(stmt).endswith("ORDER BY employees.salary DESC, employees.name ASC")


def test_existing_clauses_untouched(sorter):
    base = select(Employee).where(Employee.salary > 10).limit(5)

    stmt = sorter.apply_order(base, [PageSort("name")])

    sql = _sql(stmt)
    assert "WHERE employees.salary >" in sql
    assert "LIMIT" in sql
    assert "ORDER BY employees.name ASC" in sql
    assert "ORDER BY" not in _sql(base)


def test_label_orders_by_alias(sorter):
    stmt = sorter.apply_order(
        select(Employee.id, (Employee.salary * 12).label("yearly")),
        [PageSort("yearly", PageDirection.DESC)],
    )

    assert _sql(stmt).endswith("ORDER BY yearly DESC")


def test_errors_leave_statement_unordered(sorter):
    base = select(Employee.id).join_from(Employee, Department)

    with pytest.raises(PaginationError):
        sorter.apply_order(base, [PageSort("salary"), PageSort("name")])

    assert "ORDER BY" not in _sql(base)


def test_module_level_apply_order():
    stmt = apply_order(select(Employee), [PageSort("salary", table="employees")])

    assert _sql(stmt).endswith("ORDER BY employees.salary ASC")


def test_fresh_anonymous_aliases_reuse_one_resolution(sorter, resolver):
    for _ in range(50):
        stmt = sorter.apply_order(
            select(aliased(Employee)), [PageSort("name", table="employees")]
        )
        assert _sql(stmt).endswith("ORDER BY employees_1.name ASC")

    assert len(resolver.cache) == 1


def test_aggregate_label_shadows_subquery_column(sorter):
    sub = select(Contractor.name, Contractor.hourly_rate.label("rate")).subquery("rates")
    stmt = select(sub.c.name, func.max(sub.c.rate).label("rate")).group_by(sub.c.name)

    ordered = sorter.apply_order(stmt, [PageSort("rate", PageDirection.DESC)])

    assert _sql(ordered).endswith("ORDER BY rate DESC")
