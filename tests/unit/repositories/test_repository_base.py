"""Unit tests for :mod:`pageable.repositories.base`."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import pytest

from pageable.pagination.errors import PaginationError, PaginationErrorKind
from pageable.pagination.pageable import PageDirection, Pageable, PageSort
from pageable.repositories import BaseRepository
from tests.factories.staff import DepartmentFactory, EmployeeFactory
from tests.models import Employee


class EmployeeRepository(BaseRepository[Employee]):
    model = Employee

    def _sortable_fields(self) -> Mapping[str, Any]:
        return {"pay": Employee.salary}

    def _filterable_fields(self) -> Mapping[str, Any]:
        return {"department_id": Employee.department_id}


@pytest.fixture()
def staff(session):
    sales, ops = DepartmentFactory(name="Sales"), DepartmentFactory(name="Ops")
    rows = [("Ann", 3000, sales, 2010), ("Ben", 5000, ops, 2015), ("Cid", 3000, sales, 2012), ("Dee", 9000, ops, 2001)]
    return [EmployeeFactory(name=n, salary=s, department=d, hired_year=y) for n, s, d, y in rows]


class TestEmployeeRepository:
    def test_uses_flask_session_by_default(self, session):
        assert EmployeeRepository().session is session

    def test_paginate_sorts_with_pk_tiebreaker(self, staff):
        repo = EmployeeRepository()

        page = repo.paginate(Pageable(page=0, size=3, sort=[PageSort("salary")]))

        assert [e.name for e in page.content] == ["Ann", "Cid", "Ben"]
        assert page.details.total_elements == 4
        assert page.details.has_next is True

    def test_registered_sort_alias(self, staff):
        page = EmployeeRepository().paginate(Pageable(sort=[PageSort("pay", PageDirection.DESC)]))

        assert [e.name for e in page.content][0] == "Dee"

    def test_attribute_name_is_sortable(self, staff):
        page = EmployeeRepository().paginate(Pageable(sort=[PageSort("hired_year")]))

        assert [e.name for e in page.content] == ["Dee", "Ann", "Cid", "Ben"]

    def test_filters_respect_whitelist(self, staff):
        sales_id = staff[0].department_id
        repo = EmployeeRepository()

        page = repo.paginate(None, filters={"department_id": sales_id, "name": "Ben"})

        assert sorted(e.name for e in page.content) == ["Ann", "Cid"]

    def test_list_without_pageable(self, staff):
        assert [e.name for e in EmployeeRepository().list()] == ["Ann", "Ben", "Cid", "Dee"]

    def test_list_with_window(self, staff):
        result = EmployeeRepository().list(Pageable(page=1, size=2, sort=[PageSort("name", PageDirection.DESC)]))

        assert [e.name for e in result] == ["Ben", "Ann"]

    def test_unknown_sort_field_raises(self, staff):
        with pytest.raises(PaginationError) as exc:
            EmployeeRepository().list(Pageable(sort=[PageSort("nickname")]))

        assert exc.value.kind is PaginationErrorKind.INVALID_SORT_DIRECTIVE

    def test_explicit_session(self, session, staff):
        repo = EmployeeRepository(session=session)

        assert repo.paginate(Pageable(page=0, size=2)).details.total_pages == 2
