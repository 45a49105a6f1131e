"""Apply resolved sort directives to SQLAlchemy statements."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, TypeVar

from sqlalchemy.sql.expression import ColumnElement, CompoundSelect, Select

from pageable.pagination.pageable import PageDirection, PageSort
from pageable.pagination.resolver import ColumnResolver, QueryShape

S = TypeVar("S", bound="Select[Any] | CompoundSelect")


class QuerySorter:
    """Append ``ORDER BY`` clauses for an ordered list of directives.

    :param resolver: Resolver used for every directive; defaults to one backed
        by the process-wide cache and field registry.
    :type resolver: ColumnResolver | None
    """

    def __init__(self, resolver: ColumnResolver | None = None) -> None:
        self.resolver = resolver or ColumnResolver()

    def apply_order(self, statement: S, directives: Sequence[PageSort] | None) -> S:
        """Return ``statement`` with one ordering per directive appended.

        The first directive becomes the primary sort key. Existing ordering,
        selected columns, filters, limit and offset are left untouched. All
        directives are resolved before any ordering is applied, so a failing
        directive leaves nothing half-applied.

        :param statement: Statement to order.
        :param directives: Ordered directives; ``None`` or empty is a no-op.
        :returns: The ordered statement.
        :raises PaginationError: Propagated unchanged from the resolver.
        """
        if not directives:
            return statement

        shape = QueryShape.of(statement)
        clauses: list[ColumnElement[Any]] = []
        for sort in directives:
            expr = self.resolver.resolve(shape, sort).bind(shape)
            clauses.append(expr.desc() if sort.direction is PageDirection.DESC else expr.asc())
        return statement.order_by(*clauses)


_default_sorter = QuerySorter()


def apply_order(statement: S, directives: Sequence[PageSort] | None) -> S:
    """Order ``statement`` using the process-wide :class:`QuerySorter`."""
    return _default_sorter.apply_order(statement, directives)


__all__ = ["QuerySorter", "apply_order"]
