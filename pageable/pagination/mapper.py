"""Row mapping capability consumed by the pagination orchestrator.

The engine never looks inside row payloads; it only hands rows (or groups of
rows sharing a group key) to a :class:`RowMapper`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from typing import Any, Generic, TypeVar

from sqlalchemy.engine import Row

T = TypeVar("T")


class RowMapper(ABC, Generic[T]):
    """Map result rows into domain values.

    Subclasses MUST implement :meth:`from_row`. Mappers for 1-to-N queries
    MAY override :meth:`from_rows` to aggregate child collections; the
    default maps only the first row of the group.
    """

    @abstractmethod
    def from_row(self, row: Row[Any]) -> T:
        """Map a single row to a domain value."""

    def from_rows(self, rows: Sequence[Row[Any]]) -> T | None:
        """Map rows sharing one group key to at most one domain value.

        :param rows: Rows of one group, in result order.
        :type rows: Sequence[Row]
        :returns: The mapped value, or ``None`` to drop the group.
        :rtype: T | None
        """
        if not rows:
            return None
        return self.from_row(rows[0])


class ScalarMapper(RowMapper[Any]):
    """Return the first element of each row (e.g. the entity of ``select(Model)``)."""

    def from_row(self, row: Row[Any]) -> Any:
        return row[0]


class FunctionMapper(RowMapper[T]):
    """Adapt a plain callable into a :class:`RowMapper`."""

    def __init__(self, fn: Callable[[Row[Any]], T]) -> None:
        self._fn = fn

    def from_row(self, row: Row[Any]) -> T:
        return self._fn(row)


__all__ = ["FunctionMapper", "RowMapper", "ScalarMapper"]
