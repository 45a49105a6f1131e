"""Immutable pagination request values.

A :class:`Pageable` describes which window of a result set is requested and
how it must be ordered. Instances validate themselves on construction so the
rest of the engine never has to re-check basic bounds.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class PageDirection(str, Enum):
    """Sorting direction of a single ordering key."""

    ASC = "ASC"
    DESC = "DESC"


@dataclass(frozen=True, slots=True)
class PageSort:
    """Ordering instruction for a single field.

    :param field: Logical field name to sort by (column or expression alias).
    :type field: str
    :param direction: Sorting direction. Defaults to ascending.
    :type direction: PageDirection
    :param table: Optional table qualifier used to disambiguate multi-table
        queries.
    :type table: str | None
    :raises ValueError: If ``field`` is blank or ``table`` is an empty string.
    """

    field: str
    direction: PageDirection = PageDirection.ASC
    table: str | None = None

    def __post_init__(self) -> None:
        if not self.field or not self.field.strip():
            raise ValueError("The sorting field name must not be blank.")
        if self.table is not None and not self.table.strip():
            raise ValueError("The table name must not be an empty string if provided.")

    def __str__(self) -> str:
        ref = f"{self.table}.{self.field}" if self.table else self.field
        return f"{ref},{self.direction.value}"


@dataclass(frozen=True, slots=True)
class Pageable:
    """Requested page window and ordering.

    :param page: Zero-based page index.
    :type page: int
    :param position: Optional absolute zero-based offset. Takes precedence
        over ``page`` when present.
    :type position: int | None
    :param size: Elements per page. ``0`` means all elements in one page.
    :type size: int
    :param sort: Ordered sort directives; the first one is the primary key.
    :type sort: list[PageSort] | None
    :raises ValueError: If any bound is negative.
    """

    page: int = 0
    position: int | None = None
    size: int = 0
    sort: list[PageSort] | None = None

    def __post_init__(self) -> None:
        if self.page < 0:
            raise ValueError("Page index must be >= 0.")
        if self.position is not None and self.position < 0:
            raise ValueError("Position must be >= 0 when provided.")
        if self.size < 0:
            raise ValueError("Page size must be >= 0. (0 means all elements).")

    @property
    def is_unbounded(self) -> bool:
        """Return ``True`` when no page size limit applies."""
        return self.size == 0

    @property
    def offset(self) -> int:
        """Absolute start offset of the requested window."""
        if self.position is not None:
            return self.position
        return self.page * self.size


__all__ = ["PageDirection", "PageSort", "Pageable"]
