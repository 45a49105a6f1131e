"""Paginate SQLAlchemy statements into :class:`Page` results.

Two result shapes are supported:

* **Flat** (:func:`paginate`): one row per element.
* **Grouped 1-to-N** (:func:`paginate_grouped`): a parent entity joined to
  child rows, paginated by distinct parent key instead of raw row count.

The statement passed in is never modified; SQLAlchemy statements are
generative and every step works on a derived copy. Counting and content
queries run on the caller's session, inside the caller's transaction, so
snapshot consistency between them is the caller's concern.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Hashable
from typing import Any, TypeVar

from sqlalchemy import distinct, func, select
from sqlalchemy.orm import Session
from sqlalchemy.sql.expression import ColumnElement, CompoundSelect, Select

from pageable.pagination.mapper import RowMapper
from pageable.pagination.page import Page
from pageable.pagination.pageable import Pageable
from pageable.pagination.sorter import QuerySorter, apply_order

T = TypeVar("T")
S = TypeVar("S", bound="Select[Any] | CompoundSelect")

log = logging.getLogger(__name__)

GROUP_KEY_LABEL = "_pageable_group_key"


# ------------------------------ Statement shaping ----------------------------


def apply_pageable(
    statement: S,
    pageable: Pageable | None,
    *,
    sorter: QuerySorter | None = None,
    tiebreaker: ColumnElement[Any] | None = None,
) -> S:
    """Apply sorting, then limit/offset, from ``pageable``.

    :param statement: Statement to shape.
    :param pageable: Request; ``None`` leaves the statement unbounded and
        only applies ``tiebreaker``.
    :param sorter: Sorter to use; defaults to the process-wide one.
    :param tiebreaker: Optional column appended (ascending) after the
        directive ordering to keep page windows deterministic.
    :returns: The shaped statement.
    :raises PaginationError: When a sort directive cannot be resolved.
    """
    if pageable is None:
        if tiebreaker is not None:
            statement = statement.order_by(tiebreaker.asc())
        return statement

    if pageable.sort:
        if sorter is not None:
            statement = sorter.apply_order(statement, pageable.sort)
        else:
            statement = apply_order(statement, pageable.sort)
    if tiebreaker is not None:
        statement = statement.order_by(tiebreaker.asc())

    if pageable.size > 0:
        statement = statement.limit(pageable.size).offset(pageable.offset)
    return statement


def count_rows(session: Session, statement: Select[Any] | CompoundSelect) -> int:
    """Count the rows of ``statement`` ignoring its ordering."""
    count_stmt = select(func.count()).select_from(statement.order_by(None).subquery())
    return int(session.execute(count_stmt).scalar_one())


def count_groups(session: Session, statement: Select[Any], group_by: ColumnElement[Any]) -> int:
    """Count distinct values of ``group_by`` within ``statement``."""
    count_stmt = statement.with_only_columns(
        func.count(distinct(group_by)), maintain_column_froms=True
    ).order_by(None)
    return int(session.execute(count_stmt).scalar_one())


# -------------------------------- Flat shape ---------------------------------


def paginate(
    session: Session,
    statement: Select[Any] | CompoundSelect,
    pageable: Pageable | None,
    mapper: RowMapper[T],
    *,
    sorter: QuerySorter | None = None,
    tiebreaker: ColumnElement[Any] | None = None,
) -> Page[T]:
    """Return one page of ``statement`` with each row mapped by ``mapper``.

    When ``pageable`` is ``None`` or its size is ``0`` the whole result set is
    returned as a single page.

    :param session: Active SQLAlchemy session.
    :type session: :class:`sqlalchemy.orm.Session`
    :param statement: Base statement (filtered, unsorted).
    :param pageable: Pagination request, or ``None``.
    :type pageable: Pageable | None
    :param mapper: Row mapper producing the page elements.
    :type mapper: RowMapper[T]
    :returns: Page of mapped elements; totals reflect the un-windowed count.
    :rtype: Page[T]
    :raises PaginationError: When a sort directive cannot be resolved.
    """
    started = time.perf_counter()
    total = count_rows(session, statement)
    if total == 0:
        return Page.empty(pageable)

    windowed = apply_pageable(statement, pageable, sorter=sorter, tiebreaker=tiebreaker)
    content = [mapper.from_row(row) for row in session.execute(windowed)]

    log.debug(
        "Paginated %d of %d rows.",
        len(content),
        total,
        extra={"elapsed_ms": round((time.perf_counter() - started) * 1000, 2)},
    )
    return Page.build(content, total, pageable)


# ------------------------------- Grouped shape -------------------------------


def paginate_grouped(
    session: Session,
    statement: Select[Any],
    pageable: Pageable | None,
    mapper: RowMapper[T],
    group_by: ColumnElement[Any],
    *,
    sorter: QuerySorter | None = None,
) -> Page[T]:
    """Return one page of top-level entities for a 1-to-N statement.

    ``group_by`` identifies the top-level entity (usually its primary key).
    Rows handed to the mapper carry it as an extra trailing column labelled
    ``_pageable_group_key``.

    Steps:

    1. Count distinct ``group_by`` values; zero yields an empty page.
    2. Select the distinct keys, sorted and windowed by ``pageable``.
    3. Fetch every row whose key is in that window.
    4. Group rows by key and map each group with ``mapper.from_rows``;
       groups mapped to ``None`` are dropped.

    Elements follow the order of the key window.

    :param session: Active SQLAlchemy session.
    :param statement: Base statement joining parent and child rows.
    :param pageable: Pagination request, or ``None``.
    :param mapper: Mapper whose ``from_rows`` aggregates one group.
    :param group_by: Column identifying the top-level entity.
    :returns: Page of mapped top-level elements; totals count distinct keys.
    :raises PaginationError: When a sort directive cannot be resolved.
    """
    total = count_groups(session, statement, group_by)
    if total == 0:
        return Page.empty(pageable)

    keys_stmt = statement.with_only_columns(group_by, maintain_column_froms=True).group_by(group_by)
    keys_stmt = apply_pageable(keys_stmt, pageable, sorter=sorter)
    keys = list(session.execute(keys_stmt).scalars())
    if not keys:
        return Page.build([], total, pageable)

    groups: dict[Hashable, list[Any]] = {key: [] for key in keys}
    rows_stmt = statement.add_columns(group_by.label(GROUP_KEY_LABEL)).where(group_by.in_(keys))
    for row in session.execute(rows_stmt):
        bucket = groups.get(row._mapping[GROUP_KEY_LABEL])
        if bucket is not None:
            bucket.append(row)

    content: list[T] = []
    for rows in groups.values():
        item = mapper.from_rows(rows)
        if item is not None:
            content.append(item)

    log.debug("Paginated %d of %d groups.", len(content), total)
    return Page.build(content, total, pageable)


__all__ = [
    "apply_pageable",
    "count_groups",
    "count_rows",
    "paginate",
    "paginate_grouped",
]
