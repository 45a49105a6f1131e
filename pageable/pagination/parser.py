"""Parse public sort tokens into :class:`PageSort` directives.

Accepted token format is ``[table.]field[,direction]``, for example
``"name"``, ``"price,desc"`` or ``"employees.name,ASC"``.
"""

from __future__ import annotations

from collections.abc import Iterable

from pageable.pagination.errors import PaginationError
from pageable.pagination.pageable import PageDirection, PageSort

SORT_SEGMENT_DELIMITER = ","
FIELD_SEGMENT_DELIMITER = "."


def parse_sort_directives(tokens: Iterable[str] | None) -> list[PageSort] | None:
    """Parse public sort tokens into ordered sort directives.

    Parsing is fail-fast: the first invalid token aborts and nothing is
    returned for the remaining ones.

    :param tokens: Raw tokens, one per ``sort`` query parameter.
    :type tokens: Iterable[str] | None
    :returns: Directives in token order, or ``None`` when no tokens were given.
    :rtype: list[PageSort] | None
    :raises PaginationError: ``MISSING_SORT_DIRECTIVE`` for blank tokens or
        field names, ``INVALID_ORDER_DIRECTION`` for unknown directions.
    """
    directives: list[PageSort] = []
    for token in tokens or ():
        directives.append(_parse_token(token))
    return directives or None


def _parse_token(token: str) -> PageSort:
    if token is None or not token.strip():
        raise PaginationError.missing_sort_directive()

    segments = [segment.strip() for segment in token.split(SORT_SEGMENT_DELIMITER)]
    table, field = _parse_table_and_field(segments[0])
    if not field:
        raise PaginationError.missing_sort_directive()

    direction = PageDirection.ASC
    if len(segments) >= 2:
        direction = _parse_direction(segments[1])

    return PageSort(field=field, direction=direction, table=table)


def _parse_table_and_field(segment: str) -> tuple[str | None, str]:
    """Split ``table.field`` at the first dot; the qualifier is optional."""
    if FIELD_SEGMENT_DELIMITER not in segment:
        return None, segment
    table, _, field = segment.partition(FIELD_SEGMENT_DELIMITER)
    table = table.strip()
    return (table or None), field.strip()


def _parse_direction(raw: str) -> PageDirection:
    try:
        return PageDirection[raw.upper()]
    except KeyError as exc:
        raise PaginationError.invalid_order_direction(raw) from exc


def format_sort_directive(sort: PageSort) -> str:
    """Render a directive back into its public token form.

    :param sort: Directive to render.
    :type sort: PageSort
    :returns: Token such as ``"employees.name,DESC"``.
    :rtype: str
    """
    return str(sort)


__all__ = ["parse_sort_directives", "format_sort_directive"]
