"""Offset pagination and multi-table sort resolution for SQLAlchemy."""

from __future__ import annotations

from pageable.pagination import (
    Page,
    PageDetails,
    PageDirection,
    Pageable,
    PageSort,
    PaginationError,
    PaginationErrorKind,
    RowMapper,
    apply_order,
    apply_pageable,
    paginate,
    paginate_grouped,
    parse_sort_directives,
)

__version__ = "0.1.0"

__all__ = [
    "Page",
    "PageDetails",
    "PageDirection",
    "PageSort",
    "Pageable",
    "PaginationError",
    "PaginationErrorKind",
    "RowMapper",
    "__version__",
    "apply_order",
    "apply_pageable",
    "paginate",
    "paginate_grouped",
    "parse_sort_directives",
]
