"""Pagination engine: request values, sort resolution, page building."""

from __future__ import annotations

from pageable.pagination.cache import ResolutionCache
from pageable.pagination.errors import PaginationError, PaginationErrorKind
from pageable.pagination.mapper import FunctionMapper, RowMapper, ScalarMapper
from pageable.pagination.page import Page, PageDetails
from pageable.pagination.pageable import PageDirection, Pageable, PageSort
from pageable.pagination.parser import format_sort_directive, parse_sort_directives
from pageable.pagination.query import (
    apply_pageable,
    count_groups,
    count_rows,
    paginate,
    paginate_grouped,
)
from pageable.pagination.resolver import (
    ColumnResolver,
    FieldRegistry,
    QueryShape,
    ResolvedTarget,
    TargetKind,
    default_cache,
    default_registry,
)
from pageable.pagination.sorter import QuerySorter, apply_order

__all__ = [
    # Values
    "Pageable",
    "PageSort",
    "PageDirection",
    "Page",
    "PageDetails",
    # Errors
    "PaginationError",
    "PaginationErrorKind",
    # Parsing
    "parse_sort_directives",
    "format_sort_directive",
    # Resolution
    "ColumnResolver",
    "FieldRegistry",
    "QueryShape",
    "ResolvedTarget",
    "ResolutionCache",
    "TargetKind",
    "default_cache",
    "default_registry",
    "QuerySorter",
    "apply_order",
    # Mapping
    "RowMapper",
    "ScalarMapper",
    "FunctionMapper",
    # Orchestration
    "apply_pageable",
    "count_rows",
    "count_groups",
    "paginate",
    "paginate_grouped",
]
