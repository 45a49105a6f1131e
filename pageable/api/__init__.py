"""HTTP-facing helpers: request parsing and page serialization."""

from pageable.api.request import PageableQuerySchema, get_pageable
from pageable.api.schemas import PageDetailsSchema, PageSortSchema, dump_page, page_schema

__all__ = [
    "PageDetailsSchema",
    "PageSortSchema",
    "PageableQuerySchema",
    "dump_page",
    "get_pageable",
    "page_schema",
]
