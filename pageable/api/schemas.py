"""Marshmallow schemas serializing :class:`Page` results."""

from __future__ import annotations

from typing import Any

from marshmallow import Schema, fields

from pageable.pagination.page import Page


class PageSortSchema(Schema):
    """Sort directive echoed in page details."""

    table = fields.String(allow_none=True)
    field = fields.String(required=True)
    direction = fields.Function(lambda sort: sort.direction.value)


class PageDetailsSchema(Schema):
    """Page metadata with camelCase wire keys."""

    total_pages = fields.Integer(data_key="totalPages")
    page_index = fields.Integer(data_key="pageIndex")
    position = fields.Integer()
    total_elements = fields.Integer(data_key="totalElements")
    elements_per_page = fields.Integer(data_key="elementsPerPage")
    elements_in_page = fields.Integer(data_key="elementsInPage")
    is_first = fields.Boolean(data_key="isFirst")
    is_last = fields.Boolean(data_key="isLast")
    has_next = fields.Boolean(data_key="hasNext")
    has_previous = fields.Boolean(data_key="hasPrevious")
    is_overflow = fields.Boolean(data_key="isOverflow")
    sort = fields.List(fields.Nested(PageSortSchema), allow_none=True)


def page_schema(item_schema: Schema | type[Schema] | None = None) -> Schema:
    """Return a schema dumping ``{"details": ..., "content": [...]}``.

    :param item_schema: Schema for each content element. When ``None`` the
        elements are emitted as-is and must already be JSON-serializable.
    """
    content: fields.Field
    if item_schema is None:
        content = fields.List(fields.Raw())
    else:
        content = fields.List(fields.Nested(item_schema))

    page_cls = Schema.from_dict(
        {"details": fields.Nested(PageDetailsSchema), "content": content},
        name="PageSchema",
    )
    return page_cls()


def dump_page(page: Page[Any], item_schema: Schema | type[Schema] | None = None) -> dict[str, Any]:
    """Serialize ``page`` to a JSON-ready dict."""
    return page_schema(item_schema).dump(page)


__all__ = ["PageDetailsSchema", "PageSortSchema", "dump_page", "page_schema"]
