"""Build a :class:`Pageable` from HTTP query parameters.

Recognized parameters:

* ``page``: zero-based page index.
* ``position``: zero-based absolute offset, alternative to ``page``.
* ``size``: elements per page; ``0`` returns all elements.
* ``sort``: repeatable, ``[table.]field[,direction]``.

Either ``page``+``size`` or ``position``+``size`` may be supplied, or none.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from flask import request
from marshmallow import Schema, fields, post_load, validate
from werkzeug.datastructures import MultiDict

from pageable.pagination.errors import PaginationError
from pageable.pagination.pageable import Pageable
from pageable.pagination.parser import parse_sort_directives

PAGE_KEY = "page"
POSITION_KEY = "position"
SIZE_KEY = "size"
SORT_KEY = "sort"


class PageableQuerySchema(Schema):
    """Validate raw pagination query parameters.

    Integers must be non-negative; ``sort`` tokens are kept raw and parsed
    afterwards so directive errors surface as :class:`PaginationError`.
    """

    page = fields.Integer(validate=validate.Range(min=0))
    position = fields.Integer(validate=validate.Range(min=0))
    size = fields.Integer(validate=validate.Range(min=0))
    sort = fields.List(fields.String())

    @post_load
    def check_pairs(self, data: dict[str, Any], **_: Any) -> dict[str, Any]:
        has_size = "size" in data
        page_pair = "page" in data and has_size
        position_pair = "position" in data and has_size
        if (page_pair and position_pair) or (has_size and not page_pair and not position_pair):
            raise PaginationError.invalid_pageable_pair()
        return data


def _collect(args: Mapping[str, Any]) -> dict[str, Any]:
    raw: dict[str, Any] = {}
    for key in (PAGE_KEY, POSITION_KEY, SIZE_KEY):
        value = args.get(key)
        if value is not None and value != "":
            raw[key] = value

    if isinstance(args, MultiDict):
        tokens = args.getlist(SORT_KEY)
    else:
        value = args.get(SORT_KEY)
        tokens = [value] if isinstance(value, str) else list(value or [])
    if tokens:
        raw[SORT_KEY] = tokens
    return raw


def get_pageable(args: Mapping[str, Any] | None = None) -> Pageable | None:
    """Return the pagination request carried by ``args``.

    :param args: Query parameters; defaults to ``flask.request.args``.
    :returns: A :class:`Pageable`, or ``None`` when no ``page``, ``position``
        or ``sort`` was supplied.
    :raises marshmallow.ValidationError: On non-integer or negative values.
    :raises PaginationError: On an invalid page/position/size combination or
        a malformed sort token.
    """
    if args is None:
        args = request.args

    data = PageableQuerySchema().load(_collect(args))
    sort_tokens: list[str] = data.get("sort") or []

    if "page" not in data and "position" not in data and not sort_tokens:
        return None

    return Pageable(
        page=data.get("page", 0),
        position=data.get("position"),
        size=data.get("size", 0),
        sort=parse_sort_directives(sort_tokens),
    )


__all__ = ["PageableQuerySchema", "get_pageable"]
