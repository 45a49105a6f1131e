"""
Pagination error taxonomy.

These errors are **framework-agnostic**: they never import Flask or HTTP
helpers. Every failure raised by the pagination engine is a
:class:`PaginationError` tagged with one :class:`PaginationErrorKind`, so the
set of possible failures is closed and can be handled exhaustively.

The translation to HTTP problem responses lives in ``pageable/core/errors.py``.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pageable.pagination.pageable import PageSort


class PaginationErrorKind(Enum):
    """Closed set of pagination failure kinds.

    The value of each member is its stable machine-readable code.
    """

    INVALID_PAGEABLE_PAIR = "INVALID_PAGEABLE_PAIR"
    INVALID_ORDER_DIRECTION = "INVALID_ORDER_DIRECTION"
    MISSING_SORT_DIRECTIVE = "MISSING_SORT_DIRECTIVE"
    INVALID_SORT_DIRECTIVE = "INVALID_SORT_DIRECTIVE"
    AMBIGUOUS_SORT_FIELD = "AMBIGUOUS_SORT_FIELD"

    @property
    def code(self) -> str:
        return self.value


class PaginationError(Exception):
    """
    Raised for invalid pagination requests or unresolvable sort directives.

    All kinds are caller-input errors and are never retried.

    Parameters
    ----------
    kind : PaginationErrorKind
        Tag identifying the failure.
    description : str
        Human-readable summary.
    reason : str | None, optional
        Additional free-text context.
    cause : BaseException | None, optional
        Underlying exception, if any.
    """

    def __init__(
        self,
        kind: PaginationErrorKind,
        description: str,
        reason: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(description)
        self.kind = kind
        self.description = description
        self.reason = reason
        if cause is not None:
            self.__cause__ = cause

    @property
    def error_code(self) -> str:
        return self.kind.code

    @property
    def cause(self) -> BaseException | None:
        return self.__cause__

    def __str__(self) -> str:
        if self.reason:
            return f"{self.description} ({self.reason})"
        return self.description

    def __repr__(self) -> str:
        return (
            f"PaginationError(kind={self.kind.name}, "
            f"description={self.description!r}, reason={self.reason!r})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Return a serializable view of the error."""
        return {"code": self.error_code, "description": self.description, "reason": self.reason}

    # ------------------------------ Constructors ------------------------------

    @classmethod
    def invalid_pageable_pair(cls) -> PaginationError:
        """Conflicting or incomplete ``page``/``position``/``size`` combination."""
        return cls(
            PaginationErrorKind.INVALID_PAGEABLE_PAIR,
            "Page attributes mismatch. Use either 'page'+'size' or 'position'+'size' "
            "(mutually exclusive), or none.",
        )

    @classmethod
    def invalid_order_direction(cls, direction: str) -> PaginationError:
        """The direction segment of a sort token is neither ASC nor DESC."""
        return cls(
            PaginationErrorKind.INVALID_ORDER_DIRECTION,
            f"Ordering sort direction is invalid. Received: '{direction}'",
        )

    @classmethod
    def missing_sort_directive(cls) -> PaginationError:
        """A sort token carries no field name."""
        return cls(PaginationErrorKind.MISSING_SORT_DIRECTIVE, "Must specify a sort field name.")

    @classmethod
    def invalid_sort_directive(cls, sort: PageSort, reason: str) -> PaginationError:
        """The directive's table or field is not part of the query."""
        return cls(
            PaginationErrorKind.INVALID_SORT_DIRECTIVE,
            f"Unexpected sort directive: {sort}",
            reason=reason,
        )

    @classmethod
    def ambiguous_sort_field(cls, sort: PageSort, reason: str) -> PaginationError:
        """The directive matches more than one column or expression alias."""
        return cls(
            PaginationErrorKind.AMBIGUOUS_SORT_FIELD,
            f"Detected ambiguous field: {sort.field}",
            reason=reason,
        )


__all__ = ["PaginationError", "PaginationErrorKind"]
