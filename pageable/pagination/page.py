"""Result page with derived pagination metadata.

A :class:`Page` is always built together with its :class:`PageDetails` and is
never mutated afterwards. The builder trusts the caller's ``content``: it does
not re-slice it or check that it matches one page's worth of elements.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

from pageable.pagination.pageable import Pageable, PageSort

T = TypeVar("T")
R = TypeVar("R")


@dataclass(frozen=True, slots=True)
class PageDetails:
    """Metadata describing one page of a paginated result.

    :param total_pages: Number of pages available for the request size.
    :param page_index: Zero-based index of this page.
    :param position: Absolute zero-based offset of this page's first element.
    :param total_elements: Number of elements across all pages.
    :param elements_per_page: Effective page size.
    :param elements_in_page: Number of elements actually in this page.
    :param is_first: Whether this is the first page.
    :param is_last: Whether this is the last page.
    :param has_next: Whether a following page exists.
    :param has_previous: Whether a preceding page exists.
    :param is_overflow: Whether the requested page/position lies beyond the
        result set.
    :param sort: Sort directives echoed from the request.
    """

    total_pages: int
    page_index: int
    position: int
    total_elements: int
    elements_per_page: int
    elements_in_page: int
    is_first: bool
    is_last: bool
    has_next: bool
    has_previous: bool
    is_overflow: bool
    sort: list[PageSort] | None


@dataclass(frozen=True, slots=True)
class Page(Generic[T]):
    """One page of results plus its metadata."""

    details: PageDetails
    content: list[T]

    @classmethod
    def build(cls, content: Sequence[T], total_elements: int, pageable: Pageable | None) -> Page[T]:
        """Build a page and derive all its metadata.

        :param content: Elements of this page, as produced by the caller.
        :type content: Sequence[T]
        :param total_elements: Element count across all pages (``>= 0``).
        :type total_elements: int
        :param pageable: Request the content was fetched for, or ``None`` when
            no pagination was applied.
        :type pageable: Pageable | None
        :returns: Page with fully derived details.
        :rtype: Page[T]
        """
        page_size = _resolve_page_size(pageable, total_elements)
        total_pages = _total_pages(total_elements, page_size)
        page_index, position = _indexes(pageable, page_size)

        details = PageDetails(
            total_pages=total_pages,
            page_index=page_index,
            position=position,
            total_elements=total_elements,
            elements_per_page=page_size,
            elements_in_page=len(content),
            is_first=total_pages == 0 or page_index == 0,
            is_last=total_pages == 0 or page_index >= total_pages - 1,
            has_next=total_pages > 0 and page_index < total_pages - 1,
            has_previous=total_pages > 0 and page_index > 0,
            is_overflow=_is_overflow(pageable, total_elements, total_pages, page_index, position),
            sort=pageable.sort if pageable is not None else None,
        )
        return cls(details=details, content=list(content))

    @classmethod
    def empty(cls, pageable: Pageable | None) -> Page[T]:
        """Return a page with no content and zero total elements."""
        return cls.build([], 0, pageable)

    def map(self, fn: Callable[[T], R]) -> Page[R]:
        """Return a page with ``fn`` applied to each element and the same details."""
        return Page(details=self.details, content=[fn(item) for item in self.content])


def _resolve_page_size(pageable: Pageable | None, total_elements: int) -> int:
    # Absent or zero size means one page holds everything.
    if pageable is not None and pageable.size > 0:
        return pageable.size
    return total_elements


def _total_pages(total_elements: int, page_size: int) -> int:
    if total_elements > 0 and page_size > 0:
        return max(-(-total_elements // page_size), 1)
    return 0


def _indexes(pageable: Pageable | None, page_size: int) -> tuple[int, int]:
    if pageable is None or page_size <= 0:
        return 0, 0
    if pageable.position is not None:
        return pageable.position // page_size, pageable.position
    return pageable.page, pageable.page * page_size


def _is_overflow(
    pageable: Pageable | None,
    total_elements: int,
    total_pages: int,
    page_index: int,
    position: int,
) -> bool:
    if pageable is not None and pageable.position is not None:
        return (total_elements > 0 and position >= total_elements) or (
            total_elements == 0 and position > 0
        )
    return (total_pages > 0 and page_index >= total_pages) or (total_pages == 0 and page_index > 0)


__all__ = ["Page", "PageDetails"]
