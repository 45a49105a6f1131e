"""Generic repository base wired to the pagination engine.

Repositories stay thin and persistence-focused:

- They never call commit/rollback; callers own the Unit of Work.
- Sorting goes through the column resolver, so only columns of the queried
  tables (or names registered in :meth:`BaseRepository._sortable_fields`)
  are orderable. Unknown names raise instead of being ignored.
- The primary key is appended as a final ascending tiebreaker so page
  windows stay deterministic.
- Eager-loading is opt-in via ``_default_eagerload`` to avoid N+1.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, ClassVar, Generic, TypeVar, cast

from sqlalchemy import Select, and_, select
from sqlalchemy.orm import InstrumentedAttribute, Session

from pageable.core.extensions import db
from pageable.pagination.mapper import ScalarMapper
from pageable.pagination.page import Page
from pageable.pagination.pageable import Pageable
from pageable.pagination.query import apply_pageable, paginate
from pageable.pagination.resolver import FieldRegistry, default_registry
from pageable.pagination.sorter import QuerySorter

E = TypeVar("E")  # SQLAlchemy mapped entity type


class BaseRepository(Generic[E]):
    """Generic, persistence-only repository for a single aggregate.

    Subclasses MUST define:

    * ``model``: the SQLAlchemy mapped class.

    Subclasses MAY override:

    * ``_sortable_fields`` to expose extra logical sort names.
    * ``_filterable_fields`` to whitelist equality filters (recommended).
    * ``_default_eagerload`` to attach eager-loading options.
    """

    #: SQLAlchemy mapped model (must be set by subclasses)
    model: type[E]

    #: Field registry receiving the model's attribute names
    registry: ClassVar[FieldRegistry] = default_registry

    _registered: ClassVar[set[type[Any]]] = set()

    def __init__(self, session: Session | None = None, sorter: QuerySorter | None = None) -> None:
        """Initialise the repository with an optional SQLAlchemy session.

        When no explicit session is provided the repository falls back to the
        Flask-scoped session exposed by ``pageable.core.extensions``.

        :param session: Session shared across the Unit of Work scope.
        :type session: :class:`sqlalchemy.orm.Session` | None
        :param sorter: Sorter used for ``ORDER BY``; defaults to the
            process-wide one.
        :type sorter: QuerySorter | None
        """
        self._session: Session | None = session
        self._sorter = sorter
        self._register()

    @property
    def session(self) -> Session:
        """Return the injected session, else the Flask-scoped one."""
        if self._session is not None:
            return self._session
        return cast(Session, db.session)

    # ------------------------------ Extensibility ----------------------------

    def _default_eagerload(self, stmt: Select[Any]) -> Select[Any]:
        """Attach eager-loading options to list/paginate statements."""
        return stmt

    def _pk_attr(self) -> InstrumentedAttribute[Any] | None:
        """Return the model's primary-key attribute (``model.id``) if present."""
        return getattr(self.model, "id", None)

    def _sortable_fields(self) -> Mapping[str, InstrumentedAttribute[Any]]:
        """Extra public sort names mapped to model attributes.

        Column and attribute names are sortable already; use this for
        aliases such as ``{"joined": User.created_at}``.

        :returns: Public key → ORM attribute mapping.
        :rtype: Mapping[str, InstrumentedAttribute]
        """
        return {}

    def _filterable_fields(self) -> Mapping[str, InstrumentedAttribute[Any]] | None:
        """Optional whitelist of equality-filterable fields.

        If this returns ``None`` every key is applied via
        ``getattr(self.model, key) == value``. If a mapping is returned, only
        keys present in it are applied; unknown keys are ignored.

        :returns: Public key → ORM attribute mapping, or ``None``.
        :rtype: Mapping[str, InstrumentedAttribute] | None
        """
        return None

    # ------------------------------ Internals --------------------------------

    def _register(self) -> None:
        repo_cls = type(self)
        if repo_cls in self._registered:
            return
        model = self.model
        self.registry.register_model(model)
        extra = self._sortable_fields()
        if extra:
            self.registry.register_fields(model.__table__, extra)  # type: ignore[attr-defined]
        self._registered.add(repo_cls)

    def _apply_equality_filters(
        self,
        stmt: Select[Any],
        filters: Mapping[str, Any] | None,
    ) -> Select[Any]:
        if not filters:
            return stmt

        allowed = self._filterable_fields()
        if allowed is None:
            clauses = [getattr(self.model, k) == v for k, v in filters.items()]
            return stmt.where(and_(*clauses)) if clauses else stmt

        whitelist_clauses: list[Any] = []
        for k, v in filters.items():
            col = allowed.get(k)
            if isinstance(col, InstrumentedAttribute):
                whitelist_clauses.append(col == v)
        return stmt.where(and_(*whitelist_clauses)) if whitelist_clauses else stmt

    def _base_select(self, filters: Mapping[str, Any] | None) -> Select[Any]:
        stmt: Select[Any] = select(self.model)
        stmt = self._apply_equality_filters(stmt, filters)
        return self._default_eagerload(stmt)

    # ------------------------------- Listing ---------------------------------

    def list(
        self,
        pageable: Pageable | None = None,
        *,
        filters: Mapping[str, Any] | None = None,
    ) -> list[E]:
        """List entities, sorted and windowed by ``pageable`` when given.

        :param pageable: Optional pagination request.
        :type pageable: Pageable | None
        :param filters: Equality filters (public keys).
        :type filters: Mapping[str, Any] | None
        :returns: List of entities.
        :rtype: list[E]
        :raises PaginationError: When a sort directive cannot be resolved.
        """
        stmt = self._base_select(filters)
        stmt = apply_pageable(stmt, pageable, sorter=self._sorter, tiebreaker=self._pk_attr())
        results = self.session.execute(stmt).scalars().all()
        return cast(list[E], list(results))

    def paginate(
        self,
        pageable: Pageable | None,
        *,
        filters: Mapping[str, Any] | None = None,
    ) -> Page[E]:
        """Return one page of entities with stable sorting.

        :param pageable: Pagination request, or ``None`` for everything.
        :type pageable: Pageable | None
        :param filters: Equality filters (public keys).
        :type filters: Mapping[str, Any] | None
        :returns: :class:`Page` with entities and metadata.
        :rtype: Page[E]
        :raises PaginationError: When a sort directive cannot be resolved.
        """
        return paginate(
            self.session,
            self._base_select(filters),
            pageable,
            ScalarMapper(),
            sorter=self._sorter,
            tiebreaker=self._pk_attr(),
        )


__all__ = ["BaseRepository"]
