"""Resolve sort directives to orderable SQLAlchemy expressions.

This module centralizes the decision logic behind multi-table sorting:

- :class:`QueryShape` captures what a statement exposes for ordering: its
  distinct target tables and its expression aliases (labels, and the columns
  of aliased sub-queries such as wrapped ``UNION`` statements).
- :class:`FieldRegistry` is the explicit logical-name → column lookup map per
  table, built once per table instead of being introspected per call.
- :class:`ColumnResolver` turns one :class:`~pageable.pagination.pageable.PageSort`
  into exactly one :class:`ResolvedTarget`, or fails with a
  :class:`~pageable.pagination.errors.PaginationError`.

Design decisions
----------------
* Expression aliases are matched **before** table columns: set-union and
  aggregate queries expose only aliases for their result shape.
* Table and field names are matched case-insensitively.
* Ambiguity is always an error; a column is never picked arbitrarily.
* Resolutions are cached by name-based keys and re-bound to the current
  statement's FROM objects, so cached targets never drag a stale FROM element
  into a new statement.
"""

from __future__ import annotations

import hashlib
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from sqlalchemy import column, inspect
from sqlalchemy.sql.expression import (
    ColumnElement,
    CompoundSelect,
    FromClause,
    Join,
    Label,
    Select,
    TableClause,
)
from sqlalchemy.sql.elements import _anonymous_label
from sqlalchemy.sql.selectable import AliasedReturnsRows, FromGrouping

from pageable.pagination.cache import ResolutionCache
from pageable.pagination.errors import PaginationError
from pageable.pagination.pageable import PageSort

log = logging.getLogger(__name__)

TABLE_KEY_SEPARATOR = "::"
ALIAS_KEY_PREFIX = "alias:"


# ------------------------------- Query shape ---------------------------------


@dataclass(frozen=True, slots=True)
class QueryShape:
    """Orderable surface of a statement.

    :param statement: The statement the shape was derived from.
    :param tables: Distinct target tables (``Table`` or table aliases) in
        FROM order.
    :param aliases: ``(name, expression)`` pairs for every visible
        expression alias.
    """

    statement: Select[Any] | CompoundSelect
    tables: tuple[FromClause, ...]
    aliases: tuple[tuple[str, ColumnElement[Any]], ...]

    @classmethod
    def of(cls, statement: Select[Any] | CompoundSelect) -> QueryShape:
        """Derive the shape of a ``Select`` or ``CompoundSelect``."""
        if isinstance(statement, CompoundSelect):
            # A bare set operation only exposes its result column names.
            aliases = tuple((key, col) for key, col in statement.selected_columns.items())
            return cls(statement=statement, tables=(), aliases=aliases)

        tables: list[FromClause] = []
        derived: list[FromClause] = []
        for from_ in statement.get_final_froms():
            _collect_froms(from_, tables, derived)

        labels = [col for col in statement.selected_columns if isinstance(col, Label)]
        aliases: list[tuple[str, ColumnElement[Any]]] = [(label.name, label) for label in labels]

        # A top-level label shadows sub-query columns of the same name, and
        # sub-query columns re-exported through a label are that label.
        label_names = {label.name.lower() for label in labels}
        proxied = [label.element for label in labels]
        for sub in derived:
            for key, col in sub.c.items():
                if key.lower() in label_names:
                    continue
                if any(col in element.proxy_set for element in proxied):
                    continue
                aliases.append((key, col))

        return cls(statement=statement, tables=_distinct_tables(tables), aliases=tuple(aliases))

    @property
    def is_compound(self) -> bool:
        return isinstance(self.statement, CompoundSelect)

    @property
    def table_names(self) -> list[str]:
        return [table_name(from_) for from_ in self.tables]

    def find_table(self, name: str) -> FromClause | None:
        wanted = name.lower()
        for from_ in self.tables:
            if table_name(from_).lower() == wanted:
                return from_
        return None

    def find_aliases(self, name: str) -> list[tuple[str, ColumnElement[Any]]]:
        wanted = name.lower()
        return [(alias, expr) for alias, expr in self.aliases if alias.lower() == wanted]


def _collect_froms(from_: FromClause, tables: list[FromClause], derived: list[FromClause]) -> None:
    """Flatten joins into target tables and aliased sub-queries."""
    if isinstance(from_, Join):
        _collect_froms(from_.left, tables, derived)
        _collect_froms(from_.right, tables, derived)
    elif isinstance(from_, FromGrouping):
        _collect_froms(from_.element, tables, derived)
    elif isinstance(from_, TableClause):
        tables.append(from_)
    elif isinstance(from_, AliasedReturnsRows):
        if isinstance(from_.element, TableClause):
            tables.append(from_)
        else:
            derived.append(from_)


def table_name(from_: FromClause) -> str:
    """Stable name of a target table.

    Anonymous aliases such as ``aliased(Model)`` carry a per-object generated
    name; they answer to the name of the table they alias instead.
    """
    if _is_anonymous(from_):
        return _base_table(from_).name
    return from_.name


def _is_anonymous(from_: FromClause) -> bool:
    return isinstance(from_, AliasedReturnsRows) and isinstance(from_.name, _anonymous_label)


def _distinct_tables(froms: Iterable[FromClause]) -> tuple[FromClause, ...]:
    # Anonymous aliases are distinct FROM elements even when they share a name.
    seen: set[Any] = set()
    result: list[FromClause] = []
    for from_ in froms:
        key = id(from_) if _is_anonymous(from_) else from_.name.lower()
        if key not in seen:
            seen.add(key)
            result.append(from_)
    return tuple(result)


def _base_table(from_: FromClause) -> TableClause:
    if isinstance(from_, AliasedReturnsRows):
        return from_.element
    return from_


def _table_key(table: TableClause) -> str:
    return getattr(table, "fullname", table.name).lower()


# ------------------------------ Field registry -------------------------------


class FieldRegistry:
    """Logical field name → column lookup map for each table.

    The default map of a table holds every column under its key and its
    database name, lower-cased. Additional logical names (for example ORM
    attribute names that differ from column names) are added with
    :meth:`register_fields` or :meth:`register_model`.
    """

    def __init__(self) -> None:
        self._maps: dict[str, dict[str, tuple[ColumnElement[Any], ...]]] = {}
        self._extra: dict[str, dict[str, ColumnElement[Any]]] = {}

    def register_fields(self, table: TableClause, fields: Mapping[str, Any]) -> None:
        """Expose extra logical names for columns of ``table``.

        :param table: Table owning the columns.
        :param fields: Logical name → column (or ORM column attribute).
        :raises ValueError: If a column does not belong to ``table``.
        """
        key = _table_key(table)
        extra = dict(self._extra.get(key, {}))
        for name, value in fields.items():
            col = _as_column(value)
            if not table.c.contains_column(col):
                raise ValueError(f"Column {col!r} does not belong to table '{table.name}'.")
            extra[name.lower()] = col
        self._extra[key] = extra
        self._maps.pop(key, None)

    def register_model(self, model: type[Any]) -> None:
        """Expose the ORM attribute names of ``model`` as logical field names."""
        mapper = inspect(model)
        by_table: dict[int, tuple[TableClause, dict[str, ColumnElement[Any]]]] = {}
        for attr in mapper.column_attrs:
            col = attr.columns[0]
            table = getattr(col, "table", None)
            if not isinstance(table, TableClause):
                continue
            by_table.setdefault(id(table), (table, {}))[1][attr.key] = col
        for table, fields in by_table.values():
            self.register_fields(table, fields)

    def fields_for(self, table: TableClause) -> Mapping[str, tuple[ColumnElement[Any], ...]]:
        key = _table_key(table)
        fields = self._maps.get(key)
        if fields is None:
            fields = self._build(table, self._extra.get(key, {}))
            self._maps[key] = fields
        return fields

    def lookup(self, table: TableClause, field: str) -> tuple[ColumnElement[Any], ...]:
        return self.fields_for(table).get(field.lower(), ())

    @staticmethod
    def _build(
        table: TableClause, extra: Mapping[str, ColumnElement[Any]]
    ) -> dict[str, tuple[ColumnElement[Any], ...]]:
        grouped: dict[str, list[ColumnElement[Any]]] = {}

        def add(name: str, col: ColumnElement[Any]) -> None:
            bucket = grouped.setdefault(name.lower(), [])
            if not any(existing is col for existing in bucket):
                bucket.append(col)

        for key, col in table.c.items():
            add(key, col)
            add(col.name, col)
        # Explicit logical names take precedence over column keys.
        for name, col in extra.items():
            grouped[name.lower()] = [col]
        return {name: tuple(cols) for name, cols in grouped.items()}


def _as_column(value: Any) -> ColumnElement[Any]:
    prop = getattr(value, "property", None)
    columns = getattr(prop, "columns", None)
    if columns:
        return columns[0]
    return value


# ----------------------------- Resolved targets ------------------------------


class TargetKind(str, Enum):
    COLUMN = "COLUMN"
    ALIAS = "ALIAS"


@dataclass(frozen=True, slots=True)
class ResolvedTarget:
    """Opaque, cacheable reference to something a statement can order by.

    Produced by :class:`ColumnResolver` only. ``bind`` returns the concrete
    expression for a given statement shape.
    """

    kind: TargetKind
    name: str
    table: str | None = None

    def bind(self, shape: QueryShape) -> ColumnElement[Any]:
        if self.kind is TargetKind.ALIAS:
            matches = shape.find_aliases(self.name)
            if shape.is_compound or len(matches) != 1:
                return column(self.name)
            return matches[0][1]

        from_ = shape.find_table(self.table or "")
        bound = from_.c.get(self.name) if from_ is not None else None
        if bound is None:
            raise PaginationError.invalid_sort_directive(
                PageSort(field=self.name, table=self.table),
                "Field not found in query tables.",
            )
        return bound


# -------------------------------- Resolver -----------------------------------


class _NoAliasMatch(Exception):
    """Internal signal: fall through to table-column resolution."""


class ColumnResolver:
    """Resolve :class:`PageSort` directives against a :class:`QueryShape`.

    :param cache: Resolution cache; defaults to the process-wide instance.
    :type cache: ResolutionCache | None
    :param registry: Field registry; defaults to the process-wide instance.
    :type registry: FieldRegistry | None
    """

    def __init__(
        self,
        cache: ResolutionCache[ResolvedTarget] | None = None,
        registry: FieldRegistry | None = None,
    ) -> None:
        self.cache = cache if cache is not None else default_cache
        self.registry = registry if registry is not None else default_registry

    def resolve(self, shape: QueryShape, sort: PageSort) -> ResolvedTarget:
        """Resolve one directive to exactly one ordering target.

        :param shape: Shape of the statement being sorted.
        :type shape: QueryShape
        :param sort: Directive to resolve.
        :type sort: PageSort
        :returns: The resolved target (possibly from cache).
        :rtype: ResolvedTarget
        :raises PaginationError: ``AMBIGUOUS_SORT_FIELD`` when more than one
            alias or column matches, ``INVALID_SORT_DIRECTIVE`` when the
            qualifier or field is unknown.
        """
        target = self._resolve_alias(shape, sort)
        if target is not None:
            return target
        return self._resolve_column(shape, sort)

    # ------------------------------ Aliases ----------------------------------

    def _resolve_alias(self, shape: QueryShape, sort: PageSort) -> ResolvedTarget | None:
        if not shape.aliases:
            return None
        key = alias_cache_key(shape, sort)
        try:
            return self.cache.get_or_compute(key, lambda: self._scan_aliases(shape, sort))
        except _NoAliasMatch:
            return None

    @staticmethod
    def _scan_aliases(shape: QueryShape, sort: PageSort) -> ResolvedTarget:
        matches = shape.find_aliases(sort.field)
        if not matches:
            raise _NoAliasMatch()
        if len(matches) > 1:
            names = ", ".join(_describe_alias(name, expr) for name, expr in matches)
            raise PaginationError.ambiguous_sort_field(
                sort, f"'{sort.field}' matches aliases: {names}"
            )
        name, _ = matches[0]
        log.debug("Expression alias matched. %s", name, extra={"sort_field": sort.field})
        return ResolvedTarget(kind=TargetKind.ALIAS, name=name)

    # ------------------------------ Columns ----------------------------------

    def _resolve_column(self, shape: QueryShape, sort: PageSort) -> ResolvedTarget:
        key = column_cache_key(shape, sort)
        return self.cache.get_or_compute(key, lambda: self._scan_tables(shape, sort))

    def _scan_tables(self, shape: QueryShape, sort: PageSort) -> ResolvedTarget:
        candidates = self._target_tables(shape, sort)

        matches: list[tuple[FromClause, ColumnElement[Any]]] = []
        for from_ in candidates:
            for col in self.registry.lookup(_base_table(from_), sort.field):
                if not any(f is from_ and c is col for f, c in matches):
                    matches.append((from_, col))

        if not matches:
            raise PaginationError.invalid_sort_directive(sort, "Field not found in query tables.")
        if len(matches) > 1:
            owners = ", ".join(table_name(from_) for from_, _ in matches)
            raise PaginationError.ambiguous_sort_field(sort, f"'{sort.field}' found in: {owners}")

        from_, col = matches[0]
        owner = table_name(from_)
        log.debug("Column matched. %s::%s", owner, col.key, extra={"sort_field": sort.field})
        return ResolvedTarget(kind=TargetKind.COLUMN, name=col.key, table=owner)

    @staticmethod
    def _target_tables(shape: QueryShape, sort: PageSort) -> tuple[FromClause, ...]:
        if sort.table is None:
            return shape.tables
        wanted = sort.table.lower()
        tables = tuple(from_ for from_ in shape.tables if table_name(from_).lower() == wanted)
        if not tables:
            raise PaginationError.invalid_sort_directive(
                sort, f"'{sort.table}' is not recognized as part of the query tables."
            )
        return tables


def _describe_alias(name: str, expr: ColumnElement[Any]) -> str:
    table = getattr(expr, "table", None)
    owner = getattr(table, "name", None)
    return f"{owner}.{name}" if owner else name


# -------------------------------- Cache keys ---------------------------------


def column_cache_key(shape: QueryShape, sort: PageSort) -> str:
    """Key for table-column resolutions.

    Example: ``"departments::employees=employees.firstname"``.
    """
    tables = TABLE_KEY_SEPARATOR.join(sorted(name.lower() for name in shape.table_names))
    qualifier = sort.table.lower() if sort.table else ""
    return f"{tables}={qualifier}.{sort.field.lower()}"


def alias_cache_key(shape: QueryShape, sort: PageSort) -> str:
    """Key for expression-alias resolutions: alias-set digest plus field."""
    names = "\x1f".join(sorted(name.lower() for name, _ in shape.aliases))
    digest = hashlib.sha1(names.encode("utf-8")).hexdigest()
    return f"{ALIAS_KEY_PREFIX}{digest}={sort.field.lower()}"


default_cache: ResolutionCache[ResolvedTarget] = ResolutionCache()
default_registry = FieldRegistry()


__all__ = [
    "ColumnResolver",
    "FieldRegistry",
    "QueryShape",
    "ResolvedTarget",
    "TargetKind",
    "alias_cache_key",
    "column_cache_key",
    "default_cache",
    "default_registry",
    "table_name",
]
