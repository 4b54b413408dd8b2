"""Fluent SQL statement assembler.

``QueryBuilder`` accumulates clause fragments and bound values, then
renders a ``SELECT`` statement with 1-indexed ``$N`` placeholders next to
the ordered parameter list a driver expects.

No SQL is validated and no identifier is escaped. Column, table and raw
condition arguments are trusted caller input; only values go through the
parameter list.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, TypeVar

from pydantic import BaseModel

from querykit.entities.shared.errors import InvalidConfigurationError
from querykit.entities.shared.substitution import inline_parameters
from querykit.models import NamedFilter, PaginatedResults, PaginationRequest, SearchRequest

from .pagination import BuilderConfig, extract_paginated_results, pagination_columns

logger = logging.getLogger(__name__)

_DEFAULT_JOIN_TYPE = "AND"

_ModelT = TypeVar("_ModelT", bound=BaseModel)


@dataclass(frozen=True, slots=True)
class RenderedQuery:
    """A rendered statement and the values its placeholders refer to.

    Unpacks as a pair: ``sql, params = builder.sql()``.

    Attributes:
        sql: SQL text with ``$N`` placeholders.
        params: Bound values; ``$N`` refers to ``params[N-1]``.
    """

    sql: str
    params: list[Any] = field(default_factory=list)

    def __iter__(self) -> Iterator[Any]:
        yield self.sql
        yield self.params


def _coerce(model: type[_ModelT], value: _ModelT | Mapping[str, Any] | None) -> _ModelT | None:
    """Accept a model instance, a plain mapping, or ``None``."""
    if value is None or isinstance(value, model):
        return value
    return model.model_validate(value)


def _as_list(values: Any) -> list[Any]:
    if isinstance(values, (list, tuple, set, frozenset)):
        return list(values)
    return [values]


def _qualify(column: str, alias: str | None) -> str:
    return f"{alias}.{column}" if alias else column


class QueryBuilder:
    """Mutable accumulator for one ``SELECT`` statement.

    Every clause method mutates the builder and returns it, so calls chain::

        sql, params = (
            QueryBuilder()
            .select("id")
            .from_("users")
            .where_equals("status", "active")
            .where_gt("age", 18)
            .sql()
        )

    A builder is not thread-safe; use one instance per statement.
    """

    def __init__(self) -> None:
        self.columns: list[str] = []
        self.tables: list[str] = []
        self.joins: list[str] = []
        self.predicates: list[str] = []
        self.groups: list[str] = []
        self.sorts: list[str] = []
        self._limit: str | None = None
        self._offset: str | None = None

        self.params: list[Any] = []

        self.paginated = False
        self.include_metadata = False
        self.config = BuilderConfig()

    # ------------------------------------------------------------------
    # Parameter registry
    # ------------------------------------------------------------------

    def add_param(self, value: Any) -> str:
        """Bind ``value`` and return its placeholder."""
        self.params.append(value)
        return f"${len(self.params)}"

    def add_params(self, values: Iterable[Any] | None) -> list[str]:
        """Bind each value in order and return their placeholders."""
        if not values:
            return []
        return [self.add_param(value) for value in values]

    # ------------------------------------------------------------------
    # Clause accumulators
    # ------------------------------------------------------------------

    def select(self, column: str, alias: str | None = None) -> QueryBuilder:
        self.columns.append(f"{column} AS {alias}" if alias else column)
        return self

    def select_distinct(self, column: str, alias: str | None = None) -> QueryBuilder:
        return self.select(f"DISTINCT {column}", alias)

    def select_distinct_on(self, on_column: str, column: str, alias: str | None = None) -> QueryBuilder:
        return self.select(f"DISTINCT ON ({on_column}) {column}", alias)

    def from_(self, table: str, alias: str | None = None) -> QueryBuilder:
        """Add a source table. Several tables render as a comma-joined list."""
        self.tables.append(f"{table} {alias}" if alias else table)
        return self

    def join(self, table: str, on_clause: str, alias: str | None = None) -> QueryBuilder:
        return self._join(table, on_clause, alias)

    def left_join(self, table: str, on_clause: str, alias: str | None = None) -> QueryBuilder:
        return self._join(table, on_clause, alias, "LEFT")

    def right_join(self, table: str, on_clause: str, alias: str | None = None) -> QueryBuilder:
        return self._join(table, on_clause, alias, "RIGHT")

    def _join(
        self,
        table: str,
        on_clause: str,
        alias: str | None = None,
        join_kind: str | None = None,
    ) -> QueryBuilder:
        target = f"{table} {alias}" if alias else table
        prefix = f"{join_kind} " if join_kind else ""
        self.joins.append(f"{prefix}JOIN {target} ON ({on_clause})")
        return self

    def group_by(self, column: str) -> QueryBuilder:
        self.groups.append(column)
        return self

    def order_by(self, column: str, direction: str | None = None, alias: str | None = None) -> QueryBuilder:
        """Append a sort expression, optionally qualified with a table alias."""
        qualified = _qualify(column, alias)
        self.sorts.append(f"{qualified} {direction}" if direction else qualified)
        return self

    sort = order_by

    def _rebind(self, token: str | None, value: Any) -> str:
        """Overwrite the value behind ``token``, or bind a new one."""
        if token is None:
            return self.add_param(value)
        self.params[int(token[1:]) - 1] = value
        return token

    def limit(self, value: Any) -> QueryBuilder:
        """Set the row limit. Calling again replaces the bound value in place."""
        self._limit = self._rebind(self._limit, value)
        return self

    def offset(self, value: Any) -> QueryBuilder:
        """Set the row offset. Calling again replaces the bound value in place."""
        self._offset = self._rebind(self._offset, value)
        return self

    def page(self, page_number: int, per_page: int) -> QueryBuilder:
        """Window the result to one page.

        Binds the computed offset, then ``per_page`` as the limit. Values
        are not range-checked: a page below 1 yields a negative offset.
        A window set earlier keeps its placeholders and gets the new values.
        """
        self._offset = self._rebind(self._offset, (page_number - 1) * per_page)
        self._limit = self._rebind(self._limit, per_page)
        return self

    # ------------------------------------------------------------------
    # Predicate composer
    # ------------------------------------------------------------------

    def _append_predicate(self, condition: str, join_type: str | None = None) -> QueryBuilder:
        # The first predicate never carries a keyword; later ones default to AND.
        if self.predicates:
            self.predicates.append(f"{join_type or _DEFAULT_JOIN_TYPE} {condition}")
        else:
            self.predicates.append(condition)
        return self

    def _compare(self, column: str, operator: str, value: Any, join_type: str | None) -> QueryBuilder:
        token = self.add_param(value)
        return self._append_predicate(f"{column} {operator} {token}", join_type)

    def where(self, condition: str, join_type: str | None = None) -> QueryBuilder:
        """Append raw condition text verbatim.

        Nothing is bound here; use ``add_param`` for any value the text
        refers to before calling.
        """
        return self._append_predicate(condition, join_type)

    def where_equals(self, column: str, value: Any, join_type: str | None = None) -> QueryBuilder:
        return self._compare(column, "=", value, join_type)

    def where_not_equals(self, column: str, value: Any, join_type: str | None = None) -> QueryBuilder:
        return self._compare(column, "!=", value, join_type)

    def where_gt(self, column: str, value: Any, join_type: str | None = None) -> QueryBuilder:
        return self._compare(column, ">", value, join_type)

    def where_gte(self, column: str, value: Any, join_type: str | None = None) -> QueryBuilder:
        return self._compare(column, ">=", value, join_type)

    def where_lt(self, column: str, value: Any, join_type: str | None = None) -> QueryBuilder:
        return self._compare(column, "<", value, join_type)

    def where_lte(self, column: str, value: Any, join_type: str | None = None) -> QueryBuilder:
        return self._compare(column, "<=", value, join_type)

    def where_is_not(self, column: str, value: Any, join_type: str | None = None) -> QueryBuilder:
        return self._compare(column, "IS NOT", value, join_type)

    def where_is_true(self, column: str, join_type: str | None = None) -> QueryBuilder:
        return self.where_equals(column, True, join_type)

    def where_is_false(self, column: str, join_type: str | None = None) -> QueryBuilder:
        return self.where_equals(column, False, join_type)

    def where_like(
        self,
        column: str,
        value: Any,
        join_type: str | None = None,
        ignore_case: bool = True,
    ) -> QueryBuilder:
        """Substring match: ``value`` is bound wrapped in ``%`` wildcards."""
        token = self.add_param(f"%{value}%")
        if ignore_case:
            return self._append_predicate(f"LOWER({column}) LIKE LOWER({token})", join_type)
        return self._append_predicate(f"{column} LIKE {token}", join_type)

    def where_between(self, column: str, low: Any, high: Any, join_type: str | None = None) -> QueryBuilder:
        return self._between(column, low, high, join_type, negate=False)

    def where_not_between(self, column: str, low: Any, high: Any, join_type: str | None = None) -> QueryBuilder:
        return self._between(column, low, high, join_type, negate=True)

    def _between(self, column: str, low: Any, high: Any, join_type: str | None, *, negate: bool) -> QueryBuilder:
        low_token = self.add_param(low)
        high_token = self.add_param(high)
        keyword = "NOT BETWEEN" if negate else "BETWEEN"
        return self._append_predicate(f"{column} {keyword} {low_token} AND {high_token}", join_type)

    def where_includes(self, column: str, values: Sequence[Any], join_type: str | None = None) -> QueryBuilder:
        """Match rows whose scalar ``column`` equals any one of ``values``.

        An empty ``values`` renders ``column IN ()``, which matches nothing.
        """
        tokens = self.add_params(values)
        return self._append_predicate(f"{column} IN ({', '.join(tokens)})", join_type)

    def search(
        self,
        search_request: SearchRequest | Mapping[str, Any] | None,
        search_columns: str | Sequence[str] | None,
        ignore_case: bool = True,
    ) -> QueryBuilder:
        """Match ``search_request.query`` as a substring of any search column.

        One ``%query%`` value is bound and its placeholder is shared by
        every column in a single OR group.

        Raises:
            InvalidConfigurationError: A query was given but no usable
                search column (blank and ``None`` entries are ignored).
        """
        request = _coerce(SearchRequest, search_request)
        if request is None or not request.query:
            return self

        columns = [search_columns] if isinstance(search_columns, str) else list(search_columns or [])
        # Blank and None entries are not usable column names.
        columns = [column for column in columns if column]
        if not columns:
            raise InvalidConfigurationError("search() requires at least one search column")

        self.config.search = request
        token = self.add_param(f"%{request.query}%")
        if ignore_case:
            clauses = [f"LOWER({column}) LIKE LOWER({token})" for column in columns]
        else:
            clauses = [f"{column} LIKE {token}" for column in columns]
        return self._append_predicate(f"({' OR '.join(clauses)})")

    def filter(self, filter_map: Mapping[str, Any] | None, column_alias: str | None = None) -> QueryBuilder:
        """Restrict each column to a set of accepted values.

        A ``None`` in a column's list also matches SQL ``NULL``; it is not
        bound as a value. All columns are ANDed into one predicate.
        """
        if not filter_map:
            return self

        groups: list[str] = []
        for column, raw_values in filter_map.items():
            values = _as_list(raw_values)
            qualified = _qualify(column, column_alias)
            present = [value for value in values if value is not None]
            match_null = len(present) != len(values)

            parts: list[str] = []
            if present or not match_null:
                parts.append(f"{qualified} IN ({', '.join(self.add_params(present))})")
            if match_null:
                parts.append(f"{qualified} IS NULL")
            groups.append(f"({' OR '.join(parts)})")

            self.config.filter[column] = values

        return self._append_predicate(f"({' AND '.join(groups)})")

    def between_column_values(
        self,
        named_filter: NamedFilter | Mapping[str, Any] | None,
        min_column: str,
        max_column: str,
        column_alias: str | None = None,
    ) -> QueryBuilder:
        """Require ``min_column <= value <= max_column`` for the filter's value."""
        named = _coerce(NamedFilter, named_filter)
        if named is None or not named.value:
            return self

        self._compare(_qualify(min_column, column_alias), "<=", named.value, None)
        self._compare(_qualify(max_column, column_alias), ">=", named.value, _DEFAULT_JOIN_TYPE)
        self.config.filter[named.name] = named.value
        return self

    def filter_array(
        self,
        filter_arrays: Mapping[str, Any] | None,
        column_alias: str | None = None,
        match_null: bool = False,
    ) -> QueryBuilder:
        """Require array columns to contain **all** of the listed values.

        Unlike ``where_includes`` (scalar column is one of the values), each
        value here must be an element of the array. With ``match_null``, a
        row whose array is ``NULL`` or holds a ``NULL`` element also matches.
        Each column becomes its own predicate; columns with no values are
        skipped.
        """
        for column, raw_values in (filter_arrays or {}).items():
            values = _as_list(raw_values)
            if not values:
                continue
            qualified = _qualify(column, column_alias)

            clauses = [f"array_position({qualified}, {self.add_param(value)}) IS NOT NULL" for value in values]
            expression = " AND ".join(clauses)
            if match_null:
                expression = (
                    f"({expression}) OR "
                    f"(array_position({qualified}, NULL) IS NOT NULL OR {qualified} IS NULL)"
                )
            self._append_predicate(f"({expression})")
            self.config.filter[column] = values
        return self

    # ------------------------------------------------------------------
    # Pagination
    # ------------------------------------------------------------------

    def pagination(
        self,
        pagination_request: PaginationRequest | Mapping[str, Any] | None,
        count_column: str | None = None,
        sort_alias: str | None = None,
    ) -> QueryBuilder:
        """Apply a pagination request: page window, sort, and metadata columns.

        Only the first call with a request has any effect.
        """
        request = _coerce(PaginationRequest, pagination_request)
        if self.paginated or request is None:
            return self

        self.config.pagination = request
        if request.page is not None and request.per is not None:
            self.page(request.page, request.per)
        if request.sort_by:
            self.sort(request.sort_by, request.sort_dir, sort_alias)
        if request.include_metadata and count_column:
            self.pagination_counts(count_column, request)

        self.paginated = True
        return self

    def pagination_counts(
        self,
        count_column: str,
        pagination_request: PaginationRequest | Mapping[str, Any] | None,
    ) -> QueryBuilder:
        """Inject the reserved page/total metadata columns into the SELECT list.

        Only the first call with a request has any effect.
        """
        request = _coerce(PaginationRequest, pagination_request)
        if self.include_metadata or request is None:
            return self

        if self.config.pagination is None:
            self.config.pagination = request
        page_token = self.add_param(request.page)
        per_token = self.add_param(request.per)
        for expression, alias in pagination_columns(count_column, page_token, per_token):
            self.select(expression, alias)

        self.include_metadata = True
        return self

    def extract_paginated_results(self, rows: Sequence[Mapping[str, Any]]) -> PaginatedResults:
        """Strip the metadata columns out of ``rows`` into a ``PaginationMeta``."""
        return extract_paginated_results(rows, self.config)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def sql(self) -> RenderedQuery:
        """Render the statement. Does not modify the builder."""
        parts = [f"SELECT {', '.join(self.columns) or '*'}"]
        if self.tables:
            parts.append(f"FROM {', '.join(self.tables)}")
        parts.extend(self.joins)
        if self.predicates:
            parts.append(f"WHERE {' '.join(self.predicates)}")
        if self.groups:
            parts.append(f"GROUP BY {', '.join(self.groups)}")
        if self.sorts:
            parts.append(f"ORDER BY {', '.join(self.sorts)}")
        if self._offset:
            parts.append(f"OFFSET {self._offset}")
        if self._limit:
            parts.append(f"LIMIT {self._limit}")

        logger.debug("Rendered query with %d params", len(self.params))
        return RenderedQuery(sql=" ".join(parts), params=list(self.params))

    def display_sql(self) -> str:
        """Render with bound values inlined as literals. For logs only."""
        rendered = self.sql()
        return inline_parameters(rendered.sql, rendered.params)
