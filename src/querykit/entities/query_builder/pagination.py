"""Pagination metadata columns and result post-processing.

``pagination_columns`` produces the reserved SELECT expressions and
``extract_paginated_results`` strips them back out of returned rows. Both
sides read the aliases from ``PAGINATION_ALIASES`` so they cannot drift.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from querykit.models import PaginatedResults, PaginationMeta, PaginationRequest, SearchRequest

PAGE_ALIAS = "_pagination_page"
PER_PAGE_ALIAS = "_pagination_per_page"
NUM_PAGES_ALIAS = "_pagination_num_pages"
TOTAL_ITEMS_ALIAS = "_pagination_total_items"

PAGINATION_ALIASES: tuple[str, ...] = (
    PAGE_ALIAS,
    PER_PAGE_ALIAS,
    NUM_PAGES_ALIAS,
    TOTAL_ITEMS_ALIAS,
)


@dataclass(slots=True)
class BuilderConfig:
    """Requests a builder actually applied, kept for metadata reporting.

    Attributes:
        pagination: The pagination request, once ``pagination()`` or
            ``pagination_counts()`` ran.
        search: The search request, once ``search()`` added a predicate.
        filter: Every value passed to a filter-like call, keyed by column
            or filter name. Last write wins.
    """

    pagination: PaginationRequest | None = None
    search: SearchRequest | None = None
    filter: dict[str, Any] = field(default_factory=dict)


def pagination_columns(count_column: str, page_token: str, per_token: str) -> list[tuple[str, str]]:
    """Build the four reserved metadata expressions.

    Args:
        count_column: Column counted over the whole (unwindowed) result set.
        page_token: Placeholder bound to the requested page number.
        per_token: Placeholder bound to the requested page size.

    Returns:
        ``(expression, alias)`` pairs in ``PAGINATION_ALIASES`` order.
    """
    total = f"COUNT({count_column}) OVER()"
    return [
        (f"CAST({page_token} AS INTEGER)", PAGE_ALIAS),
        (f"CAST({per_token} AS INTEGER)", PER_PAGE_ALIAS),
        (f"CAST(CEIL({total} / CAST({per_token} AS NUMERIC)) AS INTEGER)", NUM_PAGES_ALIAS),
        (total, TOTAL_ITEMS_ALIAS),
    ]


def _as_int(value: Any) -> int | None:
    return None if value is None else int(value)


def extract_paginated_results(
    rows: Sequence[Mapping[str, Any]],
    config: BuilderConfig,
) -> PaginatedResults:
    """Split pagination metadata out of the rows of a paginated query.

    The metadata columns carry the same values on every row of one query,
    so only the first row is read. When ``rows`` is empty the numeric
    metadata is left as ``None`` rather than defaulted to zero.

    Args:
        rows: Rows returned for a query built with ``pagination_counts``.
        config: The builder's recorded pagination, search and filter state.

    Returns:
        A ``PaginatedResults`` whose rows no longer carry the reserved aliases.
    """
    pagination = config.pagination or PaginationRequest()
    meta = PaginationMeta(
        sort_by=pagination.sort_by,
        sort_dir=pagination.sort_dir,
        search=config.search.query if config.search else None,
        filter=dict(config.filter),
    )

    if rows:
        first = rows[0]
        meta.page = _as_int(first.get(PAGE_ALIAS))
        meta.per = _as_int(first.get(PER_PAGE_ALIAS))
        meta.num_pages = _as_int(first.get(NUM_PAGES_ALIAS))
        meta.total_items = _as_int(first.get(TOTAL_ITEMS_ALIAS))

    results = [
        {key: value for key, value in row.items() if key not in PAGINATION_ALIASES}
        for row in rows
    ]
    return PaginatedResults(results=results, meta=meta)
