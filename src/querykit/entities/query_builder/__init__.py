"""Query Builder package for parameterized SQL assembly."""

from .builder import QueryBuilder, RenderedQuery
from .executor import QueryExecutor
from .pagination import PAGINATION_ALIASES, BuilderConfig, extract_paginated_results

__all__ = [
    "PAGINATION_ALIASES",
    "BuilderConfig",
    "QueryBuilder",
    "QueryExecutor",
    "RenderedQuery",
    "extract_paginated_results",
]
