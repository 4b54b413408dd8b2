"""
querykit: a fluent, parameterized SQL statement assembler.

The ODBC-backed ``Database`` is imported explicitly so the driver loads only
when needed: ``from querykit.entities.shared.sql_client import OdbcDatabase``.
"""

from querykit.entities.query_builder import (
    PAGINATION_ALIASES,
    QueryBuilder,
    QueryExecutor,
    RenderedQuery,
)
from querykit.entities.shared import Database, InvalidConfigurationError
from querykit.models import (
    NamedFilter,
    PaginatedResults,
    PaginationMeta,
    PaginationRequest,
    SearchRequest,
)

__version__ = "0.1.0"

__all__ = [
    "PAGINATION_ALIASES",
    "Database",
    "InvalidConfigurationError",
    "NamedFilter",
    "PaginatedResults",
    "PaginationMeta",
    "PaginationRequest",
    "QueryBuilder",
    "QueryExecutor",
    "RenderedQuery",
    "SearchRequest",
]
