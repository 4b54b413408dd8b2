"""Query executor.

Runs a rendered ``QueryBuilder`` against a ``Database`` and, for
paginated reads, post-processes rows into ``PaginatedResults``.
"""

from __future__ import annotations

import logging
from typing import Any

from querykit.config import Settings, get_settings
from querykit.entities.shared.protocols import Database
from querykit.models import PaginatedResults

from .builder import QueryBuilder

logger = logging.getLogger(__name__)


class QueryExecutor:
    """Executes builders against a database.

    Database failures are logged and re-raised unchanged; there is no
    retry and no partial result.

    Args:
        database: Any object satisfying the ``Database`` protocol.
        settings: Settings override; defaults to ``get_settings()``.
    """

    def __init__(self, database: Database, settings: Settings | None = None) -> None:
        self._database = database
        self._settings = settings or get_settings()

    def _log_query(self, builder: QueryBuilder, sql: str) -> None:
        limit = self._settings.sql_log_max_chars
        if self._settings.log_display_sql:
            logger.info("Executing SQL query: %s", builder.display_sql()[:limit])
        else:
            logger.info("Executing SQL query: %s", sql[:limit])

    async def find_one(self, builder: QueryBuilder) -> dict[str, Any] | None:
        """Execute ``builder`` and return the first row, or ``None``.

        Args:
            builder: A fully configured builder.

        Returns:
            The first matching row.
        """
        sql, params = builder.sql()
        self._log_query(builder, sql)
        try:
            return await self._database.find_one(sql, params)
        except Exception:
            logger.exception("find_one failed")
            raise

    async def find_many(self, builder: QueryBuilder) -> list[dict[str, Any]] | PaginatedResults:
        """Execute ``builder`` and return every row.

        When the builder injected pagination metadata columns, the rows are
        split into results and metadata via
        ``QueryBuilder.extract_paginated_results``.

        Args:
            builder: A fully configured builder.

        Returns:
            The rows, or ``PaginatedResults`` for a metadata-carrying query.
        """
        sql, params = builder.sql()
        self._log_query(builder, sql)
        try:
            rows = await self._database.find_many(sql, params)
        except Exception:
            logger.exception("find_many failed")
            raise

        logger.info("Query returned %d rows", len(rows))
        if builder.include_metadata:
            return builder.extract_paginated_results(rows)
        return rows
