"""Unit tests for QueryExecutor.

Tests cover:
- Rendered SQL and params being passed to the database unchanged
- Paginated reads being post-processed into PaginatedResults
- Database failures being logged and re-raised unchanged
"""

import logging

import pytest
from querykit.config.settings import Settings
from querykit.entities.query_builder import QueryBuilder, QueryExecutor
from querykit.entities.shared import Database
from querykit.models import PaginatedResults, PaginationRequest


def _users_query() -> QueryBuilder:
    return QueryBuilder().select("id").select("name").from_("users").where_equals("status", "active")


class TestFakeSatisfiesProtocol:
    """The conftest fake is a valid ``Database``."""

    def test_runtime_checkable(self, fake_database) -> None:
        assert isinstance(fake_database, Database)


class TestFindOne:
    """Tests for QueryExecutor.find_one."""

    async def test_passes_rendered_query(self, make_database, test_settings: Settings) -> None:
        database = make_database(rows=[{"id": 1, "name": "a"}])
        executor = QueryExecutor(database, test_settings)

        row = await executor.find_one(_users_query())

        assert row == {"id": 1, "name": "a"}
        assert database.calls == [
            ("find_one", "SELECT id, name FROM users WHERE status = $1", ["active"]),
        ]

    async def test_no_row(self, fake_database, test_settings: Settings) -> None:
        executor = QueryExecutor(fake_database, test_settings)
        assert await executor.find_one(_users_query()) is None


class TestFindMany:
    """Tests for QueryExecutor.find_many."""

    async def test_plain_rows_returned_as_is(self, make_database, test_settings: Settings) -> None:
        rows = [{"id": 1, "name": "a"}, {"id": 2, "name": "b"}]
        executor = QueryExecutor(make_database(rows=rows), test_settings)

        result = await executor.find_many(_users_query())

        assert result == rows

    async def test_paginated_rows_are_post_processed(self, make_database, test_settings: Settings) -> None:
        rows = [
            {
                "id": 1,
                "name": "a",
                "_pagination_page": 1,
                "_pagination_per_page": 2,
                "_pagination_num_pages": 3,
                "_pagination_total_items": 5,
            },
        ]
        database = make_database(rows=rows)
        builder = _users_query().pagination(
            PaginationRequest(page=1, per=2, include_metadata=True), count_column="id"
        )

        result = await QueryExecutor(database, test_settings).find_many(builder)

        assert isinstance(result, PaginatedResults)
        assert result.results == [{"id": 1, "name": "a"}]
        assert result.meta.total_items == 5
        assert result.meta.num_pages == 3
        _, sql, params = database.calls[0]
        assert "_pagination_total_items" in sql
        assert params == ["active", 0, 2, 1, 2]

    async def test_paginated_without_metadata_returns_rows(self, make_database, test_settings: Settings) -> None:
        rows = [{"id": 1, "name": "a"}]
        builder = _users_query().pagination(PaginationRequest(page=1, per=2))
        result = await QueryExecutor(make_database(rows=rows), test_settings).find_many(builder)
        assert result == rows


class TestUpstreamFailure:
    """Database errors are logged and re-raised unchanged."""

    @pytest.mark.parametrize("method", ["find_one", "find_many"])
    async def test_error_is_reraised(self, make_database, test_settings: Settings, caplog, method: str) -> None:
        error = ConnectionError("database unavailable")
        executor = QueryExecutor(make_database(error=error), test_settings)

        with caplog.at_level(logging.ERROR), pytest.raises(ConnectionError) as exc_info:
            await getattr(executor, method)(_users_query())

        assert exc_info.value is error
        assert f"{method} failed" in caplog.text


class TestQueryLogging:
    """Executed SQL is logged, optionally with values inlined."""

    async def test_logs_placeholder_sql(self, fake_database, test_settings: Settings, caplog) -> None:
        with caplog.at_level(logging.INFO, logger="querykit.entities.query_builder.executor"):
            await QueryExecutor(fake_database, test_settings).find_many(_users_query())
        assert "status = $1" in caplog.text
        assert "'active'" not in caplog.text

    async def test_logs_display_sql_when_enabled(self, fake_database, caplog) -> None:
        settings = Settings(log_display_sql=True)
        with caplog.at_level(logging.INFO, logger="querykit.entities.query_builder.executor"):
            await QueryExecutor(fake_database, settings).find_many(_users_query())
        assert "status = 'active'" in caplog.text

    async def test_log_is_truncated(self, fake_database, caplog) -> None:
        settings = Settings(sql_log_max_chars=10)
        with caplog.at_level(logging.INFO, logger="querykit.entities.query_builder.executor"):
            await QueryExecutor(fake_database, settings).find_many(_users_query())
        assert "Executing SQL query: SELECT id," in caplog.text
        assert "FROM users" not in caplog.text
