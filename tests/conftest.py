"""Shared test fixtures for querykit."""

import sys
from pathlib import Path
from typing import Any

import pytest

# Ensure src/ is on the path for imports without an editable install
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from querykit.config.settings import Settings
from querykit.entities.query_builder import QueryBuilder

# ---------------------------------------------------------------------------
# Protocol fakes
# ---------------------------------------------------------------------------


class FakeDatabase:
    """In-memory fake satisfying the ``Database`` protocol.

    Returns canned rows or raises a canned error, and records every call.
    """

    def __init__(
        self,
        rows: list[dict[str, Any]] | None = None,
        error: Exception | None = None,
    ) -> None:
        self.rows: list[dict[str, Any]] = rows or []
        self.error: Exception | None = error
        self.calls: list[tuple[str, str, list[Any]]] = []

    async def find_one(self, query: str, params: list[Any]) -> dict[str, Any] | None:
        """Return the first canned row, or raise the canned error."""
        self.calls.append(("find_one", query, params))
        if self.error:
            raise self.error
        return self.rows[0] if self.rows else None

    async def find_many(self, query: str, params: list[Any]) -> list[dict[str, Any]]:
        """Return a copy of the canned rows, or raise the canned error."""
        self.calls.append(("find_many", query, params))
        if self.error:
            raise self.error
        return [dict(row) for row in self.rows]


# ---------------------------------------------------------------------------
# Pytest fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def test_settings() -> Settings:
    """Return a ``Settings`` instance populated with safe test defaults."""
    return Settings(
        sql_connection_string="DRIVER={PostgreSQL Unicode};SERVER=localhost;DATABASE=test;",
        sql_log_max_chars=500,
        log_display_sql=False,
    )


@pytest.fixture
def builder() -> QueryBuilder:
    """Return an empty ``QueryBuilder``."""
    return QueryBuilder()


@pytest.fixture
def fake_database() -> FakeDatabase:
    """Return an empty ``FakeDatabase`` instance."""
    return FakeDatabase()


@pytest.fixture
def make_database() -> type[FakeDatabase]:
    """Return the ``FakeDatabase`` class for tests that need canned rows."""
    return FakeDatabase
