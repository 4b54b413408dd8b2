"""Protocol interfaces for I/O boundaries.

These protocols enable dependency injection for testability.
The production implementation wraps an ODBC connection; test fakes
return canned rows with zero network access.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Database(Protocol):
    """Executes a parameterised SELECT and returns rows as dicts."""

    async def find_one(self, query: str, params: list[Any]) -> dict[str, Any] | None:
        """Execute a query and return its first row.

        Args:
            query: SQL statement with ``$N`` placeholders.
            params: Bind-parameter values; ``$N`` refers to ``params[N-1]``.

        Returns:
            The first row, or ``None`` when the query matched nothing.
        """
        ...

    async def find_many(self, query: str, params: list[Any]) -> list[dict[str, Any]]:
        """Execute a query and return every row.

        Args:
            query: SQL statement with ``$N`` placeholders.
            params: Bind-parameter values; ``$N`` refers to ``params[N-1]``.

        Returns:
            All rows, in the order the database produced them.
        """
        ...
