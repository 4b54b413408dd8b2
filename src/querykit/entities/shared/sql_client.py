"""
ODBC database client for executing rendered queries.

This module provides an async ``Database`` implementation over aioodbc,
optionally authenticating to Azure Database for PostgreSQL with a
Microsoft Entra (Azure AD) access token.
"""

import logging
from typing import Any

import aioodbc
from azure.identity import DefaultAzureCredential

from querykit.config import Settings, get_settings

from .substitution import to_qmark

logger = logging.getLogger(__name__)

_POSTGRES_TOKEN_SCOPE = "https://ossrdbms-aad.database.windows.net/.default"


def get_azure_postgres_token(client_id: str | None = None) -> str:
    """
    Get an Azure AD token for Azure Database for PostgreSQL.

    The server accepts the raw token as the connection password.

    Args:
        client_id: User-assigned managed identity client ID, if any.

    Returns:
        The access token string
    """
    logger.info("Getting PostgreSQL token, client_id=%s", client_id)

    if client_id:
        credential = DefaultAzureCredential(managed_identity_client_id=client_id)
    else:
        credential = DefaultAzureCredential()

    token = credential.get_token(_POSTGRES_TOKEN_SCOPE)
    logger.info("Token acquired, expires_on=%s", token.expires_on)
    return token.token


class OdbcDatabase:
    """
    Async context manager satisfying the ``Database`` protocol.

    Usage:
        async with OdbcDatabase() as db:
            row = await db.find_one("SELECT id FROM users WHERE id = $1", [7])
    """

    def __init__(self, connection_string: str | None = None, settings: Settings | None = None):
        """
        Initialize the client.

        Args:
            connection_string: Full ODBC connection string. Defaults to the
                ``SQL_CONNECTION_STRING`` setting, or one assembled from
                ``SQL_DRIVER``, ``SQL_SERVER`` and ``SQL_DATABASE``.
            settings: Settings override; defaults to ``get_settings()``.
        """
        self.settings = settings or get_settings()
        self.connection_string = connection_string or self._build_connection_string()
        self._connection: aioodbc.Connection | None = None

    def _build_connection_string(self) -> str:
        if self.settings.sql_connection_string:
            return self.settings.sql_connection_string
        if not self.settings.sql_server:
            return ""
        return (
            f"DRIVER={{{self.settings.sql_driver}}};"
            f"SERVER={self.settings.sql_server};"
            f"DATABASE={self.settings.sql_database};"
        )

    async def __aenter__(self):
        """Establish the database connection."""
        if not self.connection_string:
            raise ValueError("SQL_CONNECTION_STRING or SQL_SERVER environment variable is required")

        dsn = self.connection_string
        if self.settings.use_azure_ad_auth:
            token = get_azure_postgres_token(self.settings.azure_client_id)
            dsn = self._with_token(dsn, token)

        self._connection = await aioodbc.connect(dsn=dsn)
        return self

    def _with_token(self, dsn: str, token: str) -> str:
        if not dsn.endswith(";"):
            dsn += ";"
        if self.settings.sql_user:
            dsn += f"UID={self.settings.sql_user};"
        return f"{dsn}PWD={token};"

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Close the database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

    async def find_one(self, query: str, params: list[Any]) -> dict[str, Any] | None:
        """Execute a query and return its first row, or ``None``."""
        rows = await self._fetch(query, params, limit=1)
        return rows[0] if rows else None

    async def find_many(self, query: str, params: list[Any]) -> list[dict[str, Any]]:
        """Execute a query and return every row."""
        return await self._fetch(query, params)

    async def _fetch(
        self,
        query: str,
        params: list[Any],
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        if not self._connection:
            raise RuntimeError("Database connection not established. Use 'async with' context manager.")

        exec_sql, exec_params = to_qmark(query, params)
        logger.debug("Executing SQL query: %s", exec_sql[: self.settings.sql_log_max_chars])

        try:
            async with self._connection.cursor() as cursor:
                await cursor.execute(exec_sql, exec_params)
                columns = [column[0] for column in cursor.description] if cursor.description else []
                if limit is None:
                    raw_rows = await cursor.fetchall()
                else:
                    raw_rows = await cursor.fetchmany(limit)
        except Exception:
            logger.exception("SQL execution error")
            raise

        rows = [dict(zip(columns, row)) for row in raw_rows]
        logger.debug("Query executed successfully. Returned %d rows.", len(rows))
        return rows
