"""Centralized settings loaded from environment variables.

All configuration is defined once here. Other modules should import
``get_settings()`` rather than calling ``os.getenv()`` directly.
"""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Library-wide configuration backed by environment variables.

    Field names are **lowercased** versions of the env-var names.
    ``pydantic-settings`` maps them automatically (case-insensitive).

    Example::

        settings = Settings()  # reads .env + real env
        dsn = settings.sql_connection_string
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # -- Database ----------------------------------------------------------

    sql_connection_string: str = ""
    """Full ODBC connection string. Takes precedence over server/database."""

    sql_driver: str = "PostgreSQL Unicode"
    """ODBC driver name used when building a connection string."""

    sql_server: str = ""
    """Database server hostname."""

    sql_database: str = ""
    """Target database name."""

    sql_user: str = ""
    """Login role. Required with Azure AD auth unless the DSN already sets UID."""

    use_azure_ad_auth: bool = False
    """Send an Azure AD access token as the password (Azure Database for PostgreSQL)."""

    azure_client_id: str | None = None
    """Managed-identity client ID (None → system-assigned)."""

    # -- Logging -----------------------------------------------------------

    sql_log_max_chars: int = 200
    """Rendered SQL is truncated to this many characters in log lines."""

    log_display_sql: bool = False
    """Log SQL with bound values inlined. May leak sensitive data."""


def get_settings() -> Settings:
    """Return the shared ``Settings`` instance.

    Uses a module-level singleton so the ``.env`` file is read at most
    once per process.

    Returns:
        The global ``Settings`` object.
    """
    return _settings


_settings = Settings()
