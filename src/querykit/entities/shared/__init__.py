"""Shared utilities for the query builder.

``sql_client`` is not re-exported here so that importing the builder
never loads the ODBC driver.
"""

from .errors import InvalidConfigurationError
from .protocols import Database
from .substitution import inline_parameters, to_qmark

__all__ = [
    "Database",
    "InvalidConfigurationError",
    "inline_parameters",
    "to_qmark",
]
