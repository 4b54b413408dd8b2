"""Pure-function placeholder rewriting and literal inlining.

This module is intentionally free of external dependencies (ODBC driver,
Azure SDK, etc.) so that it can be unit-tested without mocking.
"""

import re
from datetime import date, datetime
from typing import Any

_NUMERIC_PLACEHOLDER_RE: re.Pattern[str] = re.compile(r"\$(\d+)")


def to_qmark(query: str, params: list[Any]) -> tuple[str, list[Any]]:
    """Rewrite ``$N`` placeholders into ODBC ``?`` markers.

    ODBC binds ``?`` markers by their textual position, so the parameter
    list is rebuilt in the order the tokens appear. A token referenced
    more than once is bound once per occurrence.

    Args:
        query: SQL with 1-indexed ``$N`` placeholders.
        params: Values where ``$N`` refers to ``params[N-1]``.

    Returns:
        Tuple of (qmark_sql, ordered_params).

    Raises:
        IndexError: A placeholder refers past the end of ``params``.
    """
    ordered: list[Any] = []

    def _replace(match: re.Match[str]) -> str:
        index = int(match.group(1))
        if index < 1 or index > len(params):
            raise IndexError(f"Placeholder ${index} has no bound value ({len(params)} params)")
        ordered.append(params[index - 1])
        return "?"

    return _NUMERIC_PLACEHOLDER_RE.sub(_replace, query), ordered


def render_literal(value: Any) -> str:
    """Render a bound value as a SQL literal, for display only."""
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, (date, datetime)):
        return f"'{value.isoformat()}'"
    text = str(value).replace("'", "''")
    return f"'{text}'"


def inline_parameters(query: str, params: list[Any]) -> str:
    """Substitute every ``$N`` with a literal rendering of ``params[N-1]``.

    The result is for logging and UI display. It must never be executed.
    Tokens without a bound value are left untouched.
    """

    def _replace(match: re.Match[str]) -> str:
        index = int(match.group(1))
        if 1 <= index <= len(params):
            return render_literal(params[index - 1])
        return match.group(0)

    return _NUMERIC_PLACEHOLDER_RE.sub(_replace, query)
