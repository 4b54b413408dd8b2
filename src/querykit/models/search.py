"""
Search and named-filter request models.
"""

from typing import Any

from pydantic import BaseModel, Field


class SearchRequest(BaseModel):
    """Free-text search request. An empty ``query`` disables search."""

    query: str | None = Field(
        default=None,
        description="Text to match with LIKE across the search columns"
    )


class NamedFilter(BaseModel):
    """A single named value, compared against a min/max column pair."""

    name: str = Field(description="Key the value is reported under")
    value: Any = Field(default=None, description="Value that must fall inside the column range")
