"""
Pagination request and result models.

These models describe a windowed read: what page the caller asked for,
and the metadata computed by the database for that page.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class PaginationRequest(BaseModel):
    """
    A caller's request for one page of results.

    Accepts both snake_case and camelCase keys so payloads taken
    straight from an HTTP query string validate as-is.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    page: int | None = Field(
        default=None,
        description="1-based page number"
    )

    per: int | None = Field(
        default=None,
        description="Page size"
    )

    sort_by: str | None = Field(
        default=None,
        description="Column to sort by"
    )

    sort_dir: str | None = Field(
        default=None,
        description="Sort direction token, e.g. 'ASC' or 'DESC'"
    )

    include_metadata: bool = Field(
        default=False,
        description="Inject page/total metadata columns into the SELECT list"
    )


class PaginationMeta(BaseModel):
    """
    Metadata reported alongside a page of results.

    The numeric fields are ``None`` when the query returned no rows,
    since no computed aggregate is available.
    """

    page: int | None = None
    per: int | None = None
    num_pages: int | None = None
    total_items: int | None = None

    sort_by: str | None = None
    sort_dir: str | None = None
    search: str | None = None
    filter: dict[str, Any] = Field(default_factory=dict)


class PaginatedResults(BaseModel):
    """Rows with the pagination metadata columns stripped out."""

    results: list[dict[str, Any]] = Field(default_factory=list)
    meta: PaginationMeta = Field(default_factory=PaginationMeta)
