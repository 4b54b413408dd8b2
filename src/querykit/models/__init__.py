"""
Request and result models for the query builder.

All models are re-exported here.
"""

from .pagination import PaginatedResults, PaginationMeta, PaginationRequest
from .search import NamedFilter, SearchRequest

__all__ = [
    # Pagination
    "PaginationRequest",
    "PaginationMeta",
    "PaginatedResults",
    # Search / filtering
    "SearchRequest",
    "NamedFilter",
]
