"""Query builder and database boundary."""
