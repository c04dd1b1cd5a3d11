from __future__ import annotations


class SearchError(Exception):
    """Base class for search pipeline errors."""


class InvalidReference(SearchError, ValueError):
    """Reference latitude/longitude is missing, non-numeric or out of range."""


class CatalogUnavailable(SearchError):
    """The catalog backing file could not be read or parsed."""
