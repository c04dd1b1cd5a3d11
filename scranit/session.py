"""
Active reference location, kept per client session.

Exactly one reference point is active at a time: the user's reported
coordinate once geolocation succeeds, otherwise the configured fallback.
The session also remembers the last query so its results can be searched
again when the reference point moves. Only the query text is kept: the
session lives in a signed cookie, which browsers cap at 4096 bytes.
"""
from __future__ import annotations

from typing import Any, MutableMapping

from .catalog.config import DEFAULT_CATALOG_CONFIG, CatalogConfig
from .models import ReferenceLocation

LOCATED_MESSAGE = "Location found. Search for a type of food."
FALLBACK_MESSAGE = "Using default area. Enable location for results near you."
UNSUPPORTED_MESSAGE = "Location not supported. Showing default area."

_REFERENCE_KEY = "reference"
_QUERY_KEY = "last_query"


def fallback_reference(config: CatalogConfig = DEFAULT_CATALOG_CONFIG) -> ReferenceLocation:
    return ReferenceLocation(lat=config.fallback_lat, lng=config.fallback_lng, source="fallback")


def resolve_reference(
    session: MutableMapping[str, Any],
    config: CatalogConfig = DEFAULT_CATALOG_CONFIG,
) -> ReferenceLocation:
    raw = session.get(_REFERENCE_KEY)
    if raw:
        return ReferenceLocation(lat=raw["lat"], lng=raw["lng"], source="user")
    return fallback_reference(config)


def set_user_reference(session: MutableMapping[str, Any], lat: float, lng: float) -> ReferenceLocation:
    session[_REFERENCE_KEY] = {"lat": lat, "lng": lng}
    return ReferenceLocation(lat=lat, lng=lng, source="user")


def clear_user_reference(session: MutableMapping[str, Any]) -> None:
    session.pop(_REFERENCE_KEY, None)


def remember_query(session: MutableMapping[str, Any], query: str) -> None:
    session[_QUERY_KEY] = query


def last_query(session: MutableMapping[str, Any]) -> str:
    return session.get(_QUERY_KEY) or ""
