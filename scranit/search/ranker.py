"""
Matcher & ranker.

Given a query and a reference point, filter the catalog frame to matching
venues, measure how far each one is and return them nearest first. Ties keep
catalog order, so the same inputs always give the same list.
"""
from __future__ import annotations

import math
from typing import Any, Iterable

import pandas as pd

from ..catalog.store import venue_fields
from ..geo import format_distance, haversine_miles
from ..models import ChainBrand, RankedResult
from .chains import resolve_terms
from .errors import InvalidReference

NEARBY_DEFAULT_MILES = 1.0
NEARBY_MIN_MILES = 0.1
NEARBY_MAX_MILES = 25.0
NEARBY_DEFAULT_LIMIT = 10
NEARBY_MAX_LIMIT = 20


def validate_reference(lat: Any, lng: Any) -> tuple[float, float]:
    """Return ``(lat, lng)`` as floats or raise ``InvalidReference``."""
    if lat is None or lng is None or isinstance(lat, bool) or isinstance(lng, bool):
        raise InvalidReference("lat and lng are required")
    try:
        lat_f = float(lat)
        lng_f = float(lng)
    except (TypeError, ValueError) as exc:
        raise InvalidReference("lat and lng must be numbers") from exc
    if not (math.isfinite(lat_f) and math.isfinite(lng_f)):
        raise InvalidReference("lat and lng must be finite")
    if not (-90.0 <= lat_f <= 90.0 and -180.0 <= lng_f <= 180.0):
        raise InvalidReference("lat must be within ±90 and lng within ±180")
    return lat_f, lng_f


def match_terms_mask(venues: pd.DataFrame, terms: list[str]) -> pd.Series:
    """Venues whose cuisine or any type contains at least one term."""
    mask = pd.Series(False, index=venues.index)
    for term in terms:
        if not term:
            continue
        mask = mask | venues["cuisine_lower"].str.contains(term, regex=False)
        mask = mask | venues["types_lower"].apply(
            lambda types, term=term: any(term in t for t in types)
        )
    return mask.astype(bool)


def match_query_mask(venues: pd.DataFrame, query: str) -> pd.Series:
    """Venues whose name, cuisine or joined types contain the raw query."""
    q = query.strip().lower()
    mask = (
        venues["name_lower"].str.contains(q, regex=False)
        | venues["cuisine_lower"].str.contains(q, regex=False)
        | venues["types_joined"].str.contains(q, regex=False)
    )
    return mask.astype(bool)


def _rank(candidates: pd.DataFrame, lat: float, lng: float) -> pd.DataFrame:
    ranked = candidates.copy()
    ranked["distance"] = haversine_miles(
        lat, lng, ranked["lat"].to_numpy(dtype=float), ranked["lng"].to_numpy(dtype=float)
    )
    return ranked.sort_values("distance", kind="stable")


def _to_results(ranked: pd.DataFrame) -> list[RankedResult]:
    results: list[RankedResult] = []
    for _, row in ranked.iterrows():
        distance = float(row["distance"])
        results.append(RankedResult(
            **venue_fields(row),
            distance=distance,
            distance_label=format_distance(distance),
        ))
    return results


def search(
    query: str,
    lat: Any,
    lng: Any,
    venues: pd.DataFrame,
    chains: Iterable[ChainBrand],
) -> list[RankedResult]:
    """Match ``query`` against the catalog and return results nearest first.

    A query naming a known chain is matched by the chain's cuisine and types
    rather than by name. An empty query returns an empty list.
    """
    lat_f, lng_f = validate_reference(lat, lng)

    if not (query or "").strip():
        return []
    if venues.empty:
        return []

    terms = resolve_terms(query, chains)
    if terms is not None:
        mask = match_terms_mask(venues, terms)
    else:
        mask = match_query_mask(venues, query)

    candidates = venues.loc[mask]
    if candidates.empty:
        return []
    return _to_results(_rank(candidates, lat_f, lng_f))


def clamp_max_miles(max_miles: Any) -> float:
    try:
        value = float(max_miles)
    except (TypeError, ValueError):
        value = NEARBY_DEFAULT_MILES
    if not math.isfinite(value) or value == 0:
        value = NEARBY_DEFAULT_MILES
    return min(max(value, NEARBY_MIN_MILES), NEARBY_MAX_MILES)


def clamp_limit(limit: Any) -> int:
    try:
        value = int(float(limit))
    except (TypeError, ValueError, OverflowError):
        value = NEARBY_DEFAULT_LIMIT
    if value == 0:
        value = NEARBY_DEFAULT_LIMIT
    return min(max(value, 1), NEARBY_MAX_LIMIT)


def nearby(
    lat: Any,
    lng: Any,
    venues: pd.DataFrame,
    max_miles: Any = NEARBY_DEFAULT_MILES,
    limit: Any = NEARBY_DEFAULT_LIMIT,
) -> list[RankedResult]:
    """Closest venues within ``max_miles``, at most ``limit`` of them."""
    lat_f, lng_f = validate_reference(lat, lng)
    radius = clamp_max_miles(max_miles)
    count = clamp_limit(limit)

    if venues.empty:
        return []
    ranked = _rank(venues, lat_f, lng_f)
    ranked = ranked.loc[ranked["distance"] <= radius]
    return _to_results(ranked.head(count))

