from __future__ import annotations

import logging
import os
import time

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from .analytics.aggregator import compute_analytics
from .analytics.store import get_events, record_event
from .catalog.store import catalog_version, get_venue_frame, load_chain_brands
from .models import (
    GeolocationReport,
    LocationResponse,
    NearbyResponse,
    ReferenceLocation,
    SearchResponse,
)
from .search.cache import cache_get, cache_set, get_cache_stats
from .search.chains import find_chain
from .search.errors import InvalidReference
from .search.ranker import (
    clamp_limit,
    clamp_max_miles,
    nearby,
    search,
    validate_reference,
)
from .session import (
    FALLBACK_MESSAGE,
    LOCATED_MESSAGE,
    UNSUPPORTED_MESSAGE,
    clear_user_reference,
    fallback_reference,
    last_query,
    remember_query,
    resolve_reference,
    set_user_reference,
)

logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
log = logging.getLogger("scranit")

NO_MATCH_MESSAGE = "No matches. Try another cuisine or dish."
MAX_QUERY_LENGTH = 200

app = FastAPI(title="Scran It API", version="1.0.0")
app.add_middleware(
    SessionMiddleware,
    secret_key=os.environ.get("SESSION_SECRET", "scranit-secret-change-in-production"),
)


# global JSON error handling
# - HTTPException -> { "error": <detail> }
# - any other exception -> { "error": "Server error" }
@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    log.warning("HTTP %s: %s", exc.status_code, exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    log.exception("Unhandled exception")
    return JSONResponse(status_code=500, content={"error": "Server error"})


def _results_message(query: str, count: int) -> str:
    if not query:
        return ""
    if count == 0:
        return NO_MATCH_MESSAGE
    return f"{count} locally owned restaurant{'s' if count != 1 else ''}"


def _request_reference(request: Request, lat: str | None, lng: str | None) -> ReferenceLocation:
    """Explicit lat/lng win; with neither given, use the session's active reference."""
    if lat is None and lng is None:
        return resolve_reference(request.session)
    try:
        lat_f, lng_f = validate_reference(lat, lng)
    except InvalidReference as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return ReferenceLocation(lat=lat_f, lng=lng_f, source="user")


def _cached_search(query: str, reference: ReferenceLocation) -> tuple[dict, bool]:
    """Run ``search`` through the result cache; returns ``(entry, cache_hit)``."""
    request_dict = {
        "q": query,
        "lat": reference.lat,
        "lng": reference.lng,
        "_catalog": catalog_version(),
    }
    cached = cache_get(request_dict)
    if cached is not None:
        return cached, True

    chains = load_chain_brands()
    chain = find_chain(query, chains) if query else None
    results = search(query, reference.lat, reference.lng, get_venue_frame(), chains)
    cached = {"results": results, "chain": chain.name if chain else None}
    cache_set(request_dict, cached)
    return cached, False


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/metadata")
def metadata() -> dict:
    df = get_venue_frame()
    cuisines = sorted({c for c in df["cuisine"].tolist() if c})
    return {
        "cuisines": cuisines,
        "venue_count": len(df),
        "chain_count": len(load_chain_brands()),
    }


# ── Search endpoints ─────────────────────────────────────────────────────


@app.get("/api/restaurants", response_model=SearchResponse)
def search_restaurants(
    request: Request,
    q: str = Query("", max_length=MAX_QUERY_LENGTH),
    lat: str | None = None,
    lng: str | None = None,
) -> SearchResponse:
    start_time = time.time()
    reference = _request_reference(request, lat, lng)
    query = q.strip()

    cached, cache_hit = _cached_search(query, reference)
    results = cached["results"]
    remember_query(request.session, query)

    elapsed_ms = round((time.time() - start_time) * 1000, 1)
    record_event("search", {
        "query": query,
        "chain": cached["chain"],
        "reference_source": reference.source,
        "results_returned": len(results),
        "response_time_ms": elapsed_ms,
        "cache_hit": cache_hit,
    })

    return SearchResponse(
        query=query,
        reference=reference,
        results=results,
        count=len(results),
        message=_results_message(query, len(results)),
        chain=cached["chain"],
    )


@app.get("/api/restaurants/nearby", response_model=NearbyResponse)
def nearby_restaurants(
    lat: str | None = None,
    lng: str | None = None,
    maxMiles: str | None = None,
    limit: str | None = None,
) -> NearbyResponse:
    try:
        lat_f, lng_f = validate_reference(lat, lng)
    except InvalidReference as exc:
        raise HTTPException(status_code=400, detail="lat and lng are required") from exc

    radius = clamp_max_miles(maxMiles)
    count = clamp_limit(limit)
    results = nearby(lat_f, lng_f, get_venue_frame(), max_miles=radius, limit=count)

    record_event("nearby", {"max_miles": radius, "limit": count, "results_returned": len(results)})
    return NearbyResponse(
        reference=ReferenceLocation(lat=lat_f, lng=lng_f, source="user"),
        max_miles=radius,
        limit=count,
        results=results,
    )


# ── Reference location ───────────────────────────────────────────────────


@app.get("/location", response_model=LocationResponse)
def current_location(request: Request) -> LocationResponse:
    reference = resolve_reference(request.session)
    located = reference.source == "user"
    return LocationResponse(
        reference=reference,
        status="located" if located else "fallback",
        message=LOCATED_MESSAGE if located else FALLBACK_MESSAGE,
    )


@app.post("/location", response_model=LocationResponse)
def report_location(body: GeolocationReport, request: Request) -> LocationResponse:
    """Switch the active reference and re-run the last search from it."""
    if body.supported and not body.error and body.lat is not None and body.lng is not None:
        reference = set_user_reference(request.session, body.lat, body.lng)
        status, message = "located", LOCATED_MESSAGE
    else:
        clear_user_reference(request.session)
        reference = fallback_reference()
        if not body.supported:
            status, message = "unsupported", UNSUPPORTED_MESSAGE
        else:
            status, message = "fallback", FALLBACK_MESSAGE
        log.info("Geolocation unavailable (%s), using fallback reference", body.error or status)

    cached, _ = _cached_search(last_query(request.session), reference)
    results = cached["results"]

    record_event("location", {"status": status, "results_rescored": len(results)})
    return LocationResponse(reference=reference, status=status, message=message, results=results)


# ── Operational endpoints ────────────────────────────────────────────────


@app.get("/analytics")
def analytics() -> dict:
    return compute_analytics(get_events())


@app.get("/cache/stats")
def cache_stats() -> dict:
    return get_cache_stats()
