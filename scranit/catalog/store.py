from __future__ import annotations

import json
import logging
import math
from pathlib import Path
from typing import Any, Callable, Iterable

import pandas as pd
from pydantic import ValidationError

from ..models import DEFAULT_PRICE_TIER, PRICE_TIERS, ChainBrand, Venue
from ..search.errors import CatalogUnavailable
from .config import DEFAULT_CATALOG_CONFIG, CatalogConfig

logger = logging.getLogger(__name__)

VENUE_COLUMNS: list[str] = [
    "id",
    "name",
    "cuisine",
    "types",
    "lat",
    "lng",
    "price",
    "address",
]

# path -> (file signature, parsed value)
_cache: dict[Path, tuple[tuple[int, int], Any]] = {}


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, float) and math.isnan(value))


def _coerce_text(value: Any) -> str:
    if _is_missing(value):
        return ""
    return str(value).strip()


def _coerce_types(value: Any) -> list[str]:
    # Older seed runs wrote types as a single "a, b, c" string
    if isinstance(value, str):
        return [t.strip() for t in value.split(",") if t.strip()]
    if isinstance(value, (list, tuple)):
        return [str(t).strip() for t in value if not _is_missing(t) and str(t).strip()]
    return []


def _coerce_price(value: Any) -> str:
    price = _coerce_text(value)
    return price if price in PRICE_TIERS else DEFAULT_PRICE_TIER


def _empty_frame() -> pd.DataFrame:
    df = pd.DataFrame(columns=VENUE_COLUMNS)
    df["name_lower"] = pd.Series(dtype=object)
    df["cuisine_lower"] = pd.Series(dtype=object)
    df["types_lower"] = pd.Series(dtype=object)
    df["types_joined"] = pd.Series(dtype=object)
    return df


def build_venue_frame(records: Iterable[dict[str, Any]]) -> pd.DataFrame:
    """Canonicalize raw venue records into the catalog frame.

    Venues without an address are excluded here, so nothing downstream ever
    sees them. Rows that cannot be placed on a map (no name, bad coordinates)
    are dropped as well.
    """
    rows = [r for r in records if isinstance(r, dict)]
    if not rows:
        return _empty_frame()

    raw = pd.DataFrame(rows).reindex(columns=VENUE_COLUMNS)

    df = pd.DataFrame(index=raw.index)
    position = pd.Series(range(1, len(raw) + 1), index=raw.index)
    df["id"] = pd.to_numeric(raw["id"], errors="coerce").fillna(position).astype(int)
    df["name"] = raw["name"].apply(_coerce_text)
    df["cuisine"] = raw["cuisine"].apply(_coerce_text)
    df["types"] = raw["types"].apply(_coerce_types)
    df["lat"] = pd.to_numeric(raw["lat"], errors="coerce")
    df["lng"] = pd.to_numeric(raw["lng"], errors="coerce")
    df["price"] = raw["price"].apply(_coerce_price)
    df["address"] = raw["address"].apply(_coerce_text)

    has_address = df["address"].str.len() > 0
    placeable = (
        (df["name"].str.len() > 0)
        & df["lat"].between(-90.0, 90.0)
        & df["lng"].between(-180.0, 180.0)
    )
    skipped = int((has_address & ~placeable).sum())
    if skipped:
        logger.warning("Skipped %d venue records with missing name or coordinates", skipped)

    df = df.loc[has_address & placeable].reset_index(drop=True)
    if df.empty:
        return _empty_frame()

    # Lowercased copies for case-insensitive matching
    df["name_lower"] = df["name"].str.lower()
    df["cuisine_lower"] = df["cuisine"].str.lower()
    df["types_lower"] = df["types"].apply(lambda ts: [t.lower() for t in ts])
    df["types_joined"] = df["types"].apply(lambda ts: " ".join(ts).lower())
    return df


def venue_fields(row: pd.Series) -> dict[str, Any]:
    return {
        "id": int(row["id"]),
        "name": row["name"],
        "cuisine": row["cuisine"],
        "types": list(row["types"]),
        "lat": float(row["lat"]),
        "lng": float(row["lng"]),
        "price": row["price"],
        "address": row["address"],
    }


def _signature(path: Path) -> tuple[int, int] | None:
    try:
        st = path.stat()
    except OSError:
        return None
    return (st.st_mtime_ns, st.st_size)


def _read_records(path: Path) -> list:
    try:
        with path.open(encoding="utf-8") as fh:
            data = json.load(fh)
    except (OSError, ValueError) as exc:
        raise CatalogUnavailable(f"Cannot read {path}: {exc}") from exc
    if not isinstance(data, list):
        raise CatalogUnavailable(f"{path} does not contain a JSON list")
    return data


def _load_cached(path: Path, parse: Callable[[list], Any], empty: Callable[[], Any]) -> Any:
    sig = _signature(path)
    hit = _cache.get(path)
    if sig is not None and hit is not None and hit[0] == sig:
        return hit[1]

    try:
        records = _read_records(path)
    except CatalogUnavailable:
        logger.warning("Catalog file unavailable, serving empty catalog", exc_info=True)
        return empty()

    # Parse completely before swapping the cached value
    value = parse(records)
    if sig is not None:
        _cache[path] = (sig, value)
    return value


def _parse_chains(records: list) -> list[ChainBrand]:
    chains: list[ChainBrand] = []
    for rec in records:
        if not isinstance(rec, dict):
            continue
        try:
            chains.append(ChainBrand(**rec))
        except ValidationError:
            logger.warning("Skipping invalid chain record: %r", rec.get("name"))
    return chains


def get_venue_frame(config: CatalogConfig = DEFAULT_CATALOG_CONFIG) -> pd.DataFrame:
    """Return the canonical venue frame, re-reading the file only when it changed."""
    return _load_cached(config.restaurants_path, build_venue_frame, _empty_frame)


def load_venues(config: CatalogConfig = DEFAULT_CATALOG_CONFIG) -> list[Venue]:
    df = get_venue_frame(config)
    return [Venue(**venue_fields(row)) for _, row in df.iterrows()]


def load_chain_brands(config: CatalogConfig = DEFAULT_CATALOG_CONFIG) -> list[ChainBrand]:
    return _load_cached(config.chains_path, _parse_chains, list)


def catalog_version(config: CatalogConfig = DEFAULT_CATALOG_CONFIG) -> list:
    return [_signature(config.restaurants_path), _signature(config.chains_path)]


def clear_catalog_cache() -> None:
    _cache.clear()
