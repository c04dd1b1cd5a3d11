from __future__ import annotations

import argparse
import logging
import os
import random
import re
from pathlib import Path
from typing import Any, List

import pandas as pd

from ..catalog.store import VENUE_COLUMNS
from .config import DEFAULT_INGESTION_CONFIG, IngestionConfig
from .overpass import fetch_elements

logger = logging.getLogger(__name__)

_CUISINE_SPLIT = re.compile(r"[;,&]")

_AMENITY_TYPES = {
    "restaurant": "restaurant",
    "fast_food": "fast food",
    "cafe": "cafe",
}


def get_tag(el: dict[str, Any], key: str) -> str | None:
    tags = el.get("tags") or {}
    value = tags.get(key)
    if not value:
        return None
    return str(value).strip()


def get_lat_lng(el: dict[str, Any]) -> tuple[float, float] | None:
    if el.get("type") == "node" and el.get("lat") is not None and el.get("lon") is not None:
        return float(el["lat"]), float(el["lon"])
    center = el.get("center")
    if el.get("type") == "way" and center:
        return float(center["lat"]), float(center["lon"])
    return None


def build_address(tags: dict[str, Any] | None) -> str | None:
    if not tags:
        return None
    parts = [tags.get(k) for k in ("addr:housenumber", "addr:street", "addr:unit")]
    parts = [str(p) for p in parts if p]
    if parts:
        return " ".join(parts).strip()
    return tags.get("addr:full") or None


def infer_cuisine_and_types(tags: dict[str, Any] | None, amenity: str) -> tuple[str, List[str]]:
    """Derive a display cuisine label and lowercase type tags from OSM tags."""
    raw = str((tags or {}).get("cuisine") or "").strip()
    types: dict[str, None] = {}
    if raw:
        for c in _CUISINE_SPLIT.split(raw):
            c = c.strip().lower()
            if c:
                types[c] = None
    if amenity in _AMENITY_TYPES:
        types[_AMENITY_TYPES[amenity]] = None

    if raw:
        label = _CUISINE_SPLIT.split(raw)[0].strip()
    else:
        label = "Cafe" if amenity == "cafe" else "Restaurant"
    return label, list(types)


def pick_price(rng: random.Random) -> str:
    # OSM carries no price data; 40% $, 45% $$, 15% $$$
    roll = rng.random()
    if roll < 0.4:
        return "$"
    if roll < 0.85:
        return "$$"
    return "$$$"


def element_to_venue(el: dict[str, Any], rng: random.Random) -> dict[str, Any] | None:
    """Map one Overpass element to a venue record (without an id)."""
    name = get_tag(el, "name")
    if not name or len(name) < 2:
        return None
    coords = get_lat_lng(el)
    if coords is None:
        return None

    amenity = get_tag(el, "amenity") or "restaurant"
    cuisine, types = infer_cuisine_and_types(el.get("tags"), amenity)
    address = build_address(el.get("tags"))
    return {
        "name": name[:255],
        "cuisine": cuisine[:100],
        "types": types,
        "lat": coords[0],
        "lng": coords[1],
        "price": pick_price(rng),
        "address": address[:255] if address else "",
    }


def build_venue_rows(elements: List[dict[str, Any]], rng: random.Random) -> List[dict[str, Any]]:
    """Normalize, dedupe by position + name and number venues from 1."""
    seen: set[str] = set()
    rows: List[dict[str, Any]] = []
    for el in elements:
        venue = element_to_venue(el, rng)
        if venue is None:
            continue
        key = f"{venue['lat']:.5f}-{venue['lng']:.5f}-{venue['name']}"
        if key in seen:
            continue
        seen.add(key)
        rows.append({"id": len(rows) + 1, **venue})
    return rows


def write_frame(df: pd.DataFrame, path: Path) -> Path:
    """Write records JSON next to ``path`` and swap it into place."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(path.name + ".tmp")
    df.to_json(tmp, orient="records", indent=2, force_ascii=False)
    os.replace(tmp, path)
    return path


def run_ingestion(config: IngestionConfig = DEFAULT_INGESTION_CONFIG) -> Path:
    """
    Seed the venue catalog.

    Steps:
    - Fetch eateries inside the configured bounding box from Overpass.
    - Map elements into the venue schema and drop duplicates.
    - Persist the catalog as JSON for the search service.
    """
    rng = random.Random(config.seed)
    elements = fetch_elements(config.venue_bbox, config)
    rows = build_venue_rows(elements, rng)
    df = pd.DataFrame(rows, columns=VENUE_COLUMNS)
    output_path = write_frame(df, config.restaurants_path)
    logger.info("Seeded %d restaurants to %s", len(df), output_path)
    return output_path


def main(argv: List[str] | None = None) -> None:
    from .chains import run_chain_seed
    from .maintenance import run_maintenance

    parser = argparse.ArgumentParser(description="Build the Scran It catalog files.")
    parser.add_argument("--chains", action="store_true", help="also rebuild the chain brand list")
    parser.add_argument(
        "--maintain",
        action="store_true",
        help="only clean the existing catalog (drop unaddressed venues and chains)",
    )
    parser.add_argument("--output-dir", type=Path, default=None)
    parser.add_argument("--seed", type=int, default=None, help="seed for price tier assignment")
    args = parser.parse_args(argv)

    overrides: dict[str, Any] = {}
    if args.output_dir is not None:
        overrides["output_dir"] = args.output_dir
    if args.seed is not None:
        overrides["seed"] = args.seed
    config = IngestionConfig(**overrides)

    if args.maintain:
        before, after = run_maintenance(config)
        print(f"Maintenance complete. Before: {before}, after: {after}.")
        return

    path = run_ingestion(config)
    print(f"Ingestion complete. Catalog saved to: {path}")
    if args.chains:
        path = run_chain_seed(config)
        print(f"Chain list saved to: {path}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    main()
