from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import pandas as pd

from .config import DEFAULT_INGESTION_CONFIG, IngestionConfig
from .ingest import get_tag, infer_cuisine_and_types, write_frame
from .overpass import fetch_elements

logger = logging.getLogger(__name__)

CHAIN_COLUMNS = ["name", "cuisine", "types"]


def _name_key(name: str) -> str:
    return (name or "").strip().lower()


def collect_chains(
    elements_by_city: dict[str, list[dict[str, Any]]],
    min_cities: int = 2,
) -> list[dict[str, Any]]:
    """Brands seen in at least ``min_cities`` cities, with no location attached.

    The first sighting of a brand fixes its display name and cuisine; type
    tags accumulate over every sighting.
    """
    by_name: dict[str, dict[str, Any]] = {}
    for city, elements in elements_by_city.items():
        for el in elements:
            name = get_tag(el, "name")
            if not name or len(name) < 2:
                continue
            amenity = get_tag(el, "amenity") or "restaurant"
            cuisine, types = infer_cuisine_and_types(el.get("tags"), amenity)

            rec = by_name.setdefault(_name_key(name), {
                "name": name[:255],
                "cuisine": cuisine[:100],
                "types": set(),
                "cities": set(),
            })
            rec["cities"].add(city)
            rec["types"].update(types)

    chains = [
        {
            "name": rec["name"],
            "cuisine": rec["cuisine"],
            "types": sorted(t for t in rec["types"] if t),
        }
        for rec in by_name.values()
        if len(rec["cities"]) >= min_cities
    ]
    chains.sort(key=lambda c: c["name"].casefold())
    return chains


def run_chain_seed(config: IngestionConfig = DEFAULT_INGESTION_CONFIG) -> Path:
    elements_by_city: dict[str, list[dict[str, Any]]] = {}
    for city, bbox in config.chain_cities.items():
        logger.info("Fetching %s...", city)
        elements_by_city[city] = fetch_elements(bbox, config)

    chains = collect_chains(elements_by_city, min_cities=config.min_chain_cities)
    output_path = write_frame(pd.DataFrame(chains, columns=CHAIN_COLUMNS), config.chains_path)
    logger.info(
        "Wrote %d widespread chains (%d+ cities) to %s",
        len(chains), config.min_chain_cities, output_path,
    )
    return output_path
