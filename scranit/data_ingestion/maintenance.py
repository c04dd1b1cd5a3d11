from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

import pandas as pd

from .config import DEFAULT_INGESTION_CONFIG, IngestionConfig

logger = logging.getLogger(__name__)


def _renumber(records: list[dict[str, Any]]) -> list[dict[str, Any]]:
    return [{**r, "id": i + 1} for i, r in enumerate(records)]


def drop_without_address(records: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Remove venues with a blank address and renumber ids from 1."""
    kept = [r for r in records if str(r.get("address") or "").strip()]
    return _renumber(kept)


def filter_chains(records: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Remove every location of any name that appears more than once."""
    if not records:
        return []
    names = pd.Series([str(r.get("name") or "").strip().lower() for r in records])
    counts = names.value_counts()
    chain_names = set(counts[counts > 1].index)
    kept = [r for r, n in zip(records, names) if n not in chain_names]
    return _renumber(kept)


def write_records(records: list[dict[str, Any]], path: Path) -> Path:
    tmp = path.with_name(path.name + ".tmp")
    with tmp.open("w", encoding="utf-8") as fh:
        json.dump(records, fh, indent=2, ensure_ascii=False)
    os.replace(tmp, path)
    return path


def run_maintenance(
    config: IngestionConfig = DEFAULT_INGESTION_CONFIG,
    drop_chains: bool = True,
) -> tuple[int, int]:
    """Clean the catalog file in place. Returns ``(before, after)`` counts."""
    path = config.restaurants_path
    with path.open(encoding="utf-8") as fh:
        data = json.load(fh)

    cleaned = drop_without_address(data)
    logger.info("Dropped %d entries without address", len(data) - len(cleaned))
    if drop_chains:
        without_chains = filter_chains(cleaned)
        logger.info("Removed %d chain locations", len(cleaned) - len(without_chains))
        cleaned = without_chains

    write_records(cleaned, path)
    return len(data), len(cleaned)
