from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from ..catalog.config import DEFAULT_CATALOG_CONFIG

# south, west, north, east
AUSTIN_BBOX = (30.0985, -97.8964, 30.5169, -97.5634)

CHAIN_CITIES: dict[str, tuple[float, float, float, float]] = {
    "Austin": AUSTIN_BBOX,
    "Dallas": (32.68, -97.05, 33.0, -96.6),
    "Houston": (29.6, -95.6, 29.9, -95.0),
    "San Antonio": (29.32, -98.65, 29.58, -98.35),
}


@dataclass(frozen=True)
class IngestionConfig:
    """
    Configuration for the offline catalog builders.
    """

    overpass_url: str = os.getenv("OVERPASS_URL", "https://overpass-api.de/api/interpreter")
    user_agent: str = "ScranIt/1.0 (catalog seeding)"
    timeout: float = 120.0
    venue_bbox: tuple[float, float, float, float] = AUSTIN_BBOX
    chain_cities: dict[str, tuple[float, float, float, float]] = field(
        default_factory=lambda: dict(CHAIN_CITIES)
    )
    # a brand must appear in at least this many cities to count as a chain
    min_chain_cities: int = 2
    output_dir: Path = DEFAULT_CATALOG_CONFIG.data_dir
    restaurants_filename: str = DEFAULT_CATALOG_CONFIG.restaurants_filename
    chains_filename: str = DEFAULT_CATALOG_CONFIG.chains_filename
    seed: int | None = None

    @property
    def restaurants_path(self) -> Path:
        return self.output_dir / self.restaurants_filename

    @property
    def chains_path(self) -> Path:
        return self.output_dir / self.chains_filename


DEFAULT_INGESTION_CONFIG = IngestionConfig()
