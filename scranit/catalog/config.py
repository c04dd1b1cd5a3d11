from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")

_PACKAGE_DATA_DIR = Path(__file__).resolve().parent.parent / "data"


@dataclass(frozen=True)
class CatalogConfig:
    data_dir: Path = Path(os.getenv("SCRANIT_DATA_DIR", str(_PACKAGE_DATA_DIR)))
    restaurants_filename: str = "restaurants.json"
    chains_filename: str = "chain_restaurants.json"
    # San Francisco, used until the client reports a location
    fallback_lat: float = float(os.getenv("SCRANIT_FALLBACK_LAT", "37.7749"))
    fallback_lng: float = float(os.getenv("SCRANIT_FALLBACK_LNG", "-122.4194"))

    @property
    def restaurants_path(self) -> Path:
        return self.data_dir / self.restaurants_filename

    @property
    def chains_path(self) -> Path:
        return self.data_dir / self.chains_filename


DEFAULT_CATALOG_CONFIG = CatalogConfig()
