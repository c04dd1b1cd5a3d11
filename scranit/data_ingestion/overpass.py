from __future__ import annotations

import logging
from typing import Any

import httpx

from .config import DEFAULT_INGESTION_CONFIG, IngestionConfig

logger = logging.getLogger(__name__)


class IngestionError(RuntimeError):
    """The Overpass API could not be queried."""


def build_query(bbox: tuple[float, float, float, float], timeout_s: int = 90) -> str:
    box = ",".join(str(v) for v in bbox)
    return (
        f"[out:json][timeout:{timeout_s}];\n"
        "(\n"
        f'  node["amenity"~"restaurant|fast_food|cafe"]({box});\n'
        f'  way["amenity"~"restaurant|fast_food|cafe"]({box});\n'
        ");\n"
        "out body center;\n"
    )


def fetch_elements(
    bbox: tuple[float, float, float, float],
    config: IngestionConfig = DEFAULT_INGESTION_CONFIG,
) -> list[dict[str, Any]]:
    """POST an Overpass query for eateries in ``bbox`` and return its elements."""
    headers = {
        "User-Agent": config.user_agent,
        "Accept": "application/json",
    }
    try:
        with httpx.Client(timeout=config.timeout, headers=headers) as client:
            r = client.post(config.overpass_url, data={"data": build_query(bbox)})
    except httpx.HTTPError as exc:
        raise IngestionError(f"Overpass request failed: {exc}") from exc
    if r.status_code != 200:
        raise IngestionError(f"Overpass API error: {r.status_code}")
    data = r.json()
    elements = data.get("elements") or []
    logger.info("Overpass returned %d elements for bbox %s", len(elements), bbox)
    return elements
