from __future__ import annotations

import json
import os
from pathlib import Path

import pytest

from scranit.catalog.config import CatalogConfig
from scranit.catalog.store import (
    build_venue_frame,
    catalog_version,
    clear_catalog_cache,
    get_venue_frame,
    load_chain_brands,
    load_venues,
)
from scranit.models import DEFAULT_PRICE_TIER


@pytest.fixture(autouse=True)
def _fresh_cache():
    clear_catalog_cache()
    yield
    clear_catalog_cache()


def _write(path: Path, data) -> None:
    path.write_text(json.dumps(data), encoding="utf-8")


def _config(tmp_path: Path) -> CatalogConfig:
    return CatalogConfig(data_dir=tmp_path)


def test_shipped_catalog_loads():
    venues = load_venues()
    assert len(venues) == 12
    assert all(v.address for v in venues)
    assert "Noodle Cart" not in {v.name for v in venues}


def test_shipped_chains_load():
    names = [c.name for c in load_chain_brands()]
    assert "Taco Bell" in names
    assert "McDonald's" in names


def test_unaddressed_venues_dropped_and_ids_kept(tmp_path):
    _write(tmp_path / "restaurants.json", [
        {"id": 10, "name": "A", "cuisine": "Thai", "types": ["thai"], "lat": 1, "lng": 2, "address": "1 St"},
        {"id": 11, "name": "B", "cuisine": "Thai", "types": ["thai"], "lat": 1, "lng": 2, "address": "   "},
        {"id": 12, "name": "C", "cuisine": "Thai", "types": ["thai"], "lat": 1, "lng": 2},
        {"id": 13, "name": "D", "cuisine": "Thai", "types": ["thai"], "lat": 1, "lng": 2, "address": "4 St"},
    ])
    venues = load_venues(_config(tmp_path))
    assert [v.id for v in venues] == [10, 13]


def test_missing_fields_degrade_to_defaults():
    df = build_venue_frame([
        {"name": "No Frills", "lat": "37.1", "lng": "-122.2", "address": "5 Elm St",
         "cuisine": None, "price": "cheap", "types": "pizza, pasta"},
    ])
    row = df.iloc[0]
    assert row["id"] == 1
    assert row["cuisine"] == ""
    assert row["price"] == DEFAULT_PRICE_TIER
    assert row["types"] == ["pizza", "pasta"]
    assert row["types_joined"] == "pizza pasta"
    assert row["lat"] == pytest.approx(37.1)


def test_unplaceable_venues_dropped():
    df = build_venue_frame([
        {"id": 1, "name": "Ok", "lat": 1.0, "lng": 1.0, "address": "a"},
        {"id": 2, "name": "", "lat": 1.0, "lng": 1.0, "address": "b"},
        {"id": 3, "name": "Nowhere", "lat": None, "lng": 1.0, "address": "c"},
        {"id": 4, "name": "Off Map", "lat": 123.0, "lng": 1.0, "address": "d"},
        "not a record",
    ])
    assert df["id"].tolist() == [1]


def test_duplicate_types_preserved():
    df = build_venue_frame([
        {"id": 1, "name": "Taqueria", "types": ["tacos", "tacos"], "lat": 0, "lng": 0, "address": "a"},
    ])
    assert df.iloc[0]["types"] == ["tacos", "tacos"]


def test_missing_file_is_empty_catalog(tmp_path):
    config = _config(tmp_path)
    assert get_venue_frame(config).empty
    assert load_venues(config) == []
    assert load_chain_brands(config) == []


def test_corrupt_file_is_empty_catalog(tmp_path):
    (tmp_path / "restaurants.json").write_text("{not json", encoding="utf-8")
    (tmp_path / "chain_restaurants.json").write_text('{"name": "x"}', encoding="utf-8")
    config = _config(tmp_path)
    assert load_venues(config) == []
    assert load_chain_brands(config) == []


def test_invalid_chain_rows_skipped(tmp_path):
    _write(tmp_path / "chain_restaurants.json", [
        {"name": "Taco Bell", "cuisine": "Mexican", "types": ["tacos"]},
        {"cuisine": "nameless"},
        {"name": "Sbarro", "types": None},
    ])
    chains = load_chain_brands(_config(tmp_path))
    assert [c.name for c in chains] == ["Taco Bell", "Sbarro"]
    assert chains[1].types == []


def test_cache_reloads_when_file_changes(tmp_path):
    path = tmp_path / "restaurants.json"
    config = _config(tmp_path)
    _write(path, [{"id": 1, "name": "First", "lat": 0, "lng": 0, "address": "a"}])
    first = get_venue_frame(config)
    assert get_venue_frame(config) is first
    version = catalog_version(config)

    _write(path, [
        {"id": 1, "name": "First", "lat": 0, "lng": 0, "address": "a"},
        {"id": 2, "name": "Second", "lat": 0, "lng": 0, "address": "b"},
    ])
    st = path.stat()
    os.utime(path, ns=(st.st_atime_ns, st.st_mtime_ns + 1_000_000_000))

    second = get_venue_frame(config)
    assert second is not first
    assert second["name"].tolist() == ["First", "Second"]
    assert catalog_version(config) != version
