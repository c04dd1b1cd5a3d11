from __future__ import annotations

import math

import pytest

from scranit.catalog.store import build_venue_frame
from scranit.models import ChainBrand
from scranit.search.errors import InvalidReference
from scranit.search.ranker import (
    clamp_limit,
    clamp_max_miles,
    nearby,
    search,
    validate_reference,
)

SF = (37.7749, -122.4194)

VENUES = [
    {"id": 1, "name": "Mama Rosa's", "cuisine": "Italian", "types": ["italian", "pasta", "pizza"],
     "lat": 37.778, "lng": -122.412, "price": "$$", "address": "1180 Market St"},
    {"id": 2, "name": "El Mercado", "cuisine": "Mexican", "types": ["mexican", "tacos", "burritos"],
     "lat": 37.771, "lng": -122.425, "price": "$", "address": "1 Main St"},
    {"id": 5, "name": "Spice Route", "cuisine": "Indian", "types": ["indian", "curry", "naan"],
     "lat": 37.769, "lng": -122.415, "price": "$$", "address": "1550 Mission St"},
    {"id": 6, "name": "Pho & Co", "cuisine": "Vietnamese", "types": ["vietnamese", "pho", "noodles"],
     "lat": 37.773, "lng": -122.422, "price": "$", "address": "110 Gough St"},
    {"id": 8, "name": "Taqueria Verde", "cuisine": "Mexican", "types": ["mexican", "tacos", "tacos"],
     "lat": 37.780, "lng": -122.430, "price": "$", "address": "1201 Fulton St"},
    {"id": 11, "name": "Thai Orchid", "cuisine": "Thai", "types": ["thai", "curry", "pad thai"],
     "lat": 37.777, "lng": -122.415, "price": "$$", "address": "55 Hyde St"},
    {"id": 13, "name": "Noodle Cart", "cuisine": "Chinese", "types": ["chinese", "noodles"],
     "lat": 37.774, "lng": -122.420, "price": "$", "address": ""},
    {"id": 14, "name": "Casa Burrito", "cuisine": "", "types": ["burritos"],
     "lat": 37.790, "lng": -122.400, "address": "9 Pine St"},
]

CHAINS = [ChainBrand(name="Taco Bell", cuisine="Mexican", types=["tacos", "fast food"])]


@pytest.fixture
def venues():
    return build_venue_frame(VENUES)


def _ids(results):
    return [r.id for r in results]


class TestSearch:
    def test_raw_query_matches_types(self, venues):
        results = search("tacos", *SF, venues, CHAINS)
        assert _ids(results) == [2, 8]

    def test_single_match_distance(self):
        frame = build_venue_frame([VENUES[1]])
        results = search("tacos", *SF, frame, [])
        assert len(results) == 1
        assert results[0].name == "El Mercado"
        assert results[0].distance == pytest.approx(0.408, abs=0.005)
        assert results[0].distance_label == "0.4 mi"

    def test_raw_query_matches_name_and_cuisine(self, venues):
        assert _ids(search("verde", *SF, venues, CHAINS)) == [8]
        assert _ids(search("  INDIAN ", *SF, venues, CHAINS)) == [5]

    def test_raw_query_matches_across_joined_types(self, venues):
        assert _ids(search("curry pad", *SF, venues, CHAINS)) == [11]

    def test_chain_query_expands_to_cuisine_and_types(self, venues):
        results = search("Taco Bell", *SF, venues, CHAINS)
        # Casa Burrito has no cuisine and no "tacos" type, so it stays out
        assert _ids(results) == [2, 8]
        assert all("Taco Bell" not in r.name for r in results)

    def test_chain_query_apostrophe_and_case_variants(self, venues):
        chains = [ChainBrand(name="Chipotle’s", cuisine="Mexican", types=["burritos"])]
        for q in ("chipotle's", "CHIPOTLES", "chipotle`s"):
            assert _ids(search(q, *SF, venues, chains)) == [2, 8, 14]

    def test_chain_types_match_by_substring(self, venues):
        chains = [ChainBrand(name="Noodle World", cuisine="", types=["noodle"])]
        assert _ids(search("noodle world", *SF, venues, chains)) == [6]

    def test_chain_with_no_terms_matches_nothing(self, venues):
        chains = [ChainBrand(name="Mystery Chain", cuisine="", types=[])]
        assert search("mystery chain", *SF, venues, chains) == []

    def test_empty_query_returns_nothing(self, venues):
        assert search("", *SF, venues, CHAINS) == []
        assert search("   ", *SF, venues, CHAINS) == []

    def test_no_match_returns_empty_list(self, venues):
        assert search("sushi", *SF, venues, CHAINS) == []

    def test_unaddressed_venue_never_returned(self, venues):
        assert 13 not in _ids(search("noodles", *SF, venues, CHAINS))
        assert 13 not in _ids(search("chinese", *SF, venues, CHAINS))

    def test_sorted_by_distance(self, venues):
        results = search("a", *SF, venues, [])
        distances = [r.distance for r in results]
        assert distances == sorted(distances)
        assert all(d >= 0 for d in distances)

    def test_ties_keep_catalog_order(self):
        frame = build_venue_frame([
            {"id": 7, "name": "Twin B", "cuisine": "Thai", "types": ["thai"], "lat": 1.0, "lng": 1.0, "address": "x"},
            {"id": 3, "name": "Twin A", "cuisine": "Thai", "types": ["thai"], "lat": 1.0, "lng": 1.0, "address": "y"},
            {"id": 9, "name": "Near", "cuisine": "Thai", "types": ["thai"], "lat": 0.5, "lng": 0.5, "address": "z"},
        ])
        assert _ids(search("thai", 0.0, 0.0, frame, [])) == [9, 7, 3]

    def test_antipodal_venue_is_ranked(self):
        frame = build_venue_frame([
            {"id": 1, "name": "Far Side", "cuisine": "Thai", "types": ["thai"],
             "lat": 6.3776, "lng": 33.07, "address": "x"},
        ])
        results = search("thai", -6.3776, -146.93, frame, [])
        assert _ids(results) == [1]
        assert results[0].distance == pytest.approx(3959 * math.pi, rel=1e-6)

    def test_does_not_mutate_catalog(self, venues):
        before = venues.copy()
        search("tacos", *SF, venues, CHAINS)
        assert list(venues.columns) == list(before.columns)
        assert venues["id"].tolist() == before["id"].tolist()

    def test_idempotent(self, venues):
        first = search("mexican", *SF, venues, CHAINS)
        second = search("mexican", *SF, venues, CHAINS)
        assert [r.model_dump() for r in first] == [r.model_dump() for r in second]

    def test_empty_catalog(self):
        assert search("tacos", *SF, build_venue_frame([]), CHAINS) == []

    def test_invalid_reference_raises(self, venues):
        with pytest.raises(InvalidReference):
            search("tacos", None, -122.4, venues, CHAINS)
        with pytest.raises(InvalidReference):
            search("tacos", "north", -122.4, venues, CHAINS)


class TestValidateReference:
    def test_accepts_numeric_strings(self):
        assert validate_reference("37.5", "-122") == (37.5, -122.0)

    @pytest.mark.parametrize("lat,lng", [
        (None, 1.0), (1.0, None), ("abc", 1.0), (float("nan"), 1.0), (91.0, 0.0), (0.0, 181.0), (True, 1.0),
    ])
    def test_rejects_bad_values(self, lat, lng):
        with pytest.raises(InvalidReference):
            validate_reference(lat, lng)


class TestNearby:
    def test_within_radius_and_sorted(self, venues):
        results = nearby(*SF, venues, max_miles=0.3, limit=10)
        assert _ids(results) == [6, 11]
        assert all(r.distance <= 0.3 for r in results)

    def test_limit(self, venues):
        results = nearby(*SF, venues, max_miles=25, limit=2)
        assert len(results) == 2
        assert _ids(results) == [6, 11]

    def test_never_returns_unaddressed(self, venues):
        assert 13 not in _ids(nearby(*SF, venues, max_miles=25, limit=20))

    def test_clamps(self):
        assert clamp_max_miles(100) == 25.0
        assert clamp_max_miles(0.01) == 0.1
        assert clamp_max_miles(None) == 1.0
        assert clamp_max_miles("abc") == 1.0
        assert clamp_limit(50) == 20
        assert clamp_limit(-3) == 1
        assert clamp_limit(None) == 10
        assert clamp_limit("0") == 10


    def test_clamp_limit_truncates_decimal_strings(self):
        assert clamp_limit("2.5") == 2
        assert clamp_limit(7.9) == 7
        assert clamp_limit("0.4") == 10
        assert clamp_limit("inf") == 10
        assert clamp_limit("nan") == 10
