"""Tests for normalisation and fuzzy-match primitives."""

from __future__ import annotations

import pytest

from utils.constants import MatchingTables
from utils.matching_rules import (
    location_matches,
    material_compatibility,
    materials_match,
    normalize,
    quantity_matches,
)

MATERIALS = ["Steel slag", "cotton waste", "E-waste (processed)", "Battery scrap", "fly ash", "Glass cullet"]


class TestNormalize:
    def test_lowercases_and_trims(self):
        assert normalize("  Steel Slag \n") == "steel slag"

    def test_none_and_non_strings(self):
        assert normalize(None) == ""
        assert normalize(42) == "42"


class TestMaterialsMatch:
    @pytest.mark.parametrize("x", MATERIALS)
    def test_reflexive(self, x):
        assert materials_match(x, x)
        assert materials_match(x, f"  {x.upper()} ")

    @pytest.mark.parametrize("a", MATERIALS)
    @pytest.mark.parametrize("b", MATERIALS)
    def test_symmetric(self, a, b):
        assert materials_match(a, b) == materials_match(b, a)

    def test_containment(self):
        assert materials_match("slag", "Steel slag")
        assert materials_match("Chemical effluents (treated)", "chemical effluents")

    def test_synonym_family(self):
        assert materials_match("Steel slag", "Metal shavings")
        assert materials_match("cotton waste", "Textile offcuts")
        assert materials_match("E-waste", "battery scrap")

    def test_different_families_do_not_match(self):
        assert not materials_match("Steel slag", "Cotton waste")
        assert not materials_match("Plastic scrap", "Organic waste")

    def test_empty_or_missing_never_matches(self):
        assert not materials_match("", "Steel slag")
        assert not materials_match("Steel slag", None)
        assert not materials_match("   ", "   ")

    def test_injected_tables(self):
        tables = MatchingTables(synonyms={"glass": ["glass cullet", "bottle glass"]})
        assert materials_match("Glass cullet", "bottle glass", tables)
        assert not materials_match("Steel slag", "Metal shavings", tables)


class TestQuantityMatches:
    def test_documented_cases(self):
        assert quantity_matches(100, 150)
        assert not quantity_matches(100, 300)
        assert quantity_matches(100, 50)

    def test_boundaries_inclusive_both_directions(self):
        assert quantity_matches(100, 200)
        assert quantity_matches(200, 100)
        assert not quantity_matches(100, 201)
        assert not quantity_matches(100, 49)

    def test_large_oversupply_fails(self):
        assert not quantity_matches(100, 800)
        assert not quantity_matches(800, 100)

    @pytest.mark.parametrize("required,available", [(None, 100), (100, None), (0, 0), (-5, 10), ("abc", 10)])
    def test_missing_or_invalid_is_false(self, required, available):
        assert not quantity_matches(required, available)


class TestLocationMatches:
    def test_case_insensitive(self):
        assert location_matches("Mumbai", "mumbai")

    def test_regional_cluster(self):
        assert location_matches("Mumbai", "Pune")
        assert location_matches("Thane", "Mumbai")
        assert location_matches("Gurugram", "Delhi")

    def test_unrelated_cities(self):
        assert not location_matches("Mumbai", "Chennai")
        assert not location_matches("Surat", "Raipur")

    def test_empty_is_false(self):
        assert not location_matches("", "Mumbai")
        assert not location_matches(None, None)

    def test_injected_regions(self):
        tables = MatchingTables(regions={"kochi": ["ernakulam"]})
        assert location_matches("Kochi", "Ernakulam", tables)
        assert not location_matches("Mumbai", "Pune", tables)


class TestMaterialCompatibility:
    def test_exact(self):
        assert material_compatibility("Steel Slag", "steel slag") == 100

    def test_listed_either_direction(self):
        assert material_compatibility("fly ash", "steel slag") == 75
        assert material_compatibility("concrete waste", "steel slag") == 75

    def test_unlisted(self):
        assert material_compatibility("steel slag", "cotton waste") == 0
        assert material_compatibility("", "steel slag") == 0
