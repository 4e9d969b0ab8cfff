"""Tests for the additive rubric, the factory-profile variant and the proximity blend."""

from __future__ import annotations

import itertools

import pytest

from backend.schemas import FactoryProfile
from conftest import make_entry, make_offer, make_requirement
from models.scorer import (
    AdditiveScoring,
    ProximityBlendScoring,
    calculate_match,
    get_strategy,
    proximity_score,
    quantity_overlap,
    score_against_offer,
    score_against_requirement,
    score_buyer_factory,
)
from utils.constants import DEMO_FACTORIES


class TestScoreAgainstOffer:
    def test_all_signals(self):
        consumer = make_entry("c1", role="consumer", material="Steel slag", qty=6000, city="Mumbai")
        card = score_against_offer(consumer, make_offer(qty=5000, city="Mumbai"))
        assert card.score == 100
        assert card.reasons == [
            "Material 'Steel slag' matches your listing",
            "Quantity in acceptable range",
            "Location: Mumbai",
        ]

    def test_different_region_gets_floor_not_zero(self):
        consumer = make_entry("c1", role="consumer", qty=6000, city="Chennai")
        card = score_against_offer(consumer, make_offer(qty=5000, city="Mumbai"))
        assert card.score == 80
        assert card.reasons[-1] == "Different region, logistics can be arranged"

    def test_nothing_matches_but_location_floor(self):
        consumer = make_entry("c1", role="consumer", material="Cotton waste", qty=100, city="Surat")
        card = score_against_offer(consumer, make_offer(qty=5000, city="Mumbai"))
        assert card.score == 10
        assert card.reasons == ["Different region, logistics can be arranged"]

    def test_malformed_offer_does_not_raise(self):
        consumer = make_entry("c1", role="consumer")
        card = score_against_offer(consumer, make_offer(material="", qty=None, city=""))
        assert card.score == 10


class TestScoreAgainstRequirement:
    def test_all_signals(self):
        producer = make_entry("p1", qty=5500, city="Mumbai")
        card = score_against_requirement(producer, make_requirement(qty=5000, city="Mumbai"))
        assert card.score == 100
        assert card.reasons[0] == "Supplies 'Steel slag'"

    def test_regional_cluster_counts_as_location(self):
        producer = make_entry("p1", qty=5500, city="Pune")
        card = score_against_requirement(producer, make_requirement(qty=5000, city="Mumbai"))
        assert card.score == 100
        assert "Location: Pune" in card.reasons

    def test_idempotent(self):
        producer = make_entry("p1", qty=5500, city="Chennai")
        req = make_requirement()
        first = score_against_requirement(producer, req)
        second = score_against_requirement(producer, req)
        assert first == second


class TestBoundedness:
    @pytest.mark.parametrize(
        "material,qty,city",
        list(itertools.product(["Steel slag", "metal shavings", "", "glass"], [None, 10, 5000, 10**9], ["Mumbai", "Pune", "", "Leh"])),
    )
    def test_score_and_reasons_bounded(self, material, qty, city):
        query = make_offer(material=material, qty=qty, city=city)
        for role in ("consumer", "producer"):
            card = AdditiveScoring().score(make_entry("x", role=role), query)
            assert 0 <= card.score <= 100
            assert len(card.reasons) <= 3


class TestScoreBuyerFactory:
    @pytest.fixture
    def factory(self):
        return FactoryProfile(
            id="f1", factory_name="EcoCement Industries", city="Pune",
            accepted_material_types=["fly ash", "steel slag"], min_quantity=500, max_quantity=5000,
        )

    def test_caps_at_100_and_truncates_reasons(self, factory):
        card = score_buyer_factory(make_offer(qty=1200, city="Pune"), factory)
        assert card.score == 100  # 40 + 25 + 15 + 10 + 10
        assert len(card.reasons) == 3
        assert card.reasons[0].startswith("Material 'Steel slag'")

    def test_hazardous_out_of_range(self, factory):
        offer = make_offer(material="Plastic scrap", qty=9000, city="Chennai", hazardous=True)
        card = score_buyer_factory(offer, factory)
        assert card.score == 10
        assert card.reasons == ["Circular integration potential"]

    def test_open_ended_max_quantity(self, factory):
        factory.max_quantity = None
        card = score_buyer_factory(make_offer(qty=10**6, city="Pune"), factory)
        assert card.score == 100

    def test_zero_max_quantity_means_no_ceiling(self, factory):
        factory.max_quantity = 0
        card = score_buyer_factory(make_offer(qty=10**6, city="Pune"), factory)
        assert card.score == 100

    def test_partial_label_and_neighbouring_city_earn_nothing(self):
        greenbuild = DEMO_FACTORIES[0]
        card = score_buyer_factory(make_offer(material="Plastic", qty=500, city="Pune"), greenbuild)
        assert card.score == 35  # 15 + 10 + 10, below the generation cutoff
        assert card.reasons == [
            "Supply volume fits optimal operational threshold",
            "Standard material handling (Non-hazardous)",
            "Circular integration potential",
        ]

    def test_synonym_family_is_not_an_accepted_type(self, factory):
        card = score_buyer_factory(make_offer(material="Metal shavings", qty=1200, city="PUNE "), factory)
        assert card.score == 60  # city 25 + quantity 15 + 10 + 10
        assert not card.reasons[0].startswith("Material")


class TestProximityBlend:
    def test_hard_material_gate(self):
        cand = make_entry("p1", material="Cotton waste", latitude=19.0, longitude=72.8)
        query = make_requirement(latitude=19.0, longitude=72.8)
        assert calculate_match(cand, query) is None

    def test_exact_material_same_point_full_quantity(self):
        cand = make_entry("p1", qty=5000, latitude=19.0760, longitude=72.8777)
        query = make_requirement(qty=5000, latitude=19.0760, longitude=72.8777)
        card = calculate_match(cand, query)
        assert card.score == 100
        assert card.distance_km == 0.0

    def test_compatible_material_mumbai_pune(self):
        cand = make_entry("p1", material="Fly ash", qty=2500, latitude=18.5204, longitude=73.8567)
        query = make_requirement(qty=5000, latitude=19.0760, longitude=72.8777)
        card = calculate_match(cand, query)
        # 0.4×75 + 0.3×80 + 0.3×50
        assert card.score == 69
        assert 110 < card.distance_km < 130

    def test_missing_coordinates_uses_floor(self):
        card = calculate_match(make_entry("p1", qty=5000), make_requirement(qty=5000))
        assert card.score == round(0.4 * 100 + 0.3 * 10 + 0.3 * 100)
        assert card.distance_km is None

    @pytest.mark.parametrize(
        "distance,points",
        [(0, 100), (49.9, 100), (50, 80), (149, 80), (150, 50), (499, 50), (500, 25), (999, 25), (1000, 10), (None, 10)],
    )
    def test_buckets(self, distance, points):
        assert proximity_score(distance) == points

    def test_quantity_overlap(self):
        assert quantity_overlap(50, 100) == 50.0
        assert quantity_overlap(100, 50) == 50.0
        assert quantity_overlap(None, 50) == 0.0
        assert quantity_overlap(0, 50) == 0.0


class TestStrategies:
    def test_lookup_by_name(self):
        assert isinstance(get_strategy("additive"), AdditiveScoring)
        assert isinstance(get_strategy(" Proximity_Blend "), ProximityBlendScoring)

    def test_unknown_strategy(self):
        with pytest.raises(ValueError, match="Unknown scoring strategy"):
            get_strategy("learned")

    def test_additive_dispatches_on_role(self):
        consumer = make_entry("c1", role="consumer", qty=5000)
        producer = make_entry("p1", role="producer", qty=5000)
        strategy = AdditiveScoring()
        assert strategy.score(consumer, make_offer()).reasons[0].endswith("matches your listing")
        assert strategy.score(producer, make_requirement()).reasons[0].startswith("Supplies")
