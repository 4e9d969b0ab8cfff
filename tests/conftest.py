"""
Shared test fixtures: sample records, a spy oracle and service builders.
"""

from __future__ import annotations

import json
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from backend.schemas import CounterpartEntry, MaterialOffer, MaterialRequirement
from backend.services.ai_discovery import AIDiscoveryService, OracleAvailability
from backend.services.directory import CounterpartDirectory, FactoryRegistry, ListingStore
from backend.services.discovery import DiscoveryService
from models.matchmaker import MatchmakingEngine
from utils.constants import DEMO_FACTORIES


# ============ Sample Data ============

def make_entry(id_: str, role: str = "producer", material: str = "Steel slag",
               qty: float | None = 5000, city: str = "Mumbai", **kwargs: Any) -> CounterpartEntry:
    return CounterpartEntry(
        id=id_, company_name=kwargs.pop("name", f"Company {id_}"), city=city, role=role,
        material_type=material, quantity=qty, price_per_kg=kwargs.pop("price", 10.0), **kwargs,
    )


def make_offer(material: str = "Steel slag", qty: float | None = 5000, city: str = "Mumbai",
               **kwargs: Any) -> MaterialOffer:
    return MaterialOffer(material_type=material, quantity=qty, location=city, **kwargs)


def make_requirement(material: str = "Steel slag", qty: float | None = 5000, city: str = "Mumbai",
                     **kwargs: Any) -> MaterialRequirement:
    return MaterialRequirement(material_type=material, quantity=qty, location=city, **kwargs)


CANDIDATES_JSON = json.dumps([
    {"factoryName": "Konkan Reclaim", "city": "Thane", "pricePerKg": 30,
     "compatibilityScore": 81, "reasons": ["Close to port", "Handles slag"], "requiredQuantity": 4000},
    {"factoryName": "Deccan Recovery", "city": "Pune", "pricePerKg": 28.5,
     "compatibilityScore": 93, "reasons": ["Same cluster"], "requiredQuantity": 5000},
])


# ============ Oracle spies ============

def spy_oracle(return_value: str | None = None, side_effect: Any = None) -> MagicMock:
    oracle = MagicMock()
    oracle.generate = AsyncMock(return_value=return_value, side_effect=side_effect)
    return oracle


@pytest.fixture
def availability() -> OracleAvailability:
    breaker = OracleAvailability()
    yield breaker
    breaker.reset()


@pytest.fixture
def build_service(availability):
    """Factory: DiscoveryService over a given pool and oracle."""

    def _build(pool: list[CounterpartEntry] | None = None, oracle: Any = None,
               store: ListingStore | None = None, **kwargs: Any) -> DiscoveryService:
        store = store or ListingStore()
        ai = AIDiscoveryService(oracle, availability, timeout_seconds=1.0, candidate_count=3)
        return DiscoveryService(
            directory=CounterpartDirectory(pool or [], store),
            store=store,
            ai=ai,
            engine=MatchmakingEngine(),
            factories=FactoryRegistry(kwargs.pop("factories", DEMO_FACTORIES)),
            **kwargs,
        )

    return _build
