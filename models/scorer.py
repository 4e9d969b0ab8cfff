"""
models/scorer.py
════════════════
Deterministic compatibility scoring (0–100) with human-readable reasons.

Two scoring strategies live side by side behind `ScoringStrategy`:

  additive         — Weighted additive rubric over boolean signals
                     (directory discovery, the default).
                       Material compatibility   40 pts
                       Quantity compatibility   30 pts
                       Location compatibility   30 pts  (10 when regions differ)
                     Never rejects: a miss only withholds points.

  proximity_blend  — Continuous sub-scores blended for records that carry
                     coordinates.
                       material   100 exact / 75 compatible / 0 none  × 0.4
                       proximity  distance buckets                     × 0.3
                       quantity   min(a,b) / max(a,b) × 100            × 0.3
                     Material 0 is a hard gate: the pair is rejected (None).

The two formulas disagree on purpose-built inputs and are kept separate;
callers pick one by name (see `get_strategy`).

`score_buyer_factory` is the richer additive variant used when generating
matches against stored factory profiles (adds hazard and circular-economy
bonuses, still capped at 100).

Every scorer is pure: the same inputs always produce the same card.
"""

from __future__ import annotations

from typing import Any, Protocol, Union

from backend.schemas import (
    CounterpartEntry,
    FactoryProfile,
    MaterialOffer,
    MaterialRequirement,
    ScoreCard,
)
from utils.constants import DEFAULT_TABLES, MatchingTables
from utils.geo import haversine_km
from utils.matching_rules import (
    location_matches,
    material_compatibility,
    materials_match,
    normalize,
    quantity_matches,
)

Query = Union[MaterialOffer, MaterialRequirement]

MAX_SCORE = 100
MAX_REASONS = 3

W_MATERIAL = 40
W_QUANTITY = 30
W_LOCATION = 30
W_LOCATION_MISS = 10

BLEND_WEIGHTS = {
    "material":  0.4,
    "proximity": 0.3,
    "quantity":  0.3,
}

# (upper bound km, points); first bucket the distance falls under wins
_PROXIMITY_BUCKETS: list[tuple[float, int]] = [
    (50.0, 100),
    (150.0, 80),
    (500.0, 50),
    (1000.0, 25),
]
_PROXIMITY_FLOOR = 10


def _card(score: int, reasons: list[str], distance_km: float | None = None) -> ScoreCard:
    return ScoreCard(
        score=max(0, min(score, MAX_SCORE)),
        reasons=reasons[:MAX_REASONS],
        distance_km=distance_km,
    )


# ─────────────────────────────────────────────────────────────────────────────
#  Additive rubric
# ─────────────────────────────────────────────────────────────────────────────

def score_against_offer(
    counterpart: CounterpartEntry,
    offer: MaterialOffer,
    tables: MatchingTables = DEFAULT_TABLES,
) -> ScoreCard:
    """Score a consumer counterpart against the user's material offer."""
    score = 0
    reasons: list[str] = []

    if materials_match(counterpart.material_type, offer.material_type, tables):
        score += W_MATERIAL
        reasons.append(f"Material '{counterpart.material_type}' matches your listing")
    if quantity_matches(offer.quantity, counterpart.quantity):
        score += W_QUANTITY
        reasons.append("Quantity in acceptable range")
    if location_matches(counterpart.city, offer.location, tables):
        score += W_LOCATION
        reasons.append(f"Location: {counterpart.city}")
    else:
        score += W_LOCATION_MISS
        reasons.append("Different region, logistics can be arranged")

    return _card(score, reasons)


def score_against_requirement(
    counterpart: CounterpartEntry,
    requirement: MaterialRequirement,
    tables: MatchingTables = DEFAULT_TABLES,
) -> ScoreCard:
    """Score a producer counterpart against the user's material requirement."""
    score = 0
    reasons: list[str] = []

    if materials_match(counterpart.material_type, requirement.material_type, tables):
        score += W_MATERIAL
        reasons.append(f"Supplies '{counterpart.material_type}'")
    if quantity_matches(requirement.quantity, counterpart.quantity):
        score += W_QUANTITY
        reasons.append("Quantity matches your requirement")
    if location_matches(counterpart.city, requirement.location, tables):
        score += W_LOCATION
        reasons.append(f"Location: {counterpart.city}")
    else:
        score += W_LOCATION_MISS
        reasons.append("Different region, delivery possible")

    return _card(score, reasons)


def score_buyer_factory(offer: MaterialOffer, factory: FactoryProfile) -> ScoreCard:
    """
    Richer additive variant against a stored factory profile.

      accepted material   +40   (exact label, case-insensitive)
      same city           +25
      quantity in range   +15
      non-hazardous       +10
      circular potential  +10   (always)
    """
    score = 0
    reasons: list[str] = []

    material = normalize(offer.material_type)
    if material and any(normalize(t) == material for t in factory.accepted_material_types):
        score += 40
        reasons.append(f"Material '{offer.material_type}' matches industrial processing capacity")
    city = normalize(offer.location)
    if city and city == normalize(factory.city):
        score += 25
        reasons.append(f"Strategic regional proximity: {offer.location}")
    qty = offer.quantity
    upper = factory.max_quantity or float("inf")  # 0 means no ceiling
    if qty is not None and factory.min_quantity <= qty <= upper:
        score += 15
        reasons.append("Supply volume fits optimal operational threshold")
    if not offer.hazardous:
        score += 10
        reasons.append("Standard material handling (Non-hazardous)")
    score += 10
    reasons.append("Circular integration potential")

    return _card(score, reasons)


# ─────────────────────────────────────────────────────────────────────────────
#  Proximity blend
# ─────────────────────────────────────────────────────────────────────────────

def proximity_score(distance_km: float | None) -> int:
    if distance_km is None:
        return _PROXIMITY_FLOOR
    for bound, points in _PROXIMITY_BUCKETS:
        if distance_km < bound:
            return points
    return _PROXIMITY_FLOOR


def quantity_overlap(a: Any, b: Any) -> float:
    """min/max ratio × 100; 0 when either side is missing or non-positive."""
    try:
        x, y = float(a), float(b)
    except (TypeError, ValueError):
        return 0.0
    if x <= 0 or y <= 0:
        return 0.0
    return min(x, y) / max(x, y) * 100.0


def _coords(record: Any) -> tuple[float, float] | None:
    lat = getattr(record, "latitude", None)
    lon = getattr(record, "longitude", None)
    if lat is None or lon is None:
        return None
    return float(lat), float(lon)


def calculate_match(
    candidate: Any,
    query: Any,
    tables: MatchingTables = DEFAULT_TABLES,
) -> ScoreCard | None:
    """
    Blend continuous sub-scores for two coordinate-bearing records.
    Returns None when the materials are not compatible at all.
    """
    material = material_compatibility(candidate.material_type, query.material_type, tables)
    if material == 0:
        return None

    a, b = _coords(candidate), _coords(query)
    distance = haversine_km(a[0], a[1], b[0], b[1]) if a and b else None
    proximity = proximity_score(distance)
    quantity = quantity_overlap(candidate.quantity, query.quantity)

    score = round(
        BLEND_WEIGHTS["material"] * material
        + BLEND_WEIGHTS["proximity"] * proximity
        + BLEND_WEIGHTS["quantity"] * quantity
    )

    reasons = [
        f"Exact material match: {candidate.material_type}" if material == 100
        else f"'{candidate.material_type}' is compatible with '{query.material_type}'"
    ]
    if distance is not None:
        reasons.append(f"{distance:.0f} km apart")
    else:
        reasons.append("No coordinates, distance not assessed")
    reasons.append(f"Quantity overlap {quantity:.0f}%")

    return _card(int(score), reasons, distance_km=round(distance, 1) if distance is not None else None)


# ─────────────────────────────────────────────────────────────────────────────
#  Strategy interface
# ─────────────────────────────────────────────────────────────────────────────

class ScoringStrategy(Protocol):
    name: str

    def score(self, counterpart: CounterpartEntry, query: Query) -> ScoreCard | None:
        ...


class AdditiveScoring:
    """Role decides the rubric: consumers vs offers, producers vs requirements."""

    name = "additive"

    def __init__(self, tables: MatchingTables = DEFAULT_TABLES) -> None:
        self.tables = tables

    def score(self, counterpart: CounterpartEntry, query: Query) -> ScoreCard:
        if counterpart.role == "consumer":
            return score_against_offer(counterpart, query, self.tables)
        return score_against_requirement(counterpart, query, self.tables)


class ProximityBlendScoring:
    """Hard material gate, then a weighted blend of continuous sub-scores."""

    name = "proximity_blend"

    def __init__(self, tables: MatchingTables = DEFAULT_TABLES) -> None:
        self.tables = tables

    def score(self, counterpart: CounterpartEntry, query: Query) -> ScoreCard | None:
        return calculate_match(counterpart, query, self.tables)


_STRATEGIES = {
    AdditiveScoring.name:       AdditiveScoring,
    ProximityBlendScoring.name: ProximityBlendScoring,
}


def get_strategy(name: str, tables: MatchingTables = DEFAULT_TABLES) -> ScoringStrategy:
    try:
        return _STRATEGIES[normalize(name)](tables)
    except KeyError:
        raise ValueError(f"Unknown scoring strategy '{name}'. Valid: {list(_STRATEGIES)}") from None
