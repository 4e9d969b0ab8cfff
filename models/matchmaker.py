"""
models/matchmaker.py
════════════════════
MatchmakingEngine — filter / rank pipeline over a pool of counterpart entries.

Pipeline
────────
  1. Role gate      — offers look for consumers, requirements for producers;
                      a user's own peer records are never offered back to them.
  2. Pre-filter     — materials_match ∧ quantity_matches ∧ location_matches
                      (strict boolean gate, separate from the softer scorer).
  3. Score          — the configured ScoringStrategy annotates each survivor
                      with a 0–100 score and up to 3 reasons; a strategy may
                      reject a pair outright by returning None.
  4. Rank           — descending score, ties keep pool order.

Usage
─────
  engine  = MatchmakingEngine()                      # additive rubric
  results = engine.rank_candidates(pool, requirement)
  results = engine.rank_for_queries(pool, user_offers)   # de-duplicated
"""

from __future__ import annotations

from typing import Iterable, Sequence

from backend.schemas import CounterpartEntry, MatchResult, MaterialOffer, MaterialRequirement, Role
from models.impact import co2_for_quantity
from models.scorer import AdditiveScoring, Query, ScoringStrategy
from utils.constants import DEFAULT_TABLES, MatchingTables
from utils.logger import component_logger
from utils.matching_rules import location_matches, materials_match, quantity_matches

logger = component_logger("ranking")


def counterpart_role_for(query: Query) -> Role:
    """Offers are matched with consumers, requirements with producers."""
    return "consumer" if isinstance(query, MaterialOffer) else "producer"


class MatchmakingEngine:
    """
    Parameters
    ----------
    strategy : scorer used to rank pre-filter survivors (default: additive)
    tables   : synonym / region tables shared with the pre-filter
    top_k    : optional cap on returned results
    """

    def __init__(
        self,
        strategy: ScoringStrategy | None = None,
        tables: MatchingTables = DEFAULT_TABLES,
        top_k: int | None = None,
    ) -> None:
        self.tables = tables
        self.strategy = strategy or AdditiveScoring(tables)
        self.top_k = top_k

    # ── filtering ─────────────────────────────────────────────────────────────

    def is_compatible(self, entry: CounterpartEntry, query: Query) -> bool:
        return (
            materials_match(entry.material_type, query.material_type, self.tables)
            and quantity_matches(query.quantity, entry.quantity)
            and location_matches(entry.city, query.location, self.tables)
        )

    def filter_candidates(
        self, pool: Sequence[CounterpartEntry], query: Query
    ) -> list[tuple[int, CounterpartEntry]]:
        """Return (pool position, entry) for every entry passing the gates."""
        role = counterpart_role_for(query)
        survivors: list[tuple[int, CounterpartEntry]] = []
        for pos, entry in enumerate(pool):
            if entry.role != role:
                continue
            if query.owner_id and entry.owner_id == query.owner_id:
                continue
            if self.is_compatible(entry, query):
                survivors.append((pos, entry))
        return survivors

    # ── ranking ───────────────────────────────────────────────────────────────

    def _to_result(self, entry: CounterpartEntry, query: Query) -> MatchResult | None:
        card = self.strategy.score(entry, query)
        if card is None:
            return None
        return MatchResult(
            query_id=query.id,
            counterpart_id=entry.id,
            counterpart_name=entry.company_name,
            counterpart_city=entry.city,
            score=card.score,
            reasons=card.reasons,
            material_type=query.material_type,
            quantity=query.quantity,
            location=query.location,
            price_per_kg=entry.price_per_kg,
            required_quantity=entry.quantity,
            distance_km=card.distance_km,
            co2_saved=co2_for_quantity(query.quantity),
            source="directory",
            is_synthetic=False,
        )

    def _scored(
        self, pool: Sequence[CounterpartEntry], query: Query
    ) -> list[tuple[int, MatchResult]]:
        scored: list[tuple[int, MatchResult]] = []
        for pos, entry in self.filter_candidates(pool, query):
            result = self._to_result(entry, query)
            if result is not None:
                scored.append((pos, result))
        return scored

    def _finish(self, scored: Iterable[tuple[int, MatchResult]]) -> list[MatchResult]:
        ordered = sorted(scored, key=lambda item: (-item[1].score, item[0]))
        results = [r for _, r in ordered]
        return results[: self.top_k] if self.top_k else results

    def rank_candidates(self, pool: Sequence[CounterpartEntry], query: Query) -> list[MatchResult]:
        """Filter, score and rank `pool` against a single query."""
        results = self._finish(self._scored(pool, query))
        logger.debug(
            f"[{self.strategy.name}] query={query.id} pool={len(pool)} → {len(results)} matches"
        )
        return results

    def rank_for_queries(
        self,
        pool: Sequence[CounterpartEntry],
        queries: Sequence[MaterialOffer] | Sequence[MaterialRequirement],
    ) -> list[MatchResult]:
        """
        Rank `pool` against several queries from the same user. A counterpart
        appears once, attached to its best-scoring query (earlier query wins ties).
        """
        best: dict[str, tuple[int, MatchResult]] = {}
        for query in queries:
            for pos, result in self._scored(pool, query):
                current = best.get(result.counterpart_id)
                if current is None or result.score > current[1].score:
                    best[result.counterpart_id] = (pos, result)
        results = self._finish(best.values())
        logger.debug(
            f"[{self.strategy.name}] {len(queries)} queries × pool={len(pool)} → "
            f"{len(results)} unique matches"
        )
        return results
