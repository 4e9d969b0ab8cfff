"""
backend/services/discovery.py
═════════════════════════════
DiscoveryService — fallback cascade that always returns something to show.

Per request
───────────
  LOCAL_LOOKUP ──hit──▶ DONE
       │ empty
  AI_LOOKUP ─────hit──▶ DONE        (oracle scores / reasons taken as-is)
       │ None / invalid
  STATIC_FALLBACK ────▶ DONE        (fixed illustrations, source="static")

Each stage runs at most once, strictly in order. The only state shared
between requests is the oracle circuit breaker inside AIDiscoveryService.

Also here:
  • generate_matches_for_offer — score one offer against stored factory
    profiles (oracle analysis first, factory-profile rubric otherwise)
  • promote_to_deal            — turn a chosen match into a pending DealDraft
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Awaitable, Callable, Sequence

from backend.errors import DealPromotionError
from backend.schemas import (
    AICandidate,
    CascadeStage,
    DealDraft,
    MatchResult,
    MaterialOffer,
    MaterialRequirement,
    Role,
)
from backend.services.ai_discovery import AIDiscoveryService, LangChainOracle, OracleAvailability
from backend.services.directory import CounterpartDirectory, FactoryRegistry, ListingStore
from config.settings import Settings
from models.impact import co2_for_quantity
from models.matchmaker import MatchmakingEngine, counterpart_role_for
from models.scorer import Query, get_strategy, score_buyer_factory
from utils.constants import (
    DEFAULT_PRICE_PER_KG,
    DEMO_FACTORIES,
    DEMO_OFFER,
    DEMO_REQUIREMENT,
    FALLBACK_PROFILES,
    STATIC_DIRECTORY,
)
from utils.data_loader import load_directory_file, load_matching_tables
from utils.logger import component_logger

logger = component_logger("cascade")


@dataclass
class DiscoveryOutcome:
    """Ranked matches plus the cascade stage that produced them."""
    stage:    CascadeStage
    matches:  list[MatchResult] = field(default_factory=list)
    query_id: str | None = None


def _by_score(results: list[MatchResult]) -> list[MatchResult]:
    return sorted(results, key=lambda r: -r.score)


def candidate_to_match(candidate: AICandidate, query: Query, idx: int) -> MatchResult:
    return MatchResult(
        query_id=query.id,
        counterpart_id=f"ai-{idx}",
        counterpart_name=candidate.factory_name,
        counterpart_city=candidate.city,
        score=round(candidate.compatibility_score),
        reasons=candidate.reasons,
        material_type=query.material_type,
        quantity=query.quantity,
        location=query.location,
        price_per_kg=candidate.price_per_kg,
        required_quantity=candidate.required_quantity,
        co2_saved=co2_for_quantity(query.quantity),
        source="ai",
        is_synthetic=True,
    )


def static_fallback(query: Query) -> list[MatchResult]:
    """Fixed illustrative candidates, flagged so they are never mistaken for real matches."""
    return [
        MatchResult(
            query_id=query.id,
            counterpart_id=f"demo-{i}",
            counterpart_name=p["name"],
            counterpart_city=p["city"],
            score=p["score"],
            reasons=list(p["reasons"]),
            material_type=query.material_type,
            quantity=query.quantity,
            location=query.location,
            price_per_kg=float(p["rate"]),
            required_quantity=query.quantity,
            co2_saved=co2_for_quantity(query.quantity),
            source="static",
            is_synthetic=True,
        )
        for i, p in enumerate(FALLBACK_PROFILES)
    ]


class DiscoveryService:
    """
    Parameters
    ----------
    directory       : counterpart pool for stage 1
    store           : the users' own offers / requirements
    ai              : oracle façade for stage 2 and per-pair analysis
    engine          : filter / rank pipeline
    factories       : stored factory profiles (per-factory generation)
    min_match_score : threshold for keeping per-factory matches
    """

    def __init__(
        self,
        directory: CounterpartDirectory,
        store: ListingStore,
        ai: AIDiscoveryService,
        engine: MatchmakingEngine | None = None,
        factories: FactoryRegistry | None = None,
        min_match_score: float = 60.0,
    ) -> None:
        self.directory = directory
        self.store = store
        self.ai = ai
        self.engine = engine or MatchmakingEngine()
        self.factories = factories or FactoryRegistry()
        self.min_match_score = min_match_score

    # ── cascade ───────────────────────────────────────────────────────────────

    async def _cascade(
        self,
        queries: Sequence[Query],
        primary: Query,
        ask_oracle: Callable[[Query], Awaitable[list[AICandidate] | None]],
    ) -> DiscoveryOutcome:
        role = counterpart_role_for(primary)

        if queries:
            pool = await self.directory.entries(role)
            local = self.engine.rank_for_queries(pool, queries)
            if local:
                logger.info(f"[cascade] query={primary.id} stage=local → {len(local)} matches")
                return DiscoveryOutcome(stage="local", matches=local, query_id=primary.id)

        logger.info(f"[cascade] query={primary.id} local empty, asking oracle")
        candidates = await ask_oracle(primary)
        if candidates:
            matches = _by_score([candidate_to_match(c, primary, i) for i, c in enumerate(candidates)])
            logger.info(f"[cascade] query={primary.id} stage=ai → {len(matches)} candidates")
            return DiscoveryOutcome(stage="ai", matches=matches, query_id=primary.id)

        logger.info(f"[cascade] query={primary.id} stage=static fallback")
        return DiscoveryOutcome(stage="static", matches=static_fallback(primary), query_id=primary.id)

    async def discover_for_offer(self, offer: MaterialOffer) -> DiscoveryOutcome:
        """Buyer discovery for one offer."""
        return await self._cascade([offer], offer, self.ai.discover_buyers)

    async def discover_for_requirement(self, requirement: MaterialRequirement) -> DiscoveryOutcome:
        """Supplier discovery for one requirement."""
        return await self._cascade([requirement], requirement, self.ai.discover_suppliers)

    async def discover_for_user(self, owner_id: str, role: Role) -> DiscoveryOutcome:
        """
        Discovery across all of a user's records: producers search with their
        offers, consumers with their requirements. Stages 2–3 use the first
        record, or a demo query when the user has none.
        """
        if role == "producer":
            offers = await self.store.offers_by_owner(owner_id)
            primary = offers[0] if offers else DEMO_OFFER
            return await self._cascade(offers, primary, self.ai.discover_buyers)

        requirements = await self.store.requirements_by_owner(owner_id)
        primary = requirements[0] if requirements else DEMO_REQUIREMENT
        return await self._cascade(requirements, primary, self.ai.discover_suppliers)

    # ── per-factory generation ────────────────────────────────────────────────

    async def generate_matches_for_offer(self, offer: MaterialOffer) -> list[MatchResult]:
        """
        Score `offer` against every buyer-capable factory except the owner's
        own. Oracle analysis wins when valid; otherwise the factory-profile
        rubric. Only scores ≥ min_match_score are kept.
        """
        results: list[MatchResult] = []
        for factory in await self.factories.buyers():
            if factory.id == offer.owner_id:
                continue

            analysis = await self.ai.analyze_match(offer, factory)
            if analysis is not None:
                score, reasons = round(analysis.score), analysis.reasons
            else:
                card = score_buyer_factory(offer, factory)
                score, reasons = card.score, card.reasons

            if score < self.min_match_score:
                continue
            results.append(MatchResult(
                query_id=offer.id,
                counterpart_id=factory.id,
                counterpart_name=factory.factory_name,
                counterpart_city=factory.city,
                score=score,
                reasons=reasons,
                material_type=offer.material_type,
                quantity=offer.quantity,
                location=offer.location,
                price_per_kg=factory.price_per_kg or DEFAULT_PRICE_PER_KG,
                required_quantity=factory.max_quantity or offer.quantity,
                co2_saved=co2_for_quantity(offer.quantity),
                source="directory",
            ))

        logger.info(f"Generated {len(results)} factory matches for offer {offer.id}")
        return _by_score(results)


def promote_to_deal(match: MatchResult, seller_id: str) -> DealDraft:
    """Build a pending deal from a match the seller acted on."""
    if match.source == "static":
        raise DealPromotionError(
            f"Match '{match.counterpart_id}' is a static illustration and cannot become a deal"
        )
    if match.quantity is None or match.quantity <= 0:
        raise DealPromotionError(f"Match for query '{match.query_id}' has no quantity")

    price = match.price_per_kg or 0.0
    return DealDraft(
        listing_id=match.query_id,
        buyer_id=match.counterpart_id,
        seller_id=seller_id,
        material_type=match.material_type,
        quantity=match.quantity,
        city=match.location,
        price_per_kg=price,
        total_value=match.quantity * price,
        co2_saved=co2_for_quantity(match.quantity) or 0.0,
        compatibility_score=match.score,
    )


def build_discovery_service(settings: Settings, store: ListingStore | None = None) -> DiscoveryService:
    """Wire the production service from settings (one per process)."""
    tables = load_matching_tables()
    store = store or ListingStore()
    directory = CounterpartDirectory([*STATIC_DIRECTORY, *load_directory_file()], store)

    oracle = None
    if settings.ai_enabled:
        oracle = LangChainOracle.create(
            api_key=settings.openai_api_key,
            model=settings.ai_model,
            temperature=settings.ai_temperature,
            timeout_seconds=settings.ai_timeout_seconds,
        )
    ai = AIDiscoveryService(
        oracle,
        OracleAvailability(),
        timeout_seconds=settings.ai_timeout_seconds,
        candidate_count=settings.ai_candidate_count,
    )
    engine = MatchmakingEngine(
        strategy=get_strategy(settings.scoring_strategy, tables),
        tables=tables,
        top_k=settings.top_k_matches,
    )
    logger.info(
        f"DiscoveryService ready — strategy={engine.strategy.name} "
        f"directory={len(directory.static_entries)} ai={'on' if oracle else 'off'}"
    )
    return DiscoveryService(
        directory=directory,
        store=store,
        ai=ai,
        engine=engine,
        factories=FactoryRegistry(DEMO_FACTORIES),
        min_match_score=settings.min_match_score,
    )
