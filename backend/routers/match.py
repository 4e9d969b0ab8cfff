"""
backend/routers/match.py
────────────────────────
FastAPI router for material matchmaking.

Endpoints
─────────
POST /api/offers                 — Store a material offer
POST /api/requirements           — Store a material requirement
POST /api/discover/buyers        — Cascade discovery of buyers for an offer
POST /api/discover/suppliers     — Cascade discovery of suppliers for a requirement
GET  /api/discover/{owner_id}    — Discovery across all of a user's records
POST /api/factory-matches        — Score an offer against stored factory profiles
POST /api/deals                  — Promote a chosen match to a pending deal
POST /api/score                  — Score one counterpart with a named strategy
POST /api/forecast               — Project waste and optionally pre-list it as an offer
POST /api/impact                 — Impact estimate for one or more quantities
GET  /api/directory              — List directory entries (optionally by role)
"""

from functools import lru_cache

from fastapi import APIRouter, Body, Depends, HTTPException, Query

from backend.errors import DealPromotionError, DirectoryError
from backend.schemas import (
    CounterpartEntry,
    DealDraft,
    DiscoveryResponse,
    ForecastRequest,
    ImpactEstimate,
    ImpactRequest,
    MatchResult,
    MaterialOffer,
    MaterialRequirement,
    Role,
    ScoreRequest,
    ScoreResponse,
    WasteForecast,
)
from backend.services.discovery import (
    DiscoveryOutcome,
    DiscoveryService,
    build_discovery_service,
    promote_to_deal,
)
from config.settings import get_settings
from models.forecast import forecast_to_offer, forecast_waste
from models.impact import aggregate_impact
from models.scorer import get_strategy
from utils.logger import component_logger

logger = component_logger("api")

router = APIRouter(prefix="/api", tags=["matchmaking"])

# ── service factory (singleton per process) ───────────────────────────────────

@lru_cache(maxsize=1)
def get_discovery_service() -> DiscoveryService:
    logger.info("Initialising DiscoveryService …")
    return build_discovery_service(get_settings())


def _service_dep() -> DiscoveryService:
    return get_discovery_service()


# ── helpers ───────────────────────────────────────────────────────────────────

def _to_response(outcome: DiscoveryOutcome) -> DiscoveryResponse:
    return DiscoveryResponse(
        query_id=outcome.query_id,
        stage=outcome.stage,
        total_matches=len(outcome.matches),
        matches=outcome.matches,
    )


def _storage_unavailable(exc: DirectoryError) -> HTTPException:
    logger.error(f"Directory read failed: {exc}")
    return HTTPException(status_code=503, detail=f"Directory unavailable: {exc}")


# ── endpoints ─────────────────────────────────────────────────────────────────

@router.post("/offers", response_model=MaterialOffer)
async def create_offer(offer: MaterialOffer, service: DiscoveryService = Depends(_service_dep)):
    return await service.store.add_offer(offer)


@router.post("/requirements", response_model=MaterialRequirement)
async def create_requirement(
    requirement: MaterialRequirement, service: DiscoveryService = Depends(_service_dep)
):
    return await service.store.add_requirement(requirement)


@router.post("/discover/buyers", response_model=DiscoveryResponse)
async def discover_buyers(offer: MaterialOffer, service: DiscoveryService = Depends(_service_dep)):
    try:
        return _to_response(await service.discover_for_offer(offer))
    except DirectoryError as exc:
        raise _storage_unavailable(exc)


@router.post("/discover/suppliers", response_model=DiscoveryResponse)
async def discover_suppliers(
    requirement: MaterialRequirement, service: DiscoveryService = Depends(_service_dep)
):
    try:
        return _to_response(await service.discover_for_requirement(requirement))
    except DirectoryError as exc:
        raise _storage_unavailable(exc)


@router.get("/discover/{owner_id}", response_model=DiscoveryResponse)
async def discover_for_user(
    owner_id: str,
    role: Role = Query("producer", description="producer searches with offers, consumer with requirements"),
    service: DiscoveryService = Depends(_service_dep),
):
    try:
        return _to_response(await service.discover_for_user(owner_id, role))
    except DirectoryError as exc:
        raise _storage_unavailable(exc)


@router.post("/factory-matches", response_model=list[MatchResult])
async def factory_matches(offer: MaterialOffer, service: DiscoveryService = Depends(_service_dep)):
    return await service.generate_matches_for_offer(offer)


@router.post("/deals", response_model=DealDraft)
async def create_deal(match: MatchResult = Body(...), seller_id: str = Body(...)):
    try:
        deal = promote_to_deal(match, seller_id)
    except DealPromotionError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    logger.info(f"Deal drafted: listing={deal.listing_id} buyer={deal.buyer_id} value={deal.total_value:.2f}")
    return deal


@router.post("/score", response_model=ScoreResponse)
async def score_pair(body: ScoreRequest, service: DiscoveryService = Depends(_service_dep)):
    query = body.offer if body.counterpart.role == "consumer" else body.requirement
    if query is None:
        expected = "offer" if body.counterpart.role == "consumer" else "requirement"
        raise HTTPException(
            status_code=422,
            detail=f"A {body.counterpart.role} counterpart is scored against an {expected}",
        )
    card = get_strategy(body.strategy, service.engine.tables).score(body.counterpart, query)
    return ScoreResponse(strategy=body.strategy, matched=card is not None, card=card)


@router.post("/forecast", response_model=WasteForecast)
async def forecast(body: ForecastRequest, service: DiscoveryService = Depends(_service_dep)):
    result = forecast_waste(
        body.material_type,
        body.monthly_production,
        growth_rate=body.growth_rate,
        horizon_months=body.horizon_months,
    )
    if body.pre_list:
        offer = forecast_to_offer(result, owner_id=body.owner_id, location=body.location)
        result.listed_offer = await service.store.add_offer(offer)
    return result


@router.post("/impact", response_model=ImpactEstimate)
async def impact(body: ImpactRequest):
    return aggregate_impact(body.quantities)


@router.get("/directory", response_model=list[CounterpartEntry])
async def list_directory(
    role: Role | None = Query(None),
    service: DiscoveryService = Depends(_service_dep),
):
    try:
        return await service.directory.entries(role)
    except DirectoryError as exc:
        raise _storage_unavailable(exc)
