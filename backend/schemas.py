"""
backend/schemas.py
──────────────────
Pydantic v2 models shared by the matching engine and the FastAPI endpoints.

Sections
────────
  1. Marketplace records       — MaterialOffer, MaterialRequirement,
                                 CounterpartEntry, FactoryProfile
  2. Engine outputs            — ScoreCard, MatchResult, ImpactEstimate, DealDraft
  3. Oracle payloads           — AICandidate, AIMatchAnalysis (strictly validated)
  4. Request / response models — DiscoveryResponse, ScoreRequest, ImpactRequest,
                                 WasteForecast, …
"""

from typing import Literal, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["producer", "consumer"]
FactoryRole = Literal["producer", "consumer", "both"]
MatchSource = Literal["directory", "ai", "static"]
CascadeStage = Literal["local", "ai", "static"]


def _new_id(prefix: str) -> str:
    return f"{prefix}-{uuid4().hex[:10]}"


# ─────────────────────────────────────────────────────────────────────────────
#  1. Marketplace records
# ─────────────────────────────────────────────────────────────────────────────

class MaterialOffer(BaseModel):
    """A producer's listed surplus material. Missing fields never fail validation."""
    id:            str = Field(default_factory=lambda: _new_id("offer"))
    material_type: str = Field("", description="Free-text material label, e.g. 'Steel slag'")
    quantity:      Optional[float] = Field(None, description="Quantity in kg")
    location:      str = Field("", description="Origin city / region")
    hazardous:     bool = False
    owner_id:      str = ""
    latitude:      Optional[float] = None
    longitude:     Optional[float] = None


class MaterialRequirement(BaseModel):
    """A consumer's declared material need."""
    id:            str = Field(default_factory=lambda: _new_id("req"))
    material_type: str = ""
    quantity:      Optional[float] = Field(None, description="Desired quantity in kg")
    location:      str = Field("", description="Preferred city / region")
    owner_id:      str = ""
    latitude:      Optional[float] = None
    longitude:     Optional[float] = None


class CounterpartEntry(BaseModel):
    """
    Directory record evaluated against a query. `role` selects the scorer:
    consumers are scored against offers, producers against requirements.
    """
    id:            str
    company_name:  str
    city:          str = ""
    role:          Role
    material_type: str = ""
    quantity:      Optional[float] = None
    price_per_kg:  Optional[float] = None
    industry_type: str = "Other"
    owner_id:      Optional[str] = None
    latitude:      Optional[float] = None
    longitude:     Optional[float] = None


class FactoryProfile(BaseModel):
    """Stored factory profile used by per-factory match generation."""
    id:                      str
    factory_name:            str
    city:                    str = ""
    accepted_material_types: list[str] = Field(default_factory=list)
    min_quantity:            float = 0.0
    max_quantity:            Optional[float] = None
    role:                    FactoryRole = "consumer"
    price_per_kg:            Optional[float] = None


# ─────────────────────────────────────────────────────────────────────────────
#  2. Engine outputs
# ─────────────────────────────────────────────────────────────────────────────

class ScoreCard(BaseModel):
    """Output of a single scoring call."""
    score:       int = Field(..., ge=0, le=100)
    reasons:     list[str] = Field(default_factory=list, max_length=3)
    distance_km: Optional[float] = None


class MatchResult(BaseModel):
    """One ranked counterpart for a query. Produced fresh on every call."""
    query_id:          str
    counterpart_id:    str
    counterpart_name:  str
    counterpart_city:  str = ""
    score:             int = Field(..., ge=0, le=100)
    reasons:           list[str] = Field(default_factory=list, max_length=3)
    material_type:     str = ""
    quantity:          Optional[float] = None
    location:          str = ""
    price_per_kg:      Optional[float] = None
    required_quantity: Optional[float] = None
    distance_km:       Optional[float] = None
    co2_saved:         Optional[float] = None
    source:            MatchSource = "directory"
    is_synthetic:      bool = Field(
        False,
        description="True for oracle-synthesised or static fallback candidates, "
                    "which are illustrations rather than real businesses.",
    )


class ImpactEstimate(BaseModel):
    """Linear proxy estimate derived from quantity alone. Not physically modelled."""
    co2_saved:      float
    waste_diverted: float
    energy_saved:   float


class DealDraft(BaseModel):
    """Pending deal built from a match the user chose to act on."""
    listing_id:          str
    buyer_id:            str
    seller_id:           str
    material_type:       str
    status:              Literal["pending"] = "pending"
    quantity:            float
    city:                str
    price_per_kg:        float
    total_value:         float
    co2_saved:           float
    compatibility_score: int


# ─────────────────────────────────────────────────────────────────────────────
#  3. Oracle payloads (strict: "80" is not coerced into 80)
# ─────────────────────────────────────────────────────────────────────────────

class AICandidate(BaseModel):
    """One synthesised counterpart returned by the oracle."""
    model_config = ConfigDict(strict=True, populate_by_name=True)

    factory_name:        str = Field(..., alias="factoryName", min_length=1)
    city:                str = Field(..., min_length=1)
    price_per_kg:        float = Field(..., alias="pricePerKg", ge=0)
    compatibility_score: float = Field(..., alias="compatibilityScore", ge=0, le=100)
    reasons:             list[str] = Field(..., min_length=1, max_length=3)
    required_quantity:   float = Field(..., alias="requiredQuantity", gt=0)


class AIMatchAnalysis(BaseModel):
    """Per-pair analysis returned by the oracle."""
    model_config = ConfigDict(strict=True)

    score:        float = Field(..., ge=0, le=100)
    reasons:      list[str] = Field(..., min_length=1, max_length=3)
    consultation: str = ""


# ─────────────────────────────────────────────────────────────────────────────
#  4. Request / response models
# ─────────────────────────────────────────────────────────────────────────────

class DiscoveryResponse(BaseModel):
    """Response envelope for all discovery endpoints."""
    query_id:      Optional[str] = None
    stage:         CascadeStage
    total_matches: int
    matches:       list[MatchResult]


class ScoreRequest(BaseModel):
    """Body for POST /api/score — score one counterpart against one query."""
    counterpart: CounterpartEntry
    offer:       Optional[MaterialOffer] = None
    requirement: Optional[MaterialRequirement] = None
    strategy:    Literal["additive", "proximity_blend"] = "additive"


class ScoreResponse(BaseModel):
    strategy: str
    matched:  bool
    card:     Optional[ScoreCard] = None


class ImpactRequest(BaseModel):
    """Body for POST /api/impact."""
    quantities: list[float] = Field(..., min_length=1)


class ForecastMonth(BaseModel):
    month: str
    waste: int = Field(..., description="Projected waste in kg")


class WasteForecast(BaseModel):
    """Month-by-month waste projection and the total a producer can pre-list."""
    material_type: str
    months:        list[ForecastMonth]
    total_waste:   int
    listed_offer:  Optional[MaterialOffer] = None


class ForecastRequest(BaseModel):
    """Body for POST /api/forecast."""
    material_type:      str = Field(..., min_length=1)
    monthly_production: float = Field(..., gt=0, description="Production output in kg per month")
    growth_rate:        float = Field(5.0, description="Monthly growth in percent")
    horizon_months:     int = Field(6, ge=1, le=24)
    location:           str = ""
    owner_id:           str = ""
    pre_list:           bool = Field(False, description="Store the projected total as an offer")


class HealthResponse(BaseModel):
    """Response for GET /health."""
    status:            str
    directory_entries: int
    ai_enabled:        bool
    ai_available:      bool
    version:           str = "1.0.0"
