"""
utils/constants.py
──────────────────
Lookup tables and reference data for the matching engine.

  • MatchingTables  — synonym families, regional clusters and the blended
                      scorer's material-compatibility table. Injectable: every
                      matching rule takes a `tables` argument and an override
                      file can replace the defaults (see utils.data_loader).
  • STATIC_DIRECTORY — 10 producers + 10 consumers shipped with the platform.
  • FALLBACK_PROFILES — fixed illustrative candidates returned when both the
                      directory and the oracle come back empty.
"""

from pydantic import BaseModel, Field

from backend.schemas import CounterpartEntry, FactoryProfile, MaterialOffer, MaterialRequirement

# ─────────────────────────────────────────────────────────────────────────────
#  Matching tables
# ─────────────────────────────────────────────────────────────────────────────

_DEFAULT_SYNONYMS: dict[str, list[str]] = {
    "steel":       ["steel slag", "metal shavings"],
    "textile":     ["cotton waste", "textile offcuts"],
    "pharma":      ["chemical effluents", "organic waste"],
    "electronics": ["e-waste", "battery scrap"],
    "plastic":     ["plastic scrap"],
    "ceramic":     ["ceramic waste"],
}

# City → neighbouring cities / enclosing state. Heuristic, not geodata.
_DEFAULT_REGIONS: dict[str, list[str]] = {
    "mumbai":     ["pune", "thane", "navi mumbai"],
    "bangalore":  ["bengaluru", "mysore"],
    "delhi":      ["noida", "gurgaon", "gurugram", "faridabad"],
    "chennai":    ["tamil nadu"],
    "hyderabad":  ["secunderabad"],
    "surat":      ["gujarat"],
    "ahmedabad":  ["gujarat"],
    "pune":       ["mumbai", "maharashtra"],
    "coimbatore": ["tamil nadu"],
    "jamshedpur": ["jharkhand"],
    "raipur":     ["chhattisgarh"],
}

# Blended scorer only: material → materials it can substitute for (75 pts).
_DEFAULT_MATERIAL_COMPATIBILITY: dict[str, list[str]] = {
    "steel slag":     ["fly ash", "metal shavings", "concrete waste"],
    "fly ash":        ["steel slag", "ceramic waste"],
    "metal shavings": ["metal scrap", "steel scrap", "steel slag"],
    "metal scrap":    ["steel scrap", "aluminum scrap", "metal shavings"],
    "cotton waste":   ["textile offcuts", "textile waste"],
    "textile offcuts": ["cotton waste", "textile waste"],
    "plastic scrap":  ["pet flakes", "hdpe regrind"],
    "e-waste":        ["battery scrap"],
    "organic waste":  ["food waste", "biomass"],
    "ceramic waste":  ["concrete waste", "fly ash"],
}


class MatchingTables(BaseModel):
    """Curated tables that improve recall. Never a closed vocabulary."""
    synonyms:               dict[str, list[str]] = Field(default_factory=lambda: dict(_DEFAULT_SYNONYMS))
    regions:                dict[str, list[str]] = Field(default_factory=lambda: dict(_DEFAULT_REGIONS))
    material_compatibility: dict[str, list[str]] = Field(
        default_factory=lambda: dict(_DEFAULT_MATERIAL_COMPATIBILITY)
    )


DEFAULT_TABLES = MatchingTables()


# ─────────────────────────────────────────────────────────────────────────────
#  Static marketplace directory
# ─────────────────────────────────────────────────────────────────────────────

def _entry(id_, name, city, role, material, qty, price, industry) -> CounterpartEntry:
    return CounterpartEntry(
        id=id_, company_name=name, city=city, role=role, material_type=material,
        quantity=qty, price_per_kg=price, industry_type=industry,
    )


STATIC_PRODUCERS: list[CounterpartEntry] = [
    _entry("prod-1",  "Raj Steel Works",        "Mumbai",     "producer", "Steel slag",                   5000, 12, "Steel"),
    _entry("prod-2",  "Shree Textiles Ltd",     "Surat",      "producer", "Cotton waste",                 2000,  8, "Textile"),
    _entry("prod-3",  "MediPharm Labs",         "Hyderabad",  "producer", "Chemical effluents (treated)",  800, 25, "Pharma"),
    _entry("prod-4",  "TechRecycle India",      "Bangalore",  "producer", "E-waste (processed)",          1500, 45, "Electronics"),
    _entry("prod-5",  "GreenPlast Industries",  "Pune",       "producer", "Plastic scrap",                3000, 18, "Chemical"),
    _entry("prod-6",  "Bharat Cement Unit",     "Raipur",     "producer", "Ceramic waste",                4000,  6, "Cement"),
    _entry("prod-7",  "Southern Spinning Co",   "Coimbatore", "producer", "Textile offcuts",              1200, 10, "Textile"),
    _entry("prod-8",  "Metalloy Foundry",       "Jamshedpur", "producer", "Metal shavings",               2500, 22, "Steel"),
    _entry("prod-9",  "Sunrise Pharma Waste",   "Ahmedabad",  "producer", "Organic waste",                 600,  5, "Pharma"),
    _entry("prod-10", "EcoBattery Solutions",   "Chennai",    "producer", "Battery scrap",                 900, 55, "Electronics"),
]

STATIC_CONSUMERS: list[CounterpartEntry] = [
    _entry("cons-1",  "National Steel Corp",      "Mumbai",     "consumer", "Steel slag",                   6000, 14, "Steel"),
    _entry("cons-2",  "Premier Fabrics",          "Surat",      "consumer", "Cotton waste",                 2500,  9, "Textile"),
    _entry("cons-3",  "LifeCare Pharmaceuticals", "Hyderabad",  "consumer", "Chemical effluents (treated)", 1000, 28, "Pharma"),
    _entry("cons-4",  "Digital Components Ltd",   "Bangalore",  "consumer", "E-waste (processed)",          2000, 48, "Electronics"),
    _entry("cons-5",  "Polymer Solutions",        "Pune",       "consumer", "Plastic scrap",                4000, 20, "Chemical"),
    _entry("cons-6",  "Mega Cement Ltd",          "Raipur",     "consumer", "Ceramic waste",                5000,  7, "Cement"),
    _entry("cons-7",  "Weave India Exports",      "Coimbatore", "consumer", "Textile offcuts",              1500, 11, "Textile"),
    _entry("cons-8",  "Alloy Manufacturing Co",   "Jamshedpur", "consumer", "Metal shavings",               3000, 24, "Steel"),
    _entry("cons-9",  "BioPharm Research",        "Ahmedabad",  "consumer", "Organic waste",                 800,  6, "Pharma"),
    _entry("cons-10", "PowerCell Industries",     "Chennai",    "consumer", "Battery scrap",                1200, 58, "Electronics"),
]

STATIC_DIRECTORY: list[CounterpartEntry] = STATIC_PRODUCERS + STATIC_CONSUMERS


# ─────────────────────────────────────────────────────────────────────────────
#  Cascade stage 3: static fallback
# ─────────────────────────────────────────────────────────────────────────────

FALLBACK_PROFILES: list[dict] = [
    {"name": "Reliance Eco-Industrial",     "city": "Pune",      "rate": 58, "score": 98,
     "reasons": ["Strategic location match", "High material recovery efficiency", "Verified scale operations"]},
    {"name": "Indo-Eco Green Tech",         "city": "Mumbai",    "rate": 52, "score": 92,
     "reasons": ["Automated sorting facility", "Regional logistics partnership", "Industrial scale processing"]},
    {"name": "Bharat Industrial Recyclers", "city": "Ahmedabad", "rate": 49, "score": 87,
     "reasons": ["Low carbon footprint transport", "Secure industrial handling", "Market rate compliance"]},
]

# Query used for stages 2–3 when the user has no records yet.
DEMO_OFFER = MaterialOffer(id="demo", material_type="Metal Scrap", quantity=1200, location="Mumbai")
DEMO_REQUIREMENT = MaterialRequirement(id="demo", material_type="Metal Scrap", quantity=1200, location="Mumbai")

DEFAULT_PRICE_PER_KG = 45.0
CO2_KG_PER_KG = 0.5
ENERGY_KWH_PER_KG = 0.3


# ─────────────────────────────────────────────────────────────────────────────
#  Seed factory profiles for per-factory match generation
# ─────────────────────────────────────────────────────────────────────────────

DEMO_FACTORIES: list[FactoryProfile] = [
    FactoryProfile(id="fac-1", factory_name="GreenBuild Construction", city="Mumbai",
                   accepted_material_types=["plastic scrap", "metal scrap", "concrete waste"],
                   min_quantity=100, max_quantity=1000, role="consumer"),
    FactoryProfile(id="fac-2", factory_name="EcoCement Industries", city="Pune",
                   accepted_material_types=["fly ash", "steel slag", "concrete waste"],
                   min_quantity=500, max_quantity=5000, role="consumer"),
    FactoryProfile(id="fac-3", factory_name="CircularFabrics Ltd", city="Ahmedabad",
                   accepted_material_types=["textile waste", "cotton waste"],
                   min_quantity=50, max_quantity=500, role="consumer"),
    FactoryProfile(id="fac-4", factory_name="MetalWorks Recycling", city="Delhi",
                   accepted_material_types=["metal scrap", "steel scrap", "aluminum scrap"],
                   min_quantity=200, max_quantity=2000, role="consumer"),
    FactoryProfile(id="fac-5", factory_name="Organic Solutions", city="Bangalore",
                   accepted_material_types=["organic waste", "food waste", "biomass"],
                   min_quantity=100, max_quantity=1000, role="consumer"),
]
