"""
models/impact.py
────────────────
Environmental impact estimate from quantity alone.

A direct linear proxy (0.5 kg CO₂ and 0.3 kWh per kg diverted), not a physical
model. Figures are estimates for display, never a guarantee.
"""

from __future__ import annotations

from typing import Iterable

from backend.schemas import ImpactEstimate
from utils.constants import CO2_KG_PER_KG, ENERGY_KWH_PER_KG


def co2_for_quantity(quantity: float | None) -> float | None:
    """Whole-kg CO₂ figure attached to matches and deals."""
    if quantity is None or quantity <= 0:
        return None
    return float(round(quantity * CO2_KG_PER_KG))


def calculate_impact(quantity: float) -> ImpactEstimate:
    qty = max(float(quantity or 0.0), 0.0)
    return ImpactEstimate(
        co2_saved=round(qty * CO2_KG_PER_KG, 1),
        waste_diverted=qty,
        energy_saved=round(qty * ENERGY_KWH_PER_KG, 1),
    )


def aggregate_impact(quantities: Iterable[float]) -> ImpactEstimate:
    """Sum of per-quantity estimates."""
    estimates = [calculate_impact(q) for q in quantities]
    return ImpactEstimate(
        co2_saved=round(sum(e.co2_saved for e in estimates), 1),
        waste_diverted=sum(e.waste_diverted for e in estimates),
        energy_saved=round(sum(e.energy_saved for e in estimates), 1),
    )
