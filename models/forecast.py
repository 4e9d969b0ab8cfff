"""
models/forecast.py
──────────────────
Short-horizon waste projection for producers.

Waste is taken as a share of production output (18–25 %), compounded by a
monthly growth rate, starting with the month after `today`. The projected
total can be pre-listed as a MaterialOffer so it enters matching early.

  forecast = forecast_waste("Steel slag", 10_000, growth_rate=5)
  offer    = forecast_to_offer(forecast, owner_id="fac-9", location="Pune")
"""

from __future__ import annotations

import random
from datetime import date

from backend.schemas import ForecastMonth, MaterialOffer, WasteForecast

WASTE_RATIO_RANGE = (0.18, 0.25)
MONTH_NAMES = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


def forecast_waste(
    material_type: str,
    monthly_production: float,
    growth_rate: float = 5.0,
    horizon_months: int = 6,
    today: date | None = None,
    rng: random.Random | None = None,
) -> WasteForecast:
    """
    Without `rng` every month uses the midpoint waste ratio, so the result is
    reproducible; pass a Random to draw a ratio per month instead.
    """
    today = today or date.today()
    low, high = WASTE_RATIO_RANGE
    growth = growth_rate / 100.0

    months: list[ForecastMonth] = []
    for i in range(horizon_months):
        ratio = rng.uniform(low, high) if rng is not None else (low + high) / 2
        waste = round(monthly_production * (1 + growth) ** i * ratio)
        name = MONTH_NAMES[(today.month + i) % 12]
        months.append(ForecastMonth(month=name, waste=max(waste, 0)))

    return WasteForecast(
        material_type=material_type,
        months=months,
        total_waste=sum(m.waste for m in months),
    )


def forecast_to_offer(forecast: WasteForecast, owner_id: str = "", location: str = "") -> MaterialOffer:
    return MaterialOffer(
        material_type=forecast.material_type.lower(),
        quantity=float(forecast.total_waste),
        location=location,
        owner_id=owner_id,
    )
