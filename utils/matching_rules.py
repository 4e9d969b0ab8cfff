"""
utils/matching_rules.py
───────────────────────
Normalisation and fuzzy-match primitives shared by every scorer.

All predicates are total: empty or missing inputs return False, never raise.
"""

from __future__ import annotations

from typing import Any

from utils.constants import DEFAULT_TABLES, MatchingTables


def normalize(s: Any) -> str:
    """Lower-case and trim. `None` becomes ''."""
    if s is None:
        return ""
    return str(s).strip().lower()


def _related(phrase: str, value: str) -> bool:
    return phrase in value or value in phrase


def materials_match(a: Any, b: Any, tables: MatchingTables = DEFAULT_TABLES) -> bool:
    """
    Exact, containment in either direction, or both labels falling in the same
    synonym family. Symmetric in `a` and `b`.
    """
    x, y = normalize(a), normalize(b)
    if not x or not y:
        return False
    if x == y or _related(x, y):
        return True
    for phrases in tables.synonyms.values():
        terms = [normalize(t) for t in phrases if normalize(t)]
        if any(_related(t, x) for t in terms) and any(_related(t, y) for t in terms):
            return True
    return False


def _positive(value: Any) -> float | None:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


def quantity_matches(required: Any, available: Any) -> bool:
    """
    Symmetric tolerance band: either quantity lies within [0.5×, 2×] of the
    other, bounds inclusive. Zero, negative or missing quantities never match.
    """
    req, avail = _positive(required), _positive(available)
    if req is None or avail is None:
        return False
    if req * 0.5 <= avail <= req * 2:
        return True
    return avail * 0.5 <= req <= avail * 2


def location_matches(city_a: Any, city_b: Any, tables: MatchingTables = DEFAULT_TABLES) -> bool:
    """Same city after normalisation, or both inside one regional cluster."""
    a, b = normalize(city_a), normalize(city_b)
    if not a or not b:
        return False
    if a == b:
        return True
    for hub, nearby in tables.regions.items():
        hub = normalize(hub)
        places = [normalize(c) for c in nearby if normalize(c)]
        in_a = a == hub or any(c in a for c in places)
        in_b = b == hub or any(c in b for c in places)
        if in_a and in_b:
            return True
    return False


def material_compatibility(a: Any, b: Any, tables: MatchingTables = DEFAULT_TABLES) -> int:
    """
    Blended scorer's material sub-score: 100 exact, 75 listed as compatible in
    `tables.material_compatibility` (either direction), 0 otherwise.
    """
    x, y = normalize(a), normalize(b)
    if not x or not y:
        return 0
    if x == y:
        return 100
    compat = {normalize(k): {normalize(v) for v in vs} for k, vs in tables.material_compatibility.items()}
    if y in compat.get(x, set()) or x in compat.get(y, set()):
        return 75
    return 0
