"""
backend/errors.py
─────────────────
Exception hierarchy for the matching engine.

Oracle errors never leave the AI façade; directory errors always propagate to
the caller of the engine.
"""


class MatchEngineError(Exception):
    """Base exception for all matching-engine errors."""
    pass


class DirectoryError(MatchEngineError):
    """Listing / directory storage failure (collaborator outside the engine)."""
    pass


class OracleError(MatchEngineError):
    """Transient oracle failure: network, timeout, unusable output."""
    pass


class OracleUnavailableError(OracleError):
    """Permanent oracle failure: the model is gone. Trips the circuit breaker."""
    pass


class DealPromotionError(MatchEngineError):
    """A match that cannot become a deal (e.g. a static fallback illustration)."""
    pass
