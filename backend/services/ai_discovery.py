"""
backend/services/ai_discovery.py
────────────────────────────────
AI-augmented discovery façade over an untrusted text-completion oracle.

  • extract_json        — pull the first JSON object / array out of prose or
                          markdown fences; None when nothing parses.
  • OracleAvailability  — one-way circuit breaker (available → unavailable),
                          injected so tests can reset it between cases.
  • LangChainOracle     — ChatOpenAI prompt chain implementing `generate()`,
                          client errors mapped onto OracleError.
  • AIDiscoveryService  — role-specific prompts, timeout, strict validation.

Every public coroutine returns None on any oracle problem. The only side
effect of a failure is tripping the breaker when the model itself is gone.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any, Protocol

import openai
from pydantic import TypeAdapter, ValidationError

from backend.errors import OracleError, OracleUnavailableError
from backend.schemas import (
    AICandidate,
    AIMatchAnalysis,
    FactoryProfile,
    MaterialOffer,
    MaterialRequirement,
)
from utils.logger import component_logger

logger = component_logger("oracle")

_CANDIDATE_LIST = TypeAdapter(list[AICandidate])

# ─────────────────────────────────────────────────────────────────────────────
#  JSON extraction
# ─────────────────────────────────────────────────────────────────────────────

def extract_json(text: Any) -> Any | None:
    """
    Slice from the first '{' or '[' to the last '}' or ']' and parse.
    Returns None instead of raising on any failure.
    """
    if not isinstance(text, str):
        return None
    starts = [i for i in (text.find("{"), text.find("[")) if i != -1]
    end = max(text.rfind("}"), text.rfind("]"))
    if not starts or end == -1:
        return None
    start = min(starts)
    if end < start:
        return None
    try:
        return json.loads(text[start:end + 1])
    except (ValueError, RecursionError):
        return None


# ─────────────────────────────────────────────────────────────────────────────
#  Circuit breaker
# ─────────────────────────────────────────────────────────────────────────────

class OracleAvailability:
    """Process-lifetime availability flag. Only ever moves to unavailable."""

    def __init__(self) -> None:
        self._available = True
        self.reason: str | None = None

    @property
    def available(self) -> bool:
        return self._available

    def trip(self, reason: str) -> None:
        if self._available:
            logger.error(f"[oracle] disabled for the rest of this process: {reason}")
        self._available = False
        self.reason = reason

    def reset(self) -> None:
        self._available = True
        self.reason = None


def is_permanent_failure(exc: BaseException) -> bool:
    """
    True only when the model itself is gone: `OracleUnavailableError`,
    `openai.NotFoundError`, or an HTTP status error carrying 404. Message text
    is never inspected, so transport failures stay transient.
    """
    if isinstance(exc, (OracleUnavailableError, openai.NotFoundError)):
        return True
    return getattr(exc, "status_code", None) == 404


# ─────────────────────────────────────────────────────────────────────────────
#  Oracle transport
# ─────────────────────────────────────────────────────────────────────────────

class TextOracle(Protocol):
    async def generate(self, prompt: str) -> str:
        ...


class LangChainOracle:
    """
    Text oracle over a LangChain runnable (prompt | ChatOpenAI).

    Client failures are re-raised as `OracleUnavailableError` when the model
    is missing (HTTP 404) and as `OracleError` otherwise.
    """

    def __init__(self, chain: Any, model: str = "") -> None:
        self.model = model
        self._chain = chain

    @classmethod
    def create(
        cls,
        api_key: str,
        model: str = "gpt-4o-mini",
        temperature: float = 0.7,
        timeout_seconds: float = 8.0,
    ) -> "LangChainOracle":
        from langchain_core.prompts import ChatPromptTemplate
        from langchain_openai import ChatOpenAI

        prompt = ChatPromptTemplate.from_messages([
            (
                "system",
                "You are a circular-economy marketplace analyst for Indian industry. "
                "Answer with JSON only. Never wrap it in commentary.",
            ),
            ("human", "{prompt}"),
        ])
        llm = ChatOpenAI(
            model=model,
            temperature=temperature,
            api_key=api_key,
            timeout=timeout_seconds,
            max_retries=0,
        )
        return cls(prompt | llm, model=model)

    async def generate(self, prompt: str) -> str:
        try:
            response = await self._chain.ainvoke({"prompt": prompt})
        except openai.APIError as exc:
            if is_permanent_failure(exc):
                raise OracleUnavailableError(f"model '{self.model}' not available: {exc}") from exc
            raise OracleError(f"{type(exc).__name__}: {exc}") from exc
        content = response.content
        return content if isinstance(content, str) else json.dumps(content)


# ─────────────────────────────────────────────────────────────────────────────
#  Prompts
# ─────────────────────────────────────────────────────────────────────────────

_CANDIDATE_SHAPE = (
    '[{"factoryName": "...", "city": "...", "pricePerKg": number, '
    '"compatibilityScore": number, "reasons": ["...", "...", "..."], '
    '"requiredQuantity": number}]'
)


def buyer_discovery_prompt(offer: MaterialOffer, count: int) -> str:
    return (
        f"Find {count} realistic industrial buyers in India for:\n"
        f"Material: {offer.material_type}\n"
        f"Quantity: {offer.quantity} kg\n"
        f"Location: {offer.location or 'Mumbai'}\n\n"
        f"Return ONLY a JSON array of {count} objects: "
        + _CANDIDATE_SHAPE
    )


def supplier_discovery_prompt(requirement: MaterialRequirement, count: int) -> str:
    return (
        f"Find {count} realistic industrial suppliers in India producing:\n"
        f"Material: {requirement.material_type}\n"
        f"Quantity needed: {requirement.quantity} kg\n"
        f"Location: {requirement.location or 'Mumbai'}\n\n"
        f"Return ONLY a JSON array of {count} objects "
        f"(requiredQuantity = quantity they can supply): "
        + _CANDIDATE_SHAPE
    )


def match_analysis_prompt(offer: MaterialOffer, factory: FactoryProfile) -> str:
    return (
        "Analyze compatibility for a circular economy.\n"
        f"Waste: {offer.material_type} ({offer.quantity}kg) at {offer.location}.\n"
        f"Buyer: {factory.factory_name} at {factory.city}.\n"
        'Return ONLY a JSON object: {"score": number, "reasons": string[] (at most 3), '
        '"consultation": string}'
    )


# ─────────────────────────────────────────────────────────────────────────────
#  Façade
# ─────────────────────────────────────────────────────────────────────────────

class AIDiscoveryService:
    """
    Parameters
    ----------
    oracle          : text oracle, or None when no AI key is configured
    availability    : shared circuit breaker (one per process in production)
    timeout_seconds : hard cap on each oracle call
    candidate_count : how many synthesised candidates to ask for
    """

    def __init__(
        self,
        oracle: TextOracle | None,
        availability: OracleAvailability | None = None,
        timeout_seconds: float = 8.0,
        candidate_count: int = 3,
    ) -> None:
        self.oracle = oracle
        self.availability = availability or OracleAvailability()
        self.timeout_seconds = timeout_seconds
        self.candidate_count = candidate_count

    @property
    def available(self) -> bool:
        return self.oracle is not None and self.availability.available

    async def _ask(self, prompt: str, purpose: str) -> Any | None:
        if not self.available:
            return None
        try:
            raw = await asyncio.wait_for(self.oracle.generate(prompt), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            logger.warning(f"[oracle] {purpose}: timed out after {self.timeout_seconds}s")
            return None
        except Exception as exc:
            if is_permanent_failure(exc):
                self.availability.trip(f"{type(exc).__name__}: {exc}")
            else:
                logger.warning(f"[oracle] {purpose} failed ({type(exc).__name__}: {exc})")
            return None

        data = extract_json(raw)
        if data is None:
            logger.warning(f"[oracle] {purpose}: no JSON in response ({len(str(raw))} chars)")
        return data

    def _validate_candidates(self, data: Any, purpose: str) -> list[AICandidate] | None:
        if not isinstance(data, list) or not 1 <= len(data) <= self.candidate_count:
            logger.warning(f"[oracle] {purpose}: expected 1–{self.candidate_count} item array, rejected")
            return None
        try:
            return _CANDIDATE_LIST.validate_python(data)
        except ValidationError as exc:
            logger.warning(f"[oracle] {purpose}: {exc.error_count()} shape violation(s), rejected")
            return None

    async def discover_buyers(self, offer: MaterialOffer) -> list[AICandidate] | None:
        data = await self._ask(buyer_discovery_prompt(offer, self.candidate_count), "buyer discovery")
        return None if data is None else self._validate_candidates(data, "buyer discovery")

    async def discover_suppliers(self, requirement: MaterialRequirement) -> list[AICandidate] | None:
        data = await self._ask(
            supplier_discovery_prompt(requirement, self.candidate_count), "supplier discovery"
        )
        return None if data is None else self._validate_candidates(data, "supplier discovery")

    async def analyze_match(self, offer: MaterialOffer, factory: FactoryProfile) -> AIMatchAnalysis | None:
        data = await self._ask(match_analysis_prompt(offer, factory), "match analysis")
        if not isinstance(data, dict):
            return None
        try:
            return AIMatchAnalysis.model_validate(data)
        except ValidationError as exc:
            logger.warning(f"[oracle] match analysis: {exc.error_count()} shape violation(s), rejected")
            return None
