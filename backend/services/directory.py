"""
backend/services/directory.py
─────────────────────────────
Read access to the records the engine consumes.

  ListingStore         — offers / requirements by owner (in-memory; the
                         document database sits behind the same coroutines)
  CounterpartDirectory — static entries + optional CSV entries + live peer
                         records exposed as counterparts
  FactoryRegistry      — stored factory profiles for per-factory generation

Storage failures are not retried here; they propagate as DirectoryError.
"""

from __future__ import annotations

from typing import Iterable

from backend.errors import DirectoryError
from backend.schemas import (
    CounterpartEntry,
    FactoryProfile,
    MaterialOffer,
    MaterialRequirement,
    Role,
)
from utils.logger import component_logger

logger = component_logger("directory")


class ListingStore:
    def __init__(self) -> None:
        self._offers: dict[str, MaterialOffer] = {}
        self._requirements: dict[str, MaterialRequirement] = {}

    async def add_offer(self, offer: MaterialOffer) -> MaterialOffer:
        self._offers[offer.id] = offer
        logger.info(f"Offer {offer.id} stored for owner={offer.owner_id} ({offer.material_type})")
        return offer

    async def add_requirement(self, requirement: MaterialRequirement) -> MaterialRequirement:
        self._requirements[requirement.id] = requirement
        logger.info(
            f"Requirement {requirement.id} stored for owner={requirement.owner_id} "
            f"({requirement.material_type})"
        )
        return requirement

    async def delete_offer(self, offer_id: str, owner_id: str) -> None:
        offer = self._offers.get(offer_id)
        if offer is None or offer.owner_id != owner_id:
            raise DirectoryError(f"Offer '{offer_id}' not found for owner '{owner_id}'")
        del self._offers[offer_id]

    async def delete_requirement(self, requirement_id: str, owner_id: str) -> None:
        requirement = self._requirements.get(requirement_id)
        if requirement is None or requirement.owner_id != owner_id:
            raise DirectoryError(f"Requirement '{requirement_id}' not found for owner '{owner_id}'")
        del self._requirements[requirement_id]

    async def offers_by_owner(self, owner_id: str) -> list[MaterialOffer]:
        return [o for o in self._offers.values() if o.owner_id == owner_id]

    async def requirements_by_owner(self, owner_id: str) -> list[MaterialRequirement]:
        return [r for r in self._requirements.values() if r.owner_id == owner_id]

    async def all_offers(self) -> list[MaterialOffer]:
        return list(self._offers.values())

    async def all_requirements(self) -> list[MaterialRequirement]:
        return list(self._requirements.values())


def offer_as_counterpart(offer: MaterialOffer) -> CounterpartEntry:
    return CounterpartEntry(
        id=offer.id,
        company_name=f"Marketplace producer {offer.owner_id or offer.id}",
        city=offer.location,
        role="producer",
        material_type=offer.material_type,
        quantity=offer.quantity,
        owner_id=offer.owner_id or None,
        latitude=offer.latitude,
        longitude=offer.longitude,
    )


def requirement_as_counterpart(requirement: MaterialRequirement) -> CounterpartEntry:
    return CounterpartEntry(
        id=requirement.id,
        company_name=f"Marketplace consumer {requirement.owner_id or requirement.id}",
        city=requirement.location,
        role="consumer",
        material_type=requirement.material_type,
        quantity=requirement.quantity,
        owner_id=requirement.owner_id or None,
        latitude=requirement.latitude,
        longitude=requirement.longitude,
    )


class CounterpartDirectory:
    """
    Parameters
    ----------
    static_entries : reference directory (built-in list plus any CSV rows)
    store          : live listing store whose records become peer counterparts
    """

    def __init__(
        self,
        static_entries: Iterable[CounterpartEntry],
        store: ListingStore | None = None,
    ) -> None:
        self.static_entries = list(static_entries)
        self.store = store

    async def entries(self, role: Role | None = None) -> list[CounterpartEntry]:
        pool = list(self.static_entries)
        if self.store is not None:
            pool += [offer_as_counterpart(o) for o in await self.store.all_offers()]
            pool += [requirement_as_counterpart(r) for r in await self.store.all_requirements()]
        if role is not None:
            pool = [e for e in pool if e.role == role]
        return pool


class FactoryRegistry:
    def __init__(self, factories: Iterable[FactoryProfile] = ()) -> None:
        self._factories = {f.id: f for f in factories}

    async def add(self, factory: FactoryProfile) -> FactoryProfile:
        self._factories[factory.id] = factory
        return factory

    async def buyers(self) -> list[FactoryProfile]:
        """Factories that can take material: consumers and dual-role sites."""
        return [f for f in self._factories.values() if f.role in ("consumer", "both")]
