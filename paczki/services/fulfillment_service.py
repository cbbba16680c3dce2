"""
Serwis realizacji list życzeń - łączy repozytorium z czystymi wyliczeniami.
Każde wywołanie liczy postęp od nowa z pozycji zamówień.
"""

import logging
from collections import defaultdict
from typing import Optional

from ..models.wishlist import Animal, AnimalSummary, FulfillmentRecord, WishlistItem
from ..utils.fulfillment import (
    aggregate_purchases,
    compute_fulfillment,
    compute_quantity_progress,
    sort_by_need,
    wishlist_status,
)
from .wishlist_repository import WishlistRepository

logger = logging.getLogger(__name__)


class FulfillmentService:
    """Wylicza stan list życzeń zwierząt na podstawie danych z repozytorium."""

    def __init__(self, repository: WishlistRepository):
        self.repository = repository

    def _summarize(
        self,
        animal: Animal,
        items: list[WishlistItem],
        purchased: dict,
        fulfilled_records: Optional[list[FulfillmentRecord]] = None,
    ) -> AnimalSummary:
        summary = AnimalSummary(
            **animal.model_dump(),
            wishlist=wishlist_status(items, purchased),
            fulfillment=compute_fulfillment(items, purchased),
        )
        if fulfilled_records is not None:
            summary.quantity_progress = compute_quantity_progress(
                (item.quantity for item in items),
                (record.quantity for record in fulfilled_records),
            )
        return summary

    async def animal_wishlist(self, animal_id: str) -> Optional[AnimalSummary]:
        """
        Lista życzeń jednego zwierzęcia ze stanem realizacji.

        Returns:
            AnimalSummary lub None jeśli zwierzę nie istnieje / jest nieaktywne
        """
        animal = await self.repository.get_animal(animal_id)
        if animal is None:
            return None

        items = await self.repository.list_wishlist_items([animal.id])
        records = await self.repository.list_completed_purchases([animal.id])
        purchased = aggregate_purchases(records, scoped=True)

        summary = self._summarize(animal, items, purchased)
        logger.debug(
            "Zwierzę %s: %d/%d pozycji (%d%%)",
            animal.id,
            summary.fulfillment.fulfilled,
            summary.fulfillment.total_needed,
            summary.fulfillment.progress,
        )
        return summary

    async def animals_by_need(
        self,
        organization_id: Optional[str] = None,
        with_quantity_progress: bool = False,
    ) -> list[AnimalSummary]:
        """
        Zwierzęta posortowane od najbardziej potrzebujących.

        Args:
            organization_id: Tylko zwierzęta tej organizacji
            with_quantity_progress: Dodaj statystyki sztuk dostarczonych (panel organizacji)
        """
        animals = await self.repository.list_animals(organization_id)
        if not animals:
            return []

        animal_ids = [animal.id for animal in animals]
        items = await self.repository.list_wishlist_items(animal_ids)
        records = await self.repository.list_completed_purchases(animal_ids)
        purchased = aggregate_purchases(records, scoped=True)

        items_by_animal: dict[str, list[WishlistItem]] = defaultdict(list)
        for item in items:
            items_by_animal[item.entity_id].append(item)

        fulfilled_by_animal: Optional[dict[str, list[FulfillmentRecord]]] = None
        if with_quantity_progress:
            fulfilled_by_animal = defaultdict(list)
            for record in await self.repository.list_fulfilled_items(animal_ids):
                fulfilled_by_animal[record.entity_id].append(record)

        summaries = [
            self._summarize(
                animal,
                items_by_animal.get(animal.id, []),
                purchased,
                fulfilled_by_animal.get(animal.id, []) if fulfilled_by_animal is not None else None,
            )
            for animal in animals
        ]

        logger.info("Wyliczono realizację dla %d zwierząt", len(summaries))
        return sort_by_need(summaries)
