"""
Testy serwisu realizacji list życzeń na repozytorium w pamięci.
"""

import pytest

from paczki.services.fulfillment_service import FulfillmentService


class TestFulfillmentService:

    @pytest.mark.asyncio
    async def test_animal_wishlist(self, shelter_repository):
        summary = await FulfillmentService(shelter_repository).animal_wishlist("burek")

        assert summary.name == "Burek"
        assert [(s.item.product_id, s.bought, s.purchased_quantity) for s in summary.wishlist] == [
            ("karma", True, 2),
            ("smycz", False, 0),
        ]
        assert (summary.fulfillment.total_needed, summary.fulfillment.fulfilled, summary.fulfillment.progress) == (2, 1, 50)
        assert summary.quantity_progress is None

    @pytest.mark.asyncio
    async def test_purchases_do_not_leak_between_animals(self, shelter_repository):
        # Mruczek potrzebuje 4 sztuk karmy, kupiono 3 - zakupy Burka się nie liczą
        summary = await FulfillmentService(shelter_repository).animal_wishlist("mruczek")
        assert summary.fulfillment.fulfilled == 0
        assert summary.wishlist[0].purchased_quantity == 3

    @pytest.mark.asyncio
    async def test_unknown_animal(self, shelter_repository):
        assert await FulfillmentService(shelter_repository).animal_wishlist("nikt") is None

    @pytest.mark.asyncio
    async def test_animals_by_need(self, shelter_repository):
        animals = await FulfillmentService(shelter_repository).animals_by_need("org-1")

        # Burek 50%, Filemon bez listy (1.0, nie kompletny), Reksio 100% na końcu
        assert [a.id for a in animals] == ["burek", "filemon", "reksio"]
        assert all(a.quantity_progress is None for a in animals)

    @pytest.mark.asyncio
    async def test_quantity_progress(self, shelter_repository):
        animals = await FulfillmentService(shelter_repository).animals_by_need(
            "org-1", with_quantity_progress=True
        )
        by_id = {a.id: a for a in animals}

        # Burek: potrzeba 3 sztuk, dostarczono 1
        burek = by_id["burek"].quantity_progress
        assert (burek.total_needed, burek.fulfilled, burek.progress) == (3, 1, 33)

        filemon = by_id["filemon"].quantity_progress
        assert (filemon.total_needed, filemon.fulfilled, filemon.progress) == (0, 0, 0)

    @pytest.mark.asyncio
    async def test_recomputed_on_every_call(self, shelter_repository):
        service = FulfillmentService(shelter_repository)
        before = await service.animal_wishlist("burek")

        shelter_repository.order_statuses["o4"] = "completed"
        after = await service.animal_wishlist("burek")

        assert before.fulfillment.progress == 50
        assert after.fulfillment.progress == 100

    @pytest.mark.asyncio
    async def test_empty_organization(self, shelter_repository):
        assert await FulfillmentService(shelter_repository).animals_by_need("org-404") == []
