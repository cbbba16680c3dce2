"""Wspólne dane testowe - schronisko z trzema zwierzętami."""

from datetime import datetime, timezone

import pytest

from paczki.models.wishlist import Animal, OrderItem, WishlistItem
from paczki.services.wishlist_repository import InMemoryWishlistRepository


@pytest.fixture
def shelter_repository():
    """
    org-1: Burek (karma x2 kupiona, smycz brak), Reksio (karma kupiona),
    Filemon (bez listy). org-2: Mruczek - kupił tę samą karmę co Burek.
    """
    return InMemoryWishlistRepository(
        animals=[
            Animal(id="burek", name="Burek", organization_id="org-1",
                   created_at=datetime(2024, 3, 1, tzinfo=timezone.utc)),
            Animal(id="reksio", name="Reksio", organization_id="org-1",
                   created_at=datetime(2024, 2, 1, tzinfo=timezone.utc)),
            Animal(id="filemon", name="Filemon", organization_id="org-1",
                   created_at=datetime(2024, 1, 1, tzinfo=timezone.utc)),
            Animal(id="mruczek", name="Mruczek", organization_id="org-2"),
        ],
        wishlist_items=[
            WishlistItem(product_id="karma", quantity=2, entity_id="burek", urgent=True),
            WishlistItem(product_id="smycz", quantity=1, entity_id="burek"),
            WishlistItem(product_id="karma", quantity=1, entity_id="reksio"),
            WishlistItem(product_id="karma", quantity=4, entity_id="mruczek"),
        ],
        order_items=[
            OrderItem(order_id="o1", animal_id="burek", product_id="karma", quantity=1, fulfillment_status="fulfilled"),
            OrderItem(order_id="o2", animal_id="burek", product_id="karma", quantity=1),
            OrderItem(order_id="o2", animal_id="reksio", product_id="karma", quantity=1),
            OrderItem(order_id="o3", animal_id="mruczek", product_id="karma", quantity=3),
            OrderItem(order_id="o4", animal_id="burek", product_id="smycz", quantity=1),
        ],
        order_statuses={"o1": "completed", "o2": "completed", "o3": "completed", "o4": "failed"},
    )
