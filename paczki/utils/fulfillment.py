"""
Wyliczanie realizacji list życzeń.
Czyste funkcje - zawsze liczone od nowa z rekordów zakupów, bez licznika w bazie.
"""

from datetime import datetime, timezone
from typing import Iterable, Optional, Sequence, Union

from ..models.wishlist import (
    AnimalSummary,
    FulfillmentRecord,
    FulfillmentResult,
    QuantityProgress,
    WishlistItem,
    WishlistItemStatus,
)

# Klucz mapy zakupów: (id zwierzęcia/organizacji, id produktu) albo samo id produktu
PurchaseKey = Union[tuple[Optional[str], str], str]

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def percentage(part: int, total: int) -> int:
    """
    Procent zaokrąglony w górę od połowy (12.5 -> 13), liczony na liczbach całkowitych.
    Dla total == 0 zwraca 0.
    """
    if total <= 0:
        return 0
    return (200 * part + total) // (2 * total)


def aggregate_purchases(
    records: Iterable[FulfillmentRecord],
    scoped: bool = True,
) -> dict[PurchaseKey, int]:
    """
    Sumuje zakupione ilości per produkt.

    Args:
        records: Pozycje z opłaconych zamówień
        scoped: Klucz (entity_id, product_id) - zakupy dla jednego zwierzęcia
            nie liczą się innemu. False = klucz to samo product_id.

    Returns:
        Mapa klucz -> suma zakupionych sztuk
    """
    purchased: dict[PurchaseKey, int] = {}
    for record in records:
        if not record.product_id:
            continue
        key: PurchaseKey = (record.entity_id, record.product_id) if scoped else record.product_id
        purchased[key] = purchased.get(key, 0) + max(record.quantity or 0, 0)
    return purchased


def purchased_quantity(item: WishlistItem, fulfillment_by_product: dict) -> int:
    """Zakupiona ilość dla pozycji - najpierw klucz złożony, potem samo product_id."""
    scoped_key = (item.entity_id, item.product_id)
    if scoped_key in fulfillment_by_product:
        return fulfillment_by_product[scoped_key] or 0
    return fulfillment_by_product.get(item.product_id) or 0


def compute_fulfillment(
    items: Optional[Sequence[WishlistItem]],
    fulfillment_by_product: Optional[dict] = None,
) -> FulfillmentResult:
    """
    Liczy ile pozycji listy życzeń jest w pełni zrealizowanych.

    Duplikaty product_id to osobne pozycje - nie są łączone.

    Args:
        items: Pozycje listy życzeń
        fulfillment_by_product: Wynik aggregate_purchases()

    Returns:
        FulfillmentResult(total_needed, fulfilled, progress)
    """
    items = items or []
    fulfillment_by_product = fulfillment_by_product or {}

    total_needed = len(items)
    fulfilled = sum(
        1 for item in items
        if purchased_quantity(item, fulfillment_by_product) >= item.quantity
    )

    return FulfillmentResult(
        total_needed=total_needed,
        fulfilled=fulfilled,
        progress=percentage(fulfilled, total_needed),
    )


def wishlist_status(
    items: Sequence[WishlistItem],
    fulfillment_by_product: dict,
) -> list[WishlistItemStatus]:
    """Stan każdej pozycji - zakupiona ilość obcięta do potrzebnej."""
    statuses = []
    for item in items:
        purchased = purchased_quantity(item, fulfillment_by_product)
        statuses.append(
            WishlistItemStatus(
                item=item,
                bought=purchased >= item.quantity,
                purchased_quantity=min(purchased, item.quantity),
            )
        )
    return statuses


def compute_quantity_progress(
    desired_quantities: Iterable[Optional[int]],
    fulfilled_quantities: Iterable[Optional[int]],
) -> QuantityProgress:
    """
    Statystyki panelu organizacji - suma sztuk zamiast liczby pozycji.

    Nadwyżka zakupów nie podnosi postępu ponad 100%.
    """
    total_needed = sum(q or 0 for q in desired_quantities)
    fulfilled_raw = sum(q or 0 for q in fulfilled_quantities)

    if total_needed <= 0:
        return QuantityProgress()

    return QuantityProgress(
        total_needed=total_needed,
        fulfilled=min(fulfilled_raw, total_needed),
        progress=min(percentage(fulfilled_raw, total_needed), 100),
    )


def _completion_ratio(animal: AnimalSummary) -> float:
    if not animal.wishlist:
        return 1.0
    bought = sum(1 for status in animal.wishlist if status.bought)
    return bought / len(animal.wishlist)


def sort_by_need(animals: Iterable[AnimalSummary]) -> list[AnimalSummary]:
    """
    Najbardziej potrzebujące najpierw.

    Kolejność:
    1. Zwierzęta z kompletną (niepustą) listą na końcu
    2. Rosnąco po procencie realizacji (pusta lista = 1.0)
    3. Przy remisie najnowsze najpierw (created_at malejąco)
    """
    def sort_key(animal: AnimalSummary):
        ratio = _completion_ratio(animal)
        fully_bought = bool(animal.wishlist) and ratio == 1.0
        created_at = animal.created_at or _OLDEST
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        return (fully_bought, ratio, -created_at.timestamp())

    return sorted(animals, key=sort_key)
