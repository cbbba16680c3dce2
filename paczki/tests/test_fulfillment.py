"""
Testy wyliczania realizacji list życzeń.
"""

from datetime import datetime, timezone

import pytest

from paczki.models.wishlist import AnimalSummary, FulfillmentRecord, WishlistItem
from paczki.utils.fulfillment import (
    aggregate_purchases,
    compute_fulfillment,
    compute_quantity_progress,
    percentage,
    sort_by_need,
    wishlist_status,
)


def item(product_id, quantity=1, entity_id=None):
    return WishlistItem(product_id=product_id, quantity=quantity, entity_id=entity_id)


def record(product_id, quantity, entity_id=None):
    return FulfillmentRecord(product_id=product_id, quantity=quantity, entity_id=entity_id)


class TestComputeFulfillment:
    """compute_fulfillment - liczba zrealizowanych pozycji i procent."""

    def test_empty(self):
        result = compute_fulfillment([], {})
        assert (result.total_needed, result.fulfilled, result.progress) == (0, 0, 0)

    def test_none_inputs(self):
        result = compute_fulfillment(None, None)
        assert (result.total_needed, result.fulfilled, result.progress) == (0, 0, 0)

    def test_half_fulfilled(self):
        result = compute_fulfillment([item("A", 2), item("B", 1)], {"A": 2, "B": 0})
        assert (result.total_needed, result.fulfilled, result.progress) == (2, 1, 50)

    def test_all_fulfilled(self):
        items = [item("A", 2), item("B", 1), item("C", 5)]
        result = compute_fulfillment(items, {"A": 3, "B": 1, "C": 5})
        assert result.fulfilled == result.total_needed == 3
        assert result.progress == 100

    def test_partial_quantity_is_not_fulfilled(self):
        result = compute_fulfillment([item("A", 3)], {"A": 2})
        assert result.fulfilled == 0
        assert result.progress == 0

    def test_missing_product_counts_as_zero(self):
        result = compute_fulfillment([item("A"), item("B")], {"A": 1})
        assert (result.fulfilled, result.progress) == (1, 50)

    def test_duplicates_are_separate_line_items(self):
        result = compute_fulfillment([item("A", 2), item("A", 5)], {"A": 3})
        assert (result.total_needed, result.fulfilled) == (2, 1)

    def test_rounding_half_up(self):
        # 1/8 = 12.5% -> 13
        items = [item(str(i)) for i in range(8)]
        assert compute_fulfillment(items, {"0": 1}).progress == 13
        # 1/3 = 33.33% -> 33, 2/3 = 66.67% -> 67
        items = [item("A"), item("B"), item("C")]
        assert compute_fulfillment(items, {"A": 1}).progress == 33
        assert compute_fulfillment(items, {"A": 1, "B": 1}).progress == 67

    def test_idempotent(self):
        items = [item("A", 2), item("B", 1)]
        purchased = {"A": 2}
        assert compute_fulfillment(items, purchased) == compute_fulfillment(items, purchased)
        assert purchased == {"A": 2}

    def test_scoped_lookup_prevents_leakage(self):
        purchased = aggregate_purchases([record("A", 5, entity_id="dog-1")])
        assert compute_fulfillment([item("A", 1, entity_id="dog-1")], purchased).fulfilled == 1
        assert compute_fulfillment([item("A", 1, entity_id="cat-2")], purchased).fulfilled == 0

    def test_scoped_map_without_entities(self):
        purchased = aggregate_purchases([record("A", 1)])
        assert compute_fulfillment([item("A")], purchased).fulfilled == 1

    def test_unscoped_map_with_entity_items(self):
        purchased = aggregate_purchases([record("A", 1, entity_id="dog-1")], scoped=False)
        assert compute_fulfillment([item("A", 1, entity_id="cat-2")], purchased).fulfilled == 1

    def test_none_values_in_map_count_as_zero(self):
        assert compute_fulfillment([item("A", 2)], {"A": None}).fulfilled == 0
        assert compute_fulfillment([item("A", 1, entity_id="dog-1")], {("dog-1", "A"): None}).fulfilled == 0
        assert wishlist_status([item("A")], {"A": None})[0].purchased_quantity == 0


class TestAggregatePurchases:
    """Sumowanie pozycji zamówień."""

    def test_sums_by_entity_and_product(self):
        records = [
            record("A", 1, "dog-1"),
            record("A", 2, "dog-1"),
            record("A", 4, "cat-2"),
            record("B", 1, "dog-1"),
        ]
        assert aggregate_purchases(records) == {
            ("dog-1", "A"): 3,
            ("cat-2", "A"): 4,
            ("dog-1", "B"): 1,
        }

    def test_unscoped(self):
        records = [record("A", 1, "dog-1"), record("A", 4, "cat-2")]
        assert aggregate_purchases(records, scoped=False) == {"A": 5}

    def test_skips_empty_product_and_bad_quantities(self):
        records = [record(None, 3), record("", 3), record("A", None), record("A", -2), record("A", 1)]
        assert aggregate_purchases(records, scoped=False) == {"A": 1}


class TestWishlistStatus:
    """Stan pozycji - kupione i ilość obcięta do potrzebnej."""

    def test_status(self):
        statuses = wishlist_status([item("A", 2), item("B", 3)], {"A": 5, "B": 1})
        assert [s.bought for s in statuses] == [True, False]
        assert [s.purchased_quantity for s in statuses] == [2, 1]


class TestQuantityProgress:
    """Statystyki sztuk do panelu organizacji."""

    def test_empty(self):
        result = compute_quantity_progress([], [5])
        assert (result.total_needed, result.fulfilled, result.progress) == (0, 0, 0)

    def test_partial(self):
        result = compute_quantity_progress([2, 2], [1])
        assert (result.total_needed, result.fulfilled, result.progress) == (4, 1, 25)

    def test_capped_at_total(self):
        result = compute_quantity_progress([2, 1], [5, None])
        assert (result.total_needed, result.fulfilled, result.progress) == (3, 3, 100)

    def test_none_quantities(self):
        result = compute_quantity_progress([None, 4], [None, 1])
        assert (result.total_needed, result.fulfilled, result.progress) == (4, 1, 25)


class TestPercentage:

    @pytest.mark.parametrize(
        "part,total,expected",
        [(0, 0, 0), (0, 5, 0), (5, 5, 100), (1, 2, 50), (1, 200, 1), (1, 201, 0), (199, 200, 100)],
    )
    def test_percentage(self, part, total, expected):
        assert percentage(part, total) == expected


class TestSortByNeed:
    """Kolejność zwierząt - najbardziej potrzebujące najpierw."""

    def _animal(self, animal_id, bought, created_day):
        return AnimalSummary(
            id=animal_id,
            name=animal_id,
            created_at=datetime(2024, 1, created_day, tzinfo=timezone.utc),
            wishlist=wishlist_status(
                [item(str(i)) for i in range(len(bought))],
                {str(i): 1 for i, b in enumerate(bought) if b},
            ),
        )

    def test_order(self):
        complete = self._animal("complete", [True, True], 10)
        empty = self._animal("empty", [], 9)
        half = self._animal("half", [True, False], 8)
        none_old = self._animal("none-old", [False, False], 1)
        none_new = self._animal("none-new", [False], 5)

        ordered = sort_by_need([complete, empty, half, none_old, none_new])

        assert [a.id for a in ordered] == ["none-new", "none-old", "half", "empty", "complete"]

    def test_missing_created_at_goes_after_dated(self):
        dated = self._animal("dated", [False], 1)
        undated = AnimalSummary(id="undated", name="undated", wishlist=dated.wishlist)
        assert [a.id for a in sort_by_need([undated, dated])] == ["dated", "undated"]
