"""
Stock adjustment engine tests.

Covers registration/ledger coupling, the non-negative stock guard,
pagination, rehydration from the store, and the dashboard read models.
"""

import logging
import random
from decimal import Decimal

import pytest

from stockledger.extensions import db
from stockledger.models import KeyValueEntry, TransactionType
from stockledger.services.inventory_service import InventoryService
from stockledger.services.kv_store import KeyValueStore, PRODUCTS_KEY
from stockledger.validation import ValidationError


class TestRegistration:
    def test_register_product_writes_one_initial_transaction(self, inventory):
        product = inventory.register_product("A1", "Widget", 9.99, 3)

        assert inventory.list_products() == [product]
        assert product.quantity == 3
        assert product.price == Decimal("9.99")

        entries = inventory.ledger.entries
        assert len(entries) == 1
        assert entries[0].type is TransactionType.INITIAL
        assert entries[0].amount == 3
        assert entries[0].product_id == product.id
        assert entries[0].timestamp == product.last_updated

    def test_register_product_with_zero_quantity(self, inventory):
        product = inventory.register_product("Z0", "Empty", "1.50", 0)
        assert product.quantity == 0
        assert inventory.ledger.entries[0].amount == 0

    @pytest.mark.parametrize("args", [
        ("", "Widget", 9.99, 3),
        ("A1", "", 9.99, 3),
        ("A1", "Widget", 0, 3),
        ("A1", "Widget", -5, 3),
        ("A1", "Widget", 9.99, -1),
        ("A1", "Widget", 9.99, 2.5),
        ("A1", "Widget", "abc", 3),
    ])
    def test_invalid_product_leaves_no_trace(self, inventory, store, args):
        with pytest.raises(ValidationError):
            inventory.register_product(*args)

        assert inventory.list_products() == []
        assert len(inventory.ledger) == 0
        assert store.load(PRODUCTS_KEY, None) is None

    def test_duplicate_skus_are_allowed(self, inventory):
        inventory.register_product("A1", "Widget", 9.99, 3)
        inventory.register_product("A1", "Widget (blue)", 10.49, 1)
        assert [p.sku for p in inventory.list_products()] == ["A1", "A1"]

    def test_register_user(self, inventory):
        user = inventory.register_user("Ada Lovelace", "a@b.com")

        assert inventory.list_users() == [user]
        assert user.full_name == "Ada Lovelace"
        assert user.created_at.endswith("Z")
        # users never touch the ledger
        assert len(inventory.ledger) == 0

    def test_register_user_rejects_bad_email(self, inventory):
        with pytest.raises(ValidationError):
            inventory.register_user("Ada Lovelace", "abc")
        assert inventory.list_users() == []

    def test_duplicate_emails_are_allowed(self, inventory):
        inventory.register_user("Ada", "a@b.com")
        inventory.register_user("Ada Again", "a@b.com")
        assert len(inventory.list_users()) == 2


class TestAdjustStock:
    def test_widget_scenario(self, inventory):
        product = inventory.register_product("A1", "Widget", 9.99, 3)

        increased = inventory.adjust_stock(product.id, 2)
        assert increased.quantity == 5
        latest = inventory.ledger.entries[0]
        assert latest.type is TransactionType.INCREASE
        assert latest.amount == 2

        rejected = inventory.adjust_stock(product.id, -10)
        assert rejected is increased
        assert rejected.quantity == 5
        assert inventory.find_product(product.id).quantity == 5
        assert len(inventory.ledger) == 2

    def test_decrease_records_absolute_amount(self, inventory, widget):
        updated = inventory.adjust_stock(widget.id, -3)

        assert updated.quantity == 0
        latest = inventory.ledger.entries[0]
        assert latest.type is TransactionType.DECREASE
        assert latest.amount == 3

    def test_accepted_adjustment_updates_last_updated(self, inventory, widget):
        updated = inventory.adjust_stock(widget.id, 1)
        assert updated.last_updated > widget.last_updated
        assert updated.id == widget.id

    def test_zero_delta_is_recorded_as_decrease(self, inventory, widget):
        updated = inventory.adjust_stock(widget.id, 0)

        assert updated.quantity == widget.quantity
        latest = inventory.ledger.entries[0]
        assert latest.type is TransactionType.DECREASE
        assert latest.amount == 0

    def test_rejected_adjustment_writes_nothing(self, inventory, widget, store):
        saved_before = store.load(PRODUCTS_KEY, None)

        result = inventory.adjust_stock(widget.id, -4)

        assert result == widget
        assert store.load(PRODUCTS_KEY, None) == saved_before
        assert len(inventory.ledger) == 1

    def test_unknown_product_is_a_silent_noop(self, inventory, widget):
        assert inventory.adjust_stock("missing", 5) is None
        assert inventory.list_products() == [widget]
        assert len(inventory.ledger) == 1

    @pytest.mark.parametrize("delta", [1.5, "two", None, True])
    def test_non_integer_delta_is_a_validation_error(self, inventory, widget, delta):
        with pytest.raises(ValidationError):
            inventory.adjust_stock(widget.id, delta)
        assert len(inventory.ledger) == 1

    def test_adjustment_keeps_table_order(self, inventory):
        first = inventory.register_product("A1", "Widget", 9.99, 3)
        second = inventory.register_product("B2", "Gadget", 2.50, 4)

        inventory.adjust_stock(first.id, 1)

        assert [p.id for p in inventory.list_products()] == [first.id, second.id]

    def test_random_sequences_never_go_negative(self, inventory):
        rng = random.Random(20261019)
        products = [
            inventory.register_product(f"SKU-{n}", f"Item {n}", "1.25", rng.randint(0, 5))
            for n in range(4)
        ]
        accepted = {p.id: 0 for p in products}

        for _ in range(300):
            target = rng.choice(products)
            before = inventory.find_product(target.id)
            after = inventory.adjust_stock(target.id, rng.randint(-6, 6))
            assert after.quantity >= 0
            if after is not before:
                accepted[target.id] += 1

        for p in products:
            adjustments = [
                tx for tx in inventory.ledger.for_product(p.id)
                if tx.type in (TransactionType.INCREASE, TransactionType.DECREASE)
            ]
            initials = [
                tx for tx in inventory.ledger.for_product(p.id)
                if tx.type is TransactionType.INITIAL
            ]
            assert len(adjustments) == accepted[p.id]
            assert len(initials) == 1

    def test_ledger_replays_to_current_quantity(self, inventory, widget):
        for delta in (4, -2, -10, 1, -6):
            inventory.adjust_stock(widget.id, delta)

        total = 0
        for tx in reversed(inventory.ledger.for_product(widget.id)):
            total += -tx.amount if tx.type is TransactionType.DECREASE else tx.amount
        assert total == inventory.find_product(widget.id).quantity == 0

    def test_rejections_are_logged(self, inventory, widget, caplog):
        with caplog.at_level(logging.INFO, logger="stockledger.services.inventory_service"):
            inventory.adjust_stock(widget.id, -99)
        assert "Rejected adjustment" in caplog.text


class TestListing:
    def test_listing_is_idempotent(self, inventory, widget):
        for delta in range(1, 13):
            inventory.adjust_stock(widget.id, delta)

        assert inventory.list_products() == inventory.list_products()
        assert inventory.list_users() == inventory.list_users()
        assert inventory.list_transactions(2) == inventory.list_transactions(2)

    def test_listing_returns_copies(self, inventory, widget):
        inventory.list_products().clear()
        inventory.ledger.entries.clear()
        assert inventory.list_products() == [widget]
        assert len(inventory.ledger) == 1

    def test_pagination_over_twenty_five_transactions(self, inventory):
        product = inventory.register_product("A1", "Widget", 9.99, 0)
        for _ in range(24):
            inventory.adjust_stock(product.id, 1)

        pages = [inventory.list_transactions(n, 10) for n in (1, 2, 3, 4)]
        assert [len(p) for p in pages[:3]] == [10, 10, 5]
        assert pages[3] == pages[2]

        # newest first: the initial entry is the very last one
        assert pages[0][0].amount == 1
        assert pages[0][0].type is TransactionType.INCREASE
        assert pages[2][-1].type is TransactionType.INITIAL

    def test_default_page_size_is_ten(self, inventory, widget):
        for _ in range(14):
            inventory.adjust_stock(widget.id, 1)
        assert len(inventory.list_transactions(1)) == 10
        assert len(inventory.list_transactions(2)) == 5


class TestPersistence:
    def test_reload_restores_every_collection(self, inventory, store):
        inventory.register_user("Ada Lovelace", "ada@example.com")
        widget = inventory.register_product("A1", "Widget", 9.99, 3)
        inventory.register_product("B2", "Gadget", "2.50", 4)
        inventory.adjust_stock(widget.id, 2)
        inventory.adjust_stock(widget.id, -10)

        reloaded = InventoryService.load(KeyValueStore())

        assert reloaded.list_users() == inventory.list_users()
        assert reloaded.list_products() == inventory.list_products()
        assert reloaded.ledger.entries == inventory.ledger.entries

    def test_corrupt_product_table_loads_empty(self, inventory, widget):
        inventory.register_user("Ada Lovelace", "ada@example.com")
        entry = db.session.get(KeyValueEntry, PRODUCTS_KEY)
        entry.value = "[{\"id\": 1}"
        db.session.commit()

        reloaded = InventoryService.load(KeyValueStore())

        # products are lost silently; the other keys survive
        assert reloaded.list_products() == []
        assert len(reloaded.list_users()) == 1
        assert len(reloaded.ledger) == 1

    def test_registration_saves_product_and_ledger_together(self, inventory, store, monkeypatch):
        calls = []
        monkeypatch.setattr(store, "save_many", lambda snapshots: calls.append(sorted(snapshots)))

        inventory.register_product("A1", "Widget", 9.99, 3)

        assert calls == [["products", "transactions"]]

    @pytest.mark.parametrize("price", ["1e-400", "1e400"])
    def test_out_of_range_price_never_reaches_the_store(self, inventory, price):
        inventory.register_product("A1", "Widget", 9.99, 3)
        with pytest.raises(ValidationError):
            inventory.register_product("B2", "Odd", price, 1)

        reloaded = InventoryService.load(KeyValueStore())

        assert [p.sku for p in reloaded.list_products()] == ["A1"]

    def test_long_precision_price_reloads_unchanged(self, inventory):
        product = inventory.register_product("A1", "Widget", "0.12345678901234567891", 3)

        reloaded = InventoryService.load(KeyValueStore())

        assert reloaded.find_product(product.id).price == product.price
        assert reloaded.list_products() == inventory.list_products()


class TestReadModels:
    def test_summary(self, inventory):
        inventory.register_product("A1", "Widget", 9.99, 3)
        inventory.register_product("B2", "Gadget", "2.50", 4)
        inventory.register_user("Ada Lovelace", "ada@example.com")

        assert inventory.summary() == {
            "totalProducts": 2,
            "totalUnits": 7,
            "inventoryValue": Decimal("39.97"),
            "totalUsers": 1,
            "totalTransactions": 2,
        }

    def test_summary_of_empty_inventory(self, inventory):
        summary = inventory.summary()
        assert summary["totalProducts"] == 0
        assert summary["inventoryValue"] == Decimal("0.00")

    def test_low_stock_sorted_by_quantity(self, inventory):
        inventory.register_product("A", "Three", 1, 3)
        inventory.register_product("B", "Ten", 1, 10)
        inventory.register_product("C", "Zero", 1, 0)
        inventory.register_product("D", "Five", 1, 5)

        assert [p.name for p in inventory.low_stock()] == ["Zero", "Three", "Five"]
        assert [p.name for p in inventory.low_stock(threshold=3)] == ["Zero", "Three"]
        assert [p.name for p in inventory.low_stock(threshold=100)] == ["Zero", "Three", "Five", "Ten"]
