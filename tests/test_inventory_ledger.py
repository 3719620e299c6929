"""Tests for the inventory ledger."""

import pytest

from storefront.database import unit_of_work
from storefront.errors import InsufficientStockError, ValidationError
from storefront.models.inventory import InventoryRecord
from storefront.services.inventory_ledger import InventoryLedger


def item(product_id, quantity, size=None, color=None, product_name=None):
    return {
        "product_id": product_id,
        "quantity": quantity,
        "size": size,
        "color": color,
        "product_name": product_name,
    }


class TestCheckAvailability:
    def test_sufficient_stock(self, db, set_stock):
        set_stock(1, 5, "M", "Red")
        result = InventoryLedger(db).check_availability([item(1, 5, "M", "Red")])
        assert result.success is True
        assert result.insufficient_items == []

    def test_missing_record_counts_as_zero(self, db):
        result = InventoryLedger(db).check_availability([item(42, 1)])
        assert result.success is False
        assert result.insufficient_items[0].available == 0

    def test_reports_every_insufficient_item(self, db, set_stock):
        set_stock(1, 1, "M", "Red")
        set_stock(2, 10)
        set_stock(3, 0)

        result = InventoryLedger(db).check_availability([
            item(1, 3, "M", "Red", product_name="Shirt"),
            item(2, 4),
            item(3, 2),
        ])

        assert result.success is False
        assert [(i.product_id, i.required, i.available) for i in result.insufficient_items] == [
            (1, 3, 1),
            (3, 2, 0),
        ]
        assert result.insufficient_items[0].product_name == "Shirt"
        assert result.insufficient_items[1].product_name == "Product 3"

    def test_normalizes_missing_size_and_color(self, db, set_stock):
        set_stock(2, 4, "One Size", "Default")
        result = InventoryLedger(db).check_availability([item(2, 4, "", None)])
        assert result.success is True

    def test_has_no_side_effects(self, db, set_stock, stock_of):
        set_stock(1, 5)
        InventoryLedger(db).check_availability([item(1, 50)])
        assert stock_of(1) == 5


class TestDeduct:
    def test_deducts_each_item(self, db, set_stock, stock_of):
        set_stock(1, 5, "M", "Red")
        set_stock(2, 3)

        with unit_of_work(db):
            InventoryLedger(db).deduct([item(1, 3, "M", "Red"), item(2, 3)])

        assert stock_of(1, "M", "Red") == 2
        assert stock_of(2) == 0

    def test_insufficient_stock_fails_without_changes(self, db, set_stock, stock_of):
        set_stock(1, 5)
        set_stock(2, 1)

        with pytest.raises(InsufficientStockError) as exc:
            with unit_of_work(db):
                InventoryLedger(db).deduct([item(1, 2), item(2, 4)])

        assert exc.value.items == [{
            "product_id": 2,
            "product_name": "Product 2",
            "required": 4,
            "available": 1,
            "size": "One Size",
            "color": "Default",
        }]
        assert stock_of(1) == 5
        assert stock_of(2) == 1

    def test_failure_partway_rolls_back_earlier_decrements(self, db, set_stock, stock_of):
        # Both lines pass the pre-check on their own; the second decrement loses
        set_stock(1, 5, "M", "Red")

        with pytest.raises(InsufficientStockError) as exc:
            with unit_of_work(db):
                InventoryLedger(db).deduct([item(1, 3, "M", "Red"), item(1, 3, "M", "Red")])

        assert exc.value.items[0]["available"] == 2
        assert exc.value.items[0]["required"] == 3
        assert "Available: 2, Required: 3" in exc.value.message
        assert stock_of(1, "M", "Red") == 5

    def test_quantity_never_negative(self, db, set_stock):
        set_stock(1, 2)

        with pytest.raises(InsufficientStockError):
            with unit_of_work(db):
                InventoryLedger(db).deduct([item(1, 3)])

        quantities = [r.quantity for r in db.query(InventoryRecord).all()]
        assert all(q >= 0 for q in quantities)

    def test_records_movements(self, db, set_stock):
        set_stock(1, 5)
        ledger = InventoryLedger(db)

        with unit_of_work(db):
            ledger.deduct([item(1, 2)], order_id=7)

        movement = ledger.movements(1)[0]
        assert movement.movement_type == "deduct"
        assert movement.quantity_change == -2
        assert movement.previous_quantity == 5
        assert movement.new_quantity == 3
        assert movement.order_id == 7


class TestRestore:
    def test_round_trip(self, db, set_stock, stock_of):
        set_stock(1, 5, "M", "Red")
        set_stock(2, 8)
        items = [item(1, 3, "M", "Red"), item(2, 8)]
        ledger = InventoryLedger(db)

        with unit_of_work(db):
            ledger.deduct(items)
        with unit_of_work(db):
            ledger.restore(items)

        assert stock_of(1, "M", "Red") == 5
        assert stock_of(2) == 8

    def test_missing_record_is_skipped(self, db, stock_of):
        with unit_of_work(db):
            InventoryLedger(db).restore([item(9, 4)])

        assert db.query(InventoryRecord).count() == 0
        assert stock_of(9) == 0


class TestUpdateQuantity:
    def test_creates_record_with_defaults(self, db):
        with unit_of_work(db):
            result = InventoryLedger(db).update_quantity(3, None, None, 12)

        record = db.query(InventoryRecord).one()
        assert (record.product_id, record.size, record.color, record.quantity) == (3, "One Size", "Default", 12)
        assert result.previous_quantity == 0
        assert result.change == 12

    def test_overwrites_existing_record(self, db, set_stock):
        set_stock(3, 12, "L", "Blue")

        with unit_of_work(db):
            result = InventoryLedger(db).update_quantity(3, "L", "Blue", 4)

        assert result.previous_quantity == 12
        assert result.new_quantity == 4
        assert result.change == -8
        assert db.query(InventoryRecord).count() == 1

    def test_negative_quantity_rejected(self, db):
        with pytest.raises(ValidationError):
            InventoryLedger(db).update_quantity(3, None, None, -1)
        assert db.query(InventoryRecord).count() == 0

    def test_bulk_update_is_all_or_nothing(self, db, set_stock, stock_of):
        set_stock(1, 5)

        with pytest.raises(ValidationError):
            with unit_of_work(db):
                InventoryLedger(db).bulk_update([
                    {"product_id": 1, "quantity": 9},
                    {"product_id": 2, "quantity": -3},
                ])

        assert stock_of(1) == 5
        assert stock_of(2) == 0


class TestReports:
    def test_product_inventory_totals(self, db, set_stock):
        set_stock(1, 2, "S", "Red")
        set_stock(1, 3, "M", "Red")
        set_stock(2, 10)

        report = InventoryLedger(db).get_product_inventory(1)
        assert report.total_stock == 5
        assert [r.size for r in report.inventory] == ["M", "S"]

    def test_low_stock(self, db, set_stock):
        set_stock(1, 2, "S")
        set_stock(1, 3, "M")
        set_stock(2, 50)
        set_stock(3, 0)

        low = InventoryLedger(db).low_stock(10)
        assert [(p.product_id, p.stock_quantity) for p in low] == [(3, 0), (1, 5)]
