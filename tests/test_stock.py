import pytest

from enquiry_desk.core.errors import RecordNotFound, ValidationError
from enquiry_desk.core.stock import (
    AdjustmentType,
    StockItem,
    StockStatus,
    adjust_stock,
    compliance_check,
    legal_limit_percentage,
    stock_status,
)
from enquiry_desk.sales.inventory import InventoryService


def sparkler(**overrides):
    fields = dict(
        sku="GSP-001", product_name="Green Sparkler Pro", current_stock=450,
        min_allowed_stock=50, max_allowed_stock=1000, legal_limit=500, reorder_level=100,
    )
    fields.update(overrides)
    return StockItem(**fields)


def test_legal_limit_percentage():
    assert legal_limit_percentage(sparkler()) == 90


@pytest.mark.parametrize("stock, expected", [
    (600, StockStatus.OVERSTOCK),
    (450, StockStatus.WARNING),
    (300, StockStatus.SAFE),
    (100, StockStatus.CRITICAL),
])
def test_stock_status(stock, expected):
    assert stock_status(sparkler(current_stock=stock)) == expected


def test_compliance_check_flags_excess():
    row = compliance_check(sparkler(current_stock=520))
    assert row["overLimit"] is True
    assert row["excess"] == 20
    assert row["percentage"] == 104


def test_adjust_in_and_out():
    item = sparkler()
    record = adjust_stock(item, "in", 30, "supplier delivery")
    assert item.current_stock == 480
    assert (record.stock_before, record.stock_after) == (450, 480)
    assert record.type == AdjustmentType.IN

    adjust_stock(item, AdjustmentType.OUT, 80)
    assert item.current_stock == 400


def test_physical_count_sets_absolute_value():
    item = sparkler()
    adjust_stock(item, "adjustment", 437, "annual audit")
    assert item.current_stock == 437


def test_going_over_the_legal_limit_is_not_blocked():
    item = sparkler()
    adjust_stock(item, "in", 100)
    assert item.current_stock == 550
    assert compliance_check(item)["overLimit"] is True


def test_cannot_go_negative():
    item = sparkler(current_stock=10)
    with pytest.raises(ValidationError):
        adjust_stock(item, "out", 11)
    assert item.current_stock == 10


@pytest.mark.parametrize("kind, quantity", [("gift", 1), ("in", -1), ("in", 1.5)])
def test_bad_adjustments(kind, quantity):
    with pytest.raises(ValidationError):
        adjust_stock(sparkler(), kind, quantity)


async def test_inventory_adjust_keeps_no_locks_behind():
    inventory = InventoryService()
    inventory.seed()
    item = inventory.list_items()[0]

    await inventory.adjust(item.id, "out", 10, "counter sale")
    for i in range(20):
        with pytest.raises(RecordNotFound):
            await inventory.adjust(f"missing-{i}", "in", 1)
    assert len(inventory._locks) == 0
