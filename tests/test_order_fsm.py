from decimal import Decimal

import pytest

from enquiry_desk.core.errors import InvalidStateError, ValidationError
from enquiry_desk.core.lead_states import OrderStatus
from enquiry_desk.core.order_fsm import LineItem, Order, override_order_status, set_order_status


@pytest.fixture
def order():
    item = LineItem(product_id="3", product_name="Rockets", quantity=200, unit_price=Decimal("35.00"))
    return Order(
        converted_from_lead="LEAD00001",
        customer_name="Priya Singh",
        phone="+918765432109",
        items=[item],
        subtotal=Decimal("7000.00"),
        discount=Decimal("0.00"),
        tax=Decimal("630.00"),
        total_amount=Decimal("7630.00"),
        order_number="ORD-2024-0001",
    )


def test_forward_path_stamps_delivery(order):
    set_order_status(order, "Packed")
    assert order.delivered_at is None
    set_order_status(order, OrderStatus.DELIVERED)
    assert order.status == OrderStatus.DELIVERED
    assert order.delivered_at is not None


@pytest.mark.parametrize("start", [OrderStatus.PENDING, OrderStatus.PACKED])
def test_cancel_before_delivery(order, start):
    order.status = start
    set_order_status(order, "Cancelled")
    assert order.status == OrderStatus.CANCELLED


@pytest.mark.parametrize("start, target", [
    (OrderStatus.DELIVERED, OrderStatus.CANCELLED),
    (OrderStatus.DELIVERED, OrderStatus.PENDING),
    (OrderStatus.PENDING, OrderStatus.DELIVERED),
    (OrderStatus.CANCELLED, OrderStatus.PACKED),
    (OrderStatus.PACKED, OrderStatus.PENDING),
])
def test_illegal_moves_are_refused(order, start, target):
    order.status = start
    with pytest.raises(InvalidStateError):
        set_order_status(order, target)
    assert order.status == start


def test_same_status_is_a_no_op(order):
    set_order_status(order, "Pending")
    assert order.status == OrderStatus.PENDING


def test_unknown_status(order):
    with pytest.raises(ValidationError):
        set_order_status(order, "Shipped")


def test_override_allows_any_jump(order):
    override_order_status(order, "Delivered")
    assert order.delivered_at is not None
    override_order_status(order, "Pending")
    assert order.status == OrderStatus.PENDING
    assert order.delivered_at is None


def test_line_total(order):
    assert order.items[0].line_total == Decimal("7000.00")


def test_undoing_delivery_clears_delivered_at(order):
    set_order_status(order, "Packed")
    set_order_status(order, "Delivered")
    override_order_status(order, "Packed")
    assert order.status == OrderStatus.PACKED
    assert order.delivered_at is None
