"""Tests for domain entities and value objects."""

from decimal import Decimal

import pytest

from core.domain.entities import CartItem, StoreOrder, normalize_store_domain
from core.domain.enums import StoreOrderStatus, TransactionStatus
from core.domain.exceptions import InvalidStateError, InvalidTransitionError
from core.domain.value_objects import BuyerContact, Money
from tests.mocks.builders import STORE_A, STORE_B, make_transaction


def test_normalize_store_domain_strips_legacy_prefix():
    assert normalize_store_domain("real-tienda.myshopify.com") == "tienda.myshopify.com"
    assert normalize_store_domain("tienda.myshopify.com") == "tienda.myshopify.com"


def test_cart_item_rejects_non_positive_quantity():
    with pytest.raises(ValueError):
        CartItem(
            store_id=STORE_A,
            product_ref="gid://shopify/Product/1",
            variant_ref=None,
            quantity=0,
            unit_price=Money(amount=Decimal("1000")),
        )


def test_cart_item_line_total():
    item = CartItem(
        store_id=STORE_A,
        product_ref="gid://shopify/Product/1",
        variant_ref=None,
        quantity=3,
        unit_price=Money(amount=Decimal("2500")),
    )

    assert item.line_total == Money(amount=Decimal("7500"))


def test_store_domains_keep_first_seen_order():
    transaction = make_transaction(
        [(STORE_B, "1000", 1), (f"real-{STORE_A}", "2000", 1), (STORE_B, "500", 2)]
    )

    assert transaction.store_domains == [STORE_B, STORE_A]


def test_mark_paid_moves_pending_to_paid():
    transaction = make_transaction([(STORE_A, "1000", 1)], id=1)

    transaction.mark_paid("mp-123", payment_method="credit_card")

    assert transaction.status == TransactionStatus.PAID
    assert transaction.payment_reference == "mp-123"
    assert transaction.payment_method == "credit_card"
    assert transaction.paid_at is not None


def test_mark_paid_twice_is_rejected():
    transaction = make_transaction([(STORE_A, "1000", 1)], id=1, status=TransactionStatus.PAID)

    with pytest.raises(InvalidTransitionError):
        transaction.mark_paid("mp-123")


def test_cart_is_frozen_after_payment():
    transaction = make_transaction([(STORE_A, "1000", 1)], id=1, status=TransactionStatus.PAID)
    item = transaction.cart_items[0]

    with pytest.raises(InvalidStateError):
        transaction.add_item(item)


def test_store_order_confirm_requires_remote_id():
    entry = StoreOrder(transaction_id=1, store_domain=STORE_A)

    with pytest.raises(ValueError):
        entry.confirm("", "#1001", attempts=1)


def test_store_order_fail_clears_remote_ids():
    entry = StoreOrder(transaction_id=1, store_domain=STORE_A)
    entry.confirm("gid://shopify/Order/1", "#1001", attempts=1)

    entry.fail("out of stock", attempts=2)

    assert entry.status == StoreOrderStatus.FAILED
    assert entry.remote_order_id is None
    assert entry.remote_order_number is None
    assert entry.error_message == "out of stock"
    assert entry.attempt_count == 2


def test_store_order_release_goes_back_to_pending():
    entry = StoreOrder(transaction_id=1, store_domain=STORE_A)
    entry.mark_submitted()

    entry.release("503 Service Unavailable", attempts=1)

    assert entry.status == StoreOrderStatus.PENDING
    assert not entry.is_terminal


def test_buyer_contact_name_split():
    assert BuyerContact(email="a@b.cl", name="Ana María Pérez").last_name == "María Pérez"
    assert BuyerContact(email="a@b.cl", name="Ana").last_name == "Ana"
    assert BuyerContact(email="a@b.cl").first_name == ""
