"""Tests for the fan-out planner."""

from decimal import Decimal

import pytest

from core.domain.enums import TransactionStatus
from core.domain.exceptions import InvalidStateError
from orchestration.planner import plan, plan_resubmission
from tests.mocks.builders import BUYER, STORE_A, STORE_B, STORE_C, make_transaction


def test_plan_groups_items_by_store_in_first_seen_order():
    transaction = make_transaction(
        [(STORE_B, "1000", 1), (STORE_A, "2000", 2), (STORE_B, "500", 3), (STORE_C, "100", 1)],
        id=8,
        status=TransactionStatus.PAID,
    )

    intents = plan(transaction)

    assert [intent.store_domain for intent in intents] == [STORE_B, STORE_A, STORE_C]
    assert [len(intent.items) for intent in intents] == [2, 1, 1]
    assert all(intent.transaction_id == 8 for intent in intents)
    assert all(intent.buyer_contact == BUYER for intent in intents)


def test_plan_order_amount_per_store():
    transaction = make_transaction(
        [(STORE_A, "1000", 2), (STORE_B, "300", 1), (STORE_A, "250", 4)],
        id=1,
        status=TransactionStatus.PAID,
    )

    amounts = {intent.store_domain: intent.order_amount for intent in plan(transaction)}

    assert amounts == {STORE_A: Decimal("3000"), STORE_B: Decimal("300")}


def test_plan_merges_legacy_prefixed_store_ids():
    transaction = make_transaction(
        [(STORE_A, "1000", 1), (f"real-{STORE_A}", "2000", 1)],
        id=1,
        status=TransactionStatus.PAID,
    )

    intents = plan(transaction)

    assert len(intents) == 1
    assert intents[0].store_domain == STORE_A
    assert len(intents[0].items) == 2


def test_plan_carries_shipping_per_store():
    transaction = make_transaction(
        [(STORE_A, "1000", 1)], id=1, status=TransactionStatus.PAID, with_shipping=True
    )

    intent = plan(transaction)[0]

    assert intent.shipping_address.city == "Santiago"
    assert intent.shipping_line.price == Decimal("3990")


def test_plan_empty_cart_is_empty_plan():
    transaction = make_transaction([], id=1, status=TransactionStatus.PAID)

    assert plan(transaction) == []


@pytest.mark.parametrize(
    "status",
    [TransactionStatus.PENDING, TransactionStatus.FULFILLED, TransactionStatus.PARTIALLY_FULFILLED],
)
def test_plan_requires_paid_transaction(status):
    transaction = make_transaction([(STORE_A, "1000", 1)], id=1, status=status)

    with pytest.raises(InvalidStateError):
        plan(transaction)


def test_plan_is_pure():
    transaction = make_transaction(
        [(STORE_A, "1000", 1), (STORE_B, "1000", 1)], id=1, status=TransactionStatus.PAID
    )

    assert plan(transaction) == plan(transaction)
    assert transaction.status == TransactionStatus.PAID


@pytest.mark.parametrize(
    "status",
    [TransactionStatus.PAID, TransactionStatus.PARTIALLY_FULFILLED, TransactionStatus.FAILED],
)
def test_plan_resubmission_allowed_statuses(status):
    transaction = make_transaction([(STORE_A, "1000", 1)], id=1, status=status)

    assert [intent.store_domain for intent in plan_resubmission(transaction)] == [STORE_A]


@pytest.mark.parametrize("status", [TransactionStatus.PENDING, TransactionStatus.FULFILLED])
def test_plan_resubmission_rejected_statuses(status):
    transaction = make_transaction([(STORE_A, "1000", 1)], id=1, status=status)

    with pytest.raises(InvalidStateError):
        plan_resubmission(transaction)
