"""Tests for the store order ledger and its claims."""

import asyncio
from datetime import timedelta

import pytest

from core.domain.enums import StoreOrderStatus, TransactionStatus
from orchestration.ledger import ClaimOutcome, StoreOrderLedger
from orchestration.models import utc_now
from orchestration.planner import plan
from tests.mocks.builders import STORE_A, STORE_B, make_transaction


def _intents(transaction_id: int = 3):
    transaction = make_transaction(
        [(STORE_A, "1000", 1), (STORE_B, "2000", 1)],
        id=transaction_id,
        status=TransactionStatus.PAID,
    )
    return plan(transaction)


@pytest.mark.asyncio
async def test_first_claim_creates_submitted_entry(session_factory):
    ledger = StoreOrderLedger(session_factory)
    intent = _intents()[0]

    claim = await ledger.claim(intent)

    assert claim.outcome == ClaimOutcome.CLAIMED
    assert claim.acquired
    [entry] = await ledger.load(3)
    assert entry.store_domain == STORE_A
    assert entry.status == StoreOrderStatus.SUBMITTED


@pytest.mark.asyncio
async def test_concurrent_claims_have_one_winner(session_factory):
    ledger = StoreOrderLedger(session_factory)
    intent = _intents()[0]

    claims = await asyncio.gather(*(ledger.claim(intent) for _ in range(4)))

    outcomes = [claim.outcome for claim in claims]
    assert outcomes.count(ClaimOutcome.CLAIMED) == 1
    assert outcomes.count(ClaimOutcome.IN_FLIGHT) == 3
    assert len(await ledger.load(3)) == 1


@pytest.mark.asyncio
async def test_confirmed_entry_is_not_claimed_again(session_factory):
    ledger = StoreOrderLedger(session_factory)
    intent = _intents()[0]
    claim = await ledger.claim(intent)
    claim.store_order.confirm("gid://shopify/Order/1", "#1001", attempts=1)
    await ledger.record(claim.store_order)

    again = await ledger.claim(intent)

    assert again.outcome == ClaimOutcome.ALREADY_CONFIRMED
    assert again.store_order.remote_order_number == "#1001"


@pytest.mark.asyncio
async def test_failed_entry_is_not_claimed_by_default(session_factory):
    ledger = StoreOrderLedger(session_factory)
    intent = _intents()[0]
    claim = await ledger.claim(intent)
    claim.store_order.fail("out of stock", attempts=1)
    await ledger.record(claim.store_order)

    again = await ledger.claim(intent)

    assert again.outcome == ClaimOutcome.ALREADY_FAILED
    assert not again.acquired
    [entry] = await ledger.load(3)
    assert entry.status == StoreOrderStatus.FAILED
    assert entry.error_message == "out of stock"


@pytest.mark.asyncio
async def test_failed_entry_is_claimed_again_on_retry(session_factory):
    ledger = StoreOrderLedger(session_factory)
    intent = _intents()[0]
    claim = await ledger.claim(intent)
    claim.store_order.fail("out of stock", attempts=1)
    await ledger.record(claim.store_order)

    again = await ledger.claim(intent, retry_failed=True)

    assert again.outcome == ClaimOutcome.CLAIMED
    assert again.store_order.status == StoreOrderStatus.SUBMITTED
    [entry] = await ledger.load(3)
    assert entry.status == StoreOrderStatus.SUBMITTED


@pytest.mark.asyncio
async def test_released_entry_is_claimed_without_retry(session_factory):
    ledger = StoreOrderLedger(session_factory)
    intent = _intents()[0]
    claim = await ledger.claim(intent)
    claim.store_order.release("503 Service Unavailable", attempts=1)
    await ledger.record(claim.store_order)

    again = await ledger.claim(intent)

    assert again.outcome == ClaimOutcome.CLAIMED
    assert again.store_order.attempt_count == 1


@pytest.mark.asyncio
async def test_claim_expires_after_ttl(session_factory):
    ledger = StoreOrderLedger(session_factory, claim_ttl_seconds=60)
    later = StoreOrderLedger(
        session_factory,
        claim_ttl_seconds=60,
        clock=lambda: utc_now() + timedelta(minutes=5),
    )
    intent = _intents()[0]
    await ledger.claim(intent)

    assert (await ledger.claim(intent)).outcome == ClaimOutcome.IN_FLIGHT
    assert (await later.claim(intent)).outcome == ClaimOutcome.CLAIMED


@pytest.mark.asyncio
async def test_record_keeps_one_row_per_pair(session_factory):
    ledger = StoreOrderLedger(session_factory)
    intents = _intents()
    for intent in intents:
        claim = await ledger.claim(intent)
        claim.store_order.fail("503", attempts=3)
        await ledger.record(claim.store_order)
        claim = await ledger.claim(intent, retry_failed=True)
        claim.store_order.confirm(f"gid://shopify/Order/{intent.store_domain}", "#1", attempts=1)
        await ledger.record(claim.store_order)

    entries = await ledger.load(3)

    assert [e.store_domain for e in entries] == [STORE_A, STORE_B]
    assert all(e.status == StoreOrderStatus.CONFIRMED for e in entries)
