"""Integration tests for the SQLAlchemy repositories and unit of work."""

from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError

from core.domain.entities import StoreOrder
from core.domain.enums import StoreOrderStatus, TransactionStatus
from core.domain.exceptions import UnknownTransactionError
from core.infrastructure.database.unit_of_work import UnitOfWork, create_uow
from tests.mocks.builders import (
    STORE_A,
    STORE_B,
    make_store,
    make_transaction,
    seed_stores,
    seed_transaction,
)


@pytest.mark.asyncio
async def test_transaction_round_trip_keeps_cart_and_shipping(session_factory):
    transaction = await seed_transaction(
        session_factory,
        make_transaction([(STORE_B, "1000", 1), (STORE_A, "2500", 2)], with_shipping=True),
    )

    async with create_uow(session_factory) as uow:
        loaded = await uow.transactions.find_by_id(transaction.id)

    assert loaded.status == TransactionStatus.PENDING
    assert loaded.total_amount == Decimal("6000")
    assert loaded.buyer.email == "ana@example.com"
    assert loaded.store_domains == [STORE_B, STORE_A]
    assert [item.quantity for item in loaded.cart_items] == [1, 2]
    assert loaded.shipping_address.city == "Santiago"
    assert loaded.shipping_for(STORE_A).price == Decimal("3990")
    assert loaded.created_at.tzinfo is not None


@pytest.mark.asyncio
async def test_transaction_update_persists_payment(session_factory):
    transaction = await seed_transaction(session_factory, make_transaction([(STORE_A, "1000", 1)]))

    async with create_uow(session_factory) as uow:
        loaded = await uow.transactions.find_by_id(transaction.id)
        loaded.mark_paid("mp-555", payment_method="debit_card")
        await uow.transactions.update(loaded)
        await uow.commit()

    async with create_uow(session_factory) as uow:
        paid = await uow.transactions.find_by_status(TransactionStatus.PAID)

    assert [t.id for t in paid] == [transaction.id]
    assert paid[0].payment_reference == "mp-555"
    assert paid[0].paid_at is not None


@pytest.mark.asyncio
async def test_update_of_missing_transaction(session_factory):
    async with create_uow(session_factory) as uow:
        with pytest.raises(UnknownTransactionError):
            await uow.transactions.update(make_transaction([], id=999))


@pytest.mark.asyncio
async def test_unit_of_work_rolls_back_on_error(session_factory):
    with pytest.raises(RuntimeError):
        async with create_uow(session_factory) as uow:
            await uow.transactions.add(make_transaction([(STORE_A, "1000", 1)], id=42))
            raise RuntimeError("boom")

    async with create_uow(session_factory) as uow:
        assert await uow.transactions.find_by_id(42) is None


def test_unit_of_work_requires_context():
    uow = UnitOfWork(session_factory=None)

    with pytest.raises(RuntimeError):
        uow.session


@pytest.mark.asyncio
async def test_store_save_updates_existing_store(session_factory):
    await seed_stores(session_factory, [make_store(STORE_A, admin_token=None)])
    await seed_stores(session_factory, [make_store(STORE_A, admin_token="shpat_rotated")])

    async with create_uow(session_factory) as uow:
        stores = await uow.stores.find_all()
        found = await uow.stores.find_by_domains([STORE_A, STORE_B])

    assert len(stores) == 1
    assert stores[0].admin_token == "shpat_rotated"
    assert [s.domain for s in found] == [STORE_A]


@pytest.mark.asyncio
async def test_store_order_pair_is_unique(session_factory):
    async with create_uow(session_factory) as uow:
        await uow.store_orders.add(StoreOrder(transaction_id=1, store_domain=STORE_A))
        await uow.commit()

    async with create_uow(session_factory) as uow:
        with pytest.raises(IntegrityError):
            await uow.store_orders.add(StoreOrder(transaction_id=1, store_domain=STORE_A))


@pytest.mark.asyncio
async def test_store_order_upsert_bumps_version(session_factory):
    entry = StoreOrder(transaction_id=1, store_domain=STORE_A, order_amount=Decimal("1500"))
    async with create_uow(session_factory) as uow:
        await uow.store_orders.upsert(entry)
        await uow.commit()

    entry.confirm("gid://shopify/Order/9", "#9", attempts=1)
    async with create_uow(session_factory) as uow:
        await uow.store_orders.upsert(entry)
        await uow.commit()

    async with create_uow(session_factory) as uow:
        stored = await uow.store_orders.find(1, STORE_A)

    assert stored.status == StoreOrderStatus.CONFIRMED
    assert stored.remote_order_number == "#9"
    assert stored.version == 1
    assert entry.version == 1


@pytest.mark.asyncio
async def test_compare_and_set_rejects_stale_version(session_factory):
    async with create_uow(session_factory) as uow:
        await uow.store_orders.add(StoreOrder(transaction_id=1, store_domain=STORE_A))
        await uow.commit()

    async with create_uow(session_factory) as uow:
        first = await uow.store_orders.find(1, STORE_A)
        second = await uow.store_orders.find(1, STORE_A)
        first.mark_submitted()
        second.mark_submitted()

        assert await uow.store_orders.compare_and_set(first, expected_version=0)
        assert not await uow.store_orders.compare_and_set(second, expected_version=0)
        await uow.commit()

    async with create_uow(session_factory) as uow:
        stored = await uow.store_orders.find(1, STORE_A)
    assert stored.version == 1
    assert stored.status == StoreOrderStatus.SUBMITTED


@pytest.mark.asyncio
async def test_store_order_queries(session_factory):
    async with create_uow(session_factory) as uow:
        ok = StoreOrder(transaction_id=1, store_domain=STORE_A)
        ok.confirm("gid://shopify/Order/1", "#1", attempts=1)
        bad = StoreOrder(transaction_id=1, store_domain=STORE_B)
        bad.fail("Variant is out of stock", attempts=1)
        other = StoreOrder(transaction_id=2, store_domain=STORE_A)
        other.fail("Store tienda-a.myshopify.com not found", attempts=0)
        for entry in (ok, bad, other):
            await uow.store_orders.add(entry)
        await uow.commit()

    async with create_uow(session_factory) as uow:
        by_transaction = await uow.store_orders.find_by_transaction(1)
        by_store = await uow.store_orders.find_by_store(STORE_A)
        failed = await uow.store_orders.find_by_status(StoreOrderStatus.FAILED)
        errors = await uow.store_orders.find_recent_errors(limit=1)

    assert [e.store_domain for e in by_transaction] == [STORE_A, STORE_B]
    assert {e.transaction_id for e in by_store} == {1, 2}
    assert {(e.transaction_id, e.store_domain) for e in failed} == {(1, STORE_B), (2, STORE_A)}
    assert len(errors) == 1
    assert errors[0].status == StoreOrderStatus.FAILED
