"""Builders and seeding helpers for transactions and stores."""

from decimal import Decimal
from typing import Iterable, Optional, Sequence, Tuple

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.domain.entities import CartItem, Store, Transaction
from core.domain.enums import TransactionStatus
from core.domain.value_objects import BuyerContact, Money, ShippingAddress, ShippingLine
from core.infrastructure.database.unit_of_work import create_uow


STORE_A = "tienda-a.myshopify.com"
STORE_B = "tienda-b.myshopify.com"
STORE_C = "tienda-c.myshopify.com"

BUYER = BuyerContact(email="ana@example.com", name="Ana Pérez", phone="+56911111111")


def make_store(domain: str, admin_token: Optional[str] = "shpat_test", storefront_token: Optional[str] = "sf_test") -> Store:
    return Store(
        domain=domain,
        display_name=domain.split(".")[0],
        storefront_token=storefront_token,
        admin_token=admin_token,
    )


def make_transaction(
    lines: Sequence[Tuple[str, str, int]] = (),
    id: Optional[int] = None,
    status: TransactionStatus = TransactionStatus.PENDING,
    total_amount: Optional[Decimal] = None,
    with_shipping: bool = False,
) -> Transaction:
    """Build a transaction from (store_id, unit_price, quantity) lines."""
    items = [
        CartItem(
            store_id=store_id,
            product_ref=f"gid://shopify/Product/{index}",
            variant_ref=f"gid://shopify/ProductVariant/{100 + index}",
            quantity=quantity,
            unit_price=Money(amount=Decimal(price)),
            title=f"Producto {index}",
        )
        for index, (store_id, price, quantity) in enumerate(lines, start=1)
    ]
    total = total_amount
    if total is None:
        total = sum((item.line_total.amount for item in items), Decimal("0"))

    transaction = Transaction(
        id=id,
        total_amount=total,
        buyer=BUYER,
        status=status,
        cart_items=items,
    )
    if with_shipping:
        transaction.shipping_address = ShippingAddress(
            street="Av. Providencia 123", city="Santiago", region="RM", zip_code="7500000"
        )
        transaction.shipping_costs = {
            item.store_domain: ShippingLine(title="Despacho", price=Decimal("3990"), code="STD")
            for item in items
        }
    return transaction


async def seed_stores(session_factory: async_sessionmaker[AsyncSession], stores: Iterable[Store]) -> None:
    async with create_uow(session_factory) as uow:
        for store in stores:
            await uow.stores.save(store)
        await uow.commit()


async def seed_transaction(
    session_factory: async_sessionmaker[AsyncSession], transaction: Transaction
) -> Transaction:
    async with create_uow(session_factory) as uow:
        transaction = await uow.transactions.add(transaction)
        await uow.commit()
    return transaction
