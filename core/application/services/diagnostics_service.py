"""Application service for read-only diagnostics of the fan-out."""

from typing import List, Optional

from sqlalchemy.ext.asyncio import async_sessionmaker

from core.application.dtos import (
    CartItemDTO,
    StoreOrderDTO,
    StoreReadinessDTO,
    TransactionDetailDTO,
    TransactionDTO,
)
from core.domain.entities import Store, StoreOrder, Transaction
from core.domain.enums import StoreOrderStatus, TransactionStatus
from core.domain.state_machine import settle
from core.infrastructure.database.unit_of_work import create_uow


class DiagnosticsService:
    """
    Queries the transaction and ledger records without changing them.

    The aggregate status is re-derived from the ledger with the same
    function the coordinator uses, so a stored status that disagrees with
    its store orders shows up here.
    """

    def __init__(self, session_factory: async_sessionmaker) -> None:
        """Initialize diagnostics service.

        Args:
            session_factory: SQLAlchemy async session factory
        """
        self._session_factory = session_factory

    async def get_transaction(self, transaction_id: int) -> Optional[TransactionDetailDTO]:
        """Get a transaction with its cart, ledger and derived status.

        Args:
            transaction_id: Transaction id

        Returns:
            TransactionDetailDTO if found, None otherwise
        """
        async with create_uow(self._session_factory) as uow:
            transaction = await uow.transactions.find_by_id(transaction_id)
            if transaction is None:
                return None
            store_orders = await uow.store_orders.find_by_transaction(transaction_id)

        ledger = {entry.store_domain: entry.status for entry in store_orders}
        domains = transaction.store_domains
        derived = settle(domains, ledger)

        return TransactionDetailDTO(
            **self._transaction_fields(transaction),
            cart_items=[
                CartItemDTO(
                    store_domain=item.store_domain,
                    product_ref=item.product_ref,
                    variant_ref=item.variant_ref,
                    title=item.title,
                    quantity=item.quantity,
                    unit_price=item.unit_price.amount,
                )
                for item in transaction.cart_items
            ],
            store_orders=[self._store_order_to_dto(entry) for entry in store_orders],
            derived_status=derived.value if derived else None,
            missing_stores=[domain for domain in domains if domain not in ledger],
        )

    async def list_transactions(
        self, status: TransactionStatus, limit: int = 100
    ) -> List[TransactionDTO]:
        async with create_uow(self._session_factory) as uow:
            transactions = await uow.transactions.find_by_status(status, limit=limit)
        return [TransactionDTO(**self._transaction_fields(t)) for t in transactions]

    async def list_store_orders(self, transaction_id: int) -> List[StoreOrderDTO]:
        async with create_uow(self._session_factory) as uow:
            entries = await uow.store_orders.find_by_transaction(transaction_id)
        return [self._store_order_to_dto(entry) for entry in entries]

    async def store_orders_by_store(self, store_domain: str, limit: int = 100) -> List[StoreOrderDTO]:
        async with create_uow(self._session_factory) as uow:
            entries = await uow.store_orders.find_by_store(store_domain, limit=limit)
        return [self._store_order_to_dto(entry) for entry in entries]

    async def store_orders_by_status(
        self, status: StoreOrderStatus, limit: int = 100
    ) -> List[StoreOrderDTO]:
        async with create_uow(self._session_factory) as uow:
            entries = await uow.store_orders.find_by_status(status, limit=limit)
        return [self._store_order_to_dto(entry) for entry in entries]

    async def recent_errors(self, limit: int = 20) -> List[StoreOrderDTO]:
        """Most recently failed store orders with their error text."""
        async with create_uow(self._session_factory) as uow:
            entries = await uow.store_orders.find_recent_errors(limit=limit)
        return [self._store_order_to_dto(entry) for entry in entries]

    async def store_readiness(self, domains: Optional[List[str]] = None) -> List[StoreReadinessDTO]:
        """Credentials present per store.

        Args:
            domains: Restrict to these domains (all stores when omitted)
        """
        async with create_uow(self._session_factory) as uow:
            if domains:
                stores = await uow.stores.find_by_domains(domains)
            else:
                stores = await uow.stores.find_all()
        return [self._store_to_dto(store) for store in stores]

    @staticmethod
    def _transaction_fields(transaction: Transaction) -> dict:
        return {
            "id": transaction.id,
            "status": transaction.status.value,
            "total_amount": transaction.total_amount,
            "currency": transaction.currency,
            "buyer_email": transaction.buyer.email,
            "buyer_name": transaction.buyer.name,
            "payment_reference": transaction.payment_reference,
            "store_domains": transaction.store_domains,
            "created_at": transaction.created_at,
            "paid_at": transaction.paid_at,
        }

    @staticmethod
    def _store_order_to_dto(entry: StoreOrder) -> StoreOrderDTO:
        return StoreOrderDTO(
            transaction_id=entry.transaction_id,
            store_domain=entry.store_domain,
            status=entry.status.value,
            remote_order_id=entry.remote_order_id,
            remote_order_number=entry.remote_order_number,
            error_message=entry.error_message,
            attempt_count=entry.attempt_count,
            order_amount=entry.order_amount,
            order_items=entry.order_items,
            created_at=entry.created_at,
            updated_at=entry.updated_at,
            synced_at=entry.synced_at,
        )

    @staticmethod
    def _store_to_dto(store: Store) -> StoreReadinessDTO:
        return StoreReadinessDTO(
            domain=store.domain,
            name=store.name,
            has_storefront_token=store.can_read_products,
            has_admin_token=store.can_receive_orders,
        )
