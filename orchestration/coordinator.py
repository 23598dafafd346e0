"""Orchestration coordinator - payment confirmation to per-store orders."""

import asyncio
import random
from datetime import datetime
from typing import Awaitable, Callable, List, Optional, Sequence, Set, Tuple

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.domain.entities import Transaction
from core.domain.enums import StoreOrderStatus, TransactionStatus
from core.domain.exceptions import (
    AmountMismatchError,
    FanOutError,
    UnknownTransactionError,
)
from core.domain.state_machine import can_transition, settle
from core.domain.value_objects import ExecutionID
from core.infrastructure.database.unit_of_work import create_uow
from core.infrastructure.logging import get_logger
from core.settings.modules.app_settings import AppSettings, get_app_settings

from .bus import EventBusProtocol
from .events import Event, EventMetadata
from .ledger import StoreOrderLedger
from .models import FanOutResult, OrderIntent, PaymentConfirmation, StoreOrderResult, utc_now
from .planner import plan, plan_resubmission
from .registry import StoreRegistry
from .retry import RetryPolicy
from .submitter import DEFAULT_NOTE_TEMPLATE, RemoteOrderClient, StoreOrderSubmitter


class OrchestrationCoordinator:
    """
    Drives one transaction from `paid` to its aggregate status.

    One submission task per distinct store, all running concurrently. The
    aggregate status is written only once the ledger holds a terminal entry
    for every store of the cart. Public methods return a FanOutResult and
    never raise domain errors.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        client: RemoteOrderClient,
        *,
        policy: Optional[RetryPolicy] = None,
        event_bus: Optional[EventBusProtocol] = None,
        request_timeout: float = 15.0,
        max_concurrency: Optional[int] = None,
        claim_ttl_seconds: float = 600.0,
        note_template: str = DEFAULT_NOTE_TEMPLATE,
        order_tags: str = "",
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        rng: Optional[random.Random] = None,
    ) -> None:
        """Initialize coordinator.

        Args:
            session_factory: SQLAlchemy async session factory
            client: Remote order-creation API
            policy: Retry policy for each store submission
            event_bus: Optional bus receiving fan-out events
            request_timeout: Bound in seconds for each remote call
            max_concurrency: Cap on simultaneous store submissions (None = one task per store)
            claim_ttl_seconds: Age after which an abandoned claim may be re-taken
            note_template: Order note, formatted with `transaction_id`
            order_tags: Tags sent with every order
            sleep: Backoff sleep, replaceable in tests
            rng: Random source for jitter
        """
        if max_concurrency is not None and max_concurrency < 1:
            raise ValueError(f"max_concurrency must be >= 1, got: {max_concurrency}")

        self._session_factory = session_factory
        self._event_bus = event_bus
        self._max_concurrency = max_concurrency
        self._stop_event = asyncio.Event()
        self._in_flight: Set[asyncio.Task] = set()
        self._ledger = StoreOrderLedger(session_factory, claim_ttl_seconds=claim_ttl_seconds)
        self._submitter = StoreOrderSubmitter(
            client,
            self._ledger,
            policy,
            request_timeout=request_timeout,
            note_template=note_template,
            order_tags=order_tags,
            sleep=sleep,
            rng=rng,
            stop_event=self._stop_event,
        )
        self._logger = get_logger("orchestration.coordinator")

    @classmethod
    def from_settings(
        cls,
        session_factory: async_sessionmaker[AsyncSession],
        client: Optional[RemoteOrderClient] = None,
        settings: Optional[AppSettings] = None,
        event_bus: Optional[EventBusProtocol] = None,
    ) -> "OrchestrationCoordinator":
        """Build a coordinator from application settings."""
        settings = settings or get_app_settings()
        orchestration = settings.orchestration

        if client is None:
            from core.infrastructure.marketplace.shopify.client import ShopifyOrderClient

            client = ShopifyOrderClient(
                settings=settings.shopify,
                timeout_seconds=orchestration.request_timeout_seconds,
            )

        return cls(
            session_factory,
            client,
            policy=RetryPolicy.from_settings(orchestration),
            event_bus=event_bus,
            request_timeout=orchestration.request_timeout_seconds,
            max_concurrency=orchestration.max_concurrency,
            claim_ttl_seconds=orchestration.claim_ttl_seconds,
            note_template=settings.shopify.order_note_template,
            order_tags=settings.shopify.order_tags,
        )

    @property
    def ledger(self) -> StoreOrderLedger:
        return self._ledger

    @property
    def stopping(self) -> bool:
        return self._stop_event.is_set()

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    async def handle_payment_confirmation(self, confirmation: PaymentConfirmation) -> FanOutResult:
        """
        Mark the transaction paid and fan its cart out to the stores.

        A repeated confirmation re-runs the fan-out of a still `paid`
        transaction (confirmed pairs are skipped) and returns the current
        state of a settled one.
        """
        execution_id = ExecutionID.generate()
        started_at = utc_now()
        transaction_id = confirmation.transaction_id

        try:
            transaction = await self._confirm_payment(confirmation)
            if transaction.status.is_terminal:
                self._logger.info(
                    f"Transaction {transaction_id} already {transaction.status.value}, "
                    f"ignoring payment confirmation"
                )
                return FanOutResult(
                    transaction_id=transaction_id,
                    execution_id=execution_id,
                    status=transaction.status,
                    started_at=started_at,
                    finished_at=utc_now(),
                    settled=True,
                )
            intents = plan(transaction)
        except FanOutError as exc:
            return self._rejected(transaction_id, execution_id, started_at, exc)

        return await self._run(transaction, intents, execution_id, started_at)

    async def process(self, transaction_id: int) -> FanOutResult:
        """Run (or resume) the fan-out of a transaction that is already paid."""
        execution_id = ExecutionID.generate()
        started_at = utc_now()

        try:
            transaction = await self._load(transaction_id)
            intents = plan(transaction)
        except FanOutError as exc:
            return self._rejected(transaction_id, execution_id, started_at, exc)

        return await self._run(transaction, intents, execution_id, started_at)

    async def resubmit(self, transaction_id: int) -> FanOutResult:
        """
        Re-dispatch every non-confirmed store of a transaction.

        The only operation that submits a `failed` pair again; `process` and
        repeated confirmations leave failed pairs as they are.

        Explicitly triggered, never scheduled. May move the transaction
        forward (`partially_fulfilled -> fulfilled`, `failed -> ...`).
        """
        execution_id = ExecutionID.generate()
        started_at = utc_now()

        try:
            transaction = await self._load(transaction_id)
            intents = plan_resubmission(transaction)
        except FanOutError as exc:
            return self._rejected(transaction_id, execution_id, started_at, exc)

        self._logger.info(
            f"Re-submitting transaction {transaction_id} ({transaction.status.value})"
        )
        return await self._run(transaction, intents, execution_id, started_at, retry_failed=True)

    def request_shutdown(self) -> None:
        """Stop dispatching; running submissions end after their current attempt."""
        self._stop_event.set()

    async def shutdown(self) -> None:
        """Request shutdown and wait for in-flight submissions to record their outcome."""
        self.request_shutdown()
        if self._in_flight:
            self._logger.info(f"Waiting for {len(self._in_flight)} in-flight store order(s)")
            await asyncio.gather(*self._in_flight, return_exceptions=True)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _confirm_payment(self, confirmation: PaymentConfirmation) -> Transaction:
        async with create_uow(self._session_factory) as uow:
            transaction = await uow.transactions.find_by_id(confirmation.transaction_id)
            if transaction is None:
                raise UnknownTransactionError(confirmation.transaction_id)

            if confirmation.paid_amount != transaction.total_amount:
                raise AmountMismatchError(
                    transaction.id, transaction.total_amount, confirmation.paid_amount
                )

            if transaction.status == TransactionStatus.PENDING:
                transaction.mark_paid(
                    confirmation.payment_reference,
                    paid_at=confirmation.paid_at,
                    payment_method=confirmation.payment_method,
                )
                await uow.transactions.update(transaction)
                await uow.commit()
                self._logger.info(
                    f"Transaction {transaction.id} paid ({confirmation.payment_reference})"
                )
            return transaction

    async def _load(self, transaction_id: int) -> Transaction:
        async with create_uow(self._session_factory) as uow:
            transaction = await uow.transactions.find_by_id(transaction_id)
        if transaction is None:
            raise UnknownTransactionError(transaction_id)
        return transaction

    async def _run(
        self,
        transaction: Transaction,
        intents: Sequence[OrderIntent],
        execution_id: ExecutionID,
        started_at: datetime,
        retry_failed: bool = False,
    ) -> FanOutResult:
        expected_domains = [intent.store_domain for intent in intents]

        self._logger.info(
            f"Fan-out of transaction {transaction.id} to {len(intents)} store(s) "
            f"[execution={execution_id}]"
        )
        await self._publish(
            "fanout.started",
            execution_id,
            transaction.id,
            {"store_domains": expected_domains, "store_count": len(intents)},
        )

        store_results: List[StoreOrderResult] = []
        if intents and not self.stopping:
            registry = await StoreRegistry.load(self._session_factory, expected_domains)
            semaphore = asyncio.Semaphore(self._max_concurrency) if self._max_concurrency else None

            tasks = [
                asyncio.create_task(
                    self._submit_one(intent, registry, semaphore, execution_id, retry_failed)
                )
                for intent in intents
            ]
            for task in tasks:
                self._in_flight.add(task)
                task.add_done_callback(self._in_flight.discard)

            # shutdown of the caller must not abandon submissions mid-attempt
            outcomes = await asyncio.shield(asyncio.gather(*tasks, return_exceptions=True))
            for intent, outcome in zip(intents, outcomes):
                if isinstance(outcome, BaseException):
                    self._logger.error(
                        f"Store order {intent.transaction_id}/{intent.store_domain} "
                        f"was not recorded: {outcome!r}"
                    )
                    outcome = StoreOrderResult(
                        transaction_id=intent.transaction_id,
                        store_domain=intent.store_domain,
                        status=StoreOrderStatus.PENDING,
                        error_message=str(outcome),
                        error_type=type(outcome).__name__,
                    )
                store_results.append(outcome)

        try:
            status, settled = await self._settle(transaction.id, expected_domains)
        except FanOutError as exc:
            return self._rejected(transaction.id, execution_id, started_at, exc, store_results)

        result = FanOutResult(
            transaction_id=transaction.id,
            execution_id=execution_id,
            status=status,
            started_at=started_at,
            finished_at=utc_now(),
            store_results=store_results,
            settled=settled,
        )

        await self._publish(
            "fanout.finished",
            execution_id,
            transaction.id,
            {
                "status": status.value,
                "settled": settled,
                "confirmed_count": result.confirmed_count,
                "failed_count": result.failed_count,
            },
        )
        self._logger.info(
            f"Transaction {transaction.id} -> {status.value} "
            f"({result.confirmed_count} confirmed, {result.failed_count} failed, "
            f"settled={settled}, {int((result.finished_at - started_at).total_seconds() * 1000)}ms)"
        )
        return result

    async def _submit_one(
        self,
        intent: OrderIntent,
        registry: StoreRegistry,
        semaphore: Optional[asyncio.Semaphore],
        execution_id: ExecutionID,
        retry_failed: bool,
    ) -> StoreOrderResult:
        if semaphore is None:
            result = await self._dispatch(intent, registry, retry_failed)
        else:
            async with semaphore:
                result = await self._dispatch(intent, registry, retry_failed)

        await self._publish(
            "store_order.finished",
            execution_id,
            intent.transaction_id,
            {
                "store_domain": result.store_domain,
                "status": result.status.value,
                "attempts": result.attempts,
                "remote_order_number": result.remote_order_number,
                "error_message": result.error_message,
                "skipped": result.skipped,
            },
        )
        return result

    async def _dispatch(
        self, intent: OrderIntent, registry: StoreRegistry, retry_failed: bool
    ) -> StoreOrderResult:
        if self.stopping:
            # not started: left for a later run
            return StoreOrderResult(
                transaction_id=intent.transaction_id,
                store_domain=intent.store_domain,
                status=StoreOrderStatus.PENDING,
                skipped=True,
            )
        return await self._submitter.submit(intent, registry, retry_failed=retry_failed)

    async def _settle(
        self, transaction_id: int, expected_domains: Sequence[str]
    ) -> Tuple[TransactionStatus, bool]:
        """Write the aggregate status if every store is terminal."""
        async with create_uow(self._session_factory) as uow:
            transaction = await uow.transactions.find_by_id(transaction_id)
            if transaction is None:
                raise UnknownTransactionError(transaction_id)
            entries = await uow.store_orders.find_by_transaction(transaction_id)

            derived = settle(expected_domains, {e.store_domain: e.status for e in entries})
            if derived is None:
                return transaction.status, False
            if derived == transaction.status:
                return derived, True
            if not can_transition(transaction.status, derived):
                self._logger.warning(
                    f"Transaction {transaction_id} stays {transaction.status.value}, "
                    f"ledger says {derived.value}"
                )
                return transaction.status, True

            transaction.transition_to(derived)
            await uow.transactions.update(transaction)
            await uow.commit()
            return derived, True

    def _rejected(
        self,
        transaction_id: int,
        execution_id: ExecutionID,
        started_at: datetime,
        error: FanOutError,
        store_results: Sequence[StoreOrderResult] = (),
    ) -> FanOutResult:
        self._logger.warning(f"Transaction {transaction_id} rejected: {error}")
        return FanOutResult(
            transaction_id=transaction_id,
            execution_id=execution_id,
            status=None,
            started_at=started_at,
            finished_at=utc_now(),
            rejected=True,
            error=str(error),
            error_type=type(error).__name__,
            store_results=list(store_results),
        )

    async def _publish(
        self,
        name: str,
        execution_id: ExecutionID,
        transaction_id: int,
        payload: dict[str, object],
    ) -> None:
        if self._event_bus is None:
            return
        metadata = EventMetadata(
            execution_id=str(execution_id),
            transaction_id=transaction_id,
            timestamp=utc_now(),
        )
        await self._event_bus.publish(Event(name=name, payload=payload, metadata=metadata))
