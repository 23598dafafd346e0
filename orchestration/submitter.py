"""Per-store order submitter - one store, one order, bounded retries."""

import asyncio
import random
from typing import Awaitable, Callable, Optional, Protocol

from core.domain.entities import StoreOrder
from core.domain.enums import StoreOrderStatus
from core.domain.exceptions import (
    MissingCredentialError,
    PermanentRemoteError,
    StoreNotFoundError,
    TransientRemoteError,
)
from core.infrastructure.logging import get_logger
from core.infrastructure.marketplace.shopify.client import (
    RemoteLineItem,
    RemoteOrder,
    RemoteOrderRequest,
)

from .ledger import ClaimOutcome, StoreOrderLedger
from .models import OrderIntent, StoreOrderResult
from .registry import StoreRegistry
from .retry import RetryPolicy


DEFAULT_NOTE_TEMPLATE = "Orden de Grumo - Transacción #{transaction_id}"

Sleep = Callable[[float], Awaitable[None]]


class RemoteOrderClient(Protocol):
    """Order-creation API of a store."""

    async def create_order(
        self, domain: str, admin_token: str, request: RemoteOrderRequest
    ) -> RemoteOrder:
        ...


def build_remote_request(
    intent: OrderIntent,
    note_template: str = DEFAULT_NOTE_TEMPLATE,
    tags: str = "",
) -> RemoteOrderRequest:
    """Translate an intent into the payload of one order-creation call."""
    return RemoteOrderRequest(
        items=[
            RemoteLineItem(
                product_ref=item.product_ref,
                variant_ref=item.variant_ref,
                quantity=item.quantity,
                title=item.title,
                price=str(item.unit_price.amount),
            )
            for item in intent.items
        ],
        buyer=intent.buyer_contact,
        note=note_template.format(transaction_id=intent.transaction_id),
        shipping_address=intent.shipping_address,
        shipping_line=intent.shipping_line,
        tags=tags,
    )


class StoreOrderSubmitter:
    """
    Creates the order of one intent at its store.

    Writes the ledger twice at most per submission: the claim before the
    first call, then the outcome. Retries in between only count attempts.
    """

    def __init__(
        self,
        client: RemoteOrderClient,
        ledger: StoreOrderLedger,
        policy: Optional[RetryPolicy] = None,
        *,
        request_timeout: float = 15.0,
        note_template: str = DEFAULT_NOTE_TEMPLATE,
        order_tags: str = "",
        sleep: Sleep = asyncio.sleep,
        rng: Optional[random.Random] = None,
        stop_event: Optional[asyncio.Event] = None,
    ) -> None:
        """Initialize submitter.

        Args:
            client: Remote order-creation API
            ledger: Ledger holding claims and outcomes
            policy: Retry policy (defaults to 3 attempts, 0.5s base, x2, full jitter)
            request_timeout: Bound in seconds for each remote call
            note_template: Order note, formatted with `transaction_id`
            order_tags: Tags sent with every order
            sleep: Backoff sleep, replaceable by a fake clock in tests
            rng: Random source for jitter
            stop_event: Set when the host is shutting down
        """
        self._client = client
        self._ledger = ledger
        self._policy = policy or RetryPolicy()
        self._request_timeout = request_timeout
        self._note_template = note_template
        self._order_tags = order_tags
        self._sleep = sleep
        self._rng = rng
        self._stop_event = stop_event
        self._logger = get_logger("orchestration.submitter")

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    @property
    def stopping(self) -> bool:
        return self._stop_event is not None and self._stop_event.is_set()

    async def submit(
        self,
        intent: OrderIntent,
        registry: StoreRegistry,
        retry_failed: bool = False,
    ) -> StoreOrderResult:
        """Submit one intent.

        Args:
            intent: Order to create at `intent.store_domain`
            registry: Credentials snapshot of the current run
            retry_failed: Submit again a pair whose last outcome is `failed`

        Returns:
            StoreOrderResult; failures are data, never raised
        """
        pair = f"{intent.transaction_id}/{intent.store_domain}"

        claim = await self._ledger.claim(intent, retry_failed=retry_failed)
        if claim.outcome == ClaimOutcome.ALREADY_CONFIRMED:
            self._logger.info(f"Store order {pair} already confirmed, skipping")
            return self._result(claim.store_order, skipped=True)
        if claim.outcome == ClaimOutcome.ALREADY_FAILED:
            self._logger.info(f"Store order {pair} already failed, skipping until re-submitted")
            return self._result(claim.store_order, skipped=True)
        if claim.outcome == ClaimOutcome.IN_FLIGHT:
            self._logger.info(f"Store order {pair} is in flight elsewhere, skipping")
            return StoreOrderResult(
                transaction_id=intent.transaction_id,
                store_domain=intent.store_domain,
                status=StoreOrderStatus.SUBMITTED,
                skipped=True,
            )

        entry = claim.store_order
        # remote calls made for this pair by earlier runs
        previous = entry.attempt_count
        try:
            store = registry.resolve(intent.store_domain)
            if not store.can_receive_orders:
                raise MissingCredentialError(store.domain)
        except (StoreNotFoundError, MissingCredentialError) as exc:
            self._logger.warning(f"Store order {pair} not submitted: {exc}")
            entry.fail(str(exc), attempts=previous)
            await self._ledger.record(entry)
            return self._result(entry, error_type=type(exc).__name__)

        request = build_remote_request(intent, self._note_template, self._order_tags)
        last_error: Optional[TransientRemoteError] = None
        attempt = 0

        for attempt in range(1, self._policy.max_attempts + 1):
            try:
                order = await asyncio.wait_for(
                    self._client.create_order(store.domain, store.admin_token, request),
                    timeout=self._request_timeout,
                )
            except asyncio.TimeoutError:
                last_error = TransientRemoteError(
                    f"Timed out after {self._request_timeout}s creating order at {store.domain}"
                )
            except TransientRemoteError as exc:
                last_error = exc
            except PermanentRemoteError as exc:
                self._logger.warning(
                    f"Store order {pair} rejected (status={exc.status}): {exc.message}"
                )
                entry.fail(exc.message, attempts=previous + attempt)
                await self._ledger.record(entry)
                return self._result(entry, error_type=type(exc).__name__)
            except Exception as exc:
                self._logger.error(f"Store order {pair} crashed on attempt {attempt}", exc_info=True)
                entry.fail(f"{type(exc).__name__}: {exc}", attempts=previous + attempt)
                await self._ledger.record(entry)
                return self._result(entry, error_type=type(exc).__name__)
            else:
                entry.confirm(
                    order.remote_order_id, order.remote_order_number, attempts=previous + attempt
                )
                await self._ledger.record(entry)
                self._logger.info(
                    f"Store order {pair} confirmed as {order.remote_order_number} "
                    f"after {attempt} attempt(s)"
                )
                return self._result(entry)

            self._logger.warning(
                f"Store order {pair} attempt {attempt}/{self._policy.max_attempts} failed: "
                f"{last_error.message}"
            )

            if attempt < self._policy.max_attempts:
                delay = self._policy.delay_for(attempt, self._rng)
                if await self._backoff(delay):
                    self._logger.info(f"Shutdown during backoff, releasing store order {pair}")
                    entry.release(last_error.message, attempts=previous + attempt)
                    await self._ledger.record(entry)
                    return self._result(entry, error_type=type(last_error).__name__)

        entry.fail(last_error.message, attempts=previous + attempt)
        await self._ledger.record(entry)
        self._logger.warning(f"Store order {pair} failed after {attempt} attempt(s)")
        return self._result(entry, error_type=type(last_error).__name__)

    async def _backoff(self, delay: float) -> bool:
        """
        Sleep before the next attempt; True if shutdown cut the wait short.

        Shutdown never interrupts a remote call, only the wait between two
        calls. The caller then releases the pair to `pending` with the
        attempts made so far, so no outcome is left unrecorded.
        """
        if self._stop_event is None:
            await self._sleep(delay)
            return False
        if self._stop_event.is_set():
            return True

        sleeper = asyncio.ensure_future(self._sleep(delay))
        stopper = asyncio.ensure_future(self._stop_event.wait())
        done, pending = await asyncio.wait({sleeper, stopper}, return_when=asyncio.FIRST_COMPLETED)
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        return stopper in done

    @staticmethod
    def _result(
        entry: StoreOrder,
        error_type: Optional[str] = None,
        skipped: bool = False,
    ) -> StoreOrderResult:
        return StoreOrderResult(
            transaction_id=entry.transaction_id,
            store_domain=entry.store_domain,
            status=entry.status,
            attempts=entry.attempt_count,
            remote_order_id=entry.remote_order_id,
            remote_order_number=entry.remote_order_number,
            error_message=entry.error_message,
            error_type=error_type,
            skipped=skipped,
        )
