"""
Transaction state machine.

Single place where transaction status changes are validated and where the
aggregate status is derived from the per-store ledger. Used by the
coordinator and by diagnostic readers alike.

    pending -> paid -> {partially_fulfilled | fulfilled | failed}

Re-submission may later move partially_fulfilled -> fulfilled and
failed -> {partially_fulfilled | fulfilled}.
"""
from typing import Dict, FrozenSet, Iterable, Mapping, Optional

from .enums import StoreOrderStatus, TransactionStatus
from .exceptions import InvalidStateError, InvalidTransitionError


ALLOWED_TRANSITIONS: Dict[TransactionStatus, FrozenSet[TransactionStatus]] = {
    TransactionStatus.PENDING: frozenset({TransactionStatus.PAID}),
    TransactionStatus.PAID: frozenset({
        TransactionStatus.PARTIALLY_FULFILLED,
        TransactionStatus.FULFILLED,
        TransactionStatus.FAILED,
    }),
    TransactionStatus.PARTIALLY_FULFILLED: frozenset({TransactionStatus.FULFILLED}),
    TransactionStatus.FAILED: frozenset({
        TransactionStatus.PARTIALLY_FULFILLED,
        TransactionStatus.FULFILLED,
    }),
    TransactionStatus.FULFILLED: frozenset(),
}


def can_transition(current: TransactionStatus, target: TransactionStatus) -> bool:
    """Check whether `current -> target` is a forward move."""
    return target in ALLOWED_TRANSITIONS[current]


def ensure_transition(current: TransactionStatus, target: TransactionStatus) -> None:
    """
    Validate a status change.

    Raises:
        InvalidTransitionError: If the move is not allowed
    """
    if not can_transition(current, target):
        raise InvalidTransitionError(current.value, target.value)


def derive_transaction_status(statuses: Iterable[StoreOrderStatus]) -> TransactionStatus:
    """
    Aggregate status from terminal per-store statuses.

    - no stores, or all confirmed -> fulfilled
    - all failed -> failed
    - otherwise -> partially_fulfilled

    Raises:
        InvalidStateError: If any status is not terminal
    """
    statuses = [StoreOrderStatus(s) for s in statuses]
    unsettled = [s for s in statuses if not s.is_terminal]
    if unsettled:
        raise InvalidStateError(
            f"Cannot derive transaction status from non-terminal store orders: "
            f"{sorted({s.value for s in unsettled})}"
        )

    confirmed = sum(1 for s in statuses if s == StoreOrderStatus.CONFIRMED)
    if confirmed == len(statuses):
        return TransactionStatus.FULFILLED
    if confirmed == 0:
        return TransactionStatus.FAILED
    return TransactionStatus.PARTIALLY_FULFILLED


def settle(
    expected_domains: Iterable[str],
    ledger: Mapping[str, StoreOrderStatus],
) -> Optional[TransactionStatus]:
    """
    Derive the aggregate status once every expected store has a terminal entry.

    Args:
        expected_domains: Store domains the transaction fans out to
        ledger: Current status per store domain

    Returns:
        The derived status, or None while any store is missing or in flight
    """
    statuses = []
    for domain in expected_domains:
        status = ledger.get(domain)
        if status is None or not StoreOrderStatus(status).is_terminal:
            return None
        statuses.append(status)
    return derive_transaction_status(statuses)
