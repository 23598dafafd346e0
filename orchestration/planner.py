"""Fan-out planner - one order intent per distinct store of a paid cart."""

from typing import Dict, FrozenSet, List

from core.domain.entities import CartItem, Transaction
from core.domain.enums import TransactionStatus
from core.domain.exceptions import InvalidStateError

from .models import OrderIntent


RESUBMITTABLE_STATUSES: FrozenSet[TransactionStatus] = frozenset({
    TransactionStatus.PAID,
    TransactionStatus.PARTIALLY_FULFILLED,
    TransactionStatus.FAILED,
})


def plan(transaction: Transaction) -> List[OrderIntent]:
    """
    Group the cart of a paid transaction by store.

    Stores keep the order in which they first appear in the cart. An empty
    cart gives an empty plan.

    Raises:
        InvalidStateError: If the transaction is not paid
    """
    if transaction.status != TransactionStatus.PAID:
        raise InvalidStateError(
            f"Transaction {transaction.id} must be paid to fan out (status={transaction.status.value})"
        )
    return _group(transaction)


def plan_resubmission(transaction: Transaction) -> List[OrderIntent]:
    """
    Plan for an explicit re-submission.

    Covers every store of the cart; pairs already confirmed are skipped by
    the ledger, not here.

    Raises:
        InvalidStateError: If the transaction was never paid or is fulfilled
    """
    if transaction.status not in RESUBMITTABLE_STATUSES:
        raise InvalidStateError(
            f"Transaction {transaction.id} cannot be re-submitted (status={transaction.status.value})"
        )
    return _group(transaction)


def _group(transaction: Transaction) -> List[OrderIntent]:
    groups: Dict[str, List[CartItem]] = {}
    for item in transaction.cart_items:
        groups.setdefault(item.store_domain, []).append(item)

    return [
        OrderIntent(
            transaction_id=transaction.id,
            store_domain=domain,
            items=tuple(items),
            buyer_contact=transaction.buyer,
            shipping_address=transaction.shipping_address,
            shipping_line=transaction.shipping_for(domain),
        )
        for domain, items in groups.items()
    ]
