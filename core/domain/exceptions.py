"""
Domain exceptions.

Error taxonomy of the fan-out orchestrator. Per-store errors end up as
StoreOrder data; trigger errors end up as a rejected FanOutResult.
"""
from decimal import Decimal
from typing import Optional


class FanOutError(Exception):
    """Base class for orchestrator errors."""


class InvalidStateError(FanOutError):
    """Operation attempted on a transaction not in the required state."""


class InvalidTransitionError(InvalidStateError):
    """Transaction status change that would move backwards."""

    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(f"Invalid transaction transition: {current} -> {target}")


class NotFoundError(FanOutError):
    """Requested record does not exist."""


class StoreNotFoundError(NotFoundError):
    def __init__(self, domain: str):
        self.domain = domain
        super().__init__(f"Store {domain} not found")


class UnknownTransactionError(NotFoundError):
    def __init__(self, transaction_id: int):
        self.transaction_id = transaction_id
        super().__init__(f"Transaction {transaction_id} not found")


class AmountMismatchError(FanOutError):
    def __init__(self, transaction_id: int, expected: Decimal, paid: Decimal):
        self.transaction_id = transaction_id
        self.expected = expected
        self.paid = paid
        super().__init__(
            f"Paid amount {paid} does not match total {expected} of transaction {transaction_id}"
        )


class MissingCredentialError(FanOutError):
    """Store lacks the admin token required to create orders."""

    def __init__(self, domain: str):
        self.domain = domain
        super().__init__(f"Store {domain} does not have Admin API token configured")


class RemoteOrderError(FanOutError):
    """
    Failure reported by a store's order-creation API.

    `message` is the remote error text, kept verbatim.
    """

    def __init__(self, message: str, status: Optional[int] = None):
        self.message = message
        self.status = status
        super().__init__(message)


class TransientRemoteError(RemoteOrderError):
    """Network error, timeout, rate limit or 5xx. Retried."""


class PermanentRemoteError(RemoteOrderError):
    """4xx validation failure. Never retried."""
