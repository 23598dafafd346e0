"""Repository interface for the Transaction aggregate."""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..entities.transaction import Transaction
from ..enums import TransactionStatus


class TransactionRepository(ABC):
    """Abstract repository for Transaction aggregate persistence."""

    @abstractmethod
    async def add(self, transaction: Transaction) -> Transaction:
        """Persist a new transaction with its cart items.

        Returns:
            The transaction with its database id assigned
        """
        pass

    @abstractmethod
    async def find_by_id(self, transaction_id: int) -> Optional[Transaction]:
        """Retrieve a transaction with its cart items.

        Args:
            transaction_id: Transaction identifier

        Returns:
            Transaction if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_status(self, status: TransactionStatus, limit: int = 100) -> List[Transaction]:
        """List transactions in a status, most recent first."""
        pass

    @abstractmethod
    async def update(self, transaction: Transaction) -> None:
        """Persist status and payment fields. Cart items are never rewritten."""
        pass
