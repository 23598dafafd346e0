"""Repository interface for StoreOrder ledger entries."""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..entities.store_order import StoreOrder
from ..enums import StoreOrderStatus


class StoreOrderRepository(ABC):
    """Abstract repository for the per-store order ledger."""

    @abstractmethod
    async def find(self, transaction_id: int, store_domain: str) -> Optional[StoreOrder]:
        """Retrieve the single entry of a (transaction, store) pair."""
        pass

    @abstractmethod
    async def add(self, store_order: StoreOrder) -> None:
        """Insert a new entry.

        Raises:
            sqlalchemy.exc.IntegrityError: If the pair already has an entry
        """
        pass

    @abstractmethod
    async def upsert(self, store_order: StoreOrder) -> None:
        """Insert or update the entry keyed by (transaction, store)."""
        pass

    @abstractmethod
    async def find_by_transaction(self, transaction_id: int) -> List[StoreOrder]:
        pass

    @abstractmethod
    async def find_by_store(self, store_domain: str, limit: int = 100) -> List[StoreOrder]:
        pass

    @abstractmethod
    async def find_by_status(self, status: StoreOrderStatus, limit: int = 100) -> List[StoreOrder]:
        pass

    @abstractmethod
    async def find_recent_errors(self, limit: int = 20) -> List[StoreOrder]:
        """Failed entries with an error message, most recent first."""
        pass

    @abstractmethod
    async def compare_and_set(self, store_order: StoreOrder, expected_version: int) -> bool:
        """Update the entry only if its version still equals `expected_version`."""
        pass
