"""Repository interface for Store entities."""

from abc import ABC, abstractmethod
from typing import Iterable, List, Optional

from ..entities.store import Store


class StoreRepository(ABC):
    """Abstract repository for store persistence."""

    @abstractmethod
    async def save(self, store: Store) -> None:
        """Insert or update a store by domain."""
        pass

    @abstractmethod
    async def find_by_domain(self, domain: str) -> Optional[Store]:
        """Retrieve a store by its unique domain.

        Args:
            domain: Store domain (e.g. shop.myshopify.com)

        Returns:
            Store if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_domains(self, domains: Iterable[str]) -> List[Store]:
        """Retrieve every known store among `domains`."""
        pass

    @abstractmethod
    async def find_all(self) -> List[Store]:
        pass
