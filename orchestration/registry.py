"""Store registry - credentials snapshot for one orchestration run."""

from typing import Dict, Iterable, List

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.domain.entities import Store
from core.domain.exceptions import StoreNotFoundError
from core.infrastructure.database.unit_of_work import create_uow
from core.infrastructure.logging import get_logger


logger = get_logger("orchestration.registry")


class StoreRegistry:
    """
    Stores resolved once at the start of a run.

    Built fresh for every run and never shared between transactions, so a
    rotated admin token is picked up by the next run without a restart.
    """

    def __init__(self, stores: Iterable[Store]) -> None:
        self._stores: Dict[str, Store] = {store.domain: store for store in stores}

    @classmethod
    async def load(
        cls,
        session_factory: async_sessionmaker[AsyncSession],
        domains: Iterable[str],
    ) -> "StoreRegistry":
        """Fetch the stores a plan needs.

        Args:
            session_factory: SQLAlchemy async session factory
            domains: Store domains referenced by the plan

        Returns:
            StoreRegistry snapshot
        """
        domains = list(dict.fromkeys(domains))
        async with create_uow(session_factory) as uow:
            stores = await uow.stores.find_by_domains(domains)

        missing = set(domains) - {store.domain for store in stores}
        if missing:
            logger.warning(f"Unknown stores in plan: {sorted(missing)}")
        return cls(stores)

    def resolve(self, domain: str) -> Store:
        """
        Raises:
            StoreNotFoundError: If the store is not registered
        """
        try:
            return self._stores[domain]
        except KeyError:
            raise StoreNotFoundError(domain) from None

    @property
    def domains(self) -> List[str]:
        return list(self._stores)

    def __contains__(self, domain: object) -> bool:
        return domain in self._stores

    def __len__(self) -> int:
        return len(self._stores)
