"""
SQLAlchemy Store Repository Implementation.

Implements StoreRepository interface using SQLAlchemy.
"""
from typing import Iterable, List, Optional
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.domain.entities import Store
from core.domain.repositories import StoreRepository
from core.infrastructure.database.mappers import StoreMapper
from core.infrastructure.database.models import StoreModel


logger = logging.getLogger(__name__)


class SQLAlchemyStoreRepository(StoreRepository):
    """SQLAlchemy implementation of StoreRepository."""

    def __init__(self, session: AsyncSession):
        """
        Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def save(self, store: Store) -> None:
        result = await self.session.execute(
            select(StoreModel).where(StoreModel.domain == store.domain)
        )
        model = result.scalar_one_or_none()

        if model is None:
            model = StoreModel()
            self.session.add(model)
            logger.info(f"Registering store: {store.domain}")

        StoreMapper.update_persistence(store, model)
        await self.session.flush()

    async def find_by_domain(self, domain: str) -> Optional[Store]:
        result = await self.session.execute(
            select(StoreModel).where(StoreModel.domain == domain)
        )
        model = result.scalar_one_or_none()
        return StoreMapper.to_domain(model) if model else None

    async def find_by_domains(self, domains: Iterable[str]) -> List[Store]:
        domains = list(domains)
        if not domains:
            return []

        result = await self.session.execute(
            select(StoreModel).where(StoreModel.domain.in_(domains))
        )
        return [StoreMapper.to_domain(model) for model in result.scalars().all()]

    async def find_all(self) -> List[Store]:
        result = await self.session.execute(
            select(StoreModel).order_by(StoreModel.created_at.desc())
        )
        return [StoreMapper.to_domain(model) for model in result.scalars().all()]
