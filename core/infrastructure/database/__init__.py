"""Database layer - models, mappers, repositories and unit of work."""

from .config import DatabaseSettings, create_session_factory, get_session_factory, init_database
from .unit_of_work import UnitOfWork, create_uow

__all__ = [
    "DatabaseSettings",
    "UnitOfWork",
    "create_session_factory",
    "create_uow",
    "get_session_factory",
    "init_database",
]
