"""
FastAPI Dependencies.

Provides dependency injection for the coordinator and diagnostics.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

# Load environment variables ONCE before any settings objects are created
_PROJECT_ROOT = Path(__file__).resolve().parents[1]
load_dotenv(dotenv_path=_PROJECT_ROOT / ".env")

from core.application.services.diagnostics_service import DiagnosticsService
from core.infrastructure.database.config import get_session_factory as _database_session_factory
from orchestration import OrchestrationCoordinator, create_default_coordinator

logger = logging.getLogger(__name__)


# =============================================================================
# SINGLETON INSTANCES
# =============================================================================

_session_factory: Optional[async_sessionmaker[AsyncSession]] = None
_coordinator: Optional[OrchestrationCoordinator] = None
_diagnostics_service: Optional[DiagnosticsService] = None


# =============================================================================
# DEPENDENCIES
# =============================================================================

def get_session_factory() -> async_sessionmaker[AsyncSession]:
    global _session_factory
    if _session_factory is None:
        _session_factory = _database_session_factory()
    return _session_factory


def get_coordinator() -> OrchestrationCoordinator:
    global _coordinator
    if _coordinator is None:
        _coordinator = create_default_coordinator(get_session_factory())
        logger.info("Created OrchestrationCoordinator instance")
    return _coordinator


def get_diagnostics_service() -> DiagnosticsService:
    global _diagnostics_service
    if _diagnostics_service is None:
        _diagnostics_service = DiagnosticsService(session_factory=get_session_factory())
    return _diagnostics_service


def current_coordinator() -> Optional[OrchestrationCoordinator]:
    """The coordinator if one was created, without creating it."""
    return _coordinator


# =============================================================================
# RESET (for testing)
# =============================================================================

def reset_dependencies():
    global _session_factory, _coordinator, _diagnostics_service

    _session_factory = None
    _coordinator = None
    _diagnostics_service = None

    logger.info("Dependencies reset")
