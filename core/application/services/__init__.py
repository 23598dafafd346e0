"""Application services."""
from .diagnostics_service import DiagnosticsService

__all__ = ["DiagnosticsService"]
