# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .program_service import ProgramService
from .storage_service import StorageService
from .metric_service import MetricService
from .initiative_service import InitiativeService
from .password_service import PasswordService

__all__ = [
    "ProgramService",
    "StorageService",
    "MetricService",
    "InitiativeService",
    "PasswordService",
]
