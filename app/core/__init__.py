"""
Core Application - Infrastructure & Base Classes

Generic, reusable building blocks shared by the domain apps. No
domain-specific logic lives here.

Models (import from core.models):
    - BaseModel: Abstract model with timestamps (created_at, updated_at)

Model Mixins (import from core.model_mixins):
    - UUIDPrimaryKeyMixin: UUID as primary key

Services (import from core.services):
    - BaseService: Base class for service layer (logging, transactions)

Exceptions (import from core.exceptions):
    - BaseApplicationError: Base exception with error codes
    - ValidationError, NotFoundError, PermissionDeniedError, PersistenceError

Exception handler (import from core.exception_handlers):
    - api_exception_handler: DRF EXCEPTION_HANDLER for the taxonomy above

Views (import from core.views):
    - health_check: Liveness/readiness probe

Note:
    Models and services are NOT imported here because they depend on
    Django's app registry being ready. Import them from their modules.
"""

# Exceptions (no Django dependencies)
from .exceptions import (
    BaseApplicationError,
    NotFoundError,
    PermissionDeniedError,
    PersistenceError,
    ValidationError,
)

__all__ = [
    "BaseApplicationError",
    "ValidationError",
    "NotFoundError",
    "PermissionDeniedError",
    "PersistenceError",
]
