"""
Core Application - Infrastructure & Base Classes

Generic, reusable base classes shared by the domain apps (authentication,
listings, chat). No domain-specific logic lives here.

Models (import from core.models):
    - BaseModel: Abstract model with timestamps (created_at, updated_at)

Services (import from core.services):
    - BaseService: Base class for service layer
    - ServiceResult: Standard result wrapper for success/failure handling

Exceptions (import from core.exceptions):
    - BaseApplicationError: Base exception with error codes
    - ValidationError, NotFoundError, PermissionDeniedError: raised by views
      for failed service results
    - ServiceUnavailableError: Retryable store/transport outage
    - api_exception_handler: DRF exception handler

Note:
    Models are NOT imported here to avoid AppRegistryNotReady errors.
    Import them directly from their modules.
"""

from .services import BaseService, ServiceResult

__all__ = [
    "BaseService",
    "ServiceResult",
]
