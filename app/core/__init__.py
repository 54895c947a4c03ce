"""
Core Application - Infrastructure & Base Classes

Shared infrastructure used by the authentication and billing apps. Nothing in
here knows about wallets, credentials or purchases.

Models (import from core.models):
    - BaseModel: Abstract model with timestamps (created_at, updated_at)

Model Mixins (import from core.model_mixins):
    - UUIDPrimaryKeyMixin: UUID as primary key
    - MetadataMixin: Flexible JSON metadata storage

Services (import from core.services):
    - BaseService: Base class for service layer (logging, atomic blocks)
    - ServiceResult: Standard result wrapper for success/failure handling

Exceptions (import from core.exceptions):
    - BaseApplicationError: Base exception with error codes
    - ValidationError: Input validation failures
    - NotFoundError: Resource not found
    - PermissionDeniedError: Authorization failures
    - ConflictError: State conflicts (duplicates, concurrent modifications)

Views (import from core.views):
    - health_check: Liveness/readiness endpoint
"""
