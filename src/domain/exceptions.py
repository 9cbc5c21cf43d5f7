"""
domain.exceptions - Custom exception hierarchy for the diet recipe recommender.

All domain-level errors inherit from DomainError so callers can catch
broad or specific exceptions as needed. Adapters map these to transport
status codes (see adapters.rest.app).
"""


class DomainError(Exception):
    """Base exception for all domain-level errors."""


class ValidationError(DomainError):
    """Raised when a required field is missing or has an invalid value."""


class NotFoundError(DomainError):
    """Raised when a user, recipe, condition or favorite does not exist."""


class ConflictError(DomainError):
    """Raised when an insert would duplicate an existing unique record."""


class NoConditionsError(DomainError):
    """Raised when a user has no medical conditions to derive needs from."""


class GenerationError(DomainError):
    """Raised when every generator / chat model attempt has been exhausted."""


class RecommendationFailure(DomainError):
    """Raised when the recommendation pipeline cannot produce a result."""


class RepositoryError(DomainError):
    """Raised when a database operation fails."""


class DuplicateEntryError(RepositoryError):
    """Raised when a unique constraint is violated."""
