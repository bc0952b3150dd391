"""Shared exceptions for the analytics engine.

This module defines a consistent exception hierarchy used across all modules
to standardize error handling and provide clear error semantics.

The engine itself degrades to conservative answers instead of raising;
these exceptions surface at the edges (store backends, API, configuration).
"""

from typing import Any


class AnalyticsException(Exception):
    """Base exception for all application errors.

    All domain-specific exceptions should inherit from this class
    to enable consistent error handling at the API layer.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


# ===================
# Resource Errors
# ===================

class ResourceNotFoundError(AnalyticsException):
    """Raised when a requested resource is not found."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            {"resource_type": resource_type, "resource_id": str(resource_id)}
        )


class ProfileNotFoundError(ResourceNotFoundError):
    """Raised when a learner has no profile yet."""

    def __init__(self, user_id: str) -> None:
        super().__init__("LearningProfile", user_id)


# ===================
# Validation Errors
# ===================

class ValidationError(AnalyticsException):
    """Raised when input validation fails."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(
            f"Validation error for '{field}': {message}",
            {"field": field}
        )


# ===================
# Integration Errors
# ===================

class ExternalServiceError(AnalyticsException):
    """Raised when an external service call fails."""

    def __init__(self, service: str, message: str) -> None:
        super().__init__(
            f"External service error ({service}): {message}",
            {"service": service}
        )


class StoreUnavailableError(ExternalServiceError):
    """Raised when the analytics store backend cannot be reached."""

    def __init__(self, backend: str, message: str) -> None:
        super().__init__(f"AnalyticsStore:{backend}", message)


class ConceptRetrievalError(ExternalServiceError):
    """Raised when the related-concept lookup fails."""

    def __init__(self, message: str) -> None:
        super().__init__("ConceptRetrieval", message)


# ===================
# Configuration Errors
# ===================

class ConfigurationError(AnalyticsException):
    """Raised when there's a configuration problem."""
    pass


class InvalidEngineConfigError(ConfigurationError):
    """Raised when an engine setting is outside its valid range."""

    def __init__(self, setting: str, value: Any) -> None:
        super().__init__(
            f"Invalid analytics engine setting '{setting}': {value!r}",
            {"setting": setting, "value": repr(value)}
        )


# ===================
# Feature Flag Errors
# ===================

class FeatureFlagError(AnalyticsException):
    """Raised when a feature flag operation fails."""

    def __init__(self, flag: str, message: str) -> None:
        super().__init__(
            f"Feature flag error ({flag}): {message}",
            {"flag": flag}
        )


class FeatureDisabledError(FeatureFlagError):
    """Raised when attempting to use a disabled feature."""

    def __init__(self, feature: str) -> None:
        super().__init__(
            feature,
            f"Feature '{feature}' is not enabled. Set FF_{feature.upper()}=true to enable."
        )
