"""
Custom Exception Classes for the Travel Blog Service Layer

This module defines custom exceptions for better error handling and
categorization of failures across the application. Backend SDK errors are
translated into one of these kinds at the adapter boundary so services never
inspect raw status codes.
"""

from typing import Optional


class TravelBlogError(Exception):
    """Base exception for all Travel Blog application errors."""

    def __init__(self, message: str = "", code: Optional[int] = None):
        super().__init__(message)
        self.code = code


# =============================================================================
# Configuration Errors
# =============================================================================

class ConfigurationError(TravelBlogError):
    """Raised when configuration validation fails or required settings are missing."""
    pass


# =============================================================================
# Backend Errors
# =============================================================================

class ValidationError(TravelBlogError):
    """Raised when input is rejected, locally or by the backend (400)."""
    pass


class AuthenticationError(TravelBlogError):
    """Raised when there is no valid session or credentials are wrong (401)."""
    pass


class NotFoundError(TravelBlogError):
    """Raised when a document or file does not exist (404)."""
    pass


class ConflictError(TravelBlogError):
    """Raised when a document, file or account already exists (409)."""
    pass


class UpstreamUnavailableError(TravelBlogError):
    """Raised for any other backend failure, including transport errors."""
    pass


# =============================================================================
# AI Service Errors
# =============================================================================

class AIServiceError(TravelBlogError):
    """Base exception for AI service errors."""
    pass


class ContentGenerationError(AIServiceError):
    """Raised when the AI model returns nothing usable."""
    pass


class ContentTooLongError(AIServiceError):
    """Raised when generated content keeps exceeding the word cap."""
    pass


_STATUS_KINDS = {
    400: ValidationError,
    401: AuthenticationError,
    404: NotFoundError,
    409: ConflictError,
}


def error_for_status(code: Optional[int], message: str) -> TravelBlogError:
    """
    Build the exception kind matching a backend status code.

    Args:
        code: Numeric status code reported by the backend, if any.
        message: Human readable error message.

    Returns:
        TravelBlogError: An instance of the matching kind, falling back to
        UpstreamUnavailableError for unknown or missing codes.
    """
    kind = _STATUS_KINDS.get(code, UpstreamUnavailableError)
    return kind(message, code=code)
