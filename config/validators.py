"""
Configuration Validation for the Travel Blog

This module contains configuration validation logic.
Extracted from settings.py for better separation of concerns.
"""

import re

from utils.exceptions import ConfigurationError
from utils.logger import get_logger

logger = get_logger(__name__)


def validate_settings(require_ai: bool = False):
    """
    Validate that all required settings are properly configured.

    Args:
        require_ai: Also require the Gemini API key.

    Raises:
        ConfigurationError: If required settings are missing or invalid.
    """
    # Import settings here to avoid circular imports
    from config import settings

    errors = []

    # Required environment variables
    required_vars = [
        ("APPWRITE_URL", settings.APPWRITE_ENDPOINT),
        ("APPWRITE_PROJECT_ID", settings.APPWRITE_PROJECT_ID),
        ("APPWRITE_DATABASE_ID", settings.APPWRITE_DATABASE_ID),
        ("APPWRITE_COLLECTION_ID", settings.APPWRITE_COLLECTION_ID),
        ("APPWRITE_BUCKET_ID", settings.APPWRITE_BUCKET_ID),
    ]
    if require_ai:
        required_vars.append(("GEMINI_API_KEY", settings.GEMINI_API_KEY))

    for var_name, var_value in required_vars:
        if not var_value:
            errors.append(f"Missing required environment variable: {var_name}")

    if settings.APPWRITE_ENDPOINT and not settings.APPWRITE_ENDPOINT.startswith(("http://", "https://")):
        errors.append(f"APPWRITE_URL must be an http(s) URL, got {settings.APPWRITE_ENDPOINT}")

    if not settings.APPWRITE_API_KEY:
        logger.warning("APPWRITE_API_KEY is not set. Account rollback and permission "
                       "repair need a server API key.")

    # Gemini keys are long; short values are usually a placeholder
    if settings.GEMINI_API_KEY and len(settings.GEMINI_API_KEY) < 10:
        errors.append("GEMINI_API_KEY looks invalid (shorter than 10 characters)")

    # The preview plus its ellipsis must fit under the threshold
    if settings.CONTENT_PREVIEW_LENGTH + 3 > settings.CONTENT_PREVIEW_THRESHOLD:
        errors.append(f"CONTENT_PREVIEW_LENGTH ({settings.CONTENT_PREVIEW_LENGTH}) + 3 must not "
                      f"exceed CONTENT_PREVIEW_THRESHOLD ({settings.CONTENT_PREVIEW_THRESHOLD})")

    try:
        re.compile(settings.SLUG_PATTERN)
    except re.error as e:
        errors.append(f"SLUG_PATTERN is not a valid regular expression: {e}")

    if settings.DEFAULT_POST_CATEGORY not in settings.POST_CATEGORIES:
        errors.append(f"DEFAULT_POST_CATEGORY '{settings.DEFAULT_POST_CATEGORY}' is not in POST_CATEGORIES")

    # Validate numeric settings are within reasonable bounds
    numeric_validations = [
        ("WORDS_PER_MINUTE", settings.WORDS_PER_MINUTE, 1, 2000),
        ("AI_MAX_WORDS", settings.AI_MAX_WORDS, 50, 5000),
        ("AI_MAX_GENERATION_ATTEMPTS", settings.AI_MAX_GENERATION_ATTEMPTS, 1, 10),
        ("CONTENT_FETCH_ATTEMPTS", settings.CONTENT_FETCH_ATTEMPTS, 1, 10),
        ("AI_TEMPERATURE", settings.AI_TEMPERATURE, 0.0, 2.0),
    ]

    for name, value, min_val, max_val in numeric_validations:
        if value < min_val or value > max_val:
            errors.append(f"{name} must be between {min_val} and {max_val}, got {value}")

    if settings.CONTENT_FETCH_TIMEOUT <= 0:
        errors.append(f"CONTENT_FETCH_TIMEOUT must be positive, got {settings.CONTENT_FETCH_TIMEOUT}")

    # Raise all errors at once
    if errors:
        error_msg = "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        raise ConfigurationError(error_msg)

    return True


def get_config_summary() -> dict:
    """
    Returns a summary of current configuration (without sensitive values).
    Useful for logging startup state.
    """
    # Import settings here to avoid circular imports
    from config import settings

    endpoint = settings.APPWRITE_ENDPOINT
    return {
        "backend": {
            "endpoint": endpoint[:30] + "..." if endpoint and len(endpoint) > 30 else endpoint,
            "project": settings.APPWRITE_PROJECT_ID,
            "database": settings.APPWRITE_DATABASE_ID,
            "posts_collection": settings.APPWRITE_COLLECTION_ID,
            "users_collection": settings.APPWRITE_USERS_COLLECTION_ID,
            "stats_collection": settings.APPWRITE_STATS_COLLECTION_ID,
            "bucket": settings.APPWRITE_BUCKET_ID,
            "api_key_configured": bool(settings.APPWRITE_API_KEY),
        },
        "content_settings": {
            "preview_threshold": settings.CONTENT_PREVIEW_THRESHOLD,
            "categories": list(settings.POST_CATEGORIES),
            "words_per_minute": settings.WORDS_PER_MINUTE,
        },
        "ai_settings": {
            "configured": bool(settings.GEMINI_API_KEY),
            "models": list(settings.DEFAULT_AI_MODELS),
            "max_words": settings.AI_MAX_WORDS,
        }
    }
