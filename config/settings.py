"""
Configuration Settings for the Travel Blog

This module centralizes all configuration settings for the Travel Blog service
layer, including environment variables, backend identifiers, and application
constants.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Determine the application root directory
APP_ROOT = Path(__file__).resolve().parent.parent

# Load environment variables from .env file
load_dotenv(dotenv_path=os.path.join(APP_ROOT, '.env'))

# =============================================================================
# Backend (Appwrite) Settings
# =============================================================================

APPWRITE_ENDPOINT = os.getenv("APPWRITE_URL", "")
APPWRITE_PROJECT_ID = os.getenv("APPWRITE_PROJECT_ID", "")
APPWRITE_API_KEY = os.getenv("APPWRITE_API_KEY", "")
APPWRITE_DATABASE_ID = os.getenv("APPWRITE_DATABASE_ID", "")
APPWRITE_COLLECTION_ID = os.getenv("APPWRITE_COLLECTION_ID", "")
APPWRITE_BUCKET_ID = os.getenv("APPWRITE_BUCKET_ID", "")
APPWRITE_USERS_COLLECTION_ID = os.getenv("APPWRITE_USERS_COLLECTION_ID", "users")
APPWRITE_STATS_COLLECTION_ID = os.getenv("APPWRITE_STATS_COLLECTION_ID", "stats")

# Well-known document holding the registration counter
STATS_DOCUMENT_ID = "user_stats"

# API Keys and Authentication
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "")

# =============================================================================
# Post Settings
# =============================================================================

# Content longer than this is offloaded to an overflow file
CONTENT_PREVIEW_THRESHOLD = 400
CONTENT_PREVIEW_LENGTH = 397         # Chars kept inline before "..."
CONTENT_FILE_MIME_TYPE = "text/html"

SLUG_PATTERN = r"^[a-zA-Z0-9][a-zA-Z0-9._-]{0,35}$"
MAX_SLUG_LENGTH = 36

POST_STATUSES = ["active", "inactive"]
DEFAULT_POST_STATUS = "active"
POST_CATEGORIES = ["Destination", "Culinary", "Lifestyle", "Tips & Hacks"]
DEFAULT_POST_CATEGORY = "Destination"

WORDS_PER_MINUTE = 200               # Reading speed for read-time estimates
RECENT_POSTS_LIMIT = 6               # Default size of "latest posts" listings

# Overflow content hydration
CONTENT_FETCH_TIMEOUT = 10           # Seconds timeout for the public view URL
CONTENT_FETCH_ATTEMPTS = 2           # Attempts on the public view URL
CONTENT_FETCH_RETRY_DELAY = 1        # Seconds before the first retry

# =============================================================================
# Auth Settings
# =============================================================================

ANONYMOUS_USER_NAME = "Anonymous User"
DEMO_TOTAL_USERS = 2438              # Display-only fallback for the user count

# =============================================================================
# AI Service Settings
# =============================================================================

DEFAULT_AI_MODELS = [
    'gemini-2.0-flash-lite',
    'gemini-1.5-flash',
    'gemini-1.5-pro',
    'gemini-pro'
]
AI_MAX_WORDS = 600                   # Hard cap on generated post length
AI_MAX_GENERATION_ATTEMPTS = 3       # Regenerations before giving up on the cap
AI_TEMPERATURE = 0.7
AI_TOP_K = 40
AI_TOP_P = 0.95
AI_MAX_OUTPUT_TOKENS = 2048


def validate_settings(require_ai: bool = False):
    """Validate settings, see config.validators.validate_settings."""
    from config.validators import validate_settings as _validate
    return _validate(require_ai=require_ai)


def get_config_summary() -> dict:
    """Settings summary without secrets, see config.validators.get_config_summary."""
    from config.validators import get_config_summary as _summary
    return _summary()
