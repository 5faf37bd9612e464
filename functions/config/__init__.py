"""Home assessment configuration.

This package contains:
- settings: Environment variables and configuration
- secrets: Secret access (AI gateway key)
- errors: Custom exceptions and error codes
"""

from config.settings import settings
from config.errors import AssessmentError
from config.secrets import get_secret, get_openai_api_key

__all__ = [
    "settings",
    "AssessmentError",
    "get_secret",
    "get_openai_api_key",
]
