"""Secret access for the home assessment functions.

The only secret is the AI gateway key. It is always sourced from the process
environment (Cloud Functions secret bindings surface as env vars).

Usage:
    from config.secrets import get_openai_api_key, get_secret

    api_key = get_openai_api_key()
"""

import os
import logging
from functools import lru_cache
from typing import Optional

logger = logging.getLogger(__name__)


def get_secret(secret_id: str) -> Optional[str]:
    """
    Get a secret from the process environment.

    Args:
        secret_id: The name of the secret (e.g., 'OPENAI_API_KEY')

    Returns:
        The secret value, or None if not set or blank
    """
    value = os.environ.get(secret_id)
    if value and value.strip():
        logger.debug(f"Secret {secret_id} loaded from environment")
        return value.strip()

    logger.warning(f"Secret {secret_id} not found in environment variables")
    return None


@lru_cache(maxsize=1)
def get_openai_api_key() -> Optional[str]:
    """Get the AI gateway (OpenAI) API key."""
    return get_secret('OPENAI_API_KEY')


def clear_secret_cache() -> None:
    """Clear cached secrets. Useful for testing or when secrets are rotated."""
    get_openai_api_key.cache_clear()
