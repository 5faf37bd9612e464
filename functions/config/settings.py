"""Home assessment configuration settings.

Loads configuration from environment variables with sensible defaults.
The AI gateway credential is read through the config.secrets module.
"""

import os
from typing import Optional
from dataclasses import dataclass, field
from dotenv import load_dotenv

from config.errors import ConfigurationError

# Load .env file for local development (model overrides, log level, etc.)
load_dotenv()


@dataclass
class Settings:
    """Application settings loaded from environment variables.

    Note: the OPENAI_API_KEY secret is accessed via the config.secrets module.
    The openai_api_key property delegates to it.
    """

    # LLM Configuration (non-secrets)
    llm_model: str = field(default_factory=lambda: os.getenv("LLM_MODEL", "gpt-4o"))
    llm_temperature: float = field(default_factory=lambda: float(os.getenv("LLM_TEMPERATURE", "0.2")))
    llm_top_p: float = field(default_factory=lambda: float(os.getenv("LLM_TOP_P", "0.8")))
    llm_max_tokens: int = field(default_factory=lambda: int(os.getenv("LLM_MAX_TOKENS", "8192")))

    # Image fetching
    image_fetch_timeout_seconds: float = field(
        default_factory=lambda: float(os.getenv("IMAGE_FETCH_TIMEOUT_SECONDS", "30"))
    )

    # Program defaults
    default_budget_cap: float = field(default_factory=lambda: float(os.getenv("DEFAULT_BUDGET_CAP", "5000")))
    default_area_median_income: float = field(
        default_factory=lambda: float(os.getenv("DEFAULT_AREA_MEDIAN_INCOME", "80000"))
    )

    # Report defaults
    report_organization_name: str = field(
        default_factory=lambda: os.getenv("REPORT_ORGANIZATION_NAME", "HOMEase AI")
    )

    # Logging
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))

    # Internal: cached secret value (use openai_api_key property instead)
    _openai_api_key: Optional[str] = field(default=None, repr=False)

    @property
    def openai_api_key(self) -> Optional[str]:
        """Get the AI gateway key from the process environment."""
        if self._openai_api_key is None:
            from config.secrets import get_openai_api_key
            self._openai_api_key = get_openai_api_key()
        return self._openai_api_key

    def validate(self) -> None:
        """Validate required settings are present.

        Raises:
            ConfigurationError: If the AI gateway credential is missing.
        """
        if not self.openai_api_key:
            raise ConfigurationError(
                "AI service not configured. Please set OPENAI_API_KEY environment variable.",
                setting="OPENAI_API_KEY",
            )


# Singleton settings instance
settings = Settings()
