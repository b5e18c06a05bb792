from providers.base import BaseProvider
from providers.openrouter_provider import OpenRouterProvider

from config import (
    OPENROUTER_API_KEY, OPENROUTER_MODEL, OPENROUTER_REFERER,
    OPENROUTER_SITE_NAME, AI_TIMEOUT_SECONDS,
)


def get_provider() -> BaseProvider:
    """Build the configured LLM provider."""
    return OpenRouterProvider(
        api_key=OPENROUTER_API_KEY,
        model=OPENROUTER_MODEL,
        referer=OPENROUTER_REFERER,
        site_name=OPENROUTER_SITE_NAME,
        timeout=AI_TIMEOUT_SECONDS,
    )


__all__ = [
    "BaseProvider",
    "OpenRouterProvider",
    "get_provider",
]
