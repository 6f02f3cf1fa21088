"""Provider factory for creating the payment provider."""

import logging

from strike_nwc.config import get_settings
from strike_nwc.providers.base import PaymentProvider
from strike_nwc.providers.dryrun import DryRunProvider
from strike_nwc.providers.strike import StrikeProvider

logger = logging.getLogger(__name__)

# Singleton instance
_provider_instance: PaymentProvider | None = None


def get_provider() -> PaymentProvider:
    """Get the configured payment provider.

    Provider is selected based on PROVIDER environment variable:
    - strike (default): Strike API, requires STRIKE_API_KEY
    - dryrun: Simulated account for development

    Returns:
        Configured PaymentProvider instance
    """
    global _provider_instance

    if _provider_instance is not None:
        return _provider_instance

    settings = get_settings()
    provider_name = settings.provider.lower()

    if provider_name == "dryrun":
        logger.warning("Using dry-run payment provider: no real payments will be made")
        _provider_instance = DryRunProvider()
    elif provider_name == "strike":
        if not settings.strike_api_key:
            raise ValueError("STRIKE_API_KEY is not set")
        _provider_instance = StrikeProvider(
            api_key=settings.strike_api_key,
            base_url=settings.strike_api_url,
            source_currency=settings.strike_source_currency,
            timeout=settings.strike_timeout,
        )
    else:
        raise ValueError(f"Unknown payment provider: {settings.provider}")

    return _provider_instance


def reset_provider() -> None:
    """Reset provider instance (useful for testing)."""
    global _provider_instance
    _provider_instance = None
