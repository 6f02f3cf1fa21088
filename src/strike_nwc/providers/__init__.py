"""Payment provider adapters."""

from strike_nwc.providers.base import (
    CreatedInvoice,
    PaymentProvider,
    PaymentReceipt,
    ProviderError,
)
from strike_nwc.providers.factory import get_provider

__all__ = [
    "CreatedInvoice",
    "PaymentProvider",
    "PaymentReceipt",
    "ProviderError",
    "get_provider",
]
