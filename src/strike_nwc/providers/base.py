"""Payment provider adapter base interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional


class ProviderError(Exception):
    """Raised when the payment provider rejects or fails a call."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


@dataclass
class PaymentReceipt:
    """Outcome of an executed payment."""

    payment_id: str
    state: str                      # provider vocabulary, e.g. COMPLETED, PENDING
    preimage: Optional[str] = None  # only if the provider exposes it
    raw: dict = field(default_factory=dict)


@dataclass
class CreatedInvoice:
    """Invoice created on the provider side."""

    invoice_id: str
    invoice: str                    # BOLT-11 payment request
    state: str
    created_at: int                 # unix seconds
    expires_at: Optional[int] = None


class PaymentProvider(ABC):
    """Abstract base class for the custodial account backing the wallet.

    Every method raises ProviderError (or an HTTP error) on failure.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name."""
        raise NotImplementedError()

    @abstractmethod
    async def pay_invoice(self, invoice: str) -> PaymentReceipt:
        """Pay a BOLT-11 invoice from the account balance."""
        raise NotImplementedError()

    @abstractmethod
    async def create_invoice(self, amount_msats: int, description: str) -> CreatedInvoice:
        """Create a receive invoice.

        Args:
            amount_msats: Invoice amount in millisatoshis
            description: Invoice description

        Returns:
            CreatedInvoice with the BOLT-11 string and provider id
        """
        raise NotImplementedError()

    @abstractmethod
    async def lookup_invoice_state(self, invoice_id: str) -> str:
        """Get the current state of a provider invoice."""
        raise NotImplementedError()

    @abstractmethod
    async def get_exchange_rates(self, currency: str) -> Any:
        raise NotImplementedError()

    @abstractmethod
    async def get_account_details(self) -> Any:
        raise NotImplementedError()

    @abstractmethod
    async def get_balance(self) -> Any:
        raise NotImplementedError()

    @abstractmethod
    async def get_transactions(self, limit: int = 10, offset: int = 0) -> Any:
        raise NotImplementedError()

    async def close(self) -> None:
        """Release network resources."""
        return None
