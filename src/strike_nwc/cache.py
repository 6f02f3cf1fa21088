"""Cache of invoices created through make_invoice.

lookup_invoice only knows about invoices this process created, so the
record returned by make_invoice is kept here keyed by the BOLT-11 string.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from strike_nwc.errors import ErrorCode, NwcError


@dataclass
class InvoiceMetadata:
    """Provider-side data attached to a cached invoice."""
    state: str
    invoice_id: str


@dataclass
class CachedInvoice:
    """Invoice record as returned by make_invoice and lookup_invoice."""
    invoice: str
    description: str
    amount: int                    # msats, as requested by the client
    created_at: int                # unix seconds
    expires_at: Optional[int]      # unix seconds
    metadata: InvoiceMetadata
    type: str = "incoming"

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "invoice": self.invoice,
            "description": self.description,
            "amount": self.amount,
            "created_at": self.created_at,
            "expires_at": self.expires_at,
            "metadata": {
                "state": self.metadata.state,
                "invoice_id": self.metadata.invoice_id,
            },
        }


class InvoiceCache(ABC):
    """Keyed store of created invoices.

    Implementations must raise NwcError(NOT_FOUND) for unknown keys
    instead of returning None, so handlers can pass the error through.
    """

    @abstractmethod
    async def put(self, invoice: str, record: CachedInvoice) -> None:
        """Store a record under its invoice string."""
        raise NotImplementedError()

    @abstractmethod
    async def get(self, invoice: str) -> CachedInvoice:
        """Get the record for an invoice string.

        Raises:
            NwcError: NOT_FOUND if the invoice was never cached
        """
        raise NotImplementedError()

    @abstractmethod
    async def update_state(self, invoice: str, state: str) -> CachedInvoice:
        """Replace the provider state of a cached invoice.

        Raises:
            NwcError: NOT_FOUND if the invoice was never cached
        """
        raise NotImplementedError()


class MemoryInvoiceCache(InvoiceCache):
    """In-memory cache; entries live as long as the process.

    There is no eviction, so memory grows with the number of invoices made.
    """

    def __init__(self):
        self._records: dict[str, CachedInvoice] = {}

    async def put(self, invoice: str, record: CachedInvoice) -> None:
        self._records[invoice] = record

    async def get(self, invoice: str) -> CachedInvoice:
        record = self._records.get(invoice)
        if record is None:
            raise NwcError(ErrorCode.NOT_FOUND, f"invoice not cached: {invoice[:24]}")
        return record

    async def update_state(self, invoice: str, state: str) -> CachedInvoice:
        record = await self.get(invoice)
        record.metadata.state = state
        return record

    def __contains__(self, invoice: object) -> bool:
        return invoice in self._records

    def __len__(self) -> int:
        return len(self._records)
