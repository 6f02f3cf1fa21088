"""Dry-run provider for development (no real money moves)."""

import hashlib
import itertools
import time
from typing import Any

from strike_nwc.providers.base import CreatedInvoice, PaymentProvider, PaymentReceipt


class DryRunProvider(PaymentProvider):
    """Simulated provider that returns deterministic fake data.

    Payments always succeed and created invoices report UNPAID until
    mark_paid() is called.
    """

    def __init__(self):
        self._counter = itertools.count(1)
        self._invoice_states: dict[str, str] = {}
        self.payments: list[str] = []

    @property
    def name(self) -> str:
        return "dryrun"

    def _next_id(self, prefix: str) -> str:
        return f"sim-{prefix}-{next(self._counter):06d}"

    async def pay_invoice(self, invoice: str) -> PaymentReceipt:
        self.payments.append(invoice)
        # Fake preimage derived from the invoice for reproducible output
        preimage = hashlib.sha256(invoice.encode()).hexdigest()
        return PaymentReceipt(
            payment_id=self._next_id("payment"),
            state="COMPLETED",
            preimage=preimage,
        )

    async def create_invoice(self, amount_msats: int, description: str) -> CreatedInvoice:
        invoice_id = self._next_id("invoice")
        self._invoice_states[invoice_id] = "UNPAID"
        now = int(time.time())
        return CreatedInvoice(
            invoice_id=invoice_id,
            invoice=f"lnsim{amount_msats}n1{invoice_id}",
            state="UNPAID",
            created_at=now,
            expires_at=now + 3600,
        )

    def mark_paid(self, invoice_id: str) -> None:
        self._invoice_states[invoice_id] = "PAID"

    async def lookup_invoice_state(self, invoice_id: str) -> str:
        return self._invoice_states.get(invoice_id, "UNPAID")

    async def get_exchange_rates(self, currency: str) -> Any:
        return [
            {"amount": "65000.00", "sourceCurrency": "BTC", "targetCurrency": currency.upper()},
        ]

    async def get_account_details(self) -> Any:
        return {"handle": "dryrun", "canReceive": True, "currencies": []}

    async def get_balance(self) -> Any:
        return [{"currency": "BTC", "current": "0.00100000", "available": "0.00100000"}]

    async def get_transactions(self, limit: int = 10, offset: int = 0) -> Any:
        return {"items": [], "count": 0, "limit": limit, "offset": offset}
