"""Strike payment provider.

Docs: https://docs.strike.me/api/
"""

import logging
import time
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

import httpx

from strike_nwc.providers.base import (
    CreatedInvoice,
    PaymentProvider,
    PaymentReceipt,
    ProviderError,
)

logger = logging.getLogger(__name__)

MSATS_PER_SAT = Decimal("1000")
SATS_PER_BTC = Decimal("100000000")
BTC_QUANTUM = Decimal("0.00000001")

FAILED_PAYMENT_STATES = {"FAILED"}


def msats_to_btc(amount_msats: int) -> str:
    """Convert millisatoshis to a BTC amount string with 8 decimals."""
    btc = Decimal(amount_msats) / MSATS_PER_SAT / SATS_PER_BTC
    return format(btc.quantize(BTC_QUANTUM, rounding=ROUND_HALF_UP), "f")


def to_unix(timestamp: Optional[str]) -> Optional[int]:
    """Convert a Strike ISO-8601 timestamp to unix seconds."""
    if not timestamp:
        return None
    return int(datetime.fromisoformat(timestamp.replace("Z", "+00:00")).timestamp())


class StrikeProvider(PaymentProvider):
    """Custodial Lightning account on Strike.

    Payments go through a payment quote that is executed right away;
    invoices are created in BTC and then quoted to obtain the BOLT-11
    string.
    """

    DEFAULT_URL = "https://api.strike.me/v1"

    def __init__(
        self,
        api_key: str,
        base_url: Optional[str] = None,
        source_currency: str = "USD",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize Strike provider.

        Args:
            api_key: Strike API key
            base_url: Optional base URL override
            source_currency: Currency balance payments are funded from
            timeout: HTTP timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.api_key = api_key
        self.base_url = (base_url or self.DEFAULT_URL).rstrip("/")
        self.source_currency = source_currency
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def name(self) -> str:
        return "strike"

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
                headers={
                    "Accept": "application/json",
                    "Authorization": f"Bearer {self.api_key}",
                },
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        client = await self._get_client()
        try:
            response = await client.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(
                f"Strike {method} {path} failed with {e.response.status_code}: "
                f"{e.response.text[:200]}"
            )
            raise ProviderError(
                f"Strike {method} {path} returned {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"Strike {method} {path} request error: {e}")
            raise ProviderError(f"Strike {method} {path} request failed: {e}") from e

        if not response.content:
            return {}
        return response.json()

    # ======================
    # Payments
    # ======================

    async def _create_payment_quote(self, invoice: str) -> str:
        data = await self._request(
            "POST",
            "/payment-quotes/lightning",
            json={"lnInvoice": invoice, "sourceCurrency": self.source_currency},
        )
        quote_id = data.get("paymentQuoteId")
        if not quote_id:
            raise ProviderError("Strike payment quote response has no paymentQuoteId")
        return quote_id

    async def _execute_payment_quote(self, quote_id: str) -> dict:
        return await self._request("PATCH", f"/payment-quotes/{quote_id}/execute")

    async def pay_invoice(self, invoice: str) -> PaymentReceipt:
        quote_id = await self._create_payment_quote(invoice)
        data = await self._execute_payment_quote(quote_id)

        state = str(data.get("state", "")).upper()
        if state in FAILED_PAYMENT_STATES:
            raise ProviderError(f"Strike payment {data.get('paymentId')} failed")

        lightning = data.get("lightning") or {}
        return PaymentReceipt(
            payment_id=data.get("paymentId", quote_id),
            state=state or "UNKNOWN",
            preimage=lightning.get("preImage") or data.get("preimage"),
            raw=data,
        )

    # ======================
    # Invoices
    # ======================

    async def create_invoice(self, amount_msats: int, description: str) -> CreatedInvoice:
        data = await self._request(
            "POST",
            "/invoices",
            json={
                "description": description,
                "amount": {"amount": msats_to_btc(amount_msats), "currency": "BTC"},
            },
        )
        invoice_id = data["invoiceId"]

        quote = await self._request("POST", f"/invoices/{invoice_id}/quote")

        return CreatedInvoice(
            invoice_id=invoice_id,
            invoice=quote["lnInvoice"],
            state=data.get("state", "UNPAID"),
            created_at=to_unix(data.get("created")) or int(time.time()),
            expires_at=to_unix(quote.get("expiration")),
        )

    async def lookup_invoice_state(self, invoice_id: str) -> str:
        data = await self._request("GET", f"/invoices/{invoice_id}")
        return data["state"]

    # ======================
    # Account
    # ======================

    async def get_exchange_rates(self, currency: str) -> Any:
        return await self._request("GET", "/rates/ticker", params={"currency": currency})

    async def get_account_details(self) -> Any:
        return await self._request("GET", "/accounts/handle/me")

    async def get_balance(self) -> Any:
        return await self._request("GET", "/balances/me")

    async def get_transactions(self, limit: int = 10, offset: int = 0) -> Any:
        return await self._request(
            "GET", "/transactions", params={"limit": limit, "offset": offset}
        )
