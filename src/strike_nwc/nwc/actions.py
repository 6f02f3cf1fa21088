"""Handlers for the supported wallet methods.

Each handler takes the request params and returns the `result` payload,
or raises NwcError with the code the client should see. Provider
failures are logged here and classified before leaving the handler.
"""

import logging
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from strike_nwc.cache import CachedInvoice, InvoiceCache, InvoiceMetadata
from strike_nwc.errors import ErrorCode, NwcError, QuotaExceededError
from strike_nwc.lightning import InvoiceDecodeError, invoice_amount_sats
from strike_nwc.nwc.models import (
    GetExchangeRatesParams,
    GetTransactionsParams,
    LookupInvoiceParams,
    MakeInvoiceParams,
    PayInvoiceParams,
)
from strike_nwc.providers.base import PaymentProvider
from strike_nwc.quota import QuotaGuard

logger = logging.getLogger(__name__)

P = TypeVar("P", bound=BaseModel)


def parse_params(model: type[P], params: dict) -> P:
    """Validate request params against a params model.

    Null values count as absent so defaults apply.

    Raises:
        NwcError: INVALID_PARAMS if validation fails
    """
    present = {key: value for key, value in params.items() if value is not None}
    try:
        return model.model_validate(present)
    except ValidationError as e:
        raise NwcError(ErrorCode.INVALID_PARAMS, str(e.errors(include_url=False))) from e


class WalletActions:
    """Wallet methods backed by a payment provider."""

    def __init__(
        self,
        provider: PaymentProvider,
        quota: QuotaGuard,
        cache: InvoiceCache,
        source_currency: str = "USD",
    ):
        self.provider = provider
        self.quota = quota
        self.cache = cache
        self.source_currency = source_currency

    async def pay_invoice(self, params: dict) -> dict:
        """Pay a BOLT-11 invoice if it fits under the spend quota."""
        request = parse_params(PayInvoiceParams, params)

        try:
            amount_sats = invoice_amount_sats(request.invoice)
        except InvoiceDecodeError as e:
            raise NwcError(ErrorCode.INVALID_PARAMS, str(e)) from e

        try:
            async with self.quota.admit(amount_sats):
                try:
                    receipt = await self.provider.pay_invoice(request.invoice)
                except Exception as e:
                    logger.error(f"Error making payment: {e}")
                    raise NwcError(ErrorCode.PAYMENT_FAILED, str(e)) from e
        except QuotaExceededError as e:
            raise NwcError(ErrorCode.QUOTA_EXCEEDED, str(e)) from e

        logger.info(f"Successfully paid {amount_sats} sats")

        return {
            "preimage": receipt.preimage or "",
            "payment_id": receipt.payment_id,
            "state": receipt.state,
        }

    async def make_invoice(self, params: dict) -> dict:
        """Create an invoice and remember it for lookup_invoice."""
        request = parse_params(MakeInvoiceParams, params)

        try:
            created = await self.provider.create_invoice(request.amount, request.description)
        except Exception as e:
            logger.error(f"Error making invoice: {e}")
            raise NwcError(ErrorCode.INTERNAL, str(e)) from e

        record = CachedInvoice(
            invoice=created.invoice,
            description=request.description,
            amount=request.amount,
            created_at=created.created_at,
            expires_at=created.expires_at,
            metadata=InvoiceMetadata(state=created.state, invoice_id=created.invoice_id),
        )
        await self.cache.put(created.invoice, record)

        return record.to_dict()

    async def lookup_invoice(self, params: dict) -> dict:
        """Refresh and return a cached invoice."""
        request = parse_params(LookupInvoiceParams, params)

        # NOT_FOUND from the cache goes back to the client as is
        record = await self.cache.get(request.invoice)

        try:
            state = await self.provider.lookup_invoice_state(record.metadata.invoice_id)
        except Exception as e:
            logger.error(f"Error looking up invoice: {e}")
            raise NwcError(ErrorCode.INTERNAL, str(e)) from e

        record = await self.cache.update_state(request.invoice, state)
        return record.to_dict()

    async def get_exchange_rates(self, params: dict) -> Any:
        request = parse_params(GetExchangeRatesParams, params)
        currency = request.currency or self.source_currency

        logger.debug(f"Getting exchange rates for {currency}")
        try:
            return await self.provider.get_exchange_rates(currency)
        except Exception as e:
            logger.error(f"Error getting exchange rates: {e}")
            raise NwcError(ErrorCode.INTERNAL, str(e)) from e

    async def get_account_details(self, params: dict) -> Any:
        logger.debug("Getting account details")
        try:
            return await self.provider.get_account_details()
        except Exception as e:
            logger.error(f"Error getting account details: {e}")
            raise NwcError(ErrorCode.INTERNAL, str(e)) from e

    async def get_balance(self, params: dict) -> Any:
        logger.debug("Getting balance")
        try:
            return await self.provider.get_balance()
        except Exception as e:
            logger.error(f"Error getting balance: {e}")
            raise NwcError(ErrorCode.INTERNAL, str(e)) from e

    async def get_transactions(self, params: dict) -> Any:
        """List account transactions.

        limit must be in [1, 100] and offset non-negative; both are
        checked before the provider is called.
        """
        request = parse_params(GetTransactionsParams, params)

        logger.debug(
            f"Getting transactions with limit {request.limit} and offset {request.offset}"
        )
        try:
            return await self.provider.get_transactions(request.limit, request.offset)
        except Exception as e:
            logger.error(f"Error getting transactions: {e}")
            raise NwcError(ErrorCode.INTERNAL, str(e)) from e
