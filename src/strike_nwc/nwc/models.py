"""NWC (NIP-47) request, response and outcome types."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, StrictInt, StrictStr

from strike_nwc.errors import ErrorCode, NwcError

# Event kinds, https://github.com/nostr-protocol/nips/blob/master/47.md
INFO_EVENT_KIND = 13194
REQUEST_EVENT_KIND = 23194
RESPONSE_EVENT_KIND = 23195

UNKNOWN_RESULT_TYPE = "unknown"


class NwcMethod(str, Enum):
    """Wallet methods this bridge supports."""
    PAY_INVOICE = "pay_invoice"
    MAKE_INVOICE = "make_invoice"
    LOOKUP_INVOICE = "lookup_invoice"
    GET_EXCHANGE_RATES = "get_exchange_rates"
    GET_ACCOUNT_DETAILS = "get_account_details"
    GET_BALANCE = "get_balance"
    GET_TRANSACTIONS = "get_transactions"

    @classmethod
    def parse(cls, value: Any) -> Optional["NwcMethod"]:
        """Return the matching member, or None for anything unsupported."""
        if not isinstance(value, str):
            return None
        try:
            return cls(value)
        except ValueError:
            return None


@dataclass
class IncomingRequest:
    """Decrypted wallet request.

    Attributes:
        correlation_id: Id of the request event
        sender: Pubkey of the request event (from the envelope, not the payload)
        method: Raw method name, "" when the payload has none
        params: Method parameters, {} when absent
    """
    correlation_id: str
    sender: str
    method: str = ""
    params: dict = field(default_factory=dict)

    @property
    def nwc_method(self) -> Optional[NwcMethod]:
        return NwcMethod.parse(self.method)


@dataclass
class ActionOutcome:
    """Result of running a request: a payload or a classified error."""
    result: Any = None
    error: Optional[NwcError] = None

    @classmethod
    def success(cls, result: Any) -> "ActionOutcome":
        return cls(result=result)

    @classmethod
    def failure(cls, error: NwcError) -> "ActionOutcome":
        return cls(error=error)

    @classmethod
    def from_code(cls, code: ErrorCode, detail: str = "") -> "ActionOutcome":
        return cls(error=NwcError(code, detail))

    @property
    def ok(self) -> bool:
        return self.error is None


class ErrorBody(BaseModel):
    """`error` member of a response."""

    code: ErrorCode
    message: str


class ResponseContent(BaseModel):
    """Decrypted content of a wallet response event."""

    result_type: str = Field(..., description="Method the response answers, or 'unknown'")
    result: Optional[Any] = Field(None, description="Method-specific payload on success")
    error: Optional[ErrorBody] = Field(None, description="Error on failure")

    def to_json(self) -> str:
        if self.error is not None:
            return self.model_dump_json(include={"result_type", "error"})
        return self.model_dump_json(include={"result_type", "result"})


# ======================
# Params
# ======================

class PayInvoiceParams(BaseModel):
    invoice: StrictStr = Field(..., min_length=1, description="BOLT-11 invoice to pay")


class MakeInvoiceParams(BaseModel):
    amount: StrictInt = Field(..., gt=0, description="Amount in millisatoshis")
    description: StrictStr = Field(..., description="Invoice description")


class LookupInvoiceParams(BaseModel):
    invoice: StrictStr = Field(..., min_length=1, description="BOLT-11 invoice made earlier")


class GetExchangeRatesParams(BaseModel):
    currency: Optional[StrictStr] = Field(None, description="Currency to quote, e.g. USD")


class GetTransactionsParams(BaseModel):
    limit: StrictInt = Field(default=10, ge=1, le=100, description="Page size")
    offset: StrictInt = Field(default=0, ge=0, description="Items to skip")
