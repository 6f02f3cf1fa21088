"""BOLT-11 helpers."""

import bolt11

MSATS_PER_SAT = 1000


class InvoiceDecodeError(ValueError):
    """Raised when an invoice cannot be decoded or carries no amount."""
    pass


def invoice_amount_sats(invoice: str) -> int:
    """Get the amount embedded in a BOLT-11 invoice, in whole sats.

    Sub-satoshi amounts are rounded up so the quota never undercounts.

    Raises:
        InvoiceDecodeError: If the invoice is malformed or amountless
    """
    try:
        decoded = bolt11.decode(invoice)
    except Exception as e:
        raise InvoiceDecodeError(f"Could not decode invoice: {e}") from e

    if decoded.amount_msat is None:
        raise InvoiceDecodeError("Invoice has no amount")

    amount_msat = int(decoded.amount_msat)
    return -(-amount_msat // MSATS_PER_SAT)
