"""Tests for the wallet method handlers."""

from unittest.mock import patch

import pytest

from strike_nwc.errors import ErrorCode, NwcError
from strike_nwc.lightning import InvoiceDecodeError
from strike_nwc.nwc.actions import WalletActions, parse_params
from strike_nwc.nwc.models import GetTransactionsParams
from strike_nwc.providers.base import CreatedInvoice, PaymentReceipt, ProviderError
from strike_nwc.quota import QuotaGuard

AMOUNT_PATCH = "strike_nwc.nwc.actions.invoice_amount_sats"


class TestParseParams:
    """Tests for params validation."""

    def test_defaults_apply(self):
        params = parse_params(GetTransactionsParams, {})

        assert params.limit == 10
        assert params.offset == 0

    def test_null_counts_as_absent(self):
        params = parse_params(GetTransactionsParams, {"limit": None, "offset": 3})

        assert params.limit == 10
        assert params.offset == 3

    def test_wrong_type_is_invalid(self):
        with pytest.raises(NwcError) as exc_info:
            parse_params(GetTransactionsParams, {"limit": "5"})

        assert exc_info.value.code == ErrorCode.INVALID_PARAMS


class TestPayInvoice:
    """Tests for pay_invoice and the spend quota."""

    @pytest.mark.asyncio
    async def test_pays_and_commits(self, provider, quota, cache):
        actions = WalletActions(provider, quota, cache)

        with patch(AMOUNT_PATCH, return_value=400):
            result = await actions.pay_invoice({"invoice": "lnbc4u1"})

        assert quota.total_sent == 400
        assert provider.payments == ["lnbc4u1"]
        assert result["state"] == "COMPLETED"
        assert len(result["preimage"]) == 64
        assert result["payment_id"].startswith("sim-payment-")

    @pytest.mark.asyncio
    async def test_quota_exceeded_never_calls_provider(self, mock_provider, cache):
        """Test that an over-quota payment is refused before the provider."""
        quota = QuotaGuard(ceiling=1000, total_sent=900)
        actions = WalletActions(mock_provider, quota, cache)

        with patch(AMOUNT_PATCH, return_value=101):
            with pytest.raises(NwcError) as exc_info:
                await actions.pay_invoice({"invoice": "lnbc1"})

        assert exc_info.value.code == ErrorCode.QUOTA_EXCEEDED
        mock_provider.pay_invoice.assert_not_called()
        assert quota.total_sent == 900

    @pytest.mark.asyncio
    async def test_remaining_amount_exactly_fits(self, mock_provider, cache):
        quota = QuotaGuard(ceiling=1000, total_sent=900)
        mock_provider.pay_invoice.return_value = PaymentReceipt(
            payment_id="p-1", state="COMPLETED", preimage=None
        )
        actions = WalletActions(mock_provider, quota, cache)

        with patch(AMOUNT_PATCH, return_value=100):
            result = await actions.pay_invoice({"invoice": "lnbc1"})

        assert quota.total_sent == 1000
        assert result == {"preimage": "", "payment_id": "p-1", "state": "COMPLETED"}

    @pytest.mark.asyncio
    async def test_provider_failure_is_payment_failed(self, mock_provider, quota, cache):
        """Test that a refused payment is reported and not counted."""
        mock_provider.pay_invoice.side_effect = ProviderError("declined", status_code=422)
        actions = WalletActions(mock_provider, quota, cache)

        with patch(AMOUNT_PATCH, return_value=10):
            with pytest.raises(NwcError) as exc_info:
                await actions.pay_invoice({"invoice": "lnbc1"})

        assert exc_info.value.code == ErrorCode.PAYMENT_FAILED
        assert quota.total_sent == 0

    @pytest.mark.asyncio
    async def test_undecodable_invoice_is_invalid(self, mock_provider, quota, cache):
        actions = WalletActions(mock_provider, quota, cache)

        with patch(AMOUNT_PATCH, side_effect=InvoiceDecodeError("bad")):
            with pytest.raises(NwcError) as exc_info:
                await actions.pay_invoice({"invoice": "garbage"})

        assert exc_info.value.code == ErrorCode.INVALID_PARAMS
        mock_provider.pay_invoice.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_invoice_is_invalid(self, actions):
        with pytest.raises(NwcError) as exc_info:
            await actions.pay_invoice({})

        assert exc_info.value.code == ErrorCode.INVALID_PARAMS

    @pytest.mark.asyncio
    async def test_sequential_payments_sum_then_refuse(self, provider, quota, cache):
        """Test that the total is the sum of paid amounts and caps the next payment."""
        actions = WalletActions(provider, quota, cache)
        amounts = [100, 250, 1, 349]

        for i, amount in enumerate(amounts):
            with patch(AMOUNT_PATCH, return_value=amount):
                await actions.pay_invoice({"invoice": f"lnbc{i}"})

        assert quota.total_sent == sum(amounts)

        over = quota.ceiling - quota.total_sent + 1
        with patch(AMOUNT_PATCH, return_value=over):
            with pytest.raises(NwcError) as exc_info:
                await actions.pay_invoice({"invoice": "lnbc-over"})

        assert exc_info.value.code == ErrorCode.QUOTA_EXCEEDED
        assert len(provider.payments) == len(amounts)
        assert quota.total_sent == sum(amounts)

    @pytest.mark.asyncio
    async def test_unwritable_quota_state_still_reports_payment(self, provider, cache, tmp_path):
        """Test that a paid invoice is reported as paid when the state file cannot be written."""
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("")
        quota = QuotaGuard(ceiling=1000, state_path=blocker / "quota.json")
        actions = WalletActions(provider, quota, cache)

        with patch(AMOUNT_PATCH, return_value=10):
            result = await actions.pay_invoice({"invoice": "lnbc1"})

        assert result["state"] == "COMPLETED"
        assert provider.payments == ["lnbc1"]
        assert quota.total_sent == 10


class TestInvoices:
    """Tests for make_invoice and lookup_invoice."""

    @pytest.mark.asyncio
    async def test_make_then_lookup(self, provider, actions, cache):
        """Test the make, pay elsewhere, lookup flow."""
        made = await actions.make_invoice({"amount": 21000, "description": "coffee"})

        assert made["type"] == "incoming"
        assert made["amount"] == 21000
        assert made["description"] == "coffee"
        assert made["metadata"]["state"] == "UNPAID"
        assert made["invoice"] in cache

        provider.mark_paid(made["metadata"]["invoice_id"])
        looked_up = await actions.lookup_invoice({"invoice": made["invoice"]})

        assert looked_up["metadata"]["state"] == "PAID"
        assert looked_up["invoice"] == made["invoice"]
        assert looked_up["created_at"] == made["created_at"]

    @pytest.mark.asyncio
    async def test_lookup_is_idempotent(self, actions):
        made = await actions.make_invoice({"amount": 1000, "description": ""})

        first = await actions.lookup_invoice({"invoice": made["invoice"]})
        second = await actions.lookup_invoice({"invoice": made["invoice"]})

        assert first == second

    @pytest.mark.asyncio
    async def test_lookup_unknown_is_not_found(self, mock_provider, quota, cache):
        actions = WalletActions(mock_provider, quota, cache)

        with pytest.raises(NwcError) as exc_info:
            await actions.lookup_invoice({"invoice": "unknown-string"})

        assert exc_info.value.code == ErrorCode.NOT_FOUND
        mock_provider.lookup_invoice_state.assert_not_called()

    @pytest.mark.asyncio
    async def test_make_invoice_requires_positive_amount(self, actions):
        for params in ({"amount": 0, "description": "x"}, {"description": "x"}, {"amount": 5}):
            with pytest.raises(NwcError) as exc_info:
                await actions.make_invoice(params)
            assert exc_info.value.code == ErrorCode.INVALID_PARAMS

    @pytest.mark.asyncio
    async def test_make_invoice_provider_failure_is_internal(self, mock_provider, quota, cache):
        mock_provider.create_invoice.side_effect = ProviderError("boom", status_code=500)
        actions = WalletActions(mock_provider, quota, cache)

        with pytest.raises(NwcError) as exc_info:
            await actions.make_invoice({"amount": 1000, "description": "x"})

        assert exc_info.value.code == ErrorCode.INTERNAL
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_make_invoice_passes_msats(self, mock_provider, quota, cache):
        mock_provider.create_invoice.return_value = CreatedInvoice(
            invoice_id="inv-9", invoice="lnbc9", state="UNPAID", created_at=1, expires_at=2
        )
        actions = WalletActions(mock_provider, quota, cache)

        await actions.make_invoice({"amount": 1500, "description": "tip"})

        mock_provider.create_invoice.assert_awaited_once_with(1500, "tip")


class TestAccountMethods:
    """Tests for the read-only account methods."""

    @pytest.mark.asyncio
    async def test_exchange_rates_default_currency(self, mock_provider, quota, cache):
        mock_provider.get_exchange_rates.return_value = [{"amount": "1"}]
        actions = WalletActions(mock_provider, quota, cache, source_currency="EUR")

        result = await actions.get_exchange_rates({})

        assert result == [{"amount": "1"}]
        mock_provider.get_exchange_rates.assert_awaited_once_with("EUR")

    @pytest.mark.asyncio
    async def test_exchange_rates_requested_currency(self, mock_provider, quota, cache):
        actions = WalletActions(mock_provider, quota, cache)

        await actions.get_exchange_rates({"currency": "GBP"})

        mock_provider.get_exchange_rates.assert_awaited_once_with("GBP")

    @pytest.mark.asyncio
    async def test_balance_and_account(self, actions):
        assert (await actions.get_account_details({}))["handle"] == "dryrun"
        assert (await actions.get_balance({}))[0]["currency"] == "BTC"

    @pytest.mark.asyncio
    async def test_provider_failure_is_internal(self, mock_provider, quota, cache):
        mock_provider.get_balance.side_effect = ProviderError("down")
        actions = WalletActions(mock_provider, quota, cache)

        with pytest.raises(NwcError) as exc_info:
            await actions.get_balance({})

        assert exc_info.value.code == ErrorCode.INTERNAL

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "params", [{"limit": 0}, {"limit": 101}, {"offset": -1}, {"limit": True}, {"limit": 2.5}]
    )
    async def test_transactions_out_of_range(self, mock_provider, quota, cache, params):
        """Test that bad paging is refused before the provider is called."""
        actions = WalletActions(mock_provider, quota, cache)

        with pytest.raises(NwcError) as exc_info:
            await actions.get_transactions(params)

        assert exc_info.value.code == ErrorCode.INVALID_PARAMS
        mock_provider.get_transactions.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("limit", [1, 100])
    async def test_transactions_limit_bounds_accepted(self, mock_provider, quota, cache, limit):
        actions = WalletActions(mock_provider, quota, cache)

        await actions.get_transactions({"limit": limit, "offset": 0})

        mock_provider.get_transactions.assert_awaited_once_with(limit, 0)

    @pytest.mark.asyncio
    async def test_transactions_defaults(self, mock_provider, quota, cache):
        actions = WalletActions(mock_provider, quota, cache)

        await actions.get_transactions({})

        mock_provider.get_transactions.assert_awaited_once_with(10, 0)
