"""Routes authenticated requests to their wallet action."""

import logging
from typing import Any, Awaitable, Callable

from strike_nwc.errors import ErrorCode, NwcError
from strike_nwc.nwc.actions import WalletActions
from strike_nwc.nwc.models import ActionOutcome, IncomingRequest, NwcMethod

logger = logging.getLogger(__name__)

Handler = Callable[[dict], Awaitable[Any]]


class MethodDispatcher:
    """Static method table over NwcMethod.

    Only NwcError is turned into a failed outcome here; anything else a
    handler raises is left to the caller, which reports it as INTERNAL.
    """

    def __init__(self, actions: WalletActions):
        self.actions = actions
        self._handlers: dict[NwcMethod, Handler] = {
            NwcMethod.PAY_INVOICE: actions.pay_invoice,
            NwcMethod.MAKE_INVOICE: actions.make_invoice,
            NwcMethod.LOOKUP_INVOICE: actions.lookup_invoice,
            NwcMethod.GET_EXCHANGE_RATES: actions.get_exchange_rates,
            NwcMethod.GET_ACCOUNT_DETAILS: actions.get_account_details,
            NwcMethod.GET_BALANCE: actions.get_balance,
            NwcMethod.GET_TRANSACTIONS: actions.get_transactions,
        }
        missing = set(NwcMethod) - set(self._handlers)
        if missing:
            raise RuntimeError(f"No handler for: {', '.join(sorted(m.value for m in missing))}")

    @property
    def supported_methods(self) -> list[str]:
        return [method.value for method in self._handlers]

    async def dispatch(self, request: IncomingRequest) -> ActionOutcome:
        method = request.nwc_method
        if method is None:
            logger.warning(f"Unsupported NWC method requested: {request.method!r}")
            return ActionOutcome.from_code(ErrorCode.NOT_IMPLEMENTED, request.method)

        try:
            result = await self._handlers[method](request.params)
        except NwcError as e:
            logger.warning(f"{method.value} failed with {e.code.value}: {e.detail}")
            return ActionOutcome.failure(e)

        return ActionOutcome.success(result)
