"""Nostr Wallet Connect request pipeline."""

from strike_nwc.nwc.actions import WalletActions
from strike_nwc.nwc.authenticator import RequestAuthenticator
from strike_nwc.nwc.dispatcher import MethodDispatcher
from strike_nwc.nwc.models import ActionOutcome, IncomingRequest, NwcMethod
from strike_nwc.nwc.responses import ResponseBuilder
from strike_nwc.nwc.service import NwcService

__all__ = [
    "ActionOutcome",
    "IncomingRequest",
    "MethodDispatcher",
    "NwcMethod",
    "NwcService",
    "RequestAuthenticator",
    "ResponseBuilder",
    "WalletActions",
]
