"""Pytest configuration and fixtures."""

import json
import os
from typing import Any, AsyncIterator
from unittest.mock import AsyncMock

import pytest

# Set test environment
os.environ["PROVIDER"] = "dryrun"
os.environ["STRIKE_API_KEY"] = ""
os.environ["TOTAL_MAX_SEND_AMOUNT_IN_SATS"] = "1000"
os.environ["LOG_LEVEL"] = "DEBUG"

from strike_nwc.cache import MemoryInvoiceCache
from strike_nwc.config import get_settings
from strike_nwc.nwc.actions import WalletActions
from strike_nwc.nwc.authenticator import RequestAuthenticator
from strike_nwc.nwc.dispatcher import MethodDispatcher
from strike_nwc.nwc.models import REQUEST_EVENT_KIND
from strike_nwc.nwc.responses import ResponseBuilder
from strike_nwc.nwc.service import NwcService
from strike_nwc.providers.base import PaymentProvider
from strike_nwc.providers.dryrun import DryRunProvider
from strike_nwc.providers.factory import reset_provider
from strike_nwc.quota import QuotaGuard
from strike_nwc.signing.base import EventSigner, EventTemplate, MessageCipher, SigningError
from strike_nwc.transport.base import InboundEvent, Transport

CLIENT_PUBKEY = "a1" * 32
SERVICE_PUBKEY = "b2" * 32
STRANGER_PUBKEY = "c3" * 32
MAX_QUOTA = 1000


class FakeCipher(MessageCipher):
    """Reversible stand-in for NIP-04: prefixes the plaintext."""

    PREFIX = "enc:"

    async def encrypt(self, plaintext: str) -> str:
        return self.PREFIX + plaintext

    async def decrypt(self, ciphertext: str) -> str:
        if not ciphertext.startswith(self.PREFIX):
            raise SigningError("bad ciphertext")
        return ciphertext[len(self.PREFIX):]


class FakeSigner(EventSigner):
    """Returns the template as a dict with the signer pubkey attached."""

    def __init__(self):
        self.signed: list[dict] = []

    @property
    def public_key(self) -> str:
        return SERVICE_PUBKEY

    async def sign(self, template: EventTemplate) -> Any:
        event = {
            "pubkey": self.public_key,
            "kind": template.kind,
            "content": template.content,
            "tags": template.tags,
            "created_at": template.created_at,
        }
        self.signed.append(event)
        return event


class FakeTransport(Transport):
    """Records published events and replays queued inbound events."""

    def __init__(self, inbound: list[InboundEvent] | None = None):
        self.inbound = list(inbound or [])
        self.published: list[Any] = []
        self.queries: list[dict] = []
        self.connected = False
        self.closed = False

    async def connect(self) -> None:
        self.connected = True

    async def subscribe(self, query: dict) -> AsyncIterator[InboundEvent]:
        self.queries.append(query)
        for event in self.inbound:
            yield event

    async def publish(self, event: Any) -> None:
        self.published.append(event)

    async def close(self) -> None:
        self.closed = True


def make_request_event(
    method: Any = "get_balance",
    params: Any = None,
    event_id: str = "evt-1",
    pubkey: str = CLIENT_PUBKEY,
    raw_content: str | None = None,
) -> InboundEvent:
    """Build an inbound request event encrypted with FakeCipher."""
    if raw_content is None:
        payload: dict = {"method": method}
        if params is not None:
            payload["params"] = params
        raw_content = FakeCipher.PREFIX + json.dumps(payload)
    return InboundEvent(
        id=event_id,
        pubkey=pubkey,
        kind=REQUEST_EVENT_KIND,
        content=raw_content,
    )


def decode_response(event: dict) -> dict:
    """Decrypt the content of a response published through FakeSigner."""
    assert event["content"].startswith(FakeCipher.PREFIX)
    return json.loads(event["content"][len(FakeCipher.PREFIX):])


@pytest.fixture(autouse=True)
def reset_singletons():
    """Clear cached settings and provider between tests."""
    get_settings.cache_clear()
    reset_provider()
    yield
    get_settings.cache_clear()
    reset_provider()


@pytest.fixture
def cipher() -> FakeCipher:
    return FakeCipher()


@pytest.fixture
def signer() -> FakeSigner:
    return FakeSigner()


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def provider() -> DryRunProvider:
    return DryRunProvider()


@pytest.fixture
def mock_provider() -> AsyncMock:
    """Provider whose every method is an AsyncMock."""
    return AsyncMock(spec=PaymentProvider)


@pytest.fixture
def quota() -> QuotaGuard:
    return QuotaGuard(ceiling=MAX_QUOTA)


@pytest.fixture
def cache() -> MemoryInvoiceCache:
    return MemoryInvoiceCache()


@pytest.fixture
def actions(provider, quota, cache) -> WalletActions:
    return WalletActions(provider, quota, cache)


@pytest.fixture
def dispatcher(actions) -> MethodDispatcher:
    return MethodDispatcher(actions)


@pytest.fixture
def authenticator(cipher) -> RequestAuthenticator:
    return RequestAuthenticator(cipher, CLIENT_PUBKEY)


@pytest.fixture
def builder(cipher, signer) -> ResponseBuilder:
    return ResponseBuilder(cipher, signer, CLIENT_PUBKEY, MAX_QUOTA)


@pytest.fixture
def service(transport, authenticator, dispatcher, builder) -> NwcService:
    return NwcService(transport, authenticator, dispatcher, builder, CLIENT_PUBKEY)
