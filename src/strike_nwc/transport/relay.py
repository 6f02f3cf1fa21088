"""Nostr relay transport built on electrum-aionostr."""

import logging
from typing import AsyncIterator, Optional

import electrum_aionostr as aionostr
from electrum_aionostr.event import Event
from electrum_aionostr.key import PrivateKey

from strike_nwc.transport.base import InboundEvent, Transport, TransportError

logger = logging.getLogger(__name__)


class RelayTransport(Transport):
    """Single-relay transport.

    The manager authenticates to the relay (NIP-42) with a throwaway key;
    response events carry their own signature.
    """

    def __init__(self, relay_uri: str, debug: bool = False):
        """Initialize relay transport.

        Args:
            relay_uri: Relay websocket URI (wss://...)
            debug: Let the relay library log at DEBUG level
        """
        self.relay_uri = relay_uri
        self.debug = debug
        self._manager: Optional[aionostr.Manager] = None

    @property
    def connected(self) -> bool:
        return self._manager is not None and bool(self._manager.relays)

    def _create_manager(self) -> aionostr.Manager:
        nostr_logger = logger.getChild("aionostr")
        nostr_logger.setLevel(logging.DEBUG if self.debug else logging.WARNING)
        return aionostr.Manager(
            relays=[self.relay_uri],
            private_key=PrivateKey().hex(),
            log=nostr_logger,
        )

    async def connect(self) -> None:
        if self._manager is None:
            self._manager = self._create_manager()

        await self._manager.connect()

        if not self._manager.relays:
            await self.close()
            raise TransportError(f"Could not connect to {self.relay_uri}")

        logger.info(f"Connected to {self.relay_uri}")

    async def subscribe(self, query: dict) -> AsyncIterator[InboundEvent]:
        if self._manager is None:
            raise TransportError("Transport is not connected")

        async for event in self._manager.get_events(query, single_event=False, only_stored=False):
            yield InboundEvent(
                id=event.id,
                pubkey=event.pubkey,
                kind=event.kind,
                content=event.content,
                created_at=event.created_at,
            )

        logger.info("Relay subscription closed")

    async def publish(self, event: Event) -> None:
        if self._manager is None:
            raise TransportError("Transport is not connected")
        await self._manager.add_event(event, check_response=True)

    async def close(self) -> None:
        if self._manager is not None:
            await self._manager.close()
            self._manager = None
            logger.info("Relay connection closed.")
