"""Relay transport base interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, AsyncIterator


@dataclass
class InboundEvent:
    """Event delivered by the relay subscription."""

    id: str
    pubkey: str
    kind: int
    content: str
    created_at: int = 0


class Transport(ABC):
    """Abstract pub/sub transport the wallet service listens on."""

    @abstractmethod
    async def connect(self) -> None:
        """Open the relay connection.

        Raises:
            TransportError: If no relay could be reached
        """
        raise NotImplementedError()

    @abstractmethod
    def subscribe(self, query: dict) -> AsyncIterator[InboundEvent]:
        """Stream events matching a Nostr filter.

        The iterator ends when the subscription is closed.
        """
        raise NotImplementedError()

    @abstractmethod
    async def publish(self, event: Any) -> None:
        """Publish a signed event."""
        raise NotImplementedError()

    @abstractmethod
    async def close(self) -> None:
        raise NotImplementedError()


class TransportError(Exception):
    """Exception raised when the relay cannot be reached or used."""
    pass
