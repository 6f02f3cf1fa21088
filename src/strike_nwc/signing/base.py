"""Base interfaces for NWC payload encryption and event signing.

Response flow:
1. Serialize the response content
2. Encrypt it for the connected client (NIP-04)
3. Wrap it in an event template with correlation tags
4. Sign the event with the connection secret
5. Hand the signed event to the transport
"""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


@dataclass
class EventTemplate:
    """Unsigned Nostr event.

    Attributes:
        kind: Event kind (23195 for wallet responses)
        content: Event content, already encrypted where required
        tags: Event tags, e.g. [["p", pubkey], ["e", event_id]]
        created_at: Unix timestamp
    """
    kind: int
    content: str
    tags: list[list[str]] = field(default_factory=list)
    created_at: int = field(default_factory=lambda: int(time.time()))


class MessageCipher(ABC):
    """Encrypts and decrypts content shared with the connected client."""

    @abstractmethod
    async def encrypt(self, plaintext: str) -> str:
        raise NotImplementedError()

    @abstractmethod
    async def decrypt(self, ciphertext: str) -> str:
        """Decrypt content sent by the client.

        Raises:
            SigningError: If the content cannot be decrypted
        """
        raise NotImplementedError()


class EventSigner(ABC):
    """Signs outgoing events with the service credential."""

    @property
    @abstractmethod
    def public_key(self) -> str:
        """Hex pubkey events are signed with."""
        raise NotImplementedError()

    @abstractmethod
    async def sign(self, template: EventTemplate) -> Any:
        """Sign an event template.

        Returns:
            Signed event accepted by the transport
        """
        raise NotImplementedError()


class SigningError(Exception):
    """Exception raised when encryption, decryption or signing fails."""
    pass
