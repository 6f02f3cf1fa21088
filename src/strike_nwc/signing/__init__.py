"""NWC encryption and signing services.

- MessageCipher: NIP-04 encryption towards the connected client
- EventSigner: Signs response events
- LocalNostrSigner: Both, using the connection secret held in memory
"""

from strike_nwc.signing.base import (
    EventSigner,
    EventTemplate,
    MessageCipher,
    SigningError,
)

__all__ = [
    "EventSigner",
    "EventTemplate",
    "MessageCipher",
    "SigningError",
]
