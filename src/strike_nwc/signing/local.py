"""Local Nostr key backend.

Holds the NWC connection secret in memory and uses it for NIP-04
encryption towards the service pubkey and for Schnorr-signing response
events.
"""

import logging

from electrum_aionostr.event import Event
from electrum_aionostr.key import PrivateKey

from strike_nwc.signing.base import EventSigner, EventTemplate, MessageCipher, SigningError

logger = logging.getLogger(__name__)


class LocalNostrSigner(MessageCipher, EventSigner):
    """NIP-04 cipher and event signer backed by an in-memory key."""

    def __init__(self, secret_hex: str, remote_pubkey: str):
        """Initialize the signer.

        Args:
            secret_hex: 32-byte hex secret of the NWC connection
            remote_pubkey: Hex pubkey the shared secret is derived with
        """
        try:
            self._key = PrivateKey(raw_secret=bytes.fromhex(secret_hex))
        except ValueError as e:
            raise SigningError(f"Invalid NWC connection secret: {e}") from e
        self.remote_pubkey = remote_pubkey

    @property
    def public_key(self) -> str:
        return self._key.public_key.hex()

    async def encrypt(self, plaintext: str) -> str:
        try:
            return self._key.encrypt_message(plaintext, self.remote_pubkey)
        except Exception as e:
            raise SigningError(f"NIP-04 encryption failed: {e}") from e

    async def decrypt(self, ciphertext: str) -> str:
        try:
            return self._key.decrypt_message(ciphertext, self.remote_pubkey)
        except Exception as e:
            raise SigningError(f"NIP-04 decryption failed: {e}") from e

    async def sign(self, template: EventTemplate) -> Event:
        event = Event(
            pubkey=self.public_key,
            content=template.content,
            created_at=template.created_at,
            kind=template.kind,
            tags=template.tags,
        )
        try:
            # sign() returns the signed event on newer releases, mutates in place on older ones
            signed = event.sign(self._key.hex())
        except Exception as e:
            raise SigningError(f"Event signing failed: {e}") from e

        signed = signed or event
        logger.debug(f"Signed event {signed.id} (kind {template.kind})")
        return signed
