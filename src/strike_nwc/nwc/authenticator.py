"""Decrypts wallet requests and checks who sent them."""

import json
import logging

from strike_nwc.errors import ErrorCode, NwcError
from strike_nwc.nwc.models import IncomingRequest
from strike_nwc.signing.base import MessageCipher
from strike_nwc.transport.base import InboundEvent

logger = logging.getLogger(__name__)


class RequestAuthenticator:
    """Turns a raw request event into an IncomingRequest.

    Decryption and the sender check are both mandatory: content that
    cannot be decrypted and events from any pubkey other than the
    authorized one are rejected with UNAUTHORIZED.
    """

    def __init__(self, cipher: MessageCipher, authorized_pubkey: str):
        if not authorized_pubkey:
            raise ValueError("authorized_pubkey is required")
        self.cipher = cipher
        self.authorized_pubkey = authorized_pubkey.lower()

    async def authenticate(self, event: InboundEvent) -> IncomingRequest:
        """Decrypt, decode and authorize a request event.

        Raises:
            NwcError: UNAUTHORIZED on any decryption, decoding or sender failure.
                The decoded method is attached when it is known.
        """
        content = await self._decrypt(event)

        method = content.get("method")
        if not isinstance(method, str):
            method = ""

        params = content.get("params")
        if params is None:
            params = {}
        elif not isinstance(params, dict):
            logger.error(f"Malformed params in NWC request {event.id}")
            raise NwcError(ErrorCode.UNAUTHORIZED, "params is not an object", method=method or None)

        if (event.pubkey or "").lower() != self.authorized_pubkey:
            logger.error(f"Unauthorized request from pubkey: {event.pubkey}")
            raise NwcError(ErrorCode.UNAUTHORIZED, "sender not authorized", method=method or None)

        return IncomingRequest(
            correlation_id=event.id,
            sender=event.pubkey,
            method=method,
            params=params,
        )

    async def _decrypt(self, event: InboundEvent) -> dict:
        try:
            plaintext = await self.cipher.decrypt(event.content)
            content = json.loads(plaintext)
        except Exception as e:
            logger.error(f"Error decrypting NWC request: {e}")
            raise NwcError(ErrorCode.UNAUTHORIZED, "undecryptable content") from e

        if not isinstance(content, dict):
            logger.error(f"Decrypted NWC request {event.id} is not a JSON object")
            raise NwcError(ErrorCode.UNAUTHORIZED, "content is not an object")

        logger.debug(f"NWC request content: {content}")
        return content
