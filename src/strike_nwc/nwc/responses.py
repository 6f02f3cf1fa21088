"""Builds encrypted, signed wallet response events."""

import logging
from typing import Any, Optional

from strike_nwc.errors import ErrorCode
from strike_nwc.nwc.models import (
    RESPONSE_EVENT_KIND,
    UNKNOWN_RESULT_TYPE,
    ActionOutcome,
    ErrorBody,
    ResponseContent,
)
from strike_nwc.signing.base import EventSigner, EventTemplate, MessageCipher

logger = logging.getLogger(__name__)

ERROR_MESSAGES = {
    ErrorCode.UNAUTHORIZED: "Unable to decrypt NWC request content or unauthorized sender.",
    ErrorCode.NOT_IMPLEMENTED: "{method} not currently supported.",
    ErrorCode.QUOTA_EXCEEDED: "Payment would exceed max quota of {max_quota}.",
    ErrorCode.PAYMENT_FAILED: "Unable to complete payment.",
    ErrorCode.NOT_FOUND: "Unable to find invoice.",
    ErrorCode.INVALID_PARAMS: "Invalid parameters provided for the request.",
    ErrorCode.INTERNAL: "Something unexpected happened.",
}


def error_message(code: ErrorCode, method: str, max_quota: int) -> str:
    """Fixed client-facing message for an error code."""
    template = ERROR_MESSAGES.get(code, ERROR_MESSAGES[ErrorCode.INTERNAL])
    return template.format(method=method, max_quota=max_quota)


class ResponseBuilder:
    """Assembles the response content, encrypts it and signs the event."""

    def __init__(
        self,
        cipher: MessageCipher,
        signer: EventSigner,
        authorized_pubkey: str,
        max_quota: int,
    ):
        self.cipher = cipher
        self.signer = signer
        self.authorized_pubkey = authorized_pubkey
        self.max_quota = max_quota

    def content_for(self, method: Optional[str], outcome: ActionOutcome) -> ResponseContent:
        result_type = method or UNKNOWN_RESULT_TYPE

        if outcome.ok:
            return ResponseContent(result_type=result_type, result=outcome.result)

        code = outcome.error.code
        return ResponseContent(
            result_type=result_type,
            error=ErrorBody(
                code=code,
                message=error_message(code, result_type, self.max_quota),
            ),
        )

    async def build(self, correlation_id: str, method: Optional[str], outcome: ActionOutcome) -> Any:
        """Build the signed response event for one request.

        Args:
            correlation_id: Id of the request event (goes in the `e` tag)
            method: Request method, None if it could not be decoded
            outcome: Handler outcome

        Returns:
            Signed event ready for publishing

        Raises:
            SigningError: If encryption or signing fails
        """
        content = self.content_for(method, outcome)
        payload = content.to_json()
        logger.debug(f"NWC response content: {payload}")

        template = EventTemplate(
            kind=RESPONSE_EVENT_KIND,
            content=await self.cipher.encrypt(payload),
            tags=[
                ["p", self.authorized_pubkey],
                ["e", correlation_id],
            ],
        )
        return await self.signer.sign(template)
