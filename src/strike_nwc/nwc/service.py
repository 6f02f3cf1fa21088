"""Wallet request pipeline.

Every request event goes through:
1. RequestAuthenticator (decrypt + sender check)
2. MethodDispatcher (run the wallet action)
3. ResponseBuilder (encrypt + sign)
4. Transport.publish

Each event gets its own task, so a slow provider call only holds up the
request that made it.
"""

import asyncio
import logging
import time
from typing import Optional

from strike_nwc.errors import ErrorCode, NwcError
from strike_nwc.nwc.authenticator import RequestAuthenticator
from strike_nwc.nwc.dispatcher import MethodDispatcher
from strike_nwc.nwc.models import INFO_EVENT_KIND, REQUEST_EVENT_KIND, ActionOutcome
from strike_nwc.nwc.responses import ResponseBuilder
from strike_nwc.signing.base import EventTemplate
from strike_nwc.transport.base import InboundEvent, Transport

logger = logging.getLogger(__name__)


class NwcService:
    """Listens for wallet requests and answers each one exactly once."""

    def __init__(
        self,
        transport: Transport,
        authenticator: RequestAuthenticator,
        dispatcher: MethodDispatcher,
        builder: ResponseBuilder,
        connection_pubkey: str,
    ):
        self.transport = transport
        self.authenticator = authenticator
        self.dispatcher = dispatcher
        self.builder = builder
        self.connection_pubkey = connection_pubkey
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def request_filter(self) -> dict:
        """Subscription filter: new request events from the connection key."""
        return {
            "authors": [self.connection_pubkey],
            "kinds": [REQUEST_EVENT_KIND],
            "limit": 0,
            "since": int(time.time()),
        }

    async def process(self, event: InboundEvent) -> tuple[Optional[str], ActionOutcome]:
        """Authenticate and run one request.

        Returns:
            Tuple of (method if decoded, outcome). Never raises for request
            failures; unexpected errors are reported as INTERNAL.
        """
        method: Optional[str] = None
        try:
            request = await self.authenticator.authenticate(event)
            method = request.method or None
            logger.info(f"Handling {request.method or '(no method)'} request {event.id}")
            outcome = await self.dispatcher.dispatch(request)
        except NwcError as e:
            method = method or e.method
            outcome = ActionOutcome.failure(e)
        except Exception:
            logger.exception(f"Unexpected error handling NWC request {event.id}")
            outcome = ActionOutcome.from_code(ErrorCode.INTERNAL)

        return method, outcome

    async def handle_event(self, event: InboundEvent) -> bool:
        """Process a request event and publish its response.

        Returns:
            True if the response was published. A response that cannot be
            built or published is logged and dropped.
        """
        method, outcome = await self.process(event)

        try:
            response = await self.builder.build(event.id, method, outcome)
            await self.transport.publish(response)
        except Exception as e:
            logger.error(f"Failed to send NWC response for {event.id}: {e}")
            return False

        if outcome.ok:
            logger.info(f"Responded to {method} request {event.id}")
        else:
            logger.info(
                f"Responded to {method or 'unknown'} request {event.id} "
                f"with {outcome.error.code.value}"
            )
        return True

    def spawn(self, event: InboundEvent) -> asyncio.Task:
        """Handle an event in its own task."""
        task = asyncio.create_task(self.handle_event(event))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def run(self) -> None:
        """Consume the subscription until the relay closes it."""
        async for event in self.transport.subscribe(self.request_filter()):
            logger.info(f"NWC request: {event.id} from {event.pubkey}")
            self.spawn(event)

    async def drain(self) -> None:
        """Wait for in-flight requests to finish."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def publish_info_event(self) -> None:
        """Announce the supported methods (NIP-47 info event)."""
        template = EventTemplate(
            kind=INFO_EVENT_KIND,
            content=" ".join(self.dispatcher.supported_methods),
        )
        event = await self.builder.signer.sign(template)
        await self.transport.publish(event)
        logger.info("Published NWC info event")
