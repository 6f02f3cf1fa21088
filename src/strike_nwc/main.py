"""Main entry point - runs the NWC wallet service."""

import asyncio
import logging
import signal

from strike_nwc.cache import MemoryInvoiceCache
from strike_nwc.config import Settings, get_settings
from strike_nwc.nwc import (
    MethodDispatcher,
    NwcService,
    RequestAuthenticator,
    ResponseBuilder,
    WalletActions,
)
from strike_nwc.providers import get_provider
from strike_nwc.quota import QuotaGuard
from strike_nwc.transport.base import TransportError

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    """Configure root logging from LOG_LEVEL."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    # Reduce noise from libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("websockets").setLevel(logging.WARNING)


def build_service(settings: Settings) -> NwcService:
    """Wire the pipeline from settings."""
    from strike_nwc.signing.local import LocalNostrSigner
    from strike_nwc.transport.relay import RelayTransport

    signer = LocalNostrSigner(
        secret_hex=settings.nwc_connection_secret,
        remote_pubkey=settings.nwc_service_pubkey,
    )
    quota = QuotaGuard(
        ceiling=settings.total_max_send_amount_in_sats,
        state_path=settings.quota_state_file,
    )
    actions = WalletActions(
        provider=get_provider(),
        quota=quota,
        cache=MemoryInvoiceCache(),
        source_currency=settings.strike_source_currency,
    )
    return NwcService(
        transport=RelayTransport(settings.relay_uri, debug=settings.is_debug),
        authenticator=RequestAuthenticator(signer, settings.nwc_connection_pubkey),
        dispatcher=MethodDispatcher(actions),
        builder=ResponseBuilder(
            cipher=signer,
            signer=signer,
            authorized_pubkey=settings.authorized_pubkey,
            max_quota=settings.total_max_send_amount_in_sats,
        ),
        connection_pubkey=settings.nwc_connection_pubkey,
    )


class Application:
    """Keeps the wallet service subscribed until shutdown."""

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self.service: NwcService | None = None
        self._shutdown_event = asyncio.Event()

    async def start(self):
        """Start the service and resubscribe whenever the relay drops."""
        configure_logging(self.settings)

        logger.info("Starting strike-nwc...")
        logger.info(f"Config: {self.settings.get_safe_dict()}")

        if not self.settings.has_connection:
            raise ValueError(
                "NWC_CONNECTION_PUBKEY, NWC_CONNECTION_SECRET and NWC_SERVICE_PUBKEY must be set"
            )

        self.service = build_service(self.settings)

        try:
            while not self._shutdown_event.is_set():
                await self._run_once()
                if self._shutdown_event.is_set():
                    break
                logger.info(f"Reconnecting in {self.settings.reconnect_delay}s")
                try:
                    await asyncio.wait_for(
                        self._shutdown_event.wait(),
                        timeout=self.settings.reconnect_delay,
                    )
                except asyncio.TimeoutError:
                    pass
        finally:
            await self._cleanup()

    async def _run_once(self):
        """Connect, announce and listen until the subscription ends."""
        transport = self.service.transport
        try:
            await transport.connect()
        except TransportError as e:
            logger.error(f"Relay error: {e}")
            return

        if self.settings.publish_info_event:
            try:
                await self.service.publish_info_event()
            except Exception as e:
                logger.warning(f"Could not publish info event: {e}")

        listener = asyncio.create_task(self.service.run())
        shutdown = asyncio.create_task(self._shutdown_event.wait())
        done, _ = await asyncio.wait(
            {listener, shutdown}, return_when=asyncio.FIRST_COMPLETED
        )

        if listener not in done:
            listener.cancel()
        shutdown.cancel()
        await asyncio.gather(listener, shutdown, return_exceptions=True)

        if listener in done and listener.exception() is not None:
            logger.error(f"Relay subscription failed: {listener.exception()}")
        else:
            logger.info("Relay subscription closed")

        await transport.close()

    async def _cleanup(self):
        """Cleanup resources."""
        logger.info("Cleaning up...")

        if self.service:
            await self.service.drain()
            await self.service.dispatcher.actions.provider.close()
            await self.service.transport.close()

        logger.info("Cleanup complete")

    def shutdown(self):
        """Signal shutdown."""
        logger.info("Shutdown requested")
        self._shutdown_event.set()


def main():
    """Main entry point."""
    app = Application()

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, app.shutdown)

    try:
        loop.run_until_complete(app.start())
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received")
    finally:
        loop.close()


if __name__ == "__main__":
    main()
