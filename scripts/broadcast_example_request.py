#!/usr/bin/env python3
"""Publish an example NWC request to the configured relay.

Encrypts the request with the connection secret the service uses, so the
running bridge will accept it and publish a response.

Usage:
    python scripts/broadcast_example_request.py                 # get_exchange_rates, USD
    python scripts/broadcast_example_request.py EUR             # get_exchange_rates, EUR
    python scripts/broadcast_example_request.py --method get_balance
    python scripts/broadcast_example_request.py --method get_transactions --params '{"limit": 5}'
"""

import argparse
import asyncio
import json
import sys

from dotenv import load_dotenv
load_dotenv()

from strike_nwc.config import get_settings
from strike_nwc.nwc.models import REQUEST_EVENT_KIND
from strike_nwc.signing.base import EventTemplate
from strike_nwc.signing.local import LocalNostrSigner
from strike_nwc.transport.relay import RelayTransport


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Broadcast an example NWC request")
    parser.add_argument("currency", nargs="?", default="USD", help="Currency for get_exchange_rates")
    parser.add_argument("--method", default="get_exchange_rates", help="NWC method to call")
    parser.add_argument("--params", default=None, help="Request params as a JSON object")
    return parser.parse_args()


async def broadcast(method: str, params: dict) -> int:
    settings = get_settings()
    signer = LocalNostrSigner(
        secret_hex=settings.nwc_connection_secret,
        remote_pubkey=settings.nwc_service_pubkey,
    )

    content = await signer.encrypt(json.dumps({"method": method, "params": params}))
    event = await signer.sign(
        EventTemplate(
            kind=REQUEST_EVENT_KIND,
            content=content,
            tags=[["p", settings.nwc_service_pubkey]],
        )
    )

    transport = RelayTransport(settings.relay_uri)
    try:
        print(f"broadcasting {method} request {event.id}...")
        await transport.connect()
        await transport.publish(event)
        print(f"successfully published example {method} request")
        return 0
    except Exception as e:
        print(f"failed to publish NWC request: {e}", file=sys.stderr)
        return 1
    finally:
        await transport.close()


if __name__ == "__main__":
    args = parse_args()

    if args.params:
        params = json.loads(args.params)
    elif args.method == "get_exchange_rates":
        params = {"currency": args.currency}
    else:
        params = {}

    sys.exit(asyncio.run(broadcast(args.method, params)))
