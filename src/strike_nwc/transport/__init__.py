"""Relay transports."""

from strike_nwc.transport.base import InboundEvent, Transport, TransportError

__all__ = ["InboundEvent", "Transport", "TransportError"]
