r"""Transport primitives performing the I/O of an HTTP exchange."""

from __future__ import annotations

__all__ = [
    "BaseTransport",
    "HttpxTransport",
    "ReadyState",
    "SignalListener",
    "SignalTarget",
    "SignalType",
    "Transport",
    "TransportSignal",
]

from webrequest.transport.base import (
    BaseTransport,
    ReadyState,
    SignalListener,
    SignalTarget,
    SignalType,
    Transport,
    TransportSignal,
)
from webrequest.transport.httpx_transport import HttpxTransport
