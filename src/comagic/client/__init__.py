"""HTTP client module for comagic.

Provides the authenticating transports and factories that build httpx
clients around them.

Classes:
    :class:`ComagicTransport` -- blocking transport, wraps an
    :class:`httpx.BaseTransport`.
    :class:`AsyncComagicTransport` -- non-blocking transport, wraps an
    :class:`httpx.AsyncBaseTransport`.

Example::

    from comagic.client import new_client

    with new_client("user", "secret") as client:
        resp = client.get("/api/v1.0/domains")
"""

from comagic.client.async_transport import AsyncComagicTransport
from comagic.client.factory import (
    client_for_profile,
    new_async_client,
    new_client,
    transport_for_profile,
)
from comagic.client.transport import ComagicTransport

__all__ = [
    "AsyncComagicTransport",
    "ComagicTransport",
    "client_for_profile",
    "new_async_client",
    "new_client",
    "transport_for_profile",
]
