"""Asynchronous authenticating transport -- mirrors :class:`~comagic.client.transport.ComagicTransport`.

:class:`AsyncComagicTransport` applies the same login, rewriting and error
rules on top of an :class:`httpx.AsyncBaseTransport`. The login sequence is
serialized with an :class:`asyncio.Lock`, so concurrent tasks on one event
loop share a single login exchange.
"""

from __future__ import annotations

import asyncio
import time
from typing import Callable, Optional, Union

import httpx

from comagic.auth.authenticator import AsyncAuthenticator
from comagic.auth.session import CLOCK_SKEW_MARGIN, SESSION_LIFETIME, SessionCache
from comagic.exceptions import (
    AuthFailedError,
    InvalidRequestError,
    LoginError,
    TransportFailedError,
)
from comagic.models import DEFAULT_BASE_URL, Credentials
from comagic.output import get_output
from comagic.rewrite import rewrite_request


class AsyncComagicTransport(httpx.AsyncBaseTransport):
    """Non-blocking transport that authenticates every request it forwards.

    Takes the same arguments as
    :class:`~comagic.client.transport.ComagicTransport`; *transport*
    defaults to :class:`httpx.AsyncHTTPTransport`.

    Example::

        transport = AsyncComagicTransport("user", "secret")
        async with httpx.AsyncClient(transport=transport, base_url=DEFAULT_BASE_URL) as client:
            await client.get("/api/v1.0/domains/")
    """

    def __init__(
        self,
        login: str,
        password: str,
        base_url: Union[str, httpx.URL] = DEFAULT_BASE_URL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        session_lifetime: float = SESSION_LIFETIME,
        clock_skew_margin: float = CLOCK_SKEW_MARGIN,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._credentials = Credentials(login=login, password=password)
        self._base_url = httpx.URL(base_url)
        self._transport = transport if transport is not None else httpx.AsyncHTTPTransport()
        self._authenticator = AsyncAuthenticator(self._credentials, self._base_url, self._transport)
        self._cache = SessionCache(session_lifetime, clock_skew_margin, clock)
        self._lock = asyncio.Lock()

    @property
    def base_url(self) -> httpx.URL:
        return self._base_url

    @property
    def login(self) -> str:
        return self._credentials.login

    @property
    def session(self) -> SessionCache:
        """The session cache owned by this transport."""
        return self._cache

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        """Authenticate, rewrite and forward *request*.

        Raises:
            InvalidRequestError: If *request* is ``None``.
            AuthFailedError: If no session key could be obtained.
            TransportFailedError: If the wrapped transport fails.
        """
        if request is None:
            raise InvalidRequestError("round trip: empty request")

        session_key = await self.ensure_session()
        rewrite_request(request, self._base_url, session_key)
        try:
            return await self._transport.handle_async_request(request)
        except httpx.TransportError as exc:
            raise TransportFailedError(exc) from exc

    async def ensure_session(self) -> str:
        """Return a valid session key, logging in first if needed."""
        if self._cache.is_valid():
            return self._cache.key
        async with self._lock:
            if not self._cache.is_valid():
                await self._login()
            return self._cache.key

    async def _login(self) -> None:
        output = get_output()
        if self._cache.key:
            output.debug("Session key expired, logging in again")
        output.debug(f"Logging in to {self._authenticator.login_url} as {self.login}")
        try:
            key = await self._authenticator.authenticate()
        except LoginError as exc:
            raise AuthFailedError(exc) from exc
        self._cache.update(key)
        output.debug("Session key obtained")

    async def aclose(self) -> None:
        await self._transport.aclose()
