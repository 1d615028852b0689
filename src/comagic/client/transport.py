"""Authenticating httpx transport for the CoMagic API.

:class:`ComagicTransport` is an :class:`httpx.BaseTransport` that wraps
another transport. Before forwarding a request it makes sure a usable
session key is cached, logging in through the wrapped transport when it is
not, and rewrites the request the way the API expects:

1. ``Accept: application/json`` is set.
2. A relative URL is resolved against the configured base URL.
3. The session key is set as the ``session_key`` query parameter,
   replacing any value already present.
4. The path gets a trailing slash.

Login failures surface as :class:`~comagic.exceptions.AuthFailedError`
and the original request is not sent. Failures of the wrapped transport on
the business request surface as
:class:`~comagic.exceptions.TransportFailedError`. Nothing is retried.

Concurrent callers share one transport. The validity check, the login and
the cache update run under a lock with a re-check once the lock is held, so
a cold or expired cache triggers one login however many threads hit it.

See Also:
    :class:`~comagic.client.async_transport.AsyncComagicTransport` for the
    non-blocking equivalent.
"""

from __future__ import annotations

import threading
import time
from typing import Callable, Optional, Union

import httpx

from comagic.auth.authenticator import Authenticator
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


class ComagicTransport(httpx.BaseTransport):
    """Blocking transport that authenticates every request it forwards.

    Args:
        login: CoMagic login.
        password: CoMagic password.
        base_url: API origin used for the login call and for relative
            request URLs.
        transport: Wrapped transport doing the actual network I/O;
            :class:`httpx.HTTPTransport` when omitted.
        session_lifetime: Seconds a session key is trusted.
        clock_skew_margin: Seconds the recorded issue time is backdated by.
        clock: Time source for the session cache.

    Example::

        transport = ComagicTransport("user", "secret")
        with httpx.Client(transport=transport, base_url=DEFAULT_BASE_URL) as client:
            client.get("/api/v1.0/domains/")
    """

    def __init__(
        self,
        login: str,
        password: str,
        base_url: Union[str, httpx.URL] = DEFAULT_BASE_URL,
        transport: Optional[httpx.BaseTransport] = None,
        session_lifetime: float = SESSION_LIFETIME,
        clock_skew_margin: float = CLOCK_SKEW_MARGIN,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._credentials = Credentials(login=login, password=password)
        self._base_url = httpx.URL(base_url)
        self._transport = transport if transport is not None else httpx.HTTPTransport()
        self._authenticator = Authenticator(self._credentials, self._base_url, self._transport)
        self._cache = SessionCache(session_lifetime, clock_skew_margin, clock)
        self._lock = threading.Lock()

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

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        """Authenticate, rewrite and forward *request*.

        Raises:
            InvalidRequestError: If *request* is ``None``.
            AuthFailedError: If no session key could be obtained.
            TransportFailedError: If the wrapped transport fails.
        """
        if request is None:
            raise InvalidRequestError("round trip: empty request")

        session_key = self.ensure_session()
        rewrite_request(request, self._base_url, session_key)
        try:
            return self._transport.handle_request(request)
        except httpx.TransportError as exc:
            raise TransportFailedError(exc) from exc

    def ensure_session(self) -> str:
        """Return a valid session key, logging in first if needed.

        Raises:
            AuthFailedError: If the login exchange fails.
        """
        if self._cache.is_valid():
            return self._cache.key
        with self._lock:
            if not self._cache.is_valid():
                self._login()
            return self._cache.key

    def _login(self) -> None:
        output = get_output()
        if self._cache.key:
            output.debug("Session key expired, logging in again")
        output.debug(f"Logging in to {self._authenticator.login_url} as {self.login}")
        try:
            key = self._authenticator.authenticate()
        except LoginError as exc:
            raise AuthFailedError(exc) from exc
        self._cache.update(key)
        output.debug("Session key obtained")

    def close(self) -> None:
        self._transport.close()
