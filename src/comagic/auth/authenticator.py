"""Login exchange against ``POST /api/login/``.

This module provides :class:`Authenticator` and its non-blocking twin
:class:`AsyncAuthenticator`. Both send the login and password as a
``multipart/form-data`` body straight through the *underlying* httpx
transport, so the login call is never itself treated as a request that
needs a session key.

The response is classified into exactly one outcome:

- a session key, when the envelope says ``success`` and carries a key;
- :class:`~comagic.exceptions.LoginTransportError` when the request
  could not be sent or its body could not be read;
- :class:`~comagic.exceptions.LoginHTTPError` for any status >= 400,
  checked before the body is read;
- :class:`~comagic.exceptions.MalformedResponseError` when the body cannot
  be decoded, is not the expected JSON envelope, or holds no key;
- :class:`~comagic.exceptions.LoginRejectedError` when the API answers
  ``success: false``.

Neither class caches anything. The transports decide when to log in and
store the returned key.
"""

from __future__ import annotations

from typing import Union

import httpx
from pydantic import ValidationError

from comagic.exceptions import (
    LoginHTTPError,
    LoginRejectedError,
    LoginTransportError,
    MalformedResponseError,
)
from comagic.models import DEFAULT_BASE_URL, AuthResponse, Credentials
from comagic.rewrite import resolve_url

LOGIN_PATH = "/api/login/"


class _BaseAuthenticator:
    """Request building and response classification shared by both flavours."""

    def __init__(
        self,
        credentials: Credentials,
        base_url: Union[str, httpx.URL] = DEFAULT_BASE_URL,
    ) -> None:
        self._credentials = credentials
        self._base_url = httpx.URL(base_url)

    @property
    def credentials(self) -> Credentials:
        return self._credentials

    @property
    def login_url(self) -> httpx.URL:
        return resolve_url(self._base_url, httpx.URL(LOGIN_PATH))

    def build_request(self) -> httpx.Request:
        """Build the multipart login request.

        Fields are passed as ``(None, value)`` file tuples, which httpx
        encodes as plain multipart form fields without a filename.
        """
        return httpx.Request(
            "POST",
            self.login_url,
            headers={"Accept": "application/json"},
            files={
                "login": (None, self._credentials.login),
                "password": (None, self._credentials.password.get_secret_value()),
            },
        )

    def check_status(self, response: httpx.Response) -> None:
        """Raise :class:`LoginHTTPError` for a status >= 400, before any body is read."""
        if response.status_code >= 400:
            raise LoginHTTPError(response.status_code, response.reason_phrase)

    def parse_response(self, response: httpx.Response) -> str:
        """Classify a fully read login response and return the session key.

        Raises:
            LoginHTTPError: On status >= 400.
            MalformedResponseError: If the body is not a login envelope or
                the envelope has no session key.
            LoginRejectedError: If the envelope reports ``success: false``.
        """
        self.check_status(response)

        try:
            envelope = AuthResponse.model_validate_json(response.content)
        except ValidationError as exc:
            raise MalformedResponseError(f"could not decode login response: {exc}") from exc

        if not envelope.success:
            raise LoginRejectedError(envelope.message)
        if not envelope.data.session_key:
            raise MalformedResponseError("login response carries no session key")
        return envelope.data.session_key


class Authenticator(_BaseAuthenticator):
    """Performs the login exchange over a blocking httpx transport.

    Args:
        credentials: Login and password to submit.
        base_url: API origin; the login path is appended to it.
        transport: Transport that actually sends the login request.

    Example::

        auth = Authenticator(creds, "http://api.comagic.ru", httpx.HTTPTransport())
        key = auth.authenticate()
    """

    def __init__(
        self,
        credentials: Credentials,
        base_url: Union[str, httpx.URL] = DEFAULT_BASE_URL,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        super().__init__(credentials, base_url)
        self._transport = transport if transport is not None else httpx.HTTPTransport()

    def authenticate(self) -> str:
        """Log in and return a fresh session key.

        Raises:
            LoginTransportError: If the request could not be completed.
            LoginHTTPError: On status >= 400.
            MalformedResponseError: If the body cannot be decoded.
            LoginRejectedError: If the API refused the credentials.
        """
        request = self.build_request()
        try:
            response = self._transport.handle_request(request)
        except httpx.DecodingError as exc:
            raise MalformedResponseError(f"could not decode login response: {exc}") from exc
        except httpx.TransportError as exc:
            raise LoginTransportError(f"login request failed: {exc}") from exc

        try:
            self.check_status(response)
            response.read()
        except httpx.DecodingError as exc:
            raise MalformedResponseError(f"could not decode login response: {exc}") from exc
        except httpx.TransportError as exc:
            raise LoginTransportError(f"could not read login response: {exc}") from exc
        finally:
            response.close()
        return self.parse_response(response)


class AsyncAuthenticator(_BaseAuthenticator):
    """Performs the login exchange over an async httpx transport.

    Mirrors :class:`Authenticator`; :meth:`authenticate` must be awaited.
    """

    def __init__(
        self,
        credentials: Credentials,
        base_url: Union[str, httpx.URL] = DEFAULT_BASE_URL,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(credentials, base_url)
        self._transport = transport if transport is not None else httpx.AsyncHTTPTransport()

    async def authenticate(self) -> str:
        """Log in and return a fresh session key.

        Raises the same errors as :meth:`Authenticator.authenticate`.
        """
        request = self.build_request()
        try:
            response = await self._transport.handle_async_request(request)
        except httpx.DecodingError as exc:
            raise MalformedResponseError(f"could not decode login response: {exc}") from exc
        except httpx.TransportError as exc:
            raise LoginTransportError(f"login request failed: {exc}") from exc

        try:
            self.check_status(response)
            await response.aread()
        except httpx.DecodingError as exc:
            raise MalformedResponseError(f"could not decode login response: {exc}") from exc
        except httpx.TransportError as exc:
            raise LoginTransportError(f"could not read login response: {exc}") from exc
        finally:
            await response.aclose()
        return self.parse_response(response)
