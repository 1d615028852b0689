"""Ready-to-use httpx clients for the CoMagic API.

:func:`new_client` and :func:`new_async_client` wrap an authenticating
transport in an :class:`httpx.Client` / :class:`httpx.AsyncClient` whose
``base_url`` is the API origin, so callers only deal with API paths.
:func:`client_for_profile` does the same from a stored
:class:`~comagic.models.Profile`.
"""

from __future__ import annotations

from typing import Any, Optional, Union

import httpx
from pydantic import ValidationError

from comagic.client.async_transport import AsyncComagicTransport
from comagic.client.transport import ComagicTransport
from comagic.exceptions import ConfigError
from comagic.models import DEFAULT_BASE_URL, Credentials, Profile


def new_client(
    login: str,
    password: str,
    *,
    base_url: Optional[Union[str, httpx.URL]] = None,
    transport: Optional[httpx.BaseTransport] = None,
    timeout: float = 30.0,
    **client_kwargs: Any,
) -> httpx.Client:
    """Return an :class:`httpx.Client` that authenticates against CoMagic.

    Args:
        login: CoMagic login.
        password: CoMagic password.
        base_url: API origin; :data:`~comagic.models.DEFAULT_BASE_URL`
            when omitted.
        transport: Transport doing the network I/O underneath the
            authenticating layer, e.g. :class:`httpx.MockTransport` in
            tests or a proxying transport.
        timeout: Default request timeout in seconds.
        **client_kwargs: Forwarded to :class:`httpx.Client`.

    Example::

        with new_client("user", "secret") as client:
            domains = client.get("/api/v1.0/domains").json()
    """
    origin = httpx.URL(base_url or DEFAULT_BASE_URL)
    return httpx.Client(
        base_url=origin,
        transport=ComagicTransport(login, password, base_url=origin, transport=transport),
        timeout=timeout,
        **client_kwargs,
    )


def new_async_client(
    login: str,
    password: str,
    *,
    base_url: Optional[Union[str, httpx.URL]] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    timeout: float = 30.0,
    **client_kwargs: Any,
) -> httpx.AsyncClient:
    """Return an :class:`httpx.AsyncClient` that authenticates against CoMagic.

    Same arguments as :func:`new_client`.
    """
    origin = httpx.URL(base_url or DEFAULT_BASE_URL)
    return httpx.AsyncClient(
        base_url=origin,
        transport=AsyncComagicTransport(login, password, base_url=origin, transport=transport),
        timeout=timeout,
        **client_kwargs,
    )


def _network_transport(profile: Profile) -> httpx.BaseTransport:
    return httpx.HTTPTransport(verify=profile.request.verify_ssl)


def transport_for_profile(
    profile: Profile,
    password: str,
    transport: Optional[httpx.BaseTransport] = None,
) -> ComagicTransport:
    """Build an authenticating transport from a resolved profile and password.

    Raises:
        ConfigError: If the profile has no login or the password is empty.
    """
    if not profile.login:
        raise ConfigError(f"Profile '{profile.name}' has no login configured")
    try:
        credentials = Credentials(login=profile.login, password=password)
    except ValidationError as exc:
        raise ConfigError(
            f"Profile '{profile.name}': the password from '{profile.password_source}' is empty"
        ) from exc
    return ComagicTransport(
        credentials.login,
        credentials.password.get_secret_value(),
        base_url=profile.base_url,
        transport=transport if transport is not None else _network_transport(profile),
    )


def client_for_profile(
    profile: Profile,
    password: str,
    transport: Optional[httpx.BaseTransport] = None,
) -> httpx.Client:
    """Build a blocking client from a resolved profile and password."""
    comagic_transport = transport_for_profile(profile, password, transport)
    return httpx.Client(
        base_url=comagic_transport.base_url,
        transport=comagic_transport,
        timeout=profile.request.timeout,
    )
