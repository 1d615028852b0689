"""comagic -- authenticating httpx transport for the CoMagic API.

Every CoMagic API call needs a short-lived session key obtained from
``POST /api/login/``. This package hides that: its transport logs in on
first use, keeps the key for three hours, and adds it (together with the
``Accept`` header and trailing slash the API insists on) to every request.

Typical usage::

    from comagic import new_client

    with new_client("login", "password") as client:
        domains = client.get("/api/v1.0/domains").json()

Modules:
    auth: Session cache and login exchange.
    client: Authenticating transports and client factories.
    rewrite: URL and header rewriting rules.
    models: Pydantic models for the wire format and configuration.
    config: Profiles and credential resolution for the CLI.
    exceptions: Exception hierarchy with exit-code mapping.
    output: stdout/stderr formatting with Rich support.
    app: Typer CLI entry point.
"""

__version__ = "0.1.0"

from comagic.client import (  # noqa: E402
    AsyncComagicTransport,
    ComagicTransport,
    new_async_client,
    new_client,
)
from comagic.models import DEFAULT_BASE_URL  # noqa: E402

__all__ = [
    "AsyncComagicTransport",
    "ComagicTransport",
    "DEFAULT_BASE_URL",
    "__version__",
    "new_async_client",
    "new_client",
]
