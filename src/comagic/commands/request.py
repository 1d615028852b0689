"""``comagic request`` -- send one authenticated request to the API.

The path is relative to the profile's base URL. The session key, the
``Accept`` header and the trailing slash are added by the transport, so
``comagic request GET /api/v1.0/domains`` is enough.
"""

from __future__ import annotations

import json
from typing import Any, Optional

import typer

from comagic.exceptions import ComagicError
from comagic.output import error

_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE")


def _parse_params(params: list[str]) -> list[tuple[str, str]]:
    """Split ``key=value`` strings, keeping repeated keys."""
    parsed: list[tuple[str, str]] = []
    for item in params:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"Expected key=value, got '{item}'", param_hint="--param")
        parsed.append((key, value))
    return parsed


def _parse_body(body: Optional[str]) -> Any:  # noqa: ANN401
    """Parse *body* as JSON, failing with a usage error when it is not."""
    if body is None:
        return None
    try:
        return json.loads(body)
    except json.JSONDecodeError as exc:
        raise typer.BadParameter(f"Body is not valid JSON: {exc}", param_hint="--data") from None


def request_command(
    ctx: typer.Context,
    method: str = typer.Argument(help="HTTP method: GET, POST, PUT, PATCH or DELETE."),
    path: str = typer.Argument(help="API path, e.g. /api/v1.0/domains."),
    param: list[str] = typer.Option(
        [], "--param", "-P", help="Query parameter as key=value (repeatable)."
    ),
    data: Optional[str] = typer.Option(None, "--data", "-d", help="JSON request body."),
    login: Optional[str] = typer.Option(None, "--login", "-l", help="Override the login."),
    base_url: Optional[str] = typer.Option(None, "--base-url", help="Override the API origin."),
) -> None:
    """Send a request and print the response body.

    Exits non-zero on login failure, network failure, or an HTTP status of
    400 and above (the body is still printed).

    Example::

        comagic request GET /api/v1.0/domains
        comagic request POST /api/v1.0/call -d '{"phone": "79990000000"}'
    """
    from comagic.client.factory import client_for_profile
    from comagic.client.response import format_api_response
    from comagic.config import resolve_password, resolve_profile

    verb = method.upper()
    if verb not in _METHODS:
        error(f"Unsupported method '{method}'. Use one of: {', '.join(_METHODS)}.")
        raise typer.Exit(code=2)

    query = _parse_params(param)
    json_body = _parse_body(data)

    obj = ctx.obj or {}
    try:
        profile = resolve_profile(obj.get("profile"), login, base_url)
        password = resolve_password(profile)
        with client_for_profile(profile, password) as client:
            response = client.request(
                verb,
                path,
                params=query or None,
                json=json_body,
            )
    except ComagicError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    format_api_response(response)
    if response.status_code >= 400:
        raise typer.Exit(code=1)
