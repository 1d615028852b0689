"""``comagic login`` -- check that the configured credentials work.

Runs exactly one login exchange through the same transport library users
get and reports the outcome. With ``--show-key`` the fresh session key is
printed to stdout so shell scripts can reuse it for the next three hours.
"""

from __future__ import annotations

from typing import Optional

import typer

from comagic.exceptions import ComagicError
from comagic.output import error, print_data, success


def login_command(
    ctx: typer.Context,
    login: Optional[str] = typer.Option(None, "--login", "-l", help="Override the login."),
    base_url: Optional[str] = typer.Option(None, "--base-url", help="Override the API origin."),
    show_key: bool = typer.Option(
        False, "--show-key", help="Print the session key to stdout."
    ),
) -> None:
    """Log in once and report whether the API accepted the credentials.

    Exits with code 3 when the login fails for any reason, including an
    unreachable API, and 1 on configuration problems.

    Example::

        comagic login --profile prod
        KEY=$(comagic login --show-key -q)
    """
    from comagic.client.factory import transport_for_profile
    from comagic.config import resolve_password, resolve_profile

    obj = ctx.obj or {}
    try:
        profile = resolve_profile(obj.get("profile"), login, base_url)
        password = resolve_password(profile)
        with transport_for_profile(profile, password) as transport:
            session_key = transport.ensure_session()
    except ComagicError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    success(f"Logged in to {profile.base_url} as {profile.login}.")
    if show_key:
        print_data(session_key)
