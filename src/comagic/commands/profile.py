"""Profile commands -- manage stored connection settings.

Provides the ``comagic profile`` sub-command group. A profile records the
login, where to read the password from, the API origin and HTTP settings.
The password itself is never written to disk.

Typical workflow::

    comagic profile add prod --login me --password-source env:COMAGIC_PASSWORD
    comagic profile list
    comagic login --profile prod
"""

from __future__ import annotations

from typing import Optional

import typer

from comagic.exceptions import ConfigError
from comagic.output import error, format_response, get_output, info, success, suggest


profile_app = typer.Typer(no_args_is_help=True)


@profile_app.command("add")
def profile_add(
    name: str = typer.Argument(help="Profile name."),
    login: str = typer.Option(..., "--login", "-l", help="CoMagic login."),
    password_source: str = typer.Option(
        "prompt",
        "--password-source",
        "-s",
        help="Where to read the password: env:VAR, file:/path or prompt.",
    ),
    base_url: Optional[str] = typer.Option(None, "--base-url", help="API origin."),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Request timeout in seconds."),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing profile."),
) -> None:
    """Create or overwrite a profile.

    Example::

        comagic profile add prod --login me --password-source file:~/.comagic-pass
    """
    from comagic.config import profile_exists, save_profile
    from comagic.models import Profile, RequestConfig

    if not (
        password_source == "prompt"
        or password_source.startswith("env:")
        or password_source.startswith("file:")
    ):
        error(f"Unknown password source '{password_source}'. Use env:VAR, file:/path or prompt.")
        raise typer.Exit(code=2)

    try:
        if profile_exists(name) and not force:
            error(f"Profile '{name}' already exists. Use --force to overwrite it.")
            raise typer.Exit(code=2)

        profile = Profile(name=name, login=login, password_source=password_source)
        if base_url:
            profile.base_url = base_url
        if timeout is not None:
            profile.request = RequestConfig(timeout=timeout)
        path = save_profile(profile)
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    success(f'Profile "{name}" saved to {path}.')
    suggest(f"Check it: comagic login --profile {name}")


@profile_app.command("list")
def profile_list() -> None:
    """List stored profiles."""
    from comagic.config import list_profiles, load_profile

    names = list_profiles()
    if not names:
        info("No profiles configured.")
        suggest("Create one: comagic profile add NAME --login LOGIN")
        return

    rows: list[list[str]] = []
    for name in names:
        try:
            profile = load_profile(name)
        except ConfigError as exc:
            get_output().warning(str(exc))
            continue
        rows.append([profile.name, profile.login or "", profile.base_url])
    get_output().print_table(["Name", "Login", "Base URL"], rows)


@profile_app.command("show")
def profile_show(name: str = typer.Argument(help="Profile name.")) -> None:
    """Show a stored profile."""
    from comagic.config import load_profile

    try:
        profile = load_profile(name)
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    format_response(profile.model_dump(mode="json"))


@profile_app.command("remove")
def profile_remove(name: str = typer.Argument(help="Profile name.")) -> None:
    """Delete a stored profile."""
    from comagic.config import delete_profile

    try:
        delete_profile(name)
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    success(f'Profile "{name}" removed.')
