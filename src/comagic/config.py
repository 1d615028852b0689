"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module holds everything the CLI needs to remember between runs. The
authenticating transport itself reads no configuration: it is handed a
login, a password and a base URL by whoever constructs it.

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.comagic/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Profiles** -- one JSON file per account, deserialised into a
  :class:`~comagic.models.Profile`. Managed via :func:`load_profile`,
  :func:`save_profile` and :func:`delete_profile`. Profiles never contain
  the password itself, only a ``password_source`` descriptor.
* **Precedence resolution** -- :func:`resolve_profile` merges CLI flags,
  ``COMAGIC_*`` environment variables and the stored profile.
* **Credential resolution** -- :func:`resolve_credential` reads the
  password from an environment variable, a file or an interactive prompt.
"""

from __future__ import annotations

import getpass
import json
import os
import platform
import re
import sys
import tempfile
from pathlib import Path
from typing import Optional

from comagic.exceptions import ConfigError
from comagic.models import Profile

_APP_NAME = "comagic"
_PROFILE_NAME_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]*$")

ENV_PROFILE = "COMAGIC_PROFILE"
ENV_LOGIN = "COMAGIC_LOGIN"
ENV_PASSWORD = "COMAGIC_PASSWORD"
ENV_BASE_URL = "COMAGIC_BASE_URL"

DEFAULT_PROFILE_NAME = "default"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True on platforms that use XDG Base Directories (Linux/BSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from *env_var*, falling back under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/comagic/`` (default ``~/.config/comagic/``).
    On macOS/Windows: ``~/.comagic/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/comagic/`` (default ``~/.local/share/comagic/``).
    On macOS/Windows: ``~/.comagic/data/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "data"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_profiles_dir() -> Path:
    """Return ``<config_dir>/profiles/``, creating it if necessary."""
    path = get_config_dir() / "profiles"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write *data* to *path* atomically with ``0o600`` permissions.

    The temporary file lives in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX. On any failure the
    temporary file is removed.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        os.chmod(tmp_path, 0o600)
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Profiles ---


def _profile_path(name: str) -> Path:
    if not _PROFILE_NAME_RE.match(name):
        raise ConfigError(
            f"Invalid profile name '{name}': use letters, digits, '.', '_' or '-'"
        )
    return get_profiles_dir() / f"{name}.json"


def list_profiles() -> list[str]:
    """Return the names of all stored profiles, sorted alphabetically."""
    return sorted(p.stem for p in get_profiles_dir().glob("*.json") if p.is_file())


def profile_exists(name: str) -> bool:
    return _profile_path(name).is_file()


def load_profile(name: str) -> Profile:
    """Load and validate a stored profile.

    Raises:
        ConfigError: If the profile does not exist, is not valid JSON, or
            fails validation.
    """
    path = _profile_path(name)
    if not path.is_file():
        raise ConfigError(f"Profile '{name}' not found at {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return Profile.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid profile '{name}' at {path}: {exc}") from exc


def save_profile(profile: Profile) -> Path:
    """Persist *profile* atomically and return the file it was written to."""
    path = _profile_path(profile.name)
    data = profile.model_dump(mode="json")
    _atomic_write(path, json.dumps(data, indent=2) + "\n")
    return path


def delete_profile(name: str) -> None:
    """Delete a stored profile.

    Raises:
        ConfigError: If the profile does not exist.
    """
    path = _profile_path(name)
    if not path.is_file():
        raise ConfigError(f"Profile '{name}' not found at {path}")
    path.unlink()


# --- Precedence resolution ---


def resolve_profile(
    cli_profile: Optional[str] = None,
    cli_login: Optional[str] = None,
    cli_base_url: Optional[str] = None,
) -> Profile:
    """Resolve the effective connection settings.

    Precedence (high to low):
        1. CLI flags (``cli_profile``, ``cli_login``, ``cli_base_url``)
        2. Environment (``COMAGIC_PROFILE``, ``COMAGIC_LOGIN``,
           ``COMAGIC_BASE_URL``)
        3. The stored profile
        4. Model defaults

    A profile named by flag or environment must exist. Without a name, the
    only stored profile is used if there is exactly one; otherwise an
    unsaved ``default`` profile is built from flags and environment.

    Raises:
        ConfigError: If a named profile is missing or invalid.
    """
    name = cli_profile or os.environ.get(ENV_PROFILE) or None
    if name is not None:
        profile = load_profile(name)
    else:
        stored = list_profiles()
        if len(stored) == 1:
            profile = load_profile(stored[0])
        else:
            profile = Profile(name=DEFAULT_PROFILE_NAME)

    env_login = os.environ.get(ENV_LOGIN)
    if cli_login:
        profile.login = cli_login
    elif env_login:
        profile.login = env_login

    env_base_url = os.environ.get(ENV_BASE_URL)
    if cli_base_url:
        profile.base_url = cli_base_url
    elif env_base_url:
        profile.base_url = env_base_url

    return profile


def resolve_password(profile: Profile) -> str:
    """Return the password for *profile*.

    ``COMAGIC_PASSWORD`` wins over the profile's ``password_source``.
    """
    env_password = os.environ.get(ENV_PASSWORD)
    if env_password:
        return env_password
    return resolve_credential(profile.password_source)


# --- Credential source resolution ---


def resolve_credential(source: str) -> str:
    """Resolve a secret from its source descriptor.

    Supported formats:
        - ``"env:VAR_NAME"`` -- reads ``os.environ["VAR_NAME"]``
        - ``"file:/path/to/file"`` -- reads the file, stripped of whitespace
        - ``"prompt"`` -- prompts interactively (requires a TTY)

    Raises:
        ConfigError: If the source can't be resolved or is unknown.
    """
    if source.startswith("env:"):
        var_name = source[4:]
        value = os.environ.get(var_name)
        if value is None:
            raise ConfigError(
                f"Environment variable '{var_name}' is not set (source: {source})"
            )
        return value

    if source.startswith("file:"):
        path = Path(source[5:]).expanduser()
        if not path.is_file():
            raise ConfigError(f"Credential file not found: {path} (source: {source})")
        try:
            return path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise ConfigError(f"Cannot read credential file {path}: {exc}") from exc

    if source == "prompt":
        if not sys.stdin.isatty():
            raise ConfigError(
                "Cannot prompt for the password: stdin is not a TTY (source: prompt)"
            )
        return getpass.getpass("CoMagic password: ")

    raise ConfigError(f"Unknown credential source format: {source}")
