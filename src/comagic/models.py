"""Canonical Pydantic models shared across all comagic modules.

The models fall into two groups:

**Wire models** -- decoded from the CoMagic API:
    :class:`AuthResponse` and its nested :class:`AuthResponseData`.

**Configuration models** -- supplied by callers or persisted as JSON in the
user's config directory:
    :class:`Credentials`, :class:`RequestConfig` and :class:`Profile`.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

DEFAULT_BASE_URL = "http://api.comagic.ru"
"""Origin of the production CoMagic API."""


# --- Wire models ---


class AuthResponseData(BaseModel):
    """The ``data`` object of a login response."""

    model_config = ConfigDict(extra="ignore")

    session_key: str = ""


class AuthResponse(BaseModel):
    """JSON envelope returned by ``POST /api/login/``.

    ``success`` is mandatory: a body without it is not a login response at
    all and is reported as malformed. The remaining fields default to empty
    values because the API omits them on failure.

    Example::

        AuthResponse.model_validate_json(
            b'{"success": true, "message": "", "data": {"session_key": "abc"}}'
        )
    """

    model_config = ConfigDict(extra="ignore")

    success: bool
    message: str = ""
    data: AuthResponseData = Field(default_factory=AuthResponseData)

    @field_validator("message", mode="before")
    @classmethod
    def _none_message(cls, value: object) -> object:
        return "" if value is None else value

    @field_validator("data", mode="before")
    @classmethod
    def _none_data(cls, value: object) -> object:
        return {} if value is None else value


# --- Configuration models ---


class Credentials(BaseModel):
    """Login and password used for the login exchange.

    The password is held as a :class:`~pydantic.SecretStr` so it never
    shows up in reprs or tracebacks.
    """

    model_config = ConfigDict(frozen=True)

    login: str = Field(min_length=1)
    password: SecretStr

    @field_validator("password")
    @classmethod
    def _password_not_empty(cls, value: SecretStr) -> SecretStr:
        if not value.get_secret_value():
            raise ValueError("password must not be empty")
        return value


class RequestConfig(BaseModel):
    """HTTP settings applied to the client built for a profile."""

    timeout: float = Field(default=30.0, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")


class Profile(BaseModel):
    """A named set of connection settings persisted by :mod:`comagic.config`.

    Example::

        Profile(name="prod", login="user", password_source="env:COMAGIC_PASSWORD")
    """

    name: str = Field(description="Profile identifier, also the file name")
    login: Optional[str] = Field(default=None, description="CoMagic login")
    password_source: str = Field(
        default="prompt",
        description="Password source: env:VAR, file:/path or prompt",
    )
    base_url: str = Field(default=DEFAULT_BASE_URL, description="API origin")
    request: RequestConfig = Field(default_factory=RequestConfig)
