"""Exception hierarchy for comagic.

All exceptions inherit from :class:`ComagicError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`comagic.exit_codes`.
The CLI entry point in :func:`comagic.app.main` catches ``ComagicError``
and exits with the appropriate code.

The login exchange reports its failures as :class:`LoginError` subclasses.
The transport never lets those escape on their own: it wraps them in
:class:`AuthFailedError` so that callers can tell "could not log in" apart
from "the business request itself failed" (:class:`TransportFailedError`).

Subclass hierarchy::

    ComagicError                  (exit 1)
    +-- InvalidRequestError       (exit 2)
    +-- ConfigError               (exit 1)
    +-- LoginError                (exit 3)
    |   +-- LoginTransportError
    |   +-- LoginHTTPError
    |   +-- MalformedResponseError
    |   +-- LoginRejectedError
    +-- AuthFailedError           (exit 3)
    +-- TransportFailedError      (exit 6)
"""

from __future__ import annotations

from comagic.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
)


class ComagicError(Exception):
    """Base exception for all comagic errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`comagic.exit_codes`.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidRequestError(ComagicError):
    """Raised when the transport is handed no request at all."""

    exit_code = EXIT_INVALID_USAGE


class ConfigError(ComagicError):
    """Raised for configuration problems (missing profiles, invalid JSON, bad credential sources)."""

    exit_code = EXIT_GENERIC_FAILURE


# --- Login exchange ---


class LoginError(ComagicError):
    """Base class for every way the login exchange can fail."""

    exit_code = EXIT_AUTH_FAILURE


class LoginTransportError(LoginError):
    """The login request could not be sent or its response could not be read."""


class LoginHTTPError(LoginError):
    """The login endpoint answered with an HTTP status of 400 or above.

    Args:
        status_code: The HTTP status returned by the login endpoint.
    """

    def __init__(self, status_code: int, reason: str = ""):
        message = f"login endpoint returned HTTP {status_code}"
        if reason:
            message = f"{message} {reason}"
        super().__init__(message)
        self.status_code = status_code


class MalformedResponseError(LoginError):
    """The login response body is not the expected JSON envelope."""


class LoginRejectedError(LoginError):
    """The API decoded the credentials and explicitly refused them.

    Args:
        message: The ``message`` field of the API's response envelope.
    """

    def __init__(self, message: str):
        super().__init__(f"login rejected: {message}" if message else "login rejected")
        self.message = message


# --- Dispatch ---


class AuthFailedError(ComagicError):
    """A request was not sent because no session key could be obtained.

    Args:
        cause: The :class:`LoginError` describing why the login failed.
    """

    exit_code = EXIT_AUTH_FAILURE

    def __init__(self, cause: LoginError):
        super().__init__(f"could not authorize: {cause}")
        self.cause = cause


class TransportFailedError(ComagicError):
    """The underlying transport failed to complete an authenticated request.

    Args:
        cause: The :class:`httpx.TransportError` raised by the wrapped
            transport.
    """

    exit_code = EXIT_CONNECTION_ERROR

    def __init__(self, cause: Exception):
        super().__init__(f"request failed: {cause}")
        self.cause = cause
