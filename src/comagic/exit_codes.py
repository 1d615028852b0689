"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~comagic.exceptions.ComagicError` subclass.
Shell wrappers can inspect the exit code to tell a rejected login apart
from an unreachable API without parsing stderr.

Example::

    $ comagic login --profile prod
    $ echo $?
    3   # EXIT_AUTH_FAILURE -- the API refused the credentials
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or an unusable request."""

EXIT_AUTH_FAILURE = 3
"""The login exchange failed or the API rejected the credentials."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""
