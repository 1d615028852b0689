"""Session handling for the CoMagic API.

- :class:`SessionCache` -- the current session key and whether it is still
  usable.
- :class:`Authenticator` / :class:`AsyncAuthenticator` -- the login exchange
  that produces a fresh session key.

Typical usage::

    from comagic.auth import Authenticator, SessionCache

    cache = SessionCache()
    if not cache.is_valid():
        cache.update(Authenticator(credentials, base_url, transport).authenticate())
"""

from comagic.auth.authenticator import LOGIN_PATH, AsyncAuthenticator, Authenticator
from comagic.auth.session import CLOCK_SKEW_MARGIN, SESSION_LIFETIME, Session, SessionCache

__all__ = [
    "AsyncAuthenticator",
    "Authenticator",
    "CLOCK_SKEW_MARGIN",
    "LOGIN_PATH",
    "SESSION_LIFETIME",
    "Session",
    "SessionCache",
]
