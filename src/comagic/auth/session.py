"""In-memory session key cache with a fixed validity window.

CoMagic session keys expire on the server after a fixed time. The client
trusts a key for :data:`SESSION_LIFETIME` after it was issued and records
the issue time :data:`CLOCK_SKEW_MARGIN` earlier than the actual login, so
a key is renewed slightly before the server would drop it.

The cache does no locking of its own. The transports that own a cache
serialize the check-then-login-then-update sequence themselves.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Optional

SESSION_LIFETIME = 3 * 60 * 60.0
"""Seconds a session key is trusted after its recorded issue time."""

CLOCK_SKEW_MARGIN = 60.0
"""Seconds subtracted from the login time when recording the issue time."""


@dataclass(frozen=True)
class Session:
    """A session key and the (monotonic) time it was issued.

    An empty ``key`` means no session has been obtained yet.
    """

    key: str = ""
    issued_at: float = 0.0


class SessionCache:
    """Holds the current :class:`Session` and answers whether it is usable.

    Args:
        lifetime: Validity window in seconds.
        skew_margin: Seconds to backdate the issue time by in :meth:`update`
            when no explicit time is given.
        clock: Time source, :func:`time.monotonic` by default.

    Example::

        cache = SessionCache()
        cache.update("abc")
        assert cache.is_valid()
    """

    def __init__(
        self,
        lifetime: float = SESSION_LIFETIME,
        skew_margin: float = CLOCK_SKEW_MARGIN,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if lifetime <= 0:
            raise ValueError("session lifetime must be positive")
        if skew_margin < 0:
            raise ValueError("clock skew margin must not be negative")
        self._lifetime = lifetime
        self._skew_margin = skew_margin
        self._clock = clock
        self._session = Session()

    @property
    def lifetime(self) -> float:
        return self._lifetime

    @property
    def skew_margin(self) -> float:
        return self._skew_margin

    @property
    def session(self) -> Session:
        """The current session (possibly empty or expired)."""
        return self._session

    @property
    def key(self) -> str:
        return self._session.key

    def now(self) -> float:
        """Return the current time from the cache's clock."""
        return self._clock()

    def is_valid(self, now: Optional[float] = None) -> bool:
        """Return ``True`` if a key is present and younger than the lifetime.

        Args:
            now: Time to check against; the cache's clock when omitted.
        """
        if not self._session.key:
            return False
        if now is None:
            now = self._clock()
        return now - self._session.issued_at < self._lifetime

    def update(self, key: str, issued_at: Optional[float] = None) -> Session:
        """Replace the cached session unconditionally.

        Args:
            key: The new session key.
            issued_at: Recorded issue time. Defaults to the clock minus the
                skew margin.

        Returns:
            The newly stored :class:`Session`.
        """
        if issued_at is None:
            issued_at = self._clock() - self._skew_margin
        self._session = Session(key=key, issued_at=issued_at)
        return self._session

    def clear(self) -> None:
        """Forget the current session so the next check reports invalid."""
        self._session = Session()
