"""URL and header rewriting for requests sent to the CoMagic API.

The API wants every call to carry the session key as a ``session_key``
query parameter, to ask for JSON, and to use a path ending in a slash.
The helpers here are pure functions over :class:`httpx.URL`;
:func:`rewrite_request` applies all of them to an :class:`httpx.Request`
in place.
"""

from __future__ import annotations

import httpx

SESSION_KEY_PARAM = "session_key"


def resolve_url(base_url: httpx.URL, url: httpx.URL) -> httpx.URL:
    """Resolve *url* against *base_url* unless it is already absolute.

    The base URL acts as a prefix: its scheme, host and path are kept and
    the relative URL's path and query are appended to it, the same way
    :class:`httpx.Client` treats its ``base_url``. A protocol-relative
    reference (``//host/path``) keeps its own host and takes the base
    URL's scheme.

    Example::

        >>> resolve_url(httpx.URL("http://api.example.test/v2"), httpx.URL("/domains/"))
        URL('http://api.example.test/v2/domains/')
    """
    if url.is_absolute_url:
        return url
    if url.host:
        return url.copy_with(scheme=base_url.scheme)
    prefix = base_url.raw_path.split(b"?", 1)[0].rstrip(b"/")
    raw_path = prefix + b"/" + url.raw_path.lstrip(b"/")
    return base_url.copy_with(raw_path=raw_path)


def with_session_key(url: httpx.URL, session_key: str) -> httpx.URL:
    """Return *url* with ``session_key`` set, replacing any existing value."""
    return url.copy_set_param(SESSION_KEY_PARAM, session_key)


def with_trailing_slash(url: httpx.URL) -> httpx.URL:
    """Return *url* with a path ending in ``/``."""
    if url.path.endswith("/"):
        return url
    return url.copy_with(path=url.path + "/")


def rewrite_request(request: httpx.Request, base_url: httpx.URL, session_key: str) -> httpx.Request:
    """Prepare *request* for the CoMagic API and return it.

    Sets ``Accept: application/json``, resolves a relative URL against
    *base_url*, injects the session key and normalizes the trailing slash.
    The request is modified in place.
    """
    request.headers["Accept"] = "application/json"
    url = resolve_url(base_url, request.url)
    url = with_session_key(url, session_key)
    request.url = with_trailing_slash(url)
    # A request built from a relative URL carries no Host header.
    if "Host" not in request.headers:
        request.headers["Host"] = request.url.netloc.decode("ascii")
    return request
