"""Response formatting bridge -- maps :class:`httpx.Response` to the output system.

The CoMagic API wraps most payloads in the same ``success`` / ``message`` /
``data`` envelope as the login endpoint. :func:`format_api_response` prints
the status line to stderr and the body to stdout; :func:`extract_response_data`
returns the decoded body for callers that want the data itself.

See Also:
    :mod:`comagic.output` -- the output manager that renders data.
"""

from __future__ import annotations

from typing import Any

import httpx

from comagic.output import get_output


def format_api_response(response: httpx.Response) -> None:
    """Print the status line to stderr and the decoded body to stdout.

    Args:
        response: A fully read :class:`httpx.Response`.
    """
    output = get_output()
    output.info(f"HTTP {response.status_code} {response.reason_phrase or ''}".rstrip())

    data = extract_response_data(response)
    if data is not None:
        output.format_response(data)


def extract_response_data(response: httpx.Response) -> Any:
    """Return the body as decoded JSON, raw text, or ``None`` when empty."""
    if not response.content:
        return None

    try:
        return response.json()
    except ValueError:
        return response.text
