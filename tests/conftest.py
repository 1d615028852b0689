"""Shared test fixtures for comagic.

Provides a fake CoMagic API served through :class:`httpx.MockTransport`,
a controllable clock, and an isolated config environment. These fixtures
are discovered by pytest automatically.
"""

from __future__ import annotations

import json
import threading
import time
from pathlib import Path
from typing import Any, Optional

import httpx
import pytest

from comagic.output import OutputManager, reset_output, set_output


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Install a quiet manager and drop it after the test.

    The OutputManager caches sys.stdout/sys.stderr at creation time, which
    goes stale once CliRunner restores the real streams.
    """
    set_output(OutputManager(no_color=True, quiet=True))
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Fake API
# ---------------------------------------------------------------------------


class FakeAPI:
    """In-memory stand-in for the CoMagic API.

    Login calls hand out ``key-1``, ``key-2``, ... unless ``login_status``
    or ``login_body`` override the answer. Every other request is recorded
    and answered with ``business_response``.
    """

    def __init__(self) -> None:
        self.login_status = 200
        self.login_body: Optional[Any] = None
        self.login_raw: Optional[bytes] = None
        self.login_delay = 0.0
        self.login_error: Optional[Exception] = None
        self.business_error: Optional[Exception] = None
        self.business_response: dict[str, Any] = {"success": True, "data": []}
        self.login_requests: list[httpx.Request] = []
        self.requests: list[httpx.Request] = []
        self._lock = threading.Lock()

    @property
    def login_calls(self) -> int:
        return len(self.login_requests)

    def handler(self, request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/api/login/") and request.method == "POST":
            return self._login(request)
        if self.business_error is not None:
            raise self.business_error
        with self._lock:
            self.requests.append(request)
        return httpx.Response(200, json=self.business_response)

    def _login(self, request: httpx.Request) -> httpx.Response:
        with self._lock:
            self.login_requests.append(request)
            number = len(self.login_requests)
        if self.login_delay:
            time.sleep(self.login_delay)
        if self.login_error is not None:
            raise self.login_error
        if self.login_raw is not None:
            return httpx.Response(self.login_status, content=self.login_raw)
        body = self.login_body
        if body is None:
            body = {"success": True, "message": "", "data": {"session_key": f"key-{number}"}}
        return httpx.Response(self.login_status, content=json.dumps(body).encode())

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def fake_api() -> FakeAPI:
    return FakeAPI()


class FakeClock:
    """Manually advanced replacement for :func:`time.monotonic`."""

    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


# ---------------------------------------------------------------------------
# Isolated configuration
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the XDG directories at *tmp_path* and clear ``COMAGIC_*`` variables."""
    monkeypatch.setattr("comagic.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    for var in ("COMAGIC_PROFILE", "COMAGIC_LOGIN", "COMAGIC_PASSWORD", "COMAGIC_BASE_URL"):
        monkeypatch.delenv(var, raising=False)
    return tmp_path
