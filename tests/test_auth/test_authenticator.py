"""Tests for the login exchange."""

from __future__ import annotations

import asyncio
from typing import AsyncIterator, Iterator

import httpx
import pytest

from comagic.auth.authenticator import LOGIN_PATH, AsyncAuthenticator, Authenticator
from comagic.exceptions import (
    LoginError,
    LoginHTTPError,
    LoginRejectedError,
    LoginTransportError,
    MalformedResponseError,
)
from comagic.models import Credentials


class _BrokenStream(httpx.SyncByteStream):
    def __iter__(self) -> Iterator[bytes]:
        raise httpx.ReadError("connection reset")


class _BrokenAsyncStream(httpx.AsyncByteStream):
    def __aiter__(self) -> AsyncIterator[bytes]:
        raise httpx.ReadError("connection reset")


BASE_URL = "http://api.example.test"


def _credentials(login: str = "user", password: str = "secret") -> Credentials:
    return Credentials(login=login, password=password)


def _authenticator(fake_api, base_url: str = BASE_URL) -> Authenticator:
    return Authenticator(_credentials(), base_url, fake_api.transport())


# ---------------------------------------------------------------------------
# Request shape
# ---------------------------------------------------------------------------


class TestLoginRequest:
    def test_posts_to_login_path(self, fake_api) -> None:
        _authenticator(fake_api).authenticate()
        request = fake_api.login_requests[0]
        assert request.method == "POST"
        assert str(request.url) == f"{BASE_URL}{LOGIN_PATH}"

    def test_login_path_appended_to_base_path(self, fake_api) -> None:
        _authenticator(fake_api, "http://api.example.test/v2/").authenticate()
        assert fake_api.login_requests[0].url.path == "/v2/api/login/"

    def test_accept_header(self, fake_api) -> None:
        _authenticator(fake_api).authenticate()
        assert fake_api.login_requests[0].headers["accept"] == "application/json"

    def test_multipart_body_carries_login_and_password(self, fake_api) -> None:
        _authenticator(fake_api).authenticate()
        request = fake_api.login_requests[0]
        assert request.headers["content-type"].startswith("multipart/form-data; boundary=")
        body = request.content
        assert b'name="login"' in body
        assert b"user" in body
        assert b'name="password"' in body
        assert b"secret" in body
        assert b"filename=" not in body

    def test_no_session_key_on_login(self, fake_api) -> None:
        _authenticator(fake_api).authenticate()
        assert "session_key" not in fake_api.login_requests[0].url.params


# ---------------------------------------------------------------------------
# Response classification
# ---------------------------------------------------------------------------


class TestClassification:
    def test_success_returns_session_key(self, fake_api) -> None:
        assert _authenticator(fake_api).authenticate() == "key-1"

    def test_each_call_logs_in_again(self, fake_api) -> None:
        auth = _authenticator(fake_api)
        assert auth.authenticate() == "key-1"
        assert auth.authenticate() == "key-2"
        assert fake_api.login_calls == 2

    @pytest.mark.parametrize("status", [400, 401, 403, 404, 500, 503])
    def test_error_status(self, fake_api, status: int) -> None:
        fake_api.login_status = status
        with pytest.raises(LoginHTTPError) as exc_info:
            _authenticator(fake_api).authenticate()
        assert exc_info.value.status_code == status

    def test_error_status_wins_over_successful_body(self, fake_api) -> None:
        fake_api.login_status = 500
        fake_api.login_body = {"success": True, "data": {"session_key": "abc"}}
        with pytest.raises(LoginHTTPError):
            _authenticator(fake_api).authenticate()

    def test_redirect_status_is_not_an_error_status(self, fake_api) -> None:
        fake_api.login_status = 302
        assert _authenticator(fake_api).authenticate() == "key-1"

    def test_rejected(self, fake_api) -> None:
        fake_api.login_body = {"success": False, "message": "bad credentials"}
        with pytest.raises(LoginRejectedError) as exc_info:
            _authenticator(fake_api).authenticate()
        assert exc_info.value.message == "bad credentials"
        assert "bad credentials" in str(exc_info.value)

    def test_rejected_with_null_fields(self, fake_api) -> None:
        fake_api.login_body = {"success": False, "message": None, "data": None}
        with pytest.raises(LoginRejectedError) as exc_info:
            _authenticator(fake_api).authenticate()
        assert exc_info.value.message == ""

    @pytest.mark.parametrize(
        "raw",
        [
            b"",
            b"<html>gateway</html>",
            b"[1, 2, 3]",
            b'{"message": "no success flag"}',
            b'{"success": "maybe"}',
        ],
    )
    def test_malformed(self, fake_api, raw: bytes) -> None:
        fake_api.login_raw = raw
        with pytest.raises(MalformedResponseError):
            _authenticator(fake_api).authenticate()

    def test_success_without_key_is_malformed(self, fake_api) -> None:
        fake_api.login_body = {"success": True, "message": "", "data": {}}
        with pytest.raises(MalformedResponseError, match="no session key"):
            _authenticator(fake_api).authenticate()

    def test_transport_failure(self, fake_api) -> None:
        fake_api.login_error = httpx.ConnectError("connection refused")
        with pytest.raises(LoginTransportError) as exc_info:
            _authenticator(fake_api).authenticate()
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    def test_all_failures_are_login_errors(self, fake_api) -> None:
        fake_api.login_status = 500
        with pytest.raises(LoginError):
            _authenticator(fake_api).authenticate()


class TestAsyncAuthenticator:
    def test_success(self, fake_api) -> None:
        auth = AsyncAuthenticator(_credentials(), BASE_URL, fake_api.transport())
        assert asyncio.run(auth.authenticate()) == "key-1"
        body = fake_api.login_requests[0].content
        assert b'name="login"' in body

    def test_rejected(self, fake_api) -> None:
        fake_api.login_body = {"success": False, "message": "bad credentials"}
        auth = AsyncAuthenticator(_credentials(), BASE_URL, fake_api.transport())
        with pytest.raises(LoginRejectedError):
            asyncio.run(auth.authenticate())

    def test_transport_failure(self, fake_api) -> None:
        fake_api.login_error = httpx.ReadTimeout("timed out")
        auth = AsyncAuthenticator(_credentials(), BASE_URL, fake_api.transport())
        with pytest.raises(LoginTransportError):
            asyncio.run(auth.authenticate())


def _gzip_garbage(request: httpx.Request) -> httpx.Response:
    return httpx.Response(
        200,
        headers={"Content-Encoding": "gzip"},
        stream=httpx.ByteStream(b"not gzip"),
    )


class TestUnreadableBodies:
    def test_error_status_checked_before_body(self) -> None:
        transport = httpx.MockTransport(lambda r: httpx.Response(500, stream=_BrokenStream()))
        with pytest.raises(LoginHTTPError) as exc_info:
            Authenticator(_credentials(), BASE_URL, transport).authenticate()
        assert exc_info.value.status_code == 500

    def test_body_read_failure_on_success_status(self) -> None:
        transport = httpx.MockTransport(lambda r: httpx.Response(200, stream=_BrokenStream()))
        with pytest.raises(LoginTransportError, match="connection reset"):
            Authenticator(_credentials(), BASE_URL, transport).authenticate()

    def test_bad_content_encoding(self) -> None:
        transport = httpx.MockTransport(_gzip_garbage)
        with pytest.raises(MalformedResponseError) as exc_info:
            Authenticator(_credentials(), BASE_URL, transport).authenticate()
        assert isinstance(exc_info.value.__cause__, httpx.DecodingError)

    def test_bad_content_encoding_decoded_eagerly(self) -> None:
        transport = httpx.MockTransport(
            lambda r: httpx.Response(
                200, headers={"Content-Encoding": "gzip"}, content=b"not gzip"
            )
        )
        with pytest.raises(MalformedResponseError):
            Authenticator(_credentials(), BASE_URL, transport).authenticate()

    def test_async_error_status_checked_before_body(self) -> None:
        transport = httpx.MockTransport(
            lambda r: httpx.Response(503, stream=_BrokenAsyncStream())
        )
        auth = AsyncAuthenticator(_credentials(), BASE_URL, transport)
        with pytest.raises(LoginHTTPError) as exc_info:
            asyncio.run(auth.authenticate())
        assert exc_info.value.status_code == 503

    def test_async_bad_content_encoding(self) -> None:
        auth = AsyncAuthenticator(_credentials(), BASE_URL, httpx.MockTransport(_gzip_garbage))
        with pytest.raises(MalformedResponseError):
            asyncio.run(auth.authenticate())
