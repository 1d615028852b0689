"""Tests for request URL and header rewriting."""

from __future__ import annotations

import httpx
import pytest

from comagic.rewrite import (
    SESSION_KEY_PARAM,
    resolve_url,
    rewrite_request,
    with_session_key,
    with_trailing_slash,
)


BASE = httpx.URL("http://api.example.test")


class TestResolveUrl:
    def test_absolute_unchanged(self) -> None:
        url = httpx.URL("https://other.example.test/x?y=1")
        assert resolve_url(BASE, url) is url

    def test_protocol_relative_keeps_host(self) -> None:
        url = resolve_url(BASE, httpx.URL("//other.example.test/x?y=1"))
        assert str(url) == "http://other.example.test/x?y=1"

    @pytest.mark.parametrize(
        "base, relative, expected",
        [
            ("http://api.example.test", "/domains/", "http://api.example.test/domains/"),
            ("http://api.example.test/", "domains/", "http://api.example.test/domains/"),
            ("http://api.example.test/v2", "/domains/", "http://api.example.test/v2/domains/"),
            ("http://api.example.test/v2/", "/domains/", "http://api.example.test/v2/domains/"),
            (
                "http://api.example.test?ignored=1",
                "/domains/?limit=5",
                "http://api.example.test/domains/?limit=5",
            ),
        ],
    )
    def test_prefix_resolution(self, base: str, relative: str, expected: str) -> None:
        assert str(resolve_url(httpx.URL(base), httpx.URL(relative))) == expected


class TestSessionKey:
    def test_added(self) -> None:
        url = with_session_key(httpx.URL("http://api.example.test/a/"), "abc")
        assert url.params[SESSION_KEY_PARAM] == "abc"

    def test_replaces_every_existing_value(self) -> None:
        url = httpx.URL("http://api.example.test/a/?session_key=x&session_key=y&limit=1")
        url = with_session_key(url, "abc")
        assert url.params.get_list("session_key") == ["abc"]
        assert url.params["limit"] == "1"


class TestTrailingSlash:
    def test_added(self) -> None:
        assert with_trailing_slash(httpx.URL("http://h/foo")).path == "/foo/"

    def test_root(self) -> None:
        assert with_trailing_slash(httpx.URL("http://h")).path == "/"

    def test_query_kept(self) -> None:
        url = with_trailing_slash(httpx.URL("http://h/foo?a=1"))
        assert str(url) == "http://h/foo/?a=1"

    def test_idempotent(self) -> None:
        url = httpx.URL("http://h/foo/")
        assert with_trailing_slash(url) is url


class TestRewriteRequest:
    def test_in_place(self) -> None:
        request = httpx.Request("GET", "/calls", headers={"Accept": "*/*"})
        result = rewrite_request(request, BASE, "abc")
        assert result is request
        assert str(request.url) == "http://api.example.test/calls/?session_key=abc"
        assert request.headers["Accept"] == "application/json"
        assert request.headers["Host"] == "api.example.test"

    def test_existing_host_header_kept(self) -> None:
        request = httpx.Request("GET", "http://api.example.test:8080/calls/")
        rewrite_request(request, BASE, "abc")
        assert request.headers["Host"] == "api.example.test:8080"
