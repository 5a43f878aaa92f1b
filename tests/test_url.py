#!/usr/bin/env python
# -*- encoding: utf-8 -*-
from urllib.parse import unquote

import pytest

from davkit.lib.url import build_uri
from davkit.lib.url import escape_path
from davkit.lib.url import quote_segment
from davkit.lib.url import URL

SERVER = "https://dav.example.com"


class TestEscaping:
    @pytest.mark.parametrize(
        "segment,expected",
        [
            ("plain.txt", "plain.txt"),
            ("with space.txt", "with%20space.txt"),
            ("it's", "it%27s"),
            ("(1)", "%281%29"),
            ("hello!", "hello%21"),
            ("star*", "star%2A"),
            ("100%", "100%25"),
            ("a+b&c=d?#", "a%2Bb%26c%3Dd%3F%23"),
            ("tilde~dash-dot._", "tilde~dash-dot._"),
            ("blåbær", "bl%C3%A5b%C3%A6r"),
        ],
    )
    def test_quote_segment(self, segment, expected) -> None:
        assert quote_segment(segment) == expected

    def test_escape_path_keeps_separators(self) -> None:
        assert escape_path("/Shared Documents/a b/") == "/Shared%20Documents/a%20b/"

    def test_backslash_is_a_separator(self) -> None:
        assert escape_path("\\Shared Documents\\file.txt") == "/Shared%20Documents/file.txt"
        assert escape_path("/mixed\\separators/x") == "/mixed/separators/x"

    def test_empty_path(self) -> None:
        assert escape_path("") == ""
        assert escape_path(None) == ""

    def test_unescape_gives_back_the_path(self) -> None:
        path = "/Shared Documents/Ünïcødé (copy) it's!.txt"
        assert unquote(escape_path(path)) == path


class TestBuildUri:
    def test_literal_concatenation(self) -> None:
        assert str(build_uri(SERVER, "/a b.txt")) == SERVER + "/a%20b.txt"
        assert str(build_uri(SERVER + "/dav", "/a")) == SERVER + "/dav/a"

    def test_accepts_url_objects(self) -> None:
        assert str(build_uri(URL(SERVER), "/x")) == SERVER + "/x"

    @pytest.mark.parametrize(
        "server",
        ["dav.example.com", "ftp://dav.example.com", "https://", "https://host:port"],
    )
    def test_invalid_uri(self, server) -> None:
        with pytest.raises(ValueError):
            build_uri(server, "/a")


class TestURL:
    def test_validate(self) -> None:
        URL(SERVER + "/a%20b").validate()
        with pytest.raises(ValueError):
            URL(SERVER + "/a b").validate()
        with pytest.raises(ValueError):
            URL("https://dav.example.com/\x01").validate()

    def test_unauth(self) -> None:
        url = URL("https://user:pw@dav.example.com:8443/dav/")
        assert url.is_auth()
        assert url.username == "user"
        assert str(url.unauth()) == "https://dav.example.com:8443/dav/"
        assert not url.unauth().is_auth()

    def test_unauth_ipv6(self) -> None:
        url = URL("https://user:pw@[::1]:8443/dav/")
        assert str(url.unauth()) == "https://[::1]:8443/dav/"
        URL(str(url.unauth())).validate()

    def test_unauth_without_credentials(self) -> None:
        url = URL(SERVER + "/dav")
        assert url.unauth() is url

    def test_objectify(self) -> None:
        url = URL(SERVER)
        assert URL.objectify(url) is url
        assert URL.objectify(None) is None
        assert isinstance(URL.objectify(SERVER), URL)
