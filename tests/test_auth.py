#!/usr/bin/env python
"""
Tests for choosing the httpx auth object.
"""
import base64

import httpx
import pytest

from davkit.lib.auth import build_auth
from davkit.lib.auth import extract_auth_types
from davkit.lib.auth import HTTPBearerAuth
from davkit.lib.auth import qualified_username


class TestExtractAuthTypes:
    def test_single(self):
        assert extract_auth_types('Basic realm="dav"') == {"basic"}

    def test_several(self):
        header = 'Digest realm="dav", nonce="abc", NTLM, Negotiate'
        assert {"digest", "ntlm", "negotiate"} <= extract_auth_types(header)

    def test_empty(self):
        assert extract_auth_types("") == set()


class TestQualifiedUsername:
    def test_domain(self):
        assert qualified_username("user", "CORP") == "CORP\\user"

    def test_no_domain(self):
        assert qualified_username("user") == "user"
        assert qualified_username("user", "") == "user"


class TestBuildAuth:
    def test_digest_is_default(self):
        assert isinstance(build_auth("user", "pw"), httpx.DigestAuth)

    def test_basic_with_domain(self):
        auth = build_auth("user", "pw", "CORP", auth_type="Basic")
        assert isinstance(auth, httpx.BasicAuth)
        request = next(auth.auth_flow(httpx.Request("GET", "https://dav.example.com")))
        expected = base64.b64encode(b"CORP\\user:pw").decode("ascii")
        assert request.headers["Authorization"] == "Basic " + expected

    def test_bearer(self):
        auth = build_auth(None, "token", auth_type="bearer")
        assert auth == HTTPBearerAuth("token")
        request = next(auth.auth_flow(httpx.Request("GET", "https://dav.example.com")))
        assert request.headers["Authorization"] == "Bearer token"

    def test_bearer_bytes_token(self):
        assert HTTPBearerAuth(b"token").token == "token"

    def test_nothing_to_authenticate_with(self):
        assert build_auth(None, None) is None
        assert build_auth(None, None, auth_type="bearer") is None
        assert build_auth("user", "pw", auth_type=None) is None

    def test_unknown_type(self):
        with pytest.raises(ValueError):
            build_auth("user", "pw", auth_type="ntlm")
