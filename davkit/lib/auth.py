"""
Authentication utilities for the WebDAV client.

The challenge/response handling itself is done by httpx, this module
only decides which httpx auth object to hand over.
"""

from __future__ import annotations

import httpx

AUTH_TYPES = ("digest", "basic", "bearer")


class HTTPBearerAuth(httpx.Auth):
    """Bearer token authentication for httpx."""

    def __init__(self, token: str | bytes):
        if isinstance(token, bytes):
            token = token.decode("utf-8")
        self.token = token

    def __eq__(self, other: object) -> bool:
        return self.token == getattr(other, "token", None)

    def auth_flow(self, request: httpx.Request):
        request.headers["Authorization"] = f"Bearer {self.token}"
        yield request


def extract_auth_types(header: str) -> set[str]:
    """
    Extract authentication types from WWW-Authenticate header.

    Example:
        >>> sorted(extract_auth_types('Basic realm="test", Digest realm="test"'))
        ['basic', 'digest']

    Reference:
        https://developer.mozilla.org/en-US/docs/Web/HTTP/Headers/WWW-Authenticate#syntax
    """
    return {h.split()[0] for h in header.lower().split(",") if h.strip()}


def qualified_username(username: str, domain: str | None = None) -> str:
    """``DOMAIN\\user`` when a domain is given, as Windows servers expect it."""
    if domain:
        return f"{domain}\\{username}"
    return username


def build_auth(
    username: str | None,
    password: str | None,
    domain: str | None = None,
    auth_type: str | None = "digest",
) -> httpx.Auth | None:
    """
    Build the httpx auth object for the given credentials.

    Returns None when there is nothing to authenticate with.

    Raises:
        ValueError: on an unknown auth_type
    """
    if auth_type is None:
        return None
    auth_type = auth_type.lower()
    if auth_type not in AUTH_TYPES:
        raise ValueError(
            f"Unsupported auth type {auth_type}, expected one of {', '.join(AUTH_TYPES)}"
        )

    if auth_type == "bearer":
        if not password:
            return None
        return HTTPBearerAuth(password)

    if username is None:
        return None
    username = qualified_username(username, domain)
    if auth_type == "digest":
        return httpx.DigestAuth(username, password or "")
    return httpx.BasicAuth(username, password or "")
