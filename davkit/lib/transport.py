"""
Transport session factory.

Every WebDAV operation asks the factory for a fresh ``httpx.AsyncClient``
and closes it when the operation is done, so no connection state is
shared between operations.
"""
import logging
from typing import Callable
from typing import Mapping
from typing import Optional
from typing import Tuple
from typing import Union

import httpx

log = logging.getLogger("davkit")

SessionFactoryType = Callable[[], httpx.AsyncClient]


class SessionFactory:
    """
    Produces ``httpx.AsyncClient`` objects bound to one set of
    credentials and one TLS trust policy.

    Args:
        auth: httpx auth object (Digest, Basic, bearer) or None
        ignore_cert_errors: Do not verify the server certificate
        ssl_cert: Client certificate (path or (cert, key) tuple)
        proxy: Proxy server URL
        headers: Default headers for every request
        transport: Replaces the network transport, f.ex. a httpx.MockTransport
    """

    def __init__(
        self,
        auth: Optional[httpx.Auth] = None,
        ignore_cert_errors: bool = False,
        ssl_cert: Union[str, Tuple[str, str], None] = None,
        proxy: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.auth = auth
        self.verify = not ignore_cert_errors
        self.ssl_cert = ssl_cert
        self.proxy = proxy
        self.headers = dict(headers or {})
        self.transport = transport

    def __call__(self) -> httpx.AsyncClient:
        transport = self.transport
        if transport is None and self.proxy:
            transport = httpx.AsyncHTTPTransport(
                proxy=self.proxy, verify=self.verify, cert=self.ssl_cert
            )

        ## One client per operation, no point in keeping connections alive
        limits = httpx.Limits(max_keepalive_connections=0)

        client_kwargs = dict(
            auth=self.auth,
            headers=self.headers,
            ## Timing policy is left to the caller (cancel event, asyncio.timeout)
            timeout=None,
            verify=self.verify,
            transport=transport,
            limits=limits,
        )
        if self.ssl_cert is not None:
            client_kwargs["cert"] = self.ssl_cert
        return httpx.AsyncClient(**client_kwargs)
