#!/usr/bin/env python
"""
Async WebDAV client.

``AsyncDAVClient`` has one coroutine per WebDAV verb.  Each of them
builds the target URI out of a filesystem-like path, sends one request
through a fresh httpx client, and either returns the result or raises
a ``DAVError`` carrying the status, reason and body of the failed
response.  Nothing is retried.

Every operation takes an optional ``cancel`` event; setting it aborts
the request and the operation raises ``asyncio.CancelledError``.

``get_davclient`` will return an AsyncDAVClient object, based either on
the parameters given, environmental variables or a configuration file.
"""
import asyncio
import logging
import sys
from typing import Any
from typing import BinaryIO
from typing import Mapping
from typing import Optional
from typing import Tuple
from typing import Union
from urllib.parse import unquote

import httpx
from lxml import etree
from lxml.etree import _Element

from davkit.elements.base import BaseElement
from davkit.lib import error
from davkit.lib.auth import build_auth
from davkit.lib.auth import extract_auth_types
from davkit.lib.cancel import cancellable
from davkit.lib.cancel import OperationCancelled
from davkit.lib.error import DAVError
from davkit.lib.progress import ProgressCallback
from davkit.lib.progress import ProgressStream
from davkit.lib.python_utilities import to_normal_str
from davkit.lib.transport import SessionFactory
from davkit.lib.transport import SessionFactoryType
from davkit.lib.url import build_uri
from davkit.lib.url import URL
from davkit.protocol.types import DAVMethod
from davkit.protocol.types import Depth
from davkit.protocol.types import EMPTY_ENTITY_METHODS
from davkit.protocol.types import OptionsResult

if sys.version_info < (3, 11):
    from typing_extensions import Self
else:
    from typing import Self

log = logging.getLogger("davkit")

XMLBody = Union[BaseElement, _Element, "etree._ElementTree", bytes, str]


def _serialize(body: Any) -> Optional[bytes]:
    """Turn the accepted kinds of XML bodies into bytes"""
    if body is None:
        return None
    if isinstance(body, BaseElement):
        body = body.xmlelement()
    if isinstance(body, (etree._Element, etree._ElementTree)):
        return etree.tostring(body, encoding="utf-8", xml_declaration=True)
    if isinstance(body, str):
        return body.encode("utf-8")
    return bytes(body)


def _require_body(body: Any, method: str) -> None:
    if body is None or (isinstance(body, (bytes, str)) and not body):
        raise ValueError("%s needs a request body" % method)


def _split_header(value: Optional[str]) -> list:
    if not value:
        return []
    return [x.strip() for x in value.split(",") if x.strip()]


class DAVResponse:
    """
    This class is a response from a successful DAV request.  End users
    of the library should not need to know anything about this class.
    Since we often get XML responses, it tries to parse it into
    `self.tree`
    """

    reason: str = ""
    tree: Optional[_Element] = None
    headers: httpx.Headers = None
    status: int = 0
    huge_tree: bool = False

    def __init__(self, response: httpx.Response, huge_tree: bool = False) -> None:
        self.headers = response.headers
        self.status = response.status_code
        self.huge_tree = huge_tree
        log.debug("response headers: " + str(self.headers))
        log.debug("response status: " + str(self.status))

        self._raw = response.content

        content_type = self.headers.get("Content-Type", "")
        xml = ["text/xml", "application/xml"]
        no_xml = ["text/plain", "text/html", "application/octet-stream"]
        expect_xml = self.status == 207 or any(
            (content_type.startswith(x) for x in xml)
        )
        expect_no_xml = any((content_type.startswith(x) for x in no_xml))
        if content_type and not expect_xml and not expect_no_xml:
            error.weirdness(f"Unexpected content type: {content_type}")
        if not self._raw:
            self._raw = b""
            self.tree = None
            log.debug("No content delivered")
        else:
            try:
                self.tree = etree.XML(
                    self._raw,
                    parser=etree.XMLParser(
                        remove_blank_text=True, huge_tree=self.huge_tree
                    ),
                )
            except etree.XMLSyntaxError:
                ## Malformed XML is not a DAVError, it's passed on as it is
                if expect_xml:
                    log.info(
                        "Expected some valid XML from the server, but got this: \n"
                        + to_normal_str(self._raw),
                        exc_info=True,
                    )
                    raise
                log.debug("Response body is not XML")
            else:
                if log.level <= logging.DEBUG:
                    log.debug(etree.tostring(self.tree, pretty_print=True))

        self.reason = response.reason_phrase or ""

    @property
    def raw(self) -> str:
        return to_normal_str(self._raw)


class DownloadStream:
    """
    The body of a downloaded file.  Iterate over it asynchronously to
    get the bytes, or ``await read()`` to get everything at once.

    The stream holds an open connection.  It's closed when the body has
    been consumed, on ``aclose()``, or when leaving an ``async with``
    block.

    Attributes:
        length: The Content-Length given by the server, or None
        content_type: The Content-Type given by the server, or None
    """

    def __init__(
        self,
        response: httpx.Response,
        client: httpx.AsyncClient,
        cancel: Optional[asyncio.Event] = None,
    ) -> None:
        self._response = response
        self._client = client
        self._cancel = cancel
        self._closed = False
        self.content_type: Optional[str] = response.headers.get("Content-Type")
        try:
            self.length: Optional[int] = int(response.headers["Content-Length"])
        except (KeyError, ValueError):
            self.length = None

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, exc_type, exc_value, traceback) -> None:
        await self.aclose()

    async def __aiter__(self):
        try:
            async for chunk in self._response.aiter_bytes():
                if self._cancel is not None and self._cancel.is_set():
                    raise OperationCancelled("download cancelled")
                yield chunk
        finally:
            await self.aclose()

    async def read(self) -> bytes:
        return b"".join([chunk async for chunk in self])

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            await self._response.aclose()
        finally:
            await self._client.aclose()


class AsyncDAVClient:
    """
    Async WebDAV client.

    The client only holds configuration, a new httpx client is created
    for each operation.  It's safe to share one AsyncDAVClient between
    many concurrent tasks.

    Resource paths are filesystem-like strings (``/Shared Documents/a.txt``,
    ``folder\\file.txt``), each segment is escaped and the result is
    appended to the server URL.
    """

    url: URL = None
    huge_tree: bool = False

    def __init__(
        self,
        url: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        domain: Optional[str] = None,
        auth: Optional[httpx.Auth] = None,
        auth_type: Optional[str] = "digest",
        ignore_cert_errors: bool = False,
        ssl_cert: Union[str, Tuple[str, str], None] = None,
        proxy: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
        huge_tree: bool = False,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        session_factory: Optional[SessionFactoryType] = None,
    ) -> None:
        """
        Args:
            url: Server base URL, resource paths are appended to it
            username: Username for authentication
            password: Password for authentication (the token for bearer auth)
            domain: Windows domain, sent as DOMAIN\\username
            auth: httpx.Auth object, takes precedence over auth_type
            auth_type: 'digest' (default), 'basic', 'bearer' or None
            ignore_cert_errors: Do not verify the server TLS certificate
            ssl_cert: Client TLS certificate
            proxy: Proxy server URL
            headers: Additional headers for every request
            huge_tree: Enable huge XML tree parsing
            transport: httpx transport replacing the network (testing)
            session_factory: Callable returning a ready httpx.AsyncClient,
                replaces the built-in factory entirely
        """
        from davkit import __version__

        if not url:
            raise ValueError("a server URL is required")
        self.url = URL.objectify(url)

        ## Handle credentials from URL, explicit parameters win
        if self.url.username is not None and username is None:
            username = unquote(self.url.username)
            password = unquote(self.url.password or "")
        self.url = self.url.unauth()
        self.url.validate()
        log.debug("self.url: " + str(self.url))

        self.username = username
        self.password = password
        self.domain = domain
        self.auth_type = auth_type
        if auth and auth_type not in (None, "digest"):
            log.warning(
                "both auth object and auth_type sent to AsyncDAVClient. The latter will be ignored."
            )
        self.auth = auth or build_auth(username, password, domain, auth_type)

        if proxy is not None and "://" not in proxy:
            proxy = self.url.scheme + "://" + proxy
        self.proxy = proxy
        self.ignore_cert_errors = ignore_cert_errors
        self.huge_tree = huge_tree

        self.headers = {"User-Agent": "davkit/" + __version__}
        self.headers.update(headers or {})

        self.session_factory = session_factory or SessionFactory(
            auth=self.auth,
            ignore_cert_errors=ignore_cert_errors,
            ssl_cert=ssl_cert,
            proxy=proxy,
            headers=self.headers,
            transport=transport,
        )

    def uri(self, path: str) -> URL:
        """The escaped, absolute URI of a resource path"""
        return build_uri(self.url, path)

    def _warn_on_401(self, r: httpx.Response) -> None:
        if r.status_code != 401 or self.auth:
            return
        msg = "No authentication object was provided, and the server requires authentication."
        if r.headers.get("WWW-Authenticate"):
            auth_types = [
                t
                for t in extract_auth_types(r.headers["WWW-Authenticate"])
                if t in ["basic", "digest", "bearer"]
            ]
            if auth_types:
                msg += "\nSupported authentication types: %s" % (", ".join(auth_types))
        log.warning(msg)

    async def request(
        self,
        url: Union[str, URL],
        method: Union[str, DAVMethod] = DAVMethod.GET,
        body: Union[XMLBody, ProgressStream, None] = None,
        headers: Optional[Mapping[str, str]] = None,
        cancel: Optional[asyncio.Event] = None,
    ) -> DAVResponse:
        """
        Send one request and return the response.

        This is the core method that all operations except download use.

        Raises:
            DAVError: the server answered with a non-2xx status
            asyncio.CancelledError: ``cancel`` was set
        """
        return await cancellable(self._request(url, method, body, headers), cancel)

    async def _request(
        self,
        url: Union[str, URL],
        method: Union[str, DAVMethod],
        body: Union[XMLBody, ProgressStream, None],
        headers: Optional[Mapping[str, str]],
    ) -> DAVResponse:
        method = DAVMethod(method)
        combined_headers = dict(headers or {})
        if isinstance(body, ProgressStream):
            content = body
            logged_body = "(%s bytes of file content)" % body.length
        else:
            content = _serialize(body)
            logged_body = to_normal_str(content)
        if not content and method in EMPTY_ENTITY_METHODS:
            combined_headers["Content-Length"] = "0"
            content = None

        url = str(url)
        log.debug(
            "sending request - method={0}, url={1}, headers={2}\nbody:\n{3}".format(
                method.value, url, combined_headers, logged_body
            )
        )

        async with self.session_factory() as client:
            r = await client.request(
                method.value,
                url,
                content=content,
                headers=combined_headers,
            )
            log.debug("server responded with %i %s" % (r.status_code, r.reason_phrase))
            self._warn_on_401(r)
            if not r.is_success:
                raise await DAVError.from_response(r, url)
            return DAVResponse(r, huge_tree=self.huge_tree)

    async def propfind(
        self,
        path: str,
        depth: Union[Depth, int, str] = Depth.ONE,
        body: Optional[XMLBody] = None,
        cancel: Optional[asyncio.Event] = None,
    ) -> Optional[_Element]:
        """
        Send a PROPFIND request.

        Args:
            path: Resource path
            depth: How deep to traverse the collection, defaults to Depth.ONE
            body: propfind XML; without it the server returns its allprop set
            cancel: Cancellation event

        Returns:
            The parsed multistatus tree (None if the server sent no body)
        """
        response = await self.request(
            self.uri(path),
            DAVMethod.PROPFIND,
            body,
            {"Depth": Depth.coerce(depth).header},
            cancel,
        )
        return response.tree

    async def proppatch(
        self,
        path: str,
        body: XMLBody,
        cancel: Optional[asyncio.Event] = None,
    ) -> Optional[_Element]:
        """
        Send a PROPPATCH request with a propertyupdate document.

        Returns:
            The parsed multistatus tree
        """
        _require_body(body, "PROPPATCH")
        response = await self.request(
            self.uri(path), DAVMethod.PROPPATCH, body, cancel=cancel
        )
        return response.tree

    async def mkcol(self, path: str, cancel: Optional[asyncio.Event] = None) -> None:
        """Create a collection."""
        await self.request(self.uri(path), DAVMethod.MKCOL, cancel=cancel)

    async def mkcol_extended(
        self,
        path: str,
        body: XMLBody,
        cancel: Optional[asyncio.Event] = None,
    ) -> None:
        """Create a collection and set properties on it in one go (RFC 5689)."""
        _require_body(body, "MKCOL")
        await self.request(
            self.uri(path),
            DAVMethod.MKCOL,
            body,
            {"Content-Type": "application/xml"},
            cancel,
        )

    async def download(
        self, path: str, cancel: Optional[asyncio.Event] = None
    ) -> DownloadStream:
        """
        GET a file.  The body is not read, the returned DownloadStream has
        to be consumed or closed by the caller.
        """
        uri = str(self.uri(path))
        log.debug("sending request - method=GET, url={0}".format(uri))
        return await cancellable(self._open_download(uri, cancel), cancel)

    async def _open_download(
        self, uri: str, cancel: Optional[asyncio.Event]
    ) -> DownloadStream:
        client = self.session_factory()
        try:
            r = await client.send(client.build_request("GET", uri), stream=True)
            log.debug("server responded with %i %s" % (r.status_code, r.reason_phrase))
            if not r.is_success:
                self._warn_on_401(r)
                try:
                    raise await DAVError.from_response(r, uri)
                finally:
                    await r.aclose()
        except BaseException:
            await client.aclose()
            raise
        return DownloadStream(r, client, cancel)

    async def upload(
        self,
        path: str,
        content: Union[bytes, str, BinaryIO, Any],
        content_type: Optional[str] = None,
        progress: Optional[ProgressCallback] = None,
        cancel: Optional[asyncio.Event] = None,
    ) -> None:
        """
        PUT a file.

        Args:
            path: Resource path
            content: bytes, str (sent UTF-8 encoded), a binary file object
                or an async file object such as an aiofiles handle
            content_type: Sent as Content-Type when given
            progress: Called with the total number of bytes sent so far
            cancel: Cancellation event
        """
        stream = ProgressStream(content, progress)
        headers = {}
        if content_type and content_type.strip():
            headers["Content-Type"] = content_type
        length = await stream.prepare()
        if length is not None:
            headers["Content-Length"] = str(length)
        await self.request(self.uri(path), DAVMethod.PUT, stream, headers, cancel)

    async def delete(self, path: str, cancel: Optional[asyncio.Event] = None) -> None:
        """Delete a file or a collection."""
        await self.request(self.uri(path), DAVMethod.DELETE, cancel=cancel)

    async def _copy_or_move(
        self,
        method: DAVMethod,
        source: str,
        target: str,
        overwrite: bool,
        cancel: Optional[asyncio.Event],
    ) -> None:
        headers = {
            "Destination": str(self.uri(target)),
            "Overwrite": "T" if overwrite else "F",
        }
        await self.request(self.uri(source), method, headers=headers, cancel=cancel)

    async def copy(
        self,
        source: str,
        target: str,
        overwrite: bool = False,
        cancel: Optional[asyncio.Event] = None,
    ) -> None:
        """Copy ``source`` to ``target``."""
        await self._copy_or_move(DAVMethod.COPY, source, target, overwrite, cancel)

    async def move(
        self,
        source: str,
        target: str,
        overwrite: bool = False,
        cancel: Optional[asyncio.Event] = None,
    ) -> None:
        """Move ``source`` to ``target``."""
        await self._copy_or_move(DAVMethod.MOVE, source, target, overwrite, cancel)

    async def options(
        self, path: str = "", cancel: Optional[asyncio.Event] = None
    ) -> OptionsResult:
        """Ask the server which methods and DAV classes it supports for ``path``."""
        response = await self.request(self.uri(path), DAVMethod.OPTIONS, cancel=cancel)
        return OptionsResult(
            allow=_split_header(response.headers.get("Allow")),
            dav=_split_header(response.headers.get("DAV")),
        )

    async def search(
        self,
        path: str,
        query: XMLBody,
        cancel: Optional[asyncio.Event] = None,
    ) -> Optional[_Element]:
        """
        Send a SEARCH request (RFC 5323) with a searchrequest document.

        Returns:
            The parsed multistatus tree
        """
        _require_body(query, "SEARCH")
        response = await self.request(
            self.uri(path),
            DAVMethod.SEARCH,
            query,
            {"Content-Type": "application/xml"},
            cancel,
        )
        return response.tree

    async def exists(self, path: str, cancel: Optional[asyncio.Event] = None) -> bool:
        """PROPFIND with depth 0; False on 404, any other error is raised."""
        try:
            await self.propfind(path, Depth.ZERO, cancel=cancel)
        except DAVError as e:
            if e.status == 404:
                return False
            raise
        return True


async def get_davclient(
    url: Optional[str] = None,
    check_connection: bool = True,
    check_config_file: bool = True,
    config_file: Optional[str] = None,
    config_section: Optional[str] = None,
    environment: bool = True,
    **kwargs: Any,
) -> AsyncDAVClient:
    """
    Get an async DAV client instance.

    Connection parameters are taken from, in this order:

    * The parameters given
    * Environment variables prepended with `DAVKIT_`, like `DAVKIT_URL`,
      `DAVKIT_USERNAME`, `DAVKIT_PASSWORD` and `DAVKIT_DOMAIN`
    * A configuration file, see davkit.config

    Args:
        url: Server base URL
        check_connection: Verify connectivity with an OPTIONS request (default: True)
        **kwargs: Additional arguments passed to AsyncDAVClient.__init__()

    Raises:
        ValueError: no server URL could be found
        DAVError: the connection check failed
    """
    from davkit import config

    params = {}
    if not url:
        params = config.get_connection_params(
            check_config_file=check_config_file,
            config_file=config_file,
            config_section_name=config_section,
            environment=environment,
        )
    params.update(kwargs)
    if url:
        params["url"] = url

    if not params.get("url"):
        raise ValueError(
            "URL is required. Provide via url parameter or DAVKIT_URL environment variable."
        )

    client = AsyncDAVClient(**params)

    if check_connection:
        try:
            options = await client.options()
        except DAVError as e:
            raise DAVError(
                url=str(client.url),
                reason=f"Failed to connect to WebDAV server: {e.reason}",
                status=e.status,
                body=e.body,
            ) from e
        log.info(f"Connected to WebDAV server: {client.url}")
        if not options.dav:
            error.weirdness("Server did not return DAV header - may not be a DAV server")
        else:
            log.debug(f"Server DAV capabilities: {', '.join(options.dav)}")

    return client
