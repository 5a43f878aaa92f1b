#!/usr/bin/env python
import re
import sys
from typing import Union
from urllib.parse import quote
from urllib.parse import SplitResult
from urllib.parse import urlsplit

from davkit.lib.python_utilities import to_unicode

if sys.version_info < (3, 11):
    from typing_extensions import Self
else:
    from typing import Self

## Both separators are accepted in resource paths
_SEPARATORS = re.compile(r"[/\\]")


def quote_segment(segment: str) -> str:
    """
    Percent-escape one path segment.

    Everything except the unreserved characters (letters, digits and
    ``-._~``) is escaped, including ``!'()*``.  Those are legal in a
    URI path, but some servers (SharePoint among them) mishandle them
    unless they are escaped.  Non-ASCII characters are UTF-8 encoded
    first.
    """
    return quote(segment, safe="")


def escape_path(path: str) -> str:
    """
    Turn a filesystem-like path into an escaped URI path.  Both ``/``
    and ``\\`` are treated as separators, the result always uses ``/``.
    Trailing slashes are kept as given.
    """
    return "/".join(quote_segment(s) for s in _SEPARATORS.split(path or ""))


def build_uri(server: Union[str, "URL"], path: str) -> "URL":
    """
    Escape ``path`` and append it to the server base URI.

    The concatenation is literal, the base is expected to end where the
    path starts.  Raises ValueError if the result is not an absolute
    http(s) URI.
    """
    uri = URL(str(server) + escape_path(path))
    uri.validate()
    return uri


class URL:
    """
    This class is for wrapping URLs into objects.  It's used
    internally in the library, end users should not need to know
    anything about this class.  All methods that accept URLs can be
    fed either with a URL object, a string or a urlsplit result.
    """

    def __init__(self, url: Union[str, SplitResult]) -> None:
        if isinstance(url, SplitResult):
            self.url_parsed = url
            self.url_raw = None
        else:
            self.url_raw = to_unicode(url)
            self.url_parsed = None

    @classmethod
    def objectify(cls, url: Union[Self, str, SplitResult, None]) -> "URL":
        if url is None or isinstance(url, URL):
            return url
        else:
            return URL(url)

    # To deal with all kind of methods/properties in the SplitResult
    # class
    def __getattr__(self, attr: str):
        if "url_parsed" not in vars(self):
            raise AttributeError(attr)
        if self.url_parsed is None:
            self.url_parsed = urlsplit(self.url_raw)
        if hasattr(self.url_parsed, attr):
            return getattr(self.url_parsed, attr)
        else:
            return getattr(str(self), attr)

    def __str__(self) -> str:
        if self.url_raw is None:
            self.url_raw = self.url_parsed.geturl()
        return self.url_raw

    def __repr__(self) -> str:
        return "URL(%s)" % str(self)

    def validate(self) -> None:
        """Raise ValueError unless this is an absolute http(s) URI"""
        raw = str(self)
        if any(c.isspace() or ord(c) < 0x20 for c in raw):
            raise ValueError("invalid URI %r: whitespace or control characters" % raw)
        ## urlsplit itself raises ValueError on f.ex. broken IPv6 literals
        parsed = urlsplit(raw)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError("invalid URI %r: not an absolute http(s) URI" % raw)
        ## reading the port validates it
        parsed.port

    def is_auth(self) -> bool:
        return self.username is not None

    def unauth(self) -> "URL":
        if not self.is_auth():
            return self
        ## whatever follows the userinfo, IPv6 brackets and port included
        netloc = self.netloc.rpartition("@")[2]
        return URL.objectify(
            SplitResult(self.scheme, netloc, self.path, self.query, self.fragment)
        )

