"""
Value types used by the WebDAV client.

All of these are request/response scoped and immutable.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union


class Depth(Enum):
    """How deep a PROPFIND traverses a collection hierarchy."""

    ZERO = "0"
    ONE = "1"
    INFINITY = "infinity"

    @property
    def header(self) -> str:
        """Value of the ``Depth`` request header."""
        return self.value

    @classmethod
    def coerce(cls, value: Union["Depth", int, str]) -> "Depth":
        """Accept 0, 1, "infinity" and friends as well as Depth members."""
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().lower())


class DAVMethod(Enum):
    """WebDAV HTTP methods."""

    GET = "GET"
    PUT = "PUT"
    DELETE = "DELETE"
    PROPFIND = "PROPFIND"
    PROPPATCH = "PROPPATCH"
    MKCOL = "MKCOL"
    OPTIONS = "OPTIONS"
    MOVE = "MOVE"
    COPY = "COPY"
    SEARCH = "SEARCH"


## Methods where the request should carry an explicit, empty entity
## (Content-Length: 0) when there is no body.  Some servers refuse
## those requests otherwise.
EMPTY_ENTITY_METHODS = frozenset(
    (
        DAVMethod.PROPFIND,
        DAVMethod.MKCOL,
        DAVMethod.COPY,
        DAVMethod.MOVE,
        DAVMethod.OPTIONS,
    )
)


@dataclass(frozen=True)
class OptionsResult:
    """
    What the server advertises for a path in its reply to OPTIONS.

    Attributes:
        allow: HTTP methods from the ``Allow`` header
        dav: compliance class tokens from the ``DAV`` header
    """

    allow: List[str] = field(default_factory=list)
    dav: List[str] = field(default_factory=list)

    @property
    def compliance_classes(self) -> List[str]:
        """The numeric DAV compliance classes (1, 2, 3) advertised."""
        return [x for x in self.dav if x.isdigit()]

    def supports(self, method: str) -> bool:
        return method.upper() in (x.upper() for x in self.allow)


@dataclass(frozen=True)
class PropfindResult:
    """
    One <response> out of a multistatus.

    Attributes:
        href: Resource path, unquoted
        properties: Property tag (Clark notation) -> text value, or the
            element itself when the property has child elements
        status: HTTP status code of the resource or of the first propstat
    """

    href: str
    properties: Dict[str, Any] = field(default_factory=dict)
    status: int = 200


@dataclass
class MultistatusResponse:
    """Parsed 207 Multi-Status response."""

    responses: List[PropfindResult] = field(default_factory=list)
    description: Optional[str] = None
