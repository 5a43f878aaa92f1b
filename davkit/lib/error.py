#!/usr/bin/env python
import logging
import os
from typing import Any
from typing import Optional

## Environmental variables prepended with "PYTHON_DAVKIT" are used for debug purposes,
## environmental variables prepended with "DAVKIT_" are for connection parameters
## one of DEBUG, DEVELOPMENT, PRODUCTION
debugmode = os.environ.get("PYTHON_DAVKIT_DEBUGMODE", "PRODUCTION")

log = logging.getLogger("davkit")
if debugmode.startswith("DEBUG"):
    log.setLevel(logging.DEBUG)
else:
    log.setLevel(logging.WARNING)


def weirdness(*reasons) -> None:
    from davkit.lib.debug import xmlstring

    reason = " : ".join([xmlstring(x) for x in reasons])
    log.warning(f"Deviation from expectations found: {reason}")


class DAVError(Exception):
    """
    The server answered with a status code outside of the 2xx range.

    This is the only error kind raised on behalf of the server.  It
    carries the reason phrase, the numeric status code and the raw body
    text as delivered by the server.  No attempt is made to
    distinguish between the different failures, i.e. a 423 Locked and
    a 404 Not Found are both a DAVError - check ``status`` to tell them
    apart.
    """

    url: Optional[str] = None
    reason: str = "no reason"
    status: int = 0
    body: str = ""

    def __init__(
        self,
        url: Optional[str] = None,
        reason: Optional[str] = None,
        status: Optional[int] = None,
        body: Optional[str] = None,
    ) -> None:
        if url:
            self.url = url
        if reason:
            self.reason = reason
        if status is not None:
            self.status = status
        if body is not None:
            self.body = body
        super().__init__(self.reason, self.status, self.body)

    def __str__(self) -> str:
        ret = "%s at '%s', %s %s" % (
            self.__class__.__name__,
            self.url,
            self.status,
            self.reason,
        )
        if self.body:
            ret += "\n\n%s" % self.body
        return ret

    @classmethod
    async def from_response(cls, response: Any, url: Optional[str] = None) -> "DAVError":
        """
        Build a DAVError out of a failed httpx response.

        The body is read completely, also when the response was opened
        in streaming mode.
        """
        await response.aread()
        return cls(
            url=url or str(response.url),
            reason=response.reason_phrase or "",
            status=response.status_code,
            body=response.text,
        )
