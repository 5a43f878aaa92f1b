#!/usr/bin/env python
import logging

__version__ = "0.1.0"

from .async_davclient import AsyncDAVClient
from .async_davclient import DownloadStream
from .async_davclient import get_davclient
from .lib.error import DAVError
from .protocol.types import Depth
from .protocol.types import OptionsResult

## Silence notification of no default logging handler
log = logging.getLogger("davkit")


class NullHandler(logging.Handler):
    def emit(self, record) -> None:
        pass


log.addHandler(NullHandler())

__all__ = [
    "__version__",
    "AsyncDAVClient",
    "DAVError",
    "Depth",
    "DownloadStream",
    "OptionsResult",
    "get_davclient",
]
