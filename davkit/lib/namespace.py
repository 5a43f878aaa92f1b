#!/usr/bin/env python
from types import MappingProxyType
from typing import Mapping
from typing import Optional

DAV_NS = "DAV:"

## Custom (dead) properties go into this namespace unless the caller
## brings its own.  Any other namespace can still be used through
## Clark notation, lxml will invent a prefix for it.
CUSTOM_NS = "http://example.com/foo"

## Read-only, shared by every request and every parser.
nsmap: Mapping[str, str] = MappingProxyType(
    {
        "D": DAV_NS,
        "F": CUSTOM_NS,
    }
)


def ns(prefix: str, tag: Optional[str] = None) -> str:
    name = "{%s}" % nsmap[prefix]
    if tag is not None:
        name = "%s%s" % (name, tag)
    return name
