"""
WebDAV protocol helpers without any I/O.

The protocol layer is organized into:
- types: Value types (Depth, DAVMethod, OptionsResult, PropfindResult)
- xml_builders: Pure functions to build XML request bodies
- xml_parsers: Pure functions to query XML response trees

Example usage:

    from davkit.elements import dav
    from davkit.protocol import build_propfind_body, display_names

    body = build_propfind_body([dav.DisplayName, dav.ResourceType])
    tree = await client.propfind("/Shared Documents", body=body)
    names = display_names(tree)
"""

from .types import (
    # Enums
    DAVMethod,
    Depth,
    # Result types
    MultistatusResponse,
    OptionsResult,
    PropfindResult,
)
from .xml_builders import (
    build_basicsearch,
    build_mkcol_body,
    build_propfind_body,
    build_proppatch_body,
    build_search_body,
)
from .xml_parsers import (
    child_responses,
    display_names,
    find_all,
    find_first,
    hrefs,
    is_collection,
    parse_multistatus,
    propstat_statuses,
)

__all__ = [
    # Enums
    "DAVMethod",
    "Depth",
    # Result types
    "MultistatusResponse",
    "OptionsResult",
    "PropfindResult",
    # XML Builders
    "build_basicsearch",
    "build_mkcol_body",
    "build_propfind_body",
    "build_proppatch_body",
    "build_search_body",
    # XML Parsers
    "child_responses",
    "display_names",
    "find_all",
    "find_first",
    "hrefs",
    "is_collection",
    "parse_multistatus",
    "propstat_statuses",
]
