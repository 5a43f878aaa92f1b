"""
Pure functions for querying WebDAV XML responses.

All functions in this module are pure - they take an lxml tree in and
return structured data out, with no side effects or I/O.  Malformed XML
is never handled here; it fails already when the response is parsed.
"""

import logging
from typing import Any, Iterable, List, Optional, Union
from urllib.parse import unquote, urlsplit

from lxml import etree
from lxml.etree import _Element

from davkit.elements import dav
from davkit.elements.base import BaseElement

from .types import MultistatusResponse, PropfindResult

log = logging.getLogger(__name__)

Tag = Union[str, BaseElement, type]


def _tag(tag: Tag) -> str:
    if isinstance(tag, str):
        return tag
    return tag.tag


def _root(tree: Union[_Element, "etree._ElementTree"]) -> _Element:
    if hasattr(tree, "getroot"):
        return tree.getroot()
    return tree


def find_all(tree: Optional[_Element], tag: Tag) -> List[_Element]:
    """
    All descendants (and the element itself) with the given qualified
    name.  A missing tree (a response without a body) has none.
    """
    if tree is None:
        return []
    return list(_root(tree).iter(_tag(tag)))


def find_first(tree: Optional[_Element], tag: Tag) -> Optional[_Element]:
    """The first descendant with the given qualified name, or None."""
    if tree is None:
        return None
    return next(_root(tree).iter(_tag(tag)), None)


def _strip_to_multistatus(tree: _Element) -> Union[_Element, List[_Element]]:
    """
    The general format of inbound data is something like this:

    <xml><multistatus>
        <response>(...)</response>
        <response>(...)</response>
        (...)
    </multistatus></xml>

    but sometimes the multistatus and/or xml element is missing.  We
    don't want to bother with the multistatus and xml tags, we just
    want the response list.
    """
    if tree.tag == "xml" and len(tree) and tree[0].tag == dav.MultiStatus.tag:
        return tree[0]
    if tree.tag == dav.MultiStatus.tag:
        return tree
    return [tree]


def _status_to_code(status: Optional[str]) -> int:
    """Pick the numeric code out of a status line like ``HTTP/1.1 200 OK``."""
    if not status:
        return 200
    parts = status.split()
    if len(parts) >= 2:
        try:
            return int(parts[1])
        except ValueError:
            pass
    log.warning("could not parse status line %r", status)
    return 0


def _normalize_href(text: str) -> str:
    """Hrefs may be absolute URIs or paths - always return an unquoted path."""
    text = text.strip()
    if "://" in text:
        text = urlsplit(text).path
    return unquote(text)


def _prop_value(prop: _Element) -> Any:
    if len(prop):
        return prop
    return prop.text


def _parse_response_element(response: _Element) -> PropfindResult:
    href = ""
    status: Optional[str] = None
    properties = {}
    first_propstat_status: Optional[str] = None

    for elem in response:
        if elem.tag == dav.Href.tag and not href:
            href = _normalize_href(elem.text or "")
        elif elem.tag == dav.Status.tag:
            status = elem.text
        elif elem.tag == dav.PropStat.tag:
            propstat_status = elem.findtext(dav.Status.tag)
            if first_propstat_status is None:
                first_propstat_status = propstat_status
            ## if a prop was not found, ignore it
            if propstat_status and _status_to_code(propstat_status) == 404:
                continue
            for prop in elem.iterfind(dav.Prop.tag):
                for theprop in prop:
                    properties[theprop.tag] = _prop_value(theprop)

    return PropfindResult(
        href=href,
        properties=properties,
        status=_status_to_code(status or first_propstat_status),
    )


def parse_multistatus(tree: Optional[_Element]) -> MultistatusResponse:
    """
    Parse a 207 Multi-Status tree into PropfindResult objects, one per
    <response>.  Per-resource failures are reported through the status
    field; nothing is raised for them.
    """
    if tree is None:
        return MultistatusResponse()
    root = _root(tree)
    responses = []
    for elem in _strip_to_multistatus(root):
        if elem.tag != dav.Response.tag:
            continue
        responses.append(_parse_response_element(elem))
    description = None
    if root.tag == dav.MultiStatus.tag:
        description = root.findtext(dav.ResponseDescription.tag)
    return MultistatusResponse(responses=responses, description=description)


def display_names(tree: Optional[_Element]) -> List[Optional[str]]:
    """The displayname of each <response>, in document order."""
    ret = []
    for response in find_all(tree, dav.Response):
        name = find_first(response, dav.DisplayName)
        ret.append(name.text if name is not None else None)
    return ret


def propstat_statuses(tree: Optional[_Element]) -> List[str]:
    """All status lines of the tree, i.e. ``["HTTP/1.1 200 OK"]``."""
    return [(x.text or "").strip() for x in find_all(tree, dav.Status)]


def _same_path(a: str, b: str, strict_trailing_slash: bool) -> bool:
    if strict_trailing_slash:
        return a == b
    return a.rstrip("/") == b.rstrip("/")


def child_responses(
    tree: Optional[_Element],
    collection_path: str,
    strict_trailing_slash: bool = False,
) -> List[_Element]:
    """
    The <response> elements of a PROPFIND on a collection, except the
    one describing the collection itself.

    ``collection_path`` is a resource path as given to the client
    operations (not escaped); it is compared with the unquoted path of
    each href.  Backslashes count as separators, as in the resource
    paths of the client.  Unless ``strict_trailing_slash`` is set,
    ``/foo`` and ``/foo/`` are considered to be the same.
    """
    collection_path = collection_path.replace("\\", "/")
    ret = []
    for response in find_all(tree, dav.Response):
        href = response.findtext(dav.Href.tag) or ""
        if _same_path(_normalize_href(href), collection_path, strict_trailing_slash):
            continue
        ret.append(response)
    return ret


def is_collection(result: PropfindResult) -> bool:
    """Does the resourcetype (or the IIS iscollection flag) say collection?"""
    rtype = result.properties.get(dav.ResourceType.tag)
    if rtype is not None and not isinstance(rtype, str):
        return rtype.find(dav.Collection.tag) is not None
    flag = result.properties.get(dav.IsCollection.tag)
    return flag is not None and flag.strip().lower() in ("1", "true")


def hrefs(tree: Optional[_Element]) -> Iterable[str]:
    """Unquoted paths of every <response>."""
    return [
        _normalize_href(r.findtext(dav.Href.tag) or "")
        for r in find_all(tree, dav.Response)
    ]
