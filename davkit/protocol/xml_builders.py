"""
Pure functions for building WebDAV XML request bodies.

All functions in this module are pure - they take data in and return XML out,
with no side effects or I/O.
"""
from typing import Any
from typing import Dict
from typing import Iterable
from typing import Optional
from typing import Union

from lxml import etree

from davkit.elements import custom
from davkit.elements import dav
from davkit.elements.base import BaseElement
from davkit.elements.base import Property

PropName = Union[str, BaseElement, type]


def _tag_of(prop: PropName) -> str:
    """Accept a Clark notation tag, an element class or an element instance."""
    if isinstance(prop, str):
        return prop
    tag = getattr(prop, "tag", None)
    if not tag:
        raise ValueError("no tag found for %r" % (prop,))
    return tag


def _prop_element(prop: PropName, value: Any = None) -> BaseElement:
    if isinstance(prop, BaseElement):
        if value is not None:
            prop.value = str(value)
        return prop
    if value is not None and not isinstance(value, (str, bytes)):
        value = str(value)
    return Property(_tag_of(prop), value)


def _serialize(element: BaseElement) -> bytes:
    return etree.tostring(element.xmlelement(), encoding="utf-8", xml_declaration=True)


def build_propfind_body(
    props: Optional[Iterable[PropName]] = None,
    allprop: bool = False,
    propname: bool = False,
    include: Optional[Iterable[PropName]] = None,
) -> bytes:
    """
    Build PROPFIND request body XML.

    Args:
        props: Properties to retrieve, as Clark notation tags or elements
        allprop: Request all (live) properties
        propname: Request only the names of the properties
        include: With allprop, additional properties not covered by allprop

    Returns:
        UTF-8 encoded XML bytes
    """
    if sum([bool(props), allprop, propname]) > 1:
        raise ValueError("props, allprop and propname are mutually exclusive")
    if include and not allprop:
        raise ValueError("include is only meaningful together with allprop")

    propfind = dav.Propfind()
    if allprop:
        propfind += dav.Allprop()
        if include:
            propfind += dav.Include() + [_prop_element(p) for p in include]
    elif propname:
        propfind += dav.PropName()
    elif props:
        propfind += dav.Prop() + [_prop_element(p) for p in props]
    else:
        propfind += dav.Prop()

    return _serialize(propfind)


def build_proppatch_body(
    set_props: Optional[Dict[PropName, Any]] = None,
    remove_props: Optional[Iterable[PropName]] = None,
) -> bytes:
    """
    Build PROPPATCH request body.

    Args:
        set_props: Properties to set (tag -> value)
        remove_props: Properties to remove

    Returns:
        UTF-8 encoded XML bytes
    """
    if not set_props and not remove_props:
        raise ValueError("a property update needs something to set or remove")

    propertyupdate = dav.PropertyUpdate()
    if set_props:
        set_elements = [_prop_element(k, v) for k, v in set_props.items()]
        propertyupdate += dav.Set() + (dav.Prop() + set_elements)
    if remove_props:
        remove_elements = [_prop_element(p) for p in remove_props]
        propertyupdate += dav.Remove() + (dav.Prop() + remove_elements)

    return _serialize(propertyupdate)


def build_mkcol_body(
    displayname: Optional[str] = None,
    resourcetype: Optional[Iterable[PropName]] = None,
    props: Optional[Dict[PropName, Any]] = None,
) -> bytes:
    """
    Build an extended MKCOL (RFC 5689) request body.

    Args:
        displayname: Display name of the new collection
        resourcetype: Resource types, the plain DAV collection is always included
        props: Other properties to set on the new collection

    Returns:
        UTF-8 encoded XML bytes
    """
    rtype = dav.ResourceType() + dav.Collection()
    for extra in resourcetype or []:
        if _tag_of(extra) != dav.Collection.tag:
            rtype += Property(_tag_of(extra))

    prop = dav.Prop() + rtype
    if displayname is not None:
        prop += dav.DisplayName(displayname)
    for k, v in (props or {}).items():
        prop += _prop_element(k, v)

    return _serialize(dav.Mkcol() + (dav.Set() + prop))


def build_search_body(
    query: Union[str, BaseElement],
    grammar: Optional[type] = None,
) -> bytes:
    """
    Build a SEARCH (RFC 5323) request body.

    Args:
        query: Either the query text, wrapped into the ``grammar`` element,
            or a ready made grammar element like a ``dav.BasicSearch``
        grammar: Element class for text queries, defaults to the
            natural-language-query of the custom namespace

    Returns:
        UTF-8 encoded XML bytes
    """
    if isinstance(query, BaseElement):
        grammar_element = query
    else:
        grammar_element = (grammar or custom.NaturalLanguageQuery)(query)
    return _serialize(dav.SearchRequest() + grammar_element)


def build_basicsearch(
    scope: str,
    props: Iterable[PropName],
    depth: str = "infinity",
    where: Optional[BaseElement] = None,
) -> BaseElement:
    """
    Build a DAV:basicsearch grammar element to be passed to build_search_body.
    """
    search = dav.BasicSearch()
    search += dav.Select() + (dav.Prop() + [_prop_element(p) for p in props])
    search += dav.From() + (dav.Scope() + [dav.Href(scope), dav.Depth(depth)])
    if where is not None:
        search += dav.Where() + where
    return search
