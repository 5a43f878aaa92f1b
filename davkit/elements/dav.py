#!/usr/bin/env python
from typing import ClassVar

from .base import BaseElement
from .base import ValuedBaseElement
from davkit.lib.namespace import ns


# Operations
class Propfind(BaseElement):
    tag: ClassVar[str] = ns("D", "propfind")


class PropertyUpdate(BaseElement):
    tag: ClassVar[str] = ns("D", "propertyupdate")


class Mkcol(BaseElement):
    tag: ClassVar[str] = ns("D", "mkcol")


class SearchRequest(BaseElement):
    tag: ClassVar[str] = ns("D", "searchrequest")


# Propfind / proppatch building blocks
class Prop(BaseElement):
    tag: ClassVar[str] = ns("D", "prop")


class PropName(BaseElement):
    tag: ClassVar[str] = ns("D", "propname")


class Allprop(BaseElement):
    tag: ClassVar[str] = ns("D", "allprop")


class Include(BaseElement):
    tag: ClassVar[str] = ns("D", "include")


class Set(BaseElement):
    tag: ClassVar[str] = ns("D", "set")


class Remove(BaseElement):
    tag: ClassVar[str] = ns("D", "remove")


# Search (RFC 5323)
class BasicSearch(BaseElement):
    tag: ClassVar[str] = ns("D", "basicsearch")


class Select(BaseElement):
    tag: ClassVar[str] = ns("D", "select")


class From(BaseElement):
    tag: ClassVar[str] = ns("D", "from")


class Scope(BaseElement):
    tag: ClassVar[str] = ns("D", "scope")


class Depth(ValuedBaseElement):
    tag: ClassVar[str] = ns("D", "depth")


class Where(BaseElement):
    tag: ClassVar[str] = ns("D", "where")


# Properties
class ResourceType(BaseElement):
    tag: ClassVar[str] = ns("D", "resourcetype")


class Collection(BaseElement):
    tag: ClassVar[str] = ns("D", "collection")


class DisplayName(ValuedBaseElement):
    tag: ClassVar[str] = ns("D", "displayname")


class GetContentType(ValuedBaseElement):
    tag: ClassVar[str] = ns("D", "getcontenttype")


class GetContentLength(ValuedBaseElement):
    tag: ClassVar[str] = ns("D", "getcontentlength")


class GetContentLanguage(ValuedBaseElement):
    tag: ClassVar[str] = ns("D", "getcontentlanguage")


class CreationDate(ValuedBaseElement):
    tag: ClassVar[str] = ns("D", "creationdate")


class GetLastModified(ValuedBaseElement):
    tag: ClassVar[str] = ns("D", "getlastmodified")


class GetEtag(ValuedBaseElement):
    tag: ClassVar[str] = ns("D", "getetag")


## Not in RFC 4918, but delivered by IIS and SharePoint
class IsCollection(ValuedBaseElement):
    tag: ClassVar[str] = ns("D", "iscollection")


class IsHidden(ValuedBaseElement):
    tag: ClassVar[str] = ns("D", "ishidden")


# Capabilities (RFC 3253, RFC 5323)
class SupportedMethodSet(BaseElement):
    tag: ClassVar[str] = ns("D", "supported-method-set")


class SupportedLivePropertySet(BaseElement):
    tag: ClassVar[str] = ns("D", "supported-live-property-set")


class SupportedReportSet(BaseElement):
    tag: ClassVar[str] = ns("D", "supported-report-set")


class SupportedQueryGrammarSet(BaseElement):
    tag: ClassVar[str] = ns("D", "supported-query-grammar-set")


# Multistatus responses
class Href(ValuedBaseElement):
    tag: ClassVar[str] = ns("D", "href")


class Response(BaseElement):
    tag: ClassVar[str] = ns("D", "response")


class Status(ValuedBaseElement):
    tag: ClassVar[str] = ns("D", "status")


class PropStat(BaseElement):
    tag: ClassVar[str] = ns("D", "propstat")


class MultiStatus(BaseElement):
    tag: ClassVar[str] = ns("D", "multistatus")


class ResponseDescription(ValuedBaseElement):
    tag: ClassVar[str] = ns("D", "responsedescription")
