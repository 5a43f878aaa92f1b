#!/usr/bin/env python
from typing import ClassVar

from .base import ValuedBaseElement
from davkit.lib.namespace import ns


class NaturalLanguageQuery(ValuedBaseElement):
    tag: ClassVar[str] = ns("F", "natural-language-query")
