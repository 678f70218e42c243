#!/usr/bin/env python
"""
Elements from the calendarserver.org namespace
"""
from typing import ClassVar

from .base import ValuedBaseElement
from minicaldav.lib.namespace import nsmap2
from minicaldav.lib.namespace import ns


class GetCTag(ValuedBaseElement):
    tag: ClassVar[str] = ns("CS", "getctag")
    namespaces = nsmap2
