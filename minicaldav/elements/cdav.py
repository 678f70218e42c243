#!/usr/bin/env python
from typing import ClassVar

from .base import BaseElement
from .base import NamedBaseElement
from .base import ValuedBaseElement
from minicaldav.lib.namespace import ns


# Operations
class CalendarQuery(BaseElement):
    tag: ClassVar[str] = ns("C", "calendar-query")


# Filters
class Filter(BaseElement):
    tag: ClassVar[str] = ns("C", "filter")


class CompFilter(NamedBaseElement):
    tag: ClassVar[str] = ns("C", "comp-filter")


class PropFilter(NamedBaseElement):
    tag: ClassVar[str] = ns("C", "prop-filter")


# Conditions
## No collation attribute is sent; RFC4791 has the server assume
## i;ascii-casemap then
class TextMatch(ValuedBaseElement):
    tag: ClassVar[str] = ns("C", "text-match")


# Components / Data
class CalendarData(BaseElement):
    tag: ClassVar[str] = ns("C", "calendar-data")


# Properties
class CalendarHomeSet(BaseElement):
    tag: ClassVar[str] = ns("C", "calendar-home-set")


class SupportedCalendarComponentSet(BaseElement):
    tag: ClassVar[str] = ns("C", "supported-calendar-component-set")

