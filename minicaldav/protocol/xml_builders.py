"""
Pure functions for building CalDAV XML request bodies.

All functions in this module are pure - they take data in and return XML out,
with no side effects or I/O.
"""
from typing import Dict
from typing import List
from typing import Type

from minicaldav.elements import cdav
from minicaldav.elements import cs
from minicaldav.elements import dav
from minicaldav.elements.base import BaseElement

CALENDAR_COMPONENT_SET_PROPS = [
    "resourcetype",
    "displayname",
    "getctag",
    "supported-calendar-component-set",
]


def build_propfind_body(props: List[str]) -> bytes:
    """
    Build PROPFIND request body XML.

    Args:
        props: List of property names to retrieve

    Returns:
        UTF-8 encoded XML bytes

    Raises:
        ValueError: if a property name is unknown
    """
    prop_elements = [_prop_name_to_element(prop_name) for prop_name in props]
    propfind = dav.Propfind() + (dav.Prop() + prop_elements)
    return propfind.tostring()


def build_current_user_principal_body() -> bytes:
    return build_propfind_body(["current-user-principal"])


def build_calendar_home_set_body() -> bytes:
    return build_propfind_body(["calendar-home-set"])


def build_calendar_component_set_body() -> bytes:
    return build_propfind_body(CALENDAR_COMPONENT_SET_PROPS)


def build_event_search_body(field: str, id: str) -> bytes:
    """
    Build a calendar-query REPORT body matching VEVENTs where the
    property ``field`` contains ``id``, e.g. ``("UID", "abc@example")``.

    Both values are inserted as element text/attribute values, so
    characters like ``<`` and ``&`` are escaped by the serializer.

    Returns:
        UTF-8 encoded XML bytes
    """
    if not field:
        raise ValueError("field must be a non-empty property name")

    prop = dav.Prop() + [dav.GetEtag(), cdav.CalendarData()]

    prop_filter = cdav.PropFilter(field) + cdav.TextMatch(id)
    vevent = cdav.CompFilter("VEVENT") + prop_filter
    vcalendar = cdav.CompFilter("VCALENDAR") + vevent

    root = cdav.CalendarQuery() + [prop, cdav.Filter() + vcalendar]
    return root.tostring()


# Property name to element mapping

_PROPS: Dict[str, Type[BaseElement]] = {
    "current-user-principal": dav.CurrentUserPrincipal,
    "displayname": dav.DisplayName,
    "getetag": dav.GetEtag,
    "resourcetype": dav.ResourceType,
    "calendar-data": cdav.CalendarData,
    "calendar-home-set": cdav.CalendarHomeSet,
    "supported-calendar-component-set": cdav.SupportedCalendarComponentSet,
    "getctag": cs.GetCTag,
}


def _prop_name_to_element(name: str) -> BaseElement:
    """
    Convert property name string to an (empty) element object.

    Names are case-insensitive, and underscores are accepted in place
    of dashes.
    """
    name_lower = name.lower().replace("_", "-")
    try:
        cls = _PROPS[name_lower]
    except KeyError:
        raise ValueError("unknown property %r" % name) from None
    return cls()
