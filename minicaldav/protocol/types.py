"""
Core protocol types for the Sans-I/O CalDAV implementation.

The request/response dataclasses represent HTTP traffic at the protocol
level, independent of any I/O implementation.  The remaining dataclasses
mirror the DAV:multistatus document returned by PROPFIND and REPORT.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


class DAVMethod(Enum):
    """WebDAV/CalDAV HTTP methods used by this library."""

    PUT = "PUT"
    DELETE = "DELETE"
    PROPFIND = "PROPFIND"
    REPORT = "REPORT"


@dataclass(frozen=True)
class DAVRequest:
    """
    Represents an HTTP request to be made.

    This is a pure data structure with no I/O. It describes what request
    should be made, but does not make it.

    Attributes:
        method: HTTP method (PUT, PROPFIND, etc.)
        url: Full URL for the request
        headers: HTTP headers as dict
        body: Request body as bytes (optional)
    """

    method: DAVMethod
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[bytes] = None


@dataclass(frozen=True)
class DAVResponse:
    """
    Represents an HTTP response received.

    Attributes:
        status: HTTP status code
        headers: HTTP headers as dict
        body: Response body as bytes
    """

    status: int
    headers: Dict[str, str]
    body: bytes

    @property
    def ok(self) -> bool:
        """True if status indicates success (2xx)."""
        return 200 <= self.status < 300

    @property
    def reason(self) -> str:
        """Return a reason phrase for the status code."""
        reasons = {
            200: "OK",
            201: "Created",
            204: "No Content",
            207: "Multi-Status",
            400: "Bad Request",
            401: "Unauthorized",
            403: "Forbidden",
            404: "Not Found",
            405: "Method Not Allowed",
            409: "Conflict",
            412: "Precondition Failed",
            415: "Unsupported Media Type",
            500: "Internal Server Error",
            501: "Not Implemented",
            502: "Bad Gateway",
            503: "Service Unavailable",
        }
        return reasons.get(self.status, "Unknown")

    def header(self, name: str) -> Optional[str]:
        """Case-insensitive header lookup."""
        name = name.lower()
        for key, value in self.headers.items():
            if key.lower() == name:
                return value
        return None


def status_to_code(status: Optional[str]) -> Optional[int]:
    """
    Extract status code from a status line like "HTTP/1.1 200 OK".

    Returns None if the line can't be parsed.
    """
    if not status:
        return None

    parts = status.split()
    if len(parts) >= 2:
        try:
            return int(parts[1])
        except ValueError:
            pass

    return None


@dataclass
class Href:
    href: str


@dataclass
class Component:
    """A calendar object type, like VEVENT or VTODO"""

    name: str


@dataclass
class ComponentSet:
    """The supported-calendar-component-set of a calendar collection"""

    comps: List[Component] = field(default_factory=list)

    @property
    def names(self) -> List[str]:
        return [c.name for c in self.comps]


@dataclass
class Prop:
    """
    The properties this library asks for.  Everything is optional; a
    missing value means the property wasn't requested or the server
    does not support it.  Failures are reported through the status of
    the enclosing PropStat, never through the Prop itself.
    """

    current_user_principal: Optional[Href] = None
    calendar_home_set: Optional[Href] = None
    displayname: Optional[str] = None
    getctag: Optional[str] = None
    resourcetype: Optional[List[str]] = None
    supported_calendar_component_set: Optional[ComponentSet] = None
    getetag: Optional[str] = None
    calendar_data: Optional[str] = None


@dataclass
class PropStat:
    status: str
    prop: Optional[Prop] = None

    @property
    def status_code(self) -> Optional[int]:
        return status_to_code(self.status)

    @property
    def ok(self) -> bool:
        code = self.status_code
        return code is not None and 200 <= code < 300


@dataclass
class Response:
    """
    One resource in a multistatus.  When there are no propstats, the
    status line describes the outcome for the whole resource.
    """

    href: str
    status: Optional[str] = None
    propstats: List[PropStat] = field(default_factory=list)

    @property
    def status_code(self) -> Optional[int]:
        return status_to_code(self.status)

    @property
    def prop(self) -> Optional[Prop]:
        """The first successfully fetched Prop, if any"""
        for propstat in self.propstats:
            if propstat.ok and propstat.prop is not None:
                return propstat.prop
        return None


@dataclass
class MultiStatus:
    """
    Decoded DAV:multistatus.  The document may carry a single response
    element or several; either way they are exposed as a list in the
    order the server sent them.
    """

    responses: List[Response] = field(default_factory=list)

    @property
    def response(self) -> List[Response]:
        return self.responses

    def __iter__(self):
        return iter(self.responses)

    def __len__(self) -> int:
        return len(self.responses)
