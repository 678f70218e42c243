"""
Sans-I/O CalDAV protocol implementation.

This module provides protocol-level operations without any I/O.
It builds requests and parses responses as pure data transformations.

The protocol layer is organized into:
- types: Core data structures (DAVRequest, DAVResponse, the multistatus model)
- xml_builders: Pure functions to build XML request bodies
- xml_parsers: Pure functions to parse XML response bodies
- operations: CalDAVProtocol class combining builders and parsers

Example usage:

    from minicaldav.protocol import CalDAVProtocol

    protocol = CalDAVProtocol(base_url="https://cal.example.com/dav/")

    # Build a request (no I/O)
    request = protocol.current_user_principal_request()

    # Execute via your preferred I/O (sync, async, or mock)
    response = your_http_client.execute(request)

    # Parse response (no I/O)
    multistatus = protocol.parse_multistatus(response)
"""

from .types import (
    # Enums
    DAVMethod,
    # Request/Response
    DAVRequest,
    DAVResponse,
    # Multistatus model
    Component,
    ComponentSet,
    Href,
    MultiStatus,
    Prop,
    PropStat,
    Response,
)
from .xml_builders import (
    build_calendar_component_set_body,
    build_calendar_home_set_body,
    build_current_user_principal_body,
    build_event_search_body,
    build_propfind_body,
)
from .xml_parsers import (
    parse_multistatus,
    tree_to_multistatus,
    xml_to_tree,
)
from .operations import CalDAVProtocol

__all__ = [
    # Enums
    "DAVMethod",
    # Request/Response
    "DAVRequest",
    "DAVResponse",
    # Multistatus model
    "Component",
    "ComponentSet",
    "Href",
    "MultiStatus",
    "Prop",
    "PropStat",
    "Response",
    # XML Builders
    "build_calendar_component_set_body",
    "build_calendar_home_set_body",
    "build_current_user_principal_body",
    "build_event_search_body",
    "build_propfind_body",
    # XML Parsers
    "parse_multistatus",
    "tree_to_multistatus",
    "xml_to_tree",
    # Protocol
    "CalDAVProtocol",
]
