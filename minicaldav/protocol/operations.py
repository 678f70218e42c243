"""
CalDAV protocol operations combining request building and response parsing.

This class provides a high-level interface to CalDAV operations while
remaining completely I/O-free.
"""

import base64
import logging
from typing import Dict, Optional, Union
from urllib.parse import urljoin, urlparse

from minicaldav.lib import error

from .types import DAVMethod, DAVRequest, DAVResponse, MultiStatus
from .xml_builders import (
    build_calendar_component_set_body,
    build_calendar_home_set_body,
    build_current_user_principal_body,
    build_event_search_body,
)
from .xml_parsers import parse_multistatus

log = logging.getLogger("minicaldav")

XML_CONTENT_TYPE = "application/xml; charset=utf-8"
ICAL_CONTENT_TYPE = "text/calendar; charset=utf-8"


class CalDAVProtocol:
    """
    Sans-I/O CalDAV protocol handler.

    Builds requests and parses responses without doing any I/O.
    All HTTP communication is delegated to an external I/O implementation.

    Example:
        protocol = CalDAVProtocol(base_url="https://cal.example.com/dav/cal/")

        # Build request
        request = protocol.search_request("UID", "1234@example.com")

        # Execute with your I/O (not shown)
        response = io.execute(request)

        # Parse response
        multistatus = protocol.parse_multistatus(response)
    """

    def __init__(
        self,
        base_url: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        huge_tree: bool = False,
    ):
        """
        Initialize the protocol handler.

        Args:
            base_url: URL of the CalDAV resource the client works on
            username: Username for Basic authentication
            password: Password for Basic authentication
            huge_tree: Allow parsing very large XML documents
        """
        if not base_url:
            raise ValueError("base_url is required")
        self.base_url = base_url
        self.username = username
        self.password = password
        self.huge_tree = huge_tree
        self._auth_header = self._build_auth_header(username, password)

    def _build_auth_header(
        self,
        username: Optional[str],
        password: Optional[str],
    ) -> Optional[str]:
        """Build Basic auth header if credentials provided."""
        if username is not None and password is not None:
            credentials = f"{username}:{password}"
            encoded = base64.b64encode(credentials.encode("utf-8")).decode("ascii")
            return f"Basic {encoded}"
        return None

    def _base_headers(self) -> Dict[str, str]:
        """Return base headers for all requests."""
        headers = {}
        if self._auth_header:
            headers["Authorization"] = self._auth_header
        return headers

    def resolve_url(self, path: str) -> str:
        """
        Resolve a resource path against the base URL.

        "event.ics" is put below the base collection (if the base URL
        ends with a slash), "/other/event.ics" replaces the path of the
        base URL, and a full URL is used as it is.
        """
        if not path:
            return self.base_url
        if urlparse(path).scheme:
            return path
        return urljoin(self.base_url, path)

    # =========================================================================
    # Request builders
    # =========================================================================

    def _xml_request(self, method: DAVMethod, depth: int, body: bytes) -> DAVRequest:
        headers = self._base_headers()
        headers.update(
            {
                "Depth": str(depth),
                "Prefer": "return-minimal",
                "Content-Type": XML_CONTENT_TYPE,
            }
        )
        return DAVRequest(method=method, url=self.base_url, headers=headers, body=body)

    def current_user_principal_request(self) -> DAVRequest:
        """PROPFIND, depth 0, for DAV:current-user-principal"""
        return self._xml_request(
            DAVMethod.PROPFIND, 0, build_current_user_principal_body()
        )

    def calendar_home_set_request(self) -> DAVRequest:
        """PROPFIND, depth 0, for CALDAV:calendar-home-set"""
        return self._xml_request(DAVMethod.PROPFIND, 0, build_calendar_home_set_body())

    def calendar_component_set_request(self) -> DAVRequest:
        """
        PROPFIND, depth 1, listing the collections below the base URL
        with resource type, display name, ctag and supported components.
        """
        return self._xml_request(
            DAVMethod.PROPFIND, 1, build_calendar_component_set_body()
        )

    def search_request(self, field: str, id: str) -> DAVRequest:
        """calendar-query REPORT, depth 1, for VEVENTs where ``field`` matches ``id``"""
        return self._xml_request(
            DAVMethod.REPORT, 1, build_event_search_body(field, id)
        )

    def put_request(
        self,
        path: str,
        data: Union[str, bytes],
        etag: Optional[str] = None,
        content_type: str = ICAL_CONTENT_TYPE,
    ) -> DAVRequest:
        """
        Build a PUT request.  If-Match is only sent when an etag is given,
        so leaving it out creates or overwrites unconditionally.
        """
        if isinstance(data, str):
            data = data.encode("utf-8")
        headers = self._base_headers()
        headers["Content-Type"] = content_type
        if etag:
            headers["If-Match"] = etag
        return DAVRequest(
            method=DAVMethod.PUT,
            url=self.resolve_url(path),
            headers=headers,
            body=data,
        )

    def delete_request(self, path: str, etag: str) -> DAVRequest:
        """
        Build a conditional DELETE request.  Unconditional deletes are
        not supported.

        Raises:
            ValueError: if no etag is given
        """
        if not etag:
            raise ValueError("delete requires the etag of the resource")
        headers = self._base_headers()
        headers["If-Match"] = etag
        return DAVRequest(
            method=DAVMethod.DELETE,
            url=self.resolve_url(path),
            headers=headers,
        )

    # =========================================================================
    # Response parsers
    # =========================================================================

    def parse_multistatus(
        self, response: DAVResponse, url: Optional[str] = None
    ) -> MultiStatus:
        """
        Parse the response to a PROPFIND or REPORT.  The multistatus is
        returned as the server sent it; per-resource failure statuses
        inside it are left for the caller to look at.

        Raises:
            DAVResponseError: if the HTTP status is not 2xx
            ProtocolDecodeError: if the body is not a multistatus
        """
        if not response.ok:
            raise error.DAVResponseError(
                url=url or self.base_url,
                status=response.status,
                body=response.body,
                reason="%i %s" % (response.status, response.reason),
            )
        try:
            return parse_multistatus(response.body, huge_tree=self.huge_tree)
        except error.ProtocolDecodeError as e:
            e.url = url or self.base_url
            raise

    def parse_put(self, response: DAVResponse, url: Optional[str] = None) -> Optional[str]:
        """
        Interpret the response to a PUT.

        Returns:
            The ETag header of the stored representation, or None if the
            server did not send one

        Raises:
            PutError: on any status outside 200-299 (412 for a stale etag)
        """
        if not response.ok:
            raise error.PutError(
                url=url,
                status=response.status,
                body=response.body,
                reason="%i %s" % (response.status, response.reason),
            )
        etag = response.header("ETag")
        if not etag:
            log.debug("PUT to %s succeeded, but no etag was returned", url)
            return None
        return etag

    def parse_delete(
        self, response: DAVResponse, url: Optional[str] = None
    ) -> MultiStatus:
        """
        Interpret the response to a DELETE.

        Most servers answer 204 with no body, which gives an empty
        MultiStatus.  A multistatus body (some servers report partial
        failures for collections this way) is decoded and returned.

        Raises:
            DeleteError: on any status outside 200-299
        """
        if not response.ok:
            raise error.DeleteError(
                url=url,
                status=response.status,
                body=response.body,
                reason="%i %s" % (response.status, response.reason),
            )
        if not response.body or not response.body.strip():
            return MultiStatus()
        try:
            return parse_multistatus(response.body, huge_tree=self.huge_tree)
        except error.ProtocolDecodeError:
            log.debug(
                "DELETE of %s succeeded with a body that is not a multistatus: %r",
                url,
                response.body[:200],
            )
            return MultiStatus()
