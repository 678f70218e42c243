"""
Unit tests for Sans-I/O protocol layer.

These tests verify protocol logic without any HTTP mocking required.
All tests are pure - they test data transformations only.
"""

import pytest
from lxml import etree

from minicaldav.lib import error
from minicaldav.protocol import (
    # Types
    CalDAVProtocol,
    DAVMethod,
    DAVRequest,
    DAVResponse,
    Href,
    MultiStatus,
    # Builders
    build_calendar_component_set_body,
    build_calendar_home_set_body,
    build_current_user_principal_body,
    build_event_search_body,
    build_propfind_body,
    # Parsers
    parse_multistatus,
    xml_to_tree,
)

NS = {
    "D": "DAV:",
    "C": "urn:ietf:params:xml:ns:caldav",
    "CS": "http://calendarserver.org/ns/",
}

PRINCIPAL_XML = b"""<?xml version="1.0" encoding="utf-8"?>
<D:multistatus xmlns:D="DAV:">
    <D:response>
        <D:href>/</D:href>
        <D:propstat>
            <D:prop>
                <D:current-user-principal>
                    <D:href>/principals/alice/</D:href>
                </D:current-user-principal>
            </D:prop>
            <D:status>HTTP/1.1 200 OK</D:status>
        </D:propstat>
    </D:response>
</D:multistatus>"""

CALENDARS_XML = b"""<?xml version="1.0" encoding="utf-8"?>
<D:multistatus xmlns:D="DAV:" xmlns:C="urn:ietf:params:xml:ns:caldav"
               xmlns:CS="http://calendarserver.org/ns/">
    <D:response>
        <D:href>/calendars/alice/</D:href>
        <D:propstat>
            <D:prop>
                <D:resourcetype><D:collection/></D:resourcetype>
            </D:prop>
            <D:status>HTTP/1.1 200 OK</D:status>
        </D:propstat>
    </D:response>
    <D:response>
        <D:href>/calendars/alice/work/</D:href>
        <D:propstat>
            <D:prop>
                <D:resourcetype><D:collection/><C:calendar/></D:resourcetype>
                <D:displayname>Work</D:displayname>
                <CS:getctag>ctag-17</CS:getctag>
                <C:supported-calendar-component-set>
                    <C:comp name="VEVENT"/>
                    <C:comp name="VTODO"/>
                </C:supported-calendar-component-set>
            </D:prop>
            <D:status>HTTP/1.1 200 OK</D:status>
        </D:propstat>
        <D:propstat>
            <D:prop><C:calendar-home-set/></D:prop>
            <D:status>HTTP/1.1 404 Not Found</D:status>
        </D:propstat>
    </D:response>
    <D:response>
        <D:href>/calendars/alice/home/</D:href>
        <D:propstat>
            <D:prop>
                <D:resourcetype><D:collection/><C:calendar/></D:resourcetype>
                <D:displayname>Home</D:displayname>
                <C:supported-calendar-component-set>
                    <C:comp name="VEVENT"/>
                </C:supported-calendar-component-set>
            </D:prop>
            <D:status>HTTP/1.1 200 OK</D:status>
        </D:propstat>
    </D:response>
</D:multistatus>"""

SEARCH_XML = b"""<?xml version="1.0" encoding="utf-8"?>
<D:multistatus xmlns:D="DAV:" xmlns:C="urn:ietf:params:xml:ns:caldav">
    <D:response>
        <D:href>/calendars/alice/work/event.ics</D:href>
        <D:propstat>
            <D:prop>
                <D:getetag>"etag-123"</D:getetag>
                <C:calendar-data>BEGIN:VCALENDAR
VERSION:2.0
BEGIN:VEVENT
UID:test@example.com
END:VEVENT
END:VCALENDAR
</C:calendar-data>
            </D:prop>
            <D:status>HTTP/1.1 200 OK</D:status>
        </D:propstat>
    </D:response>
</D:multistatus>"""


def _xml(body):
    return etree.fromstring(body)


class TestDAVTypes:
    """Test core DAV types."""

    def test_dav_request_immutable(self):
        """DAVRequest should be immutable (frozen dataclass)."""
        request = DAVRequest(method=DAVMethod.PUT, url="https://example.com/")
        with pytest.raises(AttributeError):
            request.url = "https://other.com/"

    def test_dav_response_ok(self):
        """ok property should return True for 2xx status codes."""
        assert DAVResponse(status=200, headers={}, body=b"").ok
        assert DAVResponse(status=204, headers={}, body=b"").ok
        assert DAVResponse(status=207, headers={}, body=b"").ok
        assert not DAVResponse(status=304, headers={}, body=b"").ok
        assert not DAVResponse(status=412, headers={}, body=b"").ok

    def test_dav_response_header_case_insensitive(self):
        response = DAVResponse(status=201, headers={"etag": '"x"'}, body=b"")
        assert response.header("ETag") == '"x"'
        assert response.header("Location") is None


class TestXMLBuilders:
    """Test XML building functions."""

    def test_current_user_principal_body(self):
        root = _xml(build_current_user_principal_body())
        assert root.tag == "{DAV:}propfind"
        assert root.xpath("/D:propfind/D:prop/D:current-user-principal", namespaces=NS)

    def test_calendar_home_set_body(self):
        root = _xml(build_calendar_home_set_body())
        assert root.xpath("/D:propfind/D:prop/C:calendar-home-set", namespaces=NS)

    def test_calendar_component_set_body(self):
        root = _xml(build_calendar_component_set_body())
        props = root.xpath("/D:propfind/D:prop/*", namespaces=NS)
        assert [p.tag for p in props] == [
            "{DAV:}resourcetype",
            "{DAV:}displayname",
            "{http://calendarserver.org/ns/}getctag",
            "{urn:ietf:params:xml:ns:caldav}supported-calendar-component-set",
        ]

    def test_propfind_body_unknown_property(self):
        with pytest.raises(ValueError):
            build_propfind_body(["no-such-thing"])

    def test_propfind_body_accepts_underscores(self):
        root = _xml(build_propfind_body(["calendar_home_set"]))
        assert root.xpath("//C:calendar-home-set", namespaces=NS)

    def test_event_search_nesting(self):
        """field and id end up four levels down in the filter"""
        root = _xml(build_event_search_body("UID", "1234@example.com"))
        assert root.tag == "{urn:ietf:params:xml:ns:caldav}calendar-query"
        matches = root.xpath(
            "/C:calendar-query/C:filter"
            "/C:comp-filter[@name='VCALENDAR']"
            "/C:comp-filter[@name='VEVENT']"
            "/C:prop-filter[@name='UID']"
            "/C:text-match",
            namespaces=NS,
        )
        assert len(matches) == 1
        assert matches[0].text == "1234@example.com"
        assert root.xpath("/C:calendar-query/D:prop/D:getetag", namespaces=NS)
        assert root.xpath("/C:calendar-query/D:prop/C:calendar-data", namespaces=NS)

    def test_event_search_escapes_values(self):
        body = build_event_search_body('X-"odd"', "a<b&c")
        assert b"a&lt;b&amp;c" in body
        root = _xml(body)
        prop_filter = root.xpath("//C:prop-filter", namespaces=NS)[0]
        assert prop_filter.get("name") == 'X-"odd"'
        assert root.xpath("//C:text-match", namespaces=NS)[0].text == "a<b&c"

    def test_event_search_injection_stays_text(self):
        body = build_event_search_body(
            "UID", "x</C:text-match><C:comp-filter name='VTODO'/>"
        )
        root = _xml(body)
        assert len(root.xpath("//C:comp-filter", namespaces=NS)) == 2

    def test_event_search_requires_field(self):
        with pytest.raises(ValueError):
            build_event_search_body("", "1234")


class TestXMLParsers:
    """Test XML parsing functions."""

    def test_xml_to_tree(self):
        tree = xml_to_tree(
            b'<D:a xmlns:D="DAV:"><D:b>1</D:b><D:b>2</D:b>'
            b'<D:c name="x">text</D:c><D:d/></D:a>'
        )
        assert tree == {
            "a": {
                "b": ["1", "2"],
                "c": {"$attributes": {"name": "x"}, "$value": "text"},
                "d": None,
            }
        }

    def test_xml_to_tree_empty_body(self):
        assert xml_to_tree(b"") == {}
        assert xml_to_tree(b"  \n") == {}

    def test_single_response_is_a_list(self):
        result = parse_multistatus(PRINCIPAL_XML)
        assert isinstance(result, MultiStatus)
        assert isinstance(result.response, list)
        assert len(result.responses) == 1
        response = result.responses[0]
        assert response.href == "/"
        assert response.prop.current_user_principal == Href("/principals/alice/")

    def test_response_order_is_preserved(self):
        result = parse_multistatus(CALENDARS_XML)
        assert [r.href for r in result] == [
            "/calendars/alice/",
            "/calendars/alice/work/",
            "/calendars/alice/home/",
        ]

    def test_calendar_properties(self):
        work = parse_multistatus(CALENDARS_XML).responses[1]
        assert len(work.propstats) == 2
        assert work.propstats[1].status_code == 404
        assert not work.propstats[1].ok

        prop = work.prop
        assert prop.displayname == "Work"
        assert prop.getctag == "ctag-17"
        assert prop.resourcetype == ["collection", "calendar"]
        assert prop.supported_calendar_component_set.names == ["VEVENT", "VTODO"]
        assert prop.calendar_home_set is None

    def test_single_comp_is_a_list(self):
        home = parse_multistatus(CALENDARS_XML).responses[2]
        assert home.prop.supported_calendar_component_set.names == ["VEVENT"]
        assert home.prop.getctag is None

    def test_search_result(self):
        result = parse_multistatus(SEARCH_XML)
        prop = result.responses[0].prop
        assert prop.getetag == '"etag-123"'
        assert prop.calendar_data.startswith("BEGIN:VCALENDAR\n")
        assert "UID:test@example.com" in prop.calendar_data

    def test_status_only_response(self):
        result = parse_multistatus(
            b"""<D:multistatus xmlns:D="DAV:">
                <D:response>
                    <D:href>/cal/gone.ics</D:href>
                    <D:status>HTTP/1.1 404 Not Found</D:status>
                </D:response>
            </D:multistatus>"""
        )
        response = result.responses[0]
        assert response.propstats == []
        assert response.status_code == 404
        assert response.prop is None

    def test_empty_multistatus(self):
        result = parse_multistatus(b'<D:multistatus xmlns:D="DAV:"/>')
        assert result.responses == []

    def test_not_a_multistatus(self):
        with pytest.raises(error.ProtocolDecodeError):
            parse_multistatus(b'<D:error xmlns:D="DAV:"><D:need-privileges/></D:error>')

    def test_empty_body(self):
        with pytest.raises(error.ProtocolDecodeError):
            parse_multistatus(b"")

    def test_invalid_xml(self):
        with pytest.raises(error.ProtocolDecodeError):
            parse_multistatus(b"<html><body>Login</body>")

    def test_response_without_href(self):
        with pytest.raises(error.ProtocolDecodeError):
            parse_multistatus(
                b"""<D:multistatus xmlns:D="DAV:"><D:response>
                    <D:status>HTTP/1.1 200 OK</D:status>
                </D:response></D:multistatus>"""
            )

    def test_propstat_without_status(self):
        with pytest.raises(error.ProtocolDecodeError):
            parse_multistatus(
                b"""<D:multistatus xmlns:D="DAV:"><D:response>
                    <D:href>/x</D:href>
                    <D:propstat><D:prop><D:displayname>x</D:displayname></D:prop></D:propstat>
                </D:response></D:multistatus>"""
            )


class TestCalDAVProtocol:
    """Test CalDAVProtocol request building and response interpretation."""

    def setup_method(self):
        self.protocol = CalDAVProtocol(
            base_url="https://cal.example.com/dav/calendars/alice/work/",
            username="alice",
            password="secret",
        )

    def test_auth_header(self):
        request = self.protocol.current_user_principal_request()
        ## base64 of alice:secret
        assert request.headers["Authorization"] == "Basic YWxpY2U6c2VjcmV0"

    def test_no_auth_header_without_credentials(self):
        protocol = CalDAVProtocol(base_url="https://cal.example.com/")
        request = protocol.current_user_principal_request()
        assert "Authorization" not in request.headers

    @pytest.mark.parametrize(
        "name,method,depth",
        [
            ("current_user_principal_request", DAVMethod.PROPFIND, "0"),
            ("calendar_home_set_request", DAVMethod.PROPFIND, "0"),
            ("calendar_component_set_request", DAVMethod.PROPFIND, "1"),
        ],
    )
    def test_discovery_requests(self, name, method, depth):
        request = getattr(self.protocol, name)()
        assert request.method == method
        assert request.url == self.protocol.base_url
        assert request.headers["Depth"] == depth
        assert request.headers["Prefer"] == "return-minimal"

    def test_search_request(self):
        request = self.protocol.search_request("UID", "abc")
        assert request.method == DAVMethod.REPORT
        assert request.headers["Depth"] == "1"
        assert request.headers["Prefer"] == "return-minimal"
        assert b"calendar-query" in request.body

    def test_resolve_url(self):
        assert (
            self.protocol.resolve_url("event.ics")
            == "https://cal.example.com/dav/calendars/alice/work/event.ics"
        )
        assert (
            self.protocol.resolve_url("/other/event.ics")
            == "https://cal.example.com/other/event.ics"
        )
        assert (
            self.protocol.resolve_url("https://elsewhere.example.com/e.ics")
            == "https://elsewhere.example.com/e.ics"
        )

    def test_put_request_without_etag(self):
        request = self.protocol.put_request("event.ics", "BEGIN:VCALENDAR")
        assert request.method == DAVMethod.PUT
        assert "If-Match" not in request.headers
        assert request.body == b"BEGIN:VCALENDAR"
        assert request.headers["Content-Type"].startswith("text/calendar")
        assert "Depth" not in request.headers

    def test_put_request_with_etag(self):
        request = self.protocol.put_request("event.ics", "x", etag='"v1"')
        assert request.headers["If-Match"] == '"v1"'

    def test_delete_request(self):
        request = self.protocol.delete_request("event.ics", '"v1"')
        assert request.method == DAVMethod.DELETE
        assert request.headers["If-Match"] == '"v1"'
        assert request.body is None

    @pytest.mark.parametrize("etag", [None, ""])
    def test_delete_request_requires_etag(self, etag):
        with pytest.raises(ValueError):
            self.protocol.delete_request("event.ics", etag)

    def test_parse_put_returns_etag(self):
        response = DAVResponse(status=201, headers={"ETag": '"abc123"'}, body=b"")
        assert self.protocol.parse_put(response) == '"abc123"'

    def test_parse_put_without_etag(self):
        response = DAVResponse(status=204, headers={}, body=b"")
        assert self.protocol.parse_put(response) is None

    def test_parse_put_precondition_failed(self):
        response = DAVResponse(status=412, headers={}, body=b"stale")
        with pytest.raises(error.MutationError) as excinfo:
            self.protocol.parse_put(response, "https://cal.example.com/e.ics")
        assert isinstance(excinfo.value, error.PutError)
        assert excinfo.value.status == 412
        assert excinfo.value.body == b"stale"
        assert excinfo.value.precondition_failed
        assert excinfo.value.url == "https://cal.example.com/e.ics"

    def test_parse_delete_no_content(self):
        response = DAVResponse(status=204, headers={}, body=b"")
        result = self.protocol.parse_delete(response)
        assert isinstance(result, MultiStatus)
        assert result.responses == []

    def test_parse_delete_non_xml_body(self):
        response = DAVResponse(status=200, headers={}, body=b"deleted")
        assert self.protocol.parse_delete(response).responses == []

    def test_parse_delete_multistatus(self):
        response = DAVResponse(
            status=207,
            headers={},
            body=b"""<D:multistatus xmlns:D="DAV:"><D:response>
                <D:href>/cal/locked.ics</D:href>
                <D:status>HTTP/1.1 423 Locked</D:status>
            </D:response></D:multistatus>""",
        )
        result = self.protocol.parse_delete(response)
        assert result.responses[0].status_code == 423

    def test_parse_delete_failure(self):
        response = DAVResponse(status=412, headers={}, body=b"")
        with pytest.raises(error.DeleteError) as excinfo:
            self.protocol.parse_delete(response)
        assert excinfo.value.status == 412

    def test_parse_multistatus_http_error(self):
        response = DAVResponse(status=401, headers={}, body=b"<html/>")
        with pytest.raises(error.DAVResponseError) as excinfo:
            self.protocol.parse_multistatus(response)
        assert excinfo.value.status == 401
        assert excinfo.value.url == self.protocol.base_url

    def test_parse_multistatus_decode_error_has_url(self):
        response = DAVResponse(status=207, headers={}, body=b"<nope/>")
        with pytest.raises(error.ProtocolDecodeError) as excinfo:
            self.protocol.parse_multistatus(response)
        assert excinfo.value.url == self.protocol.base_url
