import sys
from urllib.parse import urljoin
from uuid import uuid4

## We'll try to use the local minicaldav library, not the system-installed
sys.path.insert(0, "..")
sys.path.insert(0, ".")

import minicaldav
from minicaldav.lib import error

## CONFIGURATION.  Edit here.
caldav_url = "https://calendar.example.com/dav/"
username = "somebody"
password = "hunter2"

EVENT = """BEGIN:VCALENDAR
VERSION:2.0
PRODID:-//Example Corp.//minicaldav examples//EN
BEGIN:VEVENT
UID:%s
DTSTAMP:20240101T120000Z
DTSTART:20240601T170000Z
DTEND:20240601T180000Z
SUMMARY:%s
END:VEVENT
END:VCALENDAR
"""


def run_examples():
    """
    Run through all the examples, one by one
    """
    ## Discovery goes principal -> calendar home set -> calendars.
    ## Each step is one request.  The hrefs returned are paths on the
    ## server, so they are joined with the server url.
    principal = minicaldav.get_current_user_principal(caldav_url, username, password)
    principal_url = urljoin(
        caldav_url, principal.responses[0].prop.current_user_principal.href
    )

    home = minicaldav.get_calendar_home_set(principal_url, username, password)
    home_url = urljoin(caldav_url, home.responses[0].prop.calendar_home_set.href)

    calendars = minicaldav.get_calendar_component_set(home_url, username, password)
    calendar_href = print_calendars_demo(calendars)
    if not calendar_href:
        print("No calendar supporting events found")
        return

    with minicaldav.DAVClient(
        urljoin(caldav_url, calendar_href), username=username, password=password
    ) as client:
        event_demo(client)


def print_calendars_demo(calendars):
    """
    Prints the calendars and returns the href of the first one that can
    hold events
    """
    found = None
    for response in calendars:
        prop = response.prop
        if prop is None or "calendar" not in (prop.resourcetype or []):
            continue
        comps = prop.supported_calendar_component_set
        names = comps.names if comps else []
        print(
            "Calendar %s (%s), ctag %s, components %s"
            % (prop.displayname, response.href, prop.getctag, ", ".join(names))
        )
        ## no supported-calendar-component-set means everything is supported
        if found is None and (not names or "VEVENT" in names):
            found = response.href
    return found


def event_demo(client):
    uid = str(uuid4())
    path = uid + ".ics"

    ## Create.  No etag means "create or overwrite".
    etag = client.put(path, EVENT % (uid, "Test event from minicaldav examples"))

    ## Some servers don't hand out the etag on PUT; search for it then.
    found = client.search("UID", uid)
    assert len(found.responses) == 1
    if etag is None:
        etag = found.responses[0].prop.getetag

    ## Update, guarded by the etag.
    etag = client.put(path, EVENT % (uid, "Updated test event"), etag=etag)

    ## An update with an outdated etag is refused by the server.
    try:
        client.put(path, EVENT % (uid, "Lost update"), etag='"stale"')
    except error.MutationError as e:
        print("Server refused stale update with status %s" % e.status)

    if etag is None:
        etag = client.search("UID", uid).responses[0].prop.getetag
    client.delete(path, etag)


if __name__ == "__main__":
    run_examples()
