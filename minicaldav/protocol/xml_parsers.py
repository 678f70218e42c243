"""
Pure functions for parsing CalDAV XML responses.

Decoding happens in two steps.  ``xml_to_tree`` turns the XML document
into a generic nested tree of dicts and lists, keyed on element local
names.  ``parse_multistatus`` then maps the ``multistatus`` node of that
tree onto the dataclasses in ``minicaldav.protocol.types``, checking the
shape on the way and raising ProtocolDecodeError when it does not fit.
"""

from typing import Any
from typing import Dict
from typing import List
from typing import Optional

from lxml import etree
from lxml.etree import _Element

from minicaldav.lib import error

from .types import Component
from .types import ComponentSet
from .types import Href
from .types import MultiStatus
from .types import Prop
from .types import PropStat
from .types import Response

ATTRIBUTES = "$attributes"
VALUE = "$value"


def xml_to_tree(body: bytes, huge_tree: bool = False) -> Dict[str, Any]:
    """
    Convert an XML document into a generic tree.

    * element local names become keys
    * repeated sibling elements become lists
    * attributes go under the ``"$attributes"`` key
    * an element with neither children nor attributes becomes its text
      (None for an empty element); otherwise non-blank text goes under
      ``"$value"``

    An empty body gives an empty dict.

    Raises:
        ProtocolDecodeError: if the body is not well-formed XML
    """
    if not body or not body.strip():
        return {}

    parser = etree.XMLParser(
        huge_tree=huge_tree, resolve_entities=False, no_network=True
    )
    try:
        root = etree.fromstring(body, parser)
    except etree.XMLSyntaxError as e:
        raise error.ProtocolDecodeError(reason="invalid XML: %s" % e) from e

    return {etree.QName(root).localname: _element_to_node(root)}


def _element_to_node(elem: _Element) -> Any:
    children = [c for c in elem if isinstance(c.tag, str)]
    if not children and not elem.attrib:
        return elem.text

    node: Dict[str, Any] = {}
    if elem.attrib:
        node[ATTRIBUTES] = {
            etree.QName(k).localname: v for k, v in elem.attrib.items()
        }
    if elem.text and elem.text.strip():
        node[VALUE] = elem.text

    for child in children:
        key = etree.QName(child).localname
        value = _element_to_node(child)
        if key not in node:
            node[key] = value
        elif isinstance(node[key], list):
            node[key].append(value)
        else:
            node[key] = [node[key], value]
    return node


def parse_multistatus(body: bytes, huge_tree: bool = False) -> MultiStatus:
    """
    Parse a 207 Multi-Status response body.

    Args:
        body: Raw XML response bytes
        huge_tree: Allow parsing very large XML documents

    Returns:
        MultiStatus with one Response per DAV:response, in document order

    Raises:
        ProtocolDecodeError: If the body is not a multistatus document
    """
    return tree_to_multistatus(xml_to_tree(body, huge_tree=huge_tree))


def tree_to_multistatus(tree: Dict[str, Any]) -> MultiStatus:
    if "multistatus" not in tree:
        raise error.ProtocolDecodeError(
            reason="no multistatus element found (got %s)"
            % (", ".join(tree) or "an empty document")
        )
    multistatus = tree["multistatus"]
    if multistatus is None or isinstance(multistatus, str):
        ## <D:multistatus/> - legal, if somewhat pointless
        return MultiStatus()
    if not isinstance(multistatus, dict):
        raise error.ProtocolDecodeError(reason="malformed multistatus element")

    return MultiStatus(
        responses=[_parse_response(r) for r in _as_list(multistatus.get("response"))]
    )


def _parse_response(node: Any) -> Response:
    if not isinstance(node, dict):
        raise error.ProtocolDecodeError(reason="response element without content")

    ## RFC4918 allows several hrefs when only a status is given
    hrefs = _as_list(node.get("href"))
    href = _text(hrefs[0]) if hrefs else None
    if not href or not href.strip():
        raise error.ProtocolDecodeError(reason="response element without href")

    return Response(
        href=href.strip(),
        status=_strip(_text(node.get("status"))),
        propstats=[_parse_propstat(p) for p in _as_list(node.get("propstat"))],
    )


def _parse_propstat(node: Any) -> PropStat:
    status = _text(node.get("status")) if isinstance(node, dict) else None
    if not status:
        raise error.ProtocolDecodeError(reason="propstat element without status")

    prop = None
    if "prop" in node:
        prop = _parse_prop(node["prop"])
    return PropStat(status=status.strip(), prop=prop)


def _parse_prop(node: Any) -> Prop:
    if not isinstance(node, dict):
        ## <D:prop/>
        return Prop()

    prop = Prop()
    if "current-user-principal" in node:
        prop.current_user_principal = _href(node["current-user-principal"])
    if "calendar-home-set" in node:
        prop.calendar_home_set = _href(node["calendar-home-set"])
    if "displayname" in node:
        prop.displayname = _text(node["displayname"]) or ""
    if "getctag" in node:
        prop.getctag = _strip(_text(node["getctag"]))
    if "getetag" in node:
        prop.getetag = _strip(_text(node["getetag"]))
    if "calendar-data" in node:
        prop.calendar_data = _text(node["calendar-data"])
    if "resourcetype" in node:
        prop.resourcetype = _child_names(node["resourcetype"])
    if "supported-calendar-component-set" in node:
        prop.supported_calendar_component_set = _component_set(
            node["supported-calendar-component-set"]
        )
    return prop


# Helper functions


def _as_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def _text(node: Any) -> Optional[str]:
    if isinstance(node, str):
        return node
    if isinstance(node, dict):
        return node.get(VALUE)
    return None


def _strip(text: Optional[str]) -> Optional[str]:
    return text.strip() if text is not None else None


def _href(node: Any) -> Optional[Href]:
    """
    Pick the href out of a property like current-user-principal.  If
    the server sends several, the first one wins.
    """
    if not isinstance(node, dict):
        return None
    for href in _as_list(node.get("href")):
        text = _text(href)
        if text and text.strip():
            return Href(text.strip())
    return None


def _child_names(node: Any) -> List[str]:
    if not isinstance(node, dict):
        return []
    return [key for key in node if key not in (ATTRIBUTES, VALUE)]


def _component_set(node: Any) -> ComponentSet:
    comps = []
    if isinstance(node, dict):
        for comp in _as_list(node.get("comp")):
            name = None
            if isinstance(comp, dict):
                name = comp.get(ATTRIBUTES, {}).get("name")
            if not name:
                raise error.ProtocolDecodeError(reason="comp element without name")
            comps.append(Component(name))
    return ComponentSet(comps)
