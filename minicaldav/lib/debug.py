from lxml import etree


def xmlstring(root) -> str:
    if root is None:
        return ""
    if isinstance(root, bytes):
        return root.decode("utf-8", errors="replace")
    if isinstance(root, str):
        return root
    if hasattr(root, "xmlelement"):
        root = root.xmlelement()
    return etree.tostring(root, pretty_print=True).decode("utf-8")


def redact_headers(headers) -> dict:
    """Copy of the headers that is safe to write to a log"""
    return {
        k: ("***" if k.lower() == "authorization" else v)
        for k, v in (headers or {}).items()
    }
