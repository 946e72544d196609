from lxml import etree
from lxml.etree import _Element


def format_os_error(e: OSError) -> str:
    return f"{e.strerror}: '{e.filename}'" if e.filename else e.strerror


def xml_fromstring(xml: str) -> _Element:
    # If the xml contains encoding declaration such as:
    # <?xml version="1.0" encoding="UTF-8"?>
    # we get an exception in python3:
    # ValueError: Unicode strings with encoding declaration are not supported.
    # Please use bytes input or XML fragments without declaration.
    # So we encode the string to bytes.
    return etree.fromstring(
        xml.encode("utf-8"),
        # it raises on a huge xml without the flag huge_tree=True
        etree.XMLParser(huge_tree=True),
    )
