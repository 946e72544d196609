from typing import Dict

from lxml import etree
from lxml.etree import _Element


def export_attributes(
    element: _Element, with_id: bool = True
) -> Dict[str, str]:
    result = {str(key): str(value) for key, value in element.attrib.items()}
    if not with_id:
        result.pop("id", None)
    return result


def etree_to_str(tree: _Element) -> str:
    """
    Export a lxml tree to a string

    tree - the tree to be exported
    """
    # etree returns string in bytes: b'xml'
    # run(...) calls subprocess.Popen.communicate which calls encode...
    # so there is bytes to str conversion
    raw = etree.tostring(tree)
    return raw.decode() if isinstance(raw, bytes) else raw
