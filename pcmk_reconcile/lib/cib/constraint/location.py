from lxml.etree import _Element

from pcmk_reconcile.lib.cib import sections

TAG = "rsc_location"


def location_exists(cib: _Element, resource_id: str, node: str) -> bool:
    """
    Check if a location constraint of a resource on a node exists

    resource_id -- id of a primitive or its clone
    node -- name of the node
    """
    return bool(
        sections.get(cib, sections.CONSTRAINTS).xpath(
            f"./{TAG}[@rsc=$rsc and @node=$node]",
            rsc=resource_id,
            node=node,
        )
    )
