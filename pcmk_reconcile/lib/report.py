"""
Human readable cluster status for debugging

Markers in the report:
(M) the primitive is not managed by the cluster
(F) the primitive has failed on the node and it is not running there
(L) a location constraint of the primitive on the node exists
"""

from typing import (
    Dict,
    List,
    Optional,
)

from lxml.etree import _Element

from pcmk_reconcile.common.options import PacemakerOptions
from pcmk_reconcile.common.types import StringSequence
from pcmk_reconcile.lib import cluster_property
from pcmk_reconcile.lib.cib import (
    resource,
    status,
)
from pcmk_reconcile.lib.cib.constraint.location import location_exists
from pcmk_reconcile.lib.cib.store import CibStore
from pcmk_reconcile.lib.pacemaker.live import ATTRIBUTE_TYPE_CRM_CONFIG


def _status_by_primitive(cib: _Element) -> Dict[str, Dict[str, Optional[str]]]:
    result: Dict[str, Dict[str, Optional[str]]] = {}
    for node_name, primitives in status.get_nodes_status(cib).items():
        for primitive_id, primitive_status in primitives.items():
            result.setdefault(primitive_id, {})[
                node_name
            ] = primitive_status.status
    return result


def _primitive_line(
    primitive_id: str, info: Optional[resource.PrimitiveInfo]
) -> str:
    primitive_type = "Simple"
    if info and info.is_clone:
        primitive_type = "Cloned"
    if info and info.is_multistate:
        primitive_type = "Multistate"
    line = "-> {0} primitive: '{1}'".format(
        primitive_type, info.name if info else primitive_id
    )
    if info and not info.is_managed:
        line += " (M)"
    return line


def _node_block(
    cib: _Element,
    primitive_id: str,
    full_name: str,
    node_name: str,
    node_status: Optional[str],
) -> str:
    block = "{0}: {1}".format(node_name, (node_status or "?").upper())
    if status.primitive_has_failures(
        cib, primitive_id, node_name
    ) and not status.primitive_is_running(cib, primitive_id, node_name):
        block += " (F)"
    if location_exists(cib, full_name, node_name):
        block += " (L)"
    return block


def cluster_debug_report(
    store: CibStore,
    options: PacemakerOptions,
    tag: Optional[str] = None,
) -> Optional[str]:
    """
    Return a report of the cluster status or None if the cib has not been
    loaded yet

    tag -- describes where the report has been made
    """
    if not store.is_fetched():
        return None
    cib = store.fetch()
    tag_part = f" at '{tag}'" if tag else ""
    primitives = resource.get_primitives(cib)

    lines: List[str] = ["", f"Pacemaker debug block start{tag_part}"]
    for primitive_id, node_map in _status_by_primitive(cib).items():
        info = primitives.get(primitive_id)
        lines.append(_primitive_line(primitive_id, info))
        nodes: StringSequence = [
            _node_block(
                cib,
                primitive_id,
                info.name if info else primitive_id,
                node_name,
                node_map[node_name],
            )
            for node_name in sorted(node_map)
        ]
        lines.append("   " + " | ".join(nodes))
    for name in options.debug_show_properties:
        if cluster_property.is_defined(cib, ATTRIBUTE_TYPE_CRM_CONFIG, name):
            value = cluster_property.get_value(
                cib, ATTRIBUTE_TYPE_CRM_CONFIG, name
            )
            lines.append(f"* {name}: {value}")
    lines.append(f"Pacemaker debug block end{tag_part}")
    return "\n".join(lines) + "\n"
