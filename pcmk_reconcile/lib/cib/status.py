"""
Status of primitives on nodes computed from the operation history stored in
the status section of the cib
"""

from dataclasses import dataclass
from typing import (
    Dict,
    Iterable,
    List,
    Optional,
)

from lxml.etree import _Element

from pcmk_reconcile.lib.cib import sections

STATUS_START = "start"
STATUS_STOP = "stop"
STATUS_MASTER = "master"

_STATUS_RANK = {STATUS_STOP: 0, STATUS_START: 1, STATUS_MASTER: 2}

_RC_OK = "0"
_RC_NOT_RUNNING = "7"
_RC_RUNNING_MASTER = "8"

_MONITOR_STATUS = {
    _RC_OK: STATUS_START,
    _RC_NOT_RUNNING: STATUS_STOP,
    _RC_RUNNING_MASTER: STATUS_MASTER,
}
_OPERATION_STATUS = {
    "start": STATUS_START,
    "stop": STATUS_STOP,
    "promote": STATUS_MASTER,
    "demote": STATUS_START,
}


@dataclass(frozen=True)
class PrimitiveStatus:
    status: Optional[str]
    failed: bool


def _call_id(operation_el: _Element) -> int:
    try:
        return int(operation_el.get("call-id", "0"))
    except ValueError:
        return 0


def determine_primitive_status(
    operation_list: Iterable[_Element],
) -> PrimitiveStatus:
    """
    Replay the operation history of a primitive on a node

    operation_list -- lrm_rsc_op elements of one lrm_resource
    """
    status = None
    failed = False
    for operation_el in sorted(operation_list, key=_call_id):
        operation = operation_el.get("operation")
        rc_code = operation_el.get("rc-code")
        if operation == "monitor":
            if rc_code in _MONITOR_STATUS:
                status = _MONITOR_STATUS[rc_code]
            else:
                # a failed monitor means the primitive is not running
                status = STATUS_STOP
                failed = True
        elif operation in _OPERATION_STATUS:
            if rc_code == _RC_OK:
                status = _OPERATION_STATUS[operation]
            else:
                failed = True
    return PrimitiveStatus(status=status, failed=failed)


def _lrm_resource_id(lrm_resource_el: _Element) -> str:
    # instances of globally unique clones are named "id:N"
    return str(lrm_resource_el.attrib["id"]).split(":", 1)[0]


def get_node_states(cib: _Element) -> List[_Element]:
    status_el = sections.get_optional(cib, sections.STATUS)
    if status_el is None:
        return []
    return list(status_el.iterfind("./node_state"))


def get_nodes_status(cib: _Element) -> Dict[str, Dict[str, PrimitiveStatus]]:
    """
    Return statuses of primitives keyed by node names and primitive ids
    """
    result: Dict[str, Dict[str, PrimitiveStatus]] = {}
    for node_state_el in get_node_states(cib):
        node_name = str(
            node_state_el.get("uname", node_state_el.get("id", ""))
        )
        primitives: Dict[str, List[_Element]] = {}
        for lrm_resource_el in node_state_el.iterfind(
            "./lrm/lrm_resources/lrm_resource"
        ):
            primitives.setdefault(
                _lrm_resource_id(lrm_resource_el), []
            ).extend(lrm_resource_el.iterfind("./lrm_rsc_op"))
        result[node_name] = {
            primitive_id: determine_primitive_status(operation_list)
            for primitive_id, operation_list in primitives.items()
        }
    return result


def _statuses(
    cib: _Element, primitive_id: str, node: Optional[str]
) -> List[PrimitiveStatus]:
    nodes_status = get_nodes_status(cib)
    if node is not None:
        nodes_status = {node: nodes_status.get(node, {})}
    return [
        primitives[primitive_id]
        for primitives in nodes_status.values()
        if primitive_id in primitives
    ]


def primitive_status(
    cib: _Element, primitive_id: str, node: Optional[str] = None
) -> Optional[str]:
    """
    Return the status of a primitive on a node or its best status on any node

    The best status is master, then start, then stop. Return None if the
    status is not known.
    """
    known = [
        item.status
        for item in _statuses(cib, primitive_id, node)
        if item.status is not None
    ]
    if not known:
        return None
    return max(known, key=_STATUS_RANK.__getitem__)


def primitive_is_running(
    cib: _Element, primitive_id: str, node: Optional[str] = None
) -> Optional[bool]:
    """
    Return None if the status of the primitive is not known
    """
    status = primitive_status(cib, primitive_id, node)
    if status is None:
        return None
    return status in (STATUS_START, STATUS_MASTER)


def primitive_has_master_running(
    cib: _Element, primitive_id: str, node: Optional[str] = None
) -> Optional[bool]:
    status = primitive_status(cib, primitive_id, node)
    if status is None:
        return None
    return status == STATUS_MASTER


def primitive_has_failures(
    cib: _Element, primitive_id: str, node: Optional[str] = None
) -> bool:
    return any(item.failed for item in _statuses(cib, primitive_id, node))
