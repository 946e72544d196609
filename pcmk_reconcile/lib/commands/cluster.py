from typing import (
    List,
    Optional,
)

from pcmk_reconcile.common import reports
from pcmk_reconcile.common.pacemaker.declaration import (
    KIND_PRIMITIVE,
    AttributeStateDto,
    ConstraintStateDto,
    PrimitiveStateDto,
)
from pcmk_reconcile.common.reports.item import ReportItem
from pcmk_reconcile.lib.commands.reconcile import (
    ATTRIBUTE_PROVIDERS,
    CONSTRAINT_PROVIDERS,
    PRIMITIVE_PROVIDERS,
)
from pcmk_reconcile.lib.env import LibraryEnvironment
from pcmk_reconcile.lib.errors import LibraryError
from pcmk_reconcile.lib.report import cluster_debug_report

WAIT_ONLINE = "online"
WAIT_STATUS = "status"
WAIT_START = "start"
WAIT_MASTER = "master"
WAIT_STOP = "stop"
WAIT_PRIMITIVE_EVENTS = (WAIT_STATUS, WAIT_START, WAIT_MASTER, WAIT_STOP)


def list_constraints(
    env: LibraryEnvironment, kind: str
) -> List[ConstraintStateDto]:
    return [
        ConstraintStateDto(
            name=provider.name,
            first=provider.first,
            second=provider.second,
            score=provider.score,
        )
        for provider in CONSTRAINT_PROVIDERS[kind].instances(env)
    ]


def list_attributes(
    env: LibraryEnvironment, kind: str
) -> List[AttributeStateDto]:
    return [
        AttributeStateDto(name=provider.name, value=provider.value)
        for provider in ATTRIBUTE_PROVIDERS[kind].instances(env)
    ]


def list_primitives(env: LibraryEnvironment) -> List[PrimitiveStateDto]:
    return [
        PrimitiveStateDto(
            name=provider.name,
            primitive_class=provider.primitive_class,
            primitive_type=provider.primitive_type,
            primitive_provider=provider.primitive_provider,
            parameters=dict(provider.parameters),
            operations=[dict(operation) for operation in provider.operations],
            metadata=dict(provider.metadata),
            complex_type=provider.complex_type,
            complex_metadata=dict(provider.complex_metadata),
        )
        for provider in PRIMITIVE_PROVIDERS[KIND_PRIMITIVE].instances(env)
    ]


def get_debug_report(
    env: LibraryEnvironment, tag: Optional[str] = None
) -> str:
    env.cib.fetch()
    return str(cluster_debug_report(env.cib, env.options, tag))


def wait(
    env: LibraryEnvironment,
    event: str,
    primitive_id: Optional[str] = None,
    node: Optional[str] = None,
) -> bool:
    """
    Wait for the cluster to get online or for a primitive to get to a state,
    return False if it did not happen in time

    event -- online, status, start, master or stop
    primitive_id -- primitive to wait for, required unless waiting for online
    node -- the state is expected on this node, any node if not specified
    """
    waiter = env.waiter
    if event == WAIT_ONLINE:
        return waiter.wait_for_online()
    if event not in WAIT_PRIMITIVE_EVENTS:
        raise LibraryError(
            ReportItem.error(
                reports.messages.InvalidOptionValue(
                    "event", event, [WAIT_ONLINE, *WAIT_PRIMITIVE_EVENTS]
                )
            )
        )
    if not primitive_id:
        raise LibraryError(
            ReportItem.error(
                reports.messages.RequiredOptionsAreMissing(["primitive"])
            )
        )
    wait_func = {
        WAIT_STATUS: waiter.wait_for_status,
        WAIT_START: waiter.wait_for_start,
        WAIT_MASTER: waiter.wait_for_master,
        WAIT_STOP: waiter.wait_for_stop,
    }[event]
    return wait_func(primitive_id, node)
