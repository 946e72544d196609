"""
Polling the cluster until it reaches an expected state
"""

from logging import Logger
from typing import (
    Callable,
    Optional,
)

from lxml.etree import _Element

from pcmk_reconcile.lib.cib import (
    resource,
    status,
)
from pcmk_reconcile.lib.cib.store import (
    CibStore,
    CibUnavailableError,
)
from pcmk_reconcile.lib.errors import LibraryError
from pcmk_reconcile.lib.external import (
    CommandRunner,
    CommandTimeoutError,
)
from pcmk_reconcile.lib.pacemaker import live
from pcmk_reconcile.lib.retry import Retry


def _on_node(node: Optional[str]) -> str:
    return f" on node '{node}'" if node else ""


class ClusterWaiter:
    def __init__(
        self,
        runner: CommandRunner,
        store: CibStore,
        retry: Retry,
        logger: Logger,
    ):
        self._runner = runner
        self._store = store
        self._retry = retry
        self._logger = logger

    @property
    def _wait_seconds(self) -> float:
        options = self._retry.options
        return options.retry_count * options.retry_step

    def is_online(self) -> bool:
        """
        Check the cluster is running and it is possible to work with it

        The cluster is online if the dc-version property can be read, a
        designated controller has been elected and the node status is
        available, all of that within one attempt timeout.
        """
        try:
            with self._runner.time_limit(self._retry.options.retry_timeout):
                if not live.get_dc_version(self._runner):
                    return False
                if not self._store.designated_controller():
                    return False
                return bool(status.get_node_states(self._store.fetch()))
        except CommandTimeoutError:
            self._logger.debug("Online check timeout!")
            return False
        except LibraryError as e:
            self._logger.debug(
                "Offline: %s",
                "; ".join(item.message.message for item in e.args),
            )
            return False

    def wait_for_online(self, comment: Optional[str] = None) -> bool:
        message = "Waiting {0:g} seconds for Pacemaker to become online".format(
            self._wait_seconds
        )
        if comment:
            message += f" ({comment})"
        self._logger.debug(message)

        def _check() -> bool:
            self._store.reset()
            return self.is_online()

        online = self._poll(_check)
        if online:
            self._logger.debug("Pacemaker is online")
        return online

    def wait_for_status(
        self, primitive_id: str, node: Optional[str] = None
    ) -> bool:
        self._logger.debug(
            "Wait for a known status of '%s'%s", primitive_id, _on_node(node)
        )
        known = self._poll(
            lambda: self._with_fresh_cib(
                lambda cib: status.primitive_status(cib, primitive_id, node)
                is not None
            )
        )
        if known:
            self._logger.debug(
                "Primitive '%s' has status '%s'%s",
                primitive_id,
                status.primitive_status(
                    self._store.fetch(), primitive_id, node
                ),
                _on_node(node),
            )
        return known

    def wait_for_start(
        self, primitive_id: str, node: Optional[str] = None
    ) -> bool:
        self._logger.debug(
            "Waiting %g seconds for service '%s' to start%s",
            self._wait_seconds,
            primitive_id,
            _on_node(node),
        )
        started = self._poll(
            lambda: self._with_fresh_cib(
                lambda cib: self._is_running(cib, primitive_id, node)
            )
        )
        if started:
            self._logger.debug(
                "Service '%s' have started%s", primitive_id, _on_node(node)
            )
        return started

    def wait_for_master(
        self, primitive_id: str, node: Optional[str] = None
    ) -> bool:
        self._logger.debug(
            "Waiting %g seconds for service '%s' to start master%s",
            self._wait_seconds,
            primitive_id,
            _on_node(node),
        )
        started = self._poll(
            lambda: self._with_fresh_cib(
                lambda cib: self._has_master_running(cib, primitive_id, node)
            )
        )
        if started:
            self._logger.debug(
                "Service '%s' have started master%s",
                primitive_id,
                _on_node(node),
            )
        return started

    def wait_for_stop(
        self, primitive_id: str, node: Optional[str] = None
    ) -> bool:
        self._logger.debug(
            "Waiting %g seconds for service '%s' to stop%s",
            self._wait_seconds,
            primitive_id,
            _on_node(node),
        )
        # an unknown status does not mean the primitive has stopped
        stopped = self._poll(
            lambda: self._with_fresh_cib(
                lambda cib: self._is_running(cib, primitive_id, node) is False
            )
        )
        if stopped:
            self._logger.debug(
                "Service '%s' was stopped%s", primitive_id, _on_node(node)
            )
        return stopped

    def _poll(self, predicate: Callable[[], Optional[bool]]) -> bool:
        return bool(self._retry.run(predicate, retry_false_is_failure=True))

    def _with_fresh_cib(
        self, predicate: Callable[[_Element], Optional[bool]]
    ) -> Optional[bool]:
        self._store.reset()
        try:
            cib = self._store.fetch()
        except CibUnavailableError as e:
            self._logger.debug(
                "Cib is not available: %s",
                "; ".join(item.message.message for item in e.args),
            )
            return None
        return predicate(cib)

    @staticmethod
    def _is_running(
        cib: _Element, primitive_id: str, node: Optional[str]
    ) -> Optional[bool]:
        if not resource.primitive_exists(cib, primitive_id):
            return None
        return status.primitive_is_running(cib, primitive_id, node)

    @staticmethod
    def _has_master_running(
        cib: _Element, primitive_id: str, node: Optional[str]
    ) -> Optional[bool]:
        info = resource.get_primitives(cib).get(primitive_id)
        if info is None or not info.is_multistate:
            return False
        return status.primitive_has_master_running(cib, primitive_id, node)
