from typing import (
    Optional,
    Union,
)

from lxml import etree
from lxml.etree import _Element

from pcmk_reconcile import settings
from pcmk_reconcile.common import reports
from pcmk_reconcile.common.reports.item import ReportItem
from pcmk_reconcile.common.tools import (
    format_os_error,
    xml_fromstring,
)
from pcmk_reconcile.common.types import PatchAction
from pcmk_reconcile.lib.errors import LibraryError
from pcmk_reconcile.lib.external import CommandRunner
from pcmk_reconcile.lib.pacemaker import live
from pcmk_reconcile.lib.pacemaker.live import CommandFailedError
from pcmk_reconcile.lib.retry import Retry
from pcmk_reconcile.lib.xml_tools import etree_to_str


class CibUnavailableError(LibraryError):
    pass


def parse_cib_xml(xml: str) -> _Element:
    try:
        return xml_fromstring(xml)
    except (etree.XMLSyntaxError, etree.DocumentInvalid) as e:
        raise CibUnavailableError(
            ReportItem.error(reports.messages.CibLoadErrorBadFormat(str(e)))
        ) from e


class CibStore:
    """
    Cached cib of one reconciliation pass

    The cib is loaded on the first access and kept until reset. Changes are
    pushed to the cluster by cibadmin, they never touch the cached tree, so
    the cache must be reset for the changes to be seen.
    """

    def __init__(
        self,
        runner: CommandRunner,
        mutation_runner: CommandRunner,
        retry: Retry,
        cib_file: Optional[str] = None,
    ):
        """
        runner -- runner for reading the cib
        mutation_runner -- runner for commands changing the cib
        retry -- retries commands changing the cib
        cib_file -- read the cib from this file instead of the cluster
        """
        self._runner = runner
        self._mutation_runner = mutation_runner
        self._retry = retry
        self._cib_file = cib_file
        self._raw_cib: Optional[str] = None
        self._cib: Optional[_Element] = None
        self._generation = 0
        self._fetched = False

    @property
    def generation(self) -> int:
        """
        Number of resets, data derived from the cib are valid while it holds
        """
        return self._generation

    def is_fetched(self) -> bool:
        """
        Tell if a cib has been loaded, even if it has been reset since
        """
        return self._fetched

    @property
    def raw_cib(self) -> str:
        self.fetch()
        return str(self._raw_cib)

    def fetch(self) -> _Element:
        if self._cib is None:
            raw_cib = self._load_raw_cib()
            if not raw_cib.strip():
                raise CibUnavailableError(
                    ReportItem.error(
                        reports.messages.CibLoadError("no data received")
                    )
                )
            self._cib = parse_cib_xml(raw_cib)
            self._raw_cib = raw_cib
            self._fetched = True
        return self._cib

    def reset(self) -> None:
        self._raw_cib = None
        self._cib = None
        self._generation += 1

    def designated_controller(self) -> Optional[str]:
        dc_uuid = self.fetch().get("dc-uuid")
        if not dc_uuid or dc_uuid == settings.no_designated_controller:
            return None
        return str(dc_uuid)

    def create(self, xml: Union[str, _Element], scope: Optional[str]) -> None:
        self._patch(PatchAction.CREATE, xml, scope)

    def delete(self, xml: Union[str, _Element], scope: Optional[str]) -> None:
        self._patch(PatchAction.DELETE, xml, scope)

    def modify(self, xml: Union[str, _Element], scope: Optional[str]) -> None:
        self._patch(PatchAction.MODIFY, xml, scope)

    def replace(self, xml: Union[str, _Element], scope: Optional[str]) -> None:
        self._patch(PatchAction.REPLACE, xml, scope)

    def _patch(
        self,
        action: PatchAction,
        xml: Union[str, _Element],
        scope: Optional[str],
    ) -> None:
        xml_text = xml if isinstance(xml, str) else etree_to_str(xml)
        self._retry.run(
            lambda: live.patch_cib(
                self._mutation_runner, action, xml_text, scope
            ),
            retry_false_is_failure=False,
            retry_fail_on_timeout=True,
        )

    def _load_raw_cib(self) -> str:
        if self._cib_file:
            try:
                with open(self._cib_file, "r") as cib_file:
                    return cib_file.read()
            except OSError as e:
                raise CibUnavailableError(
                    ReportItem.error(
                        reports.messages.CibLoadError(format_os_error(e))
                    )
                ) from e
        try:
            return live.get_cib_xml(self._runner)
        except CommandFailedError as e:
            raise CibUnavailableError(
                ReportItem.error(
                    reports.messages.CibLoadError(
                        "; ".join(item.message.message for item in e.args)
                    )
                )
            ) from e
