import time
from logging import Logger
from typing import (
    Callable,
    Dict,
    Mapping,
    Optional,
)

from pcmk_reconcile.common import reports
from pcmk_reconcile.common.options import PacemakerOptions
from pcmk_reconcile.common.reports import ReportProcessor
from pcmk_reconcile.common.reports.item import ReportItem
from pcmk_reconcile.lib.cib.constraint.repository import ConstraintRepository
from pcmk_reconcile.lib.cib.store import (
    CibStore,
    CibUnavailableError,
)
from pcmk_reconcile.lib.external import (
    CommandRunner,
    DryRunCommandRunner,
)
from pcmk_reconcile.lib.pacemaker.wait import ClusterWaiter
from pcmk_reconcile.lib.report import cluster_debug_report
from pcmk_reconcile.lib.retry import Retry

RunnerFactory = Callable[[Mapping[str, str]], CommandRunner]


class LibraryEnvironment:
    """
    Collaborators of one reconciliation pass

    Everything read from the cluster is cached here for the lifetime of the
    environment. Use for_pass to get an environment with empty caches.
    """

    # pylint: disable=too-many-instance-attributes
    def __init__(
        self,
        logger: Logger,
        report_processor: ReportProcessor,
        options: Optional[PacemakerOptions] = None,
        cib_file: Optional[str] = None,
        cib_shadow: Optional[str] = None,
        debug: bool = False,
        sleep: Callable[[float], None] = time.sleep,
        runner_factory: Optional[RunnerFactory] = None,
    ):
        """
        options -- tunables, defaults are used if not specified
        cib_file -- work with a cib stored in the file instead of the cluster
        cib_shadow -- work with the named shadow cib
        debug -- do not run commands changing the cluster
        sleep -- function used for waiting between retries
        runner_factory -- creates a command runner from environment variables
        """
        # pylint: disable=too-many-arguments
        self._logger = logger
        self._report_processor = report_processor
        self._options = options if options is not None else PacemakerOptions()
        self._cib_file = cib_file
        self._cib_shadow = cib_shadow
        self._debug = debug
        self._sleep = sleep
        self._runner_factory = runner_factory

        self._runner: Optional[CommandRunner] = None
        self._dry_run_runner: Optional[CommandRunner] = None
        self._retry: Optional[Retry] = None
        self._cib: Optional[CibStore] = None
        self._constraints: Optional[ConstraintRepository] = None

    @property
    def logger(self) -> Logger:
        return self._logger

    @property
    def report_processor(self) -> ReportProcessor:
        return self._report_processor

    @property
    def options(self) -> PacemakerOptions:
        return self._options

    @property
    def debug_enabled(self) -> bool:
        return self._options.debug_enabled or self._debug

    def for_pass(
        self, cib_shadow: Optional[str] = None, debug: bool = False
    ) -> "LibraryEnvironment":
        """
        Return a new environment sharing logging and options with this one

        cib_shadow -- name of a shadow cib, defaults to this env's one
        debug -- enable debug mode in addition to this env's settings
        """
        return LibraryEnvironment(
            self._logger,
            self._report_processor,
            self._options,
            cib_file=self._cib_file,
            cib_shadow=cib_shadow or self._cib_shadow,
            debug=self._debug or debug,
            sleep=self._sleep,
            runner_factory=self._runner_factory,
        )

    def _runner_env(self) -> Dict[str, str]:
        runner_env = {
            # make sure to get output of external processes in English and ASCII
            "LC_ALL": "C",
        }
        if self._cib_file:
            runner_env["CIB_file"] = self._cib_file
        if self._cib_shadow:
            runner_env["CIB_shadow"] = self._cib_shadow
        return runner_env

    def cmd_runner(self) -> CommandRunner:
        # one runner instance is shared so that attempt deadlines set by the
        # retry engine apply to all commands
        if self._runner is None:
            self._runner = (
                self._runner_factory(self._runner_env())
                if self._runner_factory
                else CommandRunner(
                    self._logger, self._report_processor, self._runner_env()
                )
            )
        return self._runner

    def mutation_runner(self) -> CommandRunner:
        """
        Return a runner for commands changing the cluster

        In debug mode the commands are only reported, not run.
        """
        if not self.debug_enabled:
            return self.cmd_runner()
        if self._dry_run_runner is None:
            self._dry_run_runner = DryRunCommandRunner(
                self._logger, self._report_processor, self._runner_env()
            )
        return self._dry_run_runner

    @property
    def retry(self) -> Retry:
        if self._retry is None:
            self._retry = Retry(
                self.cmd_runner(),
                self._report_processor,
                self._logger,
                self._options,
                sleep=self._sleep,
            )
        return self._retry

    @property
    def cib(self) -> CibStore:
        if self._cib is None:
            self._cib = CibStore(
                self.cmd_runner(),
                self.mutation_runner(),
                self.retry,
                cib_file=self._cib_file,
            )
        return self._cib

    @property
    def constraints(self) -> ConstraintRepository:
        if self._constraints is None:
            self._constraints = ConstraintRepository(self.cib)
        return self._constraints

    @property
    def waiter(self) -> ClusterWaiter:
        return ClusterWaiter(
            self.cmd_runner(), self.cib, self.retry, self._logger
        )

    def report_cluster_status(self, tag: Optional[str] = None) -> None:
        """
        Report the cluster status, the cib is loaded again if it has been
        reset since it was loaded
        """
        try:
            report = cluster_debug_report(self.cib, self._options, tag)
        except CibUnavailableError as e:
            self._logger.debug(
                "Unable to report the cluster status: %s",
                "; ".join(item.message.message for item in e.args),
            )
            return
        if report is not None:
            self._report_processor.report(
                ReportItem.debug(
                    reports.messages.ClusterDebugReport(tag or "", report)
                )
            )
