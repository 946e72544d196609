import signal
import subprocess
import time
from contextlib import contextmanager
from logging import Logger
from shlex import quote as shell_quote
from typing import (
    Callable,
    Dict,
    Iterator,
    Mapping,
    Optional,
    Tuple,
)

from pcmk_reconcile.common import reports
from pcmk_reconcile.common.reports import ReportProcessor
from pcmk_reconcile.common.reports.item import ReportItem
from pcmk_reconcile.common.types import StringSequence
from pcmk_reconcile.lib.errors import LibraryError


class CommandTimeoutError(LibraryError):
    pass


class CommandRunner:
    def __init__(
        self,
        logger: Logger,
        reporter: ReportProcessor,
        env_vars: Optional[Mapping[str, str]] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._logger = logger
        self._reporter = reporter
        # Reset environment variables by empty dict is desired here.  We need
        # to get rid of defaults - we do not know the context and environment
        # where the library runs.  We also get rid of PATH settings, so all
        # executables must be specified with full path unless the PATH variable
        # is set from outside.
        self._env_vars = env_vars if env_vars else {}
        self._clock = clock
        self._deadline: Optional[float] = None

    @property
    def env_vars(self) -> Dict[str, str]:
        return dict(self._env_vars)

    @contextmanager
    def time_limit(self, seconds: float) -> Iterator[None]:
        """
        Commands run inside the block are killed when the block takes longer
        than the specified time. Nested limits never extend an outer one.
        """
        previous = self._deadline
        deadline = self._clock() + seconds
        self._deadline = (
            deadline if previous is None else min(previous, deadline)
        )
        try:
            yield
        finally:
            self._deadline = previous

    def remaining_time(self) -> Optional[float]:
        if self._deadline is None:
            return None
        return self._deadline - self._clock()

    def run(
        self,
        args: StringSequence,
        stdin_string: Optional[str] = None,
        env_extend: Optional[Mapping[str, str]] = None,
    ) -> Tuple[str, str, int]:
        # Allow overriding default settings. If a piece of code really wants to
        # set own PATH or CIB_file, we must allow it.
        env_vars = dict(self._env_vars)
        env_vars.update(dict(env_extend) if env_extend else {})

        log_args = " ".join([shell_quote(x) for x in args])
        self._log_start(log_args, stdin_string, env_vars)

        timeout = self.remaining_time()
        if timeout is not None and timeout <= 0:
            raise CommandTimeoutError(
                ReportItem.error(
                    reports.messages.RunExternalProcessTimeout(log_args, 0)
                )
            )

        try:
            # pylint: disable=subprocess-popen-preexec-fn, consider-using-with
            # this is OK as the library is a single-threaded application
            process = subprocess.Popen(
                args,
                # Some commands react differently if they get anything via stdin
                stdin=(
                    subprocess.PIPE
                    if stdin_string is not None
                    else subprocess.DEVNULL
                ),
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                preexec_fn=(
                    lambda: signal.signal(signal.SIGPIPE, signal.SIG_DFL)
                ),
                close_fds=True,
                shell=False,
                env=env_vars,
                # decodes newlines and converts bytes to str
                universal_newlines=True,
            )
            try:
                out_std, out_err = process.communicate(
                    stdin_string, timeout=timeout
                )
            except subprocess.TimeoutExpired as e:
                process.kill()
                process.communicate()
                self._logger.debug(
                    "Killed: %s\nTimeout: %s seconds", log_args, timeout
                )
                raise CommandTimeoutError(
                    ReportItem.error(
                        reports.messages.RunExternalProcessTimeout(
                            log_args, timeout
                        )
                    )
                ) from e
            retval = process.returncode
        except OSError as e:
            raise LibraryError(
                ReportItem.error(
                    reports.messages.RunExternalProcessError(
                        log_args,
                        e.strerror,
                    )
                )
            ) from e

        self._logger.debug(
            (
                "Finished running: %s\nReturn value: %s"
                "\n--Debug Stdout Start--\n%s\n--Debug Stdout End--"
                "\n--Debug Stderr Start--\n%s\n--Debug Stderr End--"
            ),
            log_args,
            retval,
            out_std,
            out_err,
        )
        self._reporter.report(
            ReportItem.debug(
                reports.messages.RunExternalProcessFinished(
                    log_args,
                    retval,
                    out_std,
                    out_err,
                )
            )
        )
        return out_std, out_err, retval

    def _log_start(
        self,
        log_args: str,
        stdin_string: Optional[str],
        env_vars: Mapping[str, str],
    ) -> None:
        env = (
            ""
            if not env_vars
            else (
                "\n"
                + "\n".join(
                    [
                        "  {0}={1}".format(key, val)
                        for key, val in sorted(env_vars.items())
                    ]
                )
            )
        )
        stdin = (
            ""
            if not stdin_string
            else ("\n--Debug Input Start--\n{0}\n--Debug Input End--").format(
                stdin_string
            )
        )
        self._logger.debug(
            "Running: %s\nEnvironment:%s%s", log_args, env, stdin
        )
        self._reporter.report(
            ReportItem.debug(
                reports.messages.RunExternalProcessStarted(
                    log_args,
                    stdin_string,
                    env_vars,
                )
            )
        )


class DryRunCommandRunner(CommandRunner):
    """
    Runner for commands changing the cluster in debug mode

    Commands are logged and reported, never executed. Do not use it for
    commands whose output is needed.
    """

    def run(
        self,
        args: StringSequence,
        stdin_string: Optional[str] = None,
        env_extend: Optional[Mapping[str, str]] = None,
    ) -> Tuple[str, str, int]:
        del stdin_string, env_extend
        log_args = " ".join([shell_quote(x) for x in args])
        self._logger.debug("Debug mode, not running: %s", log_args)
        self._reporter.report(
            ReportItem.debug(
                reports.messages.RunExternalProcessDryRun(log_args)
            )
        )
        return "", "", 0
