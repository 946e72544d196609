"""
Running an operation repeatedly until it succeeds

An operation is a callable without arguments. Its outcome is classified into
one of the attempt results: a transient failure (a failed or stuck command)
is retried, a fatal failure (any other library error) stops retrying
immediately.
"""

import time
from dataclasses import dataclass
from logging import Logger
from typing import (
    Any,
    Callable,
    Generic,
    Optional,
    TypeVar,
    Union,
)

from pcmk_reconcile.common import reports
from pcmk_reconcile.common.options import PacemakerOptions
from pcmk_reconcile.common.reports import ReportProcessor
from pcmk_reconcile.common.reports.item import (
    ReportItem,
    ReportItemList,
)
from pcmk_reconcile.lib.errors import LibraryError
from pcmk_reconcile.lib.external import (
    CommandRunner,
    CommandTimeoutError,
)
from pcmk_reconcile.lib.pacemaker.live import CommandFailedError

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T


@dataclass(frozen=True)
class TransientFailure:
    report_list: ReportItemList


@dataclass(frozen=True)
class FatalFailure:
    error: LibraryError


AttemptResult = Union[Success[T], TransientFailure, FatalFailure]


def attempt(operation: Callable[[], T]) -> AttemptResult[T]:
    """
    Run an operation once and classify its outcome
    """
    try:
        return Success(operation())
    except (CommandFailedError, CommandTimeoutError) as e:
        return TransientFailure(list(e.args))
    except LibraryError as e:
        return FatalFailure(e)


def is_false_result(value: Any) -> bool:
    # only a missing value or an explicit False mean "not yet", an empty
    # string or zero are valid results
    return value is None or value is False


def _describe(report_list: ReportItemList) -> str:
    return "; ".join(item.message.message for item in report_list)


class Retry:
    def __init__(
        self,
        runner: CommandRunner,
        report_processor: ReportProcessor,
        logger: Logger,
        options: PacemakerOptions,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        runner -- runner whose commands are limited by the attempt deadline
        options -- default retry settings, may be overridden per call
        sleep -- function used for waiting between attempts
        clock -- monotonic time source for measuring attempts
        """
        self._runner = runner
        self._report_processor = report_processor
        self._logger = logger
        self._options = options
        self._sleep = sleep
        self._clock = clock

    @property
    def options(self) -> PacemakerOptions:
        return self._options

    def run(self, operation: Callable[[], T], **overrides: Any) -> Optional[T]:
        """
        Run the operation until it succeeds or the attempts are exhausted

        Return the result of the first successful attempt. Return None if all
        the attempts failed, raise LibraryError instead if
        retry_fail_on_timeout is set.

        operation -- callable without arguments
        overrides -- PacemakerOptions fields overriding the defaults
        """
        options = (
            self._options.merge(**overrides) if overrides else self._options
        )
        last_failure: ReportItemList = []
        for attempt_number in range(1, options.retry_count + 1):
            result = self._run_attempt(operation, options.retry_timeout)
            if isinstance(result, FatalFailure):
                raise result.error
            if isinstance(result, Success):
                if not (
                    options.retry_false_is_failure
                    and is_false_result(result.value)
                ):
                    return result.value
                last_failure = []
                reason = f"the result is '{result.value}'"
            else:
                last_failure = result.report_list
                reason = _describe(result.report_list)
            self._logger.debug(
                "Execution failure (%s/%s): %s",
                attempt_number,
                options.retry_count,
                reason,
            )
            self._report_processor.report(
                ReportItem.debug(
                    reports.messages.RetryAttemptFailed(
                        attempt_number, options.retry_count, reason
                    )
                )
            )
            if attempt_number < options.retry_count:
                self._sleep(options.retry_step)

        seconds = options.retry_count * options.retry_step
        if options.retry_fail_on_timeout:
            raise LibraryError(
                *last_failure,
                ReportItem.error(
                    reports.messages.RetryExhausted(
                        options.retry_count, seconds
                    )
                ),
            )
        self._logger.debug("Execution timeout after %s seconds", seconds)
        return None

    def _run_attempt(
        self, operation: Callable[[], T], timeout: float
    ) -> AttemptResult[T]:
        started = self._clock()
        with self._runner.time_limit(timeout):
            result = attempt(operation)
        if isinstance(result, Success) and self._clock() - started > timeout:
            return TransientFailure(
                [
                    ReportItem.error(
                        reports.messages.AttemptDeadlineExceeded(timeout)
                    )
                ]
            )
        return result
