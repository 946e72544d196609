import sys
from typing import Iterable

from pcmk_reconcile.common.reports import (
    ReportItem,
    ReportItemSeverity,
    ReportProcessor,
)


def print_to_stderr(output: str, end: str = "\n") -> None:
    """
    Prints output to stderr and flushes

    output -- a string that is printed to stderr
    end -- an optional ending, newline by default as Python's print
    """
    sys.stderr.write(f"{output}{end}")
    sys.stderr.flush()


def warn(message: str) -> None:
    print_to_stderr(f"Warning: {message}")


def error(message: str) -> SystemExit:
    print_to_stderr(f"Error: {message}")
    return SystemExit(1)


def print_report(report_item: ReportItem) -> None:
    msg = report_item.message.message
    if not msg:
        return
    severity = report_item.severity.level
    if severity == ReportItemSeverity.ERROR:
        error(msg)
    elif severity == ReportItemSeverity.WARNING:
        warn(msg)
    else:
        print_to_stderr(msg)


def process_library_reports(report_item_list: Iterable[ReportItem]) -> None:
    """
    Print reports of a failed command and exit
    """
    report_item_list = list(report_item_list)
    if not report_item_list:
        raise error(
            "Errors have occurred, therefore pcmk-reconcile is unable to "
            "continue"
        )
    for report_item in report_item_list:
        print_report(report_item)
    sys.exit(1)


class ReportProcessorToConsole(ReportProcessor):
    def __init__(self, debug: bool = False) -> None:
        super().__init__()
        self.debug = debug

    def _do_report(self, report_item: ReportItem) -> None:
        if (
            report_item.severity.level == ReportItemSeverity.DEBUG
            and not self.debug
        ):
            return
        print_report(report_item)
