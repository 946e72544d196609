import abc

from .item import ReportItem


class ReportProcessor(abc.ABC):
    def report(self, report_item: ReportItem) -> "ReportProcessor":
        self._do_report(report_item)
        return self

    @abc.abstractmethod
    def _do_report(self, report_item: ReportItem) -> None:
        raise NotImplementedError()
