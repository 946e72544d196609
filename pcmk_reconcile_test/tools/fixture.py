from typing import (
    Any,
    Mapping,
    NamedTuple,
)

from pcmk_reconcile.common import reports


# A report item fixture, order of the attributes is the same as the order in
# which report items are compared.
class ReportItemFixture(NamedTuple):
    severity: reports.types.SeverityLevel
    code: reports.types.MessageCode
    payload: Mapping[str, Any]


def debug(code: reports.types.MessageCode, **kwargs) -> ReportItemFixture:
    return ReportItemFixture(reports.ReportItemSeverity.DEBUG, code, kwargs)


def error(code: reports.types.MessageCode, **kwargs) -> ReportItemFixture:
    return ReportItemFixture(reports.ReportItemSeverity.ERROR, code, kwargs)


def info(code: reports.types.MessageCode, **kwargs) -> ReportItemFixture:
    return ReportItemFixture(reports.ReportItemSeverity.INFO, code, kwargs)
