from dataclasses import (
    dataclass,
    field,
    replace,
)
from typing import (
    Any,
    List,
    Mapping,
    Union,
)

from pcmk_reconcile import settings
from pcmk_reconcile.common import reports
from pcmk_reconcile.common.interface.dto import (
    DataTransferObject,
    from_dict,
)


@dataclass(frozen=True)
class PacemakerOptions(DataTransferObject):
    """
    Tunables of one reconciliation run

    retry_count -- how many attempts a retried operation gets
    retry_step -- seconds to sleep between attempts
    retry_timeout -- seconds one attempt may take
    retry_false_is_failure -- a None or False result of an attempt means the
        attempt failed and is retried
    retry_fail_on_timeout -- raise when all attempts failed instead of
        returning silently
    debug_enabled -- do not run commands which change the cluster
    debug_show_properties -- cluster properties printed in debug reports
    prefetch -- match discovered cluster objects to declarations in bulk
    """

    retry_count: int = settings.retry_count
    retry_step: Union[int, float] = settings.retry_step
    retry_timeout: Union[int, float] = settings.retry_timeout
    retry_false_is_failure: bool = settings.retry_false_is_failure
    retry_fail_on_timeout: bool = settings.retry_fail_on_timeout
    debug_enabled: bool = settings.debug_enabled
    debug_show_properties: List[str] = field(
        default_factory=lambda: list(settings.debug_show_properties)
    )
    prefetch: bool = settings.prefetch

    def merge(self, **overrides: Any) -> "PacemakerOptions":
        return replace(self, **overrides)


def options_from_dict(data: Mapping[str, Any]) -> PacemakerOptions:
    """
    Load options, unknown keys are rejected

    data -- options as loaded from json, missing keys get default values
    """
    return from_dict(PacemakerOptions, dict(data), strict=True)


def validate_options(options: PacemakerOptions) -> reports.ReportItemList:
    """
    Check that retry limits are usable, a retried operation needs at least one
    attempt and some time to run it
    """
    report_list = []
    for name in ("retry_count", "retry_timeout"):
        value = getattr(options, name)
        if value <= 0:
            report_list.append(
                reports.ReportItem.error(
                    reports.messages.InvalidOptionValue(
                        name, str(value), "a positive number"
                    )
                )
            )
    return report_list
