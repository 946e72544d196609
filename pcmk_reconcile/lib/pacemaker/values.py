import re
from typing import Optional

from pcmk_reconcile.common import reports
from pcmk_reconcile.common.pacemaker.declaration import SCORE_INFINITY
from pcmk_reconcile.common.reports.item import (
    ReportItem,
    ReportItemList,
)

_BOOLEAN_TRUE = frozenset(["true", "on", "yes", "y", "1"])
_SCORE_SENTINELS = frozenset(
    [SCORE_INFINITY, f"-{SCORE_INFINITY}", "inf", "-inf"]
)
_ID_FIRST_CHAR_NOT_RE = re.compile("[^a-zA-Z_]")
_ID_REST_CHARS_NOT_RE = re.compile("[^a-zA-Z0-9_.-]")


def is_true(val: Optional[str]) -> bool:
    """
    Does pacemaker consider a value to be true?
    Pacemaker ignores case of this values.
    See crm_str_to_boolean in pacemaker/lib/common/strings.c

    val -- checked value
    """
    return val is not None and val.lower() in _BOOLEAN_TRUE


def is_score(value: str) -> bool:
    """
    Check a score is an infinity or a canonically written integer

    A leading plus sign, leading zeros or surrounding whitespace make the
    value invalid.
    """
    if value in _SCORE_SENTINELS:
        return True
    try:
        return str(int(value)) == value
    except (TypeError, ValueError):
        return False


def normalize_score(value: str) -> str:
    return value.replace("inf", SCORE_INFINITY)


def validate_score(value: str) -> ReportItemList:
    if is_score(value):
        return []
    return [ReportItem.error(reports.messages.InvalidScore(str(value)))]


def sanitize_id(id_candidate: str, replacement: str = "") -> str:
    if not id_candidate:
        return id_candidate
    return "".join(
        [
            (
                ""
                if _ID_FIRST_CHAR_NOT_RE.match(id_candidate[0])
                else id_candidate[0]
            ),
            _ID_REST_CHARS_NOT_RE.sub(replacement, id_candidate[1:]),
        ]
    )
