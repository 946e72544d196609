from typing import (
    Any,
    Mapping,
    Tuple,
    Union,
)

from pcmk_reconcile.common import reports
from pcmk_reconcile.common.interface.dto import from_dict
from pcmk_reconcile.common.pacemaker.declaration import (
    ATTRIBUTE_KINDS,
    CONSTRAINT_KINDS,
    KIND_PRIMITIVE,
    ConstraintDeclaration,
    PrimitiveDeclaration,
    PropertyDeclaration,
)
from pcmk_reconcile.common.reports.item import (
    ReportItem,
    ReportItemList,
)
from pcmk_reconcile.common.types import Ensure
from pcmk_reconcile.lib.errors import LibraryError

Declaration = Union[
    ConstraintDeclaration, PrimitiveDeclaration, PropertyDeclaration
]
KINDS = CONSTRAINT_KINDS + ATTRIBUTE_KINDS + (KIND_PRIMITIVE,)


def load_declaration(data: Mapping[str, Any]) -> Tuple[str, Declaration]:
    """
    Turn a declaration loaded from json to a declaration object

    data -- declaration fields and its kind under the "kind" key

    Raises LibraryError on an unknown kind or ensure value, dacite errors are
    raised for other malformed data.
    """
    payload = dict(data)
    kind = payload.pop("kind", None)
    report_list: ReportItemList = []
    if kind not in KINDS:
        report_list.append(
            ReportItem.error(
                reports.messages.InvalidOptionValue(
                    "kind",
                    str(kind),
                    list(KINDS),
                )
            )
        )
    ensure = payload.get("ensure", Ensure.PRESENT.value)
    if ensure not in [item.value for item in Ensure]:
        report_list.append(
            ReportItem.error(
                reports.messages.InvalidOptionValue(
                    "ensure", str(ensure), [item.value for item in Ensure]
                )
            )
        )
    if report_list:
        raise LibraryError(*report_list)
    if kind in CONSTRAINT_KINDS:
        return kind, from_dict(ConstraintDeclaration, payload, strict=True)
    if kind == KIND_PRIMITIVE:
        return kind, from_dict(PrimitiveDeclaration, payload, strict=True)
    return kind, from_dict(PropertyDeclaration, payload, strict=True)
