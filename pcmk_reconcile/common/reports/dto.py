from dataclasses import dataclass
from typing import (
    Any,
    Mapping,
)

from pcmk_reconcile.common.interface.dto import DataTransferObject

from .types import (
    MessageCode,
    SeverityLevel,
)


@dataclass(frozen=True)
class ReportItemSeverityDto(DataTransferObject):
    level: SeverityLevel


@dataclass(frozen=True)
class ReportItemMessageDto(DataTransferObject):
    code: MessageCode
    message: str
    payload: Mapping[str, Any]


@dataclass(frozen=True)
class ReportItemDto(DataTransferObject):
    severity: ReportItemSeverityDto
    message: ReportItemMessageDto
