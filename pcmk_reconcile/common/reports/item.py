from dataclasses import dataclass
from typing import (
    Any,
    Dict,
    List,
)

from pcmk_reconcile.common.interface.dto import ImplementsToDto

from .dto import (
    ReportItemDto,
    ReportItemMessageDto,
    ReportItemSeverityDto,
)
from .types import (
    MessageCode,
    SeverityLevel,
)


@dataclass(frozen=True)
class ReportItemSeverity(ImplementsToDto):
    ERROR = SeverityLevel("ERROR")
    WARNING = SeverityLevel("WARNING")
    INFO = SeverityLevel("INFO")
    DEBUG = SeverityLevel("DEBUG")

    level: SeverityLevel

    def to_dto(self) -> ReportItemSeverityDto:
        return ReportItemSeverityDto(level=self.level)

    @classmethod
    def error(cls) -> "ReportItemSeverity":
        return cls(level=cls.ERROR)

    @classmethod
    def warning(cls) -> "ReportItemSeverity":
        return cls(level=cls.WARNING)

    @classmethod
    def info(cls) -> "ReportItemSeverity":
        return cls(level=cls.INFO)

    @classmethod
    def debug(cls) -> "ReportItemSeverity":
        return cls(level=cls.DEBUG)


@dataclass(frozen=True, init=False)
class ReportItemMessage(ImplementsToDto):
    _code = MessageCode("")

    @property
    def message(self) -> str:
        raise NotImplementedError()

    @property
    def code(self) -> MessageCode:
        return self._code

    def to_dto(self) -> ReportItemMessageDto:
        payload: Dict[str, Any] = {}
        if hasattr(self.__class__, "__annotations__"):
            try:
                annotations = self.__class__.__annotations__
            except AttributeError as e:
                raise AssertionError() from e
            for attr_name in annotations:
                if attr_name.startswith("_") or attr_name in ("message",):
                    continue
                attr_val = getattr(self, attr_name)
                if hasattr(attr_val, "to_dto"):
                    payload[attr_name] = attr_val.to_dto()
                else:
                    payload[attr_name] = attr_val

        return ReportItemMessageDto(
            code=self.code,
            message=self.message,
            payload=payload,
        )


@dataclass
class ReportItem(ImplementsToDto):
    severity: ReportItemSeverity
    message: ReportItemMessage

    @classmethod
    def error(cls, message: ReportItemMessage) -> "ReportItem":
        return cls(severity=ReportItemSeverity.error(), message=message)

    @classmethod
    def warning(cls, message: ReportItemMessage) -> "ReportItem":
        return cls(severity=ReportItemSeverity.warning(), message=message)

    @classmethod
    def info(cls, message: ReportItemMessage) -> "ReportItem":
        return cls(severity=ReportItemSeverity.info(), message=message)

    @classmethod
    def debug(cls, message: ReportItemMessage) -> "ReportItem":
        return cls(severity=ReportItemSeverity.debug(), message=message)

    def to_dto(self) -> ReportItemDto:
        return ReportItemDto(
            severity=self.severity.to_dto(),
            message=self.message.to_dto(),
        )


ReportItemList = List[ReportItem]
