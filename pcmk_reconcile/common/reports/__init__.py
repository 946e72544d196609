from . import (
    codes,
    item,
    messages,
    types,
)
from .dto import ReportItemDto
from .item import (
    ReportItem,
    ReportItemList,
    ReportItemMessage,
    ReportItemSeverity,
)
from .processor import ReportProcessor
