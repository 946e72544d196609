from dataclasses import (
    asdict,
    fields,
    is_dataclass,
)
from enum import Enum
from typing import (
    Any,
    Dict,
    Iterable,
    Mapping,
    Type,
    TypeVar,
    Union,
)

import dacite

from pcmk_reconcile.common import types

PrimitiveType = Union[str, int, float, bool, None]
DtoPayload = Dict[str, "SerializableType"]  # type: ignore
SerializableType = Union[  # type: ignore
    PrimitiveType,
    DtoPayload,  # type: ignore
    Iterable["SerializableType"],  # type: ignore
]


class DataTransferObject:
    pass


class ImplementsToDto:
    def to_dto(self) -> Any:
        raise NotImplementedError()


def _convert_dict(
    klass: Type[DataTransferObject], obj_dict: DtoPayload
) -> DtoPayload:
    new_dict = {}
    for _field in fields(klass):  # type: ignore
        value = obj_dict[_field.name]
        if is_dataclass(_field.type) and isinstance(value, dict):
            value = _convert_dict(_field.type, value)  # type: ignore
        elif isinstance(value, Enum):
            value = value.value
        new_dict[_field.name] = value
    return new_dict


def to_dict(obj: DataTransferObject) -> DtoPayload:
    return _convert_dict(obj.__class__, asdict(obj))  # type: ignore


DTOTYPE = TypeVar("DTOTYPE", bound=DataTransferObject)


def from_dict(
    cls: Type[DTOTYPE], data: Mapping[str, Any], strict: bool = False
) -> DTOTYPE:
    return dacite.from_dict(
        data_class=cls,
        data=dict(data),
        # NOTE: all enum types has to be listed here in key cast
        # see: https://github.com/konradhalas/dacite#casting
        config=dacite.Config(
            cast=[
                types.Ensure,
                types.PatchAction,
            ],
            strict=strict,
        ),
    )
