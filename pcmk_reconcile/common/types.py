from collections.abc import Set
from enum import Enum
from typing import (
    Generator,
    MutableSequence,
    Union,
)

StringSequence = Union[MutableSequence[str], tuple[str, ...]]
StringCollection = Union[StringSequence, Set[str]]
StringIterable = Union[StringCollection, Generator[str, None, None]]


class Ensure(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"


class PatchAction(str, Enum):
    CREATE = "create"
    MODIFY = "modify"
    DELETE = "delete"
    REPLACE = "replace"
