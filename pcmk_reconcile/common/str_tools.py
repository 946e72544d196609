from typing import (
    List,
    Sized,
    Union,
)

from pcmk_reconcile.common.types import (
    StringCollection,
    StringSequence,
)


def quote_items(item_list: StringCollection) -> List[str]:
    return [f"'{item}'" for item in item_list]


def format_list(
    item_list: StringCollection,
    separator: str = ", ",
) -> str:
    return separator.join(quote_items(sorted(item_list)))


def join_multilines(strings: StringSequence) -> str:
    return "\n".join([a.strip() for a in strings if a.strip()])


def _is_multiple(what: Union[int, Sized]) -> bool:
    retval = False
    if isinstance(what, int):
        retval = abs(what) != 1
    elif not isinstance(what, str):
        try:
            retval = len(what) != 1
        except TypeError:
            pass
    return retval


def format_plural(
    depends_on: Union[int, Sized],
    singular: str,
    plural: str = "",
) -> str:
    """
    Takes the singular word form and returns its plural form if depends_on
    is not equal to one/contains one item

    depends_on -- if number (of items) isn't equal to one, return plural
    singular -- singular word (like: is, do, node)
    plural -- optional irregular plural form
    """
    if not _is_multiple(depends_on):
        return singular
    if plural:
        return plural
    if singular.endswith("s"):
        return f"{singular}es"
    return f"{singular}s"
