from dataclasses import dataclass
from typing import (
    Dict,
    Optional,
)

from lxml.etree import _Element

from pcmk_reconcile.lib.cib import (
    nvpair,
    sections,
)
from pcmk_reconcile.lib.pacemaker.values import is_true

TAG_PRIMITIVE = "primitive"
TAG_CLONE = "clone"
TAG_MASTER = "master"
TAG_GROUP = "group"

WRAPPER_TAGS = frozenset([TAG_CLONE, TAG_MASTER, TAG_GROUP])

# old tools used to name wrappers of a primitive this way
_BASE_NAME_PREFIXES = ("clone_", "master_")


@dataclass(frozen=True)
class PrimitiveInfo:
    # pylint: disable=too-many-instance-attributes
    id: str  # pylint: disable=invalid-name
    resource_class: Optional[str]
    provider: Optional[str]
    type: Optional[str]
    name: str
    is_clone: bool
    is_multistate: bool
    is_managed: bool
    parent_id: Optional[str] = None


def primitive_base_name(name: str) -> str:
    """
    Return a primitive id from a name possibly prefixed by a wrapper prefix
    """
    for prefix in _BASE_NAME_PREFIXES:
        if name.startswith(prefix):
            return name[len(prefix) :]
    return name


def _is_promotable(wrapper_el: _Element) -> bool:
    if wrapper_el.tag == TAG_MASTER:
        return True
    return wrapper_el.tag == TAG_CLONE and is_true(
        nvpair.get_value(
            nvpair.META_ATTRIBUTES_TAG, wrapper_el, "promotable", "false"
        )
    )


def _is_managed(primitive_el: _Element) -> bool:
    # the closest is-managed setting wins
    element: Optional[_Element] = primitive_el
    while element is not None and element.tag in (
        WRAPPER_TAGS | {TAG_PRIMITIVE}
    ):
        value = nvpair.get_value(
            nvpair.META_ATTRIBUTES_TAG, element, "is-managed"
        )
        if value is not None:
            return is_true(value)
        element = element.getparent()
    return True


def _primitive_el_to_info(primitive_el: _Element) -> PrimitiveInfo:
    ancestors = []
    parent = primitive_el.getparent()
    while parent is not None and parent.tag in WRAPPER_TAGS:
        ancestors.append(parent)
        parent = parent.getparent()
    clones = [el for el in ancestors if el.tag in (TAG_CLONE, TAG_MASTER)]
    is_multistate = any(_is_promotable(el) for el in clones)
    return PrimitiveInfo(
        id=str(primitive_el.attrib["id"]),
        resource_class=primitive_el.get("class"),
        provider=primitive_el.get("provider"),
        type=primitive_el.get("type"),
        name=str(clones[0].attrib["id"] if clones else primitive_el.get("id")),
        is_clone=bool(clones) and not is_multistate,
        is_multistate=is_multistate,
        is_managed=_is_managed(primitive_el),
        parent_id=str(ancestors[0].attrib["id"]) if ancestors else None,
    )


def get_primitives(cib: _Element) -> Dict[str, PrimitiveInfo]:
    """
    Return all primitives defined in the cib keyed by their ids
    """
    return {
        str(primitive_el.attrib["id"]): _primitive_el_to_info(primitive_el)
        for primitive_el in sections.get(cib, sections.RESOURCES).iter(
            TAG_PRIMITIVE
        )
    }


def primitive_exists(cib: _Element, primitive_id: str) -> bool:
    return primitive_id in get_primitives(cib)
