from typing import (
    Dict,
    List,
    Mapping,
    Optional,
    cast,
)

from lxml import etree
from lxml.etree import _Element

from pcmk_reconcile.lib.cib.tools import (
    IdProvider,
    create_subelement_id,
)

INSTANCE_ATTRIBUTES_TAG = "instance_attributes"
META_ATTRIBUTES_TAG = "meta_attributes"
CLUSTER_PROPERTY_SET_TAG = "cluster_property_set"


def get_value(
    tag_name: str,
    context_element: _Element,
    name: str,
    default: Optional[str] = None,
) -> Optional[str]:
    """
    Return a value from an nvpair

    WARNING: does not solve multiple nvsets (with the same tag_name) in the
    context_element nor multiple nvpair with the same name

    tag_name -- "cluster_property_set" or "meta_attributes"
    context_element -- searched element
    name -- nvpair name
    default -- default return value
    """
    value_list = context_element.xpath(
        """
            ./*[local-name()=$tag_name]
            /nvpair[
                @name=$name and string-length(@value) > 0
            ]
            /@value
        """,
        tag_name=tag_name,
        name=name,
    )
    return cast(List[str], value_list)[0] if value_list else default


def get_nvsets_as_dict(
    tag_name: str, context_element: Optional[_Element]
) -> Dict[str, str]:
    """
    Return nvpairs of all nvsets with tag_name in context_element as a dict,
    the first occurrence of a name wins

    tag_name -- tag of nvset elements whose values should be returned
    context_element -- element in which nvsets are specified
    """
    result: Dict[str, str] = {}
    if context_element is None:
        return result
    for nvpair in context_element.iterfind(f"./{tag_name}/nvpair"):
        name = nvpair.get("name")
        if name and name not in result:
            result[str(name)] = str(nvpair.get("value", ""))
    return result


def append_new_nvset(
    tag_name: str,
    context_element: _Element,
    nvpair_dict: Mapping[str, str],
    id_provider: IdProvider,
) -> None:
    """
    Append new nvset_element comprising nvpairs children (corresponding
    nvpair_dict) to the context_element, nothing is appended for an empty
    nvpair_dict

    tag_name -- "instance_attributes" or "meta_attributes"
    context_element -- element where new nvset will be appended
    nvpair_dict -- source for nvpair children
    id_provider -- elements' ids generator
    """
    if not nvpair_dict:
        return
    nvset_element = etree.SubElement(
        context_element,
        tag_name,
        id=create_subelement_id(context_element, tag_name, id_provider),
    )
    for name, value in sorted(nvpair_dict.items()):
        etree.SubElement(
            nvset_element,
            "nvpair",
            id=create_subelement_id(nvset_element, name, id_provider),
            name=name,
            value=value,
        )
