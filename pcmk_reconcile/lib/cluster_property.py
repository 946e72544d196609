"""
Reading and setting cluster properties and resource defaults
"""

from typing import (
    Dict,
    Optional,
)

from lxml.etree import _Element

from pcmk_reconcile.lib.cib import (
    nvpair,
    sections,
)
from pcmk_reconcile.lib.external import CommandRunner
from pcmk_reconcile.lib.pacemaker import live
from pcmk_reconcile.lib.pacemaker.live import (
    ATTRIBUTE_TYPE_CRM_CONFIG,
    ATTRIBUTE_TYPE_RSC_DEFAULTS,
)


def get_attributes(cib: _Element, attribute_type: str) -> Dict[str, str]:
    """
    Return all the properties of the specified type defined in the cib

    attribute_type -- crm_config for cluster properties, rsc_defaults for
        resource defaults
    """
    if attribute_type == ATTRIBUTE_TYPE_CRM_CONFIG:
        return nvpair.get_nvsets_as_dict(
            nvpair.CLUSTER_PROPERTY_SET_TAG,
            sections.get(cib, sections.CRM_CONFIG),
        )
    if attribute_type == ATTRIBUTE_TYPE_RSC_DEFAULTS:
        return nvpair.get_nvsets_as_dict(
            nvpair.META_ATTRIBUTES_TAG,
            sections.get_optional(cib, sections.RSC_DEFAULTS),
        )
    raise AssertionError(f"Unknown attribute type '{attribute_type}'")


def get_value(cib: _Element, attribute_type: str, name: str) -> Optional[str]:
    return get_attributes(cib, attribute_type).get(name)


def is_defined(cib: _Element, attribute_type: str, name: str) -> bool:
    return name in get_attributes(cib, attribute_type)


def set_value(
    runner: CommandRunner, attribute_type: str, name: str, value: str
) -> None:
    live.update_attribute(runner, attribute_type, name, value)


def remove(runner: CommandRunner, attribute_type: str, name: str) -> None:
    live.delete_attribute(runner, attribute_type, name)
