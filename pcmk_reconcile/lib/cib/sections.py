"""
This module defines mandatory and optional cib sections. It provides functions
for getting existing sections from the cib (lxml) tree.

The tree is never modified here, a missing optional section is reported as
None instead of being created.
"""

from typing import Optional

from lxml.etree import _Element

from pcmk_reconcile.common import reports
from pcmk_reconcile.common.reports.item import ReportItem
from pcmk_reconcile.lib.errors import LibraryError

CONFIGURATION = "configuration"
CONSTRAINTS = "configuration/constraints"
CRM_CONFIG = "configuration/crm_config"
RESOURCES = "configuration/resources"
STATUS = "status"

RSC_DEFAULTS = "configuration/rsc_defaults"

# scope names accepted by cibadmin --scope
SCOPE_CONSTRAINTS = "constraints"
SCOPE_RESOURCES = "resources"

__MANDATORY_SECTIONS = [
    CONFIGURATION,
    CONSTRAINTS,
    CRM_CONFIG,
    RESOURCES,
]

__OPTIONAL_SECTIONS = [
    RSC_DEFAULTS,
    STATUS,
]


def get(tree: _Element, section_name: str) -> _Element:
    """
    Return the element which represents section 'section_name' in the tree.

    If the section is mandatory and is not found in the tree this function
    raises.

    tree -- is tree in which the section is looked up
    section_name -- name of desired mandatory section; it is strongly
        recommended to use constants defined in this module
    """
    if section_name not in __MANDATORY_SECTIONS:
        raise AssertionError(f"Unknown mandatory cib section '{section_name}'")
    section = tree.find(f"./{section_name}")
    if section is not None:
        return section
    raise LibraryError(
        ReportItem.error(
            reports.messages.CibCannotFindMandatorySection(section_name)
        )
    )


def get_optional(tree: _Element, section_name: str) -> Optional[_Element]:
    if section_name not in __OPTIONAL_SECTIONS:
        raise AssertionError(f"Unknown optional cib section '{section_name}'")
    return tree.find(f"./{section_name}")
