"""
Conversion of constraints between plain field mappings and cib elements

Order and colocation constraints share the same fields, they only differ in
the element tag and in the names of the attributes holding the constrained
primitives.
"""

from dataclasses import dataclass
from typing import (
    Any,
    Dict,
    Mapping,
    Optional,
)

from lxml import etree
from lxml.etree import _Element

from pcmk_reconcile.common.types import StringCollection
from pcmk_reconcile.lib.xml_tools import export_attributes

FIELD_ID = "id"
FIELD_FIRST = "first"
FIELD_SECOND = "second"
FIELD_SCORE = "score"

REQUIRED_FIELDS = (FIELD_ID, FIELD_SCORE, FIELD_FIRST, FIELD_SECOND)


@dataclass(frozen=True)
class ConstraintKind:
    """
    tag -- tag of the constraint element
    first_attribute -- attribute holding the first primitive
    second_attribute -- attribute holding the second primitive
    ignored_fields -- fields never put into the element
    """

    tag: str
    first_attribute: str
    second_attribute: str
    ignored_fields: StringCollection = ("type",)

    def to_attribute(self, field: str) -> str:
        if field == FIELD_FIRST:
            return self.first_attribute
        if field == FIELD_SECOND:
            return self.second_attribute
        return field

    def to_field(self, attribute: str) -> str:
        if attribute == self.first_attribute:
            return FIELD_FIRST
        if attribute == self.second_attribute:
            return FIELD_SECOND
        return attribute


def encode(kind: ConstraintKind, fields: Any) -> Optional[_Element]:
    """
    Build a constraint element, return None if fields is not a mapping

    kind -- the kind of the constraint
    fields -- constraint fields, keys first and second are translated to the
        kind's attributes, None values are left out
    """
    if not isinstance(fields, Mapping):
        return None
    element = etree.Element(kind.tag)
    for name, value in fields.items():
        if value is None or name in kind.ignored_fields:
            continue
        element.set(kind.to_attribute(str(name)), str(value))
    return element


def decode(kind: ConstraintKind, element: _Element) -> Dict[str, str]:
    return {
        kind.to_field(attribute): value
        for attribute, value in export_attributes(element).items()
    }
