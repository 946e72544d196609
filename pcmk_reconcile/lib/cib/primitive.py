"""
Conversion of primitive resources between records and cib elements

A primitive is placed in the resources section either on its own or wrapped
in a clone or a master element. The wrapper is written together with the
primitive, so the whole primitive is always built from one record.
"""

from dataclasses import (
    dataclass,
    field,
)
from typing import (
    Dict,
    List,
    Mapping,
    Optional,
    Sequence,
    cast,
)

from lxml import etree
from lxml.etree import _Element

from pcmk_reconcile.common import reports
from pcmk_reconcile.common.pacemaker.declaration import COMPLEX_TYPES
from pcmk_reconcile.common.reports.item import ReportItem
from pcmk_reconcile.lib.cib import (
    nvpair,
    sections,
)
from pcmk_reconcile.lib.cib.resource import TAG_PRIMITIVE
from pcmk_reconcile.lib.cib.tools import (
    IdProvider,
    create_subelement_id,
)
from pcmk_reconcile.lib.errors import LibraryError
from pcmk_reconcile.lib.xml_tools import export_attributes

OPERATIONS_TAG = "operations"
OP_TAG = "op"

# op options stored in instance attributes of the op element
OPERATION_NVPAIR_ATTRIBUTES = frozenset(["OCF_CHECK_LEVEL"])

_DEFAULT_INTERVALS = {"monitor": "60s"}


@dataclass(frozen=True)
class PrimitiveRecord:
    """
    A primitive with its wrapper

    wrapper_id -- id of the wrapper found in the cluster, a new wrapper is
        named "<complex_type>_<name>"
    """

    # pylint: disable=too-many-instance-attributes
    name: str
    primitive_class: Optional[str] = None
    primitive_type: Optional[str] = None
    primitive_provider: Optional[str] = None
    parameters: Mapping[str, str] = field(default_factory=dict)
    operations: Sequence[Mapping[str, str]] = field(default_factory=list)
    metadata: Mapping[str, str] = field(default_factory=dict)
    complex_type: Optional[str] = None
    complex_metadata: Mapping[str, str] = field(default_factory=dict)
    wrapper_id: Optional[str] = None

    @property
    def top_tag(self) -> str:
        return self.complex_type or TAG_PRIMITIVE

    @property
    def top_id(self) -> str:
        if not self.complex_type:
            return self.name
        return self.wrapper_id or f"{self.complex_type}_{self.name}"


def get_default_operation_interval(operation_name: str) -> str:
    return _DEFAULT_INTERVALS.get(operation_name, "0s")


def normalize_operations(
    operation_list: Sequence[Mapping[str, str]],
) -> List[Dict[str, str]]:
    """
    Return operations sorted by name and interval with default intervals
    filled in, so that operations can be compared

    operation_list -- operations, each of them should have a name
    """
    result = []
    for operation in operation_list:
        options = {
            str(name): str(value)
            for name, value in operation.items()
            if name != "id"
        }
        if "interval" not in options and "name" in options:
            options["interval"] = get_default_operation_interval(
                options["name"]
            )
        result.append(options)
    return sorted(
        result, key=lambda op: (op.get("name", ""), op.get("interval", ""))
    )


def find_primitive(cib: _Element, primitive_id: str) -> Optional[_Element]:
    element_list = cast(
        List[_Element],
        sections.get(cib, sections.RESOURCES).xpath(
            f".//{TAG_PRIMITIVE}[@id=$id]", id=primitive_id
        ),
    )
    return element_list[0] if element_list else None


def _decode_operation(op_element: _Element) -> Dict[str, str]:
    options = export_attributes(op_element, with_id=False)
    options.update(
        nvpair.get_nvsets_as_dict(nvpair.INSTANCE_ATTRIBUTES_TAG, op_element)
    )
    return options


def decode(primitive_el: _Element) -> PrimitiveRecord:
    parent = primitive_el.getparent()
    wrapper = (
        parent if parent is not None and parent.tag in COMPLEX_TYPES else None
    )
    return PrimitiveRecord(
        name=str(primitive_el.attrib["id"]),
        primitive_class=primitive_el.get("class"),
        primitive_type=primitive_el.get("type"),
        primitive_provider=primitive_el.get("provider"),
        parameters=nvpair.get_nvsets_as_dict(
            nvpair.INSTANCE_ATTRIBUTES_TAG, primitive_el
        ),
        operations=[
            _decode_operation(op_element)
            for op_element in primitive_el.iterfind(
                f"./{OPERATIONS_TAG}/{OP_TAG}"
            )
        ],
        metadata=nvpair.get_nvsets_as_dict(
            nvpair.META_ATTRIBUTES_TAG, primitive_el
        ),
        complex_type=str(wrapper.tag) if wrapper is not None else None,
        complex_metadata=nvpair.get_nvsets_as_dict(
            nvpair.META_ATTRIBUTES_TAG, wrapper
        ),
        wrapper_id=str(wrapper.attrib["id"]) if wrapper is not None else None,
    )


def get_all(cib: _Element) -> Dict[str, PrimitiveRecord]:
    """
    Return all primitives defined in the cib keyed by their ids
    """
    return {
        str(primitive_el.attrib["id"]): decode(primitive_el)
        for primitive_el in sections.get(cib, sections.RESOURCES).iter(
            TAG_PRIMITIVE
        )
    }


def _append_new_operation(
    operations_element: _Element,
    primitive_element: _Element,
    options: Mapping[str, str],
    id_provider: IdProvider,
) -> None:
    op_element = etree.SubElement(
        operations_element,
        OP_TAG,
        id=create_subelement_id(
            primitive_element,
            f"{options['name']}-interval-{options['interval']}",
            id_provider,
        ),
    )
    for name, value in options.items():
        if name not in OPERATION_NVPAIR_ATTRIBUTES:
            op_element.set(name, value)
    nvpair.append_new_nvset(
        nvpair.INSTANCE_ATTRIBUTES_TAG,
        op_element,
        {
            name: value
            for name, value in options.items()
            if name in OPERATION_NVPAIR_ATTRIBUTES
        },
        id_provider,
    )


def encode(record: PrimitiveRecord) -> Optional[_Element]:
    """
    Build the element written to the resources section, the wrapper if the
    primitive has one, return None if the record cannot be turned to an
    element

    record -- the primitive, its class and type are required as well as
        names of its operations
    """
    if not record.primitive_class or not record.primitive_type:
        return None
    if record.complex_type and record.complex_type not in COMPLEX_TYPES:
        return None
    if any("name" not in operation for operation in record.operations):
        return None

    id_provider = IdProvider()
    id_provider.book_ids(record.name, record.top_id)
    attributes = {
        "id": record.name,
        "class": record.primitive_class,
        "type": record.primitive_type,
    }
    if record.primitive_provider:
        attributes["provider"] = record.primitive_provider
    primitive_el = etree.Element(TAG_PRIMITIVE, attributes)
    nvpair.append_new_nvset(
        nvpair.INSTANCE_ATTRIBUTES_TAG,
        primitive_el,
        record.parameters,
        id_provider,
    )
    nvpair.append_new_nvset(
        nvpair.META_ATTRIBUTES_TAG, primitive_el, record.metadata, id_provider
    )
    if record.operations:
        operations_el = etree.SubElement(primitive_el, OPERATIONS_TAG)
        for options in normalize_operations(record.operations):
            _append_new_operation(
                operations_el, primitive_el, options, id_provider
            )

    if not record.complex_type:
        return primitive_el
    wrapper_el = etree.Element(record.complex_type, id=record.top_id)
    wrapper_el.append(primitive_el)
    nvpair.append_new_nvset(
        nvpair.META_ATTRIBUTES_TAG,
        wrapper_el,
        record.complex_metadata,
        id_provider,
    )
    return wrapper_el


def check_new_ids_applicable(cib: _Element, element: _Element) -> None:
    """
    Raise LibraryError if an id of a new primitive or its wrapper is already
    used in the configuration

    element -- the primitive or its wrapper going to be created
    """
    report_list = []
    new_elements = [element] + [
        child for child in element if child.tag == TAG_PRIMITIVE
    ]
    for new_element in new_elements:
        element_id = str(new_element.get("id"))
        for existing in sections.get(cib, sections.CONFIGURATION).xpath(
            ".//*[@id=$id]", id=element_id
        ):
            report_list.append(
                ReportItem.error(
                    reports.messages.IdBelongsToUnexpectedType(
                        element_id, [str(new_element.tag)], str(existing.tag)
                    )
                )
            )
    if report_list:
        raise LibraryError(*report_list)
