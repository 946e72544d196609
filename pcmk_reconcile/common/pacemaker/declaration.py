from dataclasses import dataclass
from typing import (
    Dict,
    List,
    Optional,
)

from pcmk_reconcile.common.interface.dto import DataTransferObject
from pcmk_reconcile.common.types import Ensure

SCORE_INFINITY = "INFINITY"

KIND_ORDER = "order"
KIND_COLOCATION = "colocation"
KIND_PROPERTY = "property"
KIND_RSC_DEFAULT = "rsc-default"
KIND_PRIMITIVE = "primitive"
CONSTRAINT_KINDS = (KIND_ORDER, KIND_COLOCATION)
ATTRIBUTE_KINDS = (KIND_PROPERTY, KIND_RSC_DEFAULT)

COMPLEX_TYPE_CLONE = "clone"
COMPLEX_TYPE_MASTER = "master"
COMPLEX_TYPES = (COMPLEX_TYPE_CLONE, COMPLEX_TYPE_MASTER)


@dataclass(frozen=True)
class ConstraintDeclaration(DataTransferObject):
    """
    Desired state of an order or a colocation constraint

    name -- constraint id, unique across the whole cluster configuration
    first -- first primitive
    second -- second primitive
    score -- integer, INFINITY, -INFINITY, inf or -inf
    cib -- name of a shadow cib the constraint is created in
    debug -- do not change the cluster, only report what would be done
    """

    name: str
    first: Optional[str] = None
    second: Optional[str] = None
    score: str = SCORE_INFINITY
    ensure: Ensure = Ensure.PRESENT
    cib: Optional[str] = None
    debug: bool = False


@dataclass(frozen=True)
class PropertyDeclaration(DataTransferObject):
    """
    Desired state of a cluster property or a resource default

    name -- name of the property
    value -- value of the property, required unless ensure is absent
    debug -- do not change the cluster, only report what would be done
    """

    name: str
    value: Optional[str] = None
    ensure: Ensure = Ensure.PRESENT
    cib: Optional[str] = None
    debug: bool = False


@dataclass(frozen=True)
class PrimitiveDeclaration(DataTransferObject):
    """
    Desired state of a primitive resource

    name -- primitive id, unique across the whole cluster configuration
    primitive_class -- resource agent standard, e.g. ocf or lsb
    primitive_type -- resource agent name, e.g. IPaddr2
    primitive_provider -- resource agent provider, e.g. heartbeat
    parameters -- instance attributes passed to the resource agent
    operations -- operations, each with a name and optionally an interval
        and other op attributes
    metadata -- meta attributes of the primitive
    complex_type -- clone or master, the primitive is put into a wrapper
        named "<complex_type>_<name>"
    complex_metadata -- meta attributes of the wrapper

    Fields left as None are not managed on an existing primitive.
    """

    # pylint: disable=too-many-instance-attributes
    name: str
    primitive_class: Optional[str] = None
    primitive_type: Optional[str] = None
    primitive_provider: Optional[str] = None
    parameters: Optional[Dict[str, str]] = None
    operations: Optional[List[Dict[str, str]]] = None
    metadata: Optional[Dict[str, str]] = None
    complex_type: Optional[str] = None
    complex_metadata: Optional[Dict[str, str]] = None
    ensure: Ensure = Ensure.PRESENT
    cib: Optional[str] = None
    debug: bool = False


@dataclass(frozen=True)
class ConstraintStateDto(DataTransferObject):
    name: str
    first: Optional[str]
    second: Optional[str]
    score: Optional[str]


@dataclass(frozen=True)
class PrimitiveStateDto(DataTransferObject):
    # pylint: disable=too-many-instance-attributes
    name: str
    primitive_class: Optional[str]
    primitive_type: Optional[str]
    primitive_provider: Optional[str]
    parameters: Dict[str, str]
    operations: List[Dict[str, str]]
    metadata: Dict[str, str]
    complex_type: Optional[str]
    complex_metadata: Dict[str, str]


@dataclass(frozen=True)
class AttributeStateDto(DataTransferObject):
    name: str
    value: Optional[str]


@dataclass(frozen=True)
class ReconcileResultDto(DataTransferObject):
    kind: str
    name: str
    changed: bool
