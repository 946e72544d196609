from dataclasses import replace
from typing import (
    Any,
    Dict,
    List,
    Mapping,
    Optional,
    Type,
    TypeVar,
)

from lxml import etree

from pcmk_reconcile.common import reports
from pcmk_reconcile.common.pacemaker.declaration import PrimitiveDeclaration
from pcmk_reconcile.common.reports.item import ReportItem
from pcmk_reconcile.lib.cib import (
    primitive,
    sections,
)
from pcmk_reconcile.lib.cib.primitive import PrimitiveRecord
from pcmk_reconcile.lib.cib.resource import TAG_PRIMITIVE
from pcmk_reconcile.lib.env import LibraryEnvironment
from pcmk_reconcile.lib.errors import LibraryError

ProviderType = TypeVar("ProviderType", bound="PrimitiveProvider")

FIELD_CLASS = "primitive_class"
FIELD_TYPE = "primitive_type"
FIELD_PROVIDER = "primitive_provider"
FIELD_PARAMETERS = "parameters"
FIELD_OPERATIONS = "operations"
FIELD_METADATA = "metadata"
FIELD_COMPLEX_TYPE = "complex_type"
FIELD_COMPLEX_METADATA = "complex_metadata"

FIELDS = (
    FIELD_CLASS,
    FIELD_TYPE,
    FIELD_PROVIDER,
    FIELD_PARAMETERS,
    FIELD_OPERATIONS,
    FIELD_METADATA,
    FIELD_COMPLEX_TYPE,
    FIELD_COMPLEX_METADATA,
)
REQUIRED_FIELDS = (FIELD_CLASS, FIELD_TYPE)


def _managed_field(field_name: str) -> Any:
    # pylint: disable=protected-access
    def getter(self: "PrimitiveProvider") -> Any:
        return self._get(field_name)

    def setter(self: "PrimitiveProvider", value: Any) -> None:
        self._desired[field_name] = value

    return property(getter, setter)


class PrimitiveProvider:
    """
    Converges one primitive resource of the cluster to its declaration

    As with constraints, requested changes are collected and written to the
    cluster by flush. The primitive is always written as a whole together
    with its wrapper, so parameters, operations and meta attributes removed
    from the declaration are removed from the cluster as well.
    """

    def __init__(
        self,
        env: LibraryEnvironment,
        name: str,
        declaration: Optional[PrimitiveDeclaration] = None,
        observed: Optional[PrimitiveRecord] = None,
    ):
        self._env = env
        self._name = name
        self.declaration = declaration
        self._observed = observed
        self._desired: Dict[str, Any] = {}

    @classmethod
    def instances(
        cls: Type[ProviderType], env: LibraryEnvironment
    ) -> List[ProviderType]:
        env.logger.debug("Listing primitives")
        return [
            cls(env, name, observed=record)
            for name, record in primitive.get_all(env.cib.fetch()).items()
        ]

    @classmethod
    def prefetch(
        cls: Type[ProviderType],
        env: LibraryEnvironment,
        declarations: Mapping[str, PrimitiveDeclaration],
    ) -> Dict[str, ProviderType]:
        if not env.options.prefetch:
            return {}
        providers = {}
        for instance in cls.instances(env):
            if instance.name in declarations:
                instance.declaration = declarations[instance.name]
                providers[instance.name] = instance
        return providers

    @property
    def name(self) -> str:
        return self._name

    @property
    def observed(self) -> Optional[PrimitiveRecord]:
        return self._observed

    @property
    def is_present(self) -> bool:
        return self._observed is not None

    def exists(self) -> bool:
        primitive_el = primitive.find_primitive(
            self._env.cib.fetch(), self._name
        )
        self._observed = (
            primitive.decode(primitive_el) if primitive_el is not None else None
        )
        self._env.logger.debug(
            "Primitive '%s' exists: %s", self._name, self.is_present
        )
        return self.is_present

    def create(self) -> None:
        if self.declaration is None:
            raise AssertionError("Cannot create a primitive without data")
        self._observed = None
        self._desired = {
            field_name: getattr(self.declaration, field_name)
            for field_name in FIELDS
            if getattr(self.declaration, field_name) is not None
        }

    def destroy(self) -> None:
        # removing the wrapper removes the primitive as well
        if self._observed is not None:
            element = etree.Element(
                self._observed.top_tag, id=self._observed.top_id
            )
        else:
            element = etree.Element(TAG_PRIMITIVE, id=self._name)
        self._env.cib.delete(element, sections.SCOPE_RESOURCES)
        self._env.cib.reset()
        self._observed = None
        self._desired = {}
        self._env.report_cluster_status(f"primitive {self._name} destroy")

    def _get(self, field_name: str) -> Any:
        if field_name in self._desired:
            return self._desired[field_name]
        if self._observed is None:
            return None
        return getattr(self._observed, field_name)

    primitive_class = _managed_field(FIELD_CLASS)
    primitive_type = _managed_field(FIELD_TYPE)
    primitive_provider = _managed_field(FIELD_PROVIDER)
    parameters = _managed_field(FIELD_PARAMETERS)
    operations = _managed_field(FIELD_OPERATIONS)
    metadata = _managed_field(FIELD_METADATA)
    complex_type = _managed_field(FIELD_COMPLEX_TYPE)
    complex_metadata = _managed_field(FIELD_COMPLEX_METADATA)

    def flush(self) -> None:
        if not self._desired:
            return
        observed = self._observed
        record = replace(
            observed if observed is not None else PrimitiveRecord(self._name),
            **self._desired,
        )
        if (
            observed is not None
            and record.complex_type != observed.complex_type
        ):
            record = replace(record, wrapper_id=None)

        missing = [
            field_name
            for field_name in REQUIRED_FIELDS
            if not getattr(record, field_name)
        ]
        if missing:
            raise LibraryError(
                ReportItem.error(
                    reports.messages.RequiredOptionsAreMissing(
                        missing, "primitive"
                    )
                )
            )
        element = primitive.encode(record)
        if element is None:
            raise LibraryError(
                ReportItem.error(
                    reports.messages.CibPatchBuildError(
                        TAG_PRIMITIVE, repr(self._desired)
                    )
                )
            )

        store = self._env.cib
        if observed is None:
            primitive.check_new_ids_applicable(store.fetch(), element)
            store.create(element, sections.SCOPE_RESOURCES)
        elif observed.top_id == record.top_id:
            store.replace(element, sections.SCOPE_RESOURCES)
        else:
            # the wrapper has changed, the old one cannot be replaced
            store.delete(
                etree.Element(observed.top_tag, id=observed.top_id),
                sections.SCOPE_RESOURCES,
            )
            store.create(element, sections.SCOPE_RESOURCES)
        # the write is seen only after the cib is loaded again
        store.reset()
        self._observed = record
        self._desired = {}
        self._env.report_cluster_status(f"primitive {self._name} flush")
