from dataclasses import dataclass
from typing import (
    Dict,
    List,
    Mapping,
    Optional,
    Type,
    TypeVar,
)

from pcmk_reconcile.common import reports
from pcmk_reconcile.common.pacemaker.declaration import ConstraintDeclaration
from pcmk_reconcile.common.reports.item import ReportItem
from pcmk_reconcile.common.types import Ensure
from pcmk_reconcile.lib.cib import resource
from pcmk_reconcile.lib.cib.constraint import (
    colocation,
    order,
)
from pcmk_reconcile.lib.cib.constraint.common import (
    FIELD_FIRST,
    FIELD_ID,
    FIELD_SCORE,
    FIELD_SECOND,
    REQUIRED_FIELDS,
    ConstraintKind,
)
from pcmk_reconcile.lib.env import LibraryEnvironment
from pcmk_reconcile.lib.errors import LibraryError

ProviderType = TypeVar("ProviderType", bound="ConstraintProvider")


@dataclass(frozen=True)
class ConstraintRecord:
    """
    A constraint as it has been found in the cluster
    """

    name: str
    first: Optional[str] = None
    second: Optional[str] = None
    score: Optional[str] = None
    ensure: Ensure = Ensure.PRESENT

    @classmethod
    def from_fields(cls, fields: Mapping[str, str]) -> "ConstraintRecord":
        return cls(
            name=fields[FIELD_ID],
            first=fields.get(FIELD_FIRST),
            second=fields.get(FIELD_SECOND),
            score=fields.get(FIELD_SCORE),
        )

    def to_fields(self) -> Dict[str, Optional[str]]:
        return {
            FIELD_ID: self.name,
            FIELD_FIRST: self.first,
            FIELD_SECOND: self.second,
            FIELD_SCORE: self.score,
        }


class ConstraintProvider:
    """
    Converges one constraint of the cluster to its declaration

    The constraint found in the cluster is kept as an immutable record, the
    requested changes are collected separately and written to the cluster by
    flush. Only destroy changes the cluster immediately.
    """

    kind: ConstraintKind

    def __init__(
        self,
        env: LibraryEnvironment,
        name: str,
        declaration: Optional[ConstraintDeclaration] = None,
        observed: Optional[ConstraintRecord] = None,
    ):
        self._env = env
        self._name = name
        self.declaration = declaration
        self._observed = observed
        self._desired: Dict[str, Optional[str]] = {}

    @classmethod
    def instances(
        cls: Type[ProviderType], env: LibraryEnvironment
    ) -> List[ProviderType]:
        """
        Return providers of all constraints of the kind found in the cluster
        """
        env.logger.debug("Listing %s constraints", cls.kind.tag)
        return [
            cls(env, record.name, observed=record)
            for record in (
                ConstraintRecord.from_fields(fields)
                for fields in env.constraints.all(cls.kind).values()
            )
        ]

    @classmethod
    def prefetch(
        cls: Type[ProviderType],
        env: LibraryEnvironment,
        declarations: Mapping[str, ConstraintDeclaration],
    ) -> Dict[str, ProviderType]:
        """
        Pair declarations with discovered constraints, empty unless the
        prefetch option is enabled
        """
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
    def observed(self) -> Optional[ConstraintRecord]:
        return self._observed

    @property
    def is_present(self) -> bool:
        return (
            self._observed is not None
            and self._observed.ensure == Ensure.PRESENT
        )

    def exists(self) -> bool:
        fields = self._env.constraints.get(self.kind, self._name)
        self._observed = (
            ConstraintRecord.from_fields(fields) if fields else None
        )
        self._env.logger.debug(
            "Constraint '%s' exists: %s", self._name, fields is not None
        )
        return fields is not None

    def create(self) -> None:
        if self.declaration is None:
            raise AssertionError("Cannot create a constraint without data")
        self._observed = None
        self._desired = {
            FIELD_ID: self._name,
            FIELD_FIRST: self.declaration.first,
            FIELD_SECOND: self.declaration.second,
            FIELD_SCORE: self.declaration.score,
        }

    def destroy(self) -> None:
        self._env.constraints.remove(self.kind, self._name)
        self._env.cib.reset()
        self._observed = None
        self._desired = {}
        self._env.report_cluster_status(f"{self.kind.tag} {self._name} destroy")

    def _get(self, field: str) -> Optional[str]:
        if field in self._desired:
            return self._desired[field]
        if self._observed is None:
            return None
        return self._observed.to_fields()[field]

    @property
    def first(self) -> Optional[str]:
        return self._get(FIELD_FIRST)

    @first.setter
    def first(self, value: Optional[str]) -> None:
        self._desired[FIELD_FIRST] = value

    @property
    def second(self) -> Optional[str]:
        return self._get(FIELD_SECOND)

    @second.setter
    def second(self, value: Optional[str]) -> None:
        self._desired[FIELD_SECOND] = value

    @property
    def score(self) -> Optional[str]:
        return self._get(FIELD_SCORE)

    @score.setter
    def score(self, value: Optional[str]) -> None:
        self._desired[FIELD_SCORE] = value

    def flush(self) -> None:
        if not self._desired:
            return
        fields = (
            self._observed.to_fields()
            if self._observed is not None
            else {FIELD_ID: self._name}
        )
        fields.update(self._desired)

        cib = self._env.cib.fetch()
        for field in (FIELD_FIRST, FIELD_SECOND):
            reference = fields.get(field)
            if reference and not resource.primitive_exists(
                cib, resource.primitive_base_name(reference)
            ):
                raise LibraryError(
                    ReportItem.error(
                        reports.messages.ConstraintPrimitiveNotFound(
                            self._name, reference
                        )
                    )
                )
        missing = [field for field in REQUIRED_FIELDS if not fields.get(field)]
        if missing:
            raise LibraryError(
                ReportItem.error(
                    reports.messages.ConstraintIncomplete(self._name, missing)
                )
            )

        if self.is_present:
            self._env.constraints.update(self.kind, fields)
        else:
            self._env.constraints.add(self.kind, fields)
        # the write is seen only after the cib is loaded again
        self._env.cib.reset()
        self._observed = ConstraintRecord(
            self._name,
            fields[FIELD_FIRST],
            fields[FIELD_SECOND],
            fields[FIELD_SCORE],
        )
        self._desired = {}
        self._env.report_cluster_status(f"{self.kind.tag} {self._name} flush")


class OrderProvider(ConstraintProvider):
    kind = order.KIND


class ColocationProvider(ConstraintProvider):
    kind = colocation.KIND
