from typing import (
    Dict,
    List,
    Mapping,
    Optional,
    Type,
    TypeVar,
)

from pcmk_reconcile.common import reports
from pcmk_reconcile.common.pacemaker.declaration import PropertyDeclaration
from pcmk_reconcile.common.reports.item import ReportItem
from pcmk_reconcile.lib import cluster_property
from pcmk_reconcile.lib.env import LibraryEnvironment
from pcmk_reconcile.lib.errors import LibraryError
from pcmk_reconcile.lib.pacemaker.live import (
    ATTRIBUTE_TYPE_CRM_CONFIG,
    ATTRIBUTE_TYPE_RSC_DEFAULTS,
)

ProviderType = TypeVar("ProviderType", bound="AttributeProvider")


class AttributeProvider:
    """
    Converges one name-value attribute of the cluster to its declaration

    Unlike constraints, attributes are changed in the cluster right away.
    """

    attribute_type: str
    description: str

    def __init__(
        self,
        env: LibraryEnvironment,
        name: str,
        declaration: Optional[PropertyDeclaration] = None,
        observed_value: Optional[str] = None,
    ):
        self._env = env
        self._name = name
        self.declaration = declaration
        self._observed_value = observed_value

    @classmethod
    def instances(
        cls: Type[ProviderType], env: LibraryEnvironment
    ) -> List[ProviderType]:
        env.logger.debug("Listing %ss", cls.description)
        return [
            cls(env, name, observed_value=value)
            for name, value in cluster_property.get_attributes(
                env.cib.fetch(), cls.attribute_type
            ).items()
        ]

    @classmethod
    def prefetch(
        cls: Type[ProviderType],
        env: LibraryEnvironment,
        declarations: Mapping[str, PropertyDeclaration],
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

    def exists(self) -> bool:
        attributes = cluster_property.get_attributes(
            self._env.cib.fetch(), self.attribute_type
        )
        self._observed_value = attributes.get(self._name)
        return self._name in attributes

    @property
    def value(self) -> Optional[str]:
        return self._observed_value

    @value.setter
    def value(self, value: str) -> None:
        self._env.retry.run(
            lambda: cluster_property.set_value(
                self._env.mutation_runner(),
                self.attribute_type,
                self._name,
                value,
            ),
            retry_false_is_failure=False,
            retry_fail_on_timeout=True,
        )
        self._env.cib.reset()
        self._observed_value = value

    def create(self) -> None:
        if self.declaration is None or self.declaration.value is None:
            raise LibraryError(
                ReportItem.error(
                    reports.messages.RequiredOptionsAreMissing(
                        ["value"], self.description
                    )
                )
            )
        self.value = self.declaration.value

    def destroy(self) -> None:
        self._env.retry.run(
            lambda: cluster_property.remove(
                self._env.mutation_runner(), self.attribute_type, self._name
            ),
            retry_false_is_failure=False,
            retry_fail_on_timeout=True,
        )
        self._env.cib.reset()
        self._observed_value = None
        self._env.report_cluster_status(
            f"{self.attribute_type} {self._name} destroy"
        )


class ClusterPropertyProvider(AttributeProvider):
    attribute_type = ATTRIBUTE_TYPE_CRM_CONFIG
    description = "cluster property"


class ResourceDefaultProvider(AttributeProvider):
    attribute_type = ATTRIBUTE_TYPE_RSC_DEFAULTS
    description = "resource default"
