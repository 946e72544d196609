from dataclasses import replace
from typing import (
    Any,
    Dict,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    Type,
    Union,
)

from pcmk_reconcile.common import reports
from pcmk_reconcile.common.pacemaker.declaration import (
    COMPLEX_TYPES,
    KIND_COLOCATION,
    KIND_ORDER,
    KIND_PRIMITIVE,
    KIND_PROPERTY,
    KIND_RSC_DEFAULT,
    ConstraintDeclaration,
    PrimitiveDeclaration,
    PropertyDeclaration,
    ReconcileResultDto,
)
from pcmk_reconcile.common.reports.item import (
    ReportItem,
    ReportItemList,
)
from pcmk_reconcile.common.types import Ensure
from pcmk_reconcile.lib.cib.primitive import normalize_operations
from pcmk_reconcile.lib.declaration import Declaration
from pcmk_reconcile.lib.env import LibraryEnvironment
from pcmk_reconcile.lib.errors import LibraryError
from pcmk_reconcile.lib.pacemaker.values import (
    normalize_score,
    validate_score,
)
from pcmk_reconcile.lib.provider.attribute import (
    AttributeProvider,
    ClusterPropertyProvider,
    ResourceDefaultProvider,
)
from pcmk_reconcile.lib.provider.constraint import (
    ColocationProvider,
    ConstraintProvider,
    OrderProvider,
)
from pcmk_reconcile.lib.provider.primitive import (
    FIELD_OPERATIONS,
    FIELDS,
    REQUIRED_FIELDS,
    PrimitiveProvider,
)

Provider = Union[ConstraintProvider, AttributeProvider, PrimitiveProvider]

CONSTRAINT_PROVIDERS: Mapping[str, Type[ConstraintProvider]] = {
    KIND_ORDER: OrderProvider,
    KIND_COLOCATION: ColocationProvider,
}
ATTRIBUTE_PROVIDERS: Mapping[str, Type[AttributeProvider]] = {
    KIND_PROPERTY: ClusterPropertyProvider,
    KIND_RSC_DEFAULT: ResourceDefaultProvider,
}
PRIMITIVE_PROVIDERS: Mapping[str, Type[PrimitiveProvider]] = {
    KIND_PRIMITIVE: PrimitiveProvider,
}


def reconcile_constraint(
    env: LibraryEnvironment,
    kind: str,
    declaration: ConstraintDeclaration,
    provider: Optional[ConstraintProvider] = None,
) -> bool:
    """
    Make a constraint in the cluster match its declaration, return True if
    the cluster has been changed

    kind -- order or colocation
    declaration -- desired state of the constraint
    provider -- prefetched provider of the constraint
    """
    report_list = validate_score(declaration.score)
    if report_list:
        raise LibraryError(*report_list)
    declaration = replace(
        declaration, score=normalize_score(declaration.score)
    )
    if provider is None:
        provider = CONSTRAINT_PROVIDERS[kind](
            env, declaration.name, declaration
        )
    else:
        provider.declaration = declaration

    exists = provider.exists()
    if declaration.ensure == Ensure.ABSENT:
        if exists:
            provider.destroy()
        return exists
    if not exists:
        provider.create()
        provider.flush()
        return True

    changed = False
    if declaration.first is not None and provider.first != declaration.first:
        provider.first = declaration.first
        changed = True
    if (
        declaration.second is not None
        and provider.second != declaration.second
    ):
        provider.second = declaration.second
        changed = True
    if provider.score != declaration.score:
        provider.score = declaration.score
        changed = True
    if changed:
        provider.flush()
    return changed


def reconcile_attribute(
    env: LibraryEnvironment,
    kind: str,
    declaration: PropertyDeclaration,
    provider: Optional[AttributeProvider] = None,
) -> bool:
    """
    Make a cluster property or a resource default match its declaration,
    return True if the cluster has been changed

    kind -- property or rsc-default
    declaration -- desired state of the attribute
    provider -- prefetched provider of the attribute
    """
    if provider is None:
        provider = ATTRIBUTE_PROVIDERS[kind](
            env, declaration.name, declaration
        )
    else:
        provider.declaration = declaration

    if declaration.ensure == Ensure.ABSENT:
        exists = provider.exists()
        if exists:
            provider.destroy()
        return exists
    if declaration.value is None:
        raise LibraryError(
            ReportItem.error(
                reports.messages.RequiredOptionsAreMissing(
                    ["value"], provider.description
                )
            )
        )
    if not provider.exists():
        provider.create()
        return True
    if provider.value != declaration.value:
        provider.value = declaration.value
        return True
    return False


def validate_primitive(declaration: PrimitiveDeclaration) -> ReportItemList:
    report_list: ReportItemList = []
    if declaration.ensure == Ensure.ABSENT:
        return report_list
    missing = [
        field_name
        for field_name in REQUIRED_FIELDS
        if not getattr(declaration, field_name)
    ]
    if missing:
        report_list.append(
            ReportItem.error(
                reports.messages.RequiredOptionsAreMissing(
                    missing, "primitive"
                )
            )
        )
    if (
        declaration.complex_type is not None
        and declaration.complex_type not in COMPLEX_TYPES
    ):
        report_list.append(
            ReportItem.error(
                reports.messages.InvalidOptionValue(
                    "complex_type",
                    declaration.complex_type,
                    list(COMPLEX_TYPES),
                )
            )
        )
    if any(
        "name" not in operation for operation in declaration.operations or []
    ):
        report_list.append(
            ReportItem.error(
                reports.messages.RequiredOptionsAreMissing(
                    ["name"], "operation"
                )
            )
        )
    return report_list


def _primitive_field_differs(
    field_name: str, current: Any, desired: Any
) -> bool:
    if field_name == FIELD_OPERATIONS:
        return normalize_operations(current or []) != normalize_operations(
            desired
        )
    return current != desired


def reconcile_primitive(
    env: LibraryEnvironment,
    declaration: PrimitiveDeclaration,
    provider: Optional[PrimitiveProvider] = None,
) -> bool:
    """
    Make a primitive in the cluster match its declaration, return True if the
    cluster has been changed

    declaration -- desired state of the primitive, fields set to None are
        left as they are in the cluster
    provider -- prefetched provider of the primitive
    """
    report_list = validate_primitive(declaration)
    if report_list:
        raise LibraryError(*report_list)
    if provider is None:
        provider = PrimitiveProvider(env, declaration.name, declaration)
    else:
        provider.declaration = declaration

    exists = provider.exists()
    if declaration.ensure == Ensure.ABSENT:
        if exists:
            provider.destroy()
        return exists
    if not exists:
        provider.create()
        provider.flush()
        return True

    changed = False
    for field_name in FIELDS:
        desired = getattr(declaration, field_name)
        if desired is None:
            continue
        if _primitive_field_differs(
            field_name, getattr(provider, field_name), desired
        ):
            setattr(provider, field_name, desired)
            changed = True
    if changed:
        provider.flush()
    return changed


def _prefetch(
    env: LibraryEnvironment,
    declaration_list: Sequence[Tuple[str, Declaration]],
) -> Dict[Tuple[str, str], Provider]:
    # Declarations targeting a shadow cib or run in debug mode need their own
    # environment, they cannot share discovered providers.
    if not env.options.prefetch:
        return {}
    shared_env = env.for_pass()
    providers: Dict[Tuple[str, str], Provider] = {}
    provider_classes: Dict[str, Type[Provider]] = {
        **CONSTRAINT_PROVIDERS,
        **ATTRIBUTE_PROVIDERS,
        **PRIMITIVE_PROVIDERS,
    }
    for kind, provider_class in provider_classes.items():
        declarations = {
            declaration.name: declaration
            for declaration_kind, declaration in declaration_list
            if declaration_kind == kind
            and declaration.cib is None
            and not declaration.debug
        }
        if not declarations:
            continue
        for name, provider in provider_class.prefetch(
            shared_env, declarations  # type: ignore
        ).items():
            providers[(kind, name)] = provider
    return providers


def apply(
    env: LibraryEnvironment,
    declaration_list: Sequence[Tuple[str, Declaration]],
) -> List[ReconcileResultDto]:
    """
    Reconcile declarations one by one, each of them with fresh cluster data

    declaration_list -- pairs of a declaration kind and a declaration
    """
    prefetched = _prefetch(env, declaration_list)
    result_list = []
    for kind, declaration in declaration_list:
        provider = prefetched.get((kind, declaration.name))
        pass_env = env.for_pass(
            cib_shadow=declaration.cib, debug=declaration.debug
        )
        if kind in CONSTRAINT_PROVIDERS:
            changed = reconcile_constraint(
                pass_env,
                kind,
                declaration,  # type: ignore
                provider,  # type: ignore
            )
        elif kind in PRIMITIVE_PROVIDERS:
            changed = reconcile_primitive(
                pass_env,
                declaration,  # type: ignore
                provider,  # type: ignore
            )
        else:
            changed = reconcile_attribute(
                pass_env,
                kind,
                declaration,  # type: ignore
                provider,  # type: ignore
            )
        env.logger.info(
            "%s '%s' %s",
            kind,
            declaration.name,
            "changed" if changed else "unchanged",
        )
        result_list.append(
            ReconcileResultDto(
                kind=kind, name=declaration.name, changed=changed
            )
        )
    return result_list
