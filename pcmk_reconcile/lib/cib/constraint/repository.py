from typing import (
    Any,
    Dict,
    Mapping,
    Optional,
    Tuple,
)

from lxml import etree
from lxml.etree import _Element

from pcmk_reconcile.common import reports
from pcmk_reconcile.common.reports.item import ReportItem
from pcmk_reconcile.lib.cib import sections
from pcmk_reconcile.lib.cib.constraint.common import (
    ConstraintKind,
    decode,
    encode,
)
from pcmk_reconcile.lib.cib.store import CibStore
from pcmk_reconcile.lib.errors import LibraryError

ConstraintFields = Dict[str, str]


class ConstraintRepository:
    """
    Constraints of the cib stored in a CibStore grouped by their kinds

    Listings are kept until the store is reset.
    """

    def __init__(self, store: CibStore):
        self._store = store
        self._cache: Dict[str, Tuple[int, Dict[str, ConstraintFields]]] = {}

    def all(self, kind: ConstraintKind) -> Mapping[str, ConstraintFields]:
        generation = self._store.generation
        cached = self._cache.get(kind.tag)
        if cached is not None and cached[0] == generation:
            return cached[1]
        constraint_map: Dict[str, ConstraintFields] = {}
        for element in sections.get(
            self._store.fetch(), sections.CONSTRAINTS
        ).iterfind(f"./{kind.tag}"):
            fields = decode(kind, element)
            if "id" in fields:
                constraint_map[fields["id"]] = fields
        self._cache[kind.tag] = (generation, constraint_map)
        return constraint_map

    def get(
        self, kind: ConstraintKind, constraint_id: str
    ) -> Optional[ConstraintFields]:
        return self.all(kind).get(constraint_id)

    def exists(self, kind: ConstraintKind, constraint_id: str) -> bool:
        return constraint_id in self.all(kind)

    def add(self, kind: ConstraintKind, fields: Any) -> None:
        element = self._build(kind, fields)
        self._check_id_applicable(kind, element.get("id"))
        self._store.create(element, sections.SCOPE_CONSTRAINTS)

    def update(self, kind: ConstraintKind, fields: Any) -> None:
        self._store.modify(
            self._build(kind, fields), sections.SCOPE_CONSTRAINTS
        )

    def remove(self, kind: ConstraintKind, constraint_id: str) -> None:
        self._store.delete(
            etree.Element(kind.tag, id=constraint_id),
            sections.SCOPE_CONSTRAINTS,
        )

    @staticmethod
    def _build(kind: ConstraintKind, fields: Any) -> _Element:
        element = encode(kind, fields)
        if element is None:
            raise LibraryError(
                ReportItem.error(
                    reports.messages.CibPatchBuildError(kind.tag, repr(fields))
                )
            )
        return element

    def _check_id_applicable(
        self, kind: ConstraintKind, constraint_id: Optional[str]
    ) -> None:
        # constraints of all kinds share one id space with everything else in
        # the configuration
        if not constraint_id:
            return
        for element in sections.get(
            self._store.fetch(), sections.CONFIGURATION
        ).xpath(".//*[@id=$id]", id=constraint_id):
            parent = element.getparent()
            if (
                element.tag == kind.tag
                and parent is not None
                and parent.tag == sections.SCOPE_CONSTRAINTS
            ):
                continue
            raise LibraryError(
                ReportItem.error(
                    reports.messages.IdBelongsToUnexpectedType(
                        constraint_id, [kind.tag], str(element.tag)
                    )
                )
            )
