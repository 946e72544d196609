from pcmk_reconcile.lib.cib.constraint.common import ConstraintKind

TAG_NAME = "rsc_colocation"

KIND = ConstraintKind(
    tag=TAG_NAME,
    first_attribute="rsc",
    second_attribute="with-rsc",
)
