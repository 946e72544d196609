from pcmk_reconcile.lib.cib.constraint.common import ConstraintKind

TAG_NAME = "rsc_order"

KIND = ConstraintKind(
    tag=TAG_NAME,
    first_attribute="first",
    second_attribute="then",
)
