import logging
from unittest import (
    TestCase,
    mock,
)

from pcmk_reconcile.common.pacemaker.declaration import (
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
from pcmk_reconcile.common.reports import ReportItemSeverity as severity
from pcmk_reconcile.common.reports import codes as report_codes
from pcmk_reconcile.common.types import Ensure
from pcmk_reconcile.lib.commands import reconcile
from pcmk_reconcile.lib.env import LibraryEnvironment

from pcmk_reconcile_test.tools import fixture_cib
from pcmk_reconcile_test.tools.assertions import (
    assert_raise_library_error,
    assert_report_item_list_equal,
)
from pcmk_reconcile_test.tools.custom_mock import MockLibraryReportProcessor
from pcmk_reconcile_test.tools.misc import (
    create_env,
    fast_options,
)
from pcmk_reconcile_test.tools.mock_runner import Runner

CIB = fixture_cib.cib(
    crm_config=fixture_cib.cluster_properties({"no-quorum-policy": "stop"}),
    rsc_defaults=fixture_cib.meta_attributes({"resource-stickiness": "100"}),
    constraints=(
        fixture_cib.order("order1", "A", "B")
        + fixture_cib.colocation("colocation1", "C", "B", "100")
    ),
)


def order_xml(constraint_id, first, then, score):
    return (
        f'<rsc_order id="{constraint_id}" first="{first}" then="{then}" '
        f'score="{score}"/>'
    )


class ReconcileMixin:
    def setUp(self):
        self.runner = Runner()
        self.reporter = MockLibraryReportProcessor()
        self.env = create_env(self.runner, report_processor=self.reporter)

    def tearDown(self):
        self.runner.assert_everything_launched()

    def apply(self, *declaration_list):
        return reconcile.apply(self.env, list(declaration_list))


class ApplyConstraint(ReconcileMixin, TestCase):
    def test_create(self):
        self.runner.add_calls(
            [
                fixture_cib.load_cib_call(CIB),
                fixture_cib.patch_cib_call(
                    "create", order_xml("order2", "B", "A", "INFINITY")
                ),
                fixture_cib.load_cib_call(CIB),
            ]
        )
        self.assertEqual(
            self.apply((KIND_ORDER, ConstraintDeclaration("order2", "B", "A"))),
            [ReconcileResultDto(KIND_ORDER, "order2", True)],
        )

    def test_unchanged(self):
        self.runner.add_calls([fixture_cib.load_cib_call(CIB)])
        self.assertEqual(
            self.apply(
                (KIND_ORDER, ConstraintDeclaration("order1", "A", "B", "inf"))
            ),
            [ReconcileResultDto(KIND_ORDER, "order1", False)],
        )

    def test_score_changed(self):
        self.runner.add_calls(
            [
                fixture_cib.load_cib_call(CIB),
                fixture_cib.patch_cib_call(
                    "modify", order_xml("order1", "A", "B", "-INFINITY")
                ),
                fixture_cib.load_cib_call(CIB),
            ]
        )
        self.assertEqual(
            self.apply(
                (KIND_ORDER, ConstraintDeclaration("order1", score="-inf"))
            ),
            [ReconcileResultDto(KIND_ORDER, "order1", True)],
        )

    def test_primitive_changed(self):
        self.runner.add_calls(
            [
                fixture_cib.load_cib_call(CIB),
                fixture_cib.patch_cib_call(
                    "modify",
                    '<rsc_colocation id="colocation1" rsc="C" '
                    'with-rsc="A" score="100"/>',
                ),
                fixture_cib.load_cib_call(CIB),
            ]
        )
        self.assertEqual(
            self.apply(
                (
                    KIND_COLOCATION,
                    ConstraintDeclaration(
                        "colocation1", second="A", score="100"
                    ),
                )
            ),
            [ReconcileResultDto(KIND_COLOCATION, "colocation1", True)],
        )

    def test_remove(self):
        self.runner.add_calls(
            [
                fixture_cib.load_cib_call(CIB),
                fixture_cib.patch_cib_call(
                    "delete", '<rsc_order id="order1"/>'
                ),
                fixture_cib.load_cib_call(CIB),
            ]
        )
        self.assertEqual(
            self.apply(
                (
                    KIND_ORDER,
                    ConstraintDeclaration("order1", ensure=Ensure.ABSENT),
                )
            ),
            [ReconcileResultDto(KIND_ORDER, "order1", True)],
        )

    def test_remove_missing(self):
        self.runner.add_calls([fixture_cib.load_cib_call(CIB)])
        self.assertEqual(
            self.apply(
                (
                    KIND_ORDER,
                    ConstraintDeclaration("colocation1", ensure=Ensure.ABSENT),
                )
            ),
            [ReconcileResultDto(KIND_ORDER, "colocation1", False)],
        )

    def test_invalid_score(self):
        assert_raise_library_error(
            lambda: self.apply(
                (KIND_ORDER, ConstraintDeclaration("order1", "A", "B", "+1"))
            ),
            (severity.ERROR, report_codes.INVALID_SCORE, {"score": "+1"}),
        )

    def test_missing_primitive(self):
        self.runner.add_calls([fixture_cib.load_cib_call(CIB)])
        assert_raise_library_error(
            lambda: self.apply(
                (KIND_ORDER, ConstraintDeclaration("order2", "A", "X"))
            ),
            (
                severity.ERROR,
                report_codes.CONSTRAINT_PRIMITIVE_NOT_FOUND,
                {"constraint_id": "order2", "primitive_id": "X"},
            ),
        )

    def test_debug_mode(self):
        # nothing is written, the status report reads the same cib again
        self.runner.add_calls([fixture_cib.load_cib_call(CIB)] * 2)
        self.assertEqual(
            self.apply(
                (
                    KIND_ORDER,
                    ConstraintDeclaration("order2", "B", "A", debug=True),
                )
            ),
            [ReconcileResultDto(KIND_ORDER, "order2", True)],
        )
        assert_report_item_list_equal(
            self.reporter.report_item_list,
            [
                (
                    severity.DEBUG,
                    report_codes.RUN_EXTERNAL_PROCESS_DRY_RUN,
                    {
                        "command": (
                            "/usr/sbin/cibadmin --force --sync-call --create "
                            "--scope constraints --xml-text "
                            "'{0}'".format(
                                order_xml("order2", "B", "A", "INFINITY")
                            )
                        ),
                    },
                ),
            ],
        )


class ApplyAttribute(ReconcileMixin, TestCase):
    def test_create(self):
        self.runner.add_calls(
            [
                fixture_cib.load_cib_call(CIB),
                fixture_cib.update_attribute_call(
                    "crm_config", "maintenance-mode", "true"
                ),
            ]
        )
        self.assertEqual(
            self.apply(
                (
                    KIND_PROPERTY,
                    PropertyDeclaration("maintenance-mode", "true"),
                )
            ),
            [ReconcileResultDto(KIND_PROPERTY, "maintenance-mode", True)],
        )

    def test_unchanged(self):
        self.runner.add_calls([fixture_cib.load_cib_call(CIB)])
        self.assertEqual(
            self.apply(
                (
                    KIND_RSC_DEFAULT,
                    PropertyDeclaration("resource-stickiness", "100"),
                )
            ),
            [
                ReconcileResultDto(
                    KIND_RSC_DEFAULT, "resource-stickiness", False
                )
            ],
        )

    def test_changed(self):
        self.runner.add_calls(
            [
                fixture_cib.load_cib_call(CIB),
                fixture_cib.update_attribute_call(
                    "rsc_defaults", "resource-stickiness", "0"
                ),
            ]
        )
        self.assertEqual(
            self.apply(
                (
                    KIND_RSC_DEFAULT,
                    PropertyDeclaration("resource-stickiness", "0"),
                )
            ),
            [
                ReconcileResultDto(
                    KIND_RSC_DEFAULT, "resource-stickiness", True
                )
            ],
        )

    def test_remove(self):
        self.runner.add_calls(
            [
                fixture_cib.load_cib_call(CIB),
                fixture_cib.delete_attribute_call(
                    "crm_config", "no-quorum-policy"
                ),
                fixture_cib.load_cib_call(CIB),
            ]
        )
        self.assertEqual(
            self.apply(
                (
                    KIND_PROPERTY,
                    PropertyDeclaration(
                        "no-quorum-policy", ensure=Ensure.ABSENT
                    ),
                )
            ),
            [ReconcileResultDto(KIND_PROPERTY, "no-quorum-policy", True)],
        )

    def test_missing_value(self):
        assert_raise_library_error(
            lambda: self.apply(
                (KIND_PROPERTY, PropertyDeclaration("no-quorum-policy"))
            ),
            (
                severity.ERROR,
                report_codes.REQUIRED_OPTIONS_ARE_MISSING,
                {
                    "option_names": ["value"],
                    "option_type": "cluster property",
                },
            ),
        )


CIB_OPERATIONS = fixture_cib.cib(
    resources="""
        <primitive id="E" class="ocf" provider="heartbeat" type="Dummy">
            <operations>
                <op id="E-monitor" name="monitor" interval="60s"/>
            </operations>
        </primitive>
    """
)


class ApplyPrimitive(ReconcileMixin, TestCase):
    def test_create(self):
        self.runner.add_calls(
            [
                fixture_cib.load_cib_call(CIB),
                fixture_cib.patch_cib_call(
                    "create",
                    '<primitive id="E" class="lsb" type="httpd"/>',
                    scope="resources",
                ),
                fixture_cib.load_cib_call(CIB),
            ]
        )
        self.assertEqual(
            self.apply(
                (
                    KIND_PRIMITIVE,
                    PrimitiveDeclaration(
                        "E", primitive_class="lsb", primitive_type="httpd"
                    ),
                )
            ),
            [ReconcileResultDto(KIND_PRIMITIVE, "E", True)],
        )

    def test_unchanged(self):
        self.runner.add_calls([fixture_cib.load_cib_call(CIB)])
        self.assertEqual(
            self.apply(
                (
                    KIND_PRIMITIVE,
                    PrimitiveDeclaration(
                        "D",
                        primitive_class="ocf",
                        primitive_type="Stateful",
                        primitive_provider="pacemaker",
                        metadata={"is-managed": "false"},
                        complex_type="master",
                    ),
                )
            ),
            [ReconcileResultDto(KIND_PRIMITIVE, "D", False)],
        )

    def test_default_operation_interval_unchanged(self):
        self.runner.add_calls([fixture_cib.load_cib_call(CIB_OPERATIONS)])
        self.assertEqual(
            self.apply(
                (
                    KIND_PRIMITIVE,
                    PrimitiveDeclaration(
                        "E",
                        primitive_class="ocf",
                        primitive_type="Dummy",
                        operations=[{"name": "monitor"}],
                    ),
                )
            ),
            [ReconcileResultDto(KIND_PRIMITIVE, "E", False)],
        )

    def test_parameters_changed(self):
        self.runner.add_calls(
            [
                fixture_cib.load_cib_call(CIB),
                fixture_cib.patch_cib_call(
                    "replace",
                    '<primitive id="A" class="ocf" type="Dummy" '
                    'provider="heartbeat">'
                    '<instance_attributes id="A-instance_attributes">'
                    '<nvpair id="A-instance_attributes-fake" name="fake" '
                    'value="1"/>'
                    "</instance_attributes>"
                    "</primitive>",
                    scope="resources",
                ),
                fixture_cib.load_cib_call(CIB),
            ]
        )
        self.assertEqual(
            self.apply(
                (
                    KIND_PRIMITIVE,
                    PrimitiveDeclaration(
                        "A",
                        primitive_class="ocf",
                        primitive_type="Dummy",
                        parameters={"fake": "1"},
                    ),
                )
            ),
            [ReconcileResultDto(KIND_PRIMITIVE, "A", True)],
        )

    def test_remove(self):
        self.runner.add_calls(
            [
                fixture_cib.load_cib_call(CIB),
                fixture_cib.patch_cib_call(
                    "delete", '<master id="D-master"/>', scope="resources"
                ),
                fixture_cib.load_cib_call(CIB),
            ]
        )
        self.assertEqual(
            self.apply(
                (
                    KIND_PRIMITIVE,
                    PrimitiveDeclaration("D", ensure=Ensure.ABSENT),
                )
            ),
            [ReconcileResultDto(KIND_PRIMITIVE, "D", True)],
        )

    def test_remove_missing(self):
        self.runner.add_calls([fixture_cib.load_cib_call(CIB)])
        self.assertEqual(
            self.apply(
                (
                    KIND_PRIMITIVE,
                    PrimitiveDeclaration("E", ensure=Ensure.ABSENT),
                )
            ),
            [ReconcileResultDto(KIND_PRIMITIVE, "E", False)],
        )

    def test_invalid(self):
        assert_raise_library_error(
            lambda: self.apply(
                (
                    KIND_PRIMITIVE,
                    PrimitiveDeclaration(
                        "E",
                        primitive_type="httpd",
                        operations=[{"interval": "10s"}],
                        complex_type="group",
                    ),
                )
            ),
            (
                severity.ERROR,
                report_codes.REQUIRED_OPTIONS_ARE_MISSING,
                {
                    "option_names": ["primitive_class"],
                    "option_type": "primitive",
                },
            ),
            (
                severity.ERROR,
                report_codes.INVALID_OPTION_VALUE,
                {
                    "option_name": "complex_type",
                    "option_value": "group",
                    "allowed_values": ["clone", "master"],
                },
            ),
            (
                severity.ERROR,
                report_codes.REQUIRED_OPTIONS_ARE_MISSING,
                {
                    "option_names": ["name"],
                    "option_type": "operation",
                },
            ),
        )


class ApplyList(ReconcileMixin, TestCase):
    def test_each_declaration_reads_fresh_cib(self):
        cib_after = fixture_cib.cib(
            constraints=fixture_cib.order("order2", "B", "A")
        )
        self.runner.add_calls(
            [
                fixture_cib.load_cib_call(CIB),
                fixture_cib.patch_cib_call(
                    "create", order_xml("order2", "B", "A", "INFINITY")
                ),
                # the status report after the write
                fixture_cib.load_cib_call(cib_after),
                fixture_cib.load_cib_call(cib_after),
            ]
        )
        declaration = ConstraintDeclaration("order2", "B", "A")
        self.assertEqual(
            self.apply((KIND_ORDER, declaration), (KIND_ORDER, declaration)),
            [
                ReconcileResultDto(KIND_ORDER, "order2", True),
                ReconcileResultDto(KIND_ORDER, "order2", False),
            ],
        )
        self.env.logger.info.assert_has_calls(
            [
                mock.call("%s '%s' %s", "order", "order2", "changed"),
                mock.call("%s '%s' %s", "order", "order2", "unchanged"),
            ]
        )

    def test_prefetch_shares_cib(self):
        self.env = create_env(
            self.runner,
            options=fast_options(prefetch=True),
            report_processor=self.reporter,
        )
        self.runner.add_calls([fixture_cib.load_cib_call(CIB)])
        self.assertEqual(
            self.apply(
                (KIND_ORDER, ConstraintDeclaration("order1", "A", "B")),
                (
                    KIND_COLOCATION,
                    ConstraintDeclaration("colocation1", score="100"),
                ),
                (
                    KIND_PROPERTY,
                    PropertyDeclaration("no-quorum-policy", "stop"),
                ),
            ),
            [
                ReconcileResultDto(KIND_ORDER, "order1", False),
                ReconcileResultDto(KIND_COLOCATION, "colocation1", False),
                ReconcileResultDto(KIND_PROPERTY, "no-quorum-policy", False),
            ],
        )

    def test_shadow_cib(self):
        env_vars_list = []

        def runner_factory(env_vars):
            env_vars_list.append(env_vars)
            return self.runner

        self.env = LibraryEnvironment(
            mock.MagicMock(logging.Logger),
            self.reporter,
            fast_options(),
            sleep=mock.Mock(),
            runner_factory=runner_factory,
        )
        self.runner.add_calls([fixture_cib.load_cib_call(CIB)])
        self.apply(
            (
                KIND_ORDER,
                ConstraintDeclaration("order1", "A", "B", cib="shadow1"),
            )
        )
        self.assertEqual(
            env_vars_list, [{"LC_ALL": "C", "CIB_shadow": "shadow1"}]
        )
