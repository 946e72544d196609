from unittest import TestCase

from pcmk_reconcile import settings
from pcmk_reconcile.common.reports import ReportItemSeverity as severity
from pcmk_reconcile.common.reports import codes as report_codes
from pcmk_reconcile.common.types import PatchAction
from pcmk_reconcile.lib.pacemaker import live

from pcmk_reconcile_test.tools import fixture_cib
from pcmk_reconcile_test.tools.assertions import assert_report_item_list_equal
from pcmk_reconcile_test.tools.mock_runner import Runner


class RunChecked(TestCase):
    def test_stdout_returned(self):
        runner = Runner([fixture_cib.load_cib_call("<cib/>")])
        self.assertEqual(
            live.run_checked(runner, [settings.cibadmin_exec, "--query"]),
            "<cib/>",
        )
        runner.assert_everything_launched()

    def test_failure_raises(self):
        runner = Runner(
            [
                fixture_cib.load_cib_call(
                    "some output", returncode=2, stderr="some error"
                )
            ]
        )
        with self.assertRaises(live.CommandFailedError) as cm:
            live.get_cib_xml(runner)
        assert_report_item_list_equal(
            cm.exception.args,
            [
                (
                    severity.ERROR,
                    report_codes.RUN_EXTERNAL_PROCESS_FAILED,
                    {
                        "command": "/usr/sbin/cibadmin --query",
                        "return_value": 2,
                        "reason": "some error\nsome output",
                    },
                )
            ],
        )


class PatchCib(TestCase):
    def test_with_scope(self):
        xml = '<rsc_order id="order1"/>'
        runner = Runner(
            [fixture_cib.patch_cib_call("delete", xml, scope="constraints")]
        )
        live.patch_cib(runner, PatchAction.DELETE, xml, "constraints")
        runner.assert_everything_launched()

    def test_without_scope(self):
        xml = "<cib/>"
        runner = Runner([fixture_cib.patch_cib_call("modify", xml, scope=None)])
        live.patch_cib(runner, PatchAction.MODIFY, xml)
        runner.assert_everything_launched()


class GetDcVersion(TestCase):
    def test_version(self):
        runner = Runner([fixture_cib.dc_version_call("2.1.5")])
        self.assertEqual(live.get_dc_version(runner), "2.1.5")

    def test_empty(self):
        runner = Runner([fixture_cib.dc_version_call("")])
        self.assertIsNone(live.get_dc_version(runner))

    def test_failure(self):
        runner = Runner([fixture_cib.dc_version_call(returncode=1)])
        self.assertRaises(
            live.CommandFailedError, lambda: live.get_dc_version(runner)
        )


class Attributes(TestCase):
    def test_update(self):
        runner = Runner(
            [
                fixture_cib.update_attribute_call(
                    "rsc_defaults", "resource-stickiness", "100"
                )
            ]
        )
        live.update_attribute(
            runner,
            live.ATTRIBUTE_TYPE_RSC_DEFAULTS,
            "resource-stickiness",
            "100",
        )
        runner.assert_everything_launched()

    def test_delete(self):
        runner = Runner(
            [
                fixture_cib.delete_attribute_call(
                    "crm_config", "no-quorum-policy"
                )
            ]
        )
        live.delete_attribute(
            runner, live.ATTRIBUTE_TYPE_CRM_CONFIG, "no-quorum-policy"
        )
        runner.assert_everything_launched()
