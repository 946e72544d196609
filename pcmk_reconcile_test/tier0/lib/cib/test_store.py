import logging
import os
import tempfile
from unittest import (
    TestCase,
    mock,
)

from lxml import etree

from pcmk_reconcile.common.reports import ReportItemSeverity as severity
from pcmk_reconcile.common.reports import codes as report_codes
from pcmk_reconcile.lib.cib.store import (
    CibStore,
    CibUnavailableError,
)
from pcmk_reconcile.lib.errors import LibraryError
from pcmk_reconcile.lib.retry import Retry

from pcmk_reconcile_test.tools import fixture_cib
from pcmk_reconcile_test.tools.assertions import (
    assert_raise_library_error,
    assert_report_item_list_equal,
)
from pcmk_reconcile_test.tools.custom_mock import MockLibraryReportProcessor
from pcmk_reconcile_test.tools.misc import fast_options
from pcmk_reconcile_test.tools.mock_runner import Runner


class StoreMixin:
    def setUp(self):
        self.runner = Runner()
        self.mutation_runner = Runner()
        self.store = self.create_store()

    def tearDown(self):
        self.runner.assert_everything_launched()
        self.mutation_runner.assert_everything_launched()

    def create_store(self, cib_file=None):
        return CibStore(
            self.runner,
            self.mutation_runner,
            Retry(
                self.runner,
                MockLibraryReportProcessor(),
                mock.MagicMock(logging.Logger),
                fast_options(),
                sleep=mock.Mock(),
            ),
            cib_file=cib_file,
        )


class Fetch(StoreMixin, TestCase):
    def test_cib_is_cached(self):
        self.runner.add_calls([fixture_cib.load_cib_call(fixture_cib.cib())])
        self.assertFalse(self.store.is_fetched())
        cib = self.store.fetch()
        self.assertIs(self.store.fetch(), cib)
        self.assertTrue(self.store.is_fetched())
        self.assertEqual(self.store.generation, 0)

    def test_reset(self):
        self.runner.add_calls(
            [
                fixture_cib.load_cib_call(fixture_cib.cib()),
                fixture_cib.load_cib_call(fixture_cib.cib(dc_uuid="2")),
            ]
        )
        self.assertEqual(self.store.designated_controller(), "1")
        self.store.reset()
        # a cib has been loaded, the report can load it again
        self.assertTrue(self.store.is_fetched())
        self.assertEqual(self.store.generation, 1)
        self.assertEqual(self.store.designated_controller(), "2")

    def test_raw_cib(self):
        self.runner.add_calls([fixture_cib.load_cib_call("<cib/>")])
        self.assertEqual(self.store.raw_cib, "<cib/>")

    def test_no_data(self):
        self.runner.add_calls([fixture_cib.load_cib_call("  \n")])
        assert_raise_library_error(
            self.store.fetch,
            (
                severity.ERROR,
                report_codes.CIB_LOAD_ERROR,
                {"reason": "no data received"},
            ),
        )
        self.assertFalse(self.store.is_fetched())

    def test_command_failed(self):
        self.runner.add_calls(
            [fixture_cib.load_cib_call("", returncode=1, stderr="error")]
        )
        with self.assertRaises(CibUnavailableError) as cm:
            self.store.fetch()
        assert_report_item_list_equal(
            cm.exception.args,
            [
                (
                    severity.ERROR,
                    report_codes.CIB_LOAD_ERROR,
                    {
                        "reason": (
                            "Command execution has failed: "
                            "/usr/sbin/cibadmin --query (return value 1): "
                            "error"
                        )
                    },
                )
            ],
        )

    def test_bad_format(self):
        self.runner.add_calls([fixture_cib.load_cib_call("<cib>")])
        with self.assertRaises(CibUnavailableError) as cm:
            self.store.fetch()
        self.assertEqual(
            cm.exception.args[0].message.code,
            report_codes.CIB_LOAD_ERROR_BAD_FORMAT,
        )


class FetchFromFile(StoreMixin, TestCase):
    def test_read_file(self):
        with tempfile.NamedTemporaryFile("w", suffix=".xml") as cib_file:
            cib_file.write(fixture_cib.cib(dc_uuid="3"))
            cib_file.flush()
            store = self.create_store(cib_file.name)
            self.assertEqual(store.designated_controller(), "3")

    def test_missing_file(self):
        path = os.path.join(tempfile.gettempdir(), "pcmk-reconcile-missing")
        store = self.create_store(path)
        assert_raise_library_error(
            store.fetch,
            (
                severity.ERROR,
                report_codes.CIB_LOAD_ERROR,
                {"reason": f"No such file or directory: '{path}'"},
            ),
        )


class DesignatedController(StoreMixin, TestCase):
    def test_not_elected(self):
        self.runner.add_calls(
            [fixture_cib.load_cib_call(fixture_cib.cib(dc_uuid="NONE"))]
        )
        self.assertIsNone(self.store.designated_controller())

    def test_missing(self):
        self.runner.add_calls(
            [fixture_cib.load_cib_call(fixture_cib.cib(dc_uuid=None))]
        )
        self.assertIsNone(self.store.designated_controller())


class Patch(StoreMixin, TestCase):
    xml = '<rsc_order id="order1"/>'

    def test_create_with_element(self):
        self.mutation_runner.add_calls(
            [fixture_cib.patch_cib_call("create", self.xml)]
        )
        self.store.create(etree.fromstring(self.xml), "constraints")

    def test_modify_with_string(self):
        self.mutation_runner.add_calls(
            [fixture_cib.patch_cib_call("modify", self.xml)]
        )
        self.store.modify(self.xml, "constraints")

    def test_failed_patch_is_retried(self):
        self.mutation_runner.add_calls(
            [
                fixture_cib.patch_cib_call("delete", self.xml, returncode=1),
                fixture_cib.patch_cib_call("delete", self.xml),
            ]
        )
        self.store.delete(self.xml, "constraints")

    def test_patch_fails(self):
        self.mutation_runner.add_calls(
            [
                fixture_cib.patch_cib_call(
                    "delete", self.xml, returncode=1, stderr="error"
                )
            ]
            * 3
        )
        with self.assertRaises(LibraryError) as cm:
            self.store.delete(self.xml, "constraints")
        self.assertEqual(
            [item.message.code for item in cm.exception.args],
            [
                report_codes.RUN_EXTERNAL_PROCESS_FAILED,
                report_codes.RETRY_EXHAUSTED,
            ],
        )

    def test_patch_does_not_touch_cached_cib(self):
        self.runner.add_calls([fixture_cib.load_cib_call(fixture_cib.cib())])
        self.mutation_runner.add_calls(
            [fixture_cib.patch_cib_call("create", self.xml)]
        )
        cib = self.store.fetch()
        self.store.create(self.xml, "constraints")
        self.assertIs(self.store.fetch(), cib)
        self.assertEqual(self.store.generation, 0)
