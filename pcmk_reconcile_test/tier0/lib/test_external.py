import logging
from subprocess import (
    DEVNULL,
    TimeoutExpired,
)
from unittest import (
    TestCase,
    mock,
)

import pcmk_reconcile.lib.external as lib
from pcmk_reconcile.common.reports import ReportItemSeverity as severity
from pcmk_reconcile.common.reports import codes as report_codes

from pcmk_reconcile_test.tools.assertions import (
    assert_raise_library_error,
    assert_report_item_list_equal,
)
from pcmk_reconcile_test.tools.custom_mock import MockLibraryReportProcessor


def _process_mock(stdout="", stderr="", returncode=0):
    mock_process = mock.MagicMock(
        spec_set=["communicate", "returncode", "kill"]
    )
    mock_process.communicate.return_value = (stdout, stderr)
    mock_process.returncode = returncode
    return mock_process


@mock.patch("subprocess.Popen", autospec=True)
class CommandRunnerTest(TestCase):
    def setUp(self):
        self.mock_logger = mock.MagicMock(logging.Logger)
        self.mock_reporter = MockLibraryReportProcessor()
        self.clock = mock.Mock(return_value=100.0)

    def assert_popen_called_with(self, mock_popen, args, kwargs):
        self.assertEqual(mock_popen.call_count, 1)
        real_args, real_kwargs = mock_popen.call_args
        filtered_kwargs = {
            name: value for name, value in real_kwargs.items() if name in kwargs
        }
        self.assertEqual(real_args, (args,))
        self.assertEqual(filtered_kwargs, kwargs)

    def test_basic(self, mock_popen):
        mock_process = _process_mock("expected stdout", "expected stderr", 123)
        mock_popen.return_value = mock_process

        runner = lib.CommandRunner(self.mock_logger, self.mock_reporter)
        real_stdout, real_stderr, real_retval = runner.run(["a_command"])

        self.assertEqual(real_stdout, "expected stdout")
        self.assertEqual(real_stderr, "expected stderr")
        self.assertEqual(real_retval, 123)
        mock_process.communicate.assert_called_once_with(None, timeout=None)
        self.assert_popen_called_with(
            mock_popen,
            ["a_command"],
            {
                "env": {},
                "stdin": DEVNULL,
            },
        )
        assert_report_item_list_equal(
            self.mock_reporter.report_item_list,
            [
                (
                    severity.DEBUG,
                    report_codes.RUN_EXTERNAL_PROCESS_STARTED,
                    {
                        "command": "a_command",
                        "stdin": None,
                        "environment": {},
                    },
                ),
                (
                    severity.DEBUG,
                    report_codes.RUN_EXTERNAL_PROCESS_FINISHED,
                    {
                        "command": "a_command",
                        "return_value": 123,
                        "stdout": "expected stdout",
                        "stderr": "expected stderr",
                    },
                ),
            ],
        )

    def test_env(self, mock_popen):
        mock_popen.return_value = _process_mock()
        global_env = {"a": "a", "b": "b"}
        runner = lib.CommandRunner(
            self.mock_logger, self.mock_reporter, global_env.copy()
        )

        runner.run(["a_command"], env_extend={"b": "B", "c": "{C}"})

        self.assertEqual(runner.env_vars, global_env)
        self.assert_popen_called_with(
            mock_popen,
            ["a_command"],
            {"env": {"a": "a", "b": "B", "c": "{C}"}},
        )

    def test_arguments_are_quoted_in_reports(self, mock_popen):
        mock_popen.return_value = _process_mock()
        runner = lib.CommandRunner(self.mock_logger, self.mock_reporter)

        runner.run(["a_command", "--xml-text", "<a b='c'/>"])

        self.assertEqual(
            self.mock_reporter.report_item_list[0].message.command,
            "a_command --xml-text '<a b='\"'\"'c'\"'\"'/>'",
        )

    def test_popen_error(self, mock_popen):
        mock_popen.side_effect = OSError(1, "some error")
        runner = lib.CommandRunner(self.mock_logger, self.mock_reporter)

        assert_raise_library_error(
            lambda: runner.run(["a_command"]),
            (
                severity.ERROR,
                report_codes.RUN_EXTERNAL_PROCESS_ERROR,
                {
                    "command": "a_command",
                    "reason": "some error",
                },
            ),
        )

    def test_no_time_limit_by_default(self, mock_popen):
        del mock_popen
        runner = lib.CommandRunner(
            self.mock_logger, self.mock_reporter, clock=self.clock
        )
        self.assertIsNone(runner.remaining_time())

    def test_nested_time_limit_does_not_extend_outer(self, mock_popen):
        del mock_popen
        runner = lib.CommandRunner(
            self.mock_logger, self.mock_reporter, clock=self.clock
        )
        with runner.time_limit(10):
            with runner.time_limit(50):
                self.assertEqual(runner.remaining_time(), 10)
            with runner.time_limit(3):
                self.assertEqual(runner.remaining_time(), 3)
            self.assertEqual(runner.remaining_time(), 10)
        self.assertIsNone(runner.remaining_time())

    def test_command_killed_on_timeout(self, mock_popen):
        mock_process = _process_mock()
        mock_process.communicate.side_effect = [
            TimeoutExpired("a_command", 5),
            ("", ""),
        ]
        mock_popen.return_value = mock_process
        runner = lib.CommandRunner(
            self.mock_logger, self.mock_reporter, clock=self.clock
        )

        with self.assertRaises(lib.CommandTimeoutError) as cm:
            with runner.time_limit(5):
                runner.run(["a_command"])

        mock_process.kill.assert_called_once_with()
        self.assertEqual(
            mock_process.communicate.call_args_list[0],
            mock.call(None, timeout=5),
        )
        assert_report_item_list_equal(
            cm.exception.args,
            [
                (
                    severity.ERROR,
                    report_codes.RUN_EXTERNAL_PROCESS_TIMEOUT,
                    {"command": "a_command", "timeout": 5},
                ),
            ],
        )

    def test_deadline_already_passed(self, mock_popen):
        self.clock.side_effect = [100.0, 200.0]
        runner = lib.CommandRunner(
            self.mock_logger, self.mock_reporter, clock=self.clock
        )

        with self.assertRaises(lib.CommandTimeoutError) as cm:
            with runner.time_limit(5):
                runner.run(["a_command"])

        mock_popen.assert_not_called()
        assert_report_item_list_equal(
            cm.exception.args,
            [
                (
                    severity.ERROR,
                    report_codes.RUN_EXTERNAL_PROCESS_TIMEOUT,
                    {"command": "a_command", "timeout": 0},
                ),
            ],
        )


@mock.patch("subprocess.Popen", autospec=True)
class DryRunCommandRunnerTest(TestCase):
    def test_command_is_not_run(self, mock_popen):
        reporter = MockLibraryReportProcessor()
        runner = lib.DryRunCommandRunner(
            mock.MagicMock(logging.Logger), reporter
        )

        self.assertEqual(
            runner.run(["cibadmin", "--delete", "--xml-text", "<a/>"]),
            ("", "", 0),
        )

        mock_popen.assert_not_called()
        assert_report_item_list_equal(
            reporter.report_item_list,
            [
                (
                    severity.DEBUG,
                    report_codes.RUN_EXTERNAL_PROCESS_DRY_RUN,
                    {"command": "cibadmin --delete --xml-text '<a/>'"},
                ),
            ],
        )
