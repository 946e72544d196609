import difflib
import doctest

from lxml.doctestcompare import LXMLOutputChecker

from pcmk_reconcile.common import reports
from pcmk_reconcile.lib.errors import LibraryError

from pcmk_reconcile_test.tools.fixture import ReportItemFixture


def prepare_diff(first, second):
    """
    Return a string containing a diff of first and second
    """
    return "".join(
        difflib.Differ().compare(first.splitlines(1), second.splitlines(1))
    )


def ac(a, b):
    # pylint: disable=invalid-name
    """
    Compare the actual output 'a' and an expected output 'b', print diff b a
    """
    if a != b:
        raise AssertionError(
            "strings not equal:\n{0}".format(prepare_diff(b, a))
        )


def assert_xml_equal(expected_xml, got_xml, context_explanation=""):
    checker = LXMLOutputChecker()
    if not checker.check_output(expected_xml, got_xml, 0):
        raise AssertionError(
            "{context_explanation}{xml_diff}".format(
                context_explanation=(
                    ""
                    if not context_explanation
                    else "\n{0}\n".format(context_explanation)
                ),
                xml_diff=checker.output_difference(
                    doctest.Example("", expected_xml), got_xml, 0
                ),
            )
        )


SEVERITY_SHORTCUTS = {
    reports.ReportItemSeverity.INFO: "I",
    reports.ReportItemSeverity.WARNING: "W",
    reports.ReportItemSeverity.ERROR: "E",
    reports.ReportItemSeverity.DEBUG: "D",
}


def _format_report_item_info(info):
    return ", ".join(
        ["{0}:{1}".format(key, repr(value)) for key, value in info.items()]
    )


def _expected_report_item_format(report_item_expectation):
    return "{0} {1} {{{2}}}".format(
        SEVERITY_SHORTCUTS.get(
            report_item_expectation[0], report_item_expectation[0]
        ),
        report_item_expectation[1],
        _format_report_item_info(report_item_expectation[2]),
    )


def _format_report_item(report_item):
    return _expected_report_item_format(
        (
            report_item.severity.level,
            report_item.message.code,
            report_item.message.to_dto().payload,
        )
    )


def assert_report_item_list_equal(
    real_report_item_list, expected_report_info_list, hint=""
):
    remaining_expected_report_info_list = list(expected_report_info_list)
    for real_report_item in real_report_item_list:
        found_report_info = _find_report_info(
            remaining_expected_report_info_list, real_report_item
        )
        if found_report_info is None:
            if (
                real_report_item.severity.level
                == reports.ReportItemSeverity.DEBUG
            ):
                # ignore debug report items not specified as expected
                continue
            raise AssertionError(
                (
                    "\n  Unexpected real report given:\n    {0}"
                    "\n  all expected reports:\n    {1}"
                    "\n  all real reports:\n    {2}"
                ).format(
                    _format_report_item(real_report_item),
                    "\n    ".join(
                        map(
                            _expected_report_item_format,
                            expected_report_info_list,
                        )
                    ),
                    "\n    ".join(
                        map(_format_report_item, real_report_item_list)
                    ),
                )
            )
        remaining_expected_report_info_list.remove(found_report_info)
    if remaining_expected_report_info_list:
        raise AssertionError(
            "\nReport lists doesn't match{0}\n\nmissing:\n    {1}"
            "\n\nreal:\n    {2}".format(
                "\n{0}".format(hint) if hint else "",
                "\n    ".join(
                    map(
                        _expected_report_item_format,
                        remaining_expected_report_info_list,
                    )
                ),
                "\n    ".join(map(_format_report_item, real_report_item_list)),
            )
        )


def assert_raise_library_error(callable_obj, *report_info_list):
    try:
        callable_obj()
        raise AssertionError("LibraryError not raised")
    except LibraryError as e:
        assert_report_item_list_equal(e.args, list(report_info_list))


def _find_report_info(expected_report_info_list, real_report_item):
    for report_info in expected_report_info_list:
        if _report_item_equal(real_report_item, report_info):
            return report_info
    return None


def _report_item_equal(
    real_report_item: reports.ReportItem, report_item_info: ReportItemFixture
) -> bool:
    report_dto: reports.ReportItemDto = real_report_item.to_dto()
    return (
        report_dto.severity.level == report_item_info[0]
        and report_dto.message.code == report_item_info[1]
        and report_dto.message.payload == report_item_info[2]
    )
