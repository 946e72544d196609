import logging
from unittest import mock

from pcmk_reconcile.common.options import PacemakerOptions
from pcmk_reconcile.lib.env import LibraryEnvironment

from pcmk_reconcile_test.tools.custom_mock import MockLibraryReportProcessor


def fast_options(**kwargs):
    """
    Options with a few attempts and no sleeping between them
    """
    defaults = dict(retry_count=3, retry_step=0, retry_timeout=60)
    defaults.update(kwargs)
    return PacemakerOptions(**defaults)


def create_env(runner, options=None, report_processor=None, **kwargs):
    return LibraryEnvironment(
        mock.MagicMock(logging.Logger),
        (
            report_processor
            if report_processor is not None
            else MockLibraryReportProcessor()
        ),
        options if options is not None else fast_options(),
        sleep=mock.Mock(),
        runner_factory=lambda env_vars: runner,
        **kwargs,
    )
