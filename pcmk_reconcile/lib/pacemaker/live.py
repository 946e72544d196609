from shlex import quote as shell_quote
from typing import (
    Mapping,
    Optional,
)

from pcmk_reconcile import settings
from pcmk_reconcile.common import reports
from pcmk_reconcile.common.reports.item import ReportItem
from pcmk_reconcile.common.str_tools import join_multilines
from pcmk_reconcile.common.types import (
    PatchAction,
    StringSequence,
)
from pcmk_reconcile.lib.errors import LibraryError
from pcmk_reconcile.lib.external import CommandRunner

ATTRIBUTE_TYPE_CRM_CONFIG = "crm_config"
ATTRIBUTE_TYPE_RSC_DEFAULTS = "rsc_defaults"


class CommandFailedError(LibraryError):
    pass


def run_checked(
    runner: CommandRunner,
    args: StringSequence,
    env_extend: Optional[Mapping[str, str]] = None,
) -> str:
    """
    Run a command and return its stdout, raise CommandFailedError if the
    command exits with a non-zero code
    """
    stdout, stderr, retval = runner.run(args, env_extend=env_extend)
    if retval != 0:
        raise CommandFailedError(
            ReportItem.error(
                reports.messages.RunExternalProcessFailed(
                    " ".join([shell_quote(x) for x in args]),
                    retval,
                    join_multilines([stderr, stdout]),
                )
            )
        )
    return stdout


### cib


def get_cib_xml(runner: CommandRunner) -> str:
    return run_checked(runner, [settings.cibadmin_exec, "--query"])


def patch_cib(
    runner: CommandRunner,
    action: PatchAction,
    xml: str,
    scope: Optional[str] = None,
) -> str:
    cmd = [
        settings.cibadmin_exec,
        "--force",
        "--sync-call",
        f"--{PatchAction(action).value}",
    ]
    if scope:
        cmd.extend(["--scope", scope])
    cmd.extend(["--xml-text", xml])
    return run_checked(runner, cmd)


### attributes


def get_dc_version(runner: CommandRunner) -> Optional[str]:
    stdout = run_checked(
        runner,
        [
            settings.crm_attribute_exec,
            "-q",
            "--type",
            ATTRIBUTE_TYPE_CRM_CONFIG,
            "--query",
            "--name",
            "dc-version",
        ],
    )
    return stdout.strip() or None


def update_attribute(
    runner: CommandRunner, attribute_type: str, name: str, value: str
) -> None:
    run_checked(
        runner,
        [
            settings.crm_attribute_exec,
            "--type",
            attribute_type,
            "--name",
            name,
            "--update",
            value,
        ],
    )


def delete_attribute(
    runner: CommandRunner, attribute_type: str, name: str
) -> None:
    run_checked(
        runner,
        [
            settings.crm_attribute_exec,
            "--type",
            attribute_type,
            "--name",
            name,
            "--delete",
        ],
    )
